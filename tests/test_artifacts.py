"""
Tests for relocating build outputs into the artifacts tree.
"""

from pathlib import Path

import pytest

from dockprep.core.errors import ArtifactError
from dockprep.core.services.artifacts import artifact_target, transmute_to_artifacts


class TestArtifactTarget:
    def test_mirrors_absolute_path(self):
        assert artifact_target(Path("/usr/local/bundle"), Path("/artifacts")) == Path(
            "/artifacts/usr/local/bundle"
        )


class TestTransmuteToArtifacts:
    def test_directory_moved_and_linked(self, tmp_path: Path):
        bundle = tmp_path / "usr" / "local" / "bundle"
        (bundle / "gems").mkdir(parents=True)
        (bundle / "gems" / "rack.rb").write_text("ok")
        artifacts = tmp_path / "artifacts"

        done = transmute_to_artifacts([bundle], artifacts_dir=artifacts)

        target = artifacts / bundle.relative_to("/")
        assert done[0].source == bundle
        assert done[0].target == target
        assert bundle.is_symlink()
        assert Path(bundle.readlink()) == target
        assert (target / "gems" / "rack.rb").read_text() == "ok"
        assert (bundle / "gems" / "rack.rb").read_text() == "ok"

    def test_relative_paths_use_cwd(self, tmp_path: Path):
        app = tmp_path / "app"
        (app / "public" / "assets").mkdir(parents=True)
        artifacts = tmp_path / "artifacts"

        done = transmute_to_artifacts(["public/assets"], artifacts_dir=artifacts, cwd=app)

        assert done[0].source == app / "public" / "assets"
        assert (app / "public" / "assets").is_symlink()

    def test_file(self, tmp_path: Path):
        key = tmp_path / "master.key"
        key.write_text("secret")
        artifacts = tmp_path / "artifacts"

        transmute_to_artifacts([key], artifacts_dir=artifacts)

        assert key.is_symlink()
        assert key.read_text() == "secret"

    def test_missing_source(self, tmp_path: Path):
        with pytest.raises(ArtifactError, match="no such file"):
            transmute_to_artifacts([tmp_path / "nope"], artifacts_dir=tmp_path / "artifacts")

    def test_stops_at_first_failure(self, tmp_path: Path):
        first = tmp_path / "first"
        first.mkdir()
        artifacts = tmp_path / "artifacts"

        with pytest.raises(ArtifactError):
            transmute_to_artifacts([first, tmp_path / "missing"], artifacts_dir=artifacts)

        assert first.is_symlink()

    def test_dry_run(self, tmp_path: Path):
        src = tmp_path / "node_modules"
        src.mkdir()
        lines: list[str] = []

        done = transmute_to_artifacts(
            [src], artifacts_dir=tmp_path / "artifacts", dry_run=True, echo=lines.append
        )

        assert done == []
        assert src.is_dir() and not src.is_symlink()
        assert lines == [f"mv {src} {tmp_path / 'artifacts' / src.relative_to('/')} && ln -s "
                         f"{tmp_path / 'artifacts' / src.relative_to('/')} {src}"]

    def test_empty(self, tmp_path: Path):
        assert transmute_to_artifacts([], artifacts_dir=tmp_path / "artifacts") == []
