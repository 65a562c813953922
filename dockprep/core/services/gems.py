"""
Gem installation — ``install-gems``.

Bundler 2.4 added ``BUNDLE_ONLY``. Older Bundlers ignore it, so before
installing, an ``only`` selection is rewritten into the equivalent
``with``/``without`` pair and persisted to the local config. The install
itself always runs frozen: a lock file that does not match the Gemfile
fails the build instead of being rewritten inside the image.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from dockprep.core.config.bundler_settings import BundlerSettings
from dockprep.core.engine.runner import ProcessRunner
from dockprep.core.models.policy import GroupSettings
from dockprep.core.services.cleanup import remove_paths
from dockprep.core.services.gemfile import read_gemfile_groups

logger = logging.getLogger(__name__)

FROZEN_ENV = {"BUNDLE_FROZEN": "1"}


def reconcile(
    current_with: Iterable[str],
    current_without: Iterable[str],
    declared_groups: Iterable[str],
    only: Iterable[str],
) -> tuple[list[str], list[str]]:
    """Fold an ``only`` selection into ``with``/``without``.

    With an empty ``only`` both lists come back unchanged. Otherwise every
    declared group outside ``only`` is added to ``without`` and ``with``
    is narrowed to groups inside ``only``. Existing order is kept and new
    exclusions are appended in declaration order, without duplicates.

    Lists that already overlap are not repaired: a group present in
    ``with``, ``without`` and ``only`` stays in both results.

    >>> reconcile(["dev"], [], ["default", "dev", "test"], ["default"])
    ([], ['dev', 'test'])
    """
    with_groups = list(current_with)
    without_groups = list(current_without)
    only = list(only)

    if not only:
        return with_groups, without_groups

    new_without: list[str] = []
    for group in [*without_groups, *declared_groups]:
        if group in only and group not in without_groups:
            continue
        if group not in new_without:
            new_without.append(group)

    new_with = [g for g in with_groups if g in only]
    return new_with, new_without


def reconcile_settings(settings: GroupSettings, declared_groups: Iterable[str]) -> GroupSettings:
    """``reconcile`` over a ``GroupSettings``; the result has no ``only``."""
    new_with, new_without = reconcile(
        settings.with_groups,
        settings.without_groups,
        declared_groups,
        settings.only,
    )
    return GroupSettings(with_groups=new_with, without_groups=new_without)


def write_group_settings(runner: ProcessRunner, settings: GroupSettings) -> None:
    """Persist ``without`` then ``with`` to the app's local Bundler config."""
    for key, values in (("without", settings.without_groups), ("with", settings.with_groups)):
        runner.run("bundle", "config", "set", "--local", key, ":".join(values))


def bundle_path(runner: ProcessRunner) -> Path | None:
    """Where Bundler installs gems, as Bundler itself reports it."""
    output = runner.capture("ruby", "-rbundler", "-e", "puts Bundler.bundle_path")
    output = output.strip()
    return Path(output) if output else None


def install_gems(
    runner: ProcessRunner,
    clean: bool = False,
) -> GroupSettings:
    """Reconcile group settings, then ``bundle install`` frozen.

    Returns the settings that were written.
    """
    store = BundlerSettings(runner.root, environ=runner.env)
    current = store.group_settings()
    declared = read_gemfile_groups(runner.root, runner.env).declared

    settings = reconcile_settings(current, declared)
    if current.only:
        logger.info(
            "Translated only=%s into with=%s without=%s",
            ":".join(current.only),
            ":".join(settings.with_groups),
            ":".join(settings.without_groups),
        )

    write_group_settings(runner, settings)
    # local config outranks BUNDLE_FROZEN in the environment
    runner.run("bundle config set --local frozen true")
    runner.run("bundle install", env=FROZEN_ENV)

    if clean:
        path = bundle_path(runner)
        if path is not None:
            remove_paths(runner, [path / "cache"])
    return settings
