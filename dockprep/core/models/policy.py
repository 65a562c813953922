"""
Installation policy and group settings.

Both are plain inputs: built once per command from CLI flags or the
Bundler settings store and never mutated afterwards.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class InstallationPolicy(BaseModel):
    """Which classes of OS packages ``install-packages`` should add."""

    model_config = ConfigDict(frozen=True)

    buildtime: bool = False       # compiler toolchain and friends
    gem_buildtime: bool = False   # -dev headers for native gem extensions
    gem_runtime: bool = False     # shared libraries / clients gems link against
    clean: bool = False           # drop apt caches afterwards


class GroupSettings(BaseModel):
    """Bundler group selection as persisted in the settings store.

    ``only`` is the newer, positive form. Older Bundler releases understand
    only ``with``/``without``, so ``only`` is translated before install.
    """

    model_config = ConfigDict(frozen=True)

    with_groups: list[str] = Field(default_factory=list)
    without_groups: list[str] = Field(default_factory=list)
    only: list[str] = Field(default_factory=list)
