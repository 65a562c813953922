"""
Node.js toolchain models — where the version comes from and which
package manager owns the lock file.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class VersionSource(BaseModel):
    """Where the Node.js version to install was found."""

    kind: Literal["file", "manifest"]
    path: str
    version: str = ""

    @property
    def is_file(self) -> bool:
        return self.kind == "file"


class LockfileKind(str, Enum):
    """Supported JS package managers, in detection priority order."""

    YARN = "yarn"
    NPM = "npm"
    PNPM = "pnpm"

    @property
    def filename(self) -> str:
        return _LOCKFILES[self]

    @property
    def install_command(self) -> list[str]:
        """Frozen install: fails instead of rewriting the lock file."""
        return list(_INSTALL_COMMANDS[self])

    @property
    def needs_corepack(self) -> bool:
        return self is not LockfileKind.NPM


_LOCKFILES = {
    LockfileKind.YARN: "yarn.lock",
    LockfileKind.NPM: "package-lock.json",
    LockfileKind.PNPM: "pnpm-lock.yaml",
}

_INSTALL_COMMANDS = {
    LockfileKind.YARN: ("yarn", "install", "--frozen-lockfile"),
    LockfileKind.NPM: ("npm", "ci"),
    LockfileKind.PNPM: ("pnpm", "install", "--frozen-lockfile"),
}
