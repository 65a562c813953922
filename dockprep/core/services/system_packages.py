"""
System package mapping and installation — ``install-packages``.

Maps resolved gems to the Debian packages they need. Native extensions
need headers at build time (``libpq-dev``) and only the shared library or
client at run time (``postgresql-client``), so there are two tables. A
gem without a buildtime override uses its runtime packages in both.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from dockprep.core.engine.runner import ProcessRunner
from dockprep.core.models.dependency import DependencyGraph
from dockprep.core.models.policy import InstallationPolicy
from dockprep.core.services.cleanup import remove_paths

logger = logging.getLogger(__name__)


# ── Package tables ──────────────────────────────────────────────

ESSENTIAL_BUILDTIME_PACKAGES: tuple[str, ...] = (
    "build-essential",
    "pkg-config",
    "git",
    "python-is-python3",   # node-gyp shells out to `python`
    "curl",
)

GEM_RUNTIME_PACKAGES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "mysql2": ("default-mysql-client",),
    "pg": ("postgresql-client",),
    "ruby-vips": ("libvips",),
    "sqlite3": ("libsqlite3-0",),
})

_GEM_BUILDTIME_OVERRIDES: dict[str, tuple[str, ...]] = {
    "mysql2": ("default-libmysqlclient-dev",),
    "pg": ("libpq-dev",),
    "sqlite3": ("libsqlite3-dev",),
}

GEM_BUILDTIME_PACKAGES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {**GEM_RUNTIME_PACKAGES, **_GEM_BUILDTIME_OVERRIDES}
)

APT_CACHE_DIRS: tuple[str, ...] = ("/var/cache/apt", "/var/lib/apt")


# ═══════════════════════════════════════════════════════════════════
#  Mapping
# ═══════════════════════════════════════════════════════════════════


def lookup_packages(
    graph: DependencyGraph,
    table: Mapping[str, tuple[str, ...]],
) -> list[str]:
    """Packages for every gem in ``graph`` that ``table`` knows.

    Iterates the table in sorted key order, so the result does not
    depend on the order the lock file happened to list gems in.
    """
    packages: list[str] = []
    for name in sorted(table):
        if name in graph:
            packages.extend(table[name])
    return packages


def compute_packages(
    graph: DependencyGraph,
    policy: InstallationPolicy,
    extra: Iterable[str] = (),
) -> list[str]:
    """The OS packages to install for ``graph`` under ``policy``.

    Order: ``extra`` as given, essential build tools, gem buildtime
    packages, gem runtime packages. Duplicates are kept; apt ignores
    them.
    """
    packages = list(extra)
    if policy.buildtime:
        packages.extend(ESSENTIAL_BUILDTIME_PACKAGES)
    if policy.gem_buildtime:
        packages.extend(lookup_packages(graph, GEM_BUILDTIME_PACKAGES))
    if policy.gem_runtime:
        packages.extend(lookup_packages(graph, GEM_RUNTIME_PACKAGES))
    return packages


def needs_graph(policy: InstallationPolicy) -> bool:
    """Whether computing packages for ``policy`` requires reading gems."""
    return policy.gem_buildtime or policy.gem_runtime


# ═══════════════════════════════════════════════════════════════════
#  Install
# ═══════════════════════════════════════════════════════════════════


def install_packages(
    runner: ProcessRunner,
    packages: list[str],
    clean: bool = False,
    cache_dirs: Iterable[str] = APT_CACHE_DIRS,
) -> bool:
    """Install ``packages`` with apt; returns whether apt was invoked.

    An empty list skips apt entirely, including ``apt-get update``.
    """
    installed = False
    if packages:
        runner.run("apt-get update -qq")
        runner.run("apt-get install --no-install-recommends --yes", *packages)
        installed = True
    else:
        logger.info("No packages to install")

    if clean:
        remove_paths(runner, cache_dirs)
    return installed
