"""
Gemfile and Gemfile.lock reading — the dependency graph source.

Bundler has already resolved everything into the lock file; this module
only reads it. The Gemfile is scanned (not evaluated) for group
declarations so gems that live solely in excluded groups can be left out
of the graph, the same way ``bundle install`` would leave them out.

Lock file layout, for reference::

    GEM
      remote: https://rubygems.org/
      specs:
        pg (1.5.4)
        sqlite3 (1.7.0-x86_64-linux)
          mini_portile2 (~> 2.8.0)

    DEPENDENCIES
      pg
      sqlite3 (~> 1.4)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dockprep.core.errors import ConfigError
from dockprep.core.models.dependency import Dependency, DependencyGraph
from dockprep.core.models.policy import GroupSettings

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"

# Sections whose "specs:" list resolved gems
_SPEC_SECTIONS = {"GEM", "PATH", "GIT", "PLUGIN SOURCE"}

_SPEC_RE = re.compile(r"^    (?P<name>[^\s(]+) \((?P<version>[^)]+)\)\s*$")
_SPEC_DEP_RE = re.compile(r"^      (?P<name>[^\s(]+)")
_DEPENDENCY_RE = re.compile(r"^  (?P<name>[^\s(!]+)!?")

_GEM_LINE_RE = re.compile(r"""^\s*gem\s*\(?\s*["'](?P<name>[^"']+)["'](?P<rest>.*)$""")
_GROUP_BLOCK_RE = re.compile(r"^\s*group\s*\(?(?P<args>.*?)\)?\s+do\b")
_GEM_GROUP_OPT_RE = re.compile(
    r"""(?:\bgroups?\s*:|:groups?\s*=>)\s*(?P<value>\[[^\]]*\]|:\w+|["']\w+["'])"""
)
_NAME_RE = re.compile(r"""(?::(\w+)|["'](\w+)["'])""")
_BLOCK_OPEN_RE = re.compile(r"(?:\bdo\b\s*(?:\|[^|]*\|)?\s*(?:#.*)?$)|^\s*(?:if|unless|case|begin|while|until|def|class|module)\b")
_BLOCK_END_RE = re.compile(r"^\s*end\b")


@dataclass
class LockedSpec:
    """One ``name (version)`` entry from the lock file."""

    name: str
    version: str
    platform: str = ""
    dependencies: list[str] = field(default_factory=list)


@dataclass
class Lockfile:
    """Parsed Gemfile.lock contents."""

    specs: dict[str, LockedSpec] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)


@dataclass
class GemfileGroups:
    """Group information scanned from a Gemfile."""

    gem_groups: dict[str, set[str]] = field(default_factory=dict)
    declared: list[str] = field(default_factory=lambda: [DEFAULT_GROUP])

    def groups_for(self, name: str) -> set[str]:
        return self.gem_groups.get(name) or {DEFAULT_GROUP}


# ═══════════════════════════════════════════════════════════════════
#  Locating files
# ═══════════════════════════════════════════════════════════════════


def gemfile_path(root: Path, environ: Mapping[str, str] | None = None) -> Path:
    """The Gemfile in use, honouring ``BUNDLE_GEMFILE``."""
    override = (environ or {}).get("BUNDLE_GEMFILE")
    if override:
        return root / override
    gems_rb = root / "gems.rb"
    if gems_rb.is_file() and not (root / "Gemfile").is_file():
        return gems_rb
    return root / "Gemfile"


def lockfile_path(gemfile: Path) -> Path:
    """``Gemfile`` → ``Gemfile.lock``; ``gems.rb`` → ``gems.locked``."""
    if gemfile.name == "gems.rb":
        return gemfile.with_name("gems.locked")
    return gemfile.with_name(gemfile.name + ".lock")


# ═══════════════════════════════════════════════════════════════════
#  Parsing
# ═══════════════════════════════════════════════════════════════════


def parse_lockfile(text: str) -> Lockfile:
    """Parse Gemfile.lock text.

    Platform variants of the same gem (``nokogiri (1.15.5)`` and
    ``nokogiri (1.15.5-x86_64-linux)``) collapse to the first entry so
    names stay unique.
    """
    lock = Lockfile()
    section = ""
    in_specs = False
    current: LockedSpec | None = None

    for line in text.splitlines():
        if not line.strip():
            in_specs = False
            current = None
            continue

        if not line.startswith(" "):
            section = line.strip()
            in_specs = False
            current = None
            continue

        if section in _SPEC_SECTIONS:
            if line.strip() == "specs:":
                in_specs = True
                continue
            if not in_specs:
                continue

            m = _SPEC_RE.match(line)
            if m:
                version, _, platform = m.group("version").partition("-")
                name = m.group("name")
                if name in lock.specs:
                    current = None
                    continue
                current = LockedSpec(name=name, version=version, platform=platform)
                lock.specs[name] = current
                continue

            m = _SPEC_DEP_RE.match(line)
            if m and current is not None:
                current.dependencies.append(m.group("name"))

        elif section == "DEPENDENCIES":
            m = _DEPENDENCY_RE.match(line)
            if m:
                lock.dependencies.append(m.group("name"))

    return lock


def parse_gemfile_groups(text: str) -> GemfileGroups:
    """Scan a Gemfile for ``group ... do`` blocks and ``group:`` options.

    This is a line scanner, not a Ruby evaluator: groups built
    dynamically will not be seen. Anything unseen lands in ``default``.
    """
    result = GemfileGroups()
    declared: list[str] = [DEFAULT_GROUP]
    stack: list[list[str]] = []

    for raw in text.splitlines():
        line = _strip_comment(raw)
        if not line.strip():
            continue

        block = _GROUP_BLOCK_RE.match(line)
        if block:
            block_groups = _names(_strip_options(block.group("args")))
            stack.append(block_groups)
            _extend_unique(declared, block_groups)
            continue

        gem = _GEM_LINE_RE.match(line)
        if gem:
            groups: set[str] = set()
            for frame in stack:
                groups.update(frame)
            for opt in _GEM_GROUP_OPT_RE.finditer(gem.group("rest")):
                groups.update(_names(opt.group("value")))
            _extend_unique(declared, sorted(groups))
            if groups:
                result.gem_groups.setdefault(gem.group("name"), set()).update(groups)
            if _BLOCK_OPEN_RE.search(line):
                stack.append([])
            continue

        if _BLOCK_END_RE.match(line):
            if stack:
                stack.pop()
            continue

        if _BLOCK_OPEN_RE.search(line):
            stack.append([])

    result.declared = declared
    return result


def _strip_comment(line: str) -> str:
    """Cut a trailing ``# comment``; a ``#`` inside a quoted string stays."""
    quote = ""
    escaped = False
    for i, ch in enumerate(line):
        if escaped:
            escaped = False
        elif quote:
            if ch == "\\":
                escaped = True
            elif ch == quote:
                quote = ""
        elif ch in "\"'":
            quote = ch
        elif ch == "#":
            return line[:i]
    return line


def _strip_options(args: str) -> str:
    """Drop ``key: value`` options from group arguments."""
    return re.sub(r"\b\w+:\s*\S+", "", args)


def _names(fragment: str) -> list[str]:
    return [a or b for a, b in _NAME_RE.findall(fragment)]


def _extend_unique(target: list[str], items: Iterable[str]) -> None:
    for item in items:
        if item not in target:
            target.append(item)


# ═══════════════════════════════════════════════════════════════════
#  Graph
# ═══════════════════════════════════════════════════════════════════


def excluded_groups(settings: GroupSettings, declared: Iterable[str]) -> set[str]:
    """Groups Bundler would skip for the given settings."""
    if settings.only:
        return {g for g in declared if g not in settings.only}
    return set(settings.without_groups) - set(settings.with_groups)


def build_graph(
    lock: Lockfile,
    groups: GemfileGroups | None = None,
    excluded: Iterable[str] = (),
) -> DependencyGraph:
    """Resolve the locked gems reachable from the requested groups.

    A top-level dependency is requested unless every group it belongs to
    is excluded. Everything it depends on, transitively, is pulled in.
    Output follows lock file order, which Bundler keeps sorted.
    """
    groups = groups or GemfileGroups()
    excluded = set(excluded)

    roots = [
        name
        for name in lock.dependencies
        if not groups.groups_for(name) <= excluded
    ]

    reachable: set[str] = set()
    pending = list(roots)
    while pending:
        name = pending.pop()
        if name in reachable or name not in lock.specs:
            continue
        reachable.add(name)
        pending.extend(lock.specs[name].dependencies)

    return DependencyGraph(
        dependencies=[
            Dependency(name=spec.name, version=spec.version, platform=spec.platform)
            for spec in lock.specs.values()
            if spec.name in reachable
        ]
    )


def read_gemfile_groups(root: Path, environ: Mapping[str, str] | None = None) -> GemfileGroups:
    """Scan the app's Gemfile; an absent Gemfile declares only ``default``."""
    path = gemfile_path(root, environ)
    if not path.is_file():
        logger.debug("No Gemfile at %s", path)
        return GemfileGroups()
    return parse_gemfile_groups(path.read_text(encoding="utf-8"))


def read_dependency_graph(
    root: Path,
    settings: GroupSettings | None = None,
    environ: Mapping[str, str] | None = None,
) -> DependencyGraph:
    """Read the resolved graph for the app at ``root``.

    Raises:
        ConfigError: If the lock file is missing or unreadable.
    """
    gemfile = gemfile_path(root, environ)
    lock_path = lockfile_path(gemfile)
    if not lock_path.is_file():
        raise ConfigError(
            f"Missing {lock_path.name} in {root}. "
            "Run `bundle lock` and commit the lock file."
        )

    try:
        lock = parse_lockfile(lock_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {lock_path}: {e}") from e

    groups = read_gemfile_groups(root, environ)
    excluded = excluded_groups(settings or GroupSettings(), groups.declared)
    graph = build_graph(lock, groups, excluded)
    logger.info(
        "Read %d gems from %s (excluded groups: %s)",
        len(graph), lock_path.name, ", ".join(sorted(excluded)) or "none",
    )
    return graph
