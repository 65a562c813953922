"""
Dependency graph model — the resolved gem set of one application.

The graph is produced externally (Bundler resolving the Gemfile into
Gemfile.lock). dockprep only reads it and never resolves anything itself.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class Dependency(BaseModel):
    """One resolved gem."""

    name: str
    version: str = ""
    platform: str = ""   # e.g. "x86_64-linux" for precompiled native gems


class DependencyGraph(BaseModel):
    """An ordered set of resolved dependencies with unique names."""

    dependencies: list[Dependency] = Field(default_factory=list)

    @model_validator(mode="after")
    def _names_are_unique(self) -> DependencyGraph:
        seen: set[str] = set()
        for dep in self.dependencies:
            if dep.name in seen:
                raise ValueError(f"Duplicate dependency in graph: {dep.name}")
            seen.add(dep.name)
        return self

    @classmethod
    def from_names(cls, *names: str) -> DependencyGraph:
        """Build a graph from bare names (versions unknown)."""
        return cls(dependencies=[Dependency(name=n) for n in names])

    @property
    def names(self) -> list[str]:
        return [dep.name for dep in self.dependencies]

    def get(self, name: str) -> Dependency | None:
        """Look up a dependency by name."""
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None

    def __contains__(self, name: object) -> bool:
        return any(dep.name == name for dep in self.dependencies)

    def __len__(self) -> int:
        return len(self.dependencies)
