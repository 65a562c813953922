"""
Domain models — Pydantic types for dockprep.

All models are re-exported here for convenient access:

    from dockprep.core.models import Action, Receipt, DependencyGraph, InstallationPolicy
"""

from dockprep.core.models.action import Action, Receipt
from dockprep.core.models.dependency import Dependency, DependencyGraph
from dockprep.core.models.policy import GroupSettings, InstallationPolicy
from dockprep.core.models.toolchain import LockfileKind, VersionSource

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # dependency.py
    "Dependency",
    "DependencyGraph",
    # policy.py
    "GroupSettings",
    "InstallationPolicy",
    # toolchain.py
    "LockfileKind",
    "VersionSource",
]
