"""dockprep — build-time helpers for containerized Rails applications."""

__version__ = "0.1.0"
