"""Allow ``python -m dockprep``."""

from dockprep.main import cli

cli()
