"""Click commands, one module per build step."""
