"""Command services — one module per build step."""
