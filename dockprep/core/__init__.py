"""Core — models, configuration, the process runner and command services."""
