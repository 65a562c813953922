"""Configuration — application manifest and Bundler settings."""
