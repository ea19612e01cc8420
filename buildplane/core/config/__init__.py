"""Configuration — build files and environment settings."""
