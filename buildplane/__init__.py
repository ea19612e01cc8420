"""Build Plane — source resolution and platform packaging pipelines."""

__version__ = "0.1.0"
