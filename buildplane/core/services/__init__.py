"""Core services — naming, pipelines, generated packaging files."""
