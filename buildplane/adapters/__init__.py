"""Adapters — bindings to external tools (git, signing hosts)."""
