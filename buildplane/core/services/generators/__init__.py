"""Generators — packaging inputs rendered from project metadata."""
