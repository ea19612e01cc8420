"""Pipeline-independent core of buildplane."""
