"""Command-line tools for carto_initpose."""
