"""carto_initpose: restart Cartographer localization at an RViz 2D pose estimate."""

__version__ = "0.1.0"
