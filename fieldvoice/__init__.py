"""Voice-driven command pipeline for hands-busy field data collection."""

__version__ = "0.1.0"
