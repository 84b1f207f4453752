"""GeoDashboard — location-gated, backend-declared widget dashboard."""

__version__ = "1.0.0"
