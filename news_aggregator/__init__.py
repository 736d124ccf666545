"""RSS news aggregator for the advisory site's news section."""

__version__ = "1.0.0"
