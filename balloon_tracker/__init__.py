"""WindBorne balloon positions over the last 24 hours, plus point wind lookups."""

__version__ = "0.1.0"
