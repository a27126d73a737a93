"""Thread grouping and response metrics for email search results."""

__version__ = "0.1.0"
