"""Git-backed, Spring Cloud Config compatible configuration server."""

__version__ = "0.1.0"
