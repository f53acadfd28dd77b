"""Account management service: validation rules, persistence and HTTP API."""

__version__ = "0.1.0"
