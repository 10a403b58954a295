"""Polaris API client library and command-line front end."""

__version__ = "0.3.0"
