"""
fd_discovery/errors.py
======================
Error taxonomy of a discovery run.

  SetupError   – the table could not be prepared.            fatal
  SchemaError  – the column list / row count is unavailable. fatal
  QueryError   – one validity test could not be evaluated.   per-candidate
"""


class DiscoveryError(Exception):
    """Base class for every error raised by fd_discovery."""


class SetupError(DiscoveryError):
    """The table could not be created or populated."""


class SchemaError(DiscoveryError):
    """The table does not exist or its schema cannot be read."""


class QueryError(DiscoveryError):
    """A single validity query failed (bad identifier, driver error, lost connection)."""
