"""
Service-level errors. Routes translate these into HTTP responses.
"""


class InvalidInputError(ValueError):
    """Caller-correctable input problem; raised before any I/O."""


class UpstreamError(Exception):
    """A dependency (record store, SMS provider, file parser) failed."""
