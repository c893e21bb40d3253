"""
Request errors.

Every expected failure is a GameError: a ValueError carrying a short
machine-readable code for the client and a human-readable message.
The server catches ValueError at the request boundary, so handlers
simply raise and never return partial results.
"""


class GameError(ValueError):

    def __init__(self, code, message=None):
        super().__init__(message or code.replace("_", " "))
        self.code = code


def error_code(exc):
    """Machine code for any ValueError raised by a handler."""
    return getattr(exc, "code", "invalid_request")
