"""Exceptions raised to callers of the rendering core.

Untrusted input never raises: bad encodings, unknown references and tag soup
all degrade to safe output. Only caller misuse surfaces as an exception.
"""


class RenderError(RuntimeError):
    """Base exception raised for rendering failures caused by the caller."""


class BoardContextError(RenderError):
    """Raised when a post is rendered without a usable board context.

    A missing board indicates a configuration bug in the caller rather than
    bad user input, so it is reported instead of degraded.
    """
