"""Exceptions raised while resolving redirects."""
from __future__ import annotations


class RedirectError(Exception):
    """Base class for redirect resolution failures."""


class MalformedEdgeError(RedirectError, ValueError):
    """A redirect edge with an empty source or target; dropped where it is found."""


class RedirectIndexUnavailableError(RedirectError, RuntimeError):
    """The shared redirect index could not be built, so nothing can be resolved."""


class RedirectResolutionError(RedirectError, RuntimeError):
    """A partition kept failing against a valid index."""

    def __init__(self, partition: int, message: str):
        super().__init__(f"Partition {partition}: {message}")
        self.partition = partition
