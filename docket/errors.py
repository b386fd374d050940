"""
docket.errors
=============

Exception hierarchy for the compliance engine.

Single-item operations raise these; batch operations catch them per item
and record the message in their report's ``errors`` list.
"""

from __future__ import annotations


class DocketError(Exception):
    """Base class for every engine error."""


class NotFound(DocketError, KeyError):
    """Unknown compliance item, task, client or service id."""

    def __init__(self, kind: str, ident: str) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident} not found")

    def __str__(self) -> str:        # KeyError would quote the message
        return self.args[0]


class IllegalTransition(DocketError, ValueError):
    """Status change not allowed by the lifecycle rules."""


class StorageFailure(DocketError, RuntimeError):
    """The record store raised while reading or writing."""


class ValidationError(DocketError, ValueError):
    """Malformed create/update payload."""
