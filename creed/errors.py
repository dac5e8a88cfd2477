"""
creed.errors — Failure taxonomy shared by services and the API
================================================================

Services raise these; :mod:`creed.api.main` maps them to HTTP responses.
Nothing here is ever retried.
"""

from __future__ import annotations


class CreedError(Exception):
    """Base class for all domain failures."""


class AuthFailure(CreedError):
    """Credential mismatch or a failed credential lookup."""


class FetchFailure(CreedError):
    """A read against the club database failed."""


class WriteFailure(CreedError):
    """A create / update / delete against the club database failed.

    ``conflict`` is set when the write collided with an existing row
    (duplicate phone number, duplicate participant, …).
    """

    def __init__(self, message: str, *, conflict: bool = False) -> None:
        super().__init__(message)
        self.conflict = conflict
