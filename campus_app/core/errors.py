"""Exception types raised by the triage engine and its collaborators."""

from __future__ import annotations


class CampusAppError(Exception):
    """Base class for application errors."""


class ValidationError(CampusAppError):
    """Submission or action input rejected before any store write."""


class AuthorizationError(CampusAppError):
    """Caller is not signed in or lacks the required role."""


class InvalidTransitionError(CampusAppError):
    """Lifecycle action requested that is not available for the issue's state."""


class StoreError(CampusAppError):
    """Document store call failed."""


class NarrationError(CampusAppError):
    """Narrative report function failed.

    ``code`` is one of ``unauthenticated``, ``invalid-argument``,
    ``failed-precondition`` or ``internal``.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"
