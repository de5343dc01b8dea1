"""Typed failures raised by the evaluation core and the weight-table store.

Percentile and grade lookups are total and never raise. Access decisions
never raise either: they deny instead.
"""

from __future__ import annotations


class EvaluationError(Exception):
    """Base class for every failure the engine surfaces to callers."""

    code = "evaluation_error"

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        payload = {"error": self.message, "code": self.code}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(EvaluationError):
    """A required answer is missing or a value violates its declared bounds."""

    code = "validation_error"


class NotFoundError(EvaluationError):
    """No active weight table exists for the requested gender."""

    code = "not_found"


class ConfigurationError(EvaluationError):
    """A weight configuration is malformed or missing expected category keys."""

    code = "configuration_error"
