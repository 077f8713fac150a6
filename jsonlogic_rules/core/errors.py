"""
Domain-specific exceptions for the JSONLogic rules engine.

Rule analysis (required keys, precondition checks) never raises; only
actually attempted evaluation can fail. These exceptions are mapped to
HTTP status codes in the API layer.
"""

from typing import Any


class RulesEngineError(Exception):
    """Base exception for all rules engine domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class EvaluationError(RulesEngineError):
    """
    Raised when the JSONLogic engine rejects a rule/data combination.

    Examples:
    - Unrecognized operator
    - Argument type the operator cannot coerce
    - Wrong number of operator arguments

    A failing evaluation is permanent for that exact (rule, data) pair.

    HTTP Status: 422 Unprocessable Entity
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    EvaluationError: 422,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
