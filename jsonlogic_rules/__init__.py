"""
JSONLogic rules engine.

Evaluate JSONLogic rules against data, find the data keys a rule depends on,
and check whether a data context supplies all of them before evaluating.
"""

from jsonlogic_rules.core.errors import EvaluationError, RulesEngineError
from jsonlogic_rules.domain.types import DataKey, JsonData, JsonLogicRule
from jsonlogic_rules.engine import (
    can_execute_rule,
    evaluate,
    evaluate_rule,
    get_missing_keys,
    get_required_keys,
    has_key,
)

__all__ = [
    "EvaluationError",
    "RulesEngineError",
    "DataKey",
    "JsonData",
    "JsonLogicRule",
    "can_execute_rule",
    "evaluate",
    "evaluate_rule",
    "get_missing_keys",
    "get_required_keys",
    "has_key",
]
