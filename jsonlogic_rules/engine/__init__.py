"""
JSONLogic rule engine.

Key Components:
- analyzer: Extracts the data keys a rule references
- validator: Checks a data context supplies every required key
- evaluator: Evaluates a rule through the json-logic library

Design Principles:
- Purity: No component mutates its inputs or holds state
- Totality: Analysis and precondition checks never raise
- One failure type: Evaluation failures surface only as EvaluationError
"""

from jsonlogic_rules.engine.analyzer import get_required_keys
from jsonlogic_rules.engine.evaluator import evaluate, evaluate_rule
from jsonlogic_rules.engine.validator import can_execute_rule, get_missing_keys, has_key

__all__ = [
    "evaluate",
    "evaluate_rule",
    "get_required_keys",
    "can_execute_rule",
    "get_missing_keys",
    "has_key",
]
