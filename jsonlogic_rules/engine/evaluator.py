"""
Rule evaluation.

A thin wrapper around the `json-logic` library that gives evaluation a single
failure type and records evaluation metrics.
"""

import logging
import time
from typing import Any

from json_logic import jsonLogic

from jsonlogic_rules.core.errors import EvaluationError
from jsonlogic_rules.core.observability import metrics
from jsonlogic_rules.domain.types import JsonData, JsonLogicRule

logger = logging.getLogger(__name__)


def _root_operator(rule: JsonLogicRule) -> str | None:
    if isinstance(rule, dict) and rule:
        return next(iter(rule))
    return None


def evaluate_rule(rule: JsonLogicRule, data: JsonData = None) -> Any:
    """
    Evaluate a JSONLogic rule against provided data.

    Args:
        rule: The JSONLogic rule to evaluate
        data: The data context to evaluate against; None means `{}`

    Returns:
        The rule's result. Usually a bool, but arithmetic and some other
        operators yield numbers, strings, lists or objects.

    Raises:
        EvaluationError: If the engine rejects the rule/data combination
            (unknown operator, uncoercible argument, ...)

    Example:
        >>> evaluate_rule({"==": [1, 1]})
        True
        >>> evaluate_rule({">": [{"var": "age"}, 18]}, {"age": 25})
        True
        >>> evaluate_rule({"+": [{"var": "a"}, 2]}, {"a": 3})
        5
    """
    start_time = time.perf_counter()
    try:
        result = jsonLogic(rule, {} if data is None else data)
    except Exception as exc:
        metrics.rule_evaluations_total.labels(status="error").inc()
        reason = str(exc) or "Unknown error"
        operator = _root_operator(rule)
        logger.warning(
            f"Rule evaluation failed: {reason}",
            extra={"operator": operator, "cause": type(exc).__name__},
        )
        raise EvaluationError(
            f"Failed to evaluate rule: {reason}",
            details={"operator": operator, "cause": type(exc).__name__},
        ) from exc

    metrics.rule_evaluations_total.labels(status="success").inc()
    metrics.rule_evaluation_duration_seconds.observe(time.perf_counter() - start_time)
    return result


# Short name for callers that think of this as the rules engine's "evaluate"
evaluate = evaluate_rule
