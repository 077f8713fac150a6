from __future__ import annotations

import logging

from fastapi import APIRouter

from jsonlogic_rules.api.schemas.rule import (
    CanExecuteResponse,
    RequiredKeysResponse,
    RuleDataRequest,
    RuleEvaluateResponse,
    RuleRequest,
)
from jsonlogic_rules.core.observability import metrics
from jsonlogic_rules.engine import evaluate_rule, get_missing_keys, get_required_keys

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rules", tags=["rules"])


@router.post("/evaluate", response_model=RuleEvaluateResponse)
def post_evaluate(payload: RuleDataRequest) -> RuleEvaluateResponse:
    """
    Evaluate a rule against a data context.

    Engine failures are raised as EvaluationError and returned as 422.
    """
    return RuleEvaluateResponse(result=evaluate_rule(payload.rule, payload.data))


@router.post("/required-keys", response_model=RequiredKeysResponse)
def post_required_keys(payload: RuleRequest) -> RequiredKeysResponse:
    """List the data keys a rule references, in first-use order."""
    return RequiredKeysResponse(required_keys=get_required_keys(payload.rule))


@router.post("/can-execute", response_model=CanExecuteResponse)
def post_can_execute(payload: RuleDataRequest) -> CanExecuteResponse:
    """
    Check whether the data context supplies every key the rule references.

    Also reports which keys are missing, so callers can tell why a rule
    cannot run.
    """
    required_keys = get_required_keys(payload.rule)
    missing_keys = get_missing_keys(payload.rule, payload.data)
    can_execute = not missing_keys

    metrics.rule_precondition_checks_total.labels(
        result="executable" if can_execute else "missing_keys"
    ).inc()
    if not can_execute:
        logger.info(
            "Rule precondition check failed",
            extra={"missing_keys": missing_keys},
        )

    return CanExecuteResponse(
        can_execute=can_execute,
        required_keys=required_keys,
        missing_keys=missing_keys,
    )
