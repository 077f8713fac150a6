from jsonlogic_rules.api.schemas.rule import (
    CanExecuteResponse,
    RequiredKeysResponse,
    RuleDataRequest,
    RuleEvaluateResponse,
    RuleRequest,
)

__all__ = [
    "CanExecuteResponse",
    "RequiredKeysResponse",
    "RuleDataRequest",
    "RuleEvaluateResponse",
    "RuleRequest",
]
