from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from jsonlogic_rules.core.config import settings
from jsonlogic_rules.core.validators import validate_rule_depth, validate_rule_node_count


def _validate_payload_size(v: Any) -> Any:
    """Bound nesting depth and node count of a rule or data payload."""
    validate_rule_depth(v, max_depth=settings.rule_max_depth)
    validate_rule_node_count(v, max_nodes=settings.rule_max_nodes)
    return v


class RuleRequest(BaseModel):
    rule: Any = Field(description="JSONLogic rule; any JSON value")

    @field_validator("rule")
    @classmethod
    def validate_rule(cls, v: Any) -> Any:
        return _validate_payload_size(v)


class RuleDataRequest(RuleRequest):
    data: Any = Field(default=None, description="Data context; omitted or null means {}")

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: Any) -> Any:
        return _validate_payload_size(v)


class RuleEvaluateResponse(BaseModel):
    result: Any


class RequiredKeysResponse(BaseModel):
    required_keys: list[str]


class CanExecuteResponse(BaseModel):
    can_execute: bool
    required_keys: list[str]
    missing_keys: list[str]
