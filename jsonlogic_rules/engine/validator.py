"""
Precondition checks: does a data context supply every key a rule needs?

A key counts as present when its path exists, even if the value stored there
is None. Only a missing path makes a rule non-executable.
"""

import logging
from typing import Any

from jsonlogic_rules.domain.types import KEY_PATH_SEPARATOR, DataKey, JsonData, JsonLogicRule
from jsonlogic_rules.engine.analyzer import get_required_keys

logger = logging.getLogger(__name__)


def _list_index(container: list | tuple, segment: str) -> int | None:
    # Lists hold their indices as canonical decimal strings ("0", not "00")
    if not (segment.isascii() and segment.isdigit()):
        return None
    if len(segment) > 1 and segment.startswith("0"):
        return None
    if len(segment) > len(str(len(container))):
        return None
    index = int(segment)
    return index if index < len(container) else None


def _holds(container: Any, segment: str) -> bool:
    if isinstance(container, dict):
        return segment in container
    if isinstance(container, (list, tuple)):
        return _list_index(container, segment) is not None
    return False


def has_key(data: JsonData, key_path: DataKey) -> bool:
    """
    Check whether a dotted key path exists in a data value.

    Args:
        data: The data to search (normally a dict; any value is accepted)
        key_path: Dotted path, e.g. "user.profile.age"

    Returns:
        True if every segment resolves, False as soon as one does not
    """
    current = data
    for segment in key_path.split(KEY_PATH_SEPARATOR):
        if not _holds(current, segment):
            return False
        if isinstance(current, dict):
            current = current[segment]
        else:
            current = current[_list_index(current, segment)]
    return True


def get_missing_keys(rule: JsonLogicRule, data: JsonData) -> list[DataKey]:
    """
    List the keys a rule requires that the data does not provide.

    Args:
        rule: The JSONLogic rule to check
        data: The data to check against

    Returns:
        Missing key paths, in the order get_required_keys reports them
    """
    return [key for key in get_required_keys(rule) if not has_key(data, key)]


def can_execute_rule(rule: JsonLogicRule, data: JsonData) -> bool:
    """
    Check if a rule can be executed with the provided data.

    The rule's required keys are extracted and each one is looked up in the
    data, stopping at the first missing key. A rule that references no keys
    is always executable, whatever the data is.

    Args:
        rule: The JSONLogic rule to validate
        data: The data to check against

    Returns:
        True if all required keys exist in data, False otherwise

    Example:
        >>> can_execute_rule({">": [{"var": "age"}, 18]}, {"age": 25})
        True
        >>> can_execute_rule({">": [{"var": "age"}, 18]}, {"name": "Alice"})
        False
        >>> can_execute_rule({"==": [{"var": "value"}, None]}, {"value": None})
        True
        >>> can_execute_rule({"==": [1, 1]}, None)
        True
    """
    for key in get_required_keys(rule):
        if not has_key(data, key):
            logger.debug("Rule cannot execute: missing key '%s'", key)
            return False
    return True
