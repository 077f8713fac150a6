"""
Dependency analysis for JSONLogic rules.

Finds every data key a rule reads through `var` references so callers can
check the data context before evaluating.
"""

from typing import Any

from jsonlogic_rules.domain.types import VAR_OPERATOR, DataKey, JsonLogicRule


def _var_path(var_value: Any) -> DataKey | None:
    """Key path named by the value of a `var` node, if it names one."""
    if isinstance(var_value, str):
        return var_value
    # {"var": ["key", default]}
    if isinstance(var_value, (list, tuple)) and var_value and isinstance(var_value[0], str):
        return var_value[0]
    # Numeric (positional) access and anything else reference no key
    return None


def get_required_keys(rule: JsonLogicRule) -> list[DataKey]:
    """
    Extract all data keys required by a JSONLogic rule.

    The rule is walked depth-first in pre-order. Every dict holding a `var` key
    contributes the path it names, and every value of every dict is then
    walked as well, so a `var` nested inside another node (including inside a
    `var` default value) is found too. Lists are walked left to right; other
    values contribute nothing.

    Never raises, whatever the input.

    Args:
        rule: The JSONLogic rule to analyze

    Returns:
        Unique key paths in the order they are first referenced

    Example:
        >>> get_required_keys({"and": [
        ...     {">": [{"var": "age"}, 18]},
        ...     {"==": [{"var": "status"}, "active"]},
        ... ]})
        ['age', 'status']
        >>> get_required_keys({">": [{"var": "user.profile.age"}, 18]})
        ['user.profile.age']
        >>> get_required_keys({"==": [1, 1]})
        []
    """
    # dict preserves insertion order, giving first-occurrence dedup
    keys: dict[DataKey, None] = {}

    # Explicit stack instead of recursion so deep rules never hit the
    # interpreter recursion limit. Children are pushed reversed to keep
    # left-to-right pre-order.
    stack: list[Any] = [rule]
    while stack:
        node = stack.pop()

        if isinstance(node, dict):
            if VAR_OPERATOR in node:
                path = _var_path(node[VAR_OPERATOR])
                if path is not None:
                    keys.setdefault(path, None)
            stack.extend(reversed(list(node.values())))

        elif isinstance(node, (list, tuple)):
            stack.extend(reversed(node))

    return list(keys)
