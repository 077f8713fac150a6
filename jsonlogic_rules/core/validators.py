"""Payload size checks shared by the API request schemas.

These bound the shape of incoming rule and data values before any rule work
is attempted. They only measure; they never interpret operators.
"""

from typing import Any


def _children(value: Any) -> list[Any]:
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def validate_rule_depth(rule: Any, max_depth: int = 32) -> None:
    """
    Validate that a JSON value does not nest containers deeper than max_depth.

    A scalar has depth 0, `{}` has depth 1, `{"==": [1, 1]}` has depth 2.

    Args:
        rule: Rule (or data context) value
        max_depth: Maximum allowed container nesting

    Raises:
        ValueError: If the value nests deeper than max_depth
    """
    stack: list[tuple[Any, int]] = [(rule, 0)]
    while stack:
        node, depth = stack.pop()
        if not isinstance(node, (dict, list, tuple)):
            continue
        depth += 1
        if depth > max_depth:
            raise ValueError(f"Rule exceeds maximum depth of {max_depth}")
        stack.extend((child, depth) for child in _children(node))


def validate_rule_node_count(rule: Any, max_nodes: int = 5000) -> None:
    """
    Validate that a JSON value does not contain more than max_nodes values.

    Every value counts, containers and scalars alike. Counting stops as soon
    as the limit is crossed.

    Args:
        rule: Rule (or data context) value
        max_nodes: Maximum allowed number of values

    Raises:
        ValueError: If the value contains more than max_nodes values
    """
    count = 0
    stack: list[Any] = [rule]
    while stack:
        node = stack.pop()
        count += 1
        if count > max_nodes:
            raise ValueError(f"Rule exceeds maximum node count of {max_nodes}")
        stack.extend(_children(node))
