"""
Shared type aliases for rules, data contexts and key paths.

Rules and data contexts are plain parsed JSON values (dict, list, str, int,
float, bool, None). Nothing here validates shape; the aliases document intent
at function signatures.
"""

from typing import Any, TypeAlias

# A JSONLogic expression: a literal, a list of rules, {"var": path | [path, default]},
# or {"<operator>": args}. Any JSON value is accepted.
JsonLogicRule: TypeAlias = Any

# The data a rule is evaluated or checked against, normally a dict.
JsonData: TypeAlias = Any

# Dot-separated location inside a data context, e.g. "user.profile.age".
# Dots are always separators; there is no escaping.
DataKey: TypeAlias = str

VAR_OPERATOR = "var"
KEY_PATH_SEPARATOR = "."
