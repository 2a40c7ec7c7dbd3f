import logging
import operator
from typing import Any, Mapping, Union

from .conditions import (
    Condition,
    CompositeCondition,
    SimpleCondition,
    condition_from_dict,
    string_to_condition,
)

logger = logging.getLogger(__name__)

_MISSING = object()

_ALLOWED_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda a, b: a in b,
    "contains": lambda a, b: b in a,
}


def evaluate_condition(condition: Union[Condition, Mapping[str, Any], str], context: Mapping[str, Any]) -> bool:
    """
    Evaluate a branch condition against the provided context.

    Legacy text is parsed first. Unknown fields, unsupported operators and
    type errors make the comparison False instead of raising.
    """
    if isinstance(condition, str):
        condition = string_to_condition(condition)
    elif isinstance(condition, Mapping):
        try:
            condition = condition_from_dict(condition)
        except ValueError:
            return False

    if isinstance(condition, CompositeCondition):
        results = (evaluate_condition(c, context) for c in condition.conditions or [])
        if condition.type == "AND":
            return bool(condition.conditions) and all(results)
        if condition.type == "OR":
            return any(results)
        return False

    if isinstance(condition, SimpleCondition):
        return _compare(condition, context)
    return False


def branch_outcome(condition: Union[Condition, Mapping[str, Any], str], context: Mapping[str, Any]) -> str:
    """Source handle ("true" / "false") a branch node routes to."""
    return "true" if evaluate_condition(condition, context) else "false"


def _compare(condition: SimpleCondition, context: Mapping[str, Any]) -> bool:
    op = _ALLOWED_OPERATORS.get(condition.operator)
    if op is None:
        logger.debug("Unsupported operator in condition: %r", condition.operator)
        return False

    left = _lookup(context, condition.left)
    if left is _MISSING:
        return False
    try:
        return bool(op(left, condition.right))
    except TypeError:
        return False


def _lookup(context: Mapping[str, Any], path: Any) -> Any:
    # dotted paths reach into nested mappings: "user.role"
    if not isinstance(path, str) or not path:
        return _MISSING
    if path in context:
        return context[path]
    value: Any = context
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value
