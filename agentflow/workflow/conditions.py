"""
Condition model for branch nodes.

A condition is either a simple comparison (``left operator right``) or an
AND/OR composite of further conditions, nested to any depth:

    SimpleCondition(">", "score", 70)
    CompositeCondition("AND", [SimpleCondition("==", "a", 1), ...])

The editor also stores the legacy text shorthand ``"score > 70"``. Parsing that
text is lenient (bad input falls back to a default condition) while
``validate_condition`` is strict and rejects the text form outright.
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

logger = logging.getLogger(__name__)

SIMPLE_OPERATORS = ("==", "!=", ">", ">=", "<", "<=", "in", "contains")
COMPOSITE_TYPES = ("AND", "OR")

# The condition editor refuses to nest groups deeper than this. Validation
# does not enforce it.
MAX_EDITOR_DEPTH = 3

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


class ConditionValidationError(ValueError):
    """Raised by ``validate_condition`` for the first problem found."""


@dataclass
class SimpleCondition:
    operator: str
    left: str
    right: Any
    kind: str = field(default="simple", init=False)


@dataclass
class CompositeCondition:
    type: str
    conditions: List["Condition"] = field(default_factory=list)
    kind: str = field(default="composite", init=False)


Condition = Union[SimpleCondition, CompositeCondition]


def fallback_condition() -> SimpleCondition:
    """The condition used when legacy text cannot be parsed."""
    return SimpleCondition(">", "score", 0)


FALLBACK_CONDITION = fallback_condition()


# -------------------------
# SHAPE DISCRIMINATION
# -------------------------

def is_simple_condition(value: Any) -> bool:
    if isinstance(value, SimpleCondition):
        return True
    if isinstance(value, Mapping):
        if "kind" in value:
            return value["kind"] == "simple"
        return all(key in value for key in ("operator", "left", "right"))
    return False


def is_composite_condition(value: Any) -> bool:
    if isinstance(value, CompositeCondition):
        return True
    if isinstance(value, Mapping):
        if "kind" in value:
            return value["kind"] == "composite"
        return "type" in value and "conditions" in value
    return False


def condition_from_dict(raw: Mapping[str, Any]) -> Condition:
    """
    Build the tagged form of a raw condition mapping, recursively.

    Values that are already ``SimpleCondition``/``CompositeCondition`` are
    returned as-is. Children that are not mappings (e.g. legacy strings) are
    kept untouched so ``validate_condition`` can report them.
    """
    if isinstance(raw, (SimpleCondition, CompositeCondition)):
        return raw
    if is_simple_condition(raw):
        return SimpleCondition(raw.get("operator"), raw.get("left"), raw.get("right"))
    if is_composite_condition(raw):
        children = raw.get("conditions")
        if isinstance(children, list):
            children = [
                condition_from_dict(child) if isinstance(child, Mapping) else child
                for child in children
            ]
        return CompositeCondition(raw.get("type"), children)
    raise ConditionValidationError("Invalid condition format")


def condition_to_dict(condition: Condition) -> Dict[str, Any]:
    """Plain-dict form of a structured condition (JSON/YAML friendly)."""
    if isinstance(condition, SimpleCondition):
        return {
            "kind": "simple",
            "operator": condition.operator,
            "left": condition.left,
            "right": condition.right,
        }
    if isinstance(condition, CompositeCondition):
        return {
            "kind": "composite",
            "type": condition.type,
            "conditions": [condition_to_dict(c) for c in condition.conditions],
        }
    if isinstance(condition, Mapping):
        return condition_to_dict(condition_from_dict(condition))
    raise ConditionValidationError("Invalid condition format")


# -------------------------
# TEXT FORM
# -------------------------

def _parse_right(token: str) -> Any:
    if _INT_RE.fullmatch(token):
        return int(token)
    if _FLOAT_RE.fullmatch(token):
        value = float(token)
        # "1e400" overflows to inf, keep it as text
        return value if math.isfinite(value) else token
    # JSON literals written by condition_to_string
    if token[0] in '"[{' or token in ("true", "false"):
        try:
            return json.loads(token)
        except ValueError:
            return token
    return token


def string_to_condition(text: str) -> SimpleCondition:
    """
    Parse ``"<left> <operator> <right>"`` into a SimpleCondition.

    Only the first three whitespace separated tokens are read. The operator is
    not checked here. Anything unparsable returns the fallback condition.
    """
    try:
        tokens = text.split()
    except AttributeError:
        tokens = []
    if len(tokens) < 3 or not tokens[0] or not tokens[1]:
        logger.debug("Could not parse condition %r, using fallback", text)
        return fallback_condition()

    left, operator, right = tokens[:3]
    return SimpleCondition(operator, left, _parse_right(right))


def condition_to_string(condition: Union[Condition, Mapping[str, Any], str]) -> str:
    """
    Render a condition as text.

    Composites are joined with ``" AND "``/``" OR "`` and get no parentheses,
    so nested groups lose their grouping in the text form.
    """
    if isinstance(condition, str):
        return condition
    if isinstance(condition, Mapping):
        condition = condition_from_dict(condition)

    if isinstance(condition, SimpleCondition):
        right = json.dumps(condition.right, separators=(",", ":"), ensure_ascii=False, default=str)
        return f"{condition.left} {condition.operator} {right}"
    return f" {condition.type} ".join(condition_to_string(c) for c in condition.conditions)


# -------------------------
# VALIDATION
# -------------------------

def validate_condition(condition: Union[Condition, Mapping[str, Any], str]) -> None:
    """
    Check a condition tree, raising ConditionValidationError on the first
    violation. Children are checked depth-first, left to right.
    """
    if isinstance(condition, str):
        raise ConditionValidationError("Condition must be structured, not a string")

    if isinstance(condition, Mapping):
        condition = condition_from_dict(condition)

    if isinstance(condition, CompositeCondition):
        if not isinstance(condition.conditions, list) or not condition.conditions:
            raise ConditionValidationError("Composite condition must have at least one sub-condition")
        if condition.type not in COMPOSITE_TYPES:
            raise ConditionValidationError(
                f"Composite condition type must be AND or OR, got {condition.type!r}"
            )
        for child in condition.conditions:
            validate_condition(child)
        return

    if isinstance(condition, SimpleCondition):
        if not condition.operator:
            raise ConditionValidationError("Condition operator is required")
        if condition.operator not in SIMPLE_OPERATORS:
            raise ConditionValidationError(f"Unsupported condition operator: {condition.operator!r}")
        if condition.left is None or condition.left == "":
            raise ConditionValidationError("Condition left-hand field is required")
        if not isinstance(condition.left, str):
            raise ConditionValidationError(
                f"Condition left-hand field must be a field name, got {condition.left!r}"
            )
        if condition.right is None:
            raise ConditionValidationError("Condition right-hand value is required")
        return

    raise ConditionValidationError("Invalid condition format")
