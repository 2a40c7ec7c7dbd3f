"""Tests for the branch condition model."""

import pytest
from agentflow.workflow.conditions import (
    CompositeCondition,
    ConditionValidationError,
    SimpleCondition,
    condition_from_dict,
    condition_to_dict,
    condition_to_string,
    is_composite_condition,
    is_simple_condition,
    string_to_condition,
    validate_condition,
)


def test_string_to_condition_parses_number():
    """Test parsing 'field op number' text."""
    condition = string_to_condition("score > 70")

    assert condition == SimpleCondition(">", "score", 70)
    assert isinstance(condition.right, int)
    assert condition.kind == "simple"


def test_string_to_condition_parses_float_and_word():
    """Test float values and bare words on the right-hand side."""
    assert string_to_condition("ratio <= 0.5").right == 0.5
    assert string_to_condition("status == approved").right == "approved"


def test_string_to_condition_does_not_check_operator():
    """Test that the parser leaves operator checking to validation."""
    condition = string_to_condition("score ~= 10")

    assert condition.operator == "~="
    with pytest.raises(ConditionValidationError, match="Unsupported condition operator"):
        validate_condition(condition)


def test_string_to_condition_ignores_trailing_tokens():
    """Test that only the first three tokens are read."""
    condition = string_to_condition("a == 1 AND b > 2")

    assert condition == SimpleCondition("==", "a", 1)


def test_string_to_condition_fallback():
    """Test that unparsable text returns the fallback condition."""
    assert string_to_condition("bad") == SimpleCondition(">", "score", 0)
    assert string_to_condition("") == SimpleCondition(">", "score", 0)
    assert string_to_condition("score >") == SimpleCondition(">", "score", 0)
    assert string_to_condition(None) == SimpleCondition(">", "score", 0)


def test_fallback_is_a_fresh_instance():
    """Test that mutating one fallback does not leak into the next."""
    first = string_to_condition("bad")
    first.right = 99

    assert string_to_condition("bad").right == 0


def test_condition_to_string_simple():
    """Test rendering simple conditions with JSON right-hand values."""
    assert condition_to_string(SimpleCondition(">", "score", 70)) == "score > 70"
    assert condition_to_string(SimpleCondition("==", "status", "ok")) == 'status == "ok"'
    assert condition_to_string(SimpleCondition("in", "tier", ["gold", "silver"])) == 'tier in ["gold","silver"]'


def test_condition_to_string_composite_is_flat():
    """Test that composites are joined without parentheses."""
    nested = CompositeCondition("OR", [
        CompositeCondition("AND", [SimpleCondition("==", "a", 1), SimpleCondition(">", "b", 2)]),
        SimpleCondition("<", "c", 3),
    ])

    assert condition_to_string(nested) == "a == 1 AND b > 2 OR c < 3"


def test_condition_to_string_accepts_raw_dict():
    """Test rendering a raw condition mapping."""
    raw = {"type": "AND", "conditions": [
        {"operator": "==", "left": "a", "right": 1},
        {"operator": "==", "left": "b", "right": 2},
    ]}

    assert condition_to_string(raw) == "a == 1 AND b == 2"


def test_round_trip_simple_condition():
    """Test text round trip for simple conditions."""
    cases = [
        SimpleCondition(">", "score", 70),
        SimpleCondition("==", "status", "approved"),
        SimpleCondition("==", "code", "70"),
        SimpleCondition("!=", "ratio", 0.25),
        SimpleCondition("in", "tier", ["gold", "silver"]),
        SimpleCondition("==", "enabled", False),
    ]
    for condition in cases:
        assert string_to_condition(condition_to_string(condition)) == condition


def test_shape_discrimination_on_raw_dicts():
    """Test duck-typed discrimination of raw mappings."""
    simple = {"operator": "==", "left": "a", "right": 1}
    composite = {"type": "OR", "conditions": [simple]}

    assert is_simple_condition(simple) and not is_composite_condition(simple)
    assert is_composite_condition(composite) and not is_simple_condition(composite)
    assert not is_simple_condition({"left": "a"})
    assert not is_composite_condition("a == 1")


def test_explicit_kind_wins_over_keys():
    """Test that an explicit kind decides the shape."""
    raw = {"kind": "composite", "type": "AND", "conditions": [], "operator": "=="}

    assert is_composite_condition(raw)
    assert not is_simple_condition(raw)


def test_condition_from_dict_round_trip():
    """Test converting between raw dicts and tagged conditions."""
    raw = {"type": "AND", "conditions": [
        {"operator": "==", "left": "a", "right": 1},
        {"type": "OR", "conditions": [{"operator": ">", "left": "b", "right": 2}]},
    ]}
    condition = condition_from_dict(raw)

    assert isinstance(condition, CompositeCondition)
    assert isinstance(condition.conditions[1], CompositeCondition)
    assert condition_from_dict(condition_to_dict(condition)) == condition


def test_condition_from_dict_rejects_unknown_shape():
    """Test that unknown shapes raise."""
    with pytest.raises(ConditionValidationError, match="Invalid condition format"):
        condition_from_dict({"foo": "bar"})


def test_validate_condition_rejects_string():
    """Test that legacy text is rejected by validation."""
    with pytest.raises(ConditionValidationError, match="not a string"):
        validate_condition("score > 70")


def test_validate_condition_accepts_composite():
    """Test a well-formed AND composite."""
    validate_condition({"type": "AND", "conditions": [
        {"operator": "==", "left": "a", "right": 1},
        {"operator": "==", "left": "b", "right": 2},
    ]})
    validate_condition(CompositeCondition("OR", [SimpleCondition("contains", "tags", "vip")]))


def test_validate_condition_accepts_falsy_right_values():
    """Test that 0, False and empty string count as present."""
    for right in (0, False, ""):
        validate_condition(SimpleCondition("==", "x", right))


def test_validate_condition_simple_errors():
    """Test each simple-condition violation."""
    with pytest.raises(ConditionValidationError, match="operator is required"):
        validate_condition(SimpleCondition("", "x", 1))
    with pytest.raises(ConditionValidationError, match="left-hand field"):
        validate_condition(SimpleCondition("==", "", 1))
    with pytest.raises(ConditionValidationError, match="right-hand value"):
        validate_condition({"operator": "==", "left": "x", "right": None})


def test_validate_condition_composite_errors():
    """Test empty composites, bad group types and unknown shapes."""
    with pytest.raises(ConditionValidationError, match="at least one sub-condition"):
        validate_condition(CompositeCondition("AND", []))
    with pytest.raises(ConditionValidationError, match="AND or OR"):
        validate_condition(CompositeCondition("XOR", [SimpleCondition("==", "a", 1)]))
    with pytest.raises(ConditionValidationError, match="Invalid condition format"):
        validate_condition(42)


def test_validate_condition_fails_on_first_child():
    """Test that the first failing child's message propagates."""
    condition = CompositeCondition("AND", [
        SimpleCondition("==", "a", 1),
        SimpleCondition("==", "", 2),
        SimpleCondition("==", "c", None),
    ])

    with pytest.raises(ConditionValidationError) as exc:
        validate_condition(condition)
    assert "left-hand field" in str(exc.value)


def test_validate_condition_has_no_depth_limit():
    """Test that deep nesting beyond the editor's cap still validates."""
    condition = SimpleCondition("==", "a", 1)
    for _ in range(10):
        condition = CompositeCondition("AND", [condition])

    validate_condition(condition)


def test_validate_condition_string_child():
    """Test that a legacy string inside a composite is rejected."""
    with pytest.raises(ConditionValidationError, match="not a string"):
        validate_condition({"type": "OR", "conditions": ["a == 1"]})


def test_string_to_condition_keeps_overflowing_number_as_text():
    """Test that a literal overflowing to infinity stays a raw token."""
    condition = string_to_condition("score > 1e400")

    assert condition.right == "1e400"
    assert string_to_condition("score > -1e400").right == "-1e400"
    assert string_to_condition("score > 1e3").right == 1000.0


def test_string_to_condition_only_reads_ascii_digits():
    """Test that non-ASCII digits are not parsed as numbers."""
    assert string_to_condition("score > ٣").right == "٣"
    assert string_to_condition("score > ١.5").right == "١.5"


def test_validate_condition_rejects_non_string_left():
    """Test that the left-hand side must be a field name."""
    with pytest.raises(ConditionValidationError, match="must be a field name"):
        validate_condition(SimpleCondition("==", 0, 1))
    with pytest.raises(ConditionValidationError, match="must be a field name"):
        validate_condition({"operator": "==", "left": ["a"], "right": 1})
