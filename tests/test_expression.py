import pytest

from sudscript.expression import Expression, ExpressionError, ValueType


def test_default_expression_is_empty():
    expr = Expression()
    assert expr.is_empty() is True
    assert expr.is_literal() is False
    assert expr.source == ""


@pytest.mark.parametrize(
    "source, value_type, value",
    [
        ("true", ValueType.BOOLEAN, True),
        ("False", ValueType.BOOLEAN, False),
        ("42", ValueType.INT, 42),
        ("-7", ValueType.INT, -7),
        ("2.5", ValueType.FLOAT, 2.5),
        ('"Hello there"', ValueType.TEXT, "Hello there"),
        ("`TheDude`", ValueType.NAME, "TheDude"),
        ("masculine", ValueType.GENDER, "masculine"),
    ],
)
def test_literals(source, value_type, value):
    expr = Expression.parse(source)
    assert expr.is_literal() is True
    assert expr.literal_type() is value_type
    assert expr.literal_value() == value


def test_text_literal_detection():
    assert Expression.parse('"words"').is_text_literal() is True
    assert Expression.parse("`words`").is_text_literal() is False
    assert Expression.parse("{x} + 1").is_text_literal() is False


def test_string_escapes():
    expr = Expression.parse(r'"say \"hi\""')
    assert expr.literal_value() == 'say "hi"'


def test_random_condition_keeps_source():
    expr = Expression.parse("{__RandomItem} == 0")
    assert expr.source == "{__RandomItem} == 0"
    assert expr.is_empty() is False
    assert expr.is_literal() is False
    assert expr.variables == ["__RandomItem"]


def test_source_is_trimmed():
    assert Expression.parse("  {a} > 1  ").source == "{a} > 1"


@pytest.mark.parametrize(
    "source",
    [
        "{a} and not {b}",
        "({a} || {b}) && !{c}",
        "{x} * (2 + {y}) >= -{z}",
        "{n} <> 3",
        "{a} % 2 == 0 or {b}",
    ],
)
def test_valid_compound_expressions(source):
    expr = Expression.parse(source)
    assert expr.is_literal() is False
    assert expr.is_empty() is False


@pytest.mark.parametrize(
    "source",
    [
        "",
        "   ",
        "{a} ==",
        "== 1",
        "({a} == 1",
        "{a} == 1)",
        "{a} {b}",
        "1 2",
        '"unterminated',
        "`unterminated",
        "{unterminated",
        "{}",
        "banana",
        "{a} $ 1",
        "{a} !",
    ],
)
def test_invalid_expressions(source):
    with pytest.raises(ExpressionError):
        Expression.parse(source)


def test_literal_accessors_reject_non_literals():
    expr = Expression.parse("{a} + 1")
    with pytest.raises(ExpressionError):
        expr.literal_value()
    with pytest.raises(ExpressionError):
        expr.literal_type()


def test_expression_error_is_value_error():
    with pytest.raises(ValueError):
        Expression.parse("(")


def test_parsed_expressions_compare_by_source():
    assert Expression.parse("{a} == 1") == Expression.parse("{a} == 1")
    assert Expression.parse("1") != Expression.parse("2")