"""Parsing of script expressions: conditions and values for ``set`` lines."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Union


class ExpressionError(ValueError):
    """Raised when an expression cannot be parsed or is used wrongly."""


class ValueType(enum.Enum):
    """Type of a literal value."""

    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    NAME = "name"
    GENDER = "gender"


class _Kind(enum.Enum):
    LITERAL = "literal"
    VARIABLE = "variable"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"


LiteralValue = Union[bool, int, float, str]


@dataclass(frozen=True)
class _Token:
    kind: _Kind
    value: LiteralValue = ""
    value_type: ValueType | None = None


_UNARY = {"not", "neg"}
_PRECEDENCE = {
    "or": 0,
    "and": 1,
    "==": 2,
    "!=": 2,
    "<": 3,
    "<=": 3,
    ">": 3,
    ">=": 3,
    "+": 4,
    "-": 4,
    "*": 5,
    "/": 5,
    "%": 5,
    "not": 6,
    "neg": 6,
}
_SYMBOL_ALIASES = {"&&": "and", "||": "or", "!": "not", "<>": "!="}
_SYMBOL_RE = re.compile(r"&&|\|\||==|!=|<>|<=|>=|[<>!+\-*/%()]")
_NUMBER_RE = re.compile(r"\d+\.\d*|\.\d+|\d+")
_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_KEYWORDS = {
    "true": _Token(_Kind.LITERAL, True, ValueType.BOOLEAN),
    "false": _Token(_Kind.LITERAL, False, ValueType.BOOLEAN),
    "masculine": _Token(_Kind.LITERAL, "masculine", ValueType.GENDER),
    "feminine": _Token(_Kind.LITERAL, "feminine", ValueType.GENDER),
    "neuter": _Token(_Kind.LITERAL, "neuter", ValueType.GENDER),
}
_WORD_OPERATORS = {"and", "or", "not"}


def _number_token(text: str, negative: bool) -> _Token:
    sign = "-" if negative else ""
    if "." in text:
        return _Token(_Kind.LITERAL, float(sign + text), ValueType.FLOAT)
    return _Token(_Kind.LITERAL, int(sign + text), ValueType.INT)


def _read_quoted(source: str, pos: int, quote: str) -> tuple[str, int]:
    """Read a quoted literal starting at ``pos``; return its content and end."""
    chars: list[str] = []
    i = pos + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\" and quote == '"' and i + 1 < len(source):
            chars.append(source[i + 1])
            i += 2
            continue
        if ch == quote:
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1
    kind = "string" if quote == '"' else "name"
    raise ExpressionError(f"Unterminated {kind} literal in '{source}'")


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    expect_operand = True
    pos = 0
    while pos < len(source):
        ch = source[pos]
        if ch.isspace():
            pos += 1
            continue

        if ch in ('"', "`"):
            if not expect_operand:
                raise ExpressionError(f"Missing operator before column {pos + 1} in '{source}'")
            text, pos = _read_quoted(source, pos, ch)
            value_type = ValueType.TEXT if ch == '"' else ValueType.NAME
            tokens.append(_Token(_Kind.LITERAL, text, value_type))
            expect_operand = False
            continue

        if ch == "{":
            if not expect_operand:
                raise ExpressionError(f"Missing operator before column {pos + 1} in '{source}'")
            end = source.find("}", pos + 1)
            if end == -1:
                raise ExpressionError(f"Unterminated variable reference in '{source}'")
            name = source[pos + 1:end].strip()
            if not name:
                raise ExpressionError(f"Empty variable reference in '{source}'")
            tokens.append(_Token(_Kind.VARIABLE, name))
            pos = end + 1
            expect_operand = False
            continue

        number = _NUMBER_RE.match(source, pos)
        if number:
            if not expect_operand:
                raise ExpressionError(f"Missing operator before column {pos + 1} in '{source}'")
            tokens.append(_number_token(number.group(), negative=False))
            pos = number.end()
            expect_operand = False
            continue

        word = _WORD_RE.match(source, pos)
        if word:
            lowered = word.group().lower()
            pos = word.end()
            if lowered in _WORD_OPERATORS:
                tokens.append(_Token(_Kind.OPERATOR, lowered))
                if lowered != "not" and expect_operand:
                    raise ExpressionError(f"Unexpected operator '{lowered}' in '{source}'")
                expect_operand = True
                continue
            if lowered not in _KEYWORDS:
                raise ExpressionError(f"Unrecognised identifier '{word.group()}' in '{source}'")
            if not expect_operand:
                raise ExpressionError(f"Missing operator before '{word.group()}' in '{source}'")
            tokens.append(_KEYWORDS[lowered])
            expect_operand = False
            continue

        symbol = _SYMBOL_RE.match(source, pos)
        if not symbol:
            raise ExpressionError(f"Unexpected character '{ch}' in '{source}'")
        op = _SYMBOL_ALIASES.get(symbol.group(), symbol.group())
        pos = symbol.end()
        if op == "(":
            if not expect_operand:
                raise ExpressionError(f"Missing operator before '(' in '{source}'")
            tokens.append(_Token(_Kind.LPAREN))
            continue
        if op == ")":
            if expect_operand:
                raise ExpressionError(f"Unexpected ')' in '{source}'")
            tokens.append(_Token(_Kind.RPAREN))
            continue
        if expect_operand:
            if op == "-":
                rest = source[pos:].lstrip()
                skipped = len(source) - pos - len(rest)
                number = _NUMBER_RE.match(rest)
                if number:
                    tokens.append(_number_token(number.group(), negative=True))
                    pos += skipped + number.end()
                    expect_operand = False
                    continue
                tokens.append(_Token(_Kind.OPERATOR, "neg"))
                continue
            if op != "not":
                raise ExpressionError(f"Unexpected operator '{op}' in '{source}'")
        elif op == "not":
            raise ExpressionError(f"Unexpected operator '!' in '{source}'")
        tokens.append(_Token(_Kind.OPERATOR, op))
        expect_operand = True

    if not tokens:
        raise ExpressionError("Empty expression")
    if expect_operand:
        raise ExpressionError(f"Expression '{source}' ends with an operator")
    return tokens


def _to_rpn(tokens: list[_Token], source: str) -> tuple[_Token, ...]:
    output: list[_Token] = []
    stack: list[_Token] = []
    for token in tokens:
        if token.kind in (_Kind.LITERAL, _Kind.VARIABLE):
            output.append(token)
        elif token.kind is _Kind.OPERATOR:
            if token.value not in _UNARY:
                prec = _PRECEDENCE[token.value]
                while (
                    stack
                    and stack[-1].kind is _Kind.OPERATOR
                    and _PRECEDENCE[stack[-1].value] >= prec
                ):
                    output.append(stack.pop())
            stack.append(token)
        elif token.kind is _Kind.LPAREN:
            stack.append(token)
        else:
            while stack and stack[-1].kind is not _Kind.LPAREN:
                output.append(stack.pop())
            if not stack:
                raise ExpressionError(f"Mismatched ')' in '{source}'")
            stack.pop()
    while stack:
        top = stack.pop()
        if top.kind is _Kind.LPAREN:
            raise ExpressionError(f"Mismatched '(' in '{source}'")
        output.append(top)

    depth = 0
    for token in output:
        if token.kind is _Kind.OPERATOR:
            needed = 1 if token.value in _UNARY else 2
            if depth < needed:
                raise ExpressionError(f"Operator '{token.value}' is missing an operand in '{source}'")
            depth -= needed - 1
        else:
            depth += 1
    if depth != 1:
        raise ExpressionError(f"Malformed expression '{source}'")
    return tuple(output)


@dataclass(frozen=True)
class Expression:
    """A parsed expression; the default instance is the empty expression."""

    source: str = ""
    _rpn: tuple[_Token, ...] = field(default=(), repr=False)

    @classmethod
    def parse(cls, source: str) -> "Expression":
        """Parse ``source``, raising :class:`ExpressionError` if it is malformed."""
        text = source.strip()
        rpn = _to_rpn(_tokenize(text), text)
        return cls(text, rpn)

    def is_empty(self) -> bool:
        return not self._rpn

    def is_literal(self) -> bool:
        return len(self._rpn) == 1 and self._rpn[0].kind is _Kind.LITERAL

    def is_text_literal(self) -> bool:
        return self.is_literal() and self._rpn[0].value_type is ValueType.TEXT

    def _literal(self) -> _Token:
        if not self.is_literal():
            raise ExpressionError(f"Expression '{self.source}' is not a literal")
        return self._rpn[0]

    def literal_type(self) -> ValueType:
        return self._literal().value_type  # type: ignore[return-value]

    def literal_value(self) -> LiteralValue:
        return self._literal().value

    @property
    def variables(self) -> list[str]:
        """Names of the variables referenced, in order of appearance."""
        return [t.value for t in self._rpn if t.kind is _Kind.VARIABLE]  # type: ignore[misc]

    def __str__(self) -> str:
        return self.source