"""Boolean conditions over other events' resolved state.

Grammar::

    expr       := and ('||' and)*
    and        := unary ('&&' unary)*
    unary      := '!' unary | comparison
    comparison := primary (('==' | '!=' | '<' | '>' | '<=' | '>=') primary)?
    primary    := '(' expr ')' | 'true' | 'false' | number | string | ref
    ref        := 'events' '[' string ']' '.' ('active' | 'state' | 'effects' '[' string ']')

Example: ``events['harvest'].active && events['weather'].state == 'Storm'``.
Unknown event ids read as inactive with an empty state.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Collection, Mapping, Union

from almanac_event.types import ActiveEvent, ConditionSyntaxError

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<number>\d+(?:\.\d+)?)
    | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    | (?P<op>&&|\|\||==|!=|<=|>=|<|>|!)
    | (?P<punct>[()\[\].])
    | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)
_ESCAPE_RE = re.compile(r"\\(.)")

FIELDS = ("active", "state", "effects")
COMPARISONS = ("==", "!=", "<", ">", "<=", ">=")


# --- Syntax tree ---


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class EventRef:
    event_id: str
    field: str  # "active", "state" or "effects"
    key: str | None = None  # effect key when field == "effects"


@dataclass(frozen=True)
class Not:
    operand: Node


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: Node
    right: Node


Node = Union[Literal, EventRef, Not, BinaryOp]


@dataclass(frozen=True)
class Condition:
    """A parsed condition. Evaluation never raises."""

    source: str
    root: Node
    references: tuple[str, ...]  # event ids in first-seen order

    def evaluate(self, events: Mapping[str, ActiveEvent]) -> bool:
        """``events`` maps ids of active events to their resolved state."""
        return _truthy(_value(self.root, events))

    def missing_references(self, known: Collection[str]) -> list[str]:
        return [event_id for event_id in self.references if event_id not in known]


# --- Parsing ---


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    position: int


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    while position < len(expression):
        match = _TOKEN_RE.match(expression, position)
        if match is None:
            raise ConditionSyntaxError("unexpected character", expression, position)
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(_Token(kind, match.group(), position))
        position = match.end()
    return tokens


class _Parser:
    """Recursive descent over the token list. One instance per parse."""

    def __init__(self, expression: str) -> None:
        self._expression = expression
        self._tokens = _tokenize(expression)
        self._pos = 0
        self._references: list[str] = []

    def parse(self) -> Condition:
        if not self._tokens:
            raise ConditionSyntaxError("empty condition", self._expression, 0)
        root = self._or()
        if self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            raise self._error(f"unexpected {token.text!r}", token)
        return Condition(self._expression, root, tuple(dict.fromkeys(self._references)))

    # --- Productions ---

    def _or(self) -> Node:
        node = self._and()
        while self._accept("||"):
            node = BinaryOp("||", node, self._and())
        return node

    def _and(self) -> Node:
        node = self._unary()
        while self._accept("&&"):
            node = BinaryOp("&&", node, self._unary())
        return node

    def _unary(self) -> Node:
        if self._accept("!"):
            return Not(self._unary())
        return self._comparison()

    def _comparison(self) -> Node:
        left = self._primary()
        token = self._peek()
        if token is not None and token.kind == "op" and token.text in COMPARISONS:
            self._pos += 1
            return BinaryOp(token.text, left, self._primary())
        return left

    def _primary(self) -> Node:
        token = self._next("expected a value")
        if token.kind == "punct" and token.text == "(":
            node = self._or()
            self._expect(")")
            return node
        if token.kind == "number":
            number = float(token.text) if "." in token.text else int(token.text)
            return Literal(number)
        if token.kind == "string":
            return Literal(_unquote(token.text))
        if token.kind == "name":
            if token.text == "true":
                return Literal(True)
            if token.text == "false":
                return Literal(False)
            if token.text == "events":
                return self._event_ref()
        raise self._error(f"unexpected {token.text!r}", token)

    def _event_ref(self) -> EventRef:
        self._expect("[")
        event_id = self._string("event id must be a quoted string")
        self._expect("]")
        self._expect(".")
        token = self._next("expected a field name")
        if token.kind != "name" or token.text not in FIELDS:
            raise self._error(f"unknown field {token.text!r}", token)
        key = None
        if token.text == "effects":
            self._expect("[")
            key = self._string("effect key must be a quoted string")
            self._expect("]")
        self._references.append(event_id)
        return EventRef(event_id, token.text, key)

    # --- Token helpers ---

    def _peek(self) -> _Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _accept(self, text: str) -> bool:
        token = self._peek()
        if token is not None and token.kind != "string" and token.text == text:
            self._pos += 1
            return True
        return False

    def _next(self, message: str) -> _Token:
        token = self._peek()
        if token is None:
            raise ConditionSyntaxError(
                f"{message}, found end of input", self._expression, len(self._expression)
            )
        self._pos += 1
        return token

    def _expect(self, text: str) -> None:
        token = self._next(f"expected {text!r}")
        if token.kind == "string" or token.text != text:
            raise self._error(f"expected {text!r}, found {token.text!r}", token)

    def _string(self, message: str) -> str:
        token = self._next(message)
        if token.kind != "string":
            raise self._error(message, token)
        return _unquote(token.text)

    def _error(self, message: str, token: _Token) -> ConditionSyntaxError:
        return ConditionSyntaxError(message, self._expression, token.position)


def _unquote(text: str) -> str:
    return _ESCAPE_RE.sub(r"\1", text[1:-1])


# --- Evaluation ---


def _truthy(value: Any) -> bool:
    return bool(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _value(node: Node, events: Mapping[str, ActiveEvent]) -> Any:
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, EventRef):
        event = events.get(node.event_id)
        if node.field == "active":
            return event is not None
        if node.field == "state":
            return (event.state or "") if event is not None else ""
        return event.effects.get(node.key) if event is not None else None
    if isinstance(node, Not):
        return not _truthy(_value(node.operand, events))
    if node.op == "&&":
        return _truthy(_value(node.left, events)) and _truthy(_value(node.right, events))
    if node.op == "||":
        return _truthy(_value(node.left, events)) or _truthy(_value(node.right, events))
    return _compare(node.op, _value(node.left, events), _value(node.right, events))


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    comparable = (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if not comparable:
        return False
    if op == "<":
        return left < right
    if op == ">":
        return left > right
    if op == "<=":
        return left <= right
    return left >= right


# --- Public API ---


def parse_condition(expression: str) -> Condition:
    """Parse an expression.

    Raises:
        ConditionSyntaxError: With the position and fragment of the problem.
    """
    return _Parser(expression).parse()


def evaluate_condition(expression: str, events: Mapping[str, ActiveEvent]) -> bool:
    return parse_condition(expression).evaluate(events)


def extract_event_references(expression: str) -> list[str]:
    """Referenced event ids, first-seen order, without duplicates."""
    return list(parse_condition(expression).references)


def check_condition(expression: str) -> list[str]:
    """Syntax check. Returns error messages, empty when the expression parses."""
    try:
        parse_condition(expression)
    except ConditionSyntaxError as exc:
        return [str(exc)]
    return []
