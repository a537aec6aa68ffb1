"""Formula parsing and reference binding.

Formulas are arithmetic over references written with a leading colon:

    :cash[-1] + :netp[+0]
    :production[+0] * :price

``:name[k]`` reads ``name`` at ``t + k`` for the period ``t`` being computed;
a bare ``:name`` reads a parameter at ``t``. Formulas are parsed once, when the
rules are registered, into a small expression tree that is then evaluated for
every period.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterator, List, Optional, Union

from finmodel.core.errors import FormulaSyntaxError

logger = logging.getLogger(__name__)

Number = Union[int, float]
Value = Optional[Number]

token_re = re.compile(
    r"""
        (?P<SPACE>     \s+ )|
        (?P<NUMBER>    (?: \d+ \.? \d* | \. \d+ ) (?: [eE] [+-]? \d+ )? )|
        (?P<REFERENCE> : (?P<NAME> [_A-Za-z][_A-Za-z0-9]* )
                       (?: \s* \[ \s* (?P<OFFSET> [+-]? \s* \d+ ) \s* \] )? )|
        (?P<OPERATOR>  [-+*/] )|
        (?P<LPAREN>    \( )|
        (?P<RPAREN>    \) )
    """,
    re.VERBOSE,
)

TOKEN_KINDS = ("SPACE", "NUMBER", "REFERENCE", "OPERATOR", "LPAREN", "RPAREN")


class RefKind(Enum):
    VARIABLE = "variable"
    PARAMETER = "parameter"


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int
    name: Optional[str] = None
    offset: Optional[int] = None


# Expression tree ---------------------------------------------------------------

@dataclass(frozen=True)
class Literal:
    value: Number

    def evaluate(self, lookup: "Lookup", period: int) -> Value:
        return self.value

    def references(self) -> Iterator["Reference"]:
        return iter(())


@dataclass(frozen=True)
class Reference:
    """A named reference; ``offset`` is None for a bare parameter reference."""

    name: str
    offset: Optional[int] = None
    kind: Optional[RefKind] = None

    def evaluate(self, lookup: "Lookup", period: int) -> Value:
        return lookup(self, period + (self.offset or 0))

    def references(self) -> Iterator["Reference"]:
        yield self

    def __str__(self) -> str:
        if self.offset is None:
            return f":{self.name}"
        return f":{self.name}[{self.offset:+d}]"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Expression"

    def evaluate(self, lookup: "Lookup", period: int) -> Value:
        value = self.operand.evaluate(lookup, period)
        if value is None:
            return None
        return -value if self.op == "-" else value

    def references(self) -> Iterator[Reference]:
        return self.operand.references()


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Expression"
    right: "Expression"

    def evaluate(self, lookup: "Lookup", period: int) -> Value:
        left = self.left.evaluate(lookup, period)
        right = self.right.evaluate(lookup, period)
        # unset operands make the whole expression unset
        if left is None or right is None:
            return None
        if self.op == "+":
            return left + right
        if self.op == "-":
            return left - right
        if self.op == "*":
            return left * right
        return left / right

    def references(self) -> Iterator[Reference]:
        yield from self.left.references()
        yield from self.right.references()


Expression = Union[Literal, Reference, UnaryOp, BinaryOp]
Lookup = Callable[[Reference, int], Value]


# Tokenizer and parser ---------------------------------------------------------

def tokenize(formula: str) -> List[Token]:
    tokens: List[Token] = []
    position = 0
    while position < len(formula):
        match = token_re.match(formula, position)
        if match is None:
            raise FormulaSyntaxError(
                formula, f"unexpected character {formula[position]!r}", position
            )
        kind = next(name for name in TOKEN_KINDS if match.group(name) is not None)
        if kind != "SPACE":
            offset = match.group("OFFSET")
            tokens.append(
                Token(
                    kind=kind,
                    text=match.group(0),
                    position=position,
                    name=match.group("NAME"),
                    offset=int(offset.replace(" ", "")) if offset is not None else None,
                )
            )
        position = match.end()
    return tokens


class _Parser:
    """Recursive descent over the grammar:

        expression := term (('+' | '-') term)*
        term       := factor (('*' | '/') factor)*
        factor     := ('+' | '-') factor | NUMBER | REFERENCE | '(' expression ')'
    """

    def __init__(self, formula: str) -> None:
        self.formula = formula
        self.tokens = tokenize(formula)
        self.index = 0

    def parse(self) -> Expression:
        if not self.tokens:
            raise FormulaSyntaxError(self.formula, "empty formula")
        tree = self._expression()
        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            raise FormulaSyntaxError(self.formula, f"unexpected {token.text!r}", token.position)
        return tree

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _at_operator(self, *ops: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "OPERATOR" and token.text in ops

    def _expression(self) -> Expression:
        tree = self._term()
        while self._at_operator("+", "-"):
            op = self._advance().text
            tree = BinaryOp(op, tree, self._term())
        return tree

    def _term(self) -> Expression:
        tree = self._factor()
        while self._at_operator("*", "/"):
            op = self._advance().text
            tree = BinaryOp(op, tree, self._factor())
        return tree

    def _factor(self) -> Expression:
        token = self._peek()
        if token is None:
            raise FormulaSyntaxError(self.formula, "unexpected end of formula", len(self.formula))
        self._advance()

        if token.kind == "OPERATOR" and token.text in ("+", "-"):
            return UnaryOp(token.text, self._factor())
        if token.kind == "NUMBER":
            text = token.text
            return Literal(float(text) if any(c in text for c in ".eE") else int(text))
        if token.kind == "REFERENCE":
            return Reference(name=token.name or "", offset=token.offset)
        if token.kind == "LPAREN":
            tree = self._expression()
            closing = self._peek()
            if closing is None or closing.kind != "RPAREN":
                position = closing.position if closing else len(self.formula)
                raise FormulaSyntaxError(self.formula, "missing ')'", position)
            self._advance()
            return tree
        raise FormulaSyntaxError(self.formula, f"unexpected {token.text!r}", token.position)


def parse_formula(formula: str) -> Expression:
    """Parse formula text into an unbound expression tree."""
    return _Parser(formula).parse()


# Binding ----------------------------------------------------------------------

def bind(tree: Expression, classify: Callable[[str], RefKind], formula: str) -> Expression:
    """Tag every reference with the namespace it belongs to."""
    if isinstance(tree, Literal):
        return tree
    if isinstance(tree, Reference):
        kind = classify(tree.name)
        if kind is RefKind.VARIABLE and tree.offset is None:
            raise FormulaSyntaxError(
                formula,
                f"variable ':{tree.name}' needs a period offset, e.g. ':{tree.name}[+0]'",
            )
        return replace(tree, kind=kind)
    if isinstance(tree, UnaryOp):
        return replace(tree, operand=bind(tree.operand, classify, formula))
    return replace(
        tree,
        left=bind(tree.left, classify, formula),
        right=bind(tree.right, classify, formula),
    )


@dataclass(frozen=True)
class Rule:
    """A compiled rule: the target account and its bound expression."""

    target: str
    formula: str
    expression: Expression

    def references(self) -> List[Reference]:
        return list(self.expression.references())

    def evaluate(self, lookup: Lookup, period: int) -> Value:
        return self.expression.evaluate(lookup, period)


def compile_rule(target: str, formula: str, classify: Callable[[str], RefKind]) -> Rule:
    """Parse ``formula`` and bind its references; raises on any registration error."""
    try:
        expression = bind(parse_formula(formula), classify, formula)
    except RecursionError:
        raise FormulaSyntaxError(formula, "formula nested too deeply") from None
    logger.debug("Compiled rule for %s: %s", target, formula)
    return Rule(target=target, formula=formula, expression=expression)
