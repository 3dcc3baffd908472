from __future__ import annotations

import abc
import dataclasses
import typing
from typing import Any


class AstNode(abc.ABC):
    pass


class ToplevelItem(abc.ABC):
    pass


class Expression(ToplevelItem):
    pass


@dataclasses.dataclass(frozen=True)
class Literal(Expression):
    val: Any


@dataclasses.dataclass(frozen=True)
class Reference(Expression):
    var: str


Op = typing.Literal["+", "-", "*", "<", "<=", ">=", ">", "==", "!=", "&&", "||"]


@dataclasses.dataclass(frozen=True)
class BinOp(Expression):
    lval: Expression
    rval: Expression
    rtor: Op


@dataclasses.dataclass(frozen=True)
class Conditional(Expression):
    condition: Expression
    consequence: Expression
    alternative: Expression


@dataclasses.dataclass(frozen=True)
class Function(Expression):
    var: str
    body: Expression


@dataclasses.dataclass(frozen=True)
class Application(Expression):
    fun: Expression
    arg: Expression


@dataclasses.dataclass(frozen=True)
class Let(Expression):
    var: str
    val: Expression
    body: Expression


@dataclasses.dataclass(frozen=True)
class LetRec(Expression):
    var: str
    val: Expression
    body: Expression


@dataclasses.dataclass(frozen=True)
class Nil(Expression):
    pass


@dataclasses.dataclass(frozen=True)
class Cons(Expression):
    head: Expression
    tail: Expression


@dataclasses.dataclass(frozen=True)
class ListLiteral(Expression):
    items: tuple[Expression, ...]


class Pattern(AstNode):
    pass


@dataclasses.dataclass(frozen=True)
class BindingPattern(Pattern):
    var: str


@dataclasses.dataclass(frozen=True)
class WildcardPattern(Pattern):
    pass


@dataclasses.dataclass(frozen=True)
class LiteralPattern(Pattern):
    val: Any


@dataclasses.dataclass(frozen=True)
class ConsPattern(Pattern):
    head: Pattern
    tail: Pattern


@dataclasses.dataclass(frozen=True)
class NilPattern(Pattern):
    pass


@dataclasses.dataclass(frozen=True)
class MatchArm(AstNode):
    pat: Pattern
    bdy: Expression


@dataclasses.dataclass(frozen=True)
class Match(Expression):
    expr: Expression
    arms: tuple[MatchArm, ...]


@dataclasses.dataclass(frozen=True)
class DefineLet(ToplevelItem):
    var: str
    val: Expression


@dataclasses.dataclass(frozen=True)
class DefineLetRec(ToplevelItem):
    var: str
    val: Expression


@dataclasses.dataclass(frozen=True)
class Script(AstNode):
    statements: tuple[ToplevelItem, ...]


def pattern_vars(pat: Pattern) -> typing.Iterator[str]:
    """Names bound by a pattern, left to right (duplicates included)."""
    match pat:
        case BindingPattern(var):
            yield var
        case ConsPattern(head, tail):
            yield from pattern_vars(head)
            yield from pattern_vars(tail)
        case WildcardPattern() | LiteralPattern(_) | NilPattern():
            return
        case _:
            raise NotImplementedError(pat)
