"""Failures reported by the parser, the type checker and the interpreter.

Every failure is an exception; the core never recovers from one. The
session decides whether to report it and carry on or to abort.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

from miniml import printer
from miniml.type_impls import Type, TVar


class MinimlError(Exception):
    pass


@dataclasses.dataclass
class ParseError(MinimlError):
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def __str__(self):
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


class TypeCheckError(MinimlError):
    pass


@dataclasses.dataclass
class UnboundVariable(TypeCheckError):
    name: str

    def __str__(self):
        return f"unbound variable: {self.name}"


@dataclasses.dataclass
class UnificationError(TypeCheckError):
    expected: Type
    actual: Type

    def __str__(self):
        expected, actual = printer.show_types(self.expected, self.actual)
        return f"cannot unify {expected} with {actual}"


@dataclasses.dataclass
class InfiniteType(TypeCheckError):
    var: int
    type: Type

    def __str__(self):
        var, t = printer.show_types(TVar(self.var), self.type)
        return f"infinite type: {var} occurs in {t}"


class EvaluationError(MinimlError):
    pass


@dataclasses.dataclass
class UnboundName(EvaluationError):
    name: str

    def __str__(self):
        return f"unbound variable: {self.name}"


@dataclasses.dataclass
class UninitializedRecursiveBinding(EvaluationError):
    name: str

    def __str__(self):
        return f"recursive binding used before its definition: {self.name}"


@dataclasses.dataclass
class NotAFunction(EvaluationError):
    value: Any

    def __str__(self):
        return f"not a function: {printer.show_value(self.value)}"


@dataclasses.dataclass
class NotABoolean(EvaluationError):
    value: Any

    def __str__(self):
        return f"condition is not a boolean: {printer.show_value(self.value)}"


@dataclasses.dataclass
class NonExhaustiveMatch(EvaluationError):
    value: Any

    def __str__(self):
        return f"no pattern matches {printer.show_value(self.value)}"


@dataclasses.dataclass
class OperatorDomainError(EvaluationError):
    op: str
    lhs: Any
    rhs: Any

    def __str__(self):
        lhs = printer.show_value(self.lhs)
        rhs = printer.show_value(self.rhs)
        return f"invalid operands for {self.op}: {lhs} and {rhs}"
