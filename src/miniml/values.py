from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Iterator

from miniml import abstract_syntax as ast
from miniml.env import Env

# Integers and booleans are represented by Python's int and bool.
Value = Any


@dataclasses.dataclass(frozen=True)
class Nil:
    def __iter__(self) -> Iterator[Value]:
        return iter(())


@dataclasses.dataclass(frozen=True)
class Cons:
    head: Value
    tail: Value

    def __iter__(self) -> Iterator[Value]:
        node = self
        while isinstance(node, Cons):
            yield node.head
            node = node.tail


@dataclasses.dataclass(eq=False)
class Closure:
    var: str
    body: ast.Expression
    captured_env: Env[Value] = dataclasses.field(repr=False)


NIL = Nil()


def from_list(items: Iterable[Value]) -> Value:
    result = NIL
    for item in reversed(list(items)):
        result = Cons(item, result)
    return result


def is_int(value: Value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_list(value: Value) -> bool:
    while isinstance(value, Cons):
        value = value.tail
    return isinstance(value, Nil)
