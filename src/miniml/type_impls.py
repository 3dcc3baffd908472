from __future__ import annotations

import abc
import dataclasses
from typing import Any, Callable, Iterator

from miniml.env import Env
from miniml.unification.structure import structural_visitor


class Type(abc.ABC):
    pass


@dataclasses.dataclass(frozen=True)
class TVar(Type):
    id: int


@dataclasses.dataclass(frozen=True)
class TCon(Type):
    name: str


@dataclasses.dataclass(frozen=True)
class TArr(Type):
    arg: Type
    res: Type


@dataclasses.dataclass(frozen=True)
class TList(Type):
    elem: Type


INT = TCon("Int")
BOOL = TCon("Bool")


@structural_visitor.register
def _(struc: TArr, visitor: Callable[[Any], Any], reducer=None) -> Any:
    if reducer is None:
        return TArr(visitor(struc.arg), visitor(struc.res))
    return reducer(visitor(x) for x in (struc.arg, struc.res))


@structural_visitor.register
def _(struc: TList, visitor: Callable[[Any], Any], reducer=None) -> Any:
    if reducer is None:
        return TList(visitor(struc.elem))
    return reducer(visitor(x) for x in (struc.elem,))


@dataclasses.dataclass(frozen=True)
class Scheme:
    vars: tuple[int, ...]
    body: Type

    @staticmethod
    def mono(t: Type) -> Scheme:
        return Scheme((), t)

    def is_monomorphic(self) -> bool:
        return not self.vars


TypeEnv = Env[Scheme]


def free_type_vars(struc: Type | Scheme | TypeEnv) -> set[int]:
    match struc:
        case TVar(var):
            return {var}
        case Scheme(vars, body):
            return free_type_vars(body) - set(vars)
        case Env():
            return set().union(*map(free_type_vars, struc.values()))
        case _:
            return structural_visitor(
                struc, free_type_vars, reducer=lambda ftvs: set().union(*ftvs)
            )


def type_vars_in_order(t: Type) -> Iterator[int]:
    """Type variables of `t` by first appearance, left to right."""
    seen = set()

    def visit(x: Type):
        match x:
            case TVar(var):
                if var not in seen:
                    seen.add(var)
                    yield var
            case _:
                for child in structural_visitor(x, lambda c: c, reducer=list):
                    yield from visit(child)

    return visit(t)
