from __future__ import annotations
from typing import Any, Optional, Iterable

from miniml.env import Env
from miniml.type_impls import TVar, Type, Scheme
from miniml.unification.structure import structural_visitor


class Substitution:
    """Finite mapping from type variable ids to types.

    Substitutions are values: `compose` and `without` build new ones and
    never modify `self`.
    """

    def __init__(self, subs: Optional[dict[int, Type]] = None):
        self.subs = dict(subs or {})

    @staticmethod
    def singleton(var: int, struc: Type) -> Substitution:
        return Substitution({var: struc})

    def apply(self, struc: Any) -> Any:
        if not self.subs:
            return struc
        match struc:
            case TVar(var):
                return self.subs.get(var, struc)
            case Scheme(vars, body):
                return Scheme(vars, self.without(vars).apply(body))
            case Env():
                return struc.map(self.apply)
            case _:
                return structural_visitor(struc, self.apply)

    def compose(self, other: Substitution) -> Substitution:
        """`self ∘ other`: the result applies `other` first, then `self`."""
        new_subs = {v: self.apply(t) for v, t in other.subs.items()}
        for v, t in self.subs.items():
            new_subs.setdefault(v, t)
        return Substitution(new_subs)

    def without(self, vars: Iterable[int]) -> Substitution:
        vars = set(vars)
        return Substitution({v: t for v, t in self.subs.items() if v not in vars})

    def __eq__(self, other):
        return isinstance(other, Substitution) and self.subs == other.subs

    def __len__(self):
        return len(self.subs)

    def __repr__(self):
        return f"Substitution({self.subs!r})"


EMPTY = Substitution()


def compose(*substitutions: Substitution) -> Substitution:
    """compose(s3, s2, s1) applies s1, then s2, then s3."""
    result = EMPTY
    for s in substitutions:
        result = result.compose(s)
    return result
