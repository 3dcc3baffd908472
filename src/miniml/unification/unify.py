from loguru import logger

from miniml.errors import InfiniteType, UnificationError
from miniml.type_impls import TVar, TCon, TArr, TList, Type
from miniml.unification.structure import structural_visitor
from miniml.unification.substitution import Substitution, EMPTY


def unify(a: Type, b: Type) -> Substitution:
    """Most general substitution that makes `a` and `b` equal."""
    match a, b:
        case TVar(var), _:
            return bind(var, b)
        case _, TVar(var):
            return bind(var, a)
        case TCon(x), TCon(y):
            if x != y:
                raise UnificationError(a, b)
            return EMPTY
        case TArr(a1, b1), TArr(a2, b2):
            s1 = unify(a1, a2)
            s2 = unify(s1.apply(b1), s1.apply(b2))
            return s2.compose(s1)
        case TList(e1), TList(e2):
            return unify(e1, e2)
        case _:
            logger.debug("constructor mismatch: {} vs {}", a, b)
            raise UnificationError(a, b)


def bind(var: int, struc: Type) -> Substitution:
    if struc == TVar(var):
        return EMPTY
    if occurs(var, struc):
        raise InfiniteType(var, struc)
    return Substitution.singleton(var, struc)


def occurs(var: int, struc: Type) -> bool:
    match struc:
        case TVar(v):
            return v == var
        case _:
            return structural_visitor(struc, lambda x: occurs(var, x), reducer=any)
