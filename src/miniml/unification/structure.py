from functools import singledispatch
from typing import Any, Callable


@singledispatch
def structural_visitor(struc: Any, visitor: Callable[[Any], Any], reducer=None) -> Any:
    """Visit the children of a type term.

    Compound types register an implementation that calls `visitor` on each
    child. Without a `reducer` the implementation rebuilds a term of the same
    kind from the visited children; with one it returns `reducer` applied to
    an iterator over the visited children.

    Types without children (variables, constructors) use this default: they
    are returned unchanged, or reduced over nothing.
    """
    if reducer is None:
        return struc
    return reducer(iter(()))
