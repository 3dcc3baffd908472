from __future__ import annotations

import string
from typing import Optional

from miniml.type_impls import Type, TVar, TCon, TArr, TList, Scheme
from miniml.values import Value, Closure, Cons, Nil, is_list


def var_name(index: int) -> str:
    letter = string.ascii_lowercase[index % 26]
    suffix = index // 26
    return f"{letter}{suffix}" if suffix else letter


def show_type(t: Type, names: Optional[dict[int, str]] = None) -> str:
    """Render a type. Variables are named a, b, c, ... in order of first
    appearance; pass `names` to share the naming between several types."""
    if names is None:
        names = {}
    match t:
        case TVar(var):
            if var not in names:
                names[var] = var_name(len(names))
            return names[var]
        case TCon(name):
            return name
        case TArr(TArr() as arg, res):
            return f"({show_type(arg, names)}) -> {show_type(res, names)}"
        case TArr(arg, res):
            return f"{show_type(arg, names)} -> {show_type(res, names)}"
        case TList(elem):
            return f"[{show_type(elem, names)}]"
        case _:
            raise NotImplementedError(t)


def show_types(*types: Type) -> tuple[str, ...]:
    names = {}
    return tuple(show_type(t, names) for t in types)


def show_scheme(scheme: Scheme, explicit: bool = False) -> str:
    names = {}
    body = show_type(scheme.body, names)
    if not (explicit and scheme.vars):
        return body
    quantified = " ".join(names[v] for v in scheme.vars if v in names)
    return f"forall {quantified}. {body}"


def show_value(value: Value) -> str:
    match value:
        case bool():
            return "True" if value else "False"
        case int():
            return str(value)
        case Nil():
            return "[]"
        case Cons() if is_list(value):
            return "[" + ", ".join(map(show_value, value)) + "]"
        case Cons(head, tail):
            return f"({show_value(head)} :: {show_value(tail)})"
        case Closure():
            return "<fun>"
        case _:
            return repr(value)


def show_result(name: Optional[str], scheme: Optional[Scheme], value: Value) -> str:
    """One line of REPL output: `name : type = value`."""
    out = name or "-"
    if scheme is not None:
        out += f" : {show_scheme(scheme)}"
    return f"{out} = {show_value(value)}"
