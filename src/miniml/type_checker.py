"""Hindley-Milner type inference (Algorithm W).

`TypeInference.infer` walks an expression and returns its type together
with the substitution accumulated along the way. Let-bound names are
generalized; lambda parameters, pattern variables and a recursive binding
inside its own definition stay monomorphic.
"""

from __future__ import annotations

import itertools
from typing import Callable

from loguru import logger

from miniml import abstract_syntax as ast
from miniml.env import EmptyEnv
from miniml.errors import UnboundVariable
from miniml.type_impls import (
    TVar,
    TArr,
    TList,
    Type,
    Scheme,
    TypeEnv,
    INT,
    BOOL,
    free_type_vars,
    type_vars_in_order,
)
from miniml.unification.substitution import Substitution, EMPTY, compose
from miniml.unification.unify import unify

OPERATOR_TYPES: dict[str, tuple[Type, Type, Type]] = {
    "+": (INT, INT, INT),
    "-": (INT, INT, INT),
    "*": (INT, INT, INT),
    "<": (INT, INT, BOOL),
    ">": (INT, INT, BOOL),
    "<=": (INT, INT, BOOL),
    ">=": (INT, INT, BOOL),
    "==": (INT, INT, BOOL),
    "!=": (INT, INT, BOOL),
    "&&": (BOOL, BOOL, BOOL),
    "||": (BOOL, BOOL, BOOL),
}


def empty_tenv() -> TypeEnv:
    return EmptyEnv()


def generalize(tenv: TypeEnv, t: Type) -> Scheme:
    env_vars = free_type_vars(tenv)
    return Scheme(tuple(v for v in type_vars_in_order(t) if v not in env_vars), t)


def instantiate(scheme: Scheme, fresh: Callable[[], TVar]) -> Type:
    if scheme.is_monomorphic():
        return scheme.body
    return Substitution({v: fresh() for v in scheme.vars}).apply(scheme.body)


def normalize(scheme: Scheme) -> Scheme:
    """Rename quantified variables to the smallest ids that are not free in
    the scheme, in order of first appearance."""
    taken = free_type_vars(scheme)
    ids = (i for i in itertools.count() if i not in taken)
    quantified = set(scheme.vars)
    renaming = {
        v: next(ids) for v in type_vars_in_order(scheme.body) if v in quantified
    }
    body = Substitution({v: TVar(i) for v, i in renaming.items()}).apply(scheme.body)
    return Scheme(tuple(renaming.values()), body)


class TypeInference:
    """One inference run. Owns the counter for fresh type variables."""

    def __init__(self, start: int = 0):
        self.counter = itertools.count(start)

    def fresh(self) -> TVar:
        return TVar(next(self.counter))

    def infer(self, expr: ast.Expression, tenv: TypeEnv) -> tuple[Type, Substitution]:
        match expr:
            case ast.Literal(bool()):
                return BOOL, EMPTY

            case ast.Literal(int()):
                return INT, EMPTY

            case ast.Reference(var):
                scheme = tenv.apply(var)
                if scheme is None:
                    raise UnboundVariable(var)
                return instantiate(scheme, self.fresh), EMPTY

            case ast.Function(var, body):
                tv = self.fresh()
                t_body, s = self.infer(body, tenv.extend(var, Scheme.mono(tv)))
                return TArr(s.apply(tv), t_body), s

            case ast.Application(fun, arg):
                t_fun, s1 = self.infer(fun, tenv)
                t_arg, s2 = self.infer(arg, s1.apply(tenv))
                tv = self.fresh()
                s3 = unify(s2.apply(t_fun), TArr(t_arg, tv))
                return s3.apply(tv), compose(s3, s2, s1)

            case ast.Let(var, val, body):
                t_val, s1 = self.infer(val, tenv)
                tenv1 = s1.apply(tenv)
                scheme = generalize(tenv1, s1.apply(t_val))
                t_body, s2 = self.infer(body, tenv1.extend(var, scheme))
                return t_body, compose(s2, s1)

            case ast.LetRec(var, val, body):
                scheme, s1 = self.infer_recursive(var, val, tenv)
                t_body, s2 = self.infer(body, s1.apply(tenv).extend(var, scheme))
                return t_body, compose(s2, s1)

            case ast.Conditional(condition, consequence, alternative):
                t_cond, s = self.infer(condition, tenv)
                s = compose(unify(t_cond, BOOL), s)
                t_then, s_then = self.infer(consequence, s.apply(tenv))
                s = compose(s_then, s)
                t_else, s_else = self.infer(alternative, s.apply(tenv))
                s = compose(s_else, s)
                s_branches = unify(s.apply(t_then), t_else)
                return s_branches.apply(t_else), compose(s_branches, s)

            case ast.BinOp(lhs, rhs, op):
                t_left, t_right, t_res = OPERATOR_TYPES[op]
                t_lhs, s = self.infer(lhs, tenv)
                s = compose(unify(t_lhs, t_left), s)
                t_rhs, s_rhs = self.infer(rhs, s.apply(tenv))
                s = compose(s_rhs, s)
                s = compose(unify(t_rhs, t_right), s)
                return t_res, s

            case ast.Nil():
                return TList(self.fresh()), EMPTY

            case ast.Cons(head, tail):
                t_head, s1 = self.infer(head, tenv)
                t_tail, s2 = self.infer(tail, s1.apply(tenv))
                s3 = unify(TList(s2.apply(t_head)), t_tail)
                return s3.apply(t_tail), compose(s3, s2, s1)

            case ast.ListLiteral(items):
                t_elem = self.fresh()
                s = EMPTY
                for item in items:
                    t_item, s_item = self.infer(item, s.apply(tenv))
                    s = compose(s_item, s)
                    s = compose(unify(s.apply(t_elem), t_item), s)
                return TList(s.apply(t_elem)), s

            case ast.Match(scrutinee, arms):
                return self.infer_match(scrutinee, arms, tenv)

            case _:
                raise NotImplementedError(expr)

    def infer_recursive(
        self, var: str, val: ast.Expression, tenv: TypeEnv
    ) -> tuple[Scheme, Substitution]:
        """Type a recursive binding. `var` is monomorphic inside `val` and
        generalized only for the code that follows the binding."""
        tv = self.fresh()
        t_val, s1 = self.infer(val, tenv.extend(var, Scheme.mono(tv)))
        s2 = unify(s1.apply(tv), t_val)
        s = compose(s2, s1)
        return generalize(s.apply(tenv), s.apply(tv)), s

    def infer_match(
        self, scrutinee: ast.Expression, arms: tuple[ast.MatchArm, ...], tenv: TypeEnv
    ) -> tuple[Type, Substitution]:
        t_scrutinee, s = self.infer(scrutinee, tenv)
        t_result = self.fresh()
        for arm in arms:
            bindings, s_pat = self.infer_pattern(arm.pat, s.apply(t_scrutinee))
            s = compose(s_pat, s)
            arm_env = s.apply(tenv)
            for name, t in bindings:
                arm_env = arm_env.extend(name, Scheme.mono(s.apply(t)))
            t_body, s_body = self.infer(arm.bdy, arm_env)
            s = compose(s_body, s)
            s = compose(unify(s.apply(t_result), t_body), s)
        return s.apply(t_result), s

    def infer_pattern(
        self, pat: ast.Pattern, t: Type
    ) -> tuple[list[tuple[str, Type]], Substitution]:
        """Variables bound by `pat` when it is matched against a value of type `t`."""
        match pat:
            case ast.BindingPattern(var):
                return [(var, t)], EMPTY
            case ast.WildcardPattern():
                return [], EMPTY
            case ast.LiteralPattern(val):
                t_lit, _ = self.infer(ast.Literal(val), EmptyEnv())
                return [], unify(t, t_lit)
            case ast.NilPattern():
                return [], unify(t, TList(self.fresh()))
            case ast.ConsPattern(head, tail):
                t_elem = self.fresh()
                s1 = unify(t, TList(t_elem))
                head_bindings, s2 = self.infer_pattern(head, s1.apply(t_elem))
                s = compose(s2, s1)
                tail_bindings, s3 = self.infer_pattern(tail, s.apply(TList(t_elem)))
                return head_bindings + tail_bindings, compose(s3, s)
            case _:
                raise NotImplementedError(pat)


def infer_top(tenv: TypeEnv, expr: ast.Expression) -> Scheme:
    """Principal type scheme of a top-level expression."""
    inference = new_inference(tenv)
    t, s = inference.infer(expr, tenv)
    scheme = normalize(generalize(s.apply(tenv), s.apply(t)))
    logger.debug("inferred {} : {}", expr, scheme)
    return scheme


def check_toplevel(
    stmt: ast.ToplevelItem, tenv: TypeEnv
) -> tuple[Scheme, TypeEnv]:
    match stmt:
        case ast.DefineLet(var, val):
            scheme = infer_top(tenv, val)
            return scheme, tenv.extend(var, scheme)
        case ast.DefineLetRec(var, val):
            scheme, s = new_inference(tenv).infer_recursive(var, val, tenv)
            scheme = normalize(s.apply(scheme))
            logger.debug("inferred recursive {} : {}", var, scheme)
            return scheme, tenv.extend(var, scheme)
        case ast.Expression() as exp:
            return infer_top(tenv, exp), tenv
        case _:
            raise NotImplementedError(stmt)


def new_inference(tenv: TypeEnv) -> TypeInference:
    return TypeInference(start=max(free_type_vars(tenv), default=-1) + 1)
