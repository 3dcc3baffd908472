from __future__ import annotations

from typing import Optional

from loguru import logger

from miniml import abstract_syntax as ast
from miniml.env import Env, EmptyEnv, UNINITIALIZED
from miniml.errors import (
    UnboundName,
    UninitializedRecursiveBinding,
    NotAFunction,
    NotABoolean,
    NonExhaustiveMatch,
    OperatorDomainError,
)
from miniml.values import Value, Closure, Cons, Nil, NIL, from_list, is_int

REnv = Env[Value]


def empty_env() -> REnv:
    return EmptyEnv()


def eval_top(env: REnv, expr: ast.Expression) -> Value:
    value = evaluate(expr, env)
    logger.debug("evaluated {} => {}", expr, value)
    return value


def eval_toplevel(stmt: ast.ToplevelItem, env: REnv) -> tuple[Value, REnv]:
    match stmt:
        case ast.DefineLet(var, val):
            value = eval_top(env, val)
            return value, env.extend(var, value)
        case ast.DefineLetRec(var, val):
            env = make_letrec_env(var, val, env)
            return env.value, env
        case ast.Expression() as exp:
            return eval_top(env, exp), env
        case _:
            raise NotImplementedError(stmt)


def evaluate(expr: ast.Expression, env: REnv) -> Value:
    # tail positions rebind `expr` and `env` instead of recursing
    while True:
        match expr:
            case ast.Literal(val):
                return val
            case ast.Reference(var):
                return lookup(var, env)
            case ast.BinOp(lhs, rhs, op):
                a = evaluate(lhs, env)
                b = evaluate(rhs, env)
                return apply_operator(op, a, b)
            case ast.Conditional(condition, consequence, alternative):
                cond = evaluate(condition, env)
                if not isinstance(cond, bool):
                    raise NotABoolean(cond)
                expr = consequence if cond else alternative
            case ast.Function(var, body):
                return Closure(var, body, env)
            case ast.Application(fun, arg):
                fval = evaluate(fun, env)
                if not isinstance(fval, Closure):
                    raise NotAFunction(fval)
                aval = evaluate(arg, env)
                env = fval.captured_env.extend(fval.var, aval)
                expr = fval.body
            case ast.Let(var, val, body):
                env = env.extend(var, evaluate(val, env))
                expr = body
            case ast.LetRec(var, val, body):
                env = make_letrec_env(var, val, env)
                expr = body
            case ast.Nil():
                return NIL
            case ast.Cons(head, tail):
                return Cons(evaluate(head, env), evaluate(tail, env))
            case ast.ListLiteral(items):
                return from_list([evaluate(item, env) for item in items])
            case ast.Match(scrutinee, arms):
                value = evaluate(scrutinee, env)
                expr, env = select_arm(value, arms, env)
            case _:
                raise NotImplementedError(expr)


def lookup(var: str, env: REnv) -> Value:
    match env.apply(var):
        case None:
            raise UnboundName(var)
        case val if val is UNINITIALIZED:
            raise UninitializedRecursiveBinding(var)
        case val:
            return val


def make_letrec_env(var: str, val: ast.Expression, env: REnv) -> REnv:
    recenv = env.extend_recursive(var)
    recenv.initialize(evaluate(val, recenv))
    return recenv


def select_arm(
    value: Value, arms: tuple[ast.MatchArm, ...], env: REnv
) -> tuple[ast.Expression, REnv]:
    for arm in arms:
        bindings = match_pattern(arm.pat, value)
        if bindings is not None:
            for name, bound in bindings.items():
                env = env.extend(name, bound)
            return arm.bdy, env
    raise NonExhaustiveMatch(value)


def match_pattern(pat: ast.Pattern, value: Value) -> Optional[dict[str, Value]]:
    match pat, value:
        case ast.BindingPattern(var), _:
            return {var: value}
        case ast.WildcardPattern(), _:
            return {}
        case ast.LiteralPattern(lit), _:
            if type(lit) is type(value) and lit == value:
                return {}
            return None
        case ast.NilPattern(), Nil():
            return {}
        case ast.ConsPattern(hpat, tpat), Cons(head, tail):
            head_bindings = match_pattern(hpat, head)
            if head_bindings is None:
                return None
            tail_bindings = match_pattern(tpat, tail)
            if tail_bindings is None:
                return None
            return head_bindings | tail_bindings
        case _:
            return None


def apply_operator(op: str, a: Value, b: Value) -> Value:
    match op:
        case "+" | "-" | "*" | "<" | "<=" | ">" | ">=" | "==" | "!=":
            if not (is_int(a) and is_int(b)):
                raise OperatorDomainError(op, a, b)
        case "&&" | "||":
            if not (isinstance(a, bool) and isinstance(b, bool)):
                raise OperatorDomainError(op, a, b)
    match op:
        case "+":
            return a + b
        case "-":
            return a - b
        case "*":
            return a * b
        case "<":
            return a < b
        case "<=":
            return a <= b
        case ">":
            return a > b
        case ">=":
            return a >= b
        case "==":
            return a == b
        case "!=":
            return a != b
        case "&&":
            return a and b
        case "||":
            return a or b
        case _:
            raise NotImplementedError(op)
