from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Optional

from loguru import logger

from miniml import abstract_syntax as ast, interpreter, parser, prelude, type_checker
from miniml.type_impls import Scheme
from miniml.values import Value


@dataclasses.dataclass
class StatementResult:
    name: Optional[str]
    scheme: Optional[Scheme]
    value: Value


class Context:
    """A session: the type environment and the runtime environment that
    successive top-level statements build up.

    A statement either succeeds completely or leaves the context unchanged.
    """

    def __init__(
        self,
        env: Optional[interpreter.REnv] = None,
        type_env: Optional[type_checker.TypeEnv] = None,
        typecheck: bool = True,
    ):
        self.env = env if env is not None else interpreter.empty_env()
        self.type_env = type_env if type_env is not None else type_checker.empty_tenv()
        self.typecheck = typecheck

    def init_default_env(self):
        self.run(prelude.prelude_script())

    def statement(self, stmt: ast.ToplevelItem) -> StatementResult:
        scheme, type_env = None, self.type_env
        if self.typecheck:
            scheme, type_env = type_checker.check_toplevel(stmt, self.type_env)

        value, env = interpreter.eval_toplevel(stmt, self.env)

        self.type_env, self.env = type_env, env
        match stmt:
            case ast.DefineLet(var) | ast.DefineLetRec(var):
                logger.debug("defined {}", var)
                return StatementResult(var, scheme, value)
            case _:
                return StatementResult(None, scheme, value)

    def run(self, src: str | ast.Script) -> list[StatementResult]:
        if not isinstance(src, ast.Script):
            src = parser.parse_script(src)
        return [self.statement(stmt) for stmt in src.statements]

    def eval(self, src: str | ast.Expression) -> Value:
        if not isinstance(src, ast.Expression):
            src = parser.parse_expr(src)
        return self.statement(src).value

    def type_of(self, src: str | ast.Expression) -> Scheme:
        if not isinstance(src, ast.Expression):
            src = parser.parse_expr(src)
        return type_checker.infer_top(self.type_env, src)

    def load(self, path: str | Path) -> list[StatementResult]:
        logger.debug("loading {}", path)
        return self.run(Path(path).read_text())
