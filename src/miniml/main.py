"""Typer CLI entrypoints: an interactive REPL and a script runner."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Callable, Optional

import typer
from loguru import logger

from miniml import parser, printer
from miniml.config import InterpreterSettings, load_settings
from miniml.errors import EvaluationError, MinimlError, ParseError, TypeCheckError
from miniml.lang_frontend import Context, StatementResult
from miniml.logging_utils import configure_logging

app = typer.Typer(name="miniml", help="A small ML interpreter", add_completion=False)

HELP = """\
:type EXPR   show the type of EXPR
:load FILE   run the statements in FILE
:quit        leave the REPL
Statements are separated by ';'."""


def describe_error(e: BaseException) -> str:
    match e:
        case ParseError():
            return f"Parse error: {e}"
        case TypeCheckError():
            return f"Type error: {e}"
        case EvaluationError():
            return f"Runtime error: {e}"
        case RecursionError():
            return "Runtime error: maximum recursion depth exceeded"
        case _:
            return f"Error: {e}"


class Repl:
    def __init__(
        self,
        ctx: Context,
        prompt: str = "> ",
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = typer.echo,
    ):
        self.ctx = ctx
        self.prompt = prompt
        self.read = read
        self.write = write

    def run(self):
        while True:
            try:
                line = self.read(self.prompt)
            except EOFError:
                break
            if not self.handle(line):
                break

    def handle(self, line: str) -> bool:
        """Process one line of input. Returns False when the session should end."""
        line = line.strip()
        command, _, arg = line.partition(" ")
        try:
            match command:
                case "":
                    pass
                case ":quit" | ":q":
                    return False
                case ":help" | ":h":
                    self.write(HELP)
                case ":type" | ":t":
                    self.write(printer.show_scheme(self.ctx.type_of(arg)))
                case ":load" | ":l":
                    self.show(self.ctx.load(arg.strip()))
                case _ if command.startswith(":"):
                    self.write(f"Unknown command {command}; try :help")
                case _:
                    self.show(self.ctx.run(line))
        except (MinimlError, RecursionError, OSError) as e:
            logger.debug("statement failed: {!r}", e)
            self.write(describe_error(e))
        return True

    def show(self, results: list[StatementResult]):
        for result in results:
            self.write(printer.show_result(result.name, result.scheme, result.value))


def make_context(settings: InterpreterSettings) -> Context:
    sys.setrecursionlimit(max(sys.getrecursionlimit(), settings.recursion_limit))
    ctx = Context(typecheck=settings.typecheck)
    if settings.prelude:
        ctx.init_default_env()
    return ctx


def _settings(no_prelude: bool, no_typecheck: bool, log_level: Optional[str]) -> InterpreterSettings:
    settings = load_settings(
        prelude=False if no_prelude else None,
        typecheck=False if no_typecheck else None,
        log_level=log_level,
    )
    configure_logging(settings.log_level)
    return settings


NoPrelude = Annotated[bool, typer.Option("--no-prelude", help="Start without the standard prelude.")]
NoTypecheck = Annotated[
    bool, typer.Option("--no-typecheck", help="Evaluate without type checking first.")
]
LogLevel = Annotated[Optional[str], typer.Option("--log-level", help="loguru level name.")]


@app.callback(invoke_without_command=True)
def _default(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        repl()


@app.command()
def repl(
    no_prelude: NoPrelude = False,
    no_typecheck: NoTypecheck = False,
    log_level: LogLevel = None,
) -> None:
    """Run the interactive REPL."""
    settings = _settings(no_prelude, no_typecheck, log_level)
    logger.info("repl.start prelude={} typecheck={}", settings.prelude, settings.typecheck)
    Repl(make_context(settings), settings.prompt).run()


@app.command()
def run(
    file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
    no_prelude: NoPrelude = False,
    no_typecheck: NoTypecheck = False,
    log_level: LogLevel = None,
) -> None:
    """Run every statement of FILE and print the results."""
    settings = _settings(no_prelude, no_typecheck, log_level)
    ctx = make_context(settings)
    try:
        for stmt in parser.parse_script(file.read_text()).statements:
            result = ctx.statement(stmt)
            typer.echo(printer.show_result(result.name, result.scheme, result.value))
    except (MinimlError, RecursionError) as e:
        typer.echo(describe_error(e), err=True)
        raise typer.Exit(code=1) from None


if __name__ == "__main__":
    app()
