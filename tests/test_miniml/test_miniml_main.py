import pytest
from typer.testing import CliRunner

from miniml.lang_frontend import Context
from miniml.main import Repl, app

runner = CliRunner()


@pytest.fixture
def repl():
    out = []
    ctx = Context()
    ctx.run("let rec length xs = match xs with | [] -> 0 | _ :: t -> 1 + length t")
    r = Repl(ctx, write=out.append)
    r.out = out
    return r


def test_statement_output(repl):
    assert repl.handle("let x = 41") is True
    assert repl.handle("x + 1")
    assert repl.out == ["x : Int = 41", "- : Int = 42"]


def test_several_statements_on_one_line(repl):
    repl.handle("let a = 1; let b = [a, a]")
    assert repl.out == ["a : Int = 1", "b : [Int] = [1, 1]"]


def test_type_command(repl):
    repl.handle(":type length")
    repl.handle(r":t \x -> x")
    assert repl.out == ["[a] -> Int", "a -> a"]


def test_quit(repl):
    assert repl.handle(":quit") is False
    assert repl.handle(":q") is False


def test_blank_line(repl):
    assert repl.handle("   ") is True
    assert repl.out == []


def test_unknown_command(repl):
    repl.handle(":frobnicate")
    assert repl.out == ["Unknown command :frobnicate; try :help"]


def test_errors_are_reported_and_session_continues(repl):
    repl.handle("1 + True")
    repl.handle("match [] with | h :: _ -> h")
    repl.handle("let = 3")
    repl.handle("length [1, 2]")
    assert repl.out[0] == "Type error: cannot unify Bool with Int"
    assert repl.out[1] == "Runtime error: no pattern matches []"
    assert repl.out[2].startswith("Parse error:")
    assert repl.out[3] == "- : Int = 2"


def test_failed_definition_is_not_bound(repl):
    repl.handle("let y = match [] with | h :: _ -> h")
    repl.handle("y")
    assert repl.out[-1] == "Type error: unbound variable: y"


def test_load_command(repl, tmp_path):
    path = tmp_path / "lib.ml"
    path.write_text("let k = 5;\nk * 2\n")
    repl.handle(f":load {path}")
    assert repl.out == ["k : Int = 5", "- : Int = 10"]


def test_load_missing_file(repl, tmp_path):
    repl.handle(f":load {tmp_path / 'missing.ml'}")
    assert repl.out[0].startswith("Error:")


def test_run_reads_until_eof():
    lines = iter(["let x = 2", "x * x"])
    out = []

    def read(prompt):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    Repl(Context(), read=read, write=out.append).run()
    assert out == ["x : Int = 2", "- : Int = 4"]


def test_cli_run(tmp_path):
    path = tmp_path / "prog.ml"
    path.write_text("let xs = map (\\x -> x + 1) [1, 2];\nsum xs\n")
    result = runner.invoke(app, ["run", str(path)])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["xs : [Int] = [2, 3]", "- : Int = 5"]


def test_cli_run_failure(tmp_path):
    path = tmp_path / "bad.ml"
    path.write_text("let x = 1;\nhead []\n")
    result = runner.invoke(app, ["run", str(path)])
    assert result.exit_code == 1
    assert "x : Int = 1" in result.output
    assert "Runtime error: no pattern matches []" in result.output


def test_cli_run_without_prelude(tmp_path):
    path = tmp_path / "prog.ml"
    path.write_text("map\n")
    result = runner.invoke(app, ["run", "--no-prelude", str(path)])
    assert result.exit_code == 1
    assert "unbound variable: map" in result.output


def test_cli_run_without_typecheck(tmp_path):
    path = tmp_path / "prog.ml"
    path.write_text("if True then 1 else False\n")
    result = runner.invoke(app, ["run", "--no-typecheck", "--no-prelude", str(path)])
    assert result.exit_code == 0
    assert result.output.strip() == "- = 1"


def test_cli_repl():
    result = runner.invoke(app, ["repl"], input="let x = 3\n:type map\nx * 2\n:quit\n")
    assert result.exit_code == 0
    assert "x : Int = 3" in result.output
    assert "(a -> b) -> [a] -> [b]" in result.output
    assert "- : Int = 6" in result.output


def test_cli_defaults_to_repl():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "repl" in result.output
    assert "run" in result.output

    result = runner.invoke(app, [], input="1 + 1\n")
    assert result.exit_code == 0
    assert "- : Int = 2" in result.output
