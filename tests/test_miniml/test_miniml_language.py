import pytest

from miniml.errors import NonExhaustiveMatch, ParseError, UnboundVariable, UnificationError
from miniml.lang_frontend import Context
from miniml.printer import show_scheme, show_value


@pytest.fixture(scope="module")
def prelude_ctx():
    ctx = Context()
    ctx.init_default_env()
    return ctx


def test_run_returns_one_result_per_statement():
    ctx = Context()
    results = ctx.run("let x = 2; let rec f n = if n == 0 then 1 else x * f (n - 1); f 10")
    assert [r.name for r in results] == ["x", "f", None]
    assert [show_scheme(r.scheme) for r in results] == ["Int", "Int -> Int", "Int"]
    assert results[-1].value == 1024


def test_definitions_persist():
    ctx = Context()
    ctx.run("let double x = x * 2")
    assert ctx.eval("double 21") == 42
    assert show_scheme(ctx.type_of("double")) == "Int -> Int"


def test_let_polymorphism_across_statements():
    ctx = Context()
    ctx.run(r"let pair = \x y -> [x, y]")
    assert show_value(ctx.eval("pair 1 2")) == "[1, 2]"
    assert show_value(ctx.eval("pair True False")) == "[True, False]"


def test_failed_statement_leaves_session_unchanged():
    ctx = Context()
    ctx.run("let x = 1")
    with pytest.raises(UnificationError):
        ctx.run("let x = True + 1")
    with pytest.raises(NonExhaustiveMatch):
        ctx.run("let y = match [] with | h :: _ -> h")
    assert ctx.eval("x") == 1
    with pytest.raises(UnboundVariable):
        ctx.eval("y")


def test_statements_before_a_failure_are_kept():
    ctx = Context()
    with pytest.raises(UnboundVariable):
        ctx.run("let a = 1; let b = c; let d = 2")
    assert ctx.eval("a") == 1
    with pytest.raises(UnboundVariable):
        ctx.eval("d")


def test_type_checking_gates_evaluation():
    ctx = Context()
    with pytest.raises(UnificationError):
        ctx.eval("if True then 1 else False")


def test_without_type_checking():
    ctx = Context(typecheck=False)
    (result,) = ctx.run("if True then 1 else False")
    assert result.scheme is None
    assert result.value == 1


def test_parse_errors_propagate():
    with pytest.raises(ParseError):
        Context().run("let x =")


def test_load(tmp_path):
    path = tmp_path / "defs.ml"
    path.write_text("let three = 3;\nlet nine = three * three\n")
    ctx = Context()
    results = ctx.load(path)
    assert [r.value for r in results] == [3, 9]
    assert ctx.eval("nine") == 9


@pytest.mark.parametrize(
    "name, type_",
    [
        ("id", "a -> a"),
        ("const", "a -> b -> a"),
        ("compose", "(a -> b) -> (c -> a) -> c -> b"),
        ("not", "Bool -> Bool"),
        ("length", "[a] -> Int"),
        ("map", "(a -> b) -> [a] -> [b]"),
        ("filter", "(a -> Bool) -> [a] -> [a]"),
        ("foldr", "(a -> b -> b) -> b -> [a] -> b"),
        ("foldl", "(a -> b -> a) -> a -> [b] -> a"),
        ("append", "[a] -> [a] -> [a]"),
        ("reverse", "[a] -> [a]"),
        ("sum", "[Int] -> Int"),
        ("null", "[a] -> Bool"),
        ("head", "[a] -> a"),
        ("tail", "[a] -> [a]"),
    ],
)
def test_prelude_types(prelude_ctx, name, type_):
    assert show_scheme(prelude_ctx.type_of(name)) == type_


@pytest.mark.parametrize(
    "src, expected",
    [
        ("length [1, 2, 3]", "3"),
        ("map (\\x -> x * x) [1, 2, 3]", "[1, 4, 9]"),
        ("filter (\\x -> x > 1) [1, 2, 3]", "[2, 3]"),
        ("foldr (\\x acc -> x :: acc) [] [1, 2]", "[1, 2]"),
        ("foldl (\\acc x -> acc - x) 10 [1, 2]", "7"),
        ("append [1] [2, 3]", "[1, 2, 3]"),
        ("reverse [1, 2, 3]", "[3, 2, 1]"),
        ("sum [1, 2, 3, 4]", "10"),
        ("head [5, 6]", "5"),
        ("tail [5, 6]", "[6]"),
        ("null []", "True"),
        ("not (null [1])", "True"),
        ("compose (\\x -> x + 1) (\\x -> x * 2) 5", "11"),
        ("const 1 True", "1"),
        ("map id [True]", "[True]"),
    ],
)
def test_prelude_functions(prelude_ctx, src, expected):
    assert show_value(prelude_ctx.eval(src)) == expected


def test_head_of_empty_list(prelude_ctx):
    with pytest.raises(NonExhaustiveMatch):
        prelude_ctx.eval("head []")


def test_prelude_functions_are_polymorphic(prelude_ctx):
    assert show_scheme(prelude_ctx.type_of("map length")) == "[[a]] -> [Int]"
    assert show_value(prelude_ctx.eval("map length [[1], [], [2, 3]]")) == "[1, 0, 2]"
