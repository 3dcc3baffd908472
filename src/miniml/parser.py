import functools
import string

import pyparsing as pp

from miniml import abstract_syntax as ast
from miniml.errors import ParseError

pp.ParserElement.enable_packrat()

# name of the synthetic argument introduced by pattern-matching functions;
# `$` cannot start an identifier, so user code never captures it
ARG = "$arg"


def parse_script(src: str) -> ast.Script:
    return _parse(script, src)


def parse_expr(src: str) -> ast.Expression:
    return _parse(expr, src)


def _parse(grammar: pp.ParserElement, src: str):
    try:
        return grammar.parse_string(src, parse_all=True)[0]
    except pp.ParseBaseException as e:
        raise ParseError(e.msg, e.lineno, e.col) from None


### Desugaring


def curry(params: list[ast.Pattern], body: ast.Expression) -> ast.Expression:
    """Turn `\\p1 p2 ... -> body` into nested single-argument functions.
    Parameters that are not plain variables are matched by a one-arm match."""
    for i, pat in reversed(list(enumerate(params))):
        match pat:
            case ast.BindingPattern(var):
                body = ast.Function(var, body)
            case _:
                arg = f"{ARG}{i}"
                arm = ast.MatchArm(pat, body)
                body = ast.Function(arg, ast.Match(ast.Reference(arg), (arm,)))
    return body


def pattern_function(arms: tuple[ast.MatchArm, ...]) -> ast.Function:
    return ast.Function(ARG, ast.Match(ast.Reference(ARG), arms))


def check_linear(s: str, loc: int, patterns: list[ast.Pattern]):
    seen = set()
    for pat in patterns:
        for name in ast.pattern_vars(pat):
            if name in seen:
                raise pp.ParseFatalException(
                    s, loc, f"variable {name} is bound several times in this pattern"
                )
            seen.add(name)


def build_binding(s, loc, t):
    clauses = [(c[0], list(c[1]), c[2]) for c in t]
    name = clauses[0][0]
    for other, _, _ in clauses[1:]:
        if other != name:
            raise pp.ParseFatalException(
                s, loc, f"clauses define both {name} and {other}"
            )

    if len(clauses) == 1:
        _, params, body = clauses[0]
        check_linear(s, loc, params)
        return [name, curry(params, body)]

    arms = []
    for _, params, body in clauses:
        if len(params) != 1:
            raise pp.ParseFatalException(
                s, loc, f"every clause of {name} must take exactly one argument"
            )
        check_linear(s, loc, params)
        arms.append(ast.MatchArm(params[0], body))
    return [name, pattern_function(tuple(arms))]


def build_arm(s, loc, t):
    pat, body = t[0]
    check_linear(s, loc, [pat])
    return ast.MatchArm(pat, body)


def build_lambda(s, loc, t):
    params = list(t[0])
    check_linear(s, loc, params)
    return curry(params, t[1])


def fold_binop(t):
    items = t[0]
    result = items[0]
    for op, rhs in zip(items[1::2], items[2::2]):
        result = ast.BinOp(result, rhs, op)
    return result


def fold_cons(t):
    operands = list(t[0])[::2]
    return functools.reduce(
        lambda tail, head: ast.Cons(head, tail), reversed(operands[:-1]), operands[-1]
    )


def fold_cons_pattern(t):
    operands = list(t)
    return functools.reduce(
        lambda tail, head: ast.ConsPattern(head, tail),
        reversed(operands[:-1]),
        operands[-1],
    )


def list_pattern(t):
    return functools.reduce(
        lambda tail, head: ast.ConsPattern(head, tail), reversed(list(t)), ast.NilPattern()
    )


### Grammar

KEYWORDS = (
    "let",
    "rec",
    "letrec",
    "in",
    "if",
    "then",
    "else",
    "match",
    "with",
    "function",
    "True",
    "False",
)
_ident_init_chars = string.ascii_lowercase + "_"
_ident_body_chars = _ident_init_chars + pp.nums + string.ascii_uppercase + "'"


def keyword(k: str) -> pp.Keyword:
    return pp.Keyword(k, ident_chars=_ident_body_chars)


LET, REC, LETREC, IN, IF, THEN, ELSE, MATCH, WITH, FUNCTION = (
    keyword(k).suppress() for k in KEYWORDS[:10]
)
TRUE, FALSE = keyword("True"), keyword("False")

ARROW = pp.Suppress("->")
BAR = pp.Suppress(pp.Regex(r"\|(?!\|)"))
EQUALS = pp.Suppress(pp.Regex(r"=(?!=)"))
BACKSLASH = pp.Suppress("\\")
LPAR, RPAR = pp.Suppress("("), pp.Suppress(")")
LBRACK, RBRACK = pp.Suppress("["), pp.Suppress("]")

any_keyword = pp.MatchFirst([keyword(k) for k in KEYWORDS])
wildcard = pp.Regex(r"_(?![\w'])")
ident = (~any_keyword + ~wildcard + pp.Word(_ident_init_chars, _ident_body_chars)).set_name(
    "identifier"
)


pattern = pp.Forward()

simple_pattern = (
    wildcard.copy().set_parse_action(lambda: ast.WildcardPattern())
    | pp.Regex(r"-?\d+").set_parse_action(lambda t: ast.LiteralPattern(int(t[0])))
    | (TRUE | FALSE).set_parse_action(lambda t: ast.LiteralPattern(t[0] == "True"))
    | (LBRACK + RBRACK).set_parse_action(lambda: ast.NilPattern())
    | (LBRACK + pp.DelimitedList(pattern, ",") + RBRACK).set_parse_action(list_pattern)
    | ident.copy().set_parse_action(lambda t: ast.BindingPattern(t[0]))
    | (LPAR + pattern + RPAR)
).set_name("pattern")

pattern <<= pp.DelimitedList(simple_pattern, "::").set_parse_action(fold_cons_pattern)


expr = pp.Forward()

integer = pp.Word(pp.nums).set_parse_action(lambda t: ast.Literal(int(t[0])))

boolean = (TRUE | FALSE).set_parse_action(lambda t: ast.Literal(t[0] == "True"))

varref = ident.copy().set_parse_action(lambda t: ast.Reference(t[0]))

nil = (LBRACK + RBRACK).set_parse_action(lambda: ast.Nil())

list_literal = (LBRACK + pp.DelimitedList(expr, ",") + RBRACK).set_parse_action(
    lambda t: ast.ListLiteral(tuple(t))
)

atom = integer | boolean | nil | list_literal | varref | (LPAR + expr + RPAR)

application = pp.OneOrMore(atom).set_parse_action(
    lambda t: functools.reduce(ast.Application, list(t)[1:], t[0])
)

operation = pp.infix_notation(
    application,
    [
        (pp.Literal("*"), 2, pp.OpAssoc.LEFT, fold_binop),
        (pp.Regex(r"\+|-(?!>)"), 2, pp.OpAssoc.LEFT, fold_binop),
        (pp.Literal("::"), 2, pp.OpAssoc.RIGHT, fold_cons),
        (pp.Regex(r"==|!=|<=|>=|<|>"), 2, pp.OpAssoc.LEFT, fold_binop),
        (pp.Literal("&&"), 2, pp.OpAssoc.LEFT, fold_binop),
        (pp.Literal("||"), 2, pp.OpAssoc.LEFT, fold_binop),
    ],
)

function = (BACKSLASH + pp.Group(pp.OneOrMore(simple_pattern)) + ARROW + expr).set_parse_action(
    build_lambda
)

clause = pp.Group(ident + pp.Group(pp.ZeroOrMore(simple_pattern)) + EQUALS + expr)
binding = pp.DelimitedList(clause, BAR).set_parse_action(build_binding)

rec = (LET + REC) | LETREC

let = (LET + binding + IN + expr).set_parse_action(lambda t: ast.Let(t[0], t[1], t[2]))

letrec = (rec + binding + IN + expr).set_parse_action(
    lambda t: ast.LetRec(t[0], t[1], t[2])
)

conditional = (IF + expr + THEN + expr + ELSE + expr).set_parse_action(
    lambda t: ast.Conditional(t[0], t[1], t[2])
)

match_arm = pp.Group(pattern + ARROW + expr).set_parse_action(build_arm)
match_arms = pp.Opt(BAR) + pp.DelimitedList(match_arm, BAR)

match_expr = (MATCH + expr + WITH + match_arms).set_parse_action(
    lambda t: ast.Match(t[0], tuple(t[1:]))
)

pattern_lambda = (FUNCTION + match_arms).set_parse_action(
    lambda t: pattern_function(tuple(t))
)

expr <<= function | letrec | let | conditional | match_expr | pattern_lambda | operation


deflet = (LET + binding).set_parse_action(lambda t: ast.DefineLet(t[0], t[1]))

defletrec = (rec + binding).set_parse_action(lambda t: ast.DefineLetRec(t[0], t[1]))

top_item = expr | defletrec | deflet

script = pp.Opt(pp.DelimitedList(top_item, ";", allow_trailing_delim=True)).set_parse_action(
    lambda t: ast.Script(tuple(t))
)

script.ignore(pp.python_style_comment)
