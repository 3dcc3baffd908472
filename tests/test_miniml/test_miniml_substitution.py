import pytest

from miniml.env import EmptyEnv
from miniml.type_impls import TVar, TArr, TList, Scheme, INT, BOOL, free_type_vars
from miniml.unification.substitution import Substitution, compose, EMPTY
from miniml.unification.unify import unify

a, b, c, d = TVar(0), TVar(1), TVar(2), TVar(3)


def test_apply_empty_subst():
    assert Substitution().apply(a) == a


def test_apply_to_tvar():
    assert Substitution.singleton(0, INT).apply(a) == INT
    assert Substitution.singleton(0, INT).apply(b) == b


def test_apply_recurses_into_structure():
    subst = Substitution({0: INT, 1: BOOL})
    assert subst.apply(TArr(a, TList(b))) == TArr(INT, TList(BOOL))


def test_apply_leaves_quantified_vars_alone():
    subst = Substitution({0: INT, 1: BOOL})
    scheme = Scheme((0,), TArr(a, b))
    assert subst.apply(scheme) == Scheme((0,), TArr(a, BOOL))


def test_apply_to_environment():
    tenv = EmptyEnv().extend("x", Scheme.mono(a)).extend("y", Scheme((1,), b))
    result = Substitution({0: INT, 1: BOOL}).apply(tenv)
    assert result.apply("x") == Scheme.mono(INT)
    assert result.apply("y") == Scheme((1,), b)
    # the input environment is untouched
    assert tenv.apply("x") == Scheme.mono(a)


def test_compose_applies_right_operand_first():
    s1 = Substitution.singleton(0, b)
    s2 = Substitution.singleton(1, INT)
    composed = compose(s2, s1)
    assert composed.apply(a) == INT
    assert composed.apply(b) == INT
    assert composed == Substitution({0: INT, 1: INT})


def test_compose_keeps_left_mappings_not_in_right_domain():
    s1 = Substitution.singleton(0, INT)
    s2 = Substitution({0: BOOL, 1: BOOL})
    assert compose(s2, s1) == Substitution({0: INT, 1: BOOL})


def test_compose_with_empty():
    s = Substitution.singleton(0, TList(b))
    assert compose(EMPTY, s) == s
    assert compose(s, EMPTY) == s


@pytest.mark.parametrize(
    "t",
    [a, b, c, d, INT, TArr(a, TArr(b, c)), TList(TArr(d, a)), TArr(TList(c), d)],
)
def test_composition_is_associative(t):
    s1 = unify(a, TArr(b, c))
    s2 = unify(c, TList(d))
    s3 = unify(d, INT)

    left = compose(s3, compose(s2, s1))
    right = compose(compose(s3, s2), s1)
    assert left.apply(t) == right.apply(t)
    assert left.apply(t) == s3.apply(s2.apply(s1.apply(t)))


def test_free_type_vars():
    assert free_type_vars(INT) == set()
    assert free_type_vars(TArr(a, TList(b))) == {0, 1}
    assert free_type_vars(Scheme((0,), TArr(a, b))) == {1}

    tenv = EmptyEnv().extend("f", Scheme((0,), TArr(a, c))).extend("x", Scheme.mono(d))
    assert free_type_vars(tenv) == {2, 3}
