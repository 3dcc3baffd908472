import pytest

from miniml.env import EmptyEnv, UNINITIALIZED


def test_empty():
    assert EmptyEnv().apply("x") is None


def test_extend_does_not_modify():
    env = EmptyEnv()
    env1 = env.extend("x", 1)
    assert env.apply("x") is None
    assert env1.apply("x") == 1


def test_shadowing():
    env = EmptyEnv().extend("x", 1).extend("y", 2).extend("x", 3)
    assert env.apply("x") == 3
    assert env.apply("y") == 2
    assert list(env.items()) == [("x", 3), ("y", 2)]
    assert list(env.values()) == [3, 2]


def test_map_keeps_order_and_shadowing():
    env = EmptyEnv().extend("x", 1).extend("x", 2)
    doubled = env.map(lambda v: v * 10)
    assert doubled.apply("x") == 20
    assert [frame.value for frame in doubled.frames()] == [20, 10]


def test_recursive_entry():
    env = EmptyEnv().extend_recursive("f")
    assert env.apply("f") is UNINITIALIZED
    env.initialize(42)
    assert env.apply("f") == 42


def test_recursive_entry_initialized_once():
    env = EmptyEnv().extend_recursive("f")
    env.initialize(1)
    with pytest.raises(AssertionError):
        env.initialize(2)
