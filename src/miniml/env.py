from __future__ import annotations
import abc
import dataclasses
from typing import TypeVar, Optional, Generic, Callable, Iterator

T = TypeVar("T")
U = TypeVar("U")

UNINITIALIZED = object()


class Env(abc.ABC, Generic[T]):
    @abc.abstractmethod
    def apply(self, identifier: str) -> Optional[T]:
        """Value bound to `identifier` in the innermost frame that binds it, or
        None. A recursive frame that is not filled yet yields UNINITIALIZED."""

    def extend(self, identifier: str, value: T) -> Env[T]:
        """New environment with one more frame; `self` is unchanged."""
        return EnvEntry(identifier, value, self)

    def extend_recursive(self, identifier: str) -> RecursiveEntry[T]:
        """Frame whose value is filled in later by `RecursiveEntry.initialize`."""
        return RecursiveEntry(identifier, UNINITIALIZED, self)

    def frames(self) -> Iterator[EnvEntry[T]]:
        env = self
        while isinstance(env, EnvEntry):
            yield env
            env = env.saved_env

    def items(self) -> Iterator[tuple[str, T]]:
        """Visible bindings, innermost first. Shadowed bindings are skipped."""
        seen = set()
        for frame in self.frames():
            if frame.ident not in seen:
                seen.add(frame.ident)
                yield frame.ident, frame.value

    def values(self) -> Iterator[T]:
        return (v for _, v in self.items())

    def map(self, f: Callable[[T], U]) -> Env[U]:
        env = EmptyEnv()
        for frame in reversed(list(self.frames())):
            env = env.extend(frame.ident, f(frame.value))
        return env


class EmptyEnv(Env):
    def apply(self, identifier: str) -> Optional[T]:
        return None


@dataclasses.dataclass(eq=False)
class EnvEntry(Env, Generic[T]):
    ident: str
    value: T
    saved_env: Env

    def apply(self, identifier: str) -> Optional[T]:
        for frame in self.frames():
            if frame.ident == identifier:
                return frame.value
        return None


@dataclasses.dataclass(eq=False)
class RecursiveEntry(EnvEntry, Generic[T]):
    def initialize(self, value: T):
        assert self.value is UNINITIALIZED
        self.value = value
