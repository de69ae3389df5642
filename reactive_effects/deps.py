"""Dependency bags injected into effect contexts."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping
from typing import Any

from .errors import MissingDependencyError

DepsSpec = frozenset


class Deps(Mapping[Hashable, Any]):
    """
    An immutable bag of services keyed by name or type.

    Example:
        ```python
        deps = Deps(http=client, clock=clock)
        deps["http"]                       # client
        deps.narrow({"clock"})             # Deps(clock=...)
        deps.merge(Deps(storage=storage))  # all three services
        ```
    """

    __slots__ = ("_values",)

    def __init__(
        self, values: Mapping[Hashable, Any] | None = None, /, **services: Any
    ) -> None:
        merged: dict[Hashable, Any] = dict(values or {})
        merged.update(services)
        self._values = merged

    def __getitem__(self, key: Hashable) -> Any:
        try:
            return self._values[key]
        except KeyError:
            raise MissingDependencyError((key,), self._values) from None

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def spec(self) -> DepsSpec:
        """The keys this bag provides."""
        return frozenset(self._values)

    def satisfies(self, requirement: Any) -> bool:
        """Whether this bag provides every key of ``requirement``."""
        return deps_convertible(self, requirement)

    def narrow(self, requirement: Any) -> Deps:
        """
        Restrict the bag to the keys of ``requirement``.

        Raises:
            MissingDependencyError: If some required key is not provided.
        """
        required = deps_spec(requirement)
        missing = required - self.spec
        if missing:
            raise MissingDependencyError(missing, self._values)
        return Deps({key: self._values[key] for key in self._values if key in required})

    def merge(self, other: Mapping[Hashable, Any]) -> Deps:
        """A bag with the services of both; ``self`` wins on shared keys."""
        merged = dict(other)
        merged.update(self._values)
        return Deps(merged)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Deps):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        items = ", ".join(f"{key!r}: {value!r}" for key, value in self._values.items())
        return f"Deps({{{items}}})"


def as_deps(value: Mapping[Hashable, Any] | None) -> Deps:
    if isinstance(value, Deps):
        return value
    return Deps(value)


def deps_spec(value: Any) -> DepsSpec:
    """
    Normalize a dependency requirement to the frozenset of its keys.

    Accepts ``None``, a mapping (its keys), a single string or type, or an
    iterable of keys.
    """
    if value is None:
        return frozenset()
    if isinstance(value, frozenset):
        return value
    if isinstance(value, Mapping):
        return frozenset(value)
    if isinstance(value, (str, type)):
        return frozenset((value,))
    if isinstance(value, Iterable):
        return frozenset(value)
    return frozenset((value,))


def deps_convertible(source: Any, target: Any) -> bool:
    """Whether ``source`` provides everything ``target`` requires."""
    return deps_spec(target) <= deps_spec(source)


def merge_deps_spec(first: Any, second: Any) -> DepsSpec:
    return deps_spec(first) | deps_spec(second)


def require_deps(source: Any, target: Any, *, hint: str | None = None) -> None:
    """
    Raises:
        MissingDependencyError: If ``source`` does not provide ``target``.
    """
    missing = deps_spec(target) - deps_spec(source)
    if missing:
        raise MissingDependencyError(missing, deps_spec(source), hint)
