"""
Action sets and the algebra used to compare, route and merge them.

An *action descriptor* is a class, a union of classes (``A | B`` or
``typing.Union[A, B]``), ``object`` or ``typing.Any``. A descriptor ``S`` is
convertible to ``T`` when every ``S`` action can be handed to code expecting a
``T`` action: a subclass converts to its base, a union member to its union,
anything to ``object``, and any pair registered with
:func:`register_conversion` through its transform.

Example:
    ```python
    @dataclass
    class Increment: ...

    @dataclass
    class Reset: ...

    CounterAction = Increment | Reset

    are_compatible_actions(actions(Increment), CounterAction)  # True
    merge_actions(actions(Increment), actions(Reset, Increment))
    # actions(Increment, Reset)
    ```
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Callable, Union

from .errors import (
    ActionNotAcceptedError,
    AmbiguousActionError,
    ConverterError,
    IncompatibleActionsError,
    NoMatchingActionError,
    describe,
)

logger = logging.getLogger(__name__)

_UNION_ORIGINS = (Union, types.UnionType)


def _union_members(descriptor: Any) -> tuple[Any, ...] | None:
    if typing.get_origin(descriptor) in _UNION_ORIGINS:
        return typing.get_args(descriptor)
    return None


def _is_top(descriptor: Any) -> bool:
    return descriptor is object or descriptor is Any


def is_descriptor(value: Any) -> bool:
    """Whether ``value`` can be used as an action descriptor."""
    return (
        isinstance(value, type)
        or _is_top(value)
        or _union_members(value) is not None
    )


def _isinstance(action: Any, descriptor: Any) -> bool:
    if _is_top(descriptor):
        return True
    try:
        return isinstance(action, descriptor)
    except TypeError:
        return False


class ConversionRegistry:
    """Explicit conversions between action descriptors."""

    __slots__ = ("_conversions",)

    def __init__(self) -> None:
        self._conversions: dict[tuple[Any, Any], Callable[[Any], Any]] = {}

    def register(
        self,
        source: Any,
        target: Any,
        fn: Callable[[Any], Any] | None = None,
    ) -> None:
        """
        Declare ``source`` actions convertible to ``target``.

        Args:
            source: Descriptor of the actions being converted.
            target: Descriptor they become.
            fn: Transform applied to the action; defaults to calling
                ``target(action)``.
        """
        self._conversions[(source, target)] = fn if fn is not None else target

    def unregister(self, source: Any, target: Any) -> None:
        self._conversions.pop((source, target), None)

    def find(self, source: Any, target: Any) -> Callable[[Any], Any] | None:
        """Find the transform for ``source -> target``, honouring subclasses."""
        if isinstance(source, type):
            for base in source.__mro__:
                fn = self._conversions.get((base, target))
                if fn is not None:
                    return fn
            return None
        try:
            return self._conversions.get((source, target))
        except TypeError:
            return None

    def __len__(self) -> int:
        return len(self._conversions)


conversions = ConversionRegistry()


def register_conversion(
    source: Any, target: Any, fn: Callable[[Any], Any] | None = None
) -> None:
    """Register an explicit conversion in the global registry."""
    conversions.register(source, target, fn)


def unregister_conversion(source: Any, target: Any) -> None:
    """Remove a conversion from the global registry."""
    conversions.unregister(source, target)


def is_convertible(
    source: Any, target: Any, registry: ConversionRegistry | None = None
) -> bool:
    """Whether ``source`` actions can be used where ``target`` is expected."""
    registry = conversions if registry is None else registry

    if source is target or source == target or _is_top(target):
        return True
    if registry.find(source, target) is not None:
        return True

    members = _union_members(source)
    if members is not None:
        return all(is_convertible(m, target, registry) for m in members)

    members = _union_members(target)
    if members is not None:
        return any(is_convertible(source, m, registry) for m in members)

    if isinstance(source, type) and isinstance(target, type):
        return issubclass(source, target)
    return False


def convert_action(
    action: Any, target: Any, registry: ConversionRegistry | None = None
) -> Any:
    """
    Turn ``action`` into an action of type ``target``.

    Actions that already are ``target`` instances pass through untouched;
    otherwise the registered transform is applied.

    Raises:
        ActionNotAcceptedError: If no conversion exists.
    """
    if _isinstance(action, target):
        return action

    registry = conversions if registry is None else registry
    fn = registry.find(type(action), target)
    if fn is None:
        for member in _union_members(target) or ():
            fn = registry.find(type(action), member)
            if fn is not None:
                break
    if fn is None:
        raise ActionNotAcceptedError(action, (target,))
    return fn(action)


class ActionSet:
    """
    An ordered, deduplicated collection of action descriptors.

    The empty set stands for "no actions". A bare descriptor and a one-element
    set are interchangeable through :func:`as_actions`.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Iterable[Any] = ()) -> None:
        unique: list[Any] = []
        for member in members:
            if member is None or member in unique:
                continue
            unique.append(member)
        self._members: tuple[Any, ...] = tuple(unique)

    @property
    def members(self) -> tuple[Any, ...]:
        return self._members

    def simplify(self) -> ActionSet | Any | None:
        """The bare descriptor for a single member, ``None`` for no members."""
        if not self._members:
            return None
        if len(self._members) == 1:
            return self._members[0]
        return self

    def __iter__(self) -> Iterator[Any]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __bool__(self) -> bool:
        return bool(self._members)

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._members

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ActionSet):
            return self._members == other._members
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"actions({', '.join(describe(m) for m in self._members)})"


EMPTY_ACTIONS = ActionSet()


def actions(*descriptors: Any) -> ActionSet:
    """Declare a set of several action types."""
    return ActionSet(descriptors)


def as_actions(value: Any) -> ActionSet:
    """
    Normalize one descriptor or several into an :class:`ActionSet`.

    ``None`` means no actions; lists, tuples and sets hold several
    descriptors; anything else is a single descriptor.
    """
    if isinstance(value, ActionSet):
        return value
    if value is None:
        return EMPTY_ACTIONS
    if isinstance(value, (tuple, list, set, frozenset)):
        return ActionSet(value)
    return ActionSet((value,))


_INFER = object()


def annotated_return(fn: Callable[..., Any]) -> Any:
    target = fn
    if not (inspect.isfunction(fn) or inspect.ismethod(fn)):
        target = getattr(fn, "__call__", fn)
    try:
        hints = typing.get_type_hints(target)
    except (NameError, TypeError):
        return None
    return hints.get("return")


class Converter:
    """
    A callable transforming actions, aware of its result type.

    The result type is needed to check compatibility before any action is
    dispatched. It comes from ``returns`` (a descriptor, a mapping from input
    descriptors, or a function of the input descriptor) or, when omitted, from
    the callable itself: a class returns itself, a function its return
    annotation.

    Example:
        ```python
        @dataclass
        class ChildAction:
            inner: Increment | Reset

        to_child = Converter(ChildAction)
        to_child.result_type(Increment)  # ChildAction
        ```
    """

    __slots__ = ("_fn", "_returns")

    def __init__(self, fn: Callable[[Any], Any], returns: Any = _INFER) -> None:
        if returns is _INFER:
            returns = fn if isinstance(fn, type) else annotated_return(fn)
            if returns is None:
                raise ConverterError(
                    f"Cannot determine the result type of converter {fn!r}. "
                    f"Annotate its return type or pass returns=."
                )
        self._fn = fn
        self._returns = returns

    @property
    def fn(self) -> Callable[[Any], Any]:
        return self._fn

    def __call__(self, action: Any) -> Any:
        return self._fn(action)

    def result_type(self, action_type: Any) -> Any:
        """The descriptor of ``self(action)`` for an ``action_type`` action."""
        returns = self._returns
        if isinstance(returns, Mapping):
            keys = action_type.__mro__ if isinstance(action_type, type) else (action_type,)
            for key in keys:
                if key in returns:
                    return returns[key]
            raise ConverterError(
                f"Converter {self._fn!r} has no result type for "
                f"{describe(action_type)}."
            )
        if is_descriptor(returns):
            return returns
        return returns(action_type)

    def __repr__(self) -> str:
        return f"Converter({self._fn!r})"


identity_converter = Converter(lambda action: action, returns=lambda t: t)


def as_converter(value: Converter | Callable[[Any], Any] | None) -> Converter:
    """Wrap a callable as :class:`Converter`; ``None`` is the identity."""
    if value is None:
        return identity_converter
    if isinstance(value, Converter):
        return value
    if callable(value):
        return Converter(value)
    raise ConverterError(f"{value!r} is not callable and cannot convert actions.")


def are_compatible_actions(
    first: Any,
    second: Any,
    converter: Converter | Callable[[Any], Any] | None = None,
    registry: ConversionRegistry | None = None,
) -> bool:
    """
    Whether every action of ``first`` is accepted by some action of ``second``.

    With a ``converter``, the converted type of each ``first`` action is
    checked instead.
    """
    conv = as_converter(converter)
    target = as_actions(second)
    return all(
        any(is_convertible(conv.result_type(a), b, registry) for b in target)
        for a in as_actions(first)
    )


def require_compatible_actions(
    first: Any,
    second: Any,
    converter: Converter | Callable[[Any], Any] | None = None,
    *,
    hint: str | None = None,
) -> None:
    """
    Raises:
        IncompatibleActionsError: If ``first`` is not compatible with ``second``.
    """
    if not are_compatible_actions(first, second, converter):
        raise IncompatibleActionsError(as_actions(first), as_actions(second), hint)


def require_unique_actions(
    first: Any,
    second: Any,
    converter: Converter | Callable[[Any], Any] | None = None,
    registry: ConversionRegistry | None = None,
) -> None:
    """
    Check that every action of ``first`` maps to exactly one of ``second``.

    This is what binding a dispatcher for ``first`` on top of one for
    ``second`` requires.

    Raises:
        NoMatchingActionError: If an action is accepted by no member.
        AmbiguousActionError: If an action is accepted by several members.
    """
    conv = as_converter(converter)
    for action_type in as_actions(first):
        find_convertible_action(conv.result_type(action_type), second, registry)


def find_convertible_action(
    action_type: Any,
    candidates: Any,
    registry: ConversionRegistry | None = None,
) -> Any:
    """
    Find the single candidate accepting ``action_type``.

    Raises:
        NoMatchingActionError: If no candidate accepts it.
        AmbiguousActionError: If more than one candidate accepts it.
    """
    pool = as_actions(candidates)
    matches = [c for c in pool if is_convertible(action_type, c, registry)]
    if not matches:
        raise NoMatchingActionError(action_type, pool)
    if len(matches) > 1:
        raise AmbiguousActionError(action_type, pool, matches)
    return matches[0]


def merge_actions(
    first: Any, second: Any, registry: ConversionRegistry | None = None
) -> ActionSet | Any | None:
    """
    Union of two action sets, one representative per convertible family.

    Folds ``second`` into ``first``. An incoming action already accepted by a
    member is dropped; otherwise the members convertible to it are removed
    and it is appended.

    Returns:
        The merged :class:`ActionSet`, the bare descriptor when a single
        member remains, or ``None`` when both sides are empty.
    """
    merged = list(as_actions(first))
    for incoming in as_actions(second):
        if any(is_convertible(incoming, member, registry) for member in merged):
            continue
        merged = [m for m in merged if not is_convertible(m, incoming, registry)]
        merged.append(incoming)
    result = ActionSet(merged)
    logger.debug("Merged %r with %r into %r", first, second, result)
    return result.simplify()
