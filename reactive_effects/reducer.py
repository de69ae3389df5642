"""Invoking reducers that may or may not produce effects."""

from __future__ import annotations

import logging
import typing
from typing import Any

from .actions import annotated_return
from .deps import require_deps
from .effects import Effect, is_empty_effect
from .result import Result
from .types import EffectHandler, Reducer

logger = logging.getLogger(__name__)


def has_effect(reducer: Reducer[Any, Any]) -> bool | None:
    """
    Whether ``reducer`` is declared to return a model with an effect.

    Decided from the return annotation: ``Result`` or ``tuple`` annotations
    mean yes, any other annotation means no. Unannotated reducers return
    ``None``; their values are inspected instead.
    """
    declared = annotated_return(reducer)
    if declared is None:
        return None
    origin = typing.get_origin(declared) or declared
    if origin is tuple:
        return True
    return isinstance(origin, type) and issubclass(origin, Result)


def split_result(value: Any, declared: bool | None = None) -> tuple[Any, Any]:
    """
    Split a reducer's value into ``(model, effect)``.

    A :class:`Result`, or a pair whose second item is an :class:`Effect`,
    carries an effect. A pair of other values is only split when the reducer
    is ``declared`` to return effects; anything else is a bare model paired
    with ``None``.
    """
    if isinstance(value, Result):
        return value.model, value.effect
    if isinstance(value, tuple) and len(value) == 2:
        model, eff = value
        if isinstance(eff, Effect):
            return model, eff
        if declared and (eff is None or callable(eff)):
            return model, eff
    return value, None


def invoke_reducer(
    reducer: Reducer[Any, Any],
    model: Any,
    action: Any,
    handler: EffectHandler,
    *,
    deps: Any = None,
) -> Any:
    """
    Run ``reducer`` and hand any non-empty effect to ``handler``.

    The handler is called at most once, after the new model is computed.
    Whether the store commits the model before or after running the effect
    is up to the store.

    Args:
        reducer: Function (model, action) -> model, Result or (model, effect).
        model: Current model.
        action: Action being processed.
        handler: Receives the effect when there is one.
        deps: The store's dependency keys; when given, effects needing more
            are rejected before reaching the handler.

    Returns:
        The new model.

    Raises:
        MissingDependencyError: If ``deps`` is given and lacks a dependency
            of the produced effect.

    Example:
        ```python
        new_model = invoke_reducer(reducer, model, Save(), effects.append)
        ```
    """
    value = reducer(model, action)

    declared = None
    if isinstance(value, tuple) and len(value) == 2 and not isinstance(value[1], Effect):
        declared = has_effect(reducer)
    new_model, eff = split_result(value, declared)

    if is_empty_effect(eff):
        return new_model

    if deps is not None and isinstance(eff, Effect):
        require_deps(
            deps,
            eff.deps,
            hint="The store does not provide every dependency this effect reads.",
        )
    logger.debug("Reducer produced %r for %r", eff, action)
    handler(eff)
    return new_model
