"""Reducer results pairing a new model with an effect."""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

from .actions import Converter, require_compatible_actions
from .deps import require_deps
from .effects import Effect, as_effect
from .errors import IncompatibleModelError

M = TypeVar("M")

_UNSET: Any = object()

ACTIONS_HINT = (
    "The parent's actions must include those of the nested effect. This may "
    "occur when returning effects from a nested reducer whose action was not "
    "added to the parent action union."
)
DEPS_HINT = (
    "This may occur when returning effects from a nested reducer whose "
    "dependencies were not added to the parent result."
)


def convert_model(model: Any, model_type: Any) -> Any:
    """
    Convert ``model`` to ``model_type``.

    Instances pass through; pydantic models are validated into the target
    model class.

    Raises:
        IncompatibleModelError: If the model cannot be converted.
    """
    if model_type is object or model_type is Any:
        return model
    if isinstance(model_type, type):
        if isinstance(model, model_type):
            return model
        if issubclass(model_type, BaseModel):
            try:
                return model_type.model_validate(model, from_attributes=True)
            except ValidationError as exc:
                raise IncompatibleModelError(model, model_type) from exc
    raise IncompatibleModelError(model, model_type)


class Result(Generic[M]):
    """
    The value of a reducer that produces an effect.

    A bare model is paired with the empty effect. Results unpack like a
    ``(model, effect)`` tuple.

    Example:
        ```python
        def reducer(model: Counter, action) -> Result[Counter]:
            match action:
                case Save():
                    return Result(model, save_effect)
            return Result(model)
        ```
    """

    __slots__ = ("_model", "_effect")

    def __init__(self, model: M, effect: Effect | None = None) -> None:
        self._model = model
        self._effect = as_effect(effect)

    @property
    def model(self) -> M:
        return self._model

    @property
    def effect(self) -> Effect:
        return self._effect

    def __iter__(self) -> Iterator[Any]:
        return iter((self._model, self._effect))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Result):
            return self._model == other._model and self._effect is other._effect
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def into(
        self,
        model_type: Any = object,
        actions: Any = None,
        deps: Any = _UNSET,
        converter: Converter | Callable[[Any], Any] | None = None,
    ) -> Result[Any]:
        """
        Fold this result into a parent reducer's result type.

        Args:
            model_type: The parent's model type.
            actions: The parent's actions.
            deps: The parent's dependency keys. Defaults to the effect's own.
            converter: Wraps the nested actions into parent actions.

        Raises:
            IncompatibleModelError: If the model does not convert.
            IncompatibleActionsError: If the effect's actions are not
                accepted by the parent's.
            AmbiguousActionError: If one of them is accepted by several of
                the parent's actions.
            MissingDependencyError: If the parent lacks a dependency of the
                effect.
        """
        model = convert_model(self._model, model_type)
        deps = self._effect.deps if deps is _UNSET else deps
        require_compatible_actions(
            self._effect.actions, actions, converter, hint=ACTIONS_HINT
        )
        require_deps(deps, self._effect.deps, hint=DEPS_HINT)

        if converter is None:
            effect = self._effect.widen(actions, deps)
        else:
            effect = self._effect.lift(actions, deps, converter)
        return Result(model, effect)

    def __repr__(self) -> str:
        return f"Result({self._model!r}, {self._effect!r})"
