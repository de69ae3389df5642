"""Tests for Result."""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from reactive_effects import (
    AmbiguousActionError,
    Context,
    Effect,
    IncompatibleActionsError,
    IncompatibleModelError,
    MissingDependencyError,
    Result,
    actions,
    as_actions,
    is_empty_effect,
    no_effect,
)


class ChildState(BaseModel):
    count: int = 0


class ParentState(BaseModel):
    count: int = 0
    label: str = "counter"


class NamedState(BaseModel):
    count: int
    name: str


@dataclass
class Increment:
    amount: int = 1


@dataclass
class Reset:
    pass


@dataclass
class Saved:
    pass


CounterAction = Increment | Reset


@dataclass
class Wrapped:
    inner: CounterAction


@dataclass
class Left:
    pass


@dataclass
class Right:
    pass


@dataclass
class LeftRight(Left, Right):
    pass


def do_nothing(ctx):
    pass


class TestResult:
    """Tests for building and unpacking results."""

    def test_bare_model_gets_empty_effect(self):
        result = Result(5)

        assert result.model == 5
        assert result.effect is no_effect
        assert is_empty_effect(result.effect)

    def test_unpacks_like_a_pair(self):
        bump = Effect(do_nothing, actions=Increment)
        model, eff = Result(5, bump)

        assert model == 5
        assert eff is bump

    def test_requires_an_effect(self):
        with pytest.raises(TypeError, match="not an Effect"):
            Result(5, do_nothing)

    def test_equality(self):
        bump = Effect(do_nothing, actions=Increment)

        assert Result(1, bump) == Result(1, bump)
        assert Result(1) != Result(1, bump)
        assert Result(1) != Result(2)


class TestResultInto:
    """Tests for folding nested results into parent results."""

    def test_same_model_type(self):
        parent = Result(ParentState(count=2)).into(ParentState)
        assert parent.model == ParentState(count=2)

    def test_pydantic_model_conversion(self):
        parent = Result(ChildState(count=3)).into(ParentState)

        assert isinstance(parent.model, ParentState)
        assert parent.model.count == 3
        assert parent.model.label == "counter"

    def test_unconvertible_model(self):
        with pytest.raises(IncompatibleModelError):
            Result(ChildState(count=3)).into(NamedState)

        with pytest.raises(IncompatibleModelError, match="int"):
            Result("text").into(int)

    def test_effect_is_widened(self, context, recorder):
        bump = Effect(lambda ctx: ctx.dispatch(Increment()), actions=Increment)
        parent = Result(1, bump).into(int, actions=CounterAction)

        assert parent.effect.actions == as_actions(CounterAction)
        parent.effect(context)
        assert recorder == [Increment()]

    def test_incompatible_actions(self):
        save = Effect(do_nothing, actions=Saved)

        with pytest.raises(IncompatibleActionsError, match="nested reducer"):
            Result(0, save).into(int, actions=CounterAction)

    def test_ambiguous_parent_actions(self):
        shared = Effect(do_nothing, actions=LeftRight)

        with pytest.raises(AmbiguousActionError):
            Result(0, shared).into(int, actions=actions(Left, Right))

    def test_missing_parent_deps(self):
        reader = Effect(do_nothing, deps={"storage"})

        with pytest.raises(MissingDependencyError, match="dependencies"):
            Result(0, reader).into(int, deps={"clock"})

    def test_parent_with_more_deps(self):
        reader = Effect(do_nothing, deps={"storage"})
        parent = Result(0, reader).into(int, deps={"storage", "clock"})

        assert parent.effect.deps == frozenset({"storage", "clock"})

    def test_converter(self, loop, recorder):
        bump = Effect(lambda ctx: ctx.dispatch(Increment(4)), actions=Increment)
        parent = Result(ChildState(), bump).into(
            ParentState, actions=actions(Wrapped, Saved), converter=Wrapped
        )

        parent.effect(Context(recorder.append, loop, actions=actions(Wrapped, Saved)))

        assert recorder == [Wrapped(Increment(4))]

    def test_empty_effect_stays_empty(self):
        parent = Result(0).into(int, actions=CounterAction, converter=Wrapped)
        assert is_empty_effect(parent.effect)
