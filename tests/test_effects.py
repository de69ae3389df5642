"""Tests for Effect, is_empty_effect and sequence."""

from dataclasses import dataclass

import pytest

from reactive_effects import (
    ActionNotAcceptedError,
    AmbiguousActionError,
    Context,
    Deps,
    Effect,
    IncompatibleActionsError,
    MissingDependencyError,
    actions,
    as_actions,
    effect,
    is_empty_effect,
    no_effect,
    noop,
    sequence,
)


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


def to_left_right(action) -> LeftRight:
    return LeftRight()


def logging_effect(log, label, action_type=None):
    def run(ctx):
        log.append(label)

    return Effect(run, actions=action_type)


class TestIsEmptyEffect:
    """Tests for no-op detection."""

    def test_distinguished_noops(self):
        assert is_empty_effect(None)
        assert is_empty_effect(noop)
        assert is_empty_effect(no_effect)
        assert is_empty_effect(Effect())
        assert is_empty_effect(Effect(noop, actions=Increment))

    def test_other_do_nothing_functions_are_not_empty(self):
        assert not is_empty_effect(do_nothing)
        assert not is_empty_effect(Effect(do_nothing))
        assert not is_empty_effect(Effect(lambda ctx: None))

    def test_rejects_non_callable_target(self):
        with pytest.raises(TypeError, match="callable"):
            Effect("not a function")


class TestEffectInvocation:
    """Tests for running effects with a context."""

    def test_dispatches_declared_action(self, context, recorder):
        save = Effect(lambda ctx: ctx.dispatch(Saved()), actions=Saved)

        save(context)

        assert recorder == [Saved()]

    def test_context_is_narrowed_to_declared_actions(self, context, recorder):
        sneaky = Effect(lambda ctx: ctx.dispatch(Reset()), actions=Saved)

        with pytest.raises(ActionNotAcceptedError):
            sneaky(context)

        assert recorder == []

    def test_context_is_narrowed_to_declared_deps(self, loop):
        seen = []
        ctx = Context(None, loop, Deps(storage="db", clock="utc"))
        reader = Effect(lambda c: seen.append(dict(c.deps)), deps={"clock"})

        reader(ctx)

        assert seen == [{"clock": "utc"}]

    def test_incompatible_context(self, loop, recorder):
        ctx = Context(recorder.append, loop, actions=Increment)
        save = Effect(lambda c: c.dispatch(Saved()), actions=Saved)

        with pytest.raises(IncompatibleActionsError):
            save(ctx)

    def test_missing_deps(self, context):
        reader = Effect(lambda ctx: ctx["storage"], deps={"storage"})

        with pytest.raises(MissingDependencyError):
            reader(context)

    def test_empty_effect_does_not_touch_context(self):
        assert no_effect(None) is None

    def test_decorator(self, context, recorder):
        @effect(actions(Saved, Reset), deps=None)
        def save(ctx):
            ctx.dispatch(Saved())

        assert isinstance(save, Effect)
        assert save.actions == actions(Saved, Reset)
        save(context)
        assert recorder == [Saved()]


class TestRetyping:
    """Tests for widen and lift."""

    def test_widen(self):
        bump = Effect(do_nothing, actions=Increment, deps={"clock"})
        wider = bump.widen(CounterAction, deps={"clock", "storage"})

        assert wider.actions == as_actions(CounterAction)
        assert wider.deps == frozenset({"clock", "storage"})

    def test_widen_keeps_deps_by_default(self):
        bump = Effect(do_nothing, actions=Increment, deps={"clock"})
        assert bump.widen(CounterAction).deps == frozenset({"clock"})

    def test_widen_runs_original(self, context, recorder):
        bump = Effect(lambda ctx: ctx.dispatch(Increment()), actions=Increment)

        bump.widen(CounterAction)(context)

        assert recorder == [Increment()]

    def test_widen_to_incompatible_actions(self):
        with pytest.raises(IncompatibleActionsError):
            Effect(do_nothing, actions=Saved).widen(CounterAction)

    def test_widen_without_required_deps(self):
        with pytest.raises(MissingDependencyError):
            Effect(do_nothing, deps={"storage"}).widen(None, deps={"clock"})

    def test_widen_keeps_emptiness(self):
        assert no_effect.widen(CounterAction).is_empty

    def test_lift_converts_dispatched_actions(self, loop, recorder):
        child = Effect(lambda ctx: ctx.dispatch(Increment(2)), actions=Increment)
        parent = child.lift(Wrapped, converter=Wrapped)

        parent(Context(recorder.append, loop, actions=Wrapped))

        assert parent.actions == actions(Wrapped)
        assert recorder == [Wrapped(Increment(2))]

    def test_lift_requires_converted_compatibility(self):
        child = Effect(do_nothing, actions=Increment)

        with pytest.raises(IncompatibleActionsError):
            child.lift(Saved, converter=Wrapped)

    def test_widen_to_ambiguous_actions(self):
        shared = Effect(do_nothing, actions=LeftRight)

        with pytest.raises(AmbiguousActionError):
            shared.widen(actions(Left, Right))

    def test_lift_to_ambiguous_actions(self):
        child = Effect(do_nothing, actions=Increment)

        with pytest.raises(AmbiguousActionError):
            child.lift(actions(Left, Right), converter=to_left_right)


class TestSequence:
    """Tests for sequence."""

    def test_two_noops_are_empty(self):
        assert is_empty_effect(sequence(noop, noop))
        assert is_empty_effect(sequence(None, no_effect))
        assert sequence(noop, noop).target is noop

    def test_noop_on_either_side(self, context):
        log = []
        eff = logging_effect(log, "e")

        sequence(eff, noop)(context)
        sequence(noop, eff)(context)

        assert log == ["e", "e"]
        assert not is_empty_effect(sequence(eff, no_effect))

    def test_runs_in_order_with_same_context(self, context):
        log = []
        seen = []

        def first(ctx):
            log.append("a")
            seen.append(ctx.loop())

        def second(ctx):
            log.append("b")
            seen.append(ctx.loop())

        sequence(Effect(first), Effect(second))(context)

        assert log == ["a", "b"]
        assert seen[0] is seen[1] is context.loop()

    def test_same_effects_as_direct_calls(self, context, recorder):
        a = Effect(lambda ctx: ctx.dispatch(Increment(1)), actions=Increment)
        b = Effect(lambda ctx: ctx.dispatch(Reset()), actions=Reset)

        a(context)
        b(context)
        direct = list(recorder)
        recorder.clear()

        sequence(a, b)(context)

        assert recorder == direct == [Increment(1), Reset()]

    def test_variadic_left_fold(self, context):
        log = []
        effects = [logging_effect(log, label) for label in "abcd"]

        sequence(*effects)(context)

        assert log == ["a", "b", "c", "d"]

    def test_merges_actions_and_deps(self):
        a = Effect(do_nothing, actions=Increment, deps={"clock"})
        b = Effect(do_nothing, actions=actions(Reset, Increment), deps={"storage"})

        both = sequence(a, b)

        assert both.actions == actions(Increment, Reset)
        assert both.deps == frozenset({"clock", "storage"})

    def test_merged_type_for_empty_sides(self):
        a = Effect(do_nothing, actions=Increment)
        empty = Effect(noop, actions=Reset, deps={"clock"})

        merged = sequence(empty, a)

        assert merged.actions == actions(Reset, Increment)
        assert merged.deps == frozenset({"clock"})

    def test_nested_effects_see_their_own_actions(self, loop, recorder):
        ctx = Context(recorder.append, loop, actions=actions(Increment, Reset, Saved))
        save = Effect(lambda c: c.dispatch(Saved()), actions=Saved)
        bump = Effect(lambda c: c.dispatch(Increment()), actions=Increment)

        sequence(save, bump)(ctx)

        assert recorder == [Saved(), Increment()]

    def test_parts_route_like_direct_calls(self, context, recorder):
        shared = Effect(lambda ctx: ctx.dispatch(LeftRight()), actions=LeftRight)
        left = Effect(lambda ctx: ctx.dispatch(Left()), actions=actions(Left, Right))

        both = sequence(shared, left)
        both(context)

        assert both.actions == actions(Left, Right)
        assert recorder == [LeftRight(), Left()]

    def test_widened_sequence_runs_its_parts(self, context, recorder):
        shared = Effect(lambda ctx: ctx.dispatch(LeftRight()), actions=LeftRight)
        left = Effect(lambda ctx: ctx.dispatch(Left()), actions=actions(Left, Right))

        sequence(shared, left).widen(actions(Left, Right, Saved))(context)

        assert recorder == [LeftRight(), Left()]

    def test_rejects_undeclared_callables(self):
        with pytest.raises(TypeError, match="not an Effect"):
            sequence(do_nothing, noop)
