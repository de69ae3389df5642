"""
Reactive Effects - typed action dispatch and effect composition for reducers.

Reducers stay pure: they return the new model, optionally paired with an
effect that the store runs afterwards with a context. The context lets the
effect dispatch new actions, drive the store's event loop and read injected
dependencies, restricted to what the effect declared.

Key Features:
- actions / merge_actions: Action sets, compatibility and merging
- Dispatcher: Routing tables validated when they are built
- Context: Dispatch + event loop + deps, narrowable to fewer actions
- Effect / sequence: Deferred procedures and their ordered composition
- Result: (model, effect) pairs foldable into parent reducers
- invoke_reducer: Uniform invocation of reducers with or without effects

Example:
    ```python
    from dataclasses import dataclass
    from pydantic import BaseModel
    from reactive_effects import Context, Result, effect, invoke_reducer

    class Counter(BaseModel):
        count: int = 0

    @dataclass
    class Increment:
        pass

    @dataclass
    class Save:
        pass

    @dataclass
    class Saved:
        pass

    @effect(Saved, deps={"storage"})
    def save(ctx: Context) -> None:
        ctx["storage"].write()
        ctx.dispatch(Saved())

    def reducer(model: Counter, action) -> Result[Counter]:
        match action:
            case Increment():
                return Result(model.model_copy(update={"count": model.count + 1}))
            case Save():
                return Result(model, save)
        return Result(model)

    ctx = Context(store.enqueue, loop, {"storage": storage})
    model = invoke_reducer(reducer, Counter(), Save(), lambda eff: eff(ctx))
    ```
"""

# Action-set algebra
from .actions import (
    ActionSet,
    ConversionRegistry,
    Converter,
    actions,
    are_compatible_actions,
    as_actions,
    as_converter,
    conversions,
    convert_action,
    find_convertible_action,
    identity_converter,
    is_convertible,
    merge_actions,
    register_conversion,
    require_compatible_actions,
    require_unique_actions,
    unregister_conversion,
)

# Dependencies
from .deps import (
    Deps,
    deps_convertible,
    deps_spec,
    merge_deps_spec,
)

# Dispatch and event loop
from .dispatcher import Dispatcher
from .loop import EventLoopHandle

# Context
from .context import Context

# Effects
from .effects import (
    Effect,
    as_effect,
    effect,
    is_empty_effect,
    no_effect,
    noop,
    sequence,
)

# Results and reducers
from .result import Result
from .reducer import (
    has_effect,
    invoke_reducer,
    split_result,
)

# Errors
from .errors import (
    ActionNotAcceptedError,
    AmbiguousActionError,
    ConverterError,
    IncompatibleActionsError,
    IncompatibleModelError,
    InvalidEventLoopError,
    LoopReleasedError,
    MissingDependencyError,
    NoMatchingActionError,
    ReactiveEffectsError,
)

# Types
from .types import (
    DispatchFunc,
    EffectHandler,
    EventLoop,
    Reducer,
)

__version__ = "0.1.0a1"

__all__ = [
    # Actions
    "ActionSet",
    "ConversionRegistry",
    "Converter",
    "actions",
    "are_compatible_actions",
    "as_actions",
    "as_converter",
    "conversions",
    "convert_action",
    "find_convertible_action",
    "identity_converter",
    "is_convertible",
    "merge_actions",
    "register_conversion",
    "require_compatible_actions",
    "require_unique_actions",
    "unregister_conversion",
    # Deps
    "Deps",
    "deps_convertible",
    "deps_spec",
    "merge_deps_spec",
    # Dispatch
    "Dispatcher",
    "EventLoopHandle",
    # Context
    "Context",
    # Effects
    "Effect",
    "as_effect",
    "effect",
    "is_empty_effect",
    "no_effect",
    "noop",
    "sequence",
    # Results
    "Result",
    "has_effect",
    "invoke_reducer",
    "split_result",
    # Errors
    "ActionNotAcceptedError",
    "AmbiguousActionError",
    "ConverterError",
    "IncompatibleActionsError",
    "IncompatibleModelError",
    "InvalidEventLoopError",
    "LoopReleasedError",
    "MissingDependencyError",
    "NoMatchingActionError",
    "ReactiveEffectsError",
    # Types
    "DispatchFunc",
    "EffectHandler",
    "EventLoop",
    "Reducer",
]
