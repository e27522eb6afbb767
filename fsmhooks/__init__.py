"""fsmhooks: lifecycle hooks for finite state machines

Lets application code observe a state machine (entering a state,
transitioning, exiting a state, and the same phases for events) without
changing the machine itself.

Responsibilities:
    - Hook registration keyed by lifecycle phase and state/event name
    - Wildcard matching on phase and name
    - Synchronous, ordered dispatch of lifecycle events

Cross-cutting Concerns:
    Thread Safety:
        - Registration and dispatch may be called from any thread
        - Hooks run on the thread that fires the event

    Error Handling:
        - Invalid names fail at registration time
        - Hook exceptions propagate to the caller of the transition
"""

from .core import (
    ANY_EVENT,
    ANY_STATE,
    FSMError,
    HookType,
    InvalidCallbackNameError,
    LifecycleEvent,
    Observer,
    StateMachine,
    Transition,
    TransitionError,
    TransitionEvent,
)

__version__ = "0.1.0"

__all__ = [
    "ANY_EVENT",
    "ANY_STATE",
    "FSMError",
    "HookType",
    "InvalidCallbackNameError",
    "LifecycleEvent",
    "Observer",
    "StateMachine",
    "Transition",
    "TransitionError",
    "TransitionEvent",
]
