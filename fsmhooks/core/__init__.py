"""
Core package: hook registry, lifecycle events and a reference machine.

Architecture:
- events.py defines hook types and the values handed to hooks
- observer.py stores hooks and dispatches lifecycle events
- state_machine.py emits lifecycle events for each fired transition

Design Patterns:
- Observer Pattern for lifecycle notifications
- Registry Pattern for hook lookup
"""

# Import order matters to avoid circular dependencies
from .errors import FSMError, InvalidCallbackNameError, TransitionError
from .events import ANY_EVENT, ANY_STATE, HookType, LifecycleEvent, TransitionEvent
from .transitions import Transition
from .observer import Observer
from .state_machine import StateMachine

__all__ = [
    # Errors
    "FSMError",
    "InvalidCallbackNameError",
    "TransitionError",
    # Events
    "ANY_EVENT",
    "ANY_STATE",
    "HookType",
    "LifecycleEvent",
    "TransitionEvent",
    # Components
    "Transition",
    "Observer",
    "StateMachine",
]
