# fsmhooks/core/observer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import re
from collections import defaultdict
from functools import partial
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from fsmhooks.core.errors import InvalidCallbackNameError
from fsmhooks.core.events import ANY_EVENT, ANY_STATE, PHASES, HookType, LifecycleEvent, TransitionEvent
from fsmhooks.runtime.concurrency import ThreadSafeAttribute, get_lock, with_lock

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]
HookTable = Dict[HookType, Dict[str, List[Callback]]]

_SHORTCUT_PATTERN = re.compile(r"^on_(enter|transition|exit)_(\w+)$")


def _hook_table() -> HookTable:
    return defaultdict(lambda: defaultdict(list))


class Observer:
    """
    Registry of hooks listening to a state machine's lifecycle events.

    Hooks are stored per (hook type, name) bucket. ``dispatch`` is called by
    the machine for every lifecycle event and fires the exact bucket first,
    then the wildcard buckets.

    Runtime Invariants:
    - Callbacks within a bucket fire in registration order, duplicates included.
    - A failed registration leaves the hook table untouched.
    - Hooks registered while a dispatch is running do not fire in that dispatch.

    Example:
        observer = Observer(machine)
        observer.on_enter("red", lambda event, *data: print(event.to_state))
    """

    machine = ThreadSafeAttribute()
    hooks = ThreadSafeAttribute()

    def __init__(self, machine: Any) -> None:
        """
        :param machine: The owning machine. It must expose ``state_names``,
            ``event_names`` and ``subscribe``.
        """
        self._lock = get_lock()
        self.hooks = _hook_table()
        self.machine = machine
        machine.subscribe(self)

    def configure(self, block: Callable[["Observer"], Any]) -> Any:
        """
        Run ``block`` with this observer, typically to register several hooks
        at once from a machine definition.
        """
        return block(self)

    def callback_names(self) -> FrozenSet[str]:
        """
        Names hooks may be registered under: every state and event name the
        machine currently knows plus the two wildcards.
        """
        machine = self.machine
        return frozenset(machine.event_names) | frozenset(machine.state_names) | {ANY_STATE, ANY_EVENT}

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def on(
        self,
        hook_type: Union[HookType, str] = ANY_EVENT,
        name: str = ANY_STATE,
        callback: Optional[Callback] = None,
    ):
        """
        Register ``callback`` for the given hook type and name.

        Called without a callback it returns a decorator.

        :param hook_type: The lifecycle phase to listen to.
        :param name: A state name, an event name, ANY_STATE or ANY_EVENT.
        :param callback: Called with a TransitionEvent followed by the event data.
        :raises InvalidCallbackNameError: If ``name`` is not a valid callback name.
        """
        hook_type = HookType(hook_type)
        self._ensure_valid_callback_name(name)
        if callback is None:
            return partial(self._decorate, self.on, hook_type, name)
        self._add_hook((hook_type,), name, callback)
        return callback

    def on_enter(self, name: Optional[Union[str, Callback]] = None, callback: Optional[Callback] = None):
        """Register a hook fired when a state or action is entered."""
        return self._on_phase("enter", name, callback)

    def on_transition(self, name: Optional[Union[str, Callback]] = None, callback: Optional[Callback] = None):
        """Register a hook fired while transitioning to a state or by an action."""
        return self._on_phase("transition", name, callback)

    def on_exit(self, name: Optional[Union[str, Callback]] = None, callback: Optional[Callback] = None):
        """Register a hook fired when a state or action is exited."""
        return self._on_phase("exit", name, callback)

    def _on_phase(self, phase: str, name: Any, callback: Optional[Callback]):
        # on_enter(callback) is the "every state and action" form
        if callback is None and callable(name):
            name, callback = None, name
        if callback is None:
            return partial(self._decorate, partial(self._on_phase, phase), name)

        state_type, action_type = PHASES[phase]
        machine = self.machine
        if name is None:
            hook_types, name = (state_type, action_type), ANY_STATE
        elif name in machine.state_names:
            hook_types = (state_type,)
        elif name in machine.event_names:
            hook_types = (action_type,)
        else:
            # unknown names are kept for both; the machine may learn them later
            hook_types = (state_type, action_type)
        self._add_hook(hook_types, name, callback)
        return callback

    @staticmethod
    def _decorate(register: Callable[..., Any], *args: Any) -> Any:
        *args, callback = args
        register(*args, callback)
        return callback

    def _add_hook(self, hook_types: Tuple[HookType, ...], name: str, callback: Callback) -> None:
        with with_lock(self._lock):
            hooks = self.hooks
            for hook_type in hook_types:
                hooks[hook_type][name].append(callback)
        logger.debug("Registered %r for %s on %s", callback, name, ", ".join(map(str, hook_types)))

    def _ensure_valid_callback_name(self, name: str) -> None:
        valid_names = self.callback_names()
        if name not in valid_names:
            raise InvalidCallbackNameError(name, valid_names)

    # -------------------------------------------------------------------------
    # Named shortcuts: on_enter_red(callback) == on_enter("red", callback)
    # -------------------------------------------------------------------------

    def shortcuts(self) -> Dict[str, Tuple[str, str]]:
        """
        Map every currently valid shortcut name to its (phase, name) pair.

        Names that are not identifiers, such as ``in-progress``, have no shortcut.
        """
        table = {f"on_{phase}_{name}": (phase, name) for phase in PHASES for name in self.callback_names()}
        return {method_name: target for method_name, target in table.items() if _SHORTCUT_PATTERN.match(method_name)}

    def resolve_shortcut(self, method_name: str) -> Optional[Callable[..., Any]]:
        """
        Return the registration function behind a shortcut name such as
        ``on_exit_green``, or None if the name is not a valid shortcut.
        """
        match = _SHORTCUT_PATTERN.match(method_name)
        if match is None:
            return None
        phase, name = match.groups()
        if name not in self.callback_names():
            return None
        return partial(self._on_phase, phase, name)

    def __getattr__(self, method_name: str) -> Any:
        # only reached for attributes not found the normal way
        if method_name.startswith("_"):
            raise AttributeError(method_name)
        shortcut = self.resolve_shortcut(method_name)
        if shortcut is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {method_name!r}")
        return shortcut

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self.shortcuts()))

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _snapshot(self, event: LifecycleEvent) -> List[Callback]:
        with with_lock(self._lock):
            hooks = self.hooks
            return [
                hook
                for hook_type in (event.type, ANY_EVENT)
                for name in (event.state, ANY_STATE)
                for hook in tuple(hooks.get(hook_type, {}).get(name, ()))
            ]

    def dispatch(self, event: LifecycleEvent) -> None:
        """
        Fire every hook matching ``event``.

        Buckets fire in the order (type, state), (type, ANY_STATE),
        (ANY_EVENT, state), (ANY_EVENT, ANY_STATE). Exceptions raised by a
        hook propagate and stop the remaining hooks.
        """
        matched = self._snapshot(event)
        logger.debug("Dispatching %s for %s to %d hook(s)", event.type, event.state, len(matched))
        for hook in matched:
            self._run_callback(hook, event)

    def _run_callback(self, hook: Callback, event: LifecycleEvent) -> None:
        hook(TransitionEvent.build(event.transition), *event.data)
