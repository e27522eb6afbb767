# fsmhooks/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from fsmhooks.core.errors import TransitionError
from fsmhooks.core.events import ANY_STATE, HookType, LifecycleEvent
from fsmhooks.core.observer import Observer
from fsmhooks.core.transitions import Transition
from fsmhooks.runtime.concurrency import get_lock, with_lock

logger = logging.getLogger(__name__)


class StateMachine:
    """
    A flat finite state machine that reports every transition to its
    subscribers as lifecycle events.

    Firing an event emits, in order: exit state, exit action, transition
    state, transition action, enter state, enter action. The current state
    is updated between the transition and enter notifications.
    """

    def __init__(
        self,
        initial: str,
        events: Optional[Iterable[Transition]] = None,
        states: Optional[Iterable[str]] = None,
    ) -> None:
        """
        :param initial: Name of the state the machine starts in.
        :param events: Transitions the machine knows about.
        :param states: Extra state names not mentioned by any transition.
        """
        self._lock = get_lock()
        self._transition_lock = get_lock()
        self._transitioning = False
        self._states: List[str] = []
        self._events: Dict[str, List[Transition]] = {}
        self._subscribers: List[Any] = []

        self.add_state(initial)
        for state in states or ():
            self.add_state(state)
        for transition in events or ():
            self.add_event(transition)

        self._current_state = initial
        self._observer = Observer(self)

    @property
    def observer(self) -> Observer:
        """The hook registry attached to this machine."""
        return self._observer

    @property
    def current_state(self) -> str:
        with with_lock(self._lock):
            return self._current_state

    @property
    def state_names(self) -> FrozenSet[str]:
        with with_lock(self._lock):
            return frozenset(self._states)

    @property
    def event_names(self) -> FrozenSet[str]:
        with with_lock(self._lock):
            return frozenset(self._events)

    def add_state(self, name: str) -> None:
        """
        Add a state name to the machine. Adding a known state does nothing.
        """
        if not name or not isinstance(name, str):
            raise ValueError("State name must be a non-empty string")
        with with_lock(self._lock):
            if name not in self._states:
                self._states.append(name)

    def add_event(self, transition: Transition) -> None:
        """
        Add a transition. Several transitions may share one event name; the
        first one allowed from the current state is taken when it fires.
        """
        for state in (*transition.from_states, transition.to_state):
            if state != ANY_STATE:
                self.add_state(state)
        with with_lock(self._lock):
            self._events.setdefault(transition.name, []).append(transition)

    def subscribe(self, subscriber: Any) -> None:
        """
        Register an object whose ``dispatch`` method receives every lifecycle event.
        """
        with with_lock(self._lock):
            self._subscribers.append(subscriber)

    def can(self, event_name: str) -> bool:
        """Return True if ``event_name`` can fire from the current state."""
        with with_lock(self._lock):
            return self._find_transition(event_name) is not None

    def _find_transition(self, event_name: str) -> Optional[Transition]:
        for transition in self._events.get(event_name, ()):
            if transition.allows(self._current_state):
                return transition
        return None

    def fire(self, event_name: str, *data: Any) -> str:
        """
        Fire ``event_name``, notify subscribers and return the new state.

        Transitions are serialized: a fire from another thread waits until
        the running transition has committed, then checks against the new
        state. Firing from a hook of the running transition raises.

        :param event_name: The event to fire.
        :param data: Extra values handed to every hook after the TransitionEvent.
        :raises TransitionError: If the event is unknown, not allowed from
            the current state, or fired while a transition is in progress.
            Nothing is emitted in that case.
        """
        with with_lock(self._transition_lock):
            if self._transitioning:
                raise TransitionError(
                    f"Cannot fire {event_name} while a transition is in progress",
                    details={"event": event_name, "state": self.current_state},
                )
            self._transitioning = True
            try:
                return self._run_transition(event_name, data)
            finally:
                self._transitioning = False

    def _run_transition(self, event_name: str, data) -> str:
        with with_lock(self._lock):
            if event_name not in self._events:
                raise TransitionError(
                    f"Unknown event {event_name}", details={"event": event_name, "events": sorted(self._events)}
                )
            definition = self._find_transition(event_name)
            if definition is None:
                raise TransitionError(
                    f"Event {event_name} cannot fire from state {self._current_state}",
                    details={"event": event_name, "state": self._current_state},
                )
            transition = Transition(event_name, self._current_state, definition.to_state)
            subscribers = list(self._subscribers)

        from_state, to_state = transition.from_states[0], transition.to_state
        logger.debug("Transition %s: %s -> %s", event_name, from_state, to_state)

        self._notify(subscribers, HookType.EXIT_STATE, from_state, transition, data)
        self._notify(subscribers, HookType.EXIT_ACTION, event_name, transition, data)
        self._notify(subscribers, HookType.TRANSITION_STATE, to_state, transition, data)
        self._notify(subscribers, HookType.TRANSITION_ACTION, event_name, transition, data)
        with with_lock(self._lock):
            self._current_state = to_state
        self._notify(subscribers, HookType.ENTER_STATE, to_state, transition, data)
        self._notify(subscribers, HookType.ENTER_ACTION, event_name, transition, data)
        return to_state

    @staticmethod
    def _notify(subscribers: List[Any], hook_type: HookType, name: str, transition: Transition, data) -> None:
        event = LifecycleEvent(type=hook_type, state=name, transition=transition, data=tuple(data))
        for subscriber in subscribers:
            subscriber.dispatch(event)
