# fsmhooks/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Iterable, Tuple, Union

from fsmhooks.core.events import ANY_STATE


class Transition:
    """
    Defines a named event that moves the machine from one of several source
    states to a single target state.
    """

    def __init__(self, name: str, from_states: Union[str, Iterable[str]], to_state: str) -> None:
        """
        :param name: Name of the event that triggers this transition.
        :param from_states: One source state name, or several. ANY_STATE allows
            the transition from every state.
        :param to_state: The destination state name.
        """
        if not name or not isinstance(name, str):
            raise ValueError("Transition name must be a non-empty string")
        if isinstance(from_states, str):
            from_states = (from_states,)
        self._name = name
        self._from_states: Tuple[str, ...] = tuple(from_states)
        self._to_state = to_state
        if not self._from_states:
            raise ValueError(f"Transition {name} needs at least one source state")

    @property
    def name(self) -> str:
        return self._name

    @property
    def from_states(self) -> Tuple[str, ...]:
        """The source states of the transition, in declaration order."""
        return self._from_states

    @property
    def to_state(self) -> str:
        return self._to_state

    def allows(self, state: str) -> bool:
        """
        Return True if the transition can fire while the machine is in ``state``.
        """
        return ANY_STATE in self._from_states or state in self._from_states

    def __repr__(self) -> str:
        return f"Transition(name={self._name!r}, from_states={list(self._from_states)!r}, to_state={self._to_state!r})"
