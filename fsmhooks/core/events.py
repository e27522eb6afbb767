# fsmhooks/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class HookType(str, Enum):
    """
    Lifecycle phases a hook can listen to.

    Each phase exists once for states and once for actions (events). ANY_EVENT
    is the catch-all type matched by every dispatch.
    """

    ENTER_STATE = "enterstate"
    ENTER_ACTION = "enteraction"
    TRANSITION_STATE = "transitionstate"
    TRANSITION_ACTION = "transitionaction"
    EXIT_STATE = "exitstate"
    EXIT_ACTION = "exitaction"
    ANY_EVENT = "any_event"

    def __str__(self) -> str:
        return self.value


ANY_EVENT = HookType.ANY_EVENT
ANY_STATE = "any_state"

# phase name -> (state hook type, action hook type)
PHASES = {
    "enter": (HookType.ENTER_STATE, HookType.ENTER_ACTION),
    "transition": (HookType.TRANSITION_STATE, HookType.TRANSITION_ACTION),
    "exit": (HookType.EXIT_STATE, HookType.EXIT_ACTION),
}


@dataclass(frozen=True)
class TransitionEvent:
    """
    Description of the transition handed to every hook callback.

    :param from_state: The state the machine is leaving.
    :param to_state: The state the machine is entering.
    :param name: The name of the event that caused the transition.
    """

    from_state: Optional[str]
    to_state: Optional[str]
    name: Optional[str]

    @classmethod
    def build(cls, transition: Any) -> "TransitionEvent":
        """
        Build from a transition exposing ``from_states``, ``to_state`` and
        ``name``. When several origin states are recorded the first one wins.
        """
        from_states = transition.from_states
        if isinstance(from_states, str):
            from_state = from_states
        else:
            from_state = next(iter(from_states), None)
        return cls(from_state=from_state, to_state=transition.to_state, name=transition.name)


@dataclass(frozen=True)
class LifecycleEvent:
    """
    A single lifecycle notification produced by the transition engine.

    :param type: The hook type of this notification.
    :param state: The state or event name the notification is about.
    :param transition: The transition being performed.
    :param data: Extra positional values passed on to every callback.
    """

    type: HookType
    state: str
    transition: Any
    data: Tuple[Any, ...] = field(default_factory=tuple)
