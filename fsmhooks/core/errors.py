# fsmhooks/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Iterable, Optional


class FSMError(Exception):
    """
    Base exception class for errors raised by the fsmhooks library.

    :param message: Human readable description of the failure.
    :param details: Optional dictionary of diagnostic data.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidCallbackNameError(FSMError):
    """
    Raised when a hook is registered under a name that is neither a known
    state, a known event, nor one of the wildcards.
    """

    def __init__(self, name: Any, valid_names: Iterable[Any]) -> None:
        self.name = name
        self.valid_names = frozenset(valid_names)
        listed = sorted(str(n) for n in self.valid_names)
        super().__init__(
            f"{name} is not a valid callback name. Valid callback names are {listed}",
            details={"name": name, "valid_names": listed},
        )


class TransitionError(FSMError):
    """
    Raised when an event is unknown or cannot fire from the current state.
    """
