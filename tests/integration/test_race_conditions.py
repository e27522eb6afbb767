# tests/integration/test_race_conditions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
import time

import pytest

from fsmhooks.core.errors import TransitionError
from fsmhooks.core.events import HookType, LifecycleEvent
from fsmhooks.core.transitions import Transition


def test_concurrent_registration_into_new_buckets(observer):
    """
    Many threads registering into previously absent buckets at the same
    time must not lose a registration.
    """
    threads_count = 8
    per_thread = 250
    barrier = threading.Barrier(threads_count)

    def register(n):
        barrier.wait()
        for i in range(per_thread):
            hook_type = list(HookType)[i % len(HookType)]
            observer.on(hook_type, "red", lambda event, n=n: None)

    threads = [threading.Thread(target=register, args=(n,)) for n in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = sum(len(names.get("red", ())) for names in observer.hooks.values())
    assert total == threads_count * per_thread


def test_dispatch_while_registering(observer):
    """
    Dispatching from one thread while another registers must neither fail
    nor skip hooks that were registered before the dispatch started.
    """
    counter = {"calls": 0}
    lock = threading.Lock()

    def count(event):
        with lock:
            counter["calls"] += 1

    observer.on_enter("red", count)
    stop = threading.Event()
    errors = []

    def register():
        while not stop.is_set():
            observer.on_enter("green", lambda event: None)

    event = LifecycleEvent(type=HookType.ENTER_STATE, state="red", transition=Transition("stop", "yellow", "red"))

    def dispatch():
        try:
            for _ in range(500):
                observer.dispatch(event)
        except Exception as e:  # pragma: no cover - reported below
            errors.append(e)

    registrar = threading.Thread(target=register)
    dispatchers = [threading.Thread(target=dispatch) for _ in range(4)]
    registrar.start()
    for t in dispatchers:
        t.start()
    for t in dispatchers:
        t.join()
    stop.set()
    registrar.join()

    assert errors == []
    assert counter["calls"] == 4 * 500


def test_concurrent_fire_and_register(traffic_light):
    """Hooks registered from other threads are picked up by later transitions."""
    fired = []
    registered = threading.Event()

    def register():
        traffic_light.observer.on_enter("yellow", fired.append)
        registered.set()

    worker = threading.Thread(target=register)
    worker.start()
    registered.wait(timeout=5)
    worker.join()

    traffic_light.fire("slow")
    assert len(fired) == 1


def test_concurrent_fire_runs_transition_once(traffic_light):
    """
    A second thread firing the same event while the first transition is
    still notifying hooks must wait, then fail against the new state.
    """
    in_exit_hook = threading.Event()
    release = threading.Event()
    exits = []
    results = {}

    def slow_exit(event):
        exits.append(event)
        in_exit_hook.set()
        release.wait(timeout=5)

    traffic_light.observer.on_exit("green", slow_exit)

    def fire(key):
        try:
            results[key] = traffic_light.fire("slow")
        except TransitionError as e:
            results[key] = e

    first = threading.Thread(target=fire, args=("first",))
    first.start()
    assert in_exit_hook.wait(timeout=5)

    second = threading.Thread(target=fire, args=("second",))
    second.start()
    time.sleep(0.05)
    release.set()
    first.join()
    second.join()

    assert results["first"] == "yellow"
    assert isinstance(results["second"], TransitionError)
    assert len(exits) == 1
    assert traffic_light.current_state == "yellow"


def test_fire_from_hook_of_running_transition_raises(traffic_light):
    nested = []
    exits = []

    def fire_again(event):
        exits.append(event)
        with pytest.raises(TransitionError, match="while a transition is in progress"):
            traffic_light.fire("slow")
        nested.append("rejected")

    traffic_light.observer.on_exit("green", fire_again)

    assert traffic_light.fire("slow") == "yellow"
    assert nested == ["rejected"]
    assert len(exits) == 1
    # the machine accepts new events once the transition has finished
    assert traffic_light.fire("stop") == "red"
