from __future__ import annotations

"""
Simple counter example.

Public functions:

    initialize(env) -> None
        Create the counter at 0.

    get(env) -> int
        Return the current counter value.

    increment(env, delta=1) -> int
        Add delta and return the new value; emits counter.incremented.

    reset(env, value=0) -> int
        Set the counter back to value (must be >= 0); emits counter.reset.
"""

from typing import Final

from recstore.runtime.context import Env
from recstore.store import CounterStore

STORE: Final[CounterStore] = CounterStore("counter")


def initialize(env: Env) -> None:
    STORE.initialize(env)


def get(env: Env) -> int:
    return STORE.get(env)


def increment(env: Env, delta: int = 1) -> int:
    return STORE.increment(env, delta)


def reset(env: Env, value: int = 0) -> int:
    return STORE.reset(env, value)


__all__ = ["STORE", "initialize", "get", "increment", "reset"]
