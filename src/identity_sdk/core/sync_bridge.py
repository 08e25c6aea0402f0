"""Blocking adapter over callback-style operations.

``wait_for`` must not be called on the thread expected to deliver the
callback: with no timeout it then waits forever.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from typing import TypeVar

from .futures import relay

T = TypeVar("T")

CallbackTask = Callable[[Callable[[Future[T]], object]], object]


def wait_for(task: CallbackTask[T], *, timeout: float | None = None) -> T:
    """Run ``task`` and block until it delivers its result.

    ``task`` receives a handler and must call it exactly once with a
    completed future. A repeated call is ignored; the first outcome wins.

    Args:
        task: Callback-style operation, e.g.
            ``lambda handler: client.request_challenge("anonymous", handler=handler)``.
        timeout: Seconds to wait; ``None`` waits indefinitely.

    Returns:
        The delivered value.

    Raises:
        TimeoutError: If ``timeout`` elapses first.
        Exception: The exact failure delivered to the handler.
    """
    outcome: Future[T] = Future()
    task(lambda done: relay(done, outcome))
    return outcome.result(timeout=timeout)
