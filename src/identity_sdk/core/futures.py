"""One-shot completion helpers built on ``concurrent.futures.Future``."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, InvalidStateError
from typing import Any, TypeVar

from ..telemetry import get_logger

T = TypeVar("T")


def completed(value: T) -> Future[T]:
    """Return a future already resolved with ``value``."""
    future: Future[T] = Future()
    future.set_result(value)
    return future


def failed(error: BaseException) -> Future[Any]:
    """Return a future already failed with ``error``."""
    future: Future[Any] = Future()
    future.set_exception(error)
    return future


def relay(source: Future[T], target: Future[T]) -> None:
    """Copy the outcome of ``source`` into ``target`` once it completes.

    The first outcome delivered to ``target`` wins; later ones are dropped.
    """

    def _copy(done: Future[T]) -> None:
        error = done.exception()
        try:
            if error is not None:
                target.set_exception(error)
            else:
                target.set_result(done.result())
        except InvalidStateError:
            get_logger().debug("Dropped duplicate completion")

    source.add_done_callback(_copy)


def attach(future: Future[T], handler: Callable[[Future[T]], object] | None) -> Future[T]:
    """Register ``handler`` as the completion callback and return ``future``.

    A handler attached to an already completed future runs immediately on
    the calling thread.
    """
    if handler is not None:
        future.add_done_callback(handler)
    return future
