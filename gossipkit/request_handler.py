"""Asynchronous processing of requests on a worker thread."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from .fifo_queue import FifoQueue

log = logging.getLogger(__name__)

_INITIAL_QUEUE_SIZE = 10


class RequestStatus(enum.IntEnum):
    """Outcome a request callback reports."""

    DONE = 0
    REQUEUE = 1
    ABORT = -1


RequestCallback = Callable[[Any], "tuple[RequestStatus | int, Any]"]


@dataclass
class _Request:
    callback: RequestCallback
    data: Any
    release: Callable[[Any], None] | None

    def free(self) -> None:
        if self.release is not None:
            self.release(self.data)


class RequestHandler:
    """Run queued requests on a worker thread and collect their responses.

    A callback receives the request data and returns ``(status, response)``.
    ``DONE`` queues ``response`` unless it is ``None``, ``REQUEUE`` puts the
    request back at the tail, ``ABORT`` drops it.
    """

    def __init__(self) -> None:
        self._requests = FifoQueue(_INITIAL_QUEUE_SIZE)
        self._responses = FifoQueue(_INITIAL_QUEUE_SIZE)
        self._req_cond = threading.Condition()
        self._rsp_cond = threading.Condition()
        self._closed = False
        self._thread = threading.Thread(
            target=self._run, name="request-handler", daemon=True
        )
        self._thread.start()

    def add_request(
        self,
        callback: RequestCallback,
        data: Any = None,
        release: Callable[[Any], None] | None = None,
    ) -> None:
        """Queue a request for the worker thread."""
        with self._req_cond:
            if self._closed:
                raise RuntimeError("request handler is closed")
            self._requests.add(_Request(callback, data, release))
            self._req_cond.notify()

    def wait_for_response(self, timeout: float | None = None) -> Any:
        """Wait up to ``timeout`` seconds for a response and return the head one."""
        with self._rsp_cond:
            if len(self._responses) == 0:
                self._rsp_cond.wait_for(lambda: len(self._responses) > 0, timeout)
            return self._responses.head()

    def get_response(self) -> Any:
        """Return the first response without removing it, or ``None``."""
        with self._rsp_cond:
            return self._responses.head()

    def remove_response(self) -> Any:
        """Remove and return the first response, or ``None``."""
        with self._rsp_cond:
            return self._responses.remove_head()

    def close(self) -> None:
        """Stop the worker thread and release pending requests."""
        with self._req_cond:
            if self._closed:
                return
            self._closed = True
            self._req_cond.notify_all()
        if self._thread is not threading.current_thread():
            self._thread.join()
        with self._req_cond:
            self._requests.drain(lambda request: request.free())
        with self._rsp_cond:
            self._responses.drain()

    def __enter__(self) -> "RequestHandler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _add_response(self, response: Any) -> None:
        with self._rsp_cond:
            self._responses.add(response)
            self._rsp_cond.notify_all()

    def _next_request(self) -> _Request | None:
        with self._req_cond:
            self._req_cond.wait_for(
                lambda: self._closed or len(self._requests) > 0
            )
            if self._closed:
                return None
            return self._requests.remove_head()

    def _run(self) -> None:
        while (request := self._next_request()) is not None:
            self._process(request)

    def _process(self, request: _Request) -> None:
        try:
            status, response = request.callback(request.data)
            status = RequestStatus(status)
        except Exception:
            log.exception("request handler: request callback failed")
            request.free()
            return
        if status is RequestStatus.DONE:
            if response is not None:
                self._add_response(response)
            request.free()
        elif status is RequestStatus.REQUEUE:
            with self._req_cond:
                self._requests.add(request)
        else:
            request.free()