import threading

import pytest

from gossipkit.request_handler import RequestHandler, RequestStatus


def test_response_is_delivered():
    with RequestHandler() as handler:
        handler.add_request(lambda data: (RequestStatus.DONE, data * 2), 21)
        assert handler.wait_for_response(5) == 42
        assert handler.get_response() == 42
        assert handler.remove_response() == 42
        assert handler.get_response() is None


def test_responses_keep_order():
    with RequestHandler() as handler:
        for i in range(5):
            handler.add_request(lambda data: (RequestStatus.DONE, data), i)
        got = []
        while len(got) < 5:
            assert handler.wait_for_response(5) is not None
            got.append(handler.remove_response())
        assert got == [0, 1, 2, 3, 4]


def test_wait_times_out_with_none():
    with RequestHandler() as handler:
        assert handler.wait_for_response(0.05) is None


def test_done_without_response_releases():
    released = threading.Event()
    with RequestHandler() as handler:
        handler.add_request(
            lambda data: (RequestStatus.DONE, None), "x", lambda data: released.set()
        )
        assert released.wait(5)
        assert handler.get_response() is None


def test_abort_releases_without_response():
    seen = []
    done = threading.Event()

    def release(data):
        seen.append(data)
        done.set()

    with RequestHandler() as handler:
        handler.add_request(lambda data: (RequestStatus.ABORT, "ignored"), "req", release)
        assert done.wait(5)
        assert seen == ["req"]
        assert handler.get_response() is None


def test_requeue_runs_again():
    calls = {"n": 0}

    def callback(data):
        calls["n"] += 1
        if calls["n"] < 3:
            return RequestStatus.REQUEUE, None
        return RequestStatus.DONE, calls["n"]

    with RequestHandler() as handler:
        handler.add_request(callback)
        assert handler.wait_for_response(5) == 3


def test_invalid_status_releases():
    done = threading.Event()
    with RequestHandler() as handler:
        handler.add_request(lambda data: (7, "r"), None, lambda data: done.set())
        assert done.wait(5)
        assert handler.get_response() is None


def test_closed_handler_refuses_requests():
    handler = RequestHandler()
    handler.close()
    with pytest.raises(RuntimeError):
        handler.add_request(lambda data: (RequestStatus.DONE, 1))


def test_status_values():
    assert RequestStatus(0) is RequestStatus.DONE
    assert RequestStatus(1) is RequestStatus.REQUEUE
    assert RequestStatus(-1) is RequestStatus.ABORT