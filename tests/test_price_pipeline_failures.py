from __future__ import annotations

import pytest


class InstantToken:
    """Cancellation token whose waits return immediately."""

    def __init__(self) -> None:
        from game_price_checker.utils.utilities import CancellationToken

        self._inner = CancellationToken()

    def cancel(self) -> None:
        self._inner.cancel()

    def reset(self) -> None:
        self._inner.reset()

    @property
    def cancelled(self) -> bool:
        return self._inner.cancelled

    def wait(self, timeout_s: float) -> bool:
        return self.cancelled


class ScriptedClient:
    def __init__(self, fail_on: set[int] | None = None, missing: set[int] | None = None):
        self.fail_on = fail_on or set()
        self.missing = missing or set()
        self.calls: list[list[int]] = []

    def get_prices(self, appids):
        from game_price_checker.errors import NetworkFailure

        self.calls.append(list(appids))
        if len(self.calls) in self.fail_on:
            raise NetworkFailure("gg.deals prices responded with status: 500", status=500)
        return {
            str(a): None
            if a in self.missing
            else {"prices": {"currentRetail": "3.00", "currentKeyshops": None, "currency": "USD"}}
            for a in appids
        }


class IdResolver:
    label = "ids"

    def resolve(self, names):
        from game_price_checker.schema import ResolutionResult

        return [ResolutionResult(requested_name=n, id=int(n)) for n in names]


def _session(client, **kwargs):
    from game_price_checker.pipelines.price_pipeline import PriceCheckSession
    from game_price_checker.utils.utilities import RateLimiter

    session = PriceCheckSession(
        IdResolver(), client, limiter=RateLimiter(60.0, clock=lambda: 0.0), **kwargs
    )
    session.fetcher.cancel_token = InstantToken()
    return session


def test_failed_chunk_marks_its_records_error_and_run_continues() -> None:
    from game_price_checker.schema import Status

    client = ScriptedClient(fail_on={2})
    session = _session(client)
    records = session.run([str(i) for i in range(1, 251)])

    assert len(client.calls) == 3
    statuses = [r.status for r in records]
    assert statuses[:100] == [Status.FOUND] * 100
    assert statuses[100:200] == [Status.ERROR] * 100
    assert statuses[200:] == [Status.FOUND] * 50
    assert all(r.price is None for r in records[100:200])
    assert session.is_complete


def test_ids_missing_from_response_are_not_found() -> None:
    from game_price_checker.schema import Status

    session = _session(ScriptedClient(missing={2}))
    records = session.run(["1", "2", "3"])

    assert [r.status for r in records] == [Status.FOUND, Status.NOT_FOUND, Status.FOUND]
    assert records[1].price is None
    assert str(records[0].price) == "3.00"


def test_cancel_during_pause_leaves_remaining_records_pending() -> None:
    from game_price_checker.schema import Status

    client = ScriptedClient()
    holder: dict[str, object] = {}
    session = _session(client, on_wait=lambda _s: holder["session"].cancel())
    holder["session"] = session

    records = session.run([str(i) for i in range(1, 251)])

    assert len(client.calls) == 1
    assert sum(1 for r in records if r.status is Status.FOUND) == 100
    assert sum(1 for r in records if r.status is Status.PENDING) == 150
    assert len(session.fetcher.queue) == 0
    assert not session.is_complete


def test_drain_is_not_reentrant() -> None:
    client = ScriptedClient()
    results: list[bool] = []
    holder: dict[str, object] = {}

    def on_update(_record) -> None:
        if not results:
            results.append(holder["session"].fetcher.drain())

    session = _session(client, on_update=on_update)
    holder["session"] = session
    session.run([str(i) for i in range(1, 151)])

    assert results == [False]
    assert len(client.calls) == 2


def test_submit_rejects_empty_names() -> None:
    from game_price_checker.errors import ValidationFailure

    session = _session(ScriptedClient())
    with pytest.raises(ValidationFailure, match="Please enter game names"):
        session.submit(["", "   "])


def test_submit_replaces_previous_records() -> None:
    session = _session(ScriptedClient())
    session.run(["1", "2"])
    records = session.run(["3"])
    assert [r.id for r in records] == [3]
    assert session.aggregator.records is session.records


def test_oversized_price_does_not_abort_the_run() -> None:
    from game_price_checker.schema import Status

    class OversizedClient(ScriptedClient):
        def get_prices(self, appids):
            self.calls.append(list(appids))
            return {
                "1": {"prices": {"currentRetail": "1E+30", "currentKeyshops": None}},
                "2": {"prices": {"currentRetail": "5.00", "currentKeyshops": None}},
            }

    session = _session(OversizedClient())
    records = session.run(["1", "2"])

    assert [r.status for r in records] == [Status.FOUND, Status.FOUND]
    assert records[0].price is None
    assert str(records[1].price) == "5.00"


def test_batch_size_above_request_limit_is_rejected() -> None:
    from game_price_checker.pipelines.price_pipeline import PriceCheckSession

    with pytest.raises(ValueError, match="batch_size"):
        PriceCheckSession(IdResolver(), ScriptedClient(), batch_size=101)


def test_fetcher_moves_through_draining_and_waiting_back_to_idle() -> None:
    from game_price_checker.pipelines.price_pipeline import PipelineState

    states: list[PipelineState] = []
    holder: dict[str, object] = {}

    def on_update(_record) -> None:
        states.append(holder["session"].fetcher.state)

    def on_wait(_seconds: float) -> None:
        states.append(holder["session"].fetcher.state)

    session = _session(ScriptedClient(), on_update=on_update, on_wait=on_wait)
    holder["session"] = session
    assert session.fetcher.state is PipelineState.IDLE

    session.run([str(i) for i in range(1, 151)])

    # 100 updates, one wait, 50 updates.
    assert states == (
        [PipelineState.DRAINING] * 100 + [PipelineState.WAITING] + [PipelineState.DRAINING] * 50
    )
    assert session.fetcher.state is PipelineState.IDLE


def test_cancel_from_another_thread_interrupts_the_pause() -> None:
    import threading
    import time

    from game_price_checker.pipelines.price_pipeline import PriceCheckSession
    from game_price_checker.schema import Status
    from game_price_checker.utils.utilities import RateLimiter

    client = ScriptedClient()
    timers: list[threading.Timer] = []
    holder: dict[str, object] = {}

    def on_wait(_seconds: float) -> None:
        timer = threading.Timer(0.1, holder["session"].cancel)
        timers.append(timer)
        timer.start()

    session = PriceCheckSession(
        IdResolver(), client, limiter=RateLimiter(60.0), on_wait=on_wait
    )
    holder["session"] = session

    started = time.monotonic()
    records = session.run([str(i) for i in range(1, 151)])
    elapsed = time.monotonic() - started
    for timer in timers:
        timer.join()

    assert elapsed < 10.0
    assert len(client.calls) == 1
    assert sum(1 for r in records if r.status is Status.FOUND) == 100
    assert sum(1 for r in records if r.status is Status.PENDING) == 50
    assert not session.fetcher.active
