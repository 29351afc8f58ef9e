from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeCall:
    def __init__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    def __init__(self) -> None:
        self.calls: list[FakeCall] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> FakeCall:
        call = FakeCall(delay_ms, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> list[FakeCall]:
        return [call for call in self.calls if not call.cancelled]

    def fire_pending(self) -> None:
        for call in self.pending:
            call.cancelled = True
            call.callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
