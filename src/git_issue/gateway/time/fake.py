"""Fake Time implementation for testing."""

from collections.abc import Callable

from git_issue.gateway.time.abc import Time


class FakeTime(Time):
    """In-memory fake that records sleep() calls without sleeping.

    When constructed with a ``on_sleep`` callback, the callback runs after each
    recorded call so tests can release a lock file mid-poll.
    """

    def __init__(self, *, on_sleep: Callable[[], None] | None = None) -> None:
        self._sleep_calls: list[float] = []
        self._on_sleep = on_sleep

    @property
    def sleep_calls(self) -> list[float]:
        """Seconds values passed to sleep(), for test assertions only."""
        return self._sleep_calls

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)
        if self._on_sleep is not None:
            self._on_sleep()
