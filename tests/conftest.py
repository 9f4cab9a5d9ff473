import threading
from typing import List

import pytest


class FakeSender:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.frames: List[bytes] = []
        self.open_calls = 0
        self.close_calls = 0
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self.open_calls > self.close_calls

    def open(self) -> None:
        self.open_calls += 1

    def send(self, payload: bytes) -> None:
        if self.fail:
            raise OSError("Network is unreachable")
        with self._lock:
            self.frames.append(payload)

    def close(self) -> None:
        self.close_calls += 1

    def count(self) -> int:
        with self._lock:
            return len(self.frames)


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def failing_sender() -> FakeSender:
    return FakeSender(fail=True)
