# -*- coding: utf-8 -*-

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class ChangeMonitor(Generic[T]):
    """
    Debounce gate.
    set() feeds raw samples; poll() hands out a value once it has stayed
    unchanged for `threshold` seconds, and only once per distinct value.
    Timing uses a monotonic clock.
    """

    def __init__(
        self,
        initial_value: T,
        threshold: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.threshold = float(threshold)
        self.clock = clock

        self.last_value = initial_value
        self.last_notified = initial_value
        self.change_at = clock()
        self.notified = False

    def set(self, value: T) -> None:
        if value == self.last_value:
            return
        self.last_value = value
        self.change_at = self.clock()
        self.notified = False

    def poll(self) -> Optional[T]:
        if self.notified or self.last_value == self.last_notified:
            return None
        if (self.clock() - self.change_at) < self.threshold:
            return None
        self.notified = True
        self.last_notified = self.last_value
        return self.last_value
