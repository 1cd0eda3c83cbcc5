# sim/clock.py
"""
TickClock
---------
Drives a SimulationEngine at a fixed wall-clock cadence (100 ms by default).

Simulated time advances by a constant per tick, never by measured wall time:
when the host is slow the game simply runs slower, with no catch-up. Commands
submitted between ticks are applied in order right before the next tick, so a
command and a tick never interleave.
"""

import logging
import time
from collections import deque
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Command = Tuple[str, str, Optional[float]]  # (op, resource, amount)


class TickClock:
    def __init__(self, engine, interval: float = 0.1, sleep: Callable[[float], None] = time.sleep):
        self.engine = engine
        self.interval = interval
        self.sleep = sleep
        self._pending = deque()
        self._listeners: List[Callable[[dict], None]] = []
        self._stopped = False
        self.ticks = 0

    @classmethod
    def from_config(cls, engine, cfg=None, **kwargs):
        cfg = cfg or {}
        return cls(engine, interval=cfg.get('tick_interval_s', 0.1), **kwargs)

    def add_listener(self, fn: Callable[[dict], None]):
        """fn(snapshot) is called after every tick."""
        self._listeners.append(fn)

    def submit(self, op: str, resource: str, amount: Optional[float] = None):
        """Queues an 'increase' or 'decrease' command for the next tick boundary."""
        if op not in ('increase', 'decrease'):
            raise ValueError(f"Unknown command: {op}")
        self._pending.append((op, resource, amount))

    def drain(self) -> int:
        applied = 0
        while self._pending:
            op, resource, amount = self._pending.popleft()
            if op == 'increase':
                ok = self.engine.increase_resource(resource, amount)
            else:
                ok = self.engine.decrease_resource(resource, amount)
            applied += int(ok)
        return applied

    def stop(self):
        self._stopped = True

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Ticks until the engine leaves `playing`, `stop()` is called or max_ticks
        is reached. Returns the number of ticks fired by this call.
        """
        self._stopped = False
        fired = 0
        while not self._stopped and self.engine.is_playing:
            if max_ticks is not None and fired >= max_ticks:
                break
            self.drain()
            if not self.engine.tick():
                break
            fired += 1
            self.ticks += 1
            if self._listeners:
                snap = self.engine.snapshot()
                for fn in self._listeners:
                    fn(snap)
            if self.engine.is_playing and self.interval > 0:
                self.sleep(self.interval)
        # commands left over outside `playing` are dropped, like the engine would
        self._pending.clear()
        logger.debug("Clock stopped after %d ticks (phase %s)", fired, self.engine.phase.value)
        return fired
