"""
Background database health probe.

Runs on a daemon thread, pings the database every interval and logs state
changes. Failures are recorded and retried on the next tick.
"""
import logging
import threading
from datetime import datetime
from typing import Optional

from db import Database

logger = logging.getLogger(__name__)


class HealthMonitor:
    def __init__(self, database: Database, interval: float):
        self.database = database
        self.interval = interval
        self.last_ok: Optional[bool] = None
        self.last_check: Optional[datetime] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def check(self) -> bool:
        try:
            self.database.ping()
            ok = True
        except Exception as exc:
            ok = False
            logger.warning("Database health check failed: %s", exc)
        if ok != self.last_ok:
            if ok:
                logger.info("Database health check OK")
            else:
                logger.error("Database is unreachable; will retry in %.0fs", self.interval)
        self.last_ok = ok
        self.last_check = datetime.utcnow()
        return ok

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.check()

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="db-health", daemon=True)
        self._thread.start()
        logger.info("Health monitor started (interval %.0fs)", self.interval)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
