"""Example: a small pool of database connections.

Run from the repository root::

    python -m examples.connection_pool
"""
import itertools
import threading
import time

from config import ConfigManager, ConfigPresets
from resources import AppState
from utils import LoggerFactory, PoolExhausted, get_logger, retry

logger = get_logger(__name__)


class DatabaseConnection:
    """Stand-in for a costly connection; the id shows which one was reused."""

    _ids = itertools.count(1)

    def __init__(self, setup_delay: float = 0.05):
        self.id = f"conn_{next(self._ids)}"
        self.closed = False
        time.sleep(setup_delay)
        logger.info(f"Opened {self.id}")

    def query(self, sql: str) -> str:
        if self.closed:
            raise RuntimeError(f"{self.id} is closed")
        return f"Executing query '{sql}' with connection {self.id}"

    def close(self):
        self.closed = True
        logger.info(f"Closed {self.id}")


def run_demo():
    """Three-connection pool: reuse, growth, exhaustion and a retried acquire."""
    config = ConfigManager(ConfigPresets.database())
    config.set('pools.database.max_size', 3)
    config.set('pools.database.block', False)

    state = AppState.initialize(config)
    try:
        pool = state.create_pool('database', DatabaseConnection, destroy=DatabaseConnection.close)

        conn1 = pool.acquire()
        print(conn1.query("SELECT * FROM users"))

        conn2 = pool.acquire()
        print(conn2.query("INSERT INTO products VALUES (...)"))

        pool.release(conn1)

        conn3 = pool.acquire()  # reuses conn1
        print(conn3.query("UPDATE orders SET status = 'shipped'"))

        conn4 = pool.acquire()  # new connection
        print(conn4.query("DELETE FROM temp_data"))

        try:
            pool.acquire()
        except PoolExhausted as e:
            print(f"Error: {e.message}")

        @retry(max_attempts=5, delay=0.05, backoff=1.5, exceptions=(PoolExhausted,))
        def acquire_with_retry():
            return pool.acquire()

        # Another holder hands conn4 back shortly; the retried acquire picks it up
        releaser = threading.Timer(0.02, pool.release, args=(conn4,))
        releaser.start()
        try:
            conn5 = acquire_with_retry()
        finally:
            releaser.join()
        print(conn5.query("SELECT 1"))

        print(pool.stats())
        print(state.metrics.get_stats('database'))
    finally:
        AppState.reset()


if __name__ == "__main__":
    LoggerFactory.configure(log_level='INFO', force=True)
    run_demo()
