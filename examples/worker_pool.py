"""Example: workers cloned from a template and recycled between tasks.

Run from the repository root::

    python -m examples.worker_pool
"""
import itertools
from typing import Dict, List, Optional

from patterns import CallbackObserver, Prototype, prototype_factory
from resources import PoolBuilder
from utils import LoggerFactory


class Worker(Prototype):
    """
    Reusable worker.

    Clone semantics per field:
        id: fresh, numbered 1, 2, ... by the template it was cloned from
        tools: shared with the template (read-only registry)
        history: duplicated, each worker keeps its own
        current_task: reset to None

    The template keeps id 0 and never enters the pool.
    """

    def __init__(self, id: int, tools: Dict[str, str], history: Optional[List[str]] = None):
        self.id = id
        self._clone_ids = itertools.count(1)
        self.tools = tools
        self.history = list(history or [])
        self.current_task: Optional[str] = None

    def clone(self) -> 'Worker':
        return Worker(next(self._clone_ids), self.tools, self.history)

    def do_work(self, task: str):
        self.current_task = task
        self.history.append(task)
        print(f"Worker {self.id} is performing task: {task}")

    def reset(self):
        self.current_task = None


def run_demo():
    template = Worker(0, tools={'parser': 'v2', 'exporter': 'csv'})

    def report(subject, event, data):
        worker = data.get('resource')
        if worker is not None:
            print(f"[{event}] worker {worker.id}")

    pool = (PoolBuilder()
            .named('workers')
            .with_factory(prototype_factory(template))
            .keyed_by(lambda worker: worker.id)
            .max_size(4)
            .observe(CallbackObserver(report), 'created')
            .build())

    with pool:
        worker1 = pool.acquire()
        worker1.do_work("Process data batch A")

        worker2 = pool.acquire()
        worker2.do_work("Generate report X")

        pool.release(worker1)
        pool.release(worker2)

        # Most recently released first: worker2 comes back
        with pool.get_resource() as worker3:
            worker3.do_work("Analyze logs")
            print(f"Reused worker {worker3.id}, history={worker3.history}")

        print(pool.stats())


if __name__ == "__main__":
    LoggerFactory.configure(log_level='INFO', force=True)
    run_demo()
