import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from appmanager.core.models import SessionClusterStatusRunning
from appmanager.core.states import NamespaceState, SessionClusterState as S
from emulator.core.store import Store

logger = logging.getLogger("emulator.reconciler")

# (desired, observed) -> next observed state for one tick
_CLUSTER_STEPS = {
    (S.RUNNING, S.STOPPED): S.STARTING,
    (S.RUNNING, S.STARTING): S.RUNNING,
    (S.RUNNING, S.PENDING_UPDATE): S.UPDATING,
    (S.RUNNING, S.UPDATING): S.RUNNING,
    (S.STOPPED, S.RUNNING): S.STOPPING,
    (S.STOPPED, S.STARTING): S.STOPPING,
    (S.STOPPED, S.PENDING_UPDATE): S.STOPPING,
    (S.STOPPED, S.UPDATING): S.STOPPING,
    (S.STOPPED, S.FAILED): S.STOPPING,
    (S.STOPPED, S.STOPPING): S.STOPPED,
}


class Reconciler:
    """
    Moves emulated resources one step towards their desired state per tick,
    the way AppManager's controllers converge asynchronously.
    """

    def __init__(self, store: Store, *, loop_secs: float = 1.0):
        self.store = store
        self.loop_secs = loop_secs
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self):
        with self.store.lock:
            for name, ns in list(self.store.namespaces.items()):
                if ns.status.state == NamespaceState.INIT:
                    ns.status.state = NamespaceState.ACTIVE.value
                    logger.info("Namespace %s is ACTIVE", name)
                elif ns.status.state == NamespaceState.MARKED_FOR_DELETION:
                    self.store.purge_namespace(name)

            for (namespace, name), cluster in self.store.clusters.items():
                desired = cluster.spec.state
                observed = cluster.status.state
                step = _CLUSTER_STEPS.get((desired, observed))
                if step is None:
                    continue
                cluster.status.state = step.value
                if step == S.RUNNING:
                    cluster.status.failure = None
                    cluster.status.running = SessionClusterStatusRunning(
                        started_at=_stamp(),
                        last_update_time=_stamp(),
                        task_manager_numbers=cluster.spec.number_of_task_managers,
                    )
                elif step == S.STOPPED:
                    cluster.status.running = None
                logger.info("SessionCluster %s/%s %s -> %s", namespace, name, observed, step.value)

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        logger.info("Starting reconciler loop (every %ss)", self.loop_secs)
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=1)

    def _run(self):
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Reconciler tick failed")
            self._stop_event.wait(self.loop_secs)


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
