import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from appmanager.core.models import (
    DeploymentTarget,
    Failure,
    Namespace,
    NamespaceMetadata,
    NamespaceStatus,
    SessionCluster,
    SessionClusterSpec,
    SessionClusterStatus,
)
from appmanager.core.states import NamespaceState, SessionClusterState

logger = logging.getLogger("emulator.store")

API_VERSION = "v1"


class NotFoundError(LookupError):
    pass


class ConflictError(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp() -> str:
    return _now().isoformat().replace("+00:00", "Z")


class Store:
    """
    In-memory AppManager state. Every public method takes the lock; the
    reconciler and request handlers run on different threads.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.namespaces: Dict[str, Namespace] = {}
        self.targets: Dict[Tuple[str, str], DeploymentTarget] = {}
        self.clusters: Dict[Tuple[str, str], SessionCluster] = {}

    def reset(self):
        with self.lock:
            self.namespaces.clear()
            self.targets.clear()
            self.clusters.clear()

    # Namespaces

    def list_namespaces(self) -> List[Namespace]:
        with self.lock:
            return [ns.model_copy(deep=True) for ns in self.namespaces.values()]

    def get_namespace(self, name: str) -> Namespace:
        with self.lock:
            ns = self.namespaces.get(name)
            if ns is None:
                raise NotFoundError(f"Namespace {name} not found")
            return ns.model_copy(deep=True)

    def create_namespace(self, name: str) -> Namespace:
        with self.lock:
            if name in self.namespaces:
                raise ConflictError(f"Namespace {name} already exists")
            now = _now()
            ns = Namespace(
                kind="Namespace",
                api_version=API_VERSION,
                metadata=NamespaceMetadata(
                    id=str(uuid.uuid4()),
                    name=name,
                    created_at=now,
                    modified_at=now,
                    resource_version=1,
                ),
                status=NamespaceStatus(state=NamespaceState.INIT.value),
            )
            self.namespaces[name] = ns
            logger.info("Namespace %s created", name)
            return ns.model_copy(deep=True)

    def mark_namespace_deleted(self, name: str) -> Namespace:
        with self.lock:
            ns = self.namespaces.get(name)
            if ns is None:
                raise NotFoundError(f"Namespace {name} not found")
            ns.status.state = NamespaceState.MARKED_FOR_DELETION.value
            ns.metadata.modified_at = _now()
            ns.metadata.resource_version += 1
            logger.info("Namespace %s marked for deletion", name)
            return ns.model_copy(deep=True)

    def purge_namespace(self, name: str):
        with self.lock:
            self.namespaces.pop(name, None)
            for key in [k for k in self.targets if k[0] == name]:
                del self.targets[key]
            for key in [k for k in self.clusters if k[0] == name]:
                del self.clusters[key]
            logger.info("Namespace %s purged", name)

    def _require_active(self, namespace: str):
        ns = self.namespaces.get(namespace)
        if ns is None:
            raise NotFoundError(f"Namespace {namespace} not found")
        if ns.status.state != NamespaceState.ACTIVE.value:
            raise ConflictError(f"Namespace {namespace} is {ns.status.state}, not ACTIVE")

    # Deployment targets

    def list_targets(self, namespace: str) -> List[DeploymentTarget]:
        with self.lock:
            self._require_active(namespace)
            return [
                t.model_copy(deep=True) for (ns, _), t in self.targets.items() if ns == namespace
            ]

    def get_target(self, namespace: str, name: str) -> DeploymentTarget:
        with self.lock:
            target = self.targets.get((namespace, name))
            if target is None:
                raise NotFoundError(f"DeploymentTarget {namespace}/{name} not found")
            return target.model_copy(deep=True)

    def create_target(self, namespace: str, target: DeploymentTarget) -> DeploymentTarget:
        with self.lock:
            self._require_active(namespace)
            name = target.metadata.name
            if (namespace, name) in self.targets:
                raise ConflictError(f"DeploymentTarget {namespace}/{name} already exists")
            target = target.model_copy(deep=True)
            target.kind = "DeploymentTarget"
            target.api_version = API_VERSION
            target.metadata.id = str(uuid.uuid4())
            target.metadata.namespace = namespace
            target.metadata.created_at = target.metadata.modified_at = _stamp()
            target.metadata.resource_version = 1
            self.targets[(namespace, name)] = target
            return target.model_copy(deep=True)

    def delete_target(self, namespace: str, name: str) -> DeploymentTarget:
        with self.lock:
            target = self.targets.pop((namespace, name), None)
            if target is None:
                raise NotFoundError(f"DeploymentTarget {namespace}/{name} not found")
            return target

    # Session clusters

    def list_clusters(self, namespace: str) -> List[SessionCluster]:
        with self.lock:
            self._require_active(namespace)
            return [
                c.model_copy(deep=True) for (ns, _), c in self.clusters.items() if ns == namespace
            ]

    def get_cluster(self, namespace: str, name: str) -> SessionCluster:
        with self.lock:
            cluster = self.clusters.get((namespace, name))
            if cluster is None:
                raise NotFoundError(f"SessionCluster {namespace}/{name} not found")
            return cluster.model_copy(deep=True)

    def _check_target(self, namespace: str, spec: Optional[SessionClusterSpec]):
        target_name = spec.deployment_target_name if spec else None
        if target_name and (namespace, target_name) not in self.targets:
            raise NotFoundError(f"DeploymentTarget {namespace}/{target_name} not found")

    def create_cluster(self, namespace: str, cluster: SessionCluster) -> SessionCluster:
        with self.lock:
            self._require_active(namespace)
            name = cluster.metadata.name
            if (namespace, name) in self.clusters:
                raise ConflictError(f"SessionCluster {namespace}/{name} already exists")
            self._check_target(namespace, cluster.spec)
            cluster = cluster.model_copy(deep=True)
            cluster.kind = "SessionCluster"
            cluster.api_version = API_VERSION
            cluster.metadata.id = str(uuid.uuid4())
            cluster.metadata.namespace = namespace
            cluster.metadata.created_at = cluster.metadata.modified_at = _stamp()
            cluster.metadata.resource_version = 1
            if cluster.spec is None:
                cluster.spec = SessionClusterSpec()
            if not cluster.spec.state:
                cluster.spec.state = SessionClusterState.STOPPED.value
            cluster.status = SessionClusterStatus(state=SessionClusterState.STOPPED.value)
            self.clusters[(namespace, name)] = cluster
            logger.info("SessionCluster %s/%s created", namespace, name)
            return cluster.model_copy(deep=True)

    def replace_cluster(self, namespace: str, name: str, cluster: SessionCluster) -> SessionCluster:
        with self.lock:
            current = self.clusters.get((namespace, name))
            if current is None:
                cluster = cluster.model_copy(deep=True)
                cluster.metadata.name = name
                return self.create_cluster(namespace, cluster)
            self._check_target(namespace, cluster.spec)
            spec = (cluster.spec or SessionClusterSpec()).model_copy(deep=True)
            if not spec.state:
                spec.state = current.spec.state
            spec_changed = _without_state(spec) != _without_state(current.spec)
            current.spec = spec
            if spec_changed and current.status.state == SessionClusterState.RUNNING.value:
                current.status.state = SessionClusterState.PENDING_UPDATE.value
            self._touch(current)
            return current.model_copy(deep=True)

    def patch_cluster(self, namespace: str, name: str, patch: SessionCluster) -> SessionCluster:
        with self.lock:
            current = self.clusters.get((namespace, name))
            if current is None:
                raise NotFoundError(f"SessionCluster {namespace}/{name} not found")
            if patch.spec is not None:
                merged = current.spec.model_dump()
                merged.update(patch.spec.model_dump(exclude_none=True))
                current.spec = SessionClusterSpec.model_validate(merged)
            if patch.metadata is not None:
                if patch.metadata.labels is not None:
                    current.metadata.labels = dict(patch.metadata.labels)
                if patch.metadata.annotations is not None:
                    current.metadata.annotations = dict(patch.metadata.annotations)
            self._touch(current)
            return current.model_copy(deep=True)

    def delete_cluster(self, namespace: str, name: str) -> SessionCluster:
        with self.lock:
            current = self.clusters.get((namespace, name))
            if current is None:
                raise NotFoundError(f"SessionCluster {namespace}/{name} not found")
            if current.status.state != SessionClusterState.STOPPED.value:
                raise ConflictError(
                    f"SessionCluster {namespace}/{name} is {current.status.state}; stop it before deleting"
                )
            del self.clusters[(namespace, name)]
            logger.info("SessionCluster %s/%s deleted", namespace, name)
            return current

    def set_cluster_status(
        self, namespace: str, name: str, state: str, message: Optional[str] = None
    ) -> SessionCluster:
        with self.lock:
            current = self.clusters.get((namespace, name))
            if current is None:
                raise NotFoundError(f"SessionCluster {namespace}/{name} not found")
            if not SessionClusterState.is_valid(state):
                raise ValueError(f"Unknown session cluster state {state}")
            current.status.state = state
            if state == SessionClusterState.FAILED.value:
                current.status.failure = Failure(
                    message=message or "forced failure", reason="Emulated", failed_at=_now()
                )
            self._touch(current)
            return current.model_copy(deep=True)

    @staticmethod
    def _touch(resource):
        resource.metadata.modified_at = _stamp()
        resource.metadata.resource_version = (resource.metadata.resource_version or 0) + 1


def _without_state(spec: SessionClusterSpec) -> dict:
    return spec.model_dump(exclude={"state"}, exclude_none=True)
