import logging

from fastapi import APIRouter

from appmanager.core.models import SessionCluster, SessionClusterMetadata
from appmanager.core.states import SessionClusterState
from emulator.core.state import store

router = APIRouter(tags=["sessionclusters"])
logger = logging.getLogger("emulator.api.session_clusters")


def _validate_desired_state(cluster: SessionCluster):
    state = cluster.spec.state if cluster.spec is not None else None
    if state and state not in (SessionClusterState.RUNNING, SessionClusterState.STOPPED):
        raise ValueError(f"spec.state must be RUNNING or STOPPED, got {state}")


@router.get("/namespaces/{namespace}/sessionclusters")
def list_clusters(namespace: str):
    return {
        "kind": "SessionClusterList",
        "items": [c.to_wire() for c in store.list_clusters(namespace)],
    }


@router.post("/namespaces/{namespace}/sessionclusters")
def create_cluster(namespace: str, cluster: SessionCluster):
    if cluster.metadata is None or not cluster.metadata.name:
        raise ValueError("metadata.name is required")
    _validate_desired_state(cluster)
    return store.create_cluster(namespace, cluster).to_wire()


@router.get("/namespaces/{namespace}/sessionclusters/{name}")
def get_cluster(namespace: str, name: str):
    return store.get_cluster(namespace, name).to_wire()


@router.put("/namespaces/{namespace}/sessionclusters/{name}")
def replace_cluster(namespace: str, name: str, cluster: SessionCluster):
    """Create the cluster or replace its spec. Status follows on later ticks."""
    if cluster.metadata is None:
        cluster.metadata = SessionClusterMetadata(name=name)
    elif cluster.metadata.name and cluster.metadata.name != name:
        raise ValueError(f"metadata.name {cluster.metadata.name} does not match {name}")
    _validate_desired_state(cluster)
    return store.replace_cluster(namespace, name, cluster).to_wire()


@router.patch("/namespaces/{namespace}/sessionclusters/{name}")
def patch_cluster(namespace: str, name: str, cluster: SessionCluster):
    _validate_desired_state(cluster)
    return store.patch_cluster(namespace, name, cluster).to_wire()


@router.delete("/namespaces/{namespace}/sessionclusters/{name}")
def delete_cluster(namespace: str, name: str):
    return store.delete_cluster(namespace, name).to_wire()
