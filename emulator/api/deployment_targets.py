from fastapi import APIRouter

from appmanager.core.models import DeploymentTarget
from emulator.core.state import store

router = APIRouter(tags=["deployment-targets"])


@router.get("/namespaces/{namespace}/deployment-targets")
def list_targets(namespace: str):
    return {
        "kind": "DeploymentTargetList",
        "items": [t.to_wire() for t in store.list_targets(namespace)],
    }


@router.post("/namespaces/{namespace}/deployment-targets")
def create_target(namespace: str, target: DeploymentTarget):
    if target.metadata is None or not target.metadata.name:
        raise ValueError("metadata.name is required")
    return store.create_target(namespace, target).to_wire()


@router.get("/namespaces/{namespace}/deployment-targets/{name}")
def get_target(namespace: str, name: str):
    return store.get_target(namespace, name).to_wire()


@router.delete("/namespaces/{namespace}/deployment-targets/{name}")
def delete_target(namespace: str, name: str):
    return store.delete_target(namespace, name).to_wire()
