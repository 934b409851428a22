import logging

from fastapi import APIRouter

from emulator.core.state import store

router = APIRouter(tags=["namespaces"])
logger = logging.getLogger("emulator.api.namespaces")


@router.get("/namespaces")
def list_namespaces():
    return {"kind": "NamespaceList", "items": [ns.to_wire() for ns in store.list_namespaces()]}


@router.get("/namespaces/{namespace}")
def get_namespace(namespace: str):
    return store.get_namespace(namespace).to_wire()


@router.post("/namespaces/{namespace}")
def create_namespace(namespace: str):
    """
    Register a namespace. It starts in INIT and turns ACTIVE on a later
    reconciler tick.
    """
    return store.create_namespace(namespace).to_wire()


@router.delete("/namespaces/{namespace}")
def delete_namespace(namespace: str):
    return store.mark_namespace_deleted(namespace).to_wire()
