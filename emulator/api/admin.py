import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from emulator.core.state import store

router = APIRouter(tags=["admin"])
logger = logging.getLogger("emulator.api.admin")


class StateReq(BaseModel):
    state: str
    message: Optional[str] = None


@router.post("/admin/namespaces/{namespace}/sessionclusters/{name}/state")
def set_cluster_state(namespace: str, name: str, body: StateReq):
    """Force the observed status of a session cluster, e.g. to FAILED."""
    cluster = store.set_cluster_status(namespace, name, body.state, body.message)
    logger.info("Forced SessionCluster %s/%s to %s", namespace, name, body.state)
    return cluster.to_wire()


@router.post("/admin/reset")
def reset():
    store.reset()
    return {"ok": True}
