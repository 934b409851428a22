import logging
from typing import TYPE_CHECKING, List, Optional

from appmanager.core.models import Savepoint
from appmanager.core.paths import SAVEPOINT_URI

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient

logger = logging.getLogger("appmanager.api.savepoints")


class SavepointsApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def _url(self, namespace: str) -> str:
        return self._client.collection_url(namespace, SAVEPOINT_URI)

    def list(
        self,
        namespace: str,
        *,
        deployment_id: Optional[str] = None,
        job_id: Optional[str] = None,
        restore_strategy: Optional[str] = None,
    ) -> List[Savepoint]:
        params = {}
        if deployment_id:
            params["deploymentId"] = deployment_id
        if job_id:
            params["jobID"] = job_id
        if restore_strategy:
            params["restoreStrategy"] = restore_strategy
        return self._client.get_list(self._url(namespace), Savepoint, params=params or None)

    def get(self, savepoint_id: str, namespace: str) -> Savepoint:
        return self._client.get(f"{self._url(namespace)}/{savepoint_id}", Savepoint)

    def create(self, savepoint: Savepoint, namespace: str) -> Savepoint:
        logger.info("Requesting savepoint in %s", namespace)
        return self._client.send("POST", self._url(namespace), Savepoint, body=savepoint)

    def delete(self, savepoint_id: str, namespace: str, force: bool = False) -> None:
        logger.info("Deleting savepoint %s in %s (force=%s)", savepoint_id, namespace, force)
        self._client.send(
            "DELETE",
            f"{self._url(namespace)}/{savepoint_id}",
            params={"force": "true" if force else "false"},
        )
