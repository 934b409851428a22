import logging
from typing import TYPE_CHECKING, List

from appmanager.core.models import DeploymentTarget
from appmanager.core.paths import DEPLOYMENT_TARGET_URI

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient

logger = logging.getLogger("appmanager.api.deployment_targets")


class DeploymentTargetsApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def _url(self, namespace: str, name: str = "") -> str:
        url = self._client.collection_url(namespace, DEPLOYMENT_TARGET_URI)
        if name:
            url = f"{url}/{name}"
        return url

    def list(self, namespace: str) -> List[DeploymentTarget]:
        return self._client.get_list(self._url(namespace), DeploymentTarget)

    def get(self, name: str, namespace: str) -> DeploymentTarget:
        if not name:
            raise ValueError("name cannot be empty")
        return self._client.get(self._url(namespace, name), DeploymentTarget)

    def create(self, target: DeploymentTarget, namespace: str) -> DeploymentTarget:
        logger.info("Creating deployment target %s in %s", target.metadata.name, namespace)
        return self._client.send("POST", self._url(namespace), DeploymentTarget, body=target)

    def delete(self, name: str, namespace: str) -> DeploymentTarget:
        if not name:
            raise ValueError("name cannot be empty")
        logger.info("Deleting deployment target %s in %s", name, namespace)
        return self._client.send("DELETE", self._url(namespace, name), DeploymentTarget)
