import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from appmanager.core.models import Deployment
from appmanager.core.paths import DEPLOYMENT_URI
from appmanager.core.states import DeploymentState
from appmanager.wait import wait_for_state

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient

logger = logging.getLogger("appmanager.api.deployments")

LABEL_SELECTOR = "labelSelector"


def label_selector(labels: Dict[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in labels.items())


class DeploymentsApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def _url(self, namespace: str, name: str = "") -> str:
        url = self._client.collection_url(namespace, DEPLOYMENT_URI)
        if name:
            url = f"{url}/{name}"
        return url

    def list(self, namespace: str, labels: Optional[Dict[str, str]] = None) -> List[Deployment]:
        params = {LABEL_SELECTOR: label_selector(labels or {})}
        return self._client.get_list(self._url(namespace), Deployment, params=params)

    def get(self, name: str, namespace: str) -> Deployment:
        return self._client.get(self._url(namespace, name), Deployment)

    def create(self, deployment: Deployment, namespace: str) -> Deployment:
        deployment = deployment.model_copy(deep=True)
        deployment.metadata.namespace = namespace
        logger.info("Creating deployment %s in %s", deployment.metadata.name, namespace)
        return self._client.send("POST", self._url(namespace), Deployment, body=deployment)

    def create_or_replace(self, deployment: Deployment, namespace: str) -> Deployment:
        name = deployment.metadata.name
        logger.info("Applying deployment %s in %s", name, namespace)
        return self._client.send("PUT", self._url(namespace, name), Deployment, body=deployment)

    def update(self, deployment: Deployment, namespace: str) -> Deployment:
        name = deployment.metadata.name
        logger.info("Updating deployment %s in %s", name, namespace)
        return self._client.send("PATCH", self._url(namespace, name), Deployment, body=deployment)

    def delete(self, name: str, namespace: str) -> Deployment:
        logger.info("Deleting deployment %s in %s", name, namespace)
        return self._client.send("DELETE", self._url(namespace, name), Deployment)

    def wait_for_state(self, name: str, state: str, namespace: str) -> Deployment:
        return wait_for_state(
            lambda: self.get(name, namespace),
            state,
            DeploymentState.is_valid,
            interval=self._client.config.wait_interval,
            timeout=self._client.config.wait_timeout,
            description=f"deployment {namespace}/{name}",
        )
