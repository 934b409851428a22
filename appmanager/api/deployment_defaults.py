from typing import TYPE_CHECKING

from appmanager.core.models import DeploymentDefaults
from appmanager.core.paths import DEPLOYMENT_DEFAULTS_URI

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient


class DeploymentDefaultsApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def _url(self, namespace: str) -> str:
        return self._client.collection_url(namespace, DEPLOYMENT_DEFAULTS_URI)

    def get(self, namespace: str) -> DeploymentDefaults:
        return self._client.get(self._url(namespace), DeploymentDefaults)

    def cover(self, defaults: DeploymentDefaults, namespace: str) -> DeploymentDefaults:
        """Replace the namespace defaults wholesale (PUT)."""
        return self._client.send("PUT", self._url(namespace), DeploymentDefaults, body=defaults)

    def update(self, defaults: DeploymentDefaults, namespace: str) -> DeploymentDefaults:
        return self._client.send("PATCH", self._url(namespace), DeploymentDefaults, body=defaults)
