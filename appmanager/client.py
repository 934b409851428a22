import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

import requests

from appmanager.api.artifacts import ArtifactsApi
from appmanager.api.deployment_defaults import DeploymentDefaultsApi
from appmanager.api.deployment_targets import DeploymentTargetsApi
from appmanager.api.deployments import DeploymentsApi
from appmanager.api.jobs import JobsApi
from appmanager.api.namespaces import NamespacesApi
from appmanager.api.savepoints import SavepointsApi
from appmanager.api.session_clusters import SessionClustersApi
from appmanager.api.system_info import SystemInfoApi
from appmanager.config import ClientConfig
from appmanager.core.models import ApiModel, ErrorEnvelope, ResourceList
from appmanager.core.paths import NAMESPACE_URI, SYSTEM_INFO_URI, UI_CONFIG_URI
from appmanager.errors import ApiError, TransportError

logger = logging.getLogger("appmanager.client")

M = TypeVar("M", bound=ApiModel)


class AppManagerClient:
    """
    Thin JSON-over-HTTP client for the Flink AppManager API.

    One request per call, no retries. Resource operations live on the
    per-collection attributes (``client.namespaces``, ``client.session_clusters``,
    ...). The underlying ``requests.Session`` is shared by every caller of
    this client. Concurrent waits on one client rely on the session's
    connection pool and cookie jar doing their own locking; requests does not
    promise more than that, so threads that need strict isolation should each
    build their own client.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session if session is not None else requests.Session()

        self.namespaces = NamespacesApi(self)
        self.deployment_targets = DeploymentTargetsApi(self)
        self.session_clusters = SessionClustersApi(self)
        self.deployments = DeploymentsApi(self)
        self.jobs = JobsApi(self)
        self.savepoints = SavepointsApi(self)
        self.artifacts = ArtifactsApi(self)
        self.deployment_defaults = DeploymentDefaultsApi(self)
        self.system_info = SystemInfoApi(self)

    # URLs

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def ui_config_url(self) -> str:
        return f"{self.config.endpoint}/{UI_CONFIG_URI}"

    @property
    def system_info_url(self) -> str:
        return f"{self.config.endpoint}/{SYSTEM_INFO_URI}"

    @property
    def namespaces_url(self) -> str:
        return f"{self.base_url}/{NAMESPACE_URI}"

    def namespace_url(self, namespace: str) -> str:
        return f"{self.namespaces_url}/{namespace}"

    def collection_url(self, namespace: str, collection: str) -> str:
        return f"{self.namespace_url(namespace)}/{collection}"

    # Transport

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        body: Optional[Any] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        headers = None if files else {"Content-Type": "application/json"}
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=body,
                files=files,
                headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        logger.debug("%s %s -> %s", method, url, resp.status_code)
        if not 200 <= resp.status_code < 300:
            self._raise_api_error(resp)
        return resp

    @staticmethod
    def _raise_api_error(resp: requests.Response):
        try:
            envelope = ErrorEnvelope.model_validate(resp.json())
        except ValueError as exc:
            raise ApiError(resp.status_code, str(exc)) from exc
        raise ApiError(
            resp.status_code,
            envelope.format(),
            reason=envelope.reason,
            envelope=envelope.to_wire(),
        )

    @staticmethod
    def decode(resp: requests.Response, model: Type[M]) -> M:
        try:
            return model.model_validate(resp.json())
        except ValueError as exc:
            raise ApiError(resp.status_code, f"invalid response body: {exc}") from exc

    def send(
        self,
        method: str,
        url: str,
        model: Optional[Type[M]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        body: Optional[ApiModel] = None,
    ) -> Optional[M]:
        """Send ``body`` as JSON and decode the response into ``model`` (or discard it)."""
        resp = self.request(
            method,
            url,
            params=params,
            body=body.to_wire() if body is not None else None,
        )
        if model is None:
            return None
        return self.decode(resp, model)

    def get(self, url: str, model: Type[M], params: Optional[Mapping[str, Any]] = None) -> M:
        return self.send("GET", url, model, params=params)

    def get_list(
        self, url: str, model: Type[M], params: Optional[Mapping[str, Any]] = None
    ) -> List[M]:
        resp = self.request("GET", url, params=params)
        resources = self.decode(resp, ResourceList)
        try:
            return [model.model_validate(item) for item in resources.items]
        except ValueError as exc:
            raise ApiError(resp.status_code, f"invalid response body: {exc}") from exc

    def get_bytes(self, url: str, params: Optional[Mapping[str, Any]] = None) -> bytes:
        return self.request("GET", url, params=params).content

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
