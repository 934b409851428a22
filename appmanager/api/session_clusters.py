import json
import logging
from typing import TYPE_CHECKING, List

from appmanager.core.models import FlinkImageInfo, SessionCluster
from appmanager.core.paths import SESSION_CLUSTER_URI
from appmanager.core.states import SessionClusterState
from appmanager.errors import ImageResolutionError
from appmanager.wait import wait_for_state

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient

logger = logging.getLogger("appmanager.api.session_clusters")


class SessionClustersApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def _url(self, namespace: str, name: str = "") -> str:
        url = self._client.collection_url(namespace, SESSION_CLUSTER_URI)
        if name:
            url = f"{url}/{name}"
        return url

    def list(self, namespace: str) -> List[SessionCluster]:
        return self._client.get_list(self._url(namespace), SessionCluster)

    def get(self, name: str, namespace: str) -> SessionCluster:
        return self._client.get(self._url(namespace, name), SessionCluster)

    def create(self, cluster: SessionCluster, namespace: str) -> SessionCluster:
        cluster = self.with_image_info(cluster)
        cluster.metadata.namespace = namespace
        logger.info("Creating session cluster %s in %s", cluster.metadata.name, namespace)
        return self._client.send("POST", self._url(namespace), SessionCluster, body=cluster)

    def create_or_replace(self, cluster: SessionCluster, namespace: str) -> SessionCluster:
        cluster = self.with_image_info(cluster)
        name = cluster.metadata.name
        logger.info("Applying session cluster %s in %s", name, namespace)
        return self._client.send("PUT", self._url(namespace, name), SessionCluster, body=cluster)

    def update(self, cluster: SessionCluster, namespace: str) -> SessionCluster:
        """PATCH the cluster; image coordinates are re-resolved only when a tag is set."""
        if cluster.spec is not None and cluster.spec.flink_image_tag:
            cluster = self.with_image_info(cluster)
        name = cluster.metadata.name
        logger.info("Updating session cluster %s in %s", name, namespace)
        return self._client.send("PATCH", self._url(namespace, name), SessionCluster, body=cluster)

    def delete(self, name: str, namespace: str) -> SessionCluster:
        logger.info("Deleting session cluster %s in %s", name, namespace)
        return self._client.send("DELETE", self._url(namespace, name), SessionCluster)

    def wait_for_state(self, name: str, state: str, namespace: str) -> SessionCluster:
        return wait_for_state(
            lambda: self.get(name, namespace),
            state,
            SessionClusterState.is_valid,
            interval=self._client.config.wait_interval,
            timeout=self._client.config.wait_timeout,
            description=f"session cluster {namespace}/{name}",
        )

    def resolve_image(self, tag: str) -> FlinkImageInfo:
        """Look up registry, repository, pull policy and Flink version for an image tag."""
        raw = self._client.get_bytes(self._client.ui_config_url)
        try:
            ui_config = json.loads(raw)
        except ValueError as exc:
            raise ImageResolutionError(f"invalid ui config: {exc}") from exc

        if not isinstance(ui_config, dict):
            raise ImageResolutionError("invalid ui config: expected a JSON object")
        tags = ui_config.get("flinkImageTagsAndRepository") or {}
        entry = tags.get(tag) if isinstance(tags, dict) else None
        if not isinstance(entry, dict):
            entry = {}
        flink_version = entry.get("flinkVersion")
        if not flink_version:
            raise ImageResolutionError(f"get nil flink version for image tag {tag!r}")

        image = entry.get("image")
        if not isinstance(image, dict):
            image = {}
        pull_policy = image.get("pullPolicy")
        if not pull_policy:
            raise ImageResolutionError(f"get nil pull policy for image tag {tag!r}")

        repository = image.get("repository")
        if not isinstance(repository, str):
            repository = ""
        registry, sep, repository = repository.partition("/")
        if not sep:
            raise ImageResolutionError("can not found / in repository")

        return FlinkImageInfo(
            flink_version=flink_version,
            registry=registry,
            repository=repository,
            pull_policy=pull_policy,
            tag=tag,
        )

    def with_image_info(self, cluster: SessionCluster) -> SessionCluster:
        info = self.resolve_image(cluster.spec.flink_image_tag)
        cluster = cluster.model_copy(deep=True)
        cluster.spec.flink_image_registry = info.registry
        cluster.spec.flink_image_repository = info.repository
        cluster.spec.flink_image_pull_policy = info.pull_policy
        cluster.spec.flink_version = info.flink_version
        return cluster
