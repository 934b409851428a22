import logging
from typing import TYPE_CHECKING, List

from appmanager.core.models import Namespace
from appmanager.core.states import NamespaceState
from appmanager.errors import ApiError
from appmanager.wait import wait_for_state, wait_until_gone

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient

logger = logging.getLogger("appmanager.api.namespaces")


class NamespacesApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def list(self) -> List[Namespace]:
        return self._client.get_list(self._client.namespaces_url, Namespace)

    def get(self, name: str) -> Namespace:
        return self._client.get(self._client.namespace_url(name), Namespace)

    def create(self, name: str) -> Namespace:
        logger.info("Creating namespace %s", name)
        return self._client.send("POST", self._client.namespace_url(name), Namespace)

    def delete(self, name: str) -> Namespace:
        logger.info("Deleting namespace %s", name)
        return self._client.send("DELETE", self._client.namespace_url(name), Namespace)

    def wait_for_state(self, name: str, state: str) -> Namespace:
        return wait_for_state(
            lambda: self.get(name),
            state,
            NamespaceState.is_valid,
            interval=self._client.config.wait_interval,
            timeout=self._client.config.wait_timeout,
            description=f"namespace {name}",
        )

    def wait_until_deleted(self, name: str) -> None:
        wait_until_gone(
            lambda: self.get(name),
            interval=self._client.config.wait_interval,
            timeout=self._client.config.wait_timeout,
            description=f"namespace {name}",
        )

    def delete_and_wait(self, name: str) -> None:
        """Delete the namespace and block until AppManager stops returning it."""
        try:
            self.delete(name)
        except ApiError as exc:
            if exc.not_found:
                logger.info("Namespace %s already gone", name)
                return
            raise
        self.wait_until_deleted(name)
