import logging

from appmanager.client import AppManagerClient
from appmanager.core.models import Namespace
from appmanager.core.states import NamespaceState
from provider.errors import reporting
from provider.models import NamespaceResource

logger = logging.getLogger("provider.namespace")


def _to_resource(namespace: Namespace) -> NamespaceResource:
    return NamespaceResource(
        id=namespace.metadata.id,
        name=namespace.metadata.name,
        state=namespace.state,
    )


class NamespaceHandler:
    type_suffix = "namespace"

    def __init__(self, client: AppManagerClient):
        self.client = client

    def create(self, plan: NamespaceResource) -> NamespaceResource:
        with reporting("Error creating namespace", "Could not create namespace, unexpected error"):
            self.client.namespaces.create(plan.name)
        with reporting("Error namespace state change", "Could not namespace state change, unexpected error"):
            namespace = self.client.namespaces.wait_for_state(plan.name, NamespaceState.ACTIVE)
        logger.info("Namespace %s is active", plan.name)
        return _to_resource(namespace)

    def read(self, state: NamespaceResource) -> NamespaceResource:
        return self.fetch(state.name)

    def fetch(self, name: str) -> NamespaceResource:
        with reporting("Error reading namespace", "Could not read namespace"):
            return _to_resource(self.client.namespaces.get(name))

    def update(self, state: NamespaceResource, plan: NamespaceResource) -> NamespaceResource:
        # only the name is configurable and it is fixed for the resource's lifetime
        return self.read(state)

    def delete(self, state: NamespaceResource) -> None:
        with reporting("Error Delete namespace", "Could not delete namespace, unexpected error"):
            self.client.namespaces.delete_and_wait(state.name)

    def import_resource(self, import_id: str) -> NamespaceResource:
        return self.fetch(import_id)
