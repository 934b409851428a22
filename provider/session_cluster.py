import logging

from appmanager.client import AppManagerClient
from appmanager.core.models import (
    Logging,
    ResourceSpec,
    SessionCluster,
    SessionClusterMetadata,
    SessionClusterSpec,
)
from appmanager.core.states import SessionClusterState
from provider.errors import reporting
from provider.importing import parse_import_id
from provider.models import ResourceLimits, SessionClusterResource

logger = logging.getLogger("provider.session_cluster")

DEFAULT_LOGGING_PROFILE = "default"
DEFAULT_ROOT_LOG_LEVEL = "INFO"


def to_resource(cluster: SessionCluster) -> SessionClusterResource:
    spec = cluster.spec or SessionClusterSpec()
    return SessionClusterResource(
        id=cluster.metadata.id,
        namespace=cluster.metadata.namespace,
        name=cluster.metadata.name,
        state=cluster.state,
        deployment_target_name=spec.deployment_target_name,
        flink_version=spec.flink_version,
        flink_image_tag=spec.flink_image_tag or "",
        number_of_task_managers=spec.number_of_task_managers or 0,
        resources={
            name: ResourceLimits(cpu=limits.cpu or 0, memory=limits.memory or "")
            for name, limits in (spec.resources or {}).items()
        },
        flink_configuration=dict(spec.flink_configuration or {}),
    )


def to_session_cluster(resource: SessionClusterResource) -> SessionCluster:
    return SessionCluster(
        metadata=SessionClusterMetadata(name=resource.name, namespace=resource.namespace),
        spec=SessionClusterSpec(
            state=resource.state,
            deployment_target_name=resource.deployment_target_name,
            flink_image_tag=resource.flink_image_tag,
            number_of_task_managers=resource.number_of_task_managers,
            flink_configuration=dict(resource.flink_configuration),
            resources={
                name: ResourceSpec(cpu=limits.cpu, memory=limits.memory)
                for name, limits in resource.resources.items()
            },
        ),
    )


class SessionClusterHandler:
    """
    Session clusters are changed by stopping them and applying the new
    definition with desired state RUNNING; deletion also stops first since
    AppManager refuses to delete a running cluster.
    """

    type_suffix = "session_cluster"

    def __init__(self, client: AppManagerClient):
        self.client = client

    def run(self, plan: SessionClusterResource) -> SessionCluster:
        cluster = to_session_cluster(plan)
        cluster.spec.logging = Logging(
            log4j_loggers={"": DEFAULT_ROOT_LOG_LEVEL},
            logging_profile=DEFAULT_LOGGING_PROFILE,
        )
        cluster.spec.state = SessionClusterState.RUNNING.value

        self.client.session_clusters.create_or_replace(cluster, plan.namespace)
        return self.client.session_clusters.wait_for_state(
            plan.name, SessionClusterState.RUNNING, plan.namespace
        )

    def stop(self, namespace: str, name: str) -> SessionCluster:
        cluster = SessionCluster(
            metadata=SessionClusterMetadata(name=name, namespace=namespace),
            spec=SessionClusterSpec(state=SessionClusterState.STOPPED.value),
        )
        logger.info("Stopping session cluster %s/%s", namespace, name)
        self.client.session_clusters.update(cluster, namespace)
        return self.client.session_clusters.wait_for_state(
            name, SessionClusterState.STOPPED, namespace
        )

    def create(self, plan: SessionClusterResource) -> SessionClusterResource:
        with reporting("Error create sessionCluster", "could not create sessionCluster, unexpected error"):
            cluster = self.run(plan)
        return to_resource(cluster)

    def read(self, state: SessionClusterResource) -> SessionClusterResource:
        return self.fetch(state.namespace, state.name)

    def fetch(self, namespace: str, name: str) -> SessionClusterResource:
        with reporting("Error reading sessionCluster", "Could not read sessionCluster, unexpected error"):
            return to_resource(self.client.session_clusters.get(name, namespace))

    def update(
        self, state: SessionClusterResource, plan: SessionClusterResource
    ) -> SessionClusterResource:
        with reporting("Error stop sessionCluster", "Could not stop sessionCluster, unexpected error"):
            self.stop(state.namespace, state.name)
        with reporting("Error create sessionCluster", "could not create sessionCluster, unexpected error"):
            cluster = self.run(plan)
        return to_resource(cluster)

    def delete(self, state: SessionClusterResource) -> None:
        with reporting("Error stop sessionCluster", "Could not stop sessionCluster, unexpected error"):
            self.stop(state.namespace, state.name)
        with reporting("Error delete sessionCluster", "Could not delete sessionCluster, unexpected error"):
            self.client.session_clusters.delete(state.name, state.namespace)

    def import_resource(self, import_id: str) -> SessionClusterResource:
        namespace, name = parse_import_id(import_id, "sessionCluster")
        return self.fetch(namespace, name)
