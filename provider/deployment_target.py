import logging

from appmanager.client import AppManagerClient
from appmanager.core.models import (
    DeploymentTarget,
    DeploymentTargetMetadata,
    DeploymentTargetSpec,
    KubernetesTarget,
)
from provider.errors import reporting
from provider.importing import parse_import_id
from provider.models import DEFAULT_K8S_NAMESPACE, DeploymentTargetResource

logger = logging.getLogger("provider.deployment_target")


def _to_resource(target: DeploymentTarget) -> DeploymentTargetResource:
    kubernetes = target.spec.kubernetes if target.spec else None
    return DeploymentTargetResource(
        id=target.metadata.id,
        namespace=target.metadata.namespace,
        name=target.metadata.name,
        k8s_namespace=kubernetes.namespace if kubernetes else None,
    )


class DeploymentTargetHandler:
    type_suffix = "deployment_target"

    def __init__(self, client: AppManagerClient):
        self.client = client

    def create(self, plan: DeploymentTargetResource) -> DeploymentTargetResource:
        target = DeploymentTarget(
            metadata=DeploymentTargetMetadata(name=plan.name, namespace=plan.namespace),
            spec=DeploymentTargetSpec(
                kubernetes=KubernetesTarget(namespace=plan.k8s_namespace or DEFAULT_K8S_NAMESPACE)
            ),
        )
        with reporting("Error create deploymentTarget", "Could not create deploymentTarget, unexpected error"):
            created = self.client.deployment_targets.create(target, plan.namespace)
        logger.info("Deployment target %s/%s created", plan.namespace, plan.name)
        return _to_resource(created)

    def read(self, state: DeploymentTargetResource) -> DeploymentTargetResource:
        return self.fetch(state.namespace, state.name)

    def fetch(self, namespace: str, name: str) -> DeploymentTargetResource:
        with reporting("Error reading deploymentTarget", "Could not read deploymentTarget"):
            return _to_resource(self.client.deployment_targets.get(name, namespace))

    def update(
        self, state: DeploymentTargetResource, plan: DeploymentTargetResource
    ) -> DeploymentTargetResource:
        # AppManager has no update for deployment targets; changes require replacement
        return self.read(state)

    def delete(self, state: DeploymentTargetResource) -> None:
        with reporting("Error delete deploymentTarget", "Could not deleted deploymentTarget, unexpected error"):
            self.client.deployment_targets.delete(state.name, state.namespace)

    def import_resource(self, import_id: str) -> DeploymentTargetResource:
        namespace, name = parse_import_id(import_id, "deploymentTarget")
        return self.fetch(namespace, name)
