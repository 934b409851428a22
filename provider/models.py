from typing import Dict, Optional

from pydantic import BaseModel, Field

DEFAULT_K8S_NAMESPACE = "default"


class NamespaceResource(BaseModel):
    id: Optional[str] = None
    name: str
    state: Optional[str] = None


class DeploymentTargetResource(BaseModel):
    id: Optional[str] = None
    namespace: str
    name: str
    k8s_namespace: Optional[str] = None


class ResourceLimits(BaseModel):
    cpu: float
    memory: str


class SessionClusterResource(BaseModel):
    id: Optional[str] = None
    namespace: str
    name: str
    state: Optional[str] = None
    deployment_target_name: Optional[str] = None
    flink_version: Optional[str] = None
    flink_image_tag: str
    number_of_task_managers: int
    resources: Dict[str, ResourceLimits] = Field(default_factory=dict)
    flink_configuration: Dict[str, str] = Field(default_factory=dict)
