from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ANNOTATION_PREFIX = "com.xmfunny.flink"
ANNOTATION_DEPLOYMENT_SPEC_VERSION = (
    ANNOTATION_PREFIX + ".appmanager.controller.deployment.spec.version"
)


class ApiModel(BaseModel):
    """Wire model: camelCase on the wire, snake_case in Python, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def __str__(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class Resource(ApiModel):
    kind: Optional[str] = None
    api_version: Optional[str] = None


class StatefulResource(Resource):
    """Resource whose ``status.state`` can be waited on."""

    @property
    def state(self) -> Optional[str]:
        status = getattr(self, "status", None)
        return status.state if status is not None else None


class Failure(ApiModel):
    message: Optional[str] = None
    reason: Optional[str] = None
    failed_at: Optional[datetime] = None


class JarArtifact(ApiModel):
    kind: Optional[str] = None
    jar_uri: Optional[str] = None
    main_args: Optional[str] = None
    entry_class: Optional[str] = None
    additional_dependencies: Optional[List[str]] = None
    flink_version: Optional[str] = None
    flink_image_registry: Optional[str] = None
    flink_image_repository: Optional[str] = None
    flink_image_tag: Optional[str] = None


class Logging(ApiModel):
    logging_profile: Optional[str] = None
    log4j2_configuration_template: Optional[str] = Field(
        default=None, alias="log4j2ConfigurationTemplate"
    )
    log4j_loggers: Optional[Dict[str, str]] = Field(default=None, alias="log4jLoggers")


class ResourceSpec(ApiModel):
    cpu: Optional[float] = None
    memory: Optional[str] = None


class ErrorEnvelope(Resource):
    """Body AppManager returns with non-2xx responses."""

    message: Optional[str] = None
    reason: Optional[str] = None
    status_code: Optional[int] = None
    context: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("context", mode="before")
    @classmethod
    def _null_context(cls, value):
        return {} if value is None else value

    def format(self) -> str:
        message = self.message or ""
        if "exceptionMessage" in self.context:
            return f"{message}: {self.context['exceptionMessage']}"
        return message


# Namespaces


class NamespaceMetadata(ApiModel):
    id: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    resource_version: Optional[int] = None


class NamespaceStatus(ApiModel):
    state: Optional[str] = None


class Namespace(StatefulResource):
    metadata: Optional[NamespaceMetadata] = None
    status: Optional[NamespaceStatus] = None


# Deployment targets


class KubernetesTarget(ApiModel):
    namespace: Optional[str] = None


class DeploymentTargetMetadata(ApiModel):
    id: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None
    annotations: Optional[Dict[str, str]] = None
    labels: Optional[Dict[str, str]] = None
    resource_version: Optional[int] = None


class DeploymentTargetSpec(ApiModel):
    kubernetes: Optional[KubernetesTarget] = None


class DeploymentTarget(Resource):
    metadata: Optional[DeploymentTargetMetadata] = None
    spec: Optional[DeploymentTargetSpec] = None


# Session clusters


class SessionClusterMetadata(ApiModel):
    id: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[int] = None


class SessionClusterSpec(ApiModel):
    state: Optional[str] = None
    deployment_target_name: Optional[str] = None
    flink_version: Optional[str] = None
    flink_image_registry: Optional[str] = None
    flink_image_tag: Optional[str] = None
    flink_image_repository: Optional[str] = None
    flink_image_pull_policy: Optional[str] = None
    number_of_task_managers: Optional[int] = None
    resources: Optional[Dict[str, ResourceSpec]] = None
    flink_configuration: Optional[Dict[str, str]] = None
    logging: Optional[Logging] = None


class SessionClusterStatusRunning(ApiModel):
    started_at: Optional[str] = None
    last_update_time: Optional[str] = None
    task_manager_numbers: Optional[int] = None


class SessionClusterStatus(ApiModel):
    state: Optional[str] = None
    failure: Optional[Failure] = None
    running: Optional[SessionClusterStatusRunning] = None


class SessionCluster(StatefulResource):
    metadata: Optional[SessionClusterMetadata] = None
    spec: Optional[SessionClusterSpec] = None
    status: Optional[SessionClusterStatus] = None


class FlinkImageInfo(BaseModel):
    """Image coordinates resolved from the UI config for one image tag."""

    flink_version: str
    registry: str
    repository: str
    pull_policy: str
    tag: Optional[str] = None


# Deployments


class DeploymentMetadata(ApiModel):
    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    namespace: Optional[str] = None
    # the service spells this one without the "d"
    create_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[int] = None


class UpgradeStrategy(ApiModel):
    kind: Optional[str] = None


class RestoreStrategy(ApiModel):
    kind: Optional[str] = None
    allow_non_restored_state: Optional[bool] = None


class DeploymentTemplateMetadata(ApiModel):
    annotations: Optional[Dict[str, str]] = None


class DeploymentTemplateSpec(ApiModel):
    artifact: Optional[JarArtifact] = None
    parallelism: Optional[int] = None
    number_of_task_managers: Optional[int] = None
    resources: Optional[Dict[str, ResourceSpec]] = None
    flink_configuration: Optional[Dict[str, str]] = None


class DeploymentTemplate(ApiModel):
    metadata: Optional[DeploymentTemplateMetadata] = None
    spec: Optional[DeploymentTemplateSpec] = None


class DeploymentSpec(ApiModel):
    state: Optional[str] = None
    upgrade_strategy: Optional[UpgradeStrategy] = None
    restore_strategy: Optional[RestoreStrategy] = None
    deployment_target_id: Optional[str] = None
    deployment_target_name: Optional[str] = Field(
        default=None, alias="deploymentTargetIName"
    )
    session_cluster_name: Optional[str] = None
    max_savepoint_creation_attempts: Optional[int] = None
    max_job_creation_attempts: Optional[int] = None
    template: Optional[DeploymentTemplate] = None


class DeploymentCondition(ApiModel):
    condition_type: Optional[str] = Field(default=None, alias="type")
    status: Optional[str] = None
    message: Optional[str] = None
    reason: Optional[str] = None
    last_transition_time: Optional[str] = None
    last_update_time: Optional[str] = None


class DeploymentStatusRunning(ApiModel):
    job_id: Optional[str] = None
    transition_time: Optional[datetime] = None
    conditions: Optional[List[DeploymentCondition]] = None


class DeploymentStatus(ApiModel):
    state: Optional[str] = None
    running: Optional[DeploymentStatusRunning] = None


class Deployment(StatefulResource):
    metadata: Optional[DeploymentMetadata] = None
    spec: Optional[DeploymentSpec] = None
    status: Optional[DeploymentStatus] = None


class DeploymentDefaultsMetadata(ApiModel):
    id: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[int] = None


class DeploymentDefaults(Resource):
    metadata: Optional[DeploymentDefaultsMetadata] = None
    spec: Optional[DeploymentSpec] = None


# Jobs


class JobMetadata(ApiModel):
    id: Optional[str] = None
    namespace: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    deployment_id: Optional[str] = None
    deployment_name: Optional[str] = None
    session_cluster_name: Optional[str] = None
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[int] = None


class JobSpec(ApiModel):
    savepoint_location: Optional[str] = None
    allow_non_restored_state: Optional[bool] = None
    parallelism: Optional[int] = None
    number_of_task_managers: Optional[int] = None
    artifact: Optional[JarArtifact] = None
    logging: Optional[Logging] = None
    flink_configuration: Optional[Dict[str, str]] = None
    user_flink_configuration: Optional[Dict[str, str]] = None
    resources: Optional[Dict[str, str]] = None


class JobStatusStarted(ApiModel):
    started_at: Optional[datetime] = None
    flink_job_id: Optional[str] = None
    last_update_time: Optional[datetime] = None
    observed_flink_job_restarts: Optional[int] = None
    observed_flink_job_status: Optional[str] = None


class JobStatus(ApiModel):
    state: Optional[str] = None
    failure: Optional[Failure] = None
    started: Optional[JobStatusStarted] = None


class Job(StatefulResource):
    metadata: Optional[JobMetadata] = None
    spec: Optional[JobSpec] = None
    status: Optional[JobStatus] = None


# Savepoints


class SavepointMetadata(ApiModel):
    id: Optional[str] = None
    namespace: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    deployment_id: Optional[str] = Field(default=None, alias="deploymentID")
    job_id: Optional[str] = Field(default=None, alias="jobID")
    origin: Optional[str] = None
    savepoint_type: Optional[str] = Field(default=None, alias="type")
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[int] = None


class SavepointSpec(ApiModel):
    savepoint_location: Optional[str] = None
    flink_savepoint_id: Optional[str] = Field(default=None, alias="flinkSavepointID")


class SavepointStatus(ApiModel):
    state: Optional[str] = None
    failure: Optional[Failure] = None


class Savepoint(StatefulResource):
    metadata: Optional[SavepointMetadata] = None
    spec: Optional[SavepointSpec] = None
    status: Optional[SavepointStatus] = None


# Artifacts


class ArtifactMetadata(ApiModel):
    filename: Optional[str] = None
    content: Optional[str] = None
    uri: Optional[str] = None
    create_time: Optional[str] = None


class Artifact(Resource):
    metadata: Optional[ArtifactMetadata] = None


# System info


class SystemInformationStatus(ApiModel):
    jvm_version: Optional[str] = None
    commit_sha_long: Optional[str] = None
    commit_sha_short: Optional[str] = None
    build_version: Optional[str] = None
    build_time: Optional[str] = None


class SystemInformation(Resource):
    status: Optional[SystemInformationStatus] = None


class ResourceList(Resource):
    """``{"items": [...]}`` envelope used by every list endpoint."""

    items: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value):
        return [] if value is None else value
