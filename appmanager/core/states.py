from enum import Enum


class StateEnum(str, Enum):
    """String-valued state tokens; ``is_valid`` is the allow-list check used by waits."""

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in {member.value for member in cls}

    def __str__(self) -> str:
        return self.value


class NamespaceState(StateEnum):
    INIT = "INIT"
    ACTIVE = "ACTIVE"
    MARKED_FOR_DELETION = "MARKED_FOR_DELETION"


class SessionClusterState(StateEnum):
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
    STARTING = "STARTING"
    PENDING_UPDATE = "PENDING_UPDATE"
    UPDATING = "UPDATING"
    STOPPING = "STOPPING"
    FAILED = "FAILED"


class DeploymentState(StateEnum):
    RUNNING = "RUNNING"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"
    TRANSITIONING = "TRANSITIONING"
    FAILED = "FAILED"
    FINISHED = "FINISHED"


class DeploymentConditionType(StateEnum):
    CLUSTER_UNREACHABLE = "ClusterUnreachable"
    JOB_FAILING = "JobFailing"
    JOB_UNSTABLE = "JobUnstable"


class UpgradeStrategyKind(StateEnum):
    NONE = "NONE"
    STATELESS = "STATELESS"
    STATEFUL = "STATEFUL"


class RestoreStrategyKind(StateEnum):
    NONE = "NONE"
    LATEST_STATE = "LATEST_STATE"
    LATEST_SAVEPOINT = "LATEST_SAVEPOINT"


class JobState(StateEnum):
    STARTING = "STARTING"
    STANDBY = "STANDBY"
    TERMINATING = "TERMINATING"
    FAILED = "FAILED"
    TERMINATED = "TERMINATED"
    FINISHED = "FINISHED"
    STARTED = "STARTED"


class FlinkJobStatus(StateEnum):
    INITIALIZING = "INITIALIZING"
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    FAILING = "FAILING"
    FAILED = "FAILED"
    CANCELLING = "CANCELLING"
    CANCELED = "CANCELED"
    FINISHED = "FINISHED"
    RESTARTING = "RESTARTING"
    SUSPENDED = "SUSPENDED"
    RECONCILING = "RECONCILING"


class SavepointState(StateEnum):
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PENDING_DELETION = "PENDING_DELETION"
    DELETING = "DELETING"
    FAILED_DELETION = "FAILED_DELETION"


class SavepointOrigin(StateEnum):
    USER_REQUEST = "USER_REQUEST"
    SUSPEND = "SUSPEND"
    COPIED = "COPIED"
    RETAINED_CHECKPOINT = "RETAINED_CHECKPOINT"


class SavepointType(StateEnum):
    UNKNOWN = "UNKNOWN"
    FULL = "FULL"
    INCREMENTAL = "INCREMENTAL"
