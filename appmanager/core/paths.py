NAMESPACE_URI = "namespaces"
DEPLOYMENT_TARGET_URI = "deployment-targets"
SESSION_CLUSTER_URI = "sessionclusters"
ARTIFACT_URI = "artifacts"
DEPLOYMENT_URI = "deployments"
JOB_URI = "jobs"
SAVEPOINT_URI = "savepoints"
DEPLOYMENT_DEFAULTS_URI = "deployment-defaults"
UI_CONFIG_URI = "ui/config.json"
SYSTEM_INFO_URI = "ui/appmanager/status/system-info"
