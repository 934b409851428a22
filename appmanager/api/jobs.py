from typing import TYPE_CHECKING, List, Optional

from appmanager.core.models import Job
from appmanager.core.paths import JOB_URI

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient


class JobsApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def get(self, job_id: str, namespace: str) -> Job:
        url = f"{self._client.collection_url(namespace, JOB_URI)}/{job_id}"
        return self._client.get(url, Job)

    def list(self, namespace: str, deployment_id: Optional[str] = None) -> List[Job]:
        params = {"deploymentId": deployment_id} if deployment_id else None
        return self._client.get_list(self._client.collection_url(namespace, JOB_URI), Job, params=params)
