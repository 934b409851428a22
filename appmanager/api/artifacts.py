import logging
from typing import IO, TYPE_CHECKING, List, Union

from appmanager.core.models import Artifact
from appmanager.core.paths import ARTIFACT_URI
from appmanager.errors import ApiError

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient

logger = logging.getLogger("appmanager.api.artifacts")

ARTIFACT_KIND_JAR = "jar"


class ArtifactsApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def _url(self, namespace: str, action: str) -> str:
        return f"{self._client.collection_url(namespace, ARTIFACT_URI)}/{action}"

    def upload_jar(self, filename: str, namespace: str, data: Union[bytes, IO[bytes]]) -> str:
        if not filename.endswith(ARTIFACT_KIND_JAR):
            raise ValueError("upload jar check: not a jar file")
        return self._upload(filename, namespace, data)

    def upload_property_file(
        self, filename: str, namespace: str, data: Union[bytes, IO[bytes]]
    ) -> str:
        return self._upload(filename, namespace, data)

    def _upload(self, filename: str, namespace: str, data: Union[bytes, IO[bytes]]) -> str:
        """Multipart upload under the ``file`` field; returns the stored artifact URI."""
        logger.info("Uploading %s to %s", filename, namespace)
        resp = self._client.request(
            "POST", self._url(namespace, "upload"), files={"file": (filename, data)}
        )
        artifact = self._client.decode(resp, Artifact)
        if artifact.metadata is None or not artifact.metadata.uri:
            raise ApiError(resp.status_code, f"upload of {filename} returned no artifact uri")
        return artifact.metadata.uri

    def list(self, namespace: str) -> List[Artifact]:
        return self._client.get_list(self._url(namespace, "list"), Artifact)

    def delete(self, filename: str, namespace: str) -> bool:
        if not filename:
            raise ValueError("filename cannot be empty")
        resp = self._client.request(
            "DELETE", self._url(namespace, "delete"), params={"filename": filename}
        )
        try:
            return bool(resp.json())
        except ValueError as exc:
            raise ApiError(resp.status_code, f"invalid response body: {exc}") from exc

    def mkdir(self, path: str, namespace: str) -> None:
        self._client.request("POST", self._url(namespace, "mkdir"), params={"path": path})

    def get_metadata(self, filename: str, namespace: str) -> Artifact:
        return self._client.get(
            self._url(namespace, "getMetadata"), Artifact, params={"filename": filename}
        )

    def download(self, filename: str, namespace: str) -> bytes:
        return self._client.get_bytes(
            self._url(namespace, "download"), params={"filename": filename}
        )
