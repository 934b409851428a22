from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from appmanager.client import AppManagerClient
from appmanager.config import ClientConfig

ENDPOINT = "http://appmanager.test"
BASE = f"{ENDPOINT}/api/v1"

UI_CONFIG = {
    "flinkImageTagsAndRepository": {
        "1.14.4-scala_2.12-java11-1": {
            "flinkVersion": "1.14.4",
            "image": {"repository": "registry.example.com/flink", "pullPolicy": "IfNotPresent"},
        },
        "no-slash": {
            "flinkVersion": "1.14.4",
            "image": {"repository": "flink", "pullPolicy": "Always"},
        },
        "no-policy": {
            "flinkVersion": "1.14.4",
            "image": {"repository": "registry.example.com/flink"},
        },
    }
}


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, content: Optional[bytes] = None):
        self.status_code = status_code
        if content is None:
            content = b"" if payload is None else json.dumps(payload).encode()
        self.content = content
        self.text = content.decode(errors="replace")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Records every request and replays responses queued per (method, url)."""

    def __init__(self):
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.closed = False

    def add(self, method: str, url: str, *responses):
        self.routes.setdefault((method, url), []).extend(responses)
        return self

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse(404, {"message": f"no route for {method} {url}"})
        # the last queued response is sticky
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True

    def methods(self) -> List[Tuple[str, str]]:
        return [(method, url) for method, url, _ in self.calls]


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session) -> AppManagerClient:
    config = ClientConfig(endpoint=ENDPOINT, wait_interval=0.01, wait_timeout=1)
    return AppManagerClient(config, session=session)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def namespace_payload(name: str, state: str) -> Dict[str, Any]:
    return {
        "kind": "Namespace",
        "apiVersion": "v1",
        "metadata": {"id": f"id-{name}", "name": name},
        "status": {"state": state},
    }


def cluster_payload(name: str, namespace: str, state: str, desired: str = "RUNNING") -> Dict[str, Any]:
    return {
        "kind": "SessionCluster",
        "apiVersion": "v1",
        "metadata": {"id": f"id-{name}", "name": name, "namespace": namespace},
        "spec": {
            "state": desired,
            "deploymentTargetName": "dt",
            "flinkVersion": "1.14.4",
            "flinkImageTag": "1.14.4-scala_2.12-java11-1",
            "numberOfTaskManagers": 2,
            "resources": {"jobmanager": {"cpu": 1, "memory": "1G"}},
            "flinkConfiguration": {"taskmanager.numberOfTaskSlots": "2"},
        },
        "status": {"state": state},
    }
