from __future__ import annotations

import pytest

from appmanager.config import DEFAULT_WAIT_INTERVAL, DEFAULT_WAIT_TIMEOUT
from appmanager.errors import ApiError
from provider.deployment_target import DeploymentTargetHandler
from provider.errors import ProviderError
from provider.importing import parse_import_id
from provider.models import DeploymentTargetResource, NamespaceResource, SessionClusterResource
from provider.namespace import NamespaceHandler
from provider.provider import HANDLERS, configure, handler_for
from provider.session_cluster import SessionClusterHandler

from conftest import BASE, UI_CONFIG, FakeResponse, cluster_payload, namespace_payload

TAG = "1.14.4-scala_2.12-java11-1"


def _plan(**overrides) -> SessionClusterResource:
    values = dict(
        namespace="prod",
        name="sc",
        deployment_target_name="dt",
        flink_image_tag=TAG,
        number_of_task_managers=2,
        resources={"jobmanager": {"cpu": 1, "memory": "1G"}},
        flink_configuration={"taskmanager.numberOfTaskSlots": "2"},
    )
    values.update(overrides)
    return SessionClusterResource(**values)


def test_namespace_create_waits_for_active(client, session):
    url = f"{BASE}/namespaces/prod"
    session.add("POST", url, FakeResponse(200, namespace_payload("prod", "INIT")))
    session.add(
        "GET",
        url,
        FakeResponse(200, namespace_payload("prod", "INIT")),
        FakeResponse(200, namespace_payload("prod", "ACTIVE")),
    )
    created = NamespaceHandler(client).create(NamespaceResource(name="prod"))
    assert created == NamespaceResource(id="id-prod", name="prod", state="ACTIVE")
    assert session.methods() == [("POST", url), ("GET", url), ("GET", url)]


def test_namespace_create_failure_is_reported(client, session):
    url = f"{BASE}/namespaces/prod"
    session.add("POST", url, FakeResponse(409, {"message": "namespace exists"}))
    with pytest.raises(ProviderError) as excinfo:
        NamespaceHandler(client).create(NamespaceResource(name="prod"))
    err = excinfo.value
    assert err.summary == "Error creating namespace"
    assert err.detail == "Could not create namespace, unexpected error: namespace exists"
    assert isinstance(err.__cause__, ApiError)
    assert session.methods() == [("POST", url)]


def test_namespace_delete_waits_until_gone(client, session):
    url = f"{BASE}/namespaces/prod"
    session.add("DELETE", url, FakeResponse(200, namespace_payload("prod", "MARKED_FOR_DELETION")))
    session.add(
        "GET",
        url,
        FakeResponse(200, namespace_payload("prod", "MARKED_FOR_DELETION")),
        FakeResponse(404, {"message": "not found"}),
    )
    NamespaceHandler(client).delete(NamespaceResource(name="prod"))
    assert session.methods() == [("DELETE", url), ("GET", url), ("GET", url)]


def test_namespace_delete_of_missing_namespace_is_done(client, session):
    url = f"{BASE}/namespaces/prod"
    session.add("DELETE", url, FakeResponse(404, {"message": "not found"}))
    NamespaceHandler(client).delete(NamespaceResource(name="prod"))
    assert session.methods() == [("DELETE", url)]


def test_namespace_import_reads_by_name(client, session):
    session.add("GET", f"{BASE}/namespaces/prod", FakeResponse(200, namespace_payload("prod", "ACTIVE")))
    assert NamespaceHandler(client).import_resource("prod").state == "ACTIVE"


def test_deployment_target_defaults_k8s_namespace(client, session):
    url = f"{BASE}/namespaces/prod/deployment-targets"
    session.add(
        "POST",
        url,
        FakeResponse(
            200,
            {
                "metadata": {"id": "t-1", "name": "dt", "namespace": "prod"},
                "spec": {"kubernetes": {"namespace": "default"}},
            },
        ),
    )
    created = DeploymentTargetHandler(client).create(DeploymentTargetResource(namespace="prod", name="dt"))
    body = session.calls[0][2]["json"]
    assert body == {
        "metadata": {"name": "dt", "namespace": "prod"},
        "spec": {"kubernetes": {"namespace": "default"}},
    }
    assert created.k8s_namespace == "default"
    assert created.id == "t-1"


def test_deployment_target_import(client, session):
    session.add(
        "GET",
        f"{BASE}/namespaces/prod/deployment-targets/dt",
        FakeResponse(200, {"metadata": {"name": "dt", "namespace": "prod"}, "spec": {"kubernetes": {"namespace": "flink"}}}),
    )
    target = DeploymentTargetHandler(client).import_resource("prod,dt")
    assert (target.namespace, target.name, target.k8s_namespace) == ("prod", "dt", "flink")


@pytest.mark.parametrize("import_id", ["prod", "prod,dt,extra", ",dt", "prod,"])
def test_bad_import_ids(import_id):
    with pytest.raises(ProviderError) as excinfo:
        parse_import_id(import_id, "sessionCluster")
    assert excinfo.value.summary == "Unexpected Import Identifier"
    assert "namespace,sessionClusterName" in excinfo.value.detail


def test_session_cluster_create_runs_and_waits(client, session):
    url = f"{BASE}/namespaces/prod/sessionclusters/sc"
    session.add("GET", client.ui_config_url, FakeResponse(200, UI_CONFIG))
    session.add("PUT", url, FakeResponse(200, cluster_payload("sc", "prod", "STOPPED")))
    session.add(
        "GET",
        url,
        FakeResponse(200, cluster_payload("sc", "prod", "STARTING")),
        FakeResponse(200, cluster_payload("sc", "prod", "RUNNING")),
    )
    created = SessionClusterHandler(client).create(_plan())

    assert created.state == "RUNNING"
    assert created.flink_version == "1.14.4"
    assert created.resources["jobmanager"].memory == "1G"
    body = session.calls[1][2]["json"]
    assert body["spec"]["state"] == "RUNNING"
    assert body["spec"]["logging"] == {"loggingProfile": "default", "log4jLoggers": {"": "INFO"}}
    assert body["spec"]["flinkImageRegistry"] == "registry.example.com"


def test_session_cluster_delete_stops_first(client, session):
    url = f"{BASE}/namespaces/prod/sessionclusters/sc"
    session.add("PATCH", url, FakeResponse(200, cluster_payload("sc", "prod", "RUNNING", desired="STOPPED")))
    session.add("GET", url, FakeResponse(200, cluster_payload("sc", "prod", "STOPPED", desired="STOPPED")))
    session.add("DELETE", url, FakeResponse(200, cluster_payload("sc", "prod", "STOPPED", desired="STOPPED")))

    SessionClusterHandler(client).delete(_plan(state="RUNNING"))
    assert session.methods() == [("PATCH", url), ("GET", url), ("DELETE", url)]
    assert session.calls[0][2]["json"]["spec"] == {"state": "STOPPED"}


def test_session_cluster_update_stops_then_reruns(client, session):
    url = f"{BASE}/namespaces/prod/sessionclusters/sc"
    session.add("PATCH", url, FakeResponse(200, cluster_payload("sc", "prod", "RUNNING", desired="STOPPED")))
    session.add(
        "GET",
        url,
        FakeResponse(200, cluster_payload("sc", "prod", "STOPPED", desired="STOPPED")),
        FakeResponse(200, cluster_payload("sc", "prod", "RUNNING")),
    )
    session.add("GET", client.ui_config_url, FakeResponse(200, UI_CONFIG))
    session.add("PUT", url, FakeResponse(200, cluster_payload("sc", "prod", "STOPPED")))

    updated = SessionClusterHandler(client).update(_plan(state="RUNNING"), _plan(number_of_task_managers=4))
    assert updated.state == "RUNNING"
    assert [method for method, _ in session.methods()] == ["PATCH", "GET", "GET", "PUT", "GET"]
    assert session.calls[3][2]["json"]["spec"]["numberOfTaskManagers"] == 4


def test_session_cluster_stop_timeout_is_reported(client, session):
    url = f"{BASE}/namespaces/prod/sessionclusters/sc"
    session.add("PATCH", url, FakeResponse(200, cluster_payload("sc", "prod", "RUNNING", desired="STOPPED")))
    session.add("GET", url, FakeResponse(200, cluster_payload("sc", "prod", "STOPPING", desired="STOPPED")))
    client.config = client.config.model_copy(update={"wait_timeout": 0.05})

    with pytest.raises(ProviderError) as excinfo:
        SessionClusterHandler(client).delete(_plan(state="RUNNING"))
    assert excinfo.value.summary == "Error stop sessionCluster"
    assert "Timed out" in excinfo.value.detail
    assert ("DELETE", url) not in session.methods()


def test_configure_reads_endpoint_from_env(monkeypatch, session):
    monkeypatch.setenv("FLINK_APPMANAGER_ENDPOINT", "http://env.test/")
    client = configure(session=session)
    assert client.config.endpoint == "http://env.test"
    assert client.config.wait_interval == DEFAULT_WAIT_INTERVAL
    assert client.config.wait_timeout == DEFAULT_WAIT_TIMEOUT


def test_configure_zero_wait_settings_use_defaults(session):
    client = configure("http://x.test", wait_interval=0, wait_timeout=0, session=session)
    assert (client.config.wait_interval, client.config.wait_timeout) == (3, 180)
    client = configure("http://x.test", wait_interval=1, wait_timeout=10, session=session)
    assert (client.config.wait_interval, client.config.wait_timeout) == (1, 10)


def test_configure_requires_endpoint(monkeypatch):
    monkeypatch.delenv("FLINK_APPMANAGER_ENDPOINT", raising=False)
    with pytest.raises(ProviderError, match="endpoint cannot be an empty string"):
        configure()


def test_handler_registry(client):
    assert set(HANDLERS) == {
        "flink_appmanager_namespace",
        "flink_appmanager_deployment_target",
        "flink_appmanager_session_cluster",
    }
    assert isinstance(handler_for("flink_appmanager_namespace", client), NamespaceHandler)
    with pytest.raises(ProviderError):
        handler_for("flink_appmanager_job", client)


def test_session_cluster_import_without_image_tag(client, session):
    payload = cluster_payload("sc", "prod", "STOPPED", desired="STOPPED")
    del payload["spec"]["flinkImageTag"]
    del payload["spec"]["numberOfTaskManagers"]
    session.add("GET", f"{BASE}/namespaces/prod/sessionclusters/sc", FakeResponse(200, payload))

    imported = SessionClusterHandler(client).import_resource("prod,sc")
    assert imported.flink_image_tag == ""
    assert imported.number_of_task_managers == 0
    assert imported.state == "STOPPED"
