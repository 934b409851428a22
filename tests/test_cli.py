from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from cli.cli import app

from conftest import BASE, UI_CONFIG, FakeResponse, cluster_payload, namespace_payload

runner = CliRunner()


@pytest.fixture
def cli_client(monkeypatch, client):
    recorded = {}

    def fake_configure(endpoint=None, wait_interval=None, wait_timeout=None, session=None):
        recorded.update(endpoint=endpoint, wait_interval=wait_interval, wait_timeout=wait_timeout)
        return client

    monkeypatch.setattr("cli.cli.configure", fake_configure)
    monkeypatch.setattr("cli.cli.configure_logging", lambda **kwargs: None)
    client.recorded = recorded
    return client


def test_namespace_create(cli_client, session):
    url = f"{BASE}/namespaces/prod"
    session.add("POST", url, FakeResponse(200, namespace_payload("prod", "INIT")))
    session.add("GET", url, FakeResponse(200, namespace_payload("prod", "ACTIVE")))

    result = runner.invoke(app, ["--endpoint", "http://cli.test", "namespace", "create", "prod"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["state"] == "ACTIVE"
    assert cli_client.recorded["endpoint"] == "http://cli.test"


def test_wait_for_session_cluster(cli_client, session):
    url = f"{BASE}/namespaces/prod/sessionclusters/sc"
    session.add(
        "GET",
        url,
        FakeResponse(200, cluster_payload("sc", "prod", "STARTING")),
        FakeResponse(200, cluster_payload("sc", "prod", "RUNNING")),
    )
    result = runner.invoke(app, ["wait", "session-cluster", "sc", "--state", "RUNNING", "-n", "prod"])
    assert result.exit_code == 0, result.output
    assert "session-cluster sc state=RUNNING" in result.output


def test_wait_rejects_invalid_state(cli_client, session):
    result = runner.invoke(app, ["wait", "namespace", "prod", "--state", "DONE"])
    assert result.exit_code == 1
    assert "use a wrong state: DONE" in result.output
    assert session.calls == []


def test_wait_requires_namespace_for_clusters(cli_client):
    result = runner.invoke(app, ["wait", "deployment", "etl", "--state", "RUNNING"])
    assert result.exit_code == 2
    assert "--namespace is required" in result.output


def test_wait_unknown_kind(cli_client):
    result = runner.invoke(app, ["wait", "job", "j-1", "--state", "RUNNING"])
    assert result.exit_code == 2
    assert "unknown kind" in result.output


def test_api_errors_exit_with_one(cli_client, session):
    session.add(
        "GET",
        f"{BASE}/namespaces/prod/deployment-targets/dt",
        FakeResponse(403, {"message": "forbidden", "context": {"exceptionMessage": "no access"}}),
    )
    result = runner.invoke(app, ["target", "get", "prod", "dt"])
    assert result.exit_code == 1
    assert "Error reading deploymentTarget" in result.output
    assert "forbidden: no access" in result.output


def test_cluster_apply_creates_missing_cluster(cli_client, session, tmp_path):
    url = f"{BASE}/namespaces/prod/sessionclusters/sc"
    definition = tmp_path / "sc.json"
    definition.write_text(
        json.dumps(
            {
                "namespace": "prod",
                "name": "sc",
                "deployment_target_name": "dt",
                "flink_image_tag": "1.14.4-scala_2.12-java11-1",
                "number_of_task_managers": 1,
            }
        )
    )
    session.add(
        "GET",
        url,
        FakeResponse(404, {"message": "not found"}),
        FakeResponse(200, cluster_payload("sc", "prod", "RUNNING")),
    )
    session.add("GET", cli_client.ui_config_url, FakeResponse(200, UI_CONFIG))
    session.add("PUT", url, FakeResponse(200, cluster_payload("sc", "prod", "STOPPED")))

    result = runner.invoke(app, ["cluster", "apply", str(definition)])
    assert result.exit_code == 0, result.output
    assert [method for method, _ in session.methods()] == ["GET", "GET", "PUT", "GET"]
    assert '"state": "RUNNING"' in result.output


def test_cluster_apply_rejects_bad_definition(cli_client, session, tmp_path):
    definition = tmp_path / "sc.json"
    definition.write_text(json.dumps({"namespace": "prod"}))
    result = runner.invoke(app, ["cluster", "apply", str(definition)])
    assert result.exit_code == 2
    assert "invalid session cluster definition" in result.output
    assert session.calls == []


def test_health(cli_client, session):
    session.add(
        "GET",
        cli_client.system_info_url,
        FakeResponse(200, {"kind": "SystemInformation", "status": {"buildVersion": "2.6.1"}}),
    )
    result = runner.invoke(app, ["health"])
    assert result.exit_code == 0, result.output
    assert "build=2.6.1" in result.output
