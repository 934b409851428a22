import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from pydantic import BaseModel, ValidationError

from appmanager.config import ENDPOINT_ENV
from appmanager.core.models import ApiModel
from appmanager.errors import ApiError, AppManagerError
from appmanager.loggingConf import configure_logging
from provider.deployment_target import DeploymentTargetHandler
from provider.errors import ProviderError
from provider.models import (
    DeploymentTargetResource,
    NamespaceResource,
    SessionClusterResource,
)
from provider.namespace import NamespaceHandler
from provider.provider import configure
from provider.session_cluster import SessionClusterHandler, to_resource

app = typer.Typer(help="Flink AppManager CLI")
namespace_app = typer.Typer(help="Manage AppManager namespaces.")
target_app = typer.Typer(help="Manage deployment targets.")
cluster_app = typer.Typer(help="Manage session clusters.")
app.add_typer(namespace_app, name="namespace")
app.add_typer(target_app, name="target")
app.add_typer(cluster_app, name="cluster")

WAIT_KINDS = ("namespace", "session-cluster", "deployment")


class Settings(BaseModel):
    endpoint: Optional[str] = None
    wait_interval: float = 0
    wait_timeout: float = 0


@app.callback()
def main(
    ctx: typer.Context,
    endpoint: Optional[str] = typer.Option(
        None, envvar=ENDPOINT_ENV, help="AppManager base URL."
    ),
    wait_interval: float = typer.Option(
        0, envvar="FLINK_APPMANAGER_WAIT_INTERVAL", help="Seconds between state polls (0 = default)."
    ),
    wait_timeout: float = typer.Option(
        0, envvar="FLINK_APPMANAGER_WAIT_TIMEOUT", help="Seconds before a wait gives up (0 = default)."
    ),
):
    configure_logging(stream=sys.stderr)
    ctx.obj = Settings(endpoint=endpoint, wait_interval=wait_interval, wait_timeout=wait_timeout)


def _client(ctx: typer.Context):
    settings: Settings = ctx.obj
    return configure(
        settings.endpoint or None,
        wait_interval=settings.wait_interval,
        wait_timeout=settings.wait_timeout,
    )


@contextmanager
def _reported():
    try:
        yield
    except ProviderError as exc:
        typer.echo(f"{exc.summary}: {exc.detail}", err=True)
        raise typer.Exit(code=1) from exc
    except (AppManagerError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _echo(model: BaseModel):
    if isinstance(model, ApiModel):
        typer.echo(json.dumps(model.to_wire(), indent=2))
    else:
        typer.echo(model.model_dump_json(indent=2))


@app.command()
def health(ctx: typer.Context):
    """Check that the AppManager endpoint answers."""
    with _reported():
        client = _client(ctx)
        info = client.system_info.get()
    build = info.status.build_version if info.status else None
    typer.echo(f"ok {client.config.endpoint} build={build or 'unknown'}")


@app.command("system-info")
def system_info(ctx: typer.Context):
    """Show AppManager build and JVM information."""
    with _reported():
        _echo(_client(ctx).system_info.get())


@namespace_app.command("create")
def namespace_create(ctx: typer.Context, name: str):
    """Create a namespace and wait until it is ACTIVE."""
    with _reported():
        handler = NamespaceHandler(_client(ctx))
        _echo(handler.create(NamespaceResource(name=name)))


@namespace_app.command("get")
def namespace_get(ctx: typer.Context, name: str):
    with _reported():
        _echo(NamespaceHandler(_client(ctx)).fetch(name))


@namespace_app.command("delete")
def namespace_delete(ctx: typer.Context, name: str):
    """Delete a namespace and wait until it is gone."""
    with _reported():
        NamespaceHandler(_client(ctx)).delete(NamespaceResource(name=name))
    typer.echo(f"namespace {name} deleted")


@target_app.command("create")
def target_create(
    ctx: typer.Context,
    namespace: str,
    name: str,
    k8s_namespace: Optional[str] = typer.Option(None, help="Kubernetes namespace (default: 'default')."),
):
    with _reported():
        handler = DeploymentTargetHandler(_client(ctx))
        plan = DeploymentTargetResource(namespace=namespace, name=name, k8s_namespace=k8s_namespace)
        _echo(handler.create(plan))


@target_app.command("get")
def target_get(ctx: typer.Context, namespace: str, name: str):
    with _reported():
        _echo(DeploymentTargetHandler(_client(ctx)).fetch(namespace, name))


@target_app.command("delete")
def target_delete(ctx: typer.Context, namespace: str, name: str):
    with _reported():
        DeploymentTargetHandler(_client(ctx)).delete(
            DeploymentTargetResource(namespace=namespace, name=name)
        )
    typer.echo(f"deployment target {namespace}/{name} deleted")


def _load_cluster(path: Path) -> SessionClusterResource:
    try:
        return SessionClusterResource.model_validate_json(path.read_text())
    except (OSError, ValidationError) as exc:
        typer.echo(f"invalid session cluster definition {path}: {exc}", err=True)
        raise typer.Exit(code=2) from exc


@cluster_app.command("apply")
def cluster_apply(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="JSON session cluster definition."),
):
    """
    Create the session cluster, or stop and re-run it with the new definition
    when it already exists. Blocks until the cluster is RUNNING.
    """
    plan = _load_cluster(path)
    with _reported():
        handler = SessionClusterHandler(_client(ctx))
        try:
            current = handler.fetch(plan.namespace, plan.name)
        except ProviderError as exc:
            if not (isinstance(exc.__cause__, ApiError) and exc.__cause__.not_found):
                raise
            _echo(handler.create(plan))
        else:
            _echo(handler.update(current, plan))


@cluster_app.command("get")
def cluster_get(ctx: typer.Context, namespace: str, name: str):
    with _reported():
        _echo(SessionClusterHandler(_client(ctx)).fetch(namespace, name))


@cluster_app.command("stop")
def cluster_stop(ctx: typer.Context, namespace: str, name: str):
    """Stop a session cluster and wait until it is STOPPED."""
    with _reported():
        _echo(to_resource(SessionClusterHandler(_client(ctx)).stop(namespace, name)))


@cluster_app.command("delete")
def cluster_delete(ctx: typer.Context, namespace: str, name: str):
    """Stop then delete a session cluster."""
    with _reported():
        handler = SessionClusterHandler(_client(ctx))
        handler.delete(handler.fetch(namespace, name))
    typer.echo(f"session cluster {namespace}/{name} deleted")


@app.command()
def wait(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help=f"One of: {', '.join(WAIT_KINDS)}."),
    name: str = typer.Argument(...),
    state: str = typer.Option(..., "--state", "-s", help="Target state, e.g. RUNNING."),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
):
    """
    Poll a resource until it reaches STATE or the wait timeout elapses.
    """
    if kind not in WAIT_KINDS:
        typer.echo(f"unknown kind {kind!r}; expected one of {', '.join(WAIT_KINDS)}", err=True)
        raise typer.Exit(code=2)
    if kind != "namespace" and not namespace:
        typer.echo(f"--namespace is required for {kind}", err=True)
        raise typer.Exit(code=2)

    with _reported():
        client = _client(ctx)
        if kind == "namespace":
            result = client.namespaces.wait_for_state(name, state)
        elif kind == "session-cluster":
            result = client.session_clusters.wait_for_state(name, state, namespace)
        else:
            result = client.deployments.wait_for_state(name, state, namespace)
    typer.echo(f"{kind} {name} state={result.state}")


@app.command()
def emulator(
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8080),
):
    """Serve the local AppManager emulator."""
    import uvicorn

    uvicorn.run("emulator.app:app", host=host, port=port)


if __name__ == "__main__":
    app()
