import logging
import os
from typing import Optional

import requests

from appmanager.client import AppManagerClient
from appmanager.config import ENDPOINT_ENV, ClientConfig
from provider.deployment_target import DeploymentTargetHandler
from provider.errors import ProviderError
from provider.namespace import NamespaceHandler
from provider.session_cluster import SessionClusterHandler

logger = logging.getLogger("provider")

TYPE_PREFIX = "flink_appmanager"

HANDLERS = {
    f"{TYPE_PREFIX}_{handler.type_suffix}": handler
    for handler in (NamespaceHandler, DeploymentTargetHandler, SessionClusterHandler)
}


def configure(
    endpoint: Optional[str] = None,
    wait_interval: Optional[float] = None,
    wait_timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> AppManagerClient:
    """
    Build the client shared by every resource handler. ``endpoint`` falls back
    to $FLINK_APPMANAGER_ENDPOINT; a zero or missing interval/timeout uses the
    client defaults.
    """
    if endpoint is None:
        endpoint = os.getenv(ENDPOINT_ENV, "")
    if not endpoint:
        raise ProviderError(
            "endpoint cannot be an empty string", "endpoint cannot be an empty string"
        )
    config = ClientConfig.build(endpoint, wait_interval=wait_interval, wait_timeout=wait_timeout)
    logger.info(
        "Configured AppManager client for %s (interval=%ss, timeout=%ss)",
        config.endpoint,
        config.wait_interval,
        config.wait_timeout,
    )
    return AppManagerClient(config, session=session)


def handler_for(resource_type: str, client: AppManagerClient):
    try:
        handler_cls = HANDLERS[resource_type]
    except KeyError:
        raise ProviderError(
            "Unknown resource type",
            f"{resource_type!r} is not one of {', '.join(sorted(HANDLERS))}",
        ) from None
    return handler_cls(client)
