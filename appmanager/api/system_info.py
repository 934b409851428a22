from typing import TYPE_CHECKING

from appmanager.core.models import SystemInformation

if TYPE_CHECKING:
    from appmanager.client import AppManagerClient


class SystemInfoApi:
    def __init__(self, client: "AppManagerClient"):
        self._client = client

    def get(self) -> SystemInformation:
        return self._client.get(self._client.system_info_url, SystemInformation)
