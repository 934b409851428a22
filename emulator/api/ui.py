import json
import logging
import os

from fastapi import APIRouter

from appmanager.core.models import SystemInformation, SystemInformationStatus
from emulator.core.state import APP_VERSION

router = APIRouter(tags=["ui"])
logger = logging.getLogger("emulator.api.ui")

UI_CONFIG_FILE = os.getenv("EMULATOR_UI_CONFIG_FILE")

DEFAULT_UI_CONFIG = {
    "flinkImageTagsAndRepository": {
        "1.14.4-scala_2.12-java11-1": {
            "flinkVersion": "1.14.4",
            "image": {
                "repository": "registry.example.com/flink",
                "pullPolicy": "IfNotPresent",
            },
        },
        "1.13.6-scala_2.12-java8-1": {
            "flinkVersion": "1.13.6",
            "image": {
                "repository": "registry.example.com/flink",
                "pullPolicy": "Always",
            },
        },
    }
}


def load_ui_config() -> dict:
    if not UI_CONFIG_FILE:
        return DEFAULT_UI_CONFIG
    with open(UI_CONFIG_FILE, encoding="utf-8") as fh:
        return json.load(fh)


@router.get("/ui/config.json")
def ui_config():
    return load_ui_config()


@router.get("/ui/appmanager/status/system-info")
def system_info():
    info = SystemInformation(
        kind="SystemInformation",
        api_version="v1",
        status=SystemInformationStatus(
            jvm_version="emulated",
            build_version=APP_VERSION,
            commit_sha_short="0000000",
            commit_sha_long="0" * 40,
        ),
    )
    return info.to_wire()
