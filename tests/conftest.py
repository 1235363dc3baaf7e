"""Shared test fixtures: a throwaway SDK tree, device catalog and AVD home."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Optional

import pytest
import yaml

from avd.provisioner import ProvisioningOrchestrator
from avd.resources import ResourceHandles

IMAGE_ID = "system-images;android-30;google_apis;x86"

HARDWARE_INI = textwrap.dedent(
    """\
    # Hardware definitions shipped with the emulator
    name        = hw.cpu.ncore
    type        = integer
    default     = 2
    abstract    = Number of CPU cores

    name        = hw.ramSize
    type        = diskSize
    default     = 0
    abstract    = Device RAM size

    name        = hw.lcd.density
    type        = integer
    default     =
    abstract    = LCD density
    """
)

DEVICE_CATALOG = {
    "devices": [
        {
            "name": "Nexus 5",
            "id": "Nexus 5",
            "manufacturer": "Google",
            "playstore": True,
            "hardware": {"hw.ramSize": "2048M", "hw.lcd.density": 480, "hw.lcd.width": 1080},
            "boot_props": {"ro.product.model": "Nexus 5"},
        },
        {
            "name": "Pixel 3",
            "id": "pixel_3",
            "manufacturer": "Google",
            "hardware": {"hw.ramSize": "1024M", "hw.camera.back": "virtualscene"},
        },
        {
            "name": "Small Phone",
            "id": "small_phone",
            "hardware": {},
        },
    ]
}


def write_image(sdk_root: Path, image_id: str = IMAGE_ID, properties: Optional[str] = None) -> Path:
    segments = image_id.split(";")[1:]
    location = sdk_root.joinpath("system-images", *segments)
    location.mkdir(parents=True, exist_ok=True)
    if properties is None:
        properties = "AndroidVersion.ApiLevel=30\nSystemImage.Abi=x86\nSystemImage.TagId=google_apis\n"
    (location / "source.properties").write_text(properties)
    return location


def write_emulator(sdk_root: Path, hardware_ini: str = HARDWARE_INI) -> Path:
    emulator = sdk_root / "emulator"
    (emulator / "lib").mkdir(parents=True, exist_ok=True)
    (emulator / "source.properties").write_text("Pkg.Revision=30.0.26\n")
    hardware_file = emulator / "lib" / "hardware-properties.ini"
    hardware_file.write_text(hardware_ini)
    return hardware_file


def write_catalog(sdk_root: Path, catalog=None) -> Path:
    path = sdk_root / "devices" / "devices.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(DEVICE_CATALOG if catalog is None else catalog))
    return path


@pytest.fixture
def sdk_root(tmp_path) -> Path:
    """A minimal SDK with one image, the emulator package and a device catalog."""
    root = tmp_path / "sdk"
    write_image(root)
    write_emulator(root)
    write_catalog(root)
    return root


@pytest.fixture
def avd_home(tmp_path) -> Path:
    return tmp_path / "home" / "avd"


@pytest.fixture
def handles(sdk_root, avd_home) -> ResourceHandles:
    return ResourceHandles(sdk_root, avd_home)


@pytest.fixture
def orchestrator(handles) -> ProvisioningOrchestrator:
    return ProvisioningOrchestrator(handles)


_PARSE_ENV_VARS = [
    "ANDROID_SDK_ROOT",
    "ANDROID_HOME",
    "ANDROID_AVD_HOME",
    "AVD_DEVICE_CATALOG",
    "AVD_MAX_RAM_MB",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear all environment variables that parse_env() reads."""
    for key in _PARSE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
