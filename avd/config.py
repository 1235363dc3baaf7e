"""Configuration loading and environment variable parsing for avd-provisioner."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from avd.constants import AVD_HOME, MAX_DEFAULT_RAM_SIZE_MB
from avd.exceptions import ConfigError
from avd.provisioner import ProvisioningOrchestrator
from avd.resources import ResourceHandles
from avd.utils import get_env, log, parse_int_env


@dataclass
class ProvisionerConfig:
    sdk_root: Path
    avd_home: Path
    catalog_path: Optional[Path]
    max_ram_mb: int = MAX_DEFAULT_RAM_SIZE_MB


def _path_env(*names: str) -> Optional[Path]:
    for name in names:
        raw = get_env(name)
        if raw is not None and raw.strip():
            return Path(raw.strip()).expanduser()
    return None


def parse_env() -> ProvisionerConfig:
    sdk_root = _path_env("ANDROID_SDK_ROOT", "ANDROID_HOME")
    if sdk_root is None:
        raise ConfigError("ANDROID_SDK_ROOT", "must be set (or ANDROID_HOME) to the installed SDK directory")

    avd_home = _path_env("ANDROID_AVD_HOME") or AVD_HOME
    catalog_path = _path_env("AVD_DEVICE_CATALOG")
    if catalog_path is not None and not catalog_path.is_file():
        log("WARN", f"AVD_DEVICE_CATALOG points to a missing file: {catalog_path}")
    max_ram_mb = parse_int_env("AVD_MAX_RAM_MB", str(MAX_DEFAULT_RAM_SIZE_MB))

    return ProvisionerConfig(
        sdk_root=sdk_root,
        avd_home=avd_home,
        catalog_path=catalog_path,
        max_ram_mb=max_ram_mb,
    )


def build_orchestrator(cfg: ProvisionerConfig) -> ProvisioningOrchestrator:
    handles = ResourceHandles(cfg.sdk_root, cfg.avd_home, catalog_path=cfg.catalog_path)
    return ProvisioningOrchestrator(handles, max_ram_mb=cfg.max_ram_mb)
