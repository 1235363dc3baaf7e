"""Data models for avd-provisioner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

HardwareConfig = Dict[str, str]


def _frozen(mapping: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ProvisioningRequest:
    image_id: str
    device_name: str  # cache key
    hardware_profile_name: str


@dataclass(frozen=True)
class ImageDescriptor:
    image_id: str
    location: Path
    api_level: int
    abi: str
    tag: str = "default"
    vendor: Optional[str] = None
    properties: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DeviceProfile:
    display_name: str
    base_hardware_properties: Mapping[str, str] = field(default_factory=dict)
    boot_properties: Mapping[str, str] = field(default_factory=dict)
    supports_play_store: bool = False
    id: Optional[str] = None
    manufacturer: Optional[str] = None

    def __post_init__(self):
        # Read-only views so catalog entries cannot be mutated by callers.
        object.__setattr__(self, "base_hardware_properties", _frozen(self.base_hardware_properties))
        object.__setattr__(self, "boot_properties", _frozen(self.boot_properties))


@dataclass
class HardwarePropertyDef:
    name: str
    type: str = "string"
    default: Optional[str] = None
    abstract: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class InstanceRecord:
    device_name: str
    config_directory: Path
    ini_file: Optional[Path] = None
