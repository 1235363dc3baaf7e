"""Hardware-property layering for new virtual device instances.

The final configuration of an instance is built from four layers, each
overriding the previous one key by key:

1. ``BASELINE_HARDWARE_PROPERTIES``
2. defaults declared in the emulator's ``hardware-properties.ini``
3. the selected device profile's hardware properties (``apply_profile``)
4. the RAM cap (``restrict_ram_size``), the only step allowed to lower a value

``HardwareConfigBuilder.build`` covers steps 1-2; the orchestrator applies
the other two.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping

from avd.constants import (
    BACK_CAMERA_KEY,
    BOOLEAN_NO,
    BOOLEAN_YES,
    CAMERA_EMULATED,
    CPU_CORES_KEY,
    CUSTOM_SKIN_FILE_KEY,
    DEFAULT_HEAP_MB,
    DEFAULT_INTERNAL_STORAGE,
    DEFAULT_SDCARD_SIZE,
    DEVICE_FRAME_KEY,
    FRONT_CAMERA_KEY,
    GPU_MODE_AUTO,
    HAS_HARDWARE_KEYBOARD_KEY,
    HOST_GPU_MODE_KEY,
    INITIAL_ORIENTATION_KEY,
    INTERNAL_STORAGE_KEY,
    MAX_DEFAULT_RAM_SIZE_MB,
    NETWORK_LATENCY_KEY,
    NETWORK_SPEED_KEY,
    NO_SKIN,
    RAM_SIZE_KEY,
    RECOMMENDED_NUMBER_OF_CORES,
    SDCARD_SIZE_KEY,
    USE_CHOSEN_SNAPSHOT_BOOT_KEY,
    USE_COLD_BOOT_KEY,
    USE_FAST_BOOT_KEY,
    USE_HOST_GPU_KEY,
    VM_HEAP_STORAGE_KEY,
)
from avd.exceptions import ResourceUnavailable
from avd.models import DeviceProfile, HardwareConfig, HardwarePropertyDef
from avd.utils import log, parse_size_to_mb

if TYPE_CHECKING:
    from avd.resources import ResourceHandles

BASELINE_HARDWARE_PROPERTIES: Mapping[str, str] = {
    BACK_CAMERA_KEY: CAMERA_EMULATED,
    CPU_CORES_KEY: str(RECOMMENDED_NUMBER_OF_CORES),
    CUSTOM_SKIN_FILE_KEY: NO_SKIN,
    DEVICE_FRAME_KEY: BOOLEAN_YES,
    FRONT_CAMERA_KEY: CAMERA_EMULATED,
    HAS_HARDWARE_KEYBOARD_KEY: BOOLEAN_YES,
    HOST_GPU_MODE_KEY: GPU_MODE_AUTO,
    INITIAL_ORIENTATION_KEY: "Portrait",
    INTERNAL_STORAGE_KEY: DEFAULT_INTERNAL_STORAGE,
    NETWORK_LATENCY_KEY: "None",
    NETWORK_SPEED_KEY: "Full",
    SDCARD_SIZE_KEY: DEFAULT_SDCARD_SIZE,
    USE_CHOSEN_SNAPSHOT_BOOT_KEY: BOOLEAN_NO,
    USE_COLD_BOOT_KEY: BOOLEAN_NO,
    USE_FAST_BOOT_KEY: BOOLEAN_YES,
    USE_HOST_GPU_KEY: BOOLEAN_YES,
    VM_HEAP_STORAGE_KEY: str(DEFAULT_HEAP_MB),
}

_DEFINITION_FIELDS = {"type", "default", "abstract", "description"}


def parse_hardware_definitions(text: str) -> List[HardwarePropertyDef]:
    """Parse the emulator's hardware-properties.ini.

    Each definition starts with a ``name = ...`` line; the ``type``, ``default``,
    ``abstract`` and ``description`` lines that follow belong to it.
    """
    definitions: List[HardwarePropertyDef] = []
    current = None
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = (part.strip() for part in stripped.split("=", 1))
        if key == "name":
            current = HardwarePropertyDef(name=value)
            definitions.append(current)
        elif current is not None and key in _DEFINITION_FIELDS:
            setattr(current, key, value)
    return definitions


def installation_defaults(definitions: Iterable[HardwarePropertyDef]) -> Dict[str, str]:
    """Defaults that are present and non-empty; everything else is left to lower layers."""
    return {d.name: d.default for d in definitions if d.default}


def overlay(base: Mapping[str, str], layer: Mapping[str, str]) -> HardwareConfig:
    """Return a new mapping where ``layer`` wins over ``base`` key by key."""
    merged = dict(base)
    merged.update(layer)
    return merged


def apply_profile(config: Mapping[str, str], profile: DeviceProfile) -> HardwareConfig:
    return overlay(config, profile.base_hardware_properties)


def restrict_ram_size(config: Mapping[str, str], max_mb: int = MAX_DEFAULT_RAM_SIZE_MB) -> HardwareConfig:
    """Clamp ``hw.ramSize`` to ``max_mb``. Absent or unparseable values are kept as-is."""
    restricted = dict(config)
    ram_mb = parse_size_to_mb(restricted.get(RAM_SIZE_KEY))
    if ram_mb is not None and ram_mb > max_mb:
        log("DEBUG", f"Capping {RAM_SIZE_KEY} from {restricted[RAM_SIZE_KEY]} to {max_mb}M")
        restricted[RAM_SIZE_KEY] = f"{max_mb}M"
    return restricted


class HardwareConfigBuilder:
    def __init__(self, handles: "ResourceHandles") -> None:
        self.handles = handles

    def hardware_definitions_file(self) -> Path:
        sdk = self.handles.image_root()
        hardware_ini = sdk.hardware_definitions_file()
        if hardware_ini is None:
            raise ResourceUnavailable(
                "runtime", str(sdk.path), "emulator package is not installed; cannot read hardware defaults"
            )
        if not hardware_ini.is_file():
            raise ResourceUnavailable("runtime", str(hardware_ini), "hardware definition file is missing")
        return hardware_ini

    def build(self, profile: DeviceProfile) -> HardwareConfig:
        """Baseline overlaid with the installed emulator's declared defaults."""
        hardware_ini = self.hardware_definitions_file()
        try:
            definitions = parse_hardware_definitions(hardware_ini.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ResourceUnavailable("runtime", str(hardware_ini), str(exc)) from exc
        defaults = installation_defaults(definitions)
        log("DEBUG", f"{len(defaults)} hardware defaults from {hardware_ini} for '{profile.display_name}'")
        return overlay(BASELINE_HARDWARE_PROPERTIES, defaults)
