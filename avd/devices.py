"""Device-profile catalog loading and lookup for avd-provisioner."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from avd.constants import BOOLEAN_NO, BOOLEAN_YES
from avd.exceptions import ResourceNotFound, ResourceUnavailable
from avd.models import DeviceProfile
from avd.utils import log

if TYPE_CHECKING:
    from avd.resources import ResourceHandles


def _stringify(value) -> str:
    if isinstance(value, bool):
        return BOOLEAN_YES if value else BOOLEAN_NO
    return str(value)


def _string_map(raw, path: Path, field: str) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ResourceUnavailable("device-catalog", str(path), f"'{field}' must be a mapping")
    return {str(key): _stringify(value) for key, value in raw.items()}


class DeviceCatalog:
    """Ordered collection of hardware profiles read from a YAML catalog file.

    Expected layout::

        devices:
          - name: Nexus 5
            id: Nexus 5
            manufacturer: Google
            playstore: true
            hardware:
              hw.ramSize: 2048M
              hw.lcd.density: 480
            boot_props:
              ro.product.model: Nexus 5
    """

    def __init__(self, profiles: List[DeviceProfile], source: Optional[Path] = None) -> None:
        self._profiles = list(profiles)
        self.source = source

    @classmethod
    def load(cls, path: Path) -> "DeviceCatalog":
        if not path.is_file():
            raise ResourceUnavailable("device-catalog", str(path), "catalog file not found")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ResourceUnavailable("device-catalog", str(path), str(exc)) from exc
        entries = data.get("devices") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ResourceUnavailable("device-catalog", str(path), "expected a top-level 'devices' list")

        profiles = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ResourceUnavailable("device-catalog", str(path), f"entry #{index} has no 'name'")
            profiles.append(
                DeviceProfile(
                    display_name=str(entry["name"]),
                    base_hardware_properties=_string_map(entry.get("hardware"), path, "hardware"),
                    boot_properties=_string_map(entry.get("boot_props"), path, "boot_props"),
                    supports_play_store=bool(entry.get("playstore", False)),
                    id=str(entry["id"]) if entry.get("id") is not None else None,
                    manufacturer=entry.get("manufacturer"),
                )
            )
        log("DEBUG", f"Loaded {len(profiles)} device profiles from {path}")
        return cls(profiles, source=path)

    def devices(self) -> Iterator[DeviceProfile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)


class DeviceProfileLookup:
    def __init__(self, handles: "ResourceHandles") -> None:
        self.handles = handles

    def find(self, hardware_profile_name: str) -> DeviceProfile:
        """Return the first profile whose display name matches exactly (case-sensitive)."""
        for profile in self.handles.device_catalog().devices():
            if profile.display_name == hardware_profile_name:
                return profile
        raise ResourceNotFound("hardware-profile", hardware_profile_name)
