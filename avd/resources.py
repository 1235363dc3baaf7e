"""Process-lifetime handles to the SDK root, device catalog and instance index."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from avd.constants import (
    BUNDLED_DEVICE_CATALOG,
    DEVICE_CATALOG_RELPATH,
    EMULATOR_DIR_NAME,
    EMULATOR_LIB_DIR_NAME,
    HARDWARE_INI_NAME,
    IMAGE_ID_SEPARATORS,
    SOURCE_PROPERTIES_NAME,
    SYSTEM_IMAGES_DIR_NAME,
)
from avd.devices import DeviceCatalog
from avd.exceptions import ResourceUnavailable
from avd.instances import InstanceIndex
from avd.lazy import Lazy
from avd.utils import ensure_directory, log


class SdkRoot:
    """Read-only view of an installed SDK: system images and the emulator package."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def open(cls, path: Optional[Path]) -> "SdkRoot":
        if path is None:
            raise ResourceUnavailable("sdk", "<unset>", "set ANDROID_SDK_ROOT or ANDROID_HOME")
        if not path.is_dir():
            raise ResourceUnavailable("sdk", str(path), "directory does not exist")
        log("DEBUG", f"Using SDK root {path}")
        return cls(path)

    @staticmethod
    def image_path_segments(image_id: str) -> List[str]:
        segments = [seg.strip() for seg in IMAGE_ID_SEPARATORS.split(image_id) if seg.strip()]
        if segments and segments[0] == SYSTEM_IMAGES_DIR_NAME:
            segments = segments[1:]
        return segments

    def image_directory(self, image_id: str) -> Optional[Path]:
        """Candidate directory for an image id, or None when the id cannot name one."""
        segments = self.image_path_segments(image_id)
        if len(segments) < 2 or any(seg in {".", ".."} for seg in segments):
            return None
        return self.path.joinpath(SYSTEM_IMAGES_DIR_NAME, *segments)

    def emulator_package(self) -> Optional[Path]:
        location = self.path / EMULATOR_DIR_NAME
        if not location.is_dir():
            return None
        markers = (location / SOURCE_PROPERTIES_NAME, location / "emulator", location / "emulator.exe")
        if not any(marker.exists() for marker in markers):
            return None
        return location

    def hardware_definitions_file(self) -> Optional[Path]:
        package = self.emulator_package()
        if package is None:
            return None
        return package / EMULATOR_LIB_DIR_NAME / HARDWARE_INI_NAME

    def default_catalog_path(self) -> Path:
        return self.path / DEVICE_CATALOG_RELPATH


class ResourceHandles:
    """Lazily built, once-per-lifetime handles to the three backing catalogs."""

    def __init__(self, sdk_root: Optional[Path], avd_home: Path, catalog_path: Optional[Path] = None) -> None:
        self._sdk_root_path = sdk_root
        self._avd_home = avd_home
        self._catalog_path = catalog_path
        self._image_root: Lazy[SdkRoot] = Lazy(self._open_image_root, name="image root")
        self._device_catalog: Lazy[DeviceCatalog] = Lazy(self._open_device_catalog, name="device catalog")
        self._instance_index: Lazy[InstanceIndex] = Lazy(self._open_instance_index, name="instance index")

    def image_root(self) -> SdkRoot:
        return self._image_root.get()

    def device_catalog(self) -> DeviceCatalog:
        return self._device_catalog.get()

    def instance_index(self) -> InstanceIndex:
        return self._instance_index.get()

    def _open_image_root(self) -> SdkRoot:
        return SdkRoot.open(self._sdk_root_path)

    def _open_device_catalog(self) -> DeviceCatalog:
        path = self._catalog_path
        if path is None:
            path = self.image_root().default_catalog_path()
            if not path.is_file():
                log("INFO", f"No device catalog at {path}; using bundled profiles")
                path = BUNDLED_DEVICE_CATALOG
        return DeviceCatalog.load(path)

    def _open_instance_index(self) -> InstanceIndex:
        try:
            ensure_directory(self._avd_home)
        except OSError as exc:
            raise ResourceUnavailable("instance-index", str(self._avd_home), str(exc)) from exc
        return InstanceIndex(self._avd_home)
