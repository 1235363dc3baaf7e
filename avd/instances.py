"""Existing-instance index for avd-provisioner.

Instances are stored the way the emulator expects them::

    <avd_home>/<name>.ini          registration (path=, path.rel=, target=)
    <avd_home>/<name>.avd/         configuration directory
        config.ini                 merged hardware properties + image keys
        boot.prop                  profile boot properties (optional)
"""

from __future__ import annotations

import shutil
import threading
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from avd.constants import (
    AVD_DIR_SUFFIX,
    AVD_INI_SUFFIX,
    AVD_NAME_RE,
    BOOT_PROP_NAME,
    CONFIG_INI_NAME,
    SYSTEM_IMAGES_DIR_NAME,
)
from avd.exceptions import ResourceInvalid
from avd.models import ImageDescriptor, InstanceRecord
from avd.utils import ensure_directory, log, read_properties, write_properties


def image_sysdir(image: ImageDescriptor) -> str:
    """SDK-relative image directory (``system-images/android-30/.../``) when possible."""
    parts = image.location.parts
    if SYSTEM_IMAGES_DIR_NAME in parts:
        start = len(parts) - 1 - parts[::-1].index(SYSTEM_IMAGES_DIR_NAME)
        return "/".join(parts[start:]) + "/"
    return str(image.location) + "/"


def instance_config(
    name: str,
    image: ImageDescriptor,
    hardware_config: Mapping[str, str],
    play_store: bool,
) -> Dict[str, str]:
    config = dict(hardware_config)
    config.update(
        {
            "AvdId": name,
            "avd.ini.displayname": name,
            "image.sysdir.1": image_sysdir(image),
            "tag.id": image.tag,
            "abi.type": image.abi,
            "PlayStore.enabled": "true" if play_store else "false",
        }
    )
    return config


class InstanceIndex:
    """Lookup-by-name and register-on-create over an AVD home directory.

    Creation is at most once per name: requests for the same name are
    serialized on a per-name lock, requests for different names only share
    the short directory reservation step.
    """

    def __init__(self, avd_home: Path) -> None:
        self.avd_home = avd_home
        self._lock = threading.Lock()
        self._name_locks: Dict[str, threading.Lock] = {}

    @staticmethod
    def _check_name(name: str) -> None:
        if name in {".", ".."} or not AVD_NAME_RE.fullmatch(name):
            raise ResourceInvalid("instance", name, "name must match [A-Za-z0-9._-]+ and not be '.' or '..'")

    def _name_lock(self, name: str) -> threading.Lock:
        with self._lock:
            return self._name_locks.setdefault(name, threading.Lock())

    def _ini_file(self, name: str) -> Path:
        return self.avd_home / f"{name}{AVD_INI_SUFFIX}"

    def get(self, name: str) -> Optional[InstanceRecord]:
        self._check_name(name)
        ini_file = self._ini_file(name)
        if not ini_file.is_file():
            return None
        try:
            props = read_properties(ini_file)
        except (OSError, UnicodeDecodeError) as exc:
            log("WARN", f"Ignoring unreadable instance registration {ini_file}: {exc}")
            return None
        path = props.get("path")
        if not path:
            rel = props.get("path.rel")
            if not rel:
                return None
            path = str(self.avd_home.parent / rel)
        directory = Path(path)
        if not directory.is_dir():
            log("DEBUG", f"Instance '{name}' is registered but {directory} is gone")
            return None
        return InstanceRecord(device_name=name, config_directory=directory, ini_file=ini_file)

    def names(self) -> List[str]:
        if not self.avd_home.is_dir():
            return []
        return sorted(p.name[: -len(AVD_INI_SUFFIX)] for p in self.avd_home.glob(f"*{AVD_INI_SUFFIX}"))

    def records(self) -> List[InstanceRecord]:
        records = []
        for name in self.names():
            try:
                record = self.get(name)
            except ResourceInvalid:
                log("WARN", f"Ignoring registration with invalid name '{name}'")
                continue
            if record is not None:
                records.append(record)
        return records

    def allocate_directory(self, name: str) -> Path:
        """Reserve a fresh ``<name>.avd`` directory, suffixed ``_1``, ``_2``... if the path is taken.

        The directory is created before returning, so two callers never get the same path.
        """
        self._check_name(name)
        candidate = self.avd_home / f"{name}{AVD_DIR_SUFFIX}"
        counter = 1
        with self._lock:
            try:
                ensure_directory(self.avd_home)
                while True:
                    try:
                        candidate.mkdir()
                        return candidate
                    except FileExistsError:
                        candidate = self.avd_home / f"{name}_{counter}{AVD_DIR_SUFFIX}"
                        counter += 1
            except OSError as exc:
                raise ResourceInvalid("instance", name, f"cannot create {candidate}: {exc}") from exc

    def create(
        self,
        name: str,
        image: ImageDescriptor,
        hardware_config: Mapping[str, str],
        boot_properties: Mapping[str, str],
        play_store: bool,
    ) -> InstanceRecord:
        """Create and register an instance. Registration is written last, so a failure leaves nothing behind."""
        self._check_name(name)
        with self._name_lock(name):
            existing = self.get(name)
            if existing is not None:
                log("DEBUG", f"Instance '{name}' was registered concurrently; reusing it")
                return existing

            directory = self.allocate_directory(name)
            log("DEBUG", f"Allocated {directory} for '{name}'")
            try:
                write_properties(
                    directory / CONFIG_INI_NAME,
                    instance_config(name, image, hardware_config, play_store),
                )
                if boot_properties:
                    write_properties(directory / BOOT_PROP_NAME, boot_properties)
                write_properties(
                    self._ini_file(name),
                    {
                        "avd.ini.encoding": "UTF-8",
                        "path": str(directory),
                        "path.rel": f"{self.avd_home.name}/{directory.name}",
                        "target": f"android-{image.api_level}",
                    },
                )
            except OSError as exc:
                shutil.rmtree(directory, ignore_errors=True)
                self._ini_file(name).unlink(missing_ok=True)
                raise ResourceInvalid("instance", name, f"creation failed: {exc}") from exc

        log("DEBUG", f"Registered instance '{name}' at {directory}")
        return InstanceRecord(device_name=name, config_directory=directory, ini_file=self._ini_file(name))

    def delete(self, name: str) -> bool:
        self._check_name(name)
        with self._name_lock(name):
            record = self.get(name)
            ini_file = self._ini_file(name)
            if record is None and not ini_file.exists():
                return False
            if record is not None:
                shutil.rmtree(record.config_directory, ignore_errors=True)
            ini_file.unlink(missing_ok=True)
        return True
