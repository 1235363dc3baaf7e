"""Create-or-reuse entry point for virtual device instances."""

from __future__ import annotations

from pathlib import Path

from avd.constants import MAX_DEFAULT_RAM_SIZE_MB
from avd.devices import DeviceProfileLookup
from avd.hardware import HardwareConfigBuilder, apply_profile, restrict_ram_size
from avd.images import ImageResolver
from avd.lazy import Deferred
from avd.models import ProvisioningRequest
from avd.resources import ResourceHandles
from avd.utils import log


class ProvisioningOrchestrator:
    """Return the configuration directory of a ready-to-run instance, creating it on first request.

    Instances are keyed by device name alone: a later request that reuses a name
    gets the existing instance back even if it asks for a different image or
    hardware profile.
    """

    def __init__(self, handles: ResourceHandles, max_ram_mb: int = MAX_DEFAULT_RAM_SIZE_MB) -> None:
        self.handles = handles
        self.max_ram_mb = max_ram_mb
        self.images = ImageResolver(handles)
        self.profiles = DeviceProfileLookup(handles)
        self.hardware = HardwareConfigBuilder(handles)

    def provision(self, request: ProvisioningRequest) -> Deferred[Path]:
        """Deferred handle to the instance's configuration directory; nothing runs until ``get()``."""
        return Deferred(lambda: self.create_or_retrieve(request), name=f"provision {request.device_name}")

    def provision_avd(self, image_id: str, device_name: str, hardware_profile_name: str) -> Deferred[Path]:
        return self.provision(ProvisioningRequest(image_id, device_name, hardware_profile_name))

    def create_or_retrieve(self, request: ProvisioningRequest) -> Path:
        index = self.handles.instance_index()
        existing = index.get(request.device_name)
        if existing is not None:
            log("INFO", f"Reusing instance '{request.device_name}' at {existing.config_directory}")
            return existing.config_directory

        log("INFO", f"Creating instance '{request.device_name}' from {request.image_id}")
        image = self.images.resolve(request.image_id)
        profile = self.profiles.find(request.hardware_profile_name)

        hardware_config = self.hardware.build(profile)
        hardware_config = apply_profile(hardware_config, profile)
        hardware_config = restrict_ram_size(hardware_config, self.max_ram_mb)

        record = index.create(
            request.device_name,
            image,
            hardware_config,
            profile.boot_properties,
            profile.supports_play_store,
        )
        log("SUCCESS", f"Instance '{request.device_name}' ready at {record.config_directory}")
        return record.config_directory
