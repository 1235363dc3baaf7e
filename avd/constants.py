"""Global constants and path configuration for avd-provisioner."""

from __future__ import annotations

import os
import re
from pathlib import Path

# Default location of instances when ANDROID_AVD_HOME is unset.
AVD_HOME = Path.home() / ".android" / "avd"

TRUTHY = {"1", "true", "yes", "on"}
_LOG_VERBOSE = os.environ.get("LOG_VERBOSE", "").lower() in TRUTHY

# SDK layout
SYSTEM_IMAGES_DIR_NAME = "system-images"
EMULATOR_DIR_NAME = "emulator"
EMULATOR_LIB_DIR_NAME = "lib"
HARDWARE_INI_NAME = "hardware-properties.ini"
SOURCE_PROPERTIES_NAME = "source.properties"
DEVICE_CATALOG_RELPATH = Path("devices") / "devices.yaml"

# Instance layout
AVD_DIR_SUFFIX = ".avd"
AVD_INI_SUFFIX = ".ini"
CONFIG_INI_NAME = "config.ini"
BOOT_PROP_NAME = "boot.prop"
AVD_NAME_RE = re.compile(r"[A-Za-z0-9._-]+")

# Image identifiers: "system-images;android-30;google_apis;x86" or the "/" form.
IMAGE_ID_SEPARATORS = re.compile(r"[;/]")
SIZE_RE = re.compile(r"^\s*(\d+)\s*([KMGT]?)(i?B)?\s*$", re.IGNORECASE)

BOOLEAN_YES = "yes"
BOOLEAN_NO = "no"

# Hardware-property keys
BACK_CAMERA_KEY = "hw.camera.back"
FRONT_CAMERA_KEY = "hw.camera.front"
CPU_CORES_KEY = "hw.cpu.ncore"
CUSTOM_SKIN_FILE_KEY = "skin.path"
DEVICE_FRAME_KEY = "showDeviceFrame"
HAS_HARDWARE_KEYBOARD_KEY = "hw.keyboard"
HOST_GPU_MODE_KEY = "hw.gpu.mode"
INITIAL_ORIENTATION_KEY = "hw.initialOrientation"
INTERNAL_STORAGE_KEY = "disk.dataPartition.size"
NETWORK_LATENCY_KEY = "runtime.network.latency"
NETWORK_SPEED_KEY = "runtime.network.speed"
SDCARD_SIZE_KEY = "sdcard.size"
USE_CHOSEN_SNAPSHOT_BOOT_KEY = "fastboot.forceChosenSnapshotBoot"
USE_COLD_BOOT_KEY = "fastboot.forceColdBoot"
USE_FAST_BOOT_KEY = "fastboot.forceFastBoot"
USE_HOST_GPU_KEY = "hw.gpu.enabled"
VM_HEAP_STORAGE_KEY = "vm.heapSize"
RAM_SIZE_KEY = "hw.ramSize"

CAMERA_EMULATED = "emulated"
GPU_MODE_AUTO = "auto"
NO_SKIN = "_no_skin"
RECOMMENDED_NUMBER_OF_CORES = 4
DEFAULT_INTERNAL_STORAGE = "2048M"
DEFAULT_SDCARD_SIZE = "512M"
DEFAULT_HEAP_MB = 256
MAX_DEFAULT_RAM_SIZE_MB = 1536

# Image metadata keys read from source.properties
IMAGE_API_LEVEL_KEY = "AndroidVersion.ApiLevel"
IMAGE_ABI_KEY = "SystemImage.Abi"
IMAGE_TAG_KEY = "SystemImage.TagId"
IMAGE_VENDOR_KEY = "Addon.VendorId"

# Shipped with the package; used when the SDK has no device catalog.
BUNDLED_DEVICE_CATALOG = Path(__file__).with_name("devices.yaml")
