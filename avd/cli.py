"""CLI entry points for avd-provisioner."""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import List, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from avd.config import ProvisionerConfig, build_orchestrator, parse_env
from avd.exceptions import ProvisioningError
from avd.provisioner import ProvisioningOrchestrator
from avd.utils import log


def show_config(cfg: ProvisionerConfig) -> None:
    """Print the resolved configuration as YAML and exit."""
    data = {}
    for field in dataclasses.fields(cfg):
        value = getattr(cfg, field.name)
        data[field.name] = str(value) if isinstance(value, Path) else value
    print(yaml.safe_dump(data, sort_keys=False), end="", flush=True)


def list_devices(orchestrator: ProvisioningOrchestrator) -> None:
    catalog = orchestrator.handles.device_catalog()
    if not len(catalog):
        log("WARN", "No device profiles found")
        return
    for profile in catalog.devices():
        vendor = profile.manufacturer or "?"
        playstore = "yes" if profile.supports_play_store else "no"
        print(f"  {profile.display_name}  (manufacturer={vendor}, playstore={playstore})")


def list_instances(orchestrator: ProvisioningOrchestrator) -> None:
    records = orchestrator.handles.instance_index().records()
    if not records:
        log("INFO", "No instances registered")
        return
    width = max(len(record.device_name) for record in records)
    for record in records:
        print(f"  {record.device_name:<{width}}  {record.config_directory}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create or reuse Android virtual device instances")
    parser.add_argument("--show-config", action="store_true", help="Show resolved configuration and exit")
    sub = parser.add_subparsers(dest="command")

    provision = sub.add_parser("provision", help="Create the instance if needed and print its config directory")
    provision.add_argument("image_id", help="System image id, e.g. 'system-images;android-30;google_apis;x86'")
    provision.add_argument("device_name", help="Instance name (reused if already registered)")
    provision.add_argument("hardware_profile", help="Hardware profile display name, e.g. 'Nexus 5'")

    sub.add_parser("list-devices", help="List hardware profiles from the device catalog")
    sub.add_parser("list-instances", help="List registered instances")

    delete = sub.add_parser("delete", help="Remove a registered instance")
    delete.add_argument("device_name")

    args = parser.parse_args(argv)

    try:
        cfg = parse_env()
    except ProvisioningError as exc:
        log("ERROR", str(exc))
        return 1

    if args.show_config:
        show_config(cfg)
        return 0

    if args.command is None:
        parser.print_help()
        return 2

    orchestrator = build_orchestrator(cfg)
    try:
        if args.command == "provision":
            result = orchestrator.provision_avd(args.image_id, args.device_name, args.hardware_profile)
            print(result.get(), flush=True)
        elif args.command == "list-devices":
            list_devices(orchestrator)
        elif args.command == "list-instances":
            list_instances(orchestrator)
        elif args.command == "delete":
            if not orchestrator.handles.instance_index().delete(args.device_name):
                log("WARN", f"No instance named '{args.device_name}'")
                return 1
            log("SUCCESS", f"Deleted instance '{args.device_name}'")
    except ProvisioningError as exc:
        log("ERROR", str(exc))
        return 1
    return 0
