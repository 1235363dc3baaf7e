"""avd-provisioner package."""

__all__ = [
    "cli",
    "config",
    "constants",
    "devices",
    "exceptions",
    "hardware",
    "images",
    "instances",
    "lazy",
    "models",
    "provisioner",
    "resources",
    "utils",
]
