"""Custom exceptions for avd-provisioner."""

from __future__ import annotations

from typing import Optional


class ProvisioningError(RuntimeError):
    """Base class for every failure raised while provisioning a virtual device."""

    def __init__(self, kind: str, identifier: str, reason: Optional[str] = None) -> None:
        self.kind = kind
        self.identifier = identifier
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        message = f"{self.kind} '{self.identifier}'"
        if self.reason:
            message += f": {self.reason}"
        return message


class ResourceUnavailable(ProvisioningError):
    """A required backing resource could not be located or initialized."""

    def _format(self) -> str:
        return "Resource unavailable: " + super()._format()


class ResourceNotFound(ProvisioningError):
    """A named lookup (image, hardware profile) had no match."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(kind, identifier)

    def _format(self) -> str:
        return "Resource not found: " + super()._format()


class ResourceInvalid(ProvisioningError):
    """A resource was found but is structurally unusable."""

    def _format(self) -> str:
        return "Resource invalid: " + super()._format()


class ConfigError(ProvisioningError):
    """Raised on invalid environment configuration."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__("setting", name, reason)

    def _format(self) -> str:
        return f"{self.identifier} {self.reason}"
