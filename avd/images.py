"""System-image resolution for avd-provisioner."""

from __future__ import annotations

from typing import TYPE_CHECKING

from avd.constants import (
    IMAGE_ABI_KEY,
    IMAGE_API_LEVEL_KEY,
    IMAGE_TAG_KEY,
    IMAGE_VENDOR_KEY,
    SOURCE_PROPERTIES_NAME,
)
from avd.exceptions import ResourceInvalid, ResourceNotFound
from avd.models import ImageDescriptor
from avd.utils import log, read_properties

if TYPE_CHECKING:
    from avd.resources import ResourceHandles


class ImageResolver:
    """Map an image identifier to an installed, validated system image.

    Images are never downloaded here; an id with no installed directory is a
    lookup failure. Every call re-reads the image metadata.
    """

    def __init__(self, handles: "ResourceHandles") -> None:
        self.handles = handles

    def resolve(self, image_id: str) -> ImageDescriptor:
        location = self.handles.image_root().image_directory(image_id)
        if location is None or not location.is_dir():
            raise ResourceNotFound("image", image_id)

        metadata = location / SOURCE_PROPERTIES_NAME
        try:
            props = read_properties(metadata)
        except (OSError, UnicodeDecodeError) as exc:
            raise ResourceInvalid("image", image_id, f"cannot read {metadata}: {exc}") from exc

        missing = [key for key in (IMAGE_API_LEVEL_KEY, IMAGE_ABI_KEY) if not props.get(key)]
        if missing:
            raise ResourceInvalid("image", image_id, f"{metadata} is missing {', '.join(missing)}")
        try:
            api_level = int(props[IMAGE_API_LEVEL_KEY])
        except ValueError:
            raise ResourceInvalid(
                "image", image_id, f"{IMAGE_API_LEVEL_KEY} must be an integer (got '{props[IMAGE_API_LEVEL_KEY]}')"
            )

        descriptor = ImageDescriptor(
            image_id=image_id,
            location=location,
            api_level=api_level,
            abi=props[IMAGE_ABI_KEY],
            tag=props.get(IMAGE_TAG_KEY) or "default",
            vendor=props.get(IMAGE_VENDOR_KEY),
            properties=props,
        )
        log("DEBUG", f"Resolved image {image_id} -> {location} (API {api_level}, {descriptor.abi})")
        return descriptor
