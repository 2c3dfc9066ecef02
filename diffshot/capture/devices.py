"""Device emulation profile lookup."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from diffshot.exceptions import ValidationError

if TYPE_CHECKING:
    from playwright.async_api import Playwright

# Descriptor keys that select a browser rather than configure a context
_DRIVER_ONLY_KEYS = frozenset({"default_browser_type"})


class DeviceRegistry:
    """Read-only view over the driver's device descriptors."""

    def __init__(self, descriptors: Mapping[str, Mapping[str, Any]]) -> None:
        self._descriptors = dict(descriptors)

    @classmethod
    def from_playwright(cls, playwright: Playwright) -> DeviceRegistry:
        return cls(playwright.devices)

    def names(self) -> list[str]:
        return sorted(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def resolve(self, name: str) -> dict[str, Any]:
        """Return context keyword arguments emulating ``name``."""
        descriptor = self._descriptors.get(name)
        if descriptor is None:
            msg = f'no such device name "{name}"'
            raise ValidationError(msg)
        return {k: v for k, v in descriptor.items() if k not in _DRIVER_ONLY_KEYS}
