"""Discovered device model."""

from pydantic import BaseModel, ConfigDict, Field


class DeviceRecord(BaseModel):
    """A device as reported by one discovery reply.

    The record is a snapshot: nothing in cubik updates it after discovery.
    ``location`` is the device's identity.
    """

    model_config = ConfigDict(frozen=True)

    location: str = Field(description="Control address, e.g. 'yeelight://192.168.1.20:55443'")
    id: str = Field(default="", description="Vendor-assigned device identifier")
    model: str = Field(default="", description="Product model, e.g. 'CubeLite'")
    fw_ver: str = Field(default="", description="Firmware version")
    support: tuple[str, ...] = Field(default=(), description="Supported command methods")
    power: str = Field(default="", description="Last known power state ('on'/'off')")
    bright: str = Field(default="", description="Last known brightness (1-100)")
    color_mode: str = Field(default="", description="Last known color mode")
    ct: str = Field(default="", description="Last known color temperature")
    rgb: str = Field(default="", description="Last known RGB value")
    hue: str = Field(default="", description="Last known hue")
    sat: str = Field(default="", description="Last known saturation")
    name: str = Field(default="", description="User-assigned device name")

    def supports(self, method: str) -> bool:
        """Check whether the device advertised support for a command method."""
        return method in self.support
