"""LoRa radio set-up and transmission for the processing unit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from bajatelemetry.packets import FAIL_RESPONSE, MB_ID, SUCCESS_RESPONSE, RadioPacket

OPT_TP30 = 0b00  # 30 dBm


@dataclass(frozen=True)
class LoraSettings:
    """Parameters written to the radio module at start-up."""

    address_high: int = 1
    address_low: int = 1
    channel: int = MB_ID
    air_data_rate: int = 1200
    transmit_power: int = OPT_TP30
    mode: str = "normal"
    uart_baud_rate: int = 9600
    fec_enabled: bool = True
    permanent: bool = True
    serial_baud_rate: int = 9600


class LoraModule(Protocol):
    def begin(self, baud_rate: int) -> None: ...

    def init(self) -> bool: ...

    def configure(self, settings: LoraSettings) -> None: ...

    def send_struct(self, payload: bytes) -> bool: ...


class LoraRadio:
    """Wraps a radio module with the car's settings."""

    def __init__(self, module: LoraModule, settings: LoraSettings | None = None) -> None:
        self.module = module
        self.settings = settings if settings is not None else LoraSettings()

    def init(self) -> int:
        """Start and configure the module; return the status code reported to the app."""
        self.module.begin(self.settings.serial_baud_rate)
        result = SUCCESS_RESPONSE if self.module.init() else FAIL_RESPONSE
        self.module.configure(self.settings)
        return result

    def send_struct(self, payload: bytes | RadioPacket) -> bool:
        data = payload.to_bytes() if isinstance(payload, RadioPacket) else bytes(payload)
        return self.module.send_struct(data)