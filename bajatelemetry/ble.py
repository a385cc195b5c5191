"""Bluetooth debug service that reports each unit's status as JSON."""

from __future__ import annotations

import json
from typing import Any, Callable

from bajatelemetry.can import CanNode
from bajatelemetry.packets import BluetoothStatus

DEVICE_NAME = "MangueBaja_Debug"
SERVICE_UUID = "acc1f4ef-4fcf-4f90-882e-0a666da9f321"
CHARACTERISTIC_UUID = "50e6cbc6-5aff-4423-974c-0e27959453c3"
MAX_BLE_LENGTH = 512
MAX_BLE_DELAY_MS = 100
REQUEST_COMMAND = b"MB"


def servo_state_name(state: int) -> str:
    """Name of the throttle servo position reported by the TCU."""
    return {4: "CHOKE", 3: "MID", 2: "RUN"}.get(state, "ERRO")


def make_json_packet(status: BluetoothStatus, request_ms: int) -> dict[str, Any]:
    """Build the JSON document sent to the debug app."""
    return {
        "REQUEST": str(request_ms),
        "MPU": {"LORA_INIT": str(status.lora_init)},
        "MMI": {"ACCELEROMETER_BEGIN": str(status.accel_begin)},
        "TCU": {
            "TERMISTOR": str(status.termistor),
            "CVT_TEMPERATURE": str(status.cvt_temperature),
            "VOLT": str(status.measure_volt),
            "SPEED": str(status.speed_pulse_counter),
            "SERVO_STATE": servo_state_name(status.servo_state),
        },
        "SCU": {
            "INTERNET_MODEM": str(status.internet_modem),
            "MQTT_CONNECTION": str(status.mqtt_client_connection),
            "SD_START": str(status.sd_start),
            "SD_STATUS": str(status.check_sd),
        },
    }


class BleDebugServer:
    """Connection state and request handling of the debug characteristic."""

    def __init__(
        self,
        node: CanNode,
        clock: Callable[[], int],
        notify: Callable[[str], None],
    ) -> None:
        self.node = node
        self.clock = clock
        self.notify = notify
        self.value = " "
        self.advertising_restarts = 0
        self._connected = False
        self._was_connected = False
        self._data_request = False

    def on_connect(self) -> None:
        self._connected = True

    def on_disconnect(self) -> None:
        self._connected = False

    def on_write(self, value: bytes | str) -> None:
        """Handle a write from the app; the command MB (any case) asks for data."""
        raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        if raw:
            self._data_request = raw.upper() == REQUEST_COMMAND

    def connected(self) -> bool:
        """Whether a client is connected; restarts advertising after a disconnect."""
        if self._connected:
            self._was_connected = True
        if not self._connected and self._was_connected:
            self.advertising_restarts += 1
            self._was_connected = False
        return self._connected

    def take_data_request(self) -> bool:
        """Return and clear the pending data request."""
        request, self._data_request = self._data_request, False
        return request

    def send_message(self) -> str:
        """Serialise the current status, store it as the value and notify the client."""
        document = make_json_packet(self.node.bluetooth_status(), self.clock())
        message = json.dumps(document, separators=(",", ":"))
        self.value = message
        self.notify(message)
        return message