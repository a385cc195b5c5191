"""CAN bus node of the processing unit: collects sensor frames and sends GPS data."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass
from typing import Callable, Protocol

from bajatelemetry.packets import BluetoothStatus, CanId, ImuAcc, ImuDps, RadioPacket

FRAME_LENGTH = 8


@dataclass(frozen=True)
class CanFrame:
    """One CAN message: identifier and up to eight data bytes."""

    id: int
    data: bytes = b""


class CanStartError(RuntimeError):
    """The CAN controller could not be started."""


class CanBus(Protocol):
    def set_debug_mode(self, enabled: bool) -> None: ...

    def init(self, handler: Callable[[CanFrame], None]) -> bool: ...

    def write(self, frame: CanFrame) -> bool: ...


class CanNode:
    """Keeps the latest values received from the bus and the status report."""

    def __init__(self, bus: CanBus, clock: Callable[[], int]) -> None:
        self.bus = bus
        self.clock = clock
        self.received = RadioPacket()
        self.led = False
        self._status = BluetoothStatus()

    def start(self, debug_mode: bool = False) -> None:
        """Start the controller with this node as receive handler."""
        self.bus.set_debug_mode(debug_mode)
        if not self.bus.init(self.handle_frame):
            raise CanStartError("CAN controller failed to start")
        self.received = RadioPacket()
        self.clear_bluetooth_status()

    def save_lora_init_status(self, status: int) -> None:
        self._status.lora_init = status

    def fill_radio_packet(self, packet: RadioPacket) -> None:
        """Copy the latest bus values into a packet about to be sent by radio."""
        packet.imu_acc = self.received.imu_acc
        packet.imu_dps = self.received.imu_dps
        packet.rpm = self.received.rpm
        packet.speed = self._status.speed_pulse_counter
        packet.temperature = self._status.termistor
        packet.flags = self.received.flags
        packet.SOC = self._status.measure_volt
        packet.cvt = self._status.cvt_temperature
        packet.volt = self.received.volt
        packet.timestamp = self.clock()

    def send_gps_data(self, value: float, can_id: int) -> bool:
        return self.bus.write(CanFrame(can_id, struct.pack("<d", value)))

    def send_mpu_request(self, flag: bool) -> bool:
        return self.bus.write(CanFrame(CanId.MPU, bytes([1 if flag else 0])))

    def bluetooth_status(self) -> BluetoothStatus:
        """A copy of the current status report."""
        return dataclasses.replace(self._status)

    def clear_bluetooth_status(self) -> None:
        self._status = BluetoothStatus()

    def handle_frame(self, frame: CanFrame) -> None:
        """Store the contents of a received frame."""
        self.led = not self.led
        self.received.timestamp = self.clock()

        data = bytes(frame.data).ljust(FRAME_LENGTH, b"\x00")
        first = data[0]
        status = self._status

        match frame.id:
            case CanId.IMU_ACC:
                self.received.imu_acc = ImuAcc.from_bytes(data[: ImuAcc.SIZE])
            case CanId.IMU_DPS:
                self.received.imu_dps = ImuDps.from_bytes(data[: ImuDps.SIZE])
            case CanId.RPM:
                (self.received.rpm,) = struct.unpack_from("<H", data)
            case CanId.SPEED:
                status.speed_pulse_counter = first
            case CanId.TEMPERATURE:
                status.termistor = first
            case CanId.FLAGS:
                self.received.flags = first
            case CanId.SOC:
                status.measure_volt = first
            case CanId.CVT:
                status.cvt_temperature = first
            case CanId.VOLTAGE:
                (self.received.volt,) = struct.unpack_from("<f", data)
            case CanId.MMI:
                status.accel_begin = first
            case CanId.TCU:
                # Only the low byte of the 16-bit field is overwritten.
                status.servo_state = (status.servo_state & 0xFF00) | first
            case CanId.SCU:
                status.internet_modem = first & 0x03
                status.mqtt_client_connection = (first >> 2) & 0x03
                status.sd_start = (first >> 4) & 0x03
                status.check_sd = (first >> 6) & 0x03