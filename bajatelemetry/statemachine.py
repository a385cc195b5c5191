"""Scheduler of the processing unit: radio, GPS and debug states driven by periodic ticks."""

from __future__ import annotations

import sys
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Protocol, TextIO

from bajatelemetry.ble import MAX_BLE_DELAY_MS, BleDebugServer
from bajatelemetry.can import CanNode
from bajatelemetry.lora import LoraRadio
from bajatelemetry.packets import BUFFER_SIZE, FAIL_RESPONSE, CanId, RadioPacket, State

RESPONSE_WAIT_S = 0.2


class StateBuffer:
    """Bounded stack of pending states.

    Pushing onto a full buffer drops the oldest entry; popping returns the
    most recently pushed state.
    """

    def __init__(self, capacity: int = BUFFER_SIZE) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: deque[State] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def push(self, state: State) -> None:
        with self._lock:
            self._items.append(state)

    def pop(self) -> State:
        with self._lock:
            if not self._items:
                raise IndexError("pop from an empty state buffer")
            return self._items.pop()

    def is_full(self) -> bool:
        with self._lock:
            return len(self._items) == self.capacity

    def is_empty(self) -> bool:
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


@dataclass(frozen=True)
class GpsReading:
    """What the GPS decoder currently knows; None marks a value that is not valid."""

    latitude: float | None = None
    longitude: float | None = None
    satellites: int | None = None
    time: tuple[int, int, int] | None = None
    date: tuple[int, int, int] | None = None

    @property
    def location_valid(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class GpsDecoder(Protocol):
    def encode(self, byte: int) -> bool: ...

    @property
    def reading(self) -> GpsReading: ...


class StateMachine:
    """Runs one pending state per step, idling when nothing is queued."""

    def __init__(
        self,
        node: CanNode,
        radio: LoraRadio,
        gps: GpsDecoder,
        gps_stream: Callable[[], bytes],
        debug: bool = False,
    ) -> None:
        self.node = node
        self.radio = radio
        self.gps = gps
        self.gps_stream = gps_stream
        self.debug = debug
        self.buffer = StateBuffer(BUFFER_SIZE)
        self.packet = RadioPacket()
        self.current_state = State.IDLE
        self.gps_fix = False
        self.out: TextIO | None = None

    def tick_1hz(self) -> None:
        self.buffer.push(State.RADIO)
        if self.debug:
            self.buffer.push(State.DEBUG)

    def tick_250mhz(self) -> None:
        self.buffer.push(State.GPS)

    def step(self) -> State:
        """Take the next pending state, run it and return it."""
        try:
            self.current_state = self.buffer.pop()
        except IndexError:
            self.current_state = State.IDLE

        if self.current_state is State.RADIO:
            self.node.fill_radio_packet(self.packet)
            self.radio.send_struct(self.packet)
        elif self.current_state is State.GPS:
            for byte in self.gps_stream():
                if self.gps.encode(byte):
                    self.gps_fix = self.update_gps()
            if self.node.send_gps_data(self.packet.latitude, CanId.LAT):
                self.node.send_gps_data(self.packet.longitude, CanId.LNG)
        elif self.current_state is State.DEBUG:
            self._print_debug()
        return self.current_state

    def update_gps(self) -> bool:
        """Copy a valid GPS fix into the packet; return whether there was one."""
        reading = self.gps.reading
        if not reading.location_valid:
            return False
        self.packet.latitude = reading.latitude
        self.packet.longitude = reading.longitude
        self.packet.sat = reading.satellites if reading.satellites is not None else 0
        return True

    def gps_time_text(self) -> str:
        moment = self.gps.reading.time
        hour, minute, second = moment if moment is not None else (0, 0, 0)
        return f"Time: {hour}h:{minute}m:{second}s"

    def gps_date_text(self) -> str:
        day_month_year = self.gps.reading.date
        day, month, year = day_month_year if day_month_year is not None else (0, 0, 0)
        return f"Date: {day}/{month}/{year}"

    def _print_debug(self) -> None:
        out = self.out or sys.stdout
        lines = [
            "Debug state",
            f"Latitude (LAT) = {self.packet.latitude:f}",
            f"Longitude (LNG) = {self.packet.longitude:f}",
            self.gps_time_text(),
            self.gps_date_text(),
            f"Satellites = {self.packet.sat}",
            "\n\n",
        ]
        out.write("\n".join(lines) + "\n")


class Mpu:
    """The processing unit: start-up plus the scheduler and debug-link tasks."""

    def __init__(
        self,
        node: CanNode,
        radio: LoraRadio,
        ble: BleDebugServer,
        machine: StateMachine,
    ) -> None:
        self.node = node
        self.radio = radio
        self.ble = ble
        self.machine = machine
        self.lora_status = FAIL_RESPONSE
        self.sleep: Callable[[float], None] = time.sleep

    def setup(self) -> int:
        """Start the bus and the radio; return the radio status code.

        Raises CanStartError when the bus cannot be started.
        """
        self.node.start()
        self.lora_status = self.radio.init()
        self.machine.packet = RadioPacket()
        return self.lora_status

    def state_machine_step(self) -> State:
        return self.machine.step()

    def ble_step(self) -> str | None:
        """Answer a pending app request with a fresh status report."""
        if not (self.ble.connected() and self.ble.take_data_request()):
            return None
        self.node.save_lora_init_status(self.lora_status)
        self.node.send_mpu_request(True)
        self.sleep(RESPONSE_WAIT_S)
        message = self.ble.send_message()
        self.node.clear_bluetooth_status()
        self.sleep(MAX_BLE_DELAY_MS / 1000)
        return message