"""Telemetry packet layouts, CAN identifiers and state codes shared by the car units."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

SUCCESS_RESPONSE = 2
FAIL_RESPONSE = 1

MB_ID = 11
BUFFER_SIZE = 50

THROTTLE_MID = 0x00
THROTTLE_RUN = 0x01
THROTTLE_CHOKE = 0x02


class CanId(IntEnum):
    """Identifiers of the messages travelling on the car's CAN bus."""

    SYNC = 0x001
    THROTTLE = 0x100
    FLAGS = 0x101
    IMU_ACC = 0x200
    IMU_DPS = 0x201
    ANGLE = 0x205
    SPEED = 0x300
    SOC = 0x302
    RPM = 0x304
    SOT = 0x305
    MMI = 0x306
    TCU = 0x307
    SCU = 0x308
    MPU = 0x309
    TEMPERATURE = 0x400
    CVT = 0x401
    FUEL = 0x500
    VOLTAGE = 0x502
    CURRENT = 0x505
    LAT = 0x600
    LNG = 0x700


class State(IntEnum):
    """States of the processing unit's scheduler."""

    IDLE = 0
    RADIO = 1
    GPS = 2
    DEBUG = 3


_TRIPLE = struct.Struct("<3h")


@dataclass(frozen=True)
class ImuAcc:
    """Raw accelerometer reading, one signed 16-bit value per axis."""

    acc_x: int = 0
    acc_y: int = 0
    acc_z: int = 0

    SIZE: ClassVar[int] = _TRIPLE.size

    @classmethod
    def from_bytes(cls, data: bytes) -> ImuAcc:
        if len(data) != cls.SIZE:
            raise ValueError(f"accelerometer data must be {cls.SIZE} bytes, got {len(data)}")
        return cls(*_TRIPLE.unpack(data))

    def to_bytes(self) -> bytes:
        return _TRIPLE.pack(self.acc_x, self.acc_y, self.acc_z)


@dataclass(frozen=True)
class ImuDps:
    """Raw gyroscope reading in degrees per second, one signed 16-bit value per axis."""

    dps_x: int = 0
    dps_y: int = 0
    dps_z: int = 0

    SIZE: ClassVar[int] = _TRIPLE.size

    @classmethod
    def from_bytes(cls, data: bytes) -> ImuDps:
        if len(data) != cls.SIZE:
            raise ValueError(f"gyroscope data must be {cls.SIZE} bytes, got {len(data)}")
        return cls(*_TRIPLE.unpack(data))

    def to_bytes(self) -> bytes:
        return _TRIPLE.pack(self.dps_x, self.dps_y, self.dps_z)


# Little-endian layout with the natural alignment of the radio's microcontroller:
# the doubles start on an 8-byte boundary and the struct is padded to 8 bytes.
_RADIO = struct.Struct("<3h3hHHBBBBfddIB3x")


@dataclass
class RadioPacket:
    """The telemetry frame sent over the LoRa link."""

    imu_acc: ImuAcc = field(default_factory=ImuAcc)
    imu_dps: ImuDps = field(default_factory=ImuDps)
    rpm: int = 0
    speed: int = 0
    temperature: int = 0
    flags: int = 0
    SOC: int = 0
    cvt: int = 0
    volt: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp: int = 0
    sat: int = 0

    SIZE: ClassVar[int] = _RADIO.size

    def to_bytes(self) -> bytes:
        return _RADIO.pack(
            self.imu_acc.acc_x,
            self.imu_acc.acc_y,
            self.imu_acc.acc_z,
            self.imu_dps.dps_x,
            self.imu_dps.dps_y,
            self.imu_dps.dps_z,
            self.rpm,
            self.speed,
            self.temperature,
            self.flags,
            self.SOC,
            self.cvt,
            self.volt,
            self.latitude,
            self.longitude,
            self.timestamp,
            self.sat,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> RadioPacket:
        if len(data) != cls.SIZE:
            raise ValueError(f"radio packet must be {cls.SIZE} bytes, got {len(data)}")
        (ax, ay, az, dx, dy, dz, rpm, speed, temperature, flags, soc, cvt,
         volt, latitude, longitude, timestamp, sat) = _RADIO.unpack(data)
        return cls(
            imu_acc=ImuAcc(ax, ay, az),
            imu_dps=ImuDps(dx, dy, dz),
            rpm=rpm,
            speed=speed,
            temperature=temperature,
            flags=flags,
            SOC=soc,
            cvt=cvt,
            volt=volt,
            latitude=latitude,
            longitude=longitude,
            timestamp=timestamp,
            sat=sat,
        )


@dataclass
class BluetoothStatus:
    """Start-up and health report of every unit, gathered for the debug app."""

    lora_init: int = 0
    internet_modem: int = 0
    mqtt_client_connection: int = 0
    sd_start: int = 0
    check_sd: int = 0
    accel_begin: int = 0
    termistor: int = 0
    cvt_temperature: int = 0
    measure_volt: int = 0
    speed_pulse_counter: int = 0
    servo_state: int = 0