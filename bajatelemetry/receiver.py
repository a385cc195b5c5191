"""Ground receiver: decodes radio packets, prints them as JSON and logs them as CSV."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import BinaryIO, TextIO

from bajatelemetry.packets import RadioPacket

CSV_HEADER = (
    "ACCx,ACCy,ACCz,DPSx,DPSy,DPSz,rpm,speed,motor,flags,SOC,cvt,volt,"
    "LAT,LNG,timestamp,satellites"
)
ACC_SCALE = 0.061 / 1000  # raw accelerometer counts to g


def _decimal(value: float) -> str:
    return f"{value:.2f}"


def packet_to_csv(packet: RadioPacket) -> str:
    """One CSV log line for a packet, matching CSV_HEADER."""
    acc = packet.imu_acc
    dps = packet.imu_dps
    fields = [
        _decimal(acc.acc_x * ACC_SCALE),
        _decimal(acc.acc_y * ACC_SCALE),
        _decimal(acc.acc_z * ACC_SCALE),
        str(dps.dps_x),
        str(dps.dps_y),
        str(dps.dps_z),
        str(packet.rpm),
        str(packet.speed),
        str(packet.temperature),
        str(packet.flags),
        str(packet.SOC),
        str(packet.cvt),
        _decimal(packet.volt),
        _decimal(packet.latitude),
        _decimal(packet.longitude),
        str(packet.timestamp),
        str(packet.sat),
    ]
    return ",".join(fields)


def packet_to_json(packet: RadioPacket) -> str:
    """Compact JSON view of a packet as shown on the console.

    The angular-rate object carries the Y rate under the key DPSX and has no
    DPSY entry, as the ground station has always displayed it.
    """
    document = {
        "Acc": {
            "AccX": packet.imu_acc.acc_x,
            "AccY": packet.imu_acc.acc_y,
            "AccZ": packet.imu_acc.acc_z,
        },
        "DPS": {
            "DPSX": packet.imu_dps.dps_y,
            "DPSZ": packet.imu_dps.dps_z,
        },
        "RPM": str(packet.rpm),
        "SPEED": str(packet.speed),
        "TEMPERATURE": {
            "ENGINNER": str(packet.temperature),
            "CVT": str(packet.cvt),
        },
        "FLAGS": str(packet.flags),
        "SOC": str(packet.SOC),
        "VOLT": _decimal(packet.volt),
        "Geography": {
            "LATITUDE": _decimal(packet.latitude),
            "LONGITUDE": _decimal(packet.longitude),
            "Timestamp": str(packet.timestamp),
        },
        "Satellites": str(packet.sat),
    }
    return json.dumps(document, separators=(",", ":"))


def next_log_name(directory: str | Path) -> Path:
    """Path of the next log file: data<N>.csv, N being the number of entries present."""
    directory = Path(directory)
    count = sum(1 for _ in directory.iterdir())
    return directory / f"data{count}.csv"


class Receiver:
    """Handles packets arriving from the radio link."""

    def __init__(self, directory: str | Path, out: TextIO | None = None) -> None:
        self.directory = Path(directory)
        self.out = out
        self.log_path: Path | None = None

    def open_log(self) -> Path:
        """Pick a new log file and write the CSV header to it."""
        path = next_log_name(self.directory)
        with path.open("a", newline="") as log:
            log.write(CSV_HEADER + "\r\n")
        self.log_path = path
        return path

    def handle_packet(self, data: bytes) -> RadioPacket:
        """Decode, print and log one packet."""
        packet = RadioPacket.from_bytes(data)
        out = self.out or sys.stdout
        out.write("DEBUG\n")
        out.write(packet_to_json(packet))
        out.flush()
        if self.log_path is None:
            self.open_log()
        assert self.log_path is not None
        with self.log_path.open("a", newline="") as log:
            log.write(packet_to_csv(packet) + "\r\n")
        return packet

    def run(self, stream: BinaryIO) -> int:
        """Handle packets read from a stream until it ends; return how many."""
        count = 0
        while True:
            data = stream.read(RadioPacket.SIZE)
            if not data or len(data) < RadioPacket.SIZE:
                return count
            self.handle_packet(data)
            count += 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Decode telemetry packets, print them as JSON and log them as CSV."
    )
    parser.add_argument("directory", nargs="?", default=".", help="directory for CSV logs")
    parser.add_argument("--input", help="file of raw packets (default: standard input)")
    args = parser.parse_args(argv)

    receiver = Receiver(args.directory)
    try:
        receiver.open_log()
    except OSError as error:
        print(f"SD error: {error}", file=sys.stderr)
        return 1

    if args.input:
        with open(args.input, "rb") as stream:
            receiver.run(stream)
    else:
        receiver.run(sys.stdin.buffer)
    return 0


if __name__ == "__main__":
    sys.exit(main())