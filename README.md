# bajatelemetry

Telemetry toolkit for an off-road race car. It covers both ends of the radio
link: the processing unit on the car and the receiver at the pit.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `bajatelemetry.packets`: the `RadioPacket` frame, with `ImuAcc` and `ImuDps`
  readings, the `BluetoothStatus` report, the `CanId` message identifiers and
  the `State` codes of the scheduler.
- `bajatelemetry.can`: `CanNode` stores the values of received `CanFrame`s
  and sends GPS coordinates and status requests on the bus.
- `bajatelemetry.lora`: `LoraRadio` starts a radio module with `LoraSettings`
  and sends packets.
- `bajatelemetry.ble`: `BleDebugServer` answers a debug app with the JSON
  document built by `make_json_packet`.
- `bajatelemetry.statemachine`: `StateMachine` runs radio, GPS and debug work
  queued on a `StateBuffer`; `Mpu` ties the car-side pieces together.
- `bajatelemetry.receiver`: `Receiver` decodes packets, prints them as JSON
  and appends them to a CSV log. The `baja-receiver` command runs it.

## Packet format

`RadioPacket` is a little-endian binary frame of `RadioPacket.SIZE` bytes. It
round-trips through `to_bytes()` and `RadioPacket.from_bytes()`. A buffer of
any other length raises `ValueError`. The frame holds:

- the accelerometer axes (`imu_acc`) and the gyroscope axes (`imu_dps`);
- `rpm`, `speed`, `temperature` (engine) and `cvt` temperature;
- `flags`, state of charge (`SOC`) and `volt`;
- `latitude`, `longitude`, `timestamp` and the satellite count `sat`.

## On the car

`CanNode(bus, clock)` keeps the latest bus values. `handle_frame` decodes each
frame by its `CanId`. The frames cover acceleration, angular rate, rpm, speed,
temperatures, flags, state of charge and voltage. They also cover the status
bytes of the MMI, TCU and SCU units. `start()` raises `CanStartError` when the
bus reports that it cannot start. `fill_radio_packet` copies the stored values
into a `RadioPacket`. It stamps the packet with the clock.

`StateMachine` queues work on a `StateBuffer` of 50 entries. The buffer pops
the most recently pushed state first. A push onto a full buffer drops the
oldest entry. The caller drives the schedule:

- `tick_1hz()` queues a radio send, plus a debug print when `debug` is set;
- `tick_250mhz()` queues a GPS update;
- `step()` runs one queued state, or returns `State.IDLE` when the queue is empty.

The GPS state does three things in order. It feeds the bytes from
`gps_stream` to the decoder. It copies a valid fix into the packet. It then
sends the latitude on the bus, and the longitude only if the latitude was sent.

`BleDebugServer` tracks the connection. `connected()` counts advertising
restarts after a disconnect. A write of `MB`, in any case, marks a data
request; any other non-empty write clears it. `send_message()` serialises the
status report as compact JSON and passes it to `notify`. Servo positions 4, 3
and 2 are reported as `CHOKE`, `MID` and `RUN`, and anything else as `ERRO`.

`Mpu.setup()` starts the bus and the radio and returns the radio's status code:
2 on success, 1 on failure. `Mpu.ble_step()` answers a pending app request
with a fresh report and then clears the report.

## Ground station

```
baja-receiver --help
baja-receiver LOGDIR --input packets.bin
```

The command reads raw packets from `--input`, or from standard input when no
file is given. It stops at end of stream or at a short read. If the log file
cannot be created, it prints an error and exits with status 1.

Logs are named `data<N>.csv`, where `N` is the number of entries already in
the directory (`next_log_name`). Each log starts with the header row
`CSV_HEADER`. Every packet adds one row, formatted by `packet_to_csv`:

- acceleration in g, with two decimals;
- voltage and coordinates with two decimals;
- the other fields as integers.

Every packet is also written to standard output as the line `DEBUG` followed by
`packet_to_json`. In that JSON the `DPS` object carries the Y rate under the
key `DPSX` and has no `DPSY` key.

```python
from bajatelemetry.packets import RadioPacket
from bajatelemetry.receiver import packet_to_csv, packet_to_json

packet = RadioPacket(rpm=3200, speed=41)
print(packet_to_csv(packet))
print(packet_to_json(packet))
```

## What this package does not do

The package contains no hardware drivers. The CAN controller, the radio
module and the GPS decoder are objects you supply:

- a `CanBus` with `set_debug_mode`, `init` and `write`;
- a `LoraModule` with `begin`, `init`, `configure` and `send_struct`;
- a `GpsDecoder` with `encode` and `reading`.

There is no NMEA parser and no Bluetooth stack. `BleDebugServer` handles the
request and reply logic only. Nothing runs the ticks or the two car-side tasks
on timers or threads: the caller calls `tick_1hz`, `tick_250mhz`,
`Mpu.state_machine_step` and `Mpu.ble_step`.