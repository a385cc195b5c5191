import io
import json

import pytest

from bajatelemetry.packets import ImuAcc, ImuDps, RadioPacket
from bajatelemetry.receiver import (
    CSV_HEADER,
    Receiver,
    main,
    next_log_name,
    packet_to_csv,
    packet_to_json,
)


def sample_packet():
    return RadioPacket(
        imu_acc=ImuAcc(1000, -2000, 16384),
        imu_dps=ImuDps(10, 20, 30),
        rpm=3600,
        speed=42,
        temperature=80,
        flags=5,
        SOC=90,
        cvt=70,
        volt=12.5,
        latitude=-8.25,
        longitude=-34.5,
        timestamp=123456,
        sat=9,
    )


def test_csv_of_empty_packet():
    assert packet_to_csv(RadioPacket()) == "0.00,0.00,0.00,0,0,0,0,0,0,0,0,0,0.00,0.00,0.00,0,0"


def test_csv_has_one_field_per_header_column():
    line = packet_to_csv(sample_packet())
    fields = line.split(",")
    assert len(fields) == len(CSV_HEADER.split(","))
    assert fields[0] == "0.06"
    assert fields[3:12] == ["10", "20", "30", "3600", "42", "80", "5", "90", "70"]
    assert fields[12:] == ["12.50", "-8.25", "-34.50", "123456", "9"]


def test_json_layout():
    document = json.loads(packet_to_json(sample_packet()))
    assert document["Acc"] == {"AccX": 1000, "AccY": -2000, "AccZ": 16384}
    assert document["DPS"] == {"DPSX": 20, "DPSZ": 30}
    assert document["TEMPERATURE"] == {"ENGINNER": "80", "CVT": "70"}
    assert document["Geography"]["Timestamp"] == "123456"
    assert document["Satellites"] == "9"
    assert list(document) == [
        "Acc", "DPS", "RPM", "SPEED", "TEMPERATURE", "FLAGS",
        "SOC", "VOLT", "Geography", "Satellites",
    ]


def test_next_log_name_counts_entries(tmp_path):
    assert next_log_name(tmp_path).name == "data0.csv"
    (tmp_path / "a.txt").write_text("x")
    (tmp_path / "b.txt").write_text("y")
    assert next_log_name(tmp_path) == tmp_path / "data2.csv"


def test_open_log_writes_header(tmp_path):
    receiver = Receiver(tmp_path, io.StringIO())
    path = receiver.open_log()
    assert path.read_bytes() == (CSV_HEADER + "\r\n").encode()


def test_handle_packet_prints_and_logs(tmp_path):
    out = io.StringIO()
    receiver = Receiver(tmp_path, out)
    receiver.open_log()
    packet = sample_packet()
    assert receiver.handle_packet(packet.to_bytes()) == packet
    assert out.getvalue() == "DEBUG\n" + packet_to_json(packet)
    lines = receiver.log_path.read_text().splitlines()
    assert lines == [CSV_HEADER, packet_to_csv(packet)]


def test_handle_packet_rejects_wrong_size(tmp_path):
    with pytest.raises(ValueError):
        Receiver(tmp_path, io.StringIO()).handle_packet(b"\x00" * 3)


def test_run_handles_whole_packets_only(tmp_path):
    receiver = Receiver(tmp_path, io.StringIO())
    data = sample_packet().to_bytes() + RadioPacket().to_bytes() + b"\x01\x02"
    assert receiver.run(io.BytesIO(data)) == 2
    assert len(receiver.log_path.read_text().splitlines()) == 3


def test_main_reads_input_file(tmp_path, capsys):
    logs = tmp_path / "logs"
    logs.mkdir()
    source = tmp_path / "packets.bin"
    source.write_bytes(sample_packet().to_bytes())
    assert main([str(logs), "--input", str(source)]) == 0
    assert "DEBUG" in capsys.readouterr().out
    log = logs / "data0.csv"
    assert log.read_text().splitlines()[1] == packet_to_csv(sample_packet())