import json

import pytest

from bajatelemetry.ble import BleDebugServer, make_json_packet, servo_state_name
from bajatelemetry.can import CanFrame, CanNode
from bajatelemetry.packets import BluetoothStatus, CanId


class FakeBus:
    def set_debug_mode(self, enabled):
        pass

    def init(self, handler):
        return True

    def write(self, frame):
        return True


class FakeClock:
    def __init__(self, now=5000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def setup():
    clock = FakeClock()
    node = CanNode(FakeBus(), clock)
    node.start()
    sent = []
    server = BleDebugServer(node, clock, sent.append)
    return server, node, clock, sent


@pytest.mark.parametrize(
    "state,name",
    [(4, "CHOKE"), (3, "MID"), (2, "RUN"), (0, "ERRO"), (7, "ERRO")],
)
def test_servo_state_name(state, name):
    assert servo_state_name(state) == name


def test_make_json_packet_layout():
    status = BluetoothStatus(lora_init=2, termistor=80, servo_state=4, check_sd=3)
    doc = make_json_packet(status, 1234)
    assert doc["REQUEST"] == "1234"
    assert doc["MPU"] == {"LORA_INIT": "2"}
    assert doc["TCU"]["TERMISTOR"] == "80"
    assert doc["TCU"]["SERVO_STATE"] == "CHOKE"
    assert doc["SCU"]["SD_STATUS"] == "3"
    assert list(doc) == ["REQUEST", "MPU", "MMI", "TCU", "SCU"]


def test_write_mb_requests_data_once(setup):
    server = setup[0]
    server.on_write(b"mb")
    assert server.take_data_request() is True
    assert server.take_data_request() is False


def test_write_other_text_clears_request(setup):
    server = setup[0]
    server.on_write("MB")
    server.on_write("mbx")
    assert server.take_data_request() is False


def test_empty_write_keeps_request(setup):
    server = setup[0]
    server.on_write("Mb")
    server.on_write(b"")
    assert server.take_data_request() is True


def test_connection_tracking_restarts_advertising_once(setup):
    server = setup[0]
    assert server.connected() is False
    server.on_connect()
    assert server.connected() is True
    server.on_disconnect()
    assert server.connected() is False
    assert server.advertising_restarts == 1
    assert server.connected() is False
    assert server.advertising_restarts == 1


def test_send_message_notifies_json(setup):
    server, node, clock, sent = setup
    node.save_lora_init_status(2)
    node.handle_frame(CanFrame(CanId.TCU, bytes([3])))
    clock.now = 9876
    message = server.send_message()
    assert sent == [message]
    assert server.value == message
    parsed = json.loads(message)
    assert parsed == make_json_packet(node.bluetooth_status(), 9876)
    assert parsed["TCU"]["SERVO_STATE"] == "MID"
    assert " " not in message