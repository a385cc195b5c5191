from bajatelemetry.lora import OPT_TP30, LoraRadio, LoraSettings
from bajatelemetry.packets import FAIL_RESPONSE, MB_ID, SUCCESS_RESPONSE, ImuAcc, RadioPacket


class FakeModule:
    def __init__(self, init_ok=True, send_ok=True):
        self.init_ok = init_ok
        self.send_ok = send_ok
        self.baud = None
        self.configured = []
        self.sent = []

    def begin(self, baud_rate):
        self.baud = baud_rate

    def init(self):
        return self.init_ok

    def configure(self, settings):
        self.configured.append(settings)

    def send_struct(self, payload):
        self.sent.append(payload)
        return self.send_ok


def test_default_settings_follow_car():
    settings = LoraSettings()
    assert settings.channel == MB_ID
    assert settings.transmit_power == OPT_TP30
    assert settings.address_high == 1 and settings.address_low == 1
    assert settings.fec_enabled is True


def test_init_success():
    module = FakeModule()
    radio = LoraRadio(module)
    assert radio.init() == SUCCESS_RESPONSE
    assert module.baud == 9600
    assert module.configured == [LoraSettings()]


def test_init_failure_still_configures():
    module = FakeModule(init_ok=False)
    custom = LoraSettings(channel=3)
    radio = LoraRadio(module, custom)
    assert radio.init() == FAIL_RESPONSE
    assert module.configured == [custom]


def test_send_packet_sends_its_bytes():
    module = FakeModule()
    radio = LoraRadio(module)
    packet = RadioPacket(imu_acc=ImuAcc(1, 2, 3), rpm=3000)
    assert radio.send_struct(packet) is True
    assert module.sent == [packet.to_bytes()]


def test_send_raw_bytes_reports_failure():
    module = FakeModule(send_ok=False)
    radio = LoraRadio(module)
    assert radio.send_struct(b"\x01\x02") is False
    assert module.sent == [b"\x01\x02"]