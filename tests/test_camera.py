import logging

import pytest

from camclassify.camera import (
    FRAME_WORDS,
    OV7670,
    REG_BATT,
    REGISTERS,
    SLAVE_ADDRESS,
    CaptureMode,
    OutputMode,
)


class FakeHardware:
    def __init__(self, device_id=0x76):
        self.events = []
        self.device_id = device_id

    def i2c_mem_write(self, address, register, value):
        self.events.append(("write", address, register, value))

    def i2c_transmit(self, address, data):
        self.events.append(("transmit", address, bytes(data)))

    def i2c_receive(self, address, count):
        self.events.append(("receive", address, count))
        return bytes((self.device_id,)) * count

    def set_reset(self, level):
        self.events.append(("reset", level))

    def delay(self, ms):
        self.events.append(("delay", ms))

    def dcmi_start(self, mode, destination, length):
        self.events.append(("dcmi_start", mode, destination, length))

    def dcmi_stop(self):
        self.events.append(("dcmi_stop",))

    def dma_start(self, destination, length):
        self.events.append(("dma_start", destination, length))


def test_init_sequence_and_device_id():
    hw = FakeHardware(device_id=0x76)
    camera = OV7670(hw)
    assert camera.init() == 0x76
    assert hw.events == [
        ("reset", False),
        ("delay", 100),
        ("reset", True),
        ("delay", 100),
        ("write", 0x42, 0x12, 0x80),
        ("delay", 30),
        ("transmit", 0x42, b"\x0b"),
        ("receive", 0x42, 1),
    ]


def test_init_logs_device_id(caplog):
    camera = OV7670(FakeHardware(device_id=0x76))
    with caplog.at_level(logging.INFO):
        camera.init()
    assert "[OV7670] dev id = 76" in caplog.text


def test_register_table_pins():
    hw = FakeHardware()
    OV7670(hw).configure(OutputMode.QVGA_RGB565)
    writes = [(event[2], event[3]) for event in hw.events if event[0] == "write"]
    assert writes[0] == (0x12, 0x80)
    assert writes[1] == (0x12, 0x04)
    assert writes[-1] == (0x1E, 0x31)
    assert (0x40, 0x10 + 0xC0) in writes
    assert all(register != REG_BATT for register, _ in writes)
    assert REGISTERS[0] == (0x12, 0x04)
    assert REGISTERS[-1] == (0x1E, 0x31)


def test_configure_writes_table_after_reset():
    hw = FakeHardware()
    OV7670(hw).configure(OutputMode.QVGA_RGB565)
    assert hw.events[0] == ("dcmi_stop",)
    writes = [event for event in hw.events if event[0] == "write"]
    assert writes[0] == ("write", SLAVE_ADDRESS, 0x12, 0x80)
    assert writes[1:] == [("write", SLAVE_ADDRESS, r, v) for r, v in REGISTERS]
    assert hw.events.count(("delay", 1)) == len(REGISTERS)


def test_configure_rejects_unknown_mode():
    with pytest.raises(ValueError):
        OV7670(FakeHardware()).configure(7)


def test_continuous_capture_rearms_dma_each_frame():
    hw = FakeHardware()
    camera = OV7670(hw)
    camera.start_capture(CaptureMode.CONTINUOUS, 0x20000000)
    assert hw.events == [
        ("dcmi_stop",),
        ("dcmi_start", CaptureMode.CONTINUOUS, 0x20000000, FRAME_WORDS),
    ]
    camera.frame_event()
    assert hw.events[-1] == ("dma_start", 0x20000000, FRAME_WORDS)


def test_single_frame_capture_does_not_rearm():
    hw = FakeHardware()
    camera = OV7670(hw)
    camera.start_capture(CaptureMode.SINGLE_FRAME, 0x20000000)
    assert hw.events[-1] == ("dcmi_start", CaptureMode.SINGLE_FRAME, 0x20000000, FRAME_WORDS)
    camera.frame_event()
    assert not any(event[0] == "dma_start" for event in hw.events)
    assert camera.destination == 0


def test_start_capture_rejects_unknown_mode():
    with pytest.raises(ValueError):
        OV7670(FakeHardware()).start_capture(5, 0x20000000)


def test_vsync_callback_counts_frames():
    seen = []
    camera = OV7670(FakeHardware())
    camera.register_callbacks(None, seen.append)
    for _ in range(3):
        camera.frame_event()
    assert seen == [0, 1, 2]
    assert camera.current_v == 3
    assert camera.current_h == 0


def test_read_register_round_trip():
    hw = FakeHardware(device_id=0x5A)
    assert OV7670(hw).read_register(0x0B) == 0x5A
    assert hw.events[0] == ("transmit", SLAVE_ADDRESS, b"\x0b")


def test_write_register_rejects_wide_value():
    with pytest.raises(ValueError):
        OV7670(FakeHardware()).write_register(0x12, 0x100)


def test_write_register_rejects_wide_register():
    with pytest.raises(ValueError):
        OV7670(FakeHardware()).write_register(-1, 0x00)