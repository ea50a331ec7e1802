"""Decoding of device status frames and encoding of commands."""
import json

import pytest

from remote_panel.exceptions import FrameDecodeError
from remote_panel.protocol import (
    Command,
    InitialStatusFrame,
    UpdateStatusFrame,
    decode_status_frame,
    encode_command,
)


def test_initial_status_decodes_device_state():
    frame = decode_status_frame('{"type":"initial_status","state":{"led":"on","record":"recording"}}')

    assert isinstance(frame, InitialStatusFrame)
    assert frame.state.led_on
    assert frame.state.recording


def test_initial_status_other_values_mean_off_and_idle():
    frame = decode_status_frame(
        json.dumps({"type": "initial_status", "state": {"led": "off", "record": "not_recording"}})
    )

    assert not frame.state.led_on
    assert not frame.state.recording


def test_update_status_keeps_optional_message():
    frame = decode_status_frame(
        b'{"type":"update_status","component":"record","value":"recording","msg":"Started"}'
    )

    assert isinstance(frame, UpdateStatusFrame)
    assert frame.component == "record"
    assert frame.value == "recording"
    assert frame.msg == "Started"


def test_update_status_without_message():
    frame = decode_status_frame('{"type":"update_status","component":"led","value":"on"}')

    assert frame.msg is None


def test_extra_fields_are_ignored():
    frame = decode_status_frame(
        '{"type":"update_status","component":"led","value":"on","seq":7}'
    )

    assert frame.value == "on"


def test_missing_or_null_values_decode_as_not_on():
    initial = decode_status_frame('{"type":"initial_status","state":{"led":"on"}}')
    update = decode_status_frame('{"type":"update_status","component":"led","value":null}')
    bare = decode_status_frame('{"type":"update_status"}')

    assert initial.state.led_on
    assert not initial.state.recording
    assert update.value is None
    assert bare.component is None
    assert bare.value is None


@pytest.mark.parametrize("raw", ['{"type":"pong"}', '{"type": 5}', "{}"])
def test_unrecognised_types_return_none(raw):
    assert decode_status_frame(raw) is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        '"initial_status"',
        "null",
        '{"type":"initial_status","state":"on"}',
        '{"type":"initial_status"}',
    ],
)
def test_malformed_frames_raise(raw):
    with pytest.raises(FrameDecodeError) as excinfo:
        decode_status_frame(raw)

    assert excinfo.value.raw == raw


@pytest.mark.parametrize(
    "command, expected",
    [
        (Command.TOGGLE_LED, {"command": "toggle_led"}),
        (Command.START_RECORD, {"command": "start_record"}),
        (Command.STOP_RECORD, {"command": "stop_record"}),
    ],
)
def test_encode_command(command, expected):
    assert json.loads(encode_command(command)) == expected
