import struct

import pytest

from rtmpwire.amf0 import Amf0Writer
from rtmpwire.messages import (
    AbortMessage,
    Acknowledgement,
    Amf0Command,
    AmfData,
    AudioData,
    MessageError,
    MsgTypeId,
    SetBufferLength,
    SetChunkSize,
    SetPeerBandwidth,
    SetPeerBandwidthProperties,
    StreamBegin,
    StreamIsRecorded,
    VideoData,
    WindowAcknowledgementSize,
)
from rtmpwire.parser import parse_message

CAPTURE = bytes([
    2, 0, 0, 0, 0, 0, 4, 1, 0, 0, 0, 0, 0, 0, 16, 0,
    3,
    0, 0, 0,
    0, 0, 177,
    20,
    0, 0, 0, 0,
    2, 0, 7, 99, 111, 110, 110, 101, 99, 116, 0, 63, 240, 0, 0, 0, 0, 0, 0,
    3, 0, 3, 97, 112, 112, 2, 0, 6, 104, 97, 114, 108, 97, 110, 0, 4, 116, 121, 112, 101,
    2, 0, 10, 110, 111, 110, 112, 114, 105, 118, 97, 116, 101, 0, 8, 102, 108, 97, 115,
    104, 86, 101, 114, 2, 0, 31, 70, 77, 76, 69, 47, 51, 46, 48, 32, 40, 99, 111, 109, 112,
    97, 116, 105, 98, 108, 101, 59, 32, 70, 77, 83, 99, 47, 49, 46, 48, 41, 0, 6, 115, 119,
    102, 85, 114, 108, 2, 0, 28, 114, 116, 109, 112, 58, 47, 47, 108, 111, 99, 97, 108,
    104, 111, 115, 116, 58, 49, 57, 51, 53, 47, 104, 97, 114, 108, 97, 110, 0, 5, 116, 99,
    85, 114, 108, 2, 0, 28, 114, 116, 109, 112, 58, 47, 47, 108, 111, 99, 97, 108, 104,
    111, 115, 116, 58, 49, 57, 51, 53, 47, 104, 97, 114, 108, 97, 110, 0, 0, 9,
])


def test_capture_set_chunk_size():
    assert CAPTURE[7] == MsgTypeId.SET_CHUNK_SIZE
    assert parse_message(CAPTURE[7], CAPTURE[12:16]) == SetChunkSize(chunk_size=4096)


def test_capture_connect_command():
    assert CAPTURE[23] == MsgTypeId.COMMAND_AMF0
    body = CAPTURE[28:]
    assert len(body) == 177
    message = parse_message(CAPTURE[23], body)
    assert message == Amf0Command(
        command_name="connect",
        transaction_id=1.0,
        command_object={
            "app": "harlan",
            "type": "nonprivate",
            "flashVer": "FMLE/3.0 (compatible; FMSc/1.0)",
            "swfUrl": "rtmp://localhost:1935/harlan",
            "tcUrl": "rtmp://localhost:1935/harlan",
        },
        others=[],
    )


def _command(*parts):
    writer = Amf0Writer()
    for kind, value in parts:
        getattr(writer, f"write_{kind}")(*(() if value is None else (value,)))
    return writer.extract_current_bytes()


def test_command_with_null_object_and_arguments():
    payload = _command(
        ("string", "publish"), ("number", 5.0), ("null", None),
        ("string", "stream"), ("string", "live"),
    )
    message = parse_message(MsgTypeId.COMMAND_AMF0, payload)
    assert message == Amf0Command("publish", 5.0, None, ["stream", "live"])


def test_amf3_command_skips_leading_byte():
    payload = b"\x00" + _command(("string", "createStream"), ("number", 2.0), ("null", None))
    message = parse_message(MsgTypeId.COMMAND_AMF3, payload)
    assert message == Amf0Command("createStream", 2.0, None, [])


def test_amf3_command_empty_payload():
    with pytest.raises(MessageError) as info:
        parse_message(MsgTypeId.COMMAND_AMF3, b"")
    assert info.value.kind is MessageError.Kind.BYTES_READ


def test_command_missing_name_is_amf0_error():
    payload = _command(("number", 1.0))
    with pytest.raises(MessageError) as info:
        parse_message(MsgTypeId.COMMAND_AMF0, payload)
    assert info.value.kind is MessageError.Kind.AMF0_READ


def test_command_bad_third_value_is_amf0_error():
    payload = _command(("string", "connect"), ("number", 1.0), ("bool", True))
    with pytest.raises(MessageError) as info:
        parse_message(MsgTypeId.COMMAND_AMF0, payload)
    assert info.value.kind is MessageError.Kind.AMF0_READ


def test_media_and_data_keep_payload():
    assert parse_message(MsgTypeId.AUDIO, b"\xaf\x01") == AudioData(data=b"\xaf\x01")
    assert parse_message(MsgTypeId.VIDEO, b"\x17\x00") == VideoData(data=b"\x17\x00")
    assert parse_message(MsgTypeId.DATA_AMF0, b"abc") == AmfData(raw_data=b"abc")
    assert parse_message(MsgTypeId.DATA_AMF3, b"abc") == AmfData(raw_data=b"abc")


def test_control_messages():
    u32 = struct.pack(">I", 3107)
    assert parse_message(MsgTypeId.ABORT, u32) == AbortMessage(chunk_stream_id=3107)
    assert parse_message(MsgTypeId.ACKNOWLEDGEMENT, u32) == Acknowledgement(sequence_number=3107)
    assert parse_message(MsgTypeId.WIN_ACKNOWLEDGEMENT_SIZE, u32) == WindowAcknowledgementSize(size=3107)
    assert parse_message(MsgTypeId.SET_PEER_BANDWIDTH, u32 + b"\x02") == SetPeerBandwidth(
        properties=SetPeerBandwidthProperties(window_size=3107, limit_type=2)
    )


def test_short_control_message():
    with pytest.raises(MessageError) as info:
        parse_message(MsgTypeId.SET_CHUNK_SIZE, b"\x00\x01")
    assert info.value.kind is MessageError.Kind.PROTOCOL_CONTROL_MESSAGE_READER


def test_user_control_events():
    begin = struct.pack(">HI", 0, 1)
    recorded = struct.pack(">HI", 4, 1)
    buffer_length = struct.pack(">HII", 3, 1, 3000)
    assert parse_message(MsgTypeId.USER_CONTROL_EVENT, begin) == StreamBegin(stream_id=1)
    assert parse_message(MsgTypeId.USER_CONTROL_EVENT, recorded) == StreamIsRecorded(stream_id=1)
    assert parse_message(MsgTypeId.USER_CONTROL_EVENT, buffer_length) == SetBufferLength(1, 3000)


def test_unknown_user_control_event():
    with pytest.raises(MessageError) as info:
        parse_message(MsgTypeId.USER_CONTROL_EVENT, struct.pack(">HI", 6, 1))
    assert info.value.kind is MessageError.Kind.EVENT_MESSAGES


@pytest.mark.parametrize(
    "type_id",
    [MsgTypeId.SHARED_OBJ_AMF0, MsgTypeId.SHARED_OBJ_AMF3, MsgTypeId.AGGREGATE, 7, 99],
)
def test_unhandled_types_raise(type_id):
    with pytest.raises(MessageError) as info:
        parse_message(type_id, b"\x00\x00\x00\x00")
    assert info.value.kind is MessageError.Kind.UNKNOWN_MESSAGE_TYPE