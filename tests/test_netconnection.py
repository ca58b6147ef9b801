import struct

import pytest

from rtmpwire.amf0 import Amf0Reader
from rtmpwire.messages import MsgTypeId
from rtmpwire.netconnection import ConnectProperties, NetConnection, NetConnectionError


class _Recorder:
    def __init__(self):
        self.sent = []

    async def __call__(self, msg_type_id, payload):
        self.sent.append((msg_type_id, payload))


class _Failing:
    async def __call__(self, msg_type_id, payload):
        raise OSError("connection reset")


def _decode(payload):
    return Amf0Reader(payload).read_all()


@pytest.mark.asyncio
async def test_connect_with_defaults():
    recorder = _Recorder()
    await NetConnection(recorder).write_connect(1.0, ConnectProperties.with_defaults("live"))
    assert len(recorder.sent) == 1
    msg_type_id, payload = recorder.sent[0]
    assert msg_type_id == MsgTypeId.COMMAND_AMF0
    assert _decode(payload) == [
        "connect",
        1.0,
        {
            "app": "live",
            "flashVer": "LNX 9,0,124,2",
            "tcUrl": "",
            "swfUrl": "",
            "pageUrl": "",
            "fpab": False,
            "capabilities": 15.0,
            "audioCodecs": 4071.0,
            "videoCodecs": 252.0,
            "videoFunction": 1.0,
            "objectEncoding": 0.0,
        },
    ]


@pytest.mark.asyncio
async def test_connect_empty_properties_sends_empty_object():
    recorder = _Recorder()
    await NetConnection(recorder).write_connect(1.0, ConnectProperties.empty())
    assert _decode(recorder.sent[0][1]) == ["connect", 1.0, {}]


@pytest.mark.asyncio
async def test_connect_only_set_properties():
    recorder = _Recorder()
    properties = ConnectProperties.empty()
    properties.app = "app"
    properties.tc_url = "rtmp://localhost:1935/app"
    await NetConnection(recorder).write_connect(1.0, properties)
    assert _decode(recorder.sent[0][1])[2] == {"app": "app", "tcUrl": "rtmp://localhost:1935/app"}


@pytest.mark.asyncio
async def test_connect_with_value():
    recorder = _Recorder()
    await NetConnection(recorder).write_connect_with_value(3.0, {"app": "x", "n": 2.0})
    assert _decode(recorder.sent[0][1]) == ["connect", 3.0, {"app": "x", "n": 2.0}]


@pytest.mark.asyncio
async def test_connect_response():
    recorder = _Recorder()
    await NetConnection(recorder).write_connect_response(
        1.0,
        "FMS/3,0,1,123",
        31.0,
        "NetConnection.Connect.Success",
        "status",
        "Connection Succeeded.",
        0.0,
    )
    assert _decode(recorder.sent[0][1]) == [
        "_result",
        1.0,
        {"fmsVer": "FMS/3,0,1,123", "capabilities": 31.0},
        {
            "level": "status",
            "code": "NetConnection.Connect.Success",
            "description": "Connection Succeeded.",
            "objectEncoding": 0.0,
        },
    ]


@pytest.mark.asyncio
async def test_create_stream_wire_bytes():
    recorder = _Recorder()
    await NetConnection(recorder).write_create_stream(2.0)
    expected = b"\x02\x00\x0ccreateStream" + b"\x00" + struct.pack(">d", 2.0) + b"\x05"
    assert recorder.sent[0][1] == expected


@pytest.mark.asyncio
async def test_create_stream_response():
    recorder = _Recorder()
    await NetConnection(recorder).write_create_stream_response(2.0, 1.0)
    assert _decode(recorder.sent[0][1]) == ["_result", 2.0, None, 1.0]


@pytest.mark.asyncio
async def test_error_command():
    recorder = _Recorder()
    await NetConnection(recorder).error(4.0, "Some.Code", "error", "went wrong")
    assert _decode(recorder.sent[0][1]) == [
        "_error",
        4.0,
        None,
        {"level": "error", "code": "Some.Code", "description": "went wrong"},
    ]


@pytest.mark.asyncio
async def test_successive_commands_are_independent():
    recorder = _Recorder()
    connection = NetConnection(recorder)
    await connection.write_create_stream(2.0)
    await connection.write_create_stream(2.0)
    assert recorder.sent[0] == recorder.sent[1]


@pytest.mark.asyncio
async def test_send_failure_raises_pack_error():
    with pytest.raises(NetConnectionError) as info:
        await NetConnection(_Failing()).write_create_stream(2.0)
    assert info.value.kind is NetConnectionError.Kind.PACK


@pytest.mark.asyncio
async def test_unsupported_value_raises_amf0_write_error():
    recorder = _Recorder()
    with pytest.raises(NetConnectionError) as info:
        await NetConnection(recorder).write_connect_with_value(1.0, {"bad": object()})
    assert info.value.kind is NetConnectionError.Kind.AMF0_WRITE
    assert recorder.sent == []