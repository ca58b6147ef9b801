# rtmpwire

Building blocks for speaking RTMP from Python: the C0/C1/C2 handshake
(a plain variant and the digest-based "complex" variant on the server
side), protocol control and user control messages, AMF0 encoding and
decoding, and the NetConnection / NetStream command messages that clients
and servers exchange.

The package opens no sockets of its own. Readers take the bytes you
received; writers hand their bytes to something you supply:

* the handshakers, `ProtocolControlMessagesWriter` and `EventMessagesWriter`
  take a writer object with `write(data)` and an awaitable `drain()`,
  such as an `asyncio.StreamWriter`;
* `NetConnection` and `NetStreamWriter` take an async callable
  `send(msg_type_id, payload)` that receives the message type id (always
  `MsgTypeId.COMMAND_AMF0`) and the AMF0-encoded command body.

## Installation

```
pip install rtmpwire
```

To run the test suite:

```
pip install "rtmpwire[test]"
pytest
```

## Modules

| Module | What it holds |
| --- | --- |
| `rtmpwire.digest` | handshake constants, `DigestProcessor`, `SchemaVersion`, `DigestError` and `current_time()` |
| `rtmpwire.handshake` | `SimpleHandshakeClient`, `SimpleHandshakeServer`, `ComplexHandshakeServer`, and `HandshakeServer`, which tries the complex handshake and falls back to the simple one; `ClientHandshakeState`, `ServerHandshakeState`, `HandshakeError` |
| `rtmpwire.messages` | `MsgTypeId`, `MessageError` and the decoded message types (`Amf0Command`, `AmfData`, `AudioData`, `VideoData`, `SetChunkSize`, `AbortMessage`, `Acknowledgement`, `WindowAcknowledgementSize`, `SetPeerBandwidth`, `SetBufferLength`, `StreamBegin`, `StreamIsRecorded`, `RawMessage`) |
| `rtmpwire.control_messages` | `ProtocolControlMessageReader` and `ProtocolControlMessagesWriter` (set chunk size, abort, acknowledgement, window acknowledgement size, set peer bandwidth) |
| `rtmpwire.user_control` | `EventType`, `EventMessagesReader` and `EventMessagesWriter` (stream begin/EOF/dry, set buffer length, stream is recorded, ping request/response) |
| `rtmpwire.amf0` | `Amf0Reader`, `Amf0Writer`, `Amf0Marker`, `Amf0Error` |
| `rtmpwire.parser` | `parse_message(msg_type_id, payload)`, which decodes a complete message payload |
| `rtmpwire.netconnection` | `NetConnection` and `ConnectProperties` for `connect`, `createStream`, `_result` and `_error` |
| `rtmpwire.netstream` | `NetStreamWriter` for `play`, `publish`, `deleteStream`, `onStatus` and related commands |
| `rtmpwire.session_define` | session constants, `SessionType`, `SessionSubType`, `PeerBandwidthLimitType`, `SessionError`, `ClientError` |
| `rtmpwire.hexdump` | `format_hex`, `format_decimal`, `print_hex`, `print_decimal`, `print_array` |

## Examples

Decode a command message payload:

```python
from rtmpwire.messages import MsgTypeId
from rtmpwire.parser import parse_message

msg = parse_message(MsgTypeId.COMMAND_AMF0, payload)
print(msg.command_name, msg.transaction_id, msg.command_object, msg.others)
```

Shared object, aggregate and unknown message types raise `MessageError`.

Encode and decode AMF0 values:

```python
from rtmpwire.amf0 import Amf0Reader, Amf0Writer

writer = Amf0Writer()
writer.write_string("connect")
writer.write_number(1.0)
writer.write_object({"app": "live"})
data = writer.extract_current_bytes()

print(Amf0Reader(data).read_all())  # ['connect', 1.0, {'app': 'live'}]
```

Send a `connect` command:

```python
from rtmpwire.netconnection import ConnectProperties, NetConnection

async def send(msg_type_id, payload):
    ...  # wrap the payload in a chunk and write it out

await NetConnection(send).write_connect(1.0, ConnectProperties.with_defaults("live"))
```

Fields of `ConnectProperties` left as `None` are not sent;
`ConnectProperties.empty()` starts with all of them unset.

Compute and check handshake digests on a 1536-byte packet:

```python
from rtmpwire.digest import RTMP_CLIENT_KEY_FIRST_HALF, DigestProcessor

key_half = RTMP_CLIENT_KEY_FIRST_HALF.encode("ascii")
c1 = DigestProcessor(random_c1, key_half).generate_and_fill_digest()
digest, schema = DigestProcessor(c1, key_half).read_digest()
```

Run the server handshake over an asyncio stream:

```python
from rtmpwire.handshake import HandshakeServer, ServerHandshakeState

server = HandshakeServer(stream_writer)
server.extend_data(await stream_reader.readexactly(1 + 1536))
await server.handshake()                 # writes S0, S1 and S2
server.extend_data(await stream_reader.readexactly(1536))
await server.handshake()                 # reads C2
assert server.state() is ServerHandshakeState.FINISH
leftover = server.remaining_bytes()
```

Look at raw bytes:

```python
from rtmpwire.hexdump import format_hex

print(format_hex(b"\x02\x00\x00\x00"))
```

## What the package does not do

* It does not split messages into chunks or reassemble chunks into
  messages. `parse_message` expects a complete message payload, and the
  `send` callable given to `NetConnection` and `NetStreamWriter` must do the
  chunking itself.
* It has no server, no client session and no relay: nothing here accepts
  connections, runs the connect/createStream/play/publish exchange, or
  routes audio and video between publishers and players. `SessionError`,
  `ClientError` and the constants in `rtmpwire.session_define` are there for
  code that builds such sessions on top of this package.
* There is no command-line tool.