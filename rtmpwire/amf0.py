"""AMF0 encoding and decoding of the values carried by RTMP command and data messages."""

from __future__ import annotations

import enum
import struct
from typing import Any

_MAX_SHORT_STRING = 0xFFFF
_MAX_LONG_STRING = 0xFFFFFFFF


class Amf0Marker(enum.IntEnum):
    """Type markers that precede every AMF0 value."""

    NUMBER = 0x00
    BOOLEAN = 0x01
    STRING = 0x02
    OBJECT = 0x03
    MOVIECLIP = 0x04
    NULL = 0x05
    UNDEFINED = 0x06
    REFERENCE = 0x07
    ECMA_ARRAY = 0x08
    OBJECT_END = 0x09
    STRICT_ARRAY = 0x0A
    DATE = 0x0B
    LONG_STRING = 0x0C
    UNSUPPORTED = 0x0D
    RECORDSET = 0x0E
    XML_DOCUMENT = 0x0F
    TYPED_OBJECT = 0x10
    AVMPLUS_OBJECT = 0x11


class Amf0Error(Exception):
    """Raised when AMF0 data cannot be read or a value cannot be written."""

    class Kind(enum.Enum):
        BYTES_READ = "bytes read error"
        WRONG_TYPE = "wrong type"
        UNKNOWN_MARKER = "unknown marker"
        STRING_DECODE = "string decode error"
        STRING_TOO_LONG = "string too long"
        UNSUPPORTED_VALUE = "unsupported value type"

    def __init__(self, kind: "Amf0Error.Kind", detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        message = kind.value if detail is None else f"{kind.value}: {detail}"
        super().__init__(message)


class Amf0Reader:
    """Reads AMF0 values from a byte string.

    Numbers come back as ``float``, booleans as ``bool``, strings as ``str``,
    objects and ECMA arrays as ``dict``, strict arrays as ``list``, dates as
    milliseconds since the epoch, and null or undefined as ``None``.
    """

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> bytes:
        """Bytes not yet consumed."""
        return self._data[self._pos:]

    def _take(self, count: int) -> bytes:
        available = len(self._data) - self._pos
        if available < count:
            raise Amf0Error(Amf0Error.Kind.BYTES_READ, f"need {count} bytes, have {available}")
        chunk = self._data[self._pos:self._pos + count]
        self._pos += count
        return chunk

    def _unpack(self, fmt: str) -> Any:
        (value,) = struct.unpack(fmt, self._take(struct.calcsize(fmt)))
        return value

    def _peek_marker(self) -> int:
        if self._pos >= len(self._data):
            raise Amf0Error(Amf0Error.Kind.BYTES_READ, "no marker left to read")
        return self._data[self._pos]

    def _read_utf8(self, length: int) -> str:
        raw = self._take(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise Amf0Error(Amf0Error.Kind.STRING_DECODE, str(err)) from err

    def _read_short_string(self) -> str:
        return self._read_utf8(self._unpack(">H"))

    def _read_properties(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        while True:
            key = self._read_short_string()
            if key == "" and self._peek_marker() == Amf0Marker.OBJECT_END:
                self._pos += 1
                return properties
            properties[key] = self.read_any()

    def read_any(self) -> Any:
        """Read the next value, whatever its type."""
        marker = self._unpack(">B")
        if marker == Amf0Marker.NUMBER:
            return self._unpack(">d")
        if marker == Amf0Marker.BOOLEAN:
            return self._unpack(">B") != 0
        if marker == Amf0Marker.STRING:
            return self._read_short_string()
        if marker == Amf0Marker.LONG_STRING:
            return self._read_utf8(self._unpack(">I"))
        if marker == Amf0Marker.OBJECT:
            return self._read_properties()
        if marker == Amf0Marker.ECMA_ARRAY:
            self._unpack(">I")  # advertised count; the end marker is authoritative
            return self._read_properties()
        if marker == Amf0Marker.STRICT_ARRAY:
            count = self._unpack(">I")
            return [self.read_any() for _ in range(count)]
        if marker == Amf0Marker.DATE:
            milliseconds = self._unpack(">d")
            self._unpack(">h")  # time zone, unused
            return milliseconds
        if marker in (Amf0Marker.NULL, Amf0Marker.UNDEFINED):
            return None
        raise Amf0Error(Amf0Error.Kind.UNKNOWN_MARKER, f"marker {marker:#04x}")

    def read_with_type(self, marker: int) -> Any:
        """Read the next value if it carries the given marker.

        Nothing is consumed when the marker differs.
        """
        found = self._peek_marker()
        if found != marker:
            raise Amf0Error(
                Amf0Error.Kind.WRONG_TYPE, f"expected marker {int(marker):#04x}, found {found:#04x}"
            )
        return self.read_any()

    def read_all(self) -> list[Any]:
        """Read every value left in the data."""
        values = []
        while self._pos < len(self._data):
            values.append(self.read_any())
        return values


class Amf0Writer:
    """Accumulates AMF0-encoded values."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def _put_key(self, key: str) -> None:
        raw = key.encode("utf-8")
        if len(raw) > _MAX_SHORT_STRING:
            raise Amf0Error(Amf0Error.Kind.STRING_TOO_LONG, f"key of {len(raw)} bytes")
        self._buffer.extend(struct.pack(">H", len(raw)))
        self._buffer.extend(raw)

    def write_string(self, value: str) -> None:
        """Write a string, as a long string when it exceeds 65535 bytes."""
        raw = value.encode("utf-8")
        if len(raw) <= _MAX_SHORT_STRING:
            self._buffer.extend(struct.pack(">BH", Amf0Marker.STRING, len(raw)))
        elif len(raw) <= _MAX_LONG_STRING:
            self._buffer.extend(struct.pack(">BI", Amf0Marker.LONG_STRING, len(raw)))
        else:
            raise Amf0Error(Amf0Error.Kind.STRING_TOO_LONG, f"{len(raw)} bytes")
        self._buffer.extend(raw)

    def write_number(self, value: float) -> None:
        self._buffer.extend(struct.pack(">Bd", Amf0Marker.NUMBER, float(value)))

    def write_bool(self, value: bool) -> None:
        self._buffer.extend(struct.pack(">BB", Amf0Marker.BOOLEAN, 1 if value else 0))

    def write_null(self) -> None:
        self._buffer.append(Amf0Marker.NULL)

    def write_object(self, properties: dict[str, Any]) -> None:
        """Write a mapping of names to values as an AMF0 object."""
        self._buffer.append(Amf0Marker.OBJECT)
        for key, value in properties.items():
            self._put_key(key)
            self._write_any(value)
        self._buffer.extend(b"\x00\x00")
        self._buffer.append(Amf0Marker.OBJECT_END)

    def _write_any(self, value: Any) -> None:
        if value is None:
            self.write_null()
        elif isinstance(value, bool):
            self.write_bool(value)
        elif isinstance(value, (int, float)):
            self.write_number(value)
        elif isinstance(value, str):
            self.write_string(value)
        elif isinstance(value, dict):
            self.write_object(value)
        elif isinstance(value, (list, tuple)):
            self._buffer.extend(struct.pack(">BI", Amf0Marker.STRICT_ARRAY, len(value)))
            for item in value:
                self._write_any(item)
        else:
            raise Amf0Error(Amf0Error.Kind.UNSUPPORTED_VALUE, type(value).__name__)

    def extract_current_bytes(self) -> bytes:
        """Return everything written so far and start afresh."""
        data = bytes(self._buffer)
        self._buffer.clear()
        return data