"""RTMP handshake constants and the HMAC-SHA256 digest used by the complex handshake."""

from __future__ import annotations

import enum
import hashlib
import hmac
import time

RTMP_VERSION = 3
RTMP_HANDSHAKE_SIZE = 1536

RTMP_SERVER_VERSION = bytes([0x0D, 0x0E, 0x0A, 0x0D])
RTMP_CLIENT_VERSION = bytes([0x0C, 0x00, 0x0D, 0x0E])

RTMP_DIGEST_LENGTH = 32
RTMP_SERVER_KEY_FIRST_HALF = "Genuine Adobe Flash Media Server 001"
RTMP_CLIENT_KEY_FIRST_HALF = "Genuine Adobe Flash Player 001"

RTMP_SERVER_KEY = RTMP_SERVER_KEY_FIRST_HALF.encode("ascii") + bytes.fromhex(
    "f0eec24a8068bee82e00d0d1029e7e57"
    "6eec5d2d29806fab93b8e636cfeb31ae"
)

_OFFSET_MODULUS = 728


class SchemaVersion(enum.Enum):
    """Where the digest sits inside a 1536-byte handshake packet."""

    SCHEMA0 = 0
    SCHEMA1 = 1
    UNKNOWN = 2


# (position of the four offset bytes, base added to the offset)
_OFFSET_LAYOUT = {
    SchemaVersion.SCHEMA0: (772, 776),
    SchemaVersion.SCHEMA1: (8, 12),
}


class DigestError(Exception):
    """Raised when a handshake digest cannot be located, built or validated."""

    class Kind(enum.Enum):
        BYTES_READ = "bytes read error"
        DIGEST_LENGTH_NOT_CORRECT = "digest length not correct"
        CANNOT_GENERATE = "cannot generate digest"
        UNKNOWN_SCHEMA = "unknow schema"

    def __init__(self, kind: "DigestError.Kind", detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        message = kind.value if detail is None else f"{kind.value}: {detail}"
        super().__init__(message)


def current_time() -> int:
    """Current time in nanoseconds since the epoch, truncated to 32 bits."""
    try:
        return time.time_ns() & 0xFFFFFFFF
    except OSError:
        return 0


class DigestProcessor:
    """Computes and checks the digest embedded in a handshake packet."""

    def __init__(self, data: bytes, key: bytes) -> None:
        self.data = bytes(data)
        self.key = bytes(key)

    def read_digest(self) -> tuple[bytes, SchemaVersion]:
        """Return the valid digest found in the data and the schema it was found with."""
        try:
            return self._generate_and_validate(SchemaVersion.SCHEMA0), SchemaVersion.SCHEMA0
        except DigestError:
            pass
        return self._generate_and_validate(SchemaVersion.SCHEMA1), SchemaVersion.SCHEMA1

    def generate_and_fill_digest(self) -> bytes:
        """Return the data with a freshly computed schema-0 digest in place."""
        left, _, right = self._cook_raw_message(SchemaVersion.SCHEMA0)
        digest = self.make_digest(left + right)
        return left + digest + right

    def generate_digest(self) -> bytes:
        """Compute the schema-0 digest of the data."""
        left, _, right = self._cook_raw_message(SchemaVersion.SCHEMA0)
        return self.make_digest(left + right)

    def make_digest(self, raw_message: bytes) -> bytes:
        """HMAC-SHA256 of the message under this processor's key."""
        result = hmac.new(self.key, bytes(raw_message), hashlib.sha256).digest()
        if len(result) != RTMP_DIGEST_LENGTH:
            raise DigestError(DigestError.Kind.DIGEST_LENGTH_NOT_CORRECT)
        return result

    def _find_digest_offset(self, version: SchemaVersion) -> int:
        try:
            position, base = _OFFSET_LAYOUT[version]
        except KeyError:
            raise DigestError(DigestError.Kind.UNKNOWN_SCHEMA) from None
        if len(self.data) < position + 4:
            raise DigestError(
                DigestError.Kind.BYTES_READ,
                f"need {position + 4} bytes, have {len(self.data)}",
            )
        return sum(self.data[position:position + 4]) % _OFFSET_MODULUS + base

    def _cook_raw_message(self, version: SchemaVersion) -> tuple[bytes, bytes, bytes]:
        """Split the data into the part before the digest, the digest and the rest."""
        offset = self._find_digest_offset(version)
        end = offset + RTMP_DIGEST_LENGTH
        if len(self.data) < end:
            raise DigestError(
                DigestError.Kind.BYTES_READ,
                f"need {end} bytes, have {len(self.data)}",
            )
        return self.data[:offset], self.data[offset:end], self.data[end:]

    def _generate_and_validate(self, version: SchemaVersion) -> bytes:
        left, digest, right = self._cook_raw_message(version)
        computed = self.make_digest(left + right)
        if hmac.compare_digest(digest, computed):
            return digest
        raise DigestError(DigestError.Kind.CANNOT_GENERATE)