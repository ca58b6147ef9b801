"""Hex and decimal dumps of byte buffers for debugging."""

from __future__ import annotations

from collections.abc import Callable

_RULE = "==========="
_PER_LINE = 16


def _format_bytes(data: bytes, render: Callable[[int], str]) -> str:
    parts = []
    for count, byte in enumerate(data, start=1):
        parts.append(f"{render(byte)} ")
        if count % _PER_LINE == 0:
            parts.append("\n")
    return "".join(parts)


def _framed(data: bytes, render: Callable[[int], str]) -> str:
    return f"{_RULE}{len(data)}\n{_format_bytes(data, render)}{_RULE}\n"


def format_hex(data: bytes) -> str:
    """Framed dump of the bytes as upper-case hex, sixteen to a line."""
    return _framed(data, lambda byte: f"{byte:02X}")


def format_decimal(data: bytes) -> str:
    """Framed dump of the bytes as decimal numbers, sixteen to a line."""
    return _framed(data, str)


def print_hex(data: bytes) -> None:
    """Print the hex dump of the bytes."""
    print(format_hex(data), end="")


def print_decimal(data: bytes) -> None:
    """Print the decimal dump of the bytes."""
    print(format_decimal(data), end="")


def print_array(data: bytes, length: int) -> None:
    """Print the first ``length`` bytes as hex, sixteen to a line, without a frame."""
    if length < 0 or length > len(data):
        raise ValueError(f"length {length} out of range for {len(data)} bytes")
    print(_format_bytes(data[:length], lambda byte: f"{byte:02X}"), end="")