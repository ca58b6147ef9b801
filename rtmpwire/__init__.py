"""RTMP wire protocol: handshake, digests, control, user control and command messages, AMF0."""

__version__ = "0.1.0"

__all__ = [
    "amf0",
    "control_messages",
    "digest",
    "handshake",
    "hexdump",
    "messages",
    "netconnection",
    "netstream",
    "parser",
    "session_define",
    "user_control",
]