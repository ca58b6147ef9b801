"""Decoding of a complete RTMP message payload by its message type id."""

from __future__ import annotations

import logging

from .amf0 import Amf0Error, Amf0Marker, Amf0Reader
from .control_messages import ProtocolControlMessageReader, ProtocolControlMessageReaderError
from .messages import (
    AbortMessage,
    Acknowledgement,
    Amf0Command,
    AmfData,
    AudioData,
    MessageError,
    MsgTypeId,
    RtmpMessage,
    SetChunkSize,
    SetPeerBandwidth,
    VideoData,
    WindowAcknowledgementSize,
)
from .user_control import EventMessagesError, EventMessagesReader

log = logging.getLogger(__name__)


def _parse_command(msg_type_id: int, payload: bytes) -> Amf0Command:
    if msg_type_id == MsgTypeId.COMMAND_AMF3:
        if not payload:
            raise MessageError(MessageError.Kind.BYTES_READ, "empty AMF3 command")
        payload = payload[1:]
    reader = Amf0Reader(payload)
    try:
        command_name = reader.read_with_type(Amf0Marker.STRING)
        transaction_id = reader.read_with_type(Amf0Marker.NUMBER)
        # The command object may be an object or a null.
        try:
            command_object = reader.read_with_type(Amf0Marker.OBJECT)
        except Amf0Error:
            command_object = reader.read_with_type(Amf0Marker.NULL)
        others = reader.read_all()
    except Amf0Error as err:
        raise MessageError(MessageError.Kind.AMF0_READ, err) from err
    return Amf0Command(
        command_name=command_name,
        transaction_id=transaction_id,
        command_object=command_object,
        others=others,
    )


def _parse_control(msg_type_id: int, payload: bytes) -> RtmpMessage:
    reader = ProtocolControlMessageReader(payload)
    try:
        if msg_type_id == MsgTypeId.SET_CHUNK_SIZE:
            return SetChunkSize(chunk_size=reader.read_set_chunk_size())
        if msg_type_id == MsgTypeId.ABORT:
            return AbortMessage(chunk_stream_id=reader.read_abort_message())
        if msg_type_id == MsgTypeId.ACKNOWLEDGEMENT:
            return Acknowledgement(sequence_number=reader.read_acknowledgement())
        if msg_type_id == MsgTypeId.WIN_ACKNOWLEDGEMENT_SIZE:
            return WindowAcknowledgementSize(size=reader.read_window_acknowledgement_size())
        return SetPeerBandwidth(properties=reader.read_set_peer_bandwidth())
    except ProtocolControlMessageReaderError as err:
        raise MessageError(MessageError.Kind.PROTOCOL_CONTROL_MESSAGE_READER, err) from err


_CONTROL_TYPES = frozenset(
    {
        MsgTypeId.SET_CHUNK_SIZE,
        MsgTypeId.ABORT,
        MsgTypeId.ACKNOWLEDGEMENT,
        MsgTypeId.WIN_ACKNOWLEDGEMENT_SIZE,
        MsgTypeId.SET_PEER_BANDWIDTH,
    }
)


def parse_message(msg_type_id: int, payload: bytes) -> RtmpMessage:
    """Decode a message payload according to its type id.

    Shared object, aggregate and unknown message types raise ``MessageError``.
    """
    payload = bytes(payload)
    if msg_type_id in (MsgTypeId.COMMAND_AMF0, MsgTypeId.COMMAND_AMF3):
        return _parse_command(msg_type_id, payload)
    if msg_type_id == MsgTypeId.AUDIO:
        log.debug("receive audio msg, msg length is %d", len(payload))
        return AudioData(data=payload)
    if msg_type_id == MsgTypeId.VIDEO:
        log.debug("receive video msg, msg length is %d", len(payload))
        return VideoData(data=payload)
    if msg_type_id == MsgTypeId.USER_CONTROL_EVENT:
        log.debug("receive user control event msg, msg length is %d", len(payload))
        try:
            return EventMessagesReader(payload).parse_event()
        except EventMessagesError as err:
            raise MessageError(MessageError.Kind.EVENT_MESSAGES, err) from err
    if msg_type_id in _CONTROL_TYPES:
        return _parse_control(msg_type_id, payload)
    if msg_type_id in (MsgTypeId.DATA_AMF0, MsgTypeId.DATA_AMF3):
        return AmfData(raw_data=payload)
    raise MessageError(MessageError.Kind.UNKNOWN_MESSAGE_TYPE, f"type id {msg_type_id}")