import pytest

from rtmpwire.session_define import (
    ClientError,
    PeerBandwidthLimitType,
    SessionError,
    SessionType,
)


def test_session_type_display():
    assert SessionType.CLIENT.__str__() == "client"
    assert SessionType.SERVER.__str__() == "server"
    assert format(SessionType.SERVER) == "server"


def test_peer_bandwidth_limit_type_from_wire_value():
    assert PeerBandwidthLimitType(2) is PeerBandwidthLimitType.DYNAMIC
    assert PeerBandwidthLimitType(0) is PeerBandwidthLimitType.HARD
    with pytest.raises(ValueError):
        PeerBandwidthLimitType(3)


def test_session_error_without_cause():
    error = SessionError(SessionError.Kind.NO_APP_NAME)
    assert error.kind is SessionError.Kind.NO_APP_NAME
    assert str(error) == "no app name error"
    assert error.cause is None


def test_session_error_wraps_cause():
    inner = ValueError("broken pipe")
    error = SessionError(SessionError.Kind.BYTES_IO, inner)
    assert str(error) == "net io error: broken pipe"
    assert error.__cause__ is inner
    assert error.cause is inner


def test_session_error_kind_lookup_by_message():
    kind = SessionError.Kind("subscribe count limit is reached.")
    assert kind is SessionError.Kind.SUBSCRIBE_COUNT_LIMIT_REACH
    assert str(SessionError(kind)) == "subscribe count limit is reached."


def test_client_error_keeps_cause_out_of_message():
    inner = OSError("refused")
    error = ClientError(ClientError.Kind.IO, inner)
    assert str(error) == "io error"
    assert error.__cause__ is inner
    assert error.kind is ClientError.Kind.IO


def test_client_error_send():
    error = ClientError(ClientError.Kind.SEND)
    assert str(error) == "send error"
    assert error.kind is ClientError.Kind.SEND
    assert error.cause is None