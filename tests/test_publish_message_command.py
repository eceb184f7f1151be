from __future__ import annotations

import datetime

import msgspec
import pytest

from broker_client import (
    BrokerClient,
    DeadlineExceededError,
    TransportError,
    UsageError,
    ValidationError,
)
from broker_client.protocol import PublishMessageResponse
from broker_client.testing.mock_transport import MockTransport


def _publish(transport: MockTransport):
    return (
        BrokerClient(transport=transport)
        .new_publish_message_command()
        .message_name("payment-received")
        .correlation_key("order-42")
    )


def test_publish_message_round_trip() -> None:
    transport = MockTransport().on("PublishMessage", PublishMessageResponse(key=555))
    result = (
        _publish(transport)
        .time_to_live(5000)
        .message_id("msg-1")
        .variables_from_map({"amount": 12.5})
        .send()
    )
    assert result.key == 555
    req = transport.calls[0].request
    assert (req.name, req.correlation_key, req.time_to_live, req.message_id) == (
        "payment-received",
        "order-42",
        5000,
        "msg-1",
    )
    assert msgspec.json.decode(req.variables) == {"amount": 12.5}


def test_deadline_exceeded_surfaces_as_transport_error() -> None:
    transport = MockTransport().on("PublishMessage", DeadlineExceededError("deadline exceeded"))
    cmd = _publish(transport).time_to_live(5000)
    with pytest.raises(DeadlineExceededError) as exc:
        cmd.send()
    assert not isinstance(exc.value, UsageError)
    assert isinstance(exc.value, TransportError)
    assert exc.value.command == "PublishMessage"
    assert len(transport.calls) == 1
    assert transport.calls[0].request.time_to_live == 5000


def test_timeout_is_passed_through_unchanged() -> None:
    transport = MockTransport()
    _publish(transport).send(timeout=0.75)
    assert transport.calls[0].timeout == 0.75


def test_time_to_live_accepts_timedelta() -> None:
    transport = MockTransport()
    _publish(transport).time_to_live(datetime.timedelta(seconds=2)).send()
    assert transport.calls[0].request.time_to_live == 2000


def test_optional_setters_last_write_wins() -> None:
    transport = MockTransport()
    _publish(transport).time_to_live(10).time_to_live(20).message_id("a").message_id("b").send()
    req = transport.calls[0].request
    assert req.time_to_live == 20
    assert req.message_id == "b"


def test_default_ttl_is_zero() -> None:
    transport = MockTransport()
    _publish(transport).send()
    assert transport.calls[0].request.time_to_live == 0


def test_command_is_sent_at_most_once() -> None:
    transport = MockTransport()
    cmd = _publish(transport)
    cmd.send()
    with pytest.raises(UsageError):
        cmd.send()
    assert len(transport.calls) == 1


@pytest.mark.parametrize(
    "build",
    [
        lambda c: c.new_publish_message_command().message_name(""),
        lambda c: c.new_publish_message_command().message_name("m").correlation_key(""),
        lambda c: c.new_publish_message_command().message_name("m").correlation_key(None),
        lambda c: c.new_publish_message_command().message_name("m").correlation_key("k").time_to_live(-1),
        lambda c: c.new_publish_message_command().message_name("m").correlation_key("k").time_to_live("5s"),
        lambda c: c.new_publish_message_command().message_name("m").correlation_key("k").message_id(""),
        lambda c: c.new_publish_message_command().message_name("m").correlation_key("k").variables_from_string(""),
    ],
)
def test_invalid_values_fail_before_any_send(build) -> None:
    transport = MockTransport()
    with pytest.raises(ValidationError):
        build(BrokerClient(transport=transport))
    assert transport.calls == []


def test_identifiers_reach_the_transport_unchanged() -> None:
    transport = MockTransport()
    (
        BrokerClient(transport=transport)
        .new_publish_message_command()
        .message_name(" payment ")
        .correlation_key(" order-42 ")
        .message_id("\tmsg-1")
        .send()
    )
    req = transport.calls[0].request
    assert (req.name, req.correlation_key, req.message_id) == (" payment ", " order-42 ", "\tmsg-1")


def test_blank_correlation_key_is_rejected() -> None:
    transport = MockTransport()
    with pytest.raises(ValidationError):
        BrokerClient(transport=transport).new_publish_message_command().message_name("m").correlation_key("   ")
    assert transport.calls == []
