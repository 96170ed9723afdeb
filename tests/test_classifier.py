import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import pytest
from pydantic import BaseModel, Field

from politic_network.classifier import classify_response
from politic_network.config import DEFAULT_CONNECTIVITY_MESSAGE
from politic_network.envelope import WireDateTime, format_wire_datetime
from politic_network.exceptions import (
    BadRequestError,
    ConflictError,
    CustomError,
    EmptyResultError,
    ErrorKind,
    InternalServerError,
    InvalidInfoError,
    InvalidTokenError,
    NotFoundError,
    UndecodableError,
)
from politic_network.results import Failure, Success


class Member(BaseModel):
    name: str
    joined: WireDateTime


@dataclass
class Party:
    acronym: str
    seats: int


def envelope(result=None, *, success=True, message="OK") -> bytes:
    return json.dumps({"Result": result, "IsSuccess": success, "Message": message}).encode()


def test_missing_content_is_a_connectivity_failure():
    outcome = classify_response(None, 0)

    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, CustomError)
    assert outcome.message == DEFAULT_CONNECTIVITY_MESSAGE


def test_connectivity_message_is_configurable():
    outcome = classify_response(None, 0, connectivity_message="Sem conexão")

    assert outcome.message == "Sem conexão"


def test_success_returns_result_payload():
    outcome = classify_response(envelope({"id": 1}), 200)

    assert outcome == Success({"id": 1})
    assert outcome.is_success is True


def test_success_wins_regardless_of_status_code():
    outcome = classify_response(envelope([1, 2]), 500)

    assert outcome == Success([1, 2])


def test_success_without_result_is_empty():
    outcome = classify_response(envelope(None), 200)

    assert isinstance(outcome.error, EmptyResultError)
    assert outcome.kind is ErrorKind.EMPTY


def test_absent_result_key_is_empty():
    outcome = classify_response(b'{"IsSuccess": true, "Message": "ok"}', 200)

    assert isinstance(outcome.error, EmptyResultError)


@pytest.mark.parametrize(
    ("status", "error_type", "message"),
    [
        (403, InvalidInfoError, "M"),
        (404, NotFoundError, "M"),
        (409, ConflictError, "M"),
    ],
)
def test_status_errors_carry_server_message(status, error_type, message):
    outcome = classify_response(envelope(success=False, message=message), status)

    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, error_type)
    assert outcome.error.message == message
    assert outcome.error.status_code == status


@pytest.mark.parametrize(
    ("status", "error_type"),
    [(400, BadRequestError), (500, InternalServerError)],
)
def test_status_errors_without_payload(status, error_type):
    outcome = classify_response(envelope(success=False, message="details"), status)

    assert isinstance(outcome.error, error_type)
    assert outcome.error.message is None


def test_unmapped_failure_status_falls_back_to_connectivity_message():
    outcome = classify_response(envelope(success=False, message="teapot"), 418)

    assert isinstance(outcome.error, CustomError)
    assert outcome.message == DEFAULT_CONNECTIVITY_MESSAGE


@pytest.mark.parametrize("message", ["Token expired", "Invalid token"])
def test_token_messages_take_priority(message):
    success = classify_response(envelope({"id": 1}, message=message), 200)
    failure = classify_response(envelope(success=False, message=message), 404)

    assert isinstance(success.error, InvalidTokenError)
    assert isinstance(failure.error, InvalidTokenError)


@pytest.mark.parametrize(
    "content",
    [
        b"",
        b"<html>oops</html>",
        b'{"Result": 1, "IsSuccess": "yes", "Message": "ok"}',
        b'{"Result": 1, "IsSuccess": true}',
        b"[1, 2, 3]",
    ],
)
def test_malformed_envelopes_are_undecodable(content):
    outcome = classify_response(content, 200)

    assert isinstance(outcome.error, UndecodableError)
    assert outcome.kind is ErrorKind.UNDECODABLE


def test_typed_result_decodes_wire_dates_as_utc():
    content = envelope({"name": "Ann", "joined": "2024-03-05T10:20:30.123"})

    outcome = classify_response(content, 200, Member)

    assert isinstance(outcome, Success)
    assert outcome.value.name == "Ann"
    assert outcome.value.joined == datetime(2024, 3, 5, 10, 20, 30, 123000, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "joined",
    ["2024-03-05 10:20:30.123", "2024-03-05T10:20:30", "2024-03-05T10:20:30.123Z", "2024-13-05T10:20:30.123"],
)
def test_unexpected_date_format_is_undecodable(joined):
    outcome = classify_response(envelope({"name": "Ann", "joined": joined}), 200, Member)

    assert isinstance(outcome.error, UndecodableError)


def test_schema_mismatch_in_result_is_undecodable():
    outcome = classify_response(envelope({"name": "Ann"}), 200, Member)

    assert isinstance(outcome.error, UndecodableError)


def test_list_of_dataclasses_result():
    content = envelope([{"acronym": "ABC", "seats": 12}, {"acronym": "XYZ", "seats": 3}])

    outcome = classify_response(content, 200, list[Party])

    assert outcome.unwrap() == [Party("ABC", 12), Party("XYZ", 3)]


def test_failure_unwrap_raises_carried_error():
    outcome = classify_response(envelope(success=False, message="gone"), 404)

    with pytest.raises(NotFoundError, match="gone"):
        outcome.unwrap()


def test_wire_datetime_formatting_uses_milliseconds():
    value = datetime(2024, 3, 5, 10, 20, 30, 123456, tzinfo=timezone.utc)

    assert format_wire_datetime(value) == "2024-03-05T10:20:30.123"


class Plain(BaseModel):
    when: datetime


class Hearing(BaseModel):
    title: str
    opened: datetime = Field(alias="OpenedAt")
    closed: Optional[datetime] = None
    recesses: list[datetime] = []


@dataclass
class Sitting:
    room: str
    starts: datetime


UTC_STAMP = datetime(2024, 3, 5, 10, 20, 30, 123000, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "when",
    ["2024-03-05", "2024-03-05T10:20:30Z", "2024-03-05T10:20:30.123+02:00", 1700000000],
)
def test_plain_datetime_fields_require_wire_format(when):
    outcome = classify_response(envelope({"when": when}), 200, Plain)

    assert isinstance(outcome.error, UndecodableError)


def test_plain_datetime_fields_decode_as_utc():
    outcome = classify_response(envelope({"when": "2024-03-05T10:20:30.123"}), 200, Plain)

    assert type(outcome.value) is Plain
    assert outcome.value == Plain(when=UTC_STAMP)


def test_nested_and_aliased_datetime_fields_use_wire_format():
    payload = {
        "title": "Budget",
        "OpenedAt": "2024-03-05T10:20:30.123",
        "closed": None,
        "recesses": ["2024-03-05T10:20:30.123"],
    }

    outcome = classify_response(envelope(payload), 200, Hearing)

    assert type(outcome.value) is Hearing
    assert outcome.value.opened == UTC_STAMP
    assert outcome.value.closed is None
    assert outcome.value.recesses == [UTC_STAMP]

    payload["recesses"] = ["2024-03-05T10:20:30"]
    assert isinstance(classify_response(envelope(payload), 200, Hearing).error, UndecodableError)


def test_dataclass_datetime_fields_use_wire_format():
    good = envelope([{"room": "A1", "starts": "2024-03-05T10:20:30.123"}])
    bad = envelope([{"room": "A1", "starts": "2024-03-05"}])

    assert classify_response(good, 200, list[Sitting]).unwrap() == [Sitting("A1", UTC_STAMP)]
    assert isinstance(classify_response(bad, 200, list[Sitting]).error, UndecodableError)


def test_bare_datetime_result_uses_wire_format():
    good = classify_response(envelope({"a": "2024-03-05T10:20:30.123"}), 200, dict[str, datetime])
    bad = classify_response(envelope("2024-03-05"), 200, datetime)

    assert good.unwrap() == {"a": UTC_STAMP}
    assert isinstance(bad.error, UndecodableError)
