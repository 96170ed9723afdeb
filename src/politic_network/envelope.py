"""Wire envelope model and timestamp handling."""

from __future__ import annotations

import copy
import dataclasses
import re
import threading
import types
from datetime import datetime, timezone
from typing import (
    Annotated,
    Any,
    ClassVar,
    Generic,
    Literal,
    Optional,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    StrictBool,
    StrictStr,
    TypeAdapter,
    create_model,
)

T = TypeVar("T")

WIRE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"
_WIRE_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}")


def parse_wire_datetime(value: Any) -> Any:
    """Parse a ``YYYY-MM-DDTHH:mm:ss.SSS`` timestamp as a UTC datetime."""

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _WIRE_DATE_PATTERN.fullmatch(value):
        raise ValueError(f"expected a YYYY-MM-DDTHH:mm:ss.SSS timestamp, got {value!r}")
    return datetime.strptime(value, WIRE_DATE_FORMAT).replace(tzinfo=timezone.utc)


def format_wire_datetime(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(WIRE_DATE_FORMAT)[:-3]


WireDateTime = Annotated[
    datetime,
    BeforeValidator(parse_wire_datetime),
    PlainSerializer(format_wire_datetime, return_type=str, when_used="json"),
]


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper returned by every endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    result: Optional[T] = Field(default=None, alias="Result")
    is_success: StrictBool = Field(alias="IsSuccess")
    message: StrictStr = Field(alias="Message")


# Payload classes rewritten to decode their datetime fields in wire format.
# A class that needs no rewrite maps to itself.
_WIRE_CLASSES: dict[type, type] = {}
_WIRE_CLASSES_LOCK = threading.RLock()
_ADAPTERS: dict[Any, TypeAdapter[Any]] = {}


def wire_type(tp: Any) -> Any:
    """Return ``tp`` with every ``datetime`` replaced by `WireDateTime`.

    Models and dataclasses are rewritten into look-alike classes whose fields
    carry the wire timestamp rule; self-referencing classes are only rewritten
    down to their first recursive reference.
    """

    with _WIRE_CLASSES_LOCK:
        return _wire_type(tp, set())


def _wire_type(tp: Any, seen: set[type]) -> Any:
    if tp is datetime:
        return WireDateTime
    if tp == WireDateTime:
        return tp
    origin = get_origin(tp)
    if origin is Annotated:
        inner, *metadata = get_args(tp)
        mapped = _wire_type(inner, seen)
        return tp if mapped is inner else Annotated[(mapped, *metadata)]
    if origin in (Literal, ClassVar):
        return tp
    if origin is not None:
        args = get_args(tp)
        mapped_args = tuple(
            arg if arg is Ellipsis or isinstance(arg, list) else _wire_type(arg, seen) for arg in args
        )
        if all(new is old for new, old in zip(mapped_args, args)):
            return tp
        if origin in (Union, types.UnionType):
            return Union[mapped_args]
        return origin[mapped_args]
    if isinstance(tp, type):
        if issubclass(tp, BaseModel):
            return _wire_class(tp, seen, _wire_model)
        if dataclasses.is_dataclass(tp):
            return _wire_class(tp, seen, _wire_dataclass)
    return tp


def _wire_class(cls: type, seen: set[type], build) -> type:
    if cls in _WIRE_CLASSES:
        return _WIRE_CLASSES[cls]
    if cls in seen:
        return cls
    seen.add(cls)
    rewritten = build(cls, seen)
    _WIRE_CLASSES[cls] = rewritten
    return rewritten


def _wire_model(model: type[BaseModel], seen: set[type]) -> type:
    overrides: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        mapped = _wire_type(field.annotation, seen)
        if mapped is not field.annotation:
            overrides[name] = (mapped, copy.copy(field))
    if not overrides:
        return model
    return create_model(model.__name__, __base__=model, __module__=model.__module__, **overrides)


def _wire_dataclass(cls: type, seen: set[type]) -> type:
    hints = get_type_hints(cls, include_extras=True)
    specs: list[tuple[str, Any, Any]] = []
    changed = False
    for field in dataclasses.fields(cls):
        hint = hints.get(field.name, field.type)
        mapped = _wire_type(hint, seen)
        changed = changed or mapped is not hint
        if field.default is not dataclasses.MISSING:
            spec = dataclasses.field(default=field.default)
        elif field.default_factory is not dataclasses.MISSING:
            spec = dataclasses.field(default_factory=field.default_factory)
        else:
            spec = dataclasses.field()
        specs.append((field.name, mapped, spec))
    if not changed:
        return cls
    return dataclasses.make_dataclass(cls.__name__, specs)


def _adapter(tp: Any) -> TypeAdapter[Any]:
    try:
        adapter = _ADAPTERS.get(tp)
    except TypeError:
        return TypeAdapter(tp)
    if adapter is None:
        adapter = _ADAPTERS.setdefault(tp, TypeAdapter(tp))
    return adapter


def decode_envelope(content: bytes | str, result_type: Any = None) -> Envelope[Any]:
    """Validate ``content`` as an envelope whose result is ``result_type``.

    Every ``datetime`` inside ``result_type`` must arrive as a
    ``YYYY-MM-DDTHH:mm:ss.SSS`` UTC timestamp. The decoded result is an
    instance of ``result_type`` itself.

    Raises `pydantic.ValidationError` on malformed JSON, schema mismatches
    and timestamps that do not follow the wire format.
    """

    if result_type is None:
        return Envelope[Any].model_validate_json(content)

    wired = wire_type(result_type)
    envelope = Envelope[wired].model_validate_json(content)
    if wired is result_type or envelope.result is None:
        return envelope
    plain = _adapter(wired).dump_python(envelope.result, by_alias=True)
    return envelope.model_copy(update={"result": _adapter(result_type).validate_python(plain)})


__all__ = [
    "Envelope",
    "WIRE_DATE_FORMAT",
    "WireDateTime",
    "decode_envelope",
    "format_wire_datetime",
    "parse_wire_datetime",
    "wire_type",
]
