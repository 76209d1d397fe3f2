"""Decode DLP `Value` wrappers into display text.

A DLP `Value` holds exactly one scalar in a oneof. Its JSON form is a single
key envelope such as ``{"integerValue": "42"}``; decoding goes through that
envelope so proto-plus messages, raw protobuf messages and already-parsed JSON
all take the same path.
"""

from collections.abc import Callable, Mapping
from typing import Any

import proto
from google.protobuf import json_format
from google.protobuf.message import Message

from dlp_numerical_stats.domain.exceptions import ValueDecodingError
from dlp_numerical_stats.domain.models import ScalarKind, ScalarValue

_NON_FINITE_FLOATS = frozenset({"NaN", "Infinity", "-Infinity"})
# Integral floats below this magnitude print as plain integers, larger ones in
# exponent notation
_PLAIN_INTEGER_LIMIT = 1e16


def to_envelope(wrapper: Any) -> Mapping[str, Any]:
    """Return the JSON envelope of a value wrapper.

    Args:
        wrapper: proto-plus message, protobuf message or JSON mapping

    Raises:
        ValueDecodingError: If the wrapper is none of the supported forms
    """
    if isinstance(wrapper, Mapping):
        return wrapper
    if isinstance(wrapper, proto.Message):
        wrapper = type(wrapper).pb(wrapper)
    if isinstance(wrapper, Message):
        return json_format.MessageToDict(wrapper)
    raise ValueDecodingError(
        f"Unsupported value wrapper type: {type(wrapper).__name__}"
    )


def _render_integer(raw: Any) -> str:
    # int64 is serialized as a JSON string
    if isinstance(raw, bool):
        raise ValueDecodingError("integerValue must not be a boolean")
    try:
        return str(int(raw))
    except (TypeError, ValueError) as e:
        raise ValueDecodingError(f"Invalid integerValue: {raw!r}") from e


def _render_float(raw: Any) -> str:
    if isinstance(raw, str) and raw in _NON_FINITE_FLOATS:
        return raw
    if isinstance(raw, bool) or not isinstance(raw, int | float | str):
        raise ValueDecodingError(f"Invalid floatValue: {raw!r}")
    try:
        number = float(raw)
    except ValueError as e:
        raise ValueDecodingError(f"Invalid floatValue: {raw!r}") from e
    if number.is_integer() and abs(number) < _PLAIN_INTEGER_LIMIT:
        return str(int(number))
    return repr(number)


def _render_string(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueDecodingError(f"Invalid stringValue: {raw!r}")
    return raw


def _render_boolean(raw: Any) -> str:
    if not isinstance(raw, bool):
        raise ValueDecodingError(f"Invalid booleanValue: {raw!r}")
    return "true" if raw else "false"


def _render_date(raw: Any) -> str:
    if not isinstance(raw, Mapping):
        raise ValueDecodingError(f"Invalid dateValue: {raw!r}")
    try:
        year, month, day = (int(raw.get(key, 0)) for key in ("year", "month", "day"))
    except (TypeError, ValueError) as e:
        raise ValueDecodingError(f"Invalid dateValue: {raw!r}") from e
    return f"{year:04d}-{month:02d}-{day:02d}"


def _render_time(raw: Any) -> str:
    if not isinstance(raw, Mapping):
        raise ValueDecodingError(f"Invalid timeValue: {raw!r}")
    try:
        hours, minutes, seconds, nanos = (
            int(raw.get(key, 0)) for key in ("hours", "minutes", "seconds", "nanos")
        )
    except (TypeError, ValueError) as e:
        raise ValueDecodingError(f"Invalid timeValue: {raw!r}") from e
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if nanos:
        text += f".{nanos:09d}"
    return text


_RENDERERS: dict[ScalarKind, Callable[[Any], str]] = {
    ScalarKind.INTEGER: _render_integer,
    ScalarKind.FLOAT: _render_float,
    ScalarKind.STRING: _render_string,
    ScalarKind.BOOLEAN: _render_boolean,
    ScalarKind.TIMESTAMP: _render_string,
    ScalarKind.TIME: _render_time,
    ScalarKind.DATE: _render_date,
    ScalarKind.DAY_OF_WEEK: _render_string,
}


def decode_scalar(wrapper: Any) -> ScalarValue:
    """Decode a value wrapper into its tagged scalar.

    Args:
        wrapper: proto-plus ``dlp_v2.Value``, protobuf message or JSON mapping

    Returns:
        The single scalar with its kind and display text

    Raises:
        ValueDecodingError: If the wrapper does not hold exactly one known scalar

    Example:
        >>> decode_scalar({"integerValue": "42"}).raw_text
        '42'
    """
    envelope = to_envelope(wrapper)
    if len(envelope) != 1:
        raise ValueDecodingError(
            f"Value wrapper must hold exactly one scalar, got {sorted(envelope)}"
        )

    ((key, raw),) = envelope.items()
    try:
        kind = ScalarKind(key)
    except ValueError as e:
        raise ValueDecodingError(f"Unknown value kind: {key}") from e

    return ScalarValue(kind=kind, raw_text=_RENDERERS[kind](raw))


def unpack_value(wrapper: Any) -> str:
    """Return the display text of the scalar held by a value wrapper.

    Example:
        >>> unpack_value({"stringValue": "abc"})
        'abc'
    """
    return decode_scalar(wrapper).raw_text


__all__ = ["decode_scalar", "to_envelope", "unpack_value"]
