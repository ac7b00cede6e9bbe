'''
Convert domain dataclasses to and from plain JSON records.

Records are the dict form persisted by the Store: Decimals become
strings, datetimes and dates ISO 8601 strings, enums their values.
Hydration walks the dataclass type hints to coerce every field back,
including nested dataclasses and lists of them.
'''

from __future__ import annotations

import dataclasses
import enum
import types
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

import orjson

__all__ = ['dumps', 'hydrate', 'loads', 'to_record']

T = TypeVar('T')


def _serialize_default(obj: Any) -> Any:

    '''
    Serialize Decimal to string for orjson.

    Args:
        obj (Any): Object that orjson cannot serialize natively

    Returns:
        Any: JSON-serializable representation
    '''

    if isinstance(obj, Decimal):
        return str(obj)
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def dumps(value: Any) -> bytes:

    '''Serialize a record or dataclass to JSON bytes.'''

    return orjson.dumps(value, default=_serialize_default)


def loads(payload: bytes | str) -> Any:

    '''Deserialize JSON bytes produced by dumps().'''

    return orjson.loads(payload)


def to_record(obj: Any) -> dict[str, Any]:

    '''
    Convert a domain dataclass into its persisted JSON record form.

    Args:
        obj (Any): Dataclass instance

    Returns:
        dict[str, Any]: JSON-compatible record
    '''

    record: dict[str, Any] = loads(dumps(obj))
    return record


def _coerce(value: Any, target: Any) -> Any:

    '''
    Coerce a deserialized JSON value to the expected Python type.

    Args:
        value (Any): Raw value from orjson.loads
        target (Any): Expected Python type from dataclass field annotation

    Returns:
        Any: Value coerced to the target type
    '''

    if value is None:
        return None

    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(target) if a is not type(None)]
        return _coerce(value, args[0]) if args else value

    if origin is list:
        (item_type,) = get_args(target) or (Any,)
        return [_coerce(item, item_type) for item in value]

    if target is Decimal:
        return Decimal(str(value))

    if target is datetime:
        return value if isinstance(value, datetime) else datetime.fromisoformat(str(value))

    if target is date:
        if isinstance(value, date):
            return value
        text = str(value)
        # legacy records stored expiration dates as full timestamps
        if 'T' in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)

    if isinstance(target, type) and issubclass(target, enum.Enum):
        return target(value)

    if isinstance(target, type) and dataclasses.is_dataclass(target):
        return hydrate(target, value)

    return value


def hydrate(cls: type[T], raw: dict[str, Any]) -> T:

    '''
    Reconstruct a domain dataclass from its persisted record.

    Keys without a matching dataclass field are ignored so records
    written by older or newer versions still load.

    Args:
        cls (type[T]): Dataclass to build
        raw (dict[str, Any]): Record produced by to_record or a legacy writer

    Returns:
        T: Hydrated dataclass instance
    '''

    hints = get_type_hints(cls)
    names = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    coerced = {k: _coerce(v, hints[k]) for k, v in raw.items() if k in names}
    return cls(**coerced)
