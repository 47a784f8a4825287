"""SQL value types, their property flags and MySQL type mapping."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag


class Flag(IntFlag):
    """Bits that mark common properties of a type."""

    NONE = 0
    ISINTEGRAL = 256
    ISUNSIGNED = 512
    ISFLOAT = 1024
    ISQUOTED = 2048
    ISTEXT = 4096
    ISBINARY = 8192


_I = Flag.ISINTEGRAL
_U = Flag.ISUNSIGNED
_F = Flag.ISFLOAT
_Q = Flag.ISQUOTED
_T = Flag.ISTEXT
_B = Flag.ISBINARY


class Type(IntEnum):
    """A SQL value type; the value combines an ordinal with property flags."""

    NULL_TYPE = 0
    INT8 = 1 | _I
    UINT8 = 2 | _I | _U
    INT16 = 3 | _I
    UINT16 = 4 | _I | _U
    INT24 = 5 | _I
    UINT24 = 6 | _I | _U
    INT32 = 7 | _I
    UINT32 = 8 | _I | _U
    INT64 = 9 | _I
    UINT64 = 10 | _I | _U
    FLOAT32 = 11 | _F
    FLOAT64 = 12 | _F
    TIMESTAMP = 13 | _Q
    DATE = 14 | _Q
    TIME = 15 | _Q
    DATETIME = 16 | _Q
    YEAR = 17 | _I | _U
    DECIMAL = 18
    TEXT = 19 | _Q | _T
    BLOB = 20 | _Q | _B
    VARCHAR = 21 | _Q | _T
    VARBINARY = 22 | _Q | _B
    CHAR = 23 | _Q | _T
    BINARY = 24 | _Q | _B
    BIT = 25 | _Q
    ENUM = 26 | _Q
    SET = 27 | _Q
    TUPLE = 28
    GEOMETRY = 29 | _Q
    JSON = 30 | _Q


def _has(typ: int, mask: int) -> bool:
    return int(typ) & mask == mask


def is_integral(typ: int) -> bool:
    """True for signed or unsigned integral types of up to 64 bits."""
    return _has(typ, Flag.ISINTEGRAL)


def is_signed(typ: int) -> bool:
    """True for signed integral types."""
    return int(typ) & (Flag.ISINTEGRAL | Flag.ISUNSIGNED) == Flag.ISINTEGRAL


def is_unsigned(typ: int) -> bool:
    """True for unsigned integral types (not the same as ``not is_signed``)."""
    mask = Flag.ISINTEGRAL | Flag.ISUNSIGNED
    return int(typ) & mask == mask


def is_float(typ: int) -> bool:
    """True for floating point types."""
    return _has(typ, Flag.ISFLOAT)


def is_quoted(typ: int) -> bool:
    """True for types whose values must be quoted in SQL."""
    return _has(typ, Flag.ISQUOTED)


def is_text(typ: int) -> bool:
    """True for text types."""
    return _has(typ, Flag.ISTEXT)


def is_binary(typ: int) -> bool:
    """True for binary types."""
    return _has(typ, Flag.ISBINARY)


MYSQL_UNSIGNED = 32
MYSQL_BINARY = 128
MYSQL_ENUM = 256
MYSQL_SET = 2048

_MYSQL_TO_TYPE: dict[int, Type] = {
    1: Type.INT8,
    2: Type.INT16,
    3: Type.INT32,
    4: Type.FLOAT32,
    5: Type.FLOAT64,
    6: Type.NULL_TYPE,
    7: Type.TIMESTAMP,
    8: Type.INT64,
    9: Type.INT24,
    10: Type.DATE,
    11: Type.TIME,
    12: Type.DATETIME,
    13: Type.YEAR,
    16: Type.BIT,
    245: Type.JSON,
    246: Type.DECIMAL,
    249: Type.TEXT,
    250: Type.TEXT,
    251: Type.TEXT,
    252: Type.TEXT,
    253: Type.VARCHAR,
    254: Type.CHAR,
    255: Type.GEOMETRY,
}

_UNSIGNED_VARIANT = {
    Type.INT8: Type.UINT8,
    Type.INT16: Type.UINT16,
    Type.INT32: Type.UINT32,
    Type.INT64: Type.UINT64,
    Type.INT24: Type.UINT24,
}

_BINARY_VARIANT = {
    Type.TEXT: Type.BLOB,
    Type.VARCHAR: Type.VARBINARY,
    Type.CHAR: Type.BINARY,
}


def _modify_type(typ: Type, flags: int) -> Type:
    # Only flags relevant to the given type are honoured; stray ones are ignored.
    if typ in _UNSIGNED_VARIANT:
        return _UNSIGNED_VARIANT[typ] if flags & MYSQL_UNSIGNED else typ
    if typ in _BINARY_VARIANT and flags & MYSQL_BINARY:
        return _BINARY_VARIANT[typ]
    if typ is Type.CHAR:
        if flags & MYSQL_ENUM:
            return Type.ENUM
        if flags & MYSQL_SET:
            return Type.SET
    return typ


def mysql_to_type(mysql_type: int, flags: int) -> Type:
    """Compute the type from a MySQL type code and flags."""
    try:
        result = _MYSQL_TO_TYPE[mysql_type]
    except KeyError:
        raise ValueError(f"unsupported type: {mysql_type}") from None
    return _modify_type(result, flags)


_TYPE_TO_MYSQL: dict[Type, tuple[int, int]] = {
    Type.INT8: (1, 0),
    Type.UINT8: (1, MYSQL_UNSIGNED),
    Type.INT16: (2, 0),
    Type.UINT16: (2, MYSQL_UNSIGNED),
    Type.INT32: (3, 0),
    Type.UINT32: (3, MYSQL_UNSIGNED),
    Type.FLOAT32: (4, 0),
    Type.FLOAT64: (5, 0),
    Type.NULL_TYPE: (6, MYSQL_BINARY),
    Type.TIMESTAMP: (7, 0),
    Type.INT64: (8, 0),
    Type.UINT64: (8, MYSQL_UNSIGNED),
    Type.INT24: (9, 0),
    Type.UINT24: (9, MYSQL_UNSIGNED),
    Type.DATE: (10, MYSQL_BINARY),
    Type.TIME: (11, MYSQL_BINARY),
    Type.DATETIME: (12, MYSQL_BINARY),
    Type.YEAR: (13, MYSQL_UNSIGNED),
    Type.BIT: (16, MYSQL_UNSIGNED),
    Type.JSON: (245, 0),
    Type.DECIMAL: (246, 0),
    Type.TEXT: (252, 0),
    Type.BLOB: (252, MYSQL_BINARY),
    Type.VARCHAR: (253, 0),
    Type.VARBINARY: (253, MYSQL_BINARY),
    Type.CHAR: (254, 0),
    Type.BINARY: (254, MYSQL_BINARY),
    Type.ENUM: (254, MYSQL_ENUM),
    Type.SET: (254, MYSQL_SET),
    Type.GEOMETRY: (255, 0),
}


def type_to_mysql(typ: int) -> tuple[int, int]:
    """Return the MySQL type code and flags for a type; (0, 0) if unknown."""
    return _TYPE_TO_MYSQL.get(typ, (0, 0))


@dataclass(frozen=True)
class EventToken:
    """A point in a replication stream, identified by its timestamp."""

    timestamp: int = 0


def event_token_minimum(
    ev1: EventToken | None, ev2: EventToken | None
) -> EventToken | None:
    """Return a token no later than either input, or None if one is missing."""
    if ev1 is None or ev2 is None:
        return None
    return EventToken(timestamp=min(ev1.timestamp, ev2.timestamp))