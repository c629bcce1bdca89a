"""
Utility Functions
=================

Conversions between integers, byte strings and hex, plus helpers that turn
nested structures of big integers into strings and back (the form in which
circuit inputs and ledger messages are exchanged).
"""

from typing import Any

from .constants import SNARK_FIELD_SIZE
from .errors import InvalidFieldElement


def bigint_to_bytes(value: int) -> bytes:
    """
    Minimal big-endian encoding of a non-negative integer.

    ``0`` encodes to ``b"\\x00"``, matching the even-length hex convention
    used when private keys are turned into seeds.
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative integer: {value}")
    h = format(value, 'x')
    if len(h) % 2 == 1:
        h = '0' + h
    return bytes.fromhex(h)


def bytes_to_bigint(data: bytes) -> int:
    return int.from_bytes(data, 'big')


def bigint_to_hex(value: int) -> str:
    return bigint_to_bytes(value).hex()


def hex_to_bigint(value: str) -> int:
    if value.startswith(('0x', '0X')):
        value = value[2:]
    if not value:
        return 0
    return int(value, 16)


def le_bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, 'little')


def int_to_le_bytes(value: int, length: int = 32) -> bytes:
    return value.to_bytes(length, 'little')


def check_field_element(value: int, name: str = "value") -> int:
    """Return ``value`` unchanged if it lies in [0, p), otherwise raise."""
    if not isinstance(value, int) or not 0 <= value < SNARK_FIELD_SIZE:
        raise InvalidFieldElement(f"{name} is not a field element: {value!r}")
    return value


def stringizing(obj: Any, max_depth: int = 100) -> Any:
    """
    Recursively convert every integer inside ``obj`` to its decimal string.

    Parameters
    ----------
    obj : Any
        An int, or a list / tuple / dict nesting ints
    max_depth : int
        Recursion guard against self-referencing structures

    Returns
    -------
    Any
        The same structure with ints replaced by strings (tuples become lists)
    """
    if max_depth < 0:
        raise ValueError("Maximum nesting depth exceeded")
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, (list, tuple)):
        return [stringizing(item, max_depth - 1) for item in obj]
    if isinstance(obj, dict):
        return {k: stringizing(v, max_depth - 1) for k, v in obj.items()}
    return obj


def destringizing(obj: Any, max_depth: int = 100) -> Any:
    """Inverse of :func:`stringizing`: decimal strings become ints."""
    if max_depth < 0:
        raise ValueError("Maximum nesting depth exceeded")
    if isinstance(obj, str):
        return int(obj)
    if isinstance(obj, (list, tuple)):
        return [destringizing(item, max_depth - 1) for item in obj]
    if isinstance(obj, dict):
        return {k: destringizing(v, max_depth - 1) for k, v in obj.items()}
    return obj
