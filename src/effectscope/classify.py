"""
`effectscope.classify`
----------------------
Run-time categorisation of observed values.

A region reports two facts about the value it wraps:

* **owns memory** - the value is a non-null *address*. Python objects are not
  addresses, so only the ctypes pointer family qualifies: ``POINTER(T)``
  instances, ``c_void_p``, ``c_char_p`` and ``c_wchar_p``. ``None`` is the
  null address. A non-null address is assumed to point at owned heap storage
  and therefore implies a ``write`` effect. This over-approximates: a pointer
  into a string literal or a stack buffer looks exactly like a heap pointer
  at this level, and is flagged the same way.
* **is floating point** - the value is (or points at, through any number of
  pointer levels) a real floating-point quantity. Complex numbers, integers
  and ``bool`` are not floating point.

Recognised floating-point values
--------------------------------
* ``float`` (including ``numpy.float64``, which subclasses it)
* ``numpy.floating`` scalars of every width
* ``numpy.ndarray`` with a dtype of kind ``"f"``
* ``torch.Tensor`` with a floating dtype
* ctypes ``c_float``, ``c_double``, ``c_longdouble`` and pointers to them
"""

from __future__ import annotations

import ctypes
from typing import Final

import numpy as np
import torch


__all__ = [
    "is_address_like",
    "is_floating_point",
    "is_memory_owned",
    "is_null_address",
    "pointee_type",
]

_FLOAT_CTYPES: Final[tuple[type[ctypes._SimpleCData[float]], ...]] = (
    ctypes.c_float,
    ctypes.c_double,
    ctypes.c_longdouble,
)

# untyped addresses: pointee unknown, never floating point
_OPAQUE_ADDRESS_CTYPES: Final[tuple[type[object], ...]] = (
    ctypes.c_void_p,
    ctypes.c_char_p,
    ctypes.c_wchar_p,
)


def pointee_type(pointer_type: type[object]) -> type[object]:
    """Strip every pointer level from a ctypes type (``int**`` -> ``int``)."""
    current = pointer_type
    while isinstance(current, type) and issubclass(current, ctypes._Pointer):
        current = current._type_
    return current


def is_address_like(value: object) -> bool:
    """True for ctypes pointers and ``None``."""
    return value is None or isinstance(value, (ctypes._Pointer, *_OPAQUE_ADDRESS_CTYPES))


def is_null_address(value: object) -> bool:
    """True for ``None`` and for ctypes pointers holding NULL."""
    match value:
        case None:
            return True
        case ctypes._Pointer():
            return not bool(value)
        case ctypes.c_void_p() | ctypes.c_char_p() | ctypes.c_wchar_p():
            return value.value is None
        case _:
            return False


def is_memory_owned(value: object) -> bool:
    """A non-null address is taken to be owned heap memory."""
    return is_address_like(value) and not is_null_address(value)


def is_floating_point(value: object) -> bool:
    """True when ``value`` is, or points at, a real floating-point quantity."""
    match value:
        case bool():
            return False
        case float() | np.floating():
            return True
        case np.ndarray():
            return bool(value.dtype.kind == "f")
        case torch.Tensor():
            return bool(value.is_floating_point())
        case ctypes._Pointer():
            pointee = pointee_type(type(value))
            return isinstance(pointee, type) and issubclass(pointee, _FLOAT_CTYPES)
        case ctypes.c_float() | ctypes.c_double() | ctypes.c_longdouble():
            return True
        case _:
            return False
