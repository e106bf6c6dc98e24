"""
Optbind value converters.

Overview
- Built-in coercions (always available, see coerce())
  • str   → the literal, verbatim.
  • int   → base-10 signed 32-bit integer.
  • Long  → base-10 signed 64-bit integer (annotate a parameter with Long).
  • bool  → lenient: "true" in any casing is True, every other literal is False.

- Pluggable converters
  • Converter: strategy base class; subclasses declare the type they serve and
    implement convert(text, type).
  • PathConverter: resolves a literal to an absolute pathlib.Path (built in).
  • register(converter) / lookup(type): manage the converter table.
  • supports(type): whether coerce() can handle a type at all.

Failures
- ValueError from coerce() means the literal does not fit the type (the executor
  reports it as an InvalidValueError).
- LookupError from coerce() means no coercion exists for the type (the executor
  reports it as an UnsupportedTypeError).
"""
import builtins
import re
from abc import ABC, abstractmethod
from pathlib import Path

INT32 = (-2 ** 31, 2 ** 31 - 1)
INT64 = (-2 ** 63, 2 ** 63 - 1)


class Long(int):
    """
    Marker type for 64-bit signed integer parameters.

    Annotate an option parameter with Long to accept the full 64-bit range; a
    plain int annotation is limited to 32 bits. The bound method receives a
    plain int either way.
    """
    __slots__ = ()


class Converter(ABC):
    """
    Strategy turning a literal argument into a value of a given type.

    Subclasses pass the served type to __init__ and implement convert(). A
    converter serves its type and every subclass of it (see lookup()).
    """

    def __init__(self, type, /):
        if not isinstance(type, builtins.type):
            raise TypeError("converter 'type' must be a class")
        self._type = type

    @property
    def type(self):
        return self._type

    @abstractmethod
    def convert(self, text, type, /):
        """
        Return `text` converted to `type`; raise ValueError on a bad literal.
        """

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, self._type.__qualname__)


class PathConverter(Converter):
    """
    Resolve a literal to its absolute filesystem path.
    """

    def __init__(self):
        super().__init__(Path)

    def convert(self, text, type, /):
        return type(text).absolute()


_converters = {}


def register(converter, /):
    """
    Add a converter to the table, replacing any converter for the same type.

    Returns the converter so it can be used inline:
        register(MyConverter())
    """
    if not isinstance(converter, Converter):
        raise TypeError("register() argument must be a converter")
    _converters[converter.type] = converter
    return converter


def lookup(type, /):
    """
    Find the converter serving `type`, walking its MRO; None when there is none.
    """
    for base in getattr(type, "__mro__", (type,)):
        try:
            return _converters[base]
        except (KeyError, TypeError):
            continue
    return None


BUILTINS = (str, bool, Long, int)


def supports(type, /):
    """
    Tell whether `type` has a built-in coercion or a registered converter.
    """
    return type in BUILTINS or lookup(type) is not None


def _integer(text, bounds):
    # Digits only: no whitespace, underscores, or other bases.
    if not re.fullmatch(r"[+-]?[0-9]+", text):
        raise ValueError("invalid literal for a base-10 integer: %r" % text)
    value = int(text)
    low, high = bounds
    if not low <= value <= high:
        raise ValueError("%s is out of range [%d, %d]" % (text, low, high))
    return value


def coerce(text, type, /):
    """
    Convert a literal argument to the parameter type of an option.

    Raises
    - ValueError: the literal is invalid for the type (integers only; booleans never fail).
    - LookupError: the type is neither built in nor served by a registered converter.
    """
    if type is str:
        return text
    if type is bool:
        return text.lower() == "true"
    if type is Long:
        return _integer(text, INT64)
    if type is int:
        return _integer(text, INT32)
    if not supports(type):
        raise LookupError("unsupported argument type: %s" % getattr(type, "__qualname__", repr(type)))
    return lookup(type).convert(text, type)


register(PathConverter())


__all__ = (
    "Long",
    "Converter",
    "PathConverter",
    "register",
    "lookup",
    "supports",
    "coerce",
)
