"""
Optbind option registry: discover, validate, and index the options of a command type.

What this module provides
- build_registry(command_type): walk a @command class, validate every @option it
  carries, and return an immutable Registry.
- Registry: read-only mapping Option → Binding in authored declaration order, with
  short-name and long-name side indexes.
- Binding: the bound operation of one option (function, single parameter, resolved
  parameter type, and return kind).

Discovery order
- The MRO is walked base-first, each class __dict__ in authored order, so inherited
  options come first and an overriding definition keeps the base position.
- An attribute name always resolves to the most-derived definition: a subclass that
  redefines an option attribute as a plain method drops the option.

Validation (ValidationError, raised before any argument is looked at)
- the type is not a class, is abstract, or is a Protocol;
- the class itself lacks a @command declaration, or the command name is empty;
- an option has an empty description;
- an option method takes more than one parameter besides the instance;
- an option method's return annotation is neither None nor int;
- a short or long name is already used by another option of the same type.

The side indexes are filled into local dicts and frozen only once every option has
been accepted, so a failed build never leaves a partial registry behind.
"""
import inspect
import typing
from collections import namedtuple
from collections.abc import Mapping
from inspect import Parameter
from types import MappingProxyType

from .declarations import Option, declaration
from .faults import FaultCode, ValidationError
from .utils import *


class Binding(namedtuple("Binding", ("declaration", "attribute", "function", "parameter", "type", "returns"))):
    """
    Bound operation of one option.

    Fields
    - declaration: the Option declaration.
    - attribute: the attribute name of the option on the command class.
    - function: the plain function, called as function(instance, *arguments).
    - parameter: inspect.Parameter of the single formal parameter, or None.
    - type: the parameter type (str when unannotated), or None without a parameter.
    - returns: None (returns nothing), int (returns an exit code), or Unset (unannotated).
    """
    __slots__ = ()

    @property
    def arity(self):
        return int(self.parameter is not None)

    def invoke(self, instance, arguments, /):
        return self.function(instance, *arguments)


class Registry(Mapping):
    """
    Immutable mapping from Option declarations to their Bindings.

    Iteration follows the authored declaration order. Lookups by name go through
    the short and long side indexes, both pointing at the same declarations.
    """

    def __init__(self, command, bindings, shorts, longs, /):
        self._command = command
        self._bindings = MappingProxyType(bindings)
        self._shorts = MappingProxyType(shorts)
        self._longs = MappingProxyType(longs)

    @property
    def command(self):
        """
        The Command declaration of the registered type.
        """
        return self._command

    @property
    def multiple(self):
        """
        True when at least one option may be specified multiple times.
        """
        return any(option.multiple for option in self._bindings)

    def short(self, name, /):
        """
        Return the Binding of the option with short name `name`, or None.
        """
        try:
            return self._bindings[self._shorts[name]]
        except KeyError:
            return None

    def long(self, name, /):
        """
        Return the Binding of the option with long name `name`, or None.
        """
        try:
            return self._bindings[self._longs[name]]
        except KeyError:
            return None

    def __getitem__(self, option, /):
        return self._bindings[option]

    def __iter__(self):
        return iter(self._bindings)

    def __len__(self):
        return len(self._bindings)

    def __repr__(self):
        return "registry(command=%r, options=%r)" % (self._command.name, tuple(self._bindings))


def _attributes(cls):
    """
    Yield attribute names of `cls` in declaration order, base classes first.
    """
    seen = set()
    for base in reversed(cls.__mro__):
        for name in vars(base):
            if name not in seen:
                seen.add(name)
                yield name


def _resolve_binding(cls, attribute, option):
    """
    Validate the function behind `option` and build its Binding.
    """
    if not option.descr:
        raise ValidationError(
            "option %r of %s is missing a description" % (option.display, cls.__qualname__),
            title="invalid option declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="add descr=... to @option(%s)" % ", ".join(map(repr, option.names)),
            input=option.display,
        )

    function = option.callback
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        raise ValidationError(
            "option %r of %s is not bound to an inspectable function" % (option.display, cls.__qualname__),
            title="invalid option declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="decorate a plain method with @option()",
            input=option.display,
        ) from None

    parameters = list(signature.parameters.values())

    if not parameters or parameters[0].kind not in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD):
        raise ValidationError(
            "option %r of %s must be a method taking the command instance first" % (option.display, cls.__qualname__),
            title="invalid option declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="declare it as def %s(self, ...)" % attribute,
            input=option.display,
        )

    if len(parameters) > 2 or any(
        parameter.kind not in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD) for parameter in parameters
    ):
        raise ValidationError(
            "option %r of %s cannot have more than one parameter" % (option.display, cls.__qualname__),
            title="invalid option declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="take no value, or a single positional value",
            input=option.display,
        )

    try:
        hints = typing.get_type_hints(function)
    except Exception as exception:
        raise ValidationError(
            "option %r of %s has unresolvable annotations" % (option.display, cls.__qualname__),
            title="invalid option declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="make sure every annotation names an importable type",
            input=option.display,
            exception=exception,
        ) from exception

    match hints.get("return", Unset):
        case UnsetType():
            returns = Unset
        case builtin if builtin is type(None):
            returns = None
        case builtin if builtin is int:
            returns = int
        case other:
            raise ValidationError(
                "option %r of %s can only return None or int, not %s" % (
                    option.display, cls.__qualname__, getattr(other, "__qualname__", repr(other))
                ),
                title="invalid option declaration",
                code=FaultCode.INVALID_DECLARATION,
                hint="return nothing, or an int exit code",
                input=option.display,
            )

    parameter = parameters[1] if len(parameters) == 2 else None

    return Binding(
        declaration=option,
        attribute=attribute,
        function=function,
        parameter=parameter,
        type=hints.get(parameter.name, str) if parameter else None,
        returns=returns,
    )


def build_registry(command_type, /):
    """
    Discover and validate every option of `command_type`; return its Registry.

    Raises
    - ValidationError: on any bad command or option declaration (see module docs).
    """
    if not isinstance(command_type, type):
        raise ValidationError(
            "%r is not a command class" % (command_type,),
            title="invalid command declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="pass the class decorated with @command, not an instance",
        )

    if inspect.isabstract(command_type) or getattr(command_type, "_is_protocol", False):
        raise ValidationError(
            "%s is an interface and cannot be instantiated" % command_type.__qualname__,
            title="invalid command declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="pass a concrete class",
        )

    if (command := declaration(command_type)) is None:
        raise ValidationError(
            "%s is missing @command" % command_type.__qualname__,
            title="invalid command declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="decorate the class with @command(\"name\")",
        )

    if not command.name:
        raise ValidationError(
            "%s has an empty command name" % command_type.__qualname__,
            title="invalid command declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="give the command a non-empty name",
        )

    bindings = {}
    shorts = {}
    longs = {}

    for attribute in _attributes(command_type):
        if not isinstance(option := inspect.getattr_static(command_type, attribute), Option):
            continue

        binding = _resolve_binding(command_type, attribute, option)

        if option.short and option.short in shorts:
            raise ValidationError(
                "duplicate option with short name -%s in %s" % (option.short, command_type.__qualname__),
                title="duplicate option name",
                code=FaultCode.INVALID_DECLARATION,
                hint="rename one of the options using -%s" % option.short,
                input="-" + option.short,
            )
        if option.long and option.long in longs:
            raise ValidationError(
                "duplicate option with long name --%s in %s" % (option.long, command_type.__qualname__),
                title="duplicate option name",
                code=FaultCode.INVALID_DECLARATION,
                hint="rename one of the options using --%s" % option.long,
                input="--" + option.long,
            )

        if option.short:
            shorts[option.short] = option
        if option.long:
            longs[option.long] = option
        bindings[option] = binding

    return Registry(command, bindings, shorts, longs)


__all__ = (
    "Binding",
    "Registry",
    "build_registry",
)
