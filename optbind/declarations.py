r"""
Optbind declarations and decorators.

Overview
- Declarations
  • Command: command-level declaration (the display name used in usage output).
  • Option: per-method declaration (short/long name, description, multiplicity,
    exit behavior, parameter display name) bound to the decorated function.

- Decorators
  • @command / @command("name"): mark a class as a command.
  • @option("-x", "--xxx", descr=...): mark a method as an option handler.

- Introspection & representation
  • DeclarationType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Name forms
- short: "-x" where x is one ASCII letter or digit.
- long:  "--name" where name starts with an ASCII letter or digit and holds no whitespace.
- at most one of each, at least one in total.

Semantic checks (empty descriptions, arity, return kinds, duplicate names) are
left to the registry builder, so a whole command type is validated in one place.

Quick example:
    >>> from optbind import command, option
    >>> @command("greet")
    ... class Greet:
    ...     @option("-n", "--name", descr="who to greet", metavar="NAME")
    ...     def name(self, value: str): ...
    ...     def run(self): ...
"""
import functools
import operator
import re

from .faults import FaultCode, ValidationError
from .utils import *


class DeclarationType(type):
    """
    Metaclass that turns declarations into introspectable, read-only records.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printers.
    - Expose selected fields as read-only properties using view() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": hyphenate(name),
            } | {
                name: view(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(names=('-v', '--verbose'), descr='be verbose', ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _split_names(names, /):
    """
    Internal: sort shell-style names into their short and long parts.

    Returns
    - (short, long): the bare names without dashes, "" when absent.

    Raises
    - TypeError: when a name is not a string.
    - ValidationError: on a malformed name, a second short or long name, or no name at all.
    """
    short = long = ""

    for name in names:
        if not isinstance(name, str):
            raise TypeError("option names must be strings")
        if re.fullmatch(r"-[A-Za-z0-9]", name):
            if short:
                raise ValidationError(
                    "option cannot have two short names (%r and %r)" % ("-" + short, name),
                    title="invalid option declaration",
                    code=FaultCode.INVALID_DECLARATION,
                    hint="keep a single short name like -x",
                    input=name,
                )
            short = name[1:]
        elif re.fullmatch(r"--[A-Za-z0-9]\S*", name):
            if long:
                raise ValidationError(
                    "option cannot have two long names (%r and %r)" % ("--" + long, name),
                    title="invalid option declaration",
                    code=FaultCode.INVALID_DECLARATION,
                    hint="keep a single long name like --name",
                    input=name,
                )
            long = name[2:]
        else:
            raise ValidationError(
                "bad option name %r" % name,
                title="invalid option declaration",
                code=FaultCode.INVALID_DECLARATION,
                hint="use -x (one letter or digit) or --name (starting with a letter or digit)",
                input=name,
            )

    if not short and not long:
        raise ValidationError(
            "option must have a short or a long name",
            title="invalid option declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="add a name such as -x or --name",
        )

    return short, long


class Option(metaclass=DeclarationType):
    """
    Declaration of one option, bound to the method it decorates.

    Fields
    - short: str, the short name without its dash ("" when absent).
    - long: str, the long name without its dashes ("" when absent).
    - descr: str, the description shown in usage (checked non-empty by the registry).
    - metavar: str | None, the display name of the method's parameter in usage.
    - multiple: bool, whether the option may appear more than once.
    - exit: bool, whether firing the option ends processing with an exit code.
    - callback: the decorated function.

    Identity
    - Two options are equal when their (short, long) pairs are equal.

    Descriptor
    - On an instance, the declaration resolves to the bound method, so command
      code keeps calling self.<name>(...) as usual; on the class it resolves to
      the declaration itself.
    """

    __introspectable__ = (
        "names",
        "short",
        "long",
        "descr",
        "metavar",
        "multiple",
        "exit",
    )

    def __init__(self, *names, descr=Unset, metavar=Unset, multiple=False, exit=False):
        if not isinstance(descr, str | Unset):
            raise TypeError("option 'descr' must be a string")
        if not isinstance(metavar, str | Unset):
            raise TypeError("option 'metavar' must be a string")

        self._short, self._long = _split_names(names)
        self._names = tuple(filter(None, (self._short and "-" + self._short, self._long and "--" + self._long)))
        self._descr = coalesce(descr, "").strip()
        # Blank metavars count as missing.
        self._metavar = coalesce(metavar, "").strip() or None
        self._multiple = bool(multiple)
        self._exit = bool(exit)
        self._callback = Unset

    @property
    def callback(self):
        return self._callback

    @property
    def display(self):
        """
        The name used in messages: the long form when there is one.
        """
        return "--" + self._long if self._long else "-" + self._short

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return self._callback.__get__(instance, owner)

    def __call__(self, *args, **kwargs):
        return self._callback(*args, **kwargs)

    def __eq__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return (self._short, self._long) == (other._short, other._long)

    def __hash__(self):
        return hash((self._short, self._long))


class Command(metaclass=DeclarationType):
    """
    Declaration of a command type.

    Fields
    - name: the display name of the command (used by usage rendering).
    """

    __introspectable__ = (
        "name",
    )

    def __init__(self, name):
        if not isinstance(name, str):
            raise TypeError("command 'name' must be a string")
        self._name = name.strip()


def option(*names, **kwargs):
    """
    Decorator/factory for declaring an option handler on a command class.

    Usage
        @option("-v", "--verbose", descr="print more", multiple=True)
        def verbose(self): ...

        @option("-c", "--count", descr="repeat count", metavar="N")
        def count(self, value: int): ...

        @option("-h", "--help", descr="show usage and exit", exit=True)
        def help(self) -> int: ...

    Behavior
    - Validates the names immediately (see _split_names).
    - Binds the decorated function as the option's callback and returns the
      Option declaration, which stays usable as a regular method.

    Parameters
    - *names: "-x" and/or "--name".
    - descr: str, description (required by the registry builder).
    - metavar: str, parameter display name for usage output.
    - multiple: bool, allow repeated occurrences.
    - exit: bool, end processing with the method's return value as exit code.
    """
    option = Option(*names, **kwargs)

    @rename("option")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@option() must be applied to a callable")
        if option._callback is not Unset:  # NOQA: E-501
            raise TypeError("@option() must be applied only once")
        option._callback = callback
        functools.update_wrapper(option, callback, updated=())
        return option

    return wrapper


def command(source=Unset, /, name=Unset):
    """
    Mark a class as a command, with an explicit or derived display name.

    Invocation modes
    - @command            → name derived from the class name ("MyTool" → "my-tool")
    - @command("name")    → explicit name
    - @command(name="x")  → explicit name

    The declaration is stored on the class itself (as __command__) and is not
    inherited by subclasses: each command class is decorated on its own.
    """
    if isinstance(source, str):
        source, name = Unset, source

    @rename("command")
    def wrapper(cls, /):
        if not isinstance(cls, type):
            raise TypeError("@command() must be applied to a class")
        cls.__command__ = Command(coalesce(name, hyphenate(cls.__name__)))
        return cls

    return wrapper(source) if source is not Unset else wrapper


def declaration(cls, /):
    """
    Return the Command declaration carried by `cls` itself, or None.
    """
    if not isinstance(cls, type):
        return None
    declared = vars(cls).get("__command__")
    return declared if isinstance(declared, Command) else None


__all__ = (
    # Declarations
    "Option",
    "Command",

    # Decorators
    "option",
    "command",

    # Introspection
    "declaration",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del DeclarationType
