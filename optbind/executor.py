"""
Optbind executor: scan an argument vector, then replay option handlers on a fresh command.

What this module provides
- execute(command_type, args): the parse-and-run cycle for one @command class.
- Execution: the (command, code) result of execute().
- invoke(command_type, prompt): a thin shell wrapper printing faults and usage to stderr.

Cycle
1. Build the Registry (declaration faults surface here, before any token is read).
2. Scan the tokens:
   • "--name..."  → long option reference (everything after the two dashes)
   • "-x"         → short option reference (a single letter or digit)
   • anything else is a MalformedArgumentError.
   An option taking a parameter consumes the next token verbatim, whatever it looks
   like, and coerces it to the parameter type (see optbind.converters.coerce).
   Calls are queued per option; a non-multiple option cannot be queued twice.
3. Instantiate the command with no arguments.
4. Replay the queue in declaration order (argument order within each option). An
   exit option returns its exit code right away; nothing after it runs.
5. Without an exit, call the command's run() and return code 0.

A scan fault aborts before anything is invoked. An invocation fault aborts the
replay; side effects of handlers that already ran stand.
"""
import re
import shlex
import sys
from collections import defaultdict, namedtuple
from collections.abc import Iterable

from . import converters
from .faults import *
from .registry import build_registry
from .usage import print_usage
from .utils import *


class Execution(namedtuple("Execution", ("command", "code"))):
    """
    Result of execute(): the command instance and the exit code.
    """
    __slots__ = ()


def _tokenize(args):
    """
    Normalize `args` into a list of tokens.

    - Unset: read tokens from sys.argv[1:].
    - str: shell-like string, split via shlex.split.
    - Iterable[str]: used as-is (tokens are not trimmed; values stay verbatim).
    """
    if args is Unset:
        return sys.argv[1:]
    if isinstance(args, str):
        try:
            return shlex.split(args)
        except ValueError as exception:
            raise MalformedArgumentError(
                "bad argument string %r: %s" % (args, exception),
                title="malformed argument",
                code=FaultCode.MALFORMED_ARGUMENT,
                hint="close every quote of the command line",
                token=args,
                exception=exception,
                docs=getdoc(FaultCode.MALFORMED_ARGUMENT),
            ) from exception
    if isinstance(args, Iterable):
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("execute() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("execute() argument must be a string or an iterable of strings")


def _resolve_token(registry, token):
    """
    Classify `token` and return the Binding it refers to.

    Raises
    - MalformedArgumentError: the token is neither "--name..." nor "-x".
    - UnknownOptionError: no option has that name.
    """
    if re.fullmatch(r"--[A-Za-z0-9].*", token):
        binding = registry.long(token[2:])
    elif re.fullmatch(r"-[A-Za-z0-9]", token):
        binding = registry.short(token[1:])
    else:
        raise MalformedArgumentError(
            "bad argument %r" % token,
            title="malformed argument",
            code=FaultCode.MALFORMED_ARGUMENT,
            hint="options are written -x or --name; values follow the option they belong to",
            token=token,
            docs=getdoc(FaultCode.MALFORMED_ARGUMENT),
        )

    if binding is None:
        raise UnknownOptionError(
            "unknown option %r" % token,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint="check the usage for the available options",
            token=token,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        )

    return binding


def _coerce(binding, token, literal):
    """
    Convert the literal value of `token` to the binding's parameter type.

    Raises
    - InvalidValueError: the literal does not fit the type.
    - UnsupportedTypeError: the type has no built-in coercion nor converter.
    """
    typename = getattr(binding.type, "__qualname__", repr(binding.type))
    if not converters.supports(binding.type):
        raise UnsupportedTypeError(
            "unsupported argument type %s for option %r" % (typename, token),
            title="unsupported argument type",
            code=FaultCode.UNSUPPORTED_TYPE,
            hint="use str, int, Long, bool, or register a converter for %s" % typename,
            token=token,
            type=binding.type,
            docs=getdoc(FaultCode.UNSUPPORTED_TYPE),
        )
    try:
        return converters.coerce(literal, binding.type)
    except Exception as exception:
        raise InvalidValueError(
            "invalid value %r for option %r (expected %s)" % (literal, token, typename),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint="use a valid %s (for example: %s <%s>)" % (typename, token, typename),
            token=token,
            value=literal,
            type=binding.type,
            exception=exception,
            docs=getdoc(FaultCode.INVALID_VALUE),
        ) from exception


def _scan(registry, tokens):
    """
    Consume every token and return the invocation queue (Option → list of argument tuples).
    """
    queue = defaultdict(list)
    index = 0

    while index < len(tokens):
        token = tokens[index]
        binding = _resolve_token(registry, token)

        if binding.declaration in queue and not binding.declaration.multiple:
            raise DuplicateOptionError(
                "duplicate option %r" % token,
                title="duplicate option",
                code=FaultCode.DUPLICATE_OPTION,
                hint="keep a single %s; it can be specified only once" % binding.declaration.display,
                token=token,
                docs=getdoc(FaultCode.DUPLICATE_OPTION),
            )

        if binding.arity:
            if index + 1 >= len(tokens):
                raise MissingArgumentError(
                    "missing an argument for option %r" % token,
                    title="missing argument",
                    code=FaultCode.MISSING_ARGUMENT,
                    hint="provide a value (for example: %s <%s>)" % (
                        token, binding.declaration.metavar or "value"
                    ),
                    token=token,
                    docs=getdoc(FaultCode.MISSING_ARGUMENT),
                )
            index += 1
            arguments = (_coerce(binding, token, tokens[index]),)
        else:
            arguments = ()

        queue[binding.declaration].append(arguments)
        index += 1

    return queue


def _exit_code(binding, result):
    """
    Interpret the result of an exit option as a process exit code.
    """
    if result is None:
        return 0
    if isinstance(result, int) and not isinstance(result, bool):
        return int(result)
    raise UnsupportedOperationError(
        "option %r returned %s, which is not an exit code" % (
            binding.declaration.display, type(result).__qualname__
        ),
        title="unsupported exit code",
        code=FaultCode.UNSUPPORTED_OPERATION,
        hint="return nothing or an int from exit options",
        input=binding.declaration.display,
        result=result,
        docs=getdoc(FaultCode.UNSUPPORTED_OPERATION),
    )


def execute(command_type, args=Unset, /):
    """
    Parse `args` against the options of `command_type` and run the command.

    Parameters
    - command_type: a class decorated with @command, constructible without arguments,
      providing a run() method.
    - args:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; will be split via shlex.split.
      • Iterable[str]: pre-tokenized sequence, used verbatim.

    Returns
    - Execution(command, code): the instance and the exit code (0 unless an exit
      option fired).

    Raises
    - ValidationError: bad declarations, or the command lacks a run() method.
    - ArgumentError subclasses: the argument vector does not fit the options.
    - InstantiationError: constructing the command failed.
    - InvocationError: an option handler raised.
    - UnsupportedOperationError: an exit option returned something other than None or int.
    """
    registry = build_registry(command_type)

    if not callable(getattr(command_type, "run", None)):
        raise ValidationError(
            "%s is missing a run() method" % command_type.__qualname__,
            title="invalid command declaration",
            code=FaultCode.INVALID_DECLARATION,
            hint="define run(self), called when no exit option fires",
        )

    queue = _scan(registry, _tokenize(args))

    try:
        instance = command_type()
    except Exception as exception:
        raise InstantiationError(
            "cannot instantiate command %r: %s" % (registry.command.name, exception),
            title="instantiation failure",
            code=FaultCode.INSTANTIATION_FAILURE,
            hint="make sure %s() can be called without arguments" % command_type.__qualname__,
            exception=exception,
            docs=getdoc(FaultCode.INSTANTIATION_FAILURE),
        ) from exception

    for option, binding in registry.items():
        for arguments in queue.get(option, ()):
            try:
                result = binding.invoke(instance, arguments)
            except Exception as exception:
                raise InvocationError(
                    "option %r failed: %s" % (option.display, exception),
                    title="invocation failure",
                    code=FaultCode.INVOCATION_FAILURE,
                    hint="see the chained exception for details",
                    input=option.display,
                    exception=exception,
                    docs=getdoc(FaultCode.INVOCATION_FAILURE),
                ) from exception

            if option.exit:
                return Execution(instance, _exit_code(binding, result))

    instance.run()

    return Execution(instance, 0)


def invoke(command_type, prompt=Unset, /, *, colorful=True, fancy=False):
    """
    Shell runner: execute a command and report faults on stderr.

    Behavior
    - Returns the exit code of execute() on success, for sys.exit(invoke(MyTool)).
    - On an argument fault, prints the usage then the fault to stderr and exits with status 1.
      The usage is left out when it cannot be rendered (an option lacks its metavar).
    - On any other optbind fault, prints it to stderr and exits with status 1.
    """
    try:
        return execute(command_type, prompt).code
    except ArgumentError as fault:
        options = {"prog": build_registry(command_type).command.name, "colorful": colorful, "fancy": fancy}
        try:
            print_usage(command_type, colorful=colorful)
        except MissingParameterNameError:
            pass
        trigger(fault, shell=True, **options)
    except CommandException as fault:
        command = getattr(command_type, "__command__", None)
        options = {"prog": getattr(command, "name", "optbind"), "colorful": colorful, "fancy": fancy}
        trigger(fault, shell=True, **options)


__all__ = (
    "Execution",
    "execute",
    "invoke",
)
