"""
Optbind usage rendering.

Layout (column widths are part of the output contract)

    usage: <name> [options]

     -x --long NAME [+]          description
        --other                  description

    [+] marked option can be specified multiple times

Rules
- the short flag (" -x") is right-padded to 3 columns, then " --long" follows;
- an option taking a value appends " " + its metavar, and " [+]" whenever any
  option of the command is multiple (not only this one);
- descriptions start at column 30 at the earliest;
- the footnote only appears when some option is multiple;
- a command without options renders as the bare "usage: <name>" line.
"""
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .faults import FaultCode, MissingParameterNameError, getdoc
from .registry import build_registry

FLAGS_WIDTH = 3
DESCRIPTION_COLUMN = 30
MULTIPLE_MARKER = "[+]"
FOOTNOTE = "%s marked option can be specified multiple times" % MULTIPLE_MARKER


def _render_line(registry, option, binding):
    line = ""
    if option.short:
        line += " -" + option.short
    line = line.ljust(FLAGS_WIDTH)
    if option.long:
        line += " --" + option.long

    if binding.arity:
        if not option.metavar:
            raise MissingParameterNameError(
                "option %r takes a value but declares no parameter name" % option.display,
                title="missing parameter name",
                code=FaultCode.MISSING_PARAMETER_NAME,
                hint="add metavar=... to @option(%s)" % ", ".join(map(repr, option.names)),
                input=option.display,
                docs=getdoc(FaultCode.MISSING_PARAMETER_NAME),
            )
        line += " " + option.metavar
        if registry.multiple:
            line += " " + MULTIPLE_MARKER

    return line.ljust(DESCRIPTION_COLUMN) + option.descr


def render_usage(command_type, /):
    """
    Render the usage text of `command_type`.

    Raises
    - ValidationError: bad command or option declarations.
    - MissingParameterNameError: an option taking a value has no metavar.
    """
    registry = build_registry(command_type)
    usage = "usage: " + registry.command.name

    if not registry:
        return usage

    usage += " [options]\n"
    for option, binding in registry.items():
        usage += "\n" + _render_line(registry, option, binding)

    if registry.multiple:
        usage += "\n\n" + FOOTNOTE

    return usage


def print_usage(command_type, /, *, colorful=False):
    """
    Write the usage text of `command_type` to stderr.

    Palette keys
    - usage-label, program-name, marker

    Customization
    - Define a mapping named __styles__ in __main__ to override any palette entry.
    - When colorful is False, the text is printed unstyled.
    """
    console = Console(stderr=True, highlight=False)
    usage = Text(render_usage(command_type))

    if colorful:
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "marker": "bold #FFD600",  # AMBER for the multiplicity marker
        } | getattr(__import__("__main__"), "__styles__", {}))

        usage.stylize(styles["usage-label"], 0, len("usage:"))
        name = build_registry(command_type).command.name
        usage.stylize(styles["program-name"], len("usage: "), len("usage: ") + len(name))
        usage.highlight_words([MULTIPLE_MARKER], styles["marker"])

    console.print(usage, soft_wrap=True)


__all__ = (
    "render_usage",
    "print_usage",
)
