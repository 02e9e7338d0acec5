"""
Optionist faults (errors and warnings) and rendering.

Scope
- FaultCode: one stable number per problem the library reports, so host
  programs can match on codes rather than message text.
- OptionException / OptionWarning: a lowercase message plus a read-only
  mapping of context (title, code, hint, token position...) and a rich rendering.
- trigger(): the single place where a fault becomes a raise, a warning, or
  stderr output.
- getdoc(): host-supplied documentation for a code.

Taxonomy
- ConfigurationError: declaring an option wrongly (aliases, default, binding, validator).
- UnknownOptionError: a token names an alias no registered option declares.
- MissingValueError: a value-requiring option is the last token.
- ParseError: raw text cannot be converted exhaustively to the declared type.
  • FlagAssignmentError: an inline value given to a no-value option (strict parsers only).
- ValidationError: the converted value was rejected by the option's validator.

Integration
- The parser surfaces every fault through trigger(fault, **context).
- In library mode exceptions are raised and warnings go through `warnings.warn`;
  in shell mode both are rendered to stderr via rich (errors then exit with status 1).
"""
import copy
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    fault codes. numbers are stable across releases; the first three digits
    give the family:

    - configuration (101xx)
      • INVALID_ALIASES, INVALID_ARITY, INVALID_DESCRIPTION, ILLEGAL_DEFAULT,
        INVALID_BINDING, INVALID_VALIDATOR, UNSUPPORTED_TYPE, NOT_AN_OPTION
    - scanning (111xx)
      • UNKNOWN_OPTION, FLAG_ASSIGNMENT, MISSING_VALUE
    - values (112xx)
      • UNPARSABLE_VALUE, REJECTED_VALUE
    - warnings (121xx)
      • MALFORMED_TOKEN, STRAY_TOKEN, IGNORED_INLINE_VALUE
    """
    # configuration
    INVALID_ALIASES             = 10101
    INVALID_ARITY               = 10102
    INVALID_DESCRIPTION         = 10103
    ILLEGAL_DEFAULT             = 10104
    INVALID_BINDING             = 10105
    INVALID_VALIDATOR           = 10106
    UNSUPPORTED_TYPE            = 10107
    NOT_AN_OPTION               = 10108

    # scanning
    UNKNOWN_OPTION              = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_VALUE               = 11117

    # values
    UNPARSABLE_VALUE            = 11201
    REJECTED_VALUE              = 11202

    # warnings
    MALFORMED_TOKEN             = 12111
    STRAY_TOKEN                 = 12112
    IGNORED_INLINE_VALUE        = 12113

    def normalize(self):
        """
        label shown in rendered faults: __main__.__codes__[self] when the host
        defines it, the number otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, kind):
    """
    build the rich renderable shared by errors and warnings.

    layout
    - header: "[ prog · code | Title ]"
    - body: the message, then an arrow-prefixed hint.
    - fancy: header becomes the title of a rounded panel around body.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), style if colorful else "")

    prog = text(getattr(main, "__prog__", options.get("prog") or "optionist"), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " · ",
        text(options["code"].normalize() if "code" in options else kind, styler("code")),
        " | ",
        text(str(options.get("title", kind)).title(), styler(kind + "-title")),
        " ]"
    )
    message = text(fault.message, styler(kind + "-message"))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options.get("hint"), styler("hint")))

    if fancy:
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class OptionException(Exception):
    """
    base error for every fault raised by the library.

    carries
    - message: one lowercase sentence, position-first when a token is involved.
    - options: read-only mapping with rendering/context keys
      (title, code, hint, docs, input, index, option, prog, shell, fancy, colorful).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold white",
            "code": "bold cyan",
            "error-title": "bold red",
            "error-message": "default",
            "hint-arrow": "dim green",
            "hint": "italic green",
        }, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, message=Unset, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(coalesce(message, self.message), **{**self.options, **overrides})
        # the conversion error behind a ParseError survives re-triggering
        fault.__cause__ = self.__cause__
        return fault


class ConfigurationError(OptionException, ValueError): ...
class UnknownOptionError(OptionException, LookupError): ...
class MissingValueError(OptionException): ...
class ParseError(OptionException, ValueError): ...
class FlagAssignmentError(ParseError): ...
class ValidationError(OptionException, ValueError): ...


class OptionWarning(Warning):
    """
    base warning for recoverable scanning conditions (the scan goes on).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold white",
            "code": "bold yellow",
            "warning-title": "bold magenta",
            "warning-message": "default",
            "hint-arrow": "dim green",
            "hint": "italic green",
        }, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            # attribute the warning to the first frame outside this package
            return warnings.warn(self, skip_file_prefixes=(os.path.dirname(__file__),))
        console.print(self)

    def __replace__(self, *unused, message=Unset, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(coalesce(message, self.message), **{**self.options, **overrides})


class MalformedTokenWarning(OptionWarning): ...
class StrayTokenWarning(OptionWarning): ...
class IgnoredInlineValueWarning(OptionWarning): ...


def trigger(fault, /, **options):
    """
    merge `options` into a copy of `fault` (copy.replace) and surface the copy.

    any object implementing __trigger__ and __replace__ is accepted. with
    shell=True errors print and exit(1), warnings print; otherwise errors are
    raised and warnings go through warnings.warn.
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__trigger__", "__replace__")):
        raise TypeError("trigger() argument must be a fault (__trigger__ and __replace__ required)")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    __main__.__docs__[code] if the host defines it, else None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "OptionException",
    "ConfigurationError",
    "UnknownOptionError",
    "MissingValueError",
    "ParseError",
    "FlagAssignmentError",
    "ValidationError",
    "OptionWarning",
    "MalformedTokenWarning",
    "StrayTokenWarning",
    "IgnoredInlineValueWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
