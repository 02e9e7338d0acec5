"""
Optionist parser: option registry and argument-vector scanner.

What this module provides
- Parser: holds caller-owned options in registration order, resolves aliases,
  and scans an argument vector once, left to right, feeding each option the
  raw text of its value.
- parse(argv, *options, **flags): one-shot helper building a Parser and running it.

Scanning grammar (POSIX-style; the program name at argv[0] is skipped)
- "-"            lone hyphen, skipped with a MalformedTokenWarning.
- "--"           terminator: the scan stops, remaining tokens are left alone.
- "--name"       long option; its value (if it takes one) is the next token.
- "--name=text"  long option with an inline value (split at the first '=').
- "-x"           short option; its value (if it takes one) is the next token.
- "-xtext"       attached value when x requires one ("-n10" means n = 10),
                 otherwise a cluster of no-value options ("-abc" means -a -b -c).
- anything else  stray token, skipped with a StrayTokenWarning; positional
                 arguments are not collected.

Value policy
- REQUIRED and OPTIONAL options consume the next token whatever its shape
  ("-n -3" is n = -3). At the end of the vector a REQUIRED option fails with
  MissingValueError and an OPTIONAL one is parsed as present without a value.
- NONE options never consume a token. An inline value ("--verbose=yes") is
  ignored with an IgnoredInlineValueWarning, or rejected with FlagAssignmentError
  when the parser is strict.

Fail-fast
- UnknownOptionError, MissingValueError, ParseError, and ValidationError abort
  the scan; options parsed before the failing token keep their new values.

Runtime flags (per parser, no global state)
- shell: render faults to stderr with rich (errors then exit with status 1)
  instead of raising/warning.
- fancy: wrap rendered faults in a panel.
- colorful: style rendered faults (palette overridable via __main__.__styles__).
- strict: reject inline values given to no-value options.

Quick start
    from optionist import Parser, IntOption, BoolOption, Arity

    parser = Parser()
    count = parser.register(IntOption("n", "count", arity=Arity.REQUIRED))
    verbose = parser.register(BoolOption("v", "verbose"))
    parser.parse(["prog", "-v", "--count=3"])
    assert count.value == 3 and verbose.value is True
"""
import difflib
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .faults import *
from .options import Arity, Option
from .utils import *


def _spell(alias, /):
    """
    command-line spelling of an alias: "-x" for single characters, "--alias" otherwise.
    """
    return "-" + alias if len(alias) == 1 else "--" + alias


class Parser:
    """
    Option registry and single-pass argument scanner.

    Responsibilities
    - Registry: keeps references to caller-owned options in registration order.
      Alias uniqueness across options is not enforced; lookup returns the first
      registered option declaring the alias.
    - Dispatch: classifies each token of the argument vector and calls
      option.parse(text) with the right raw text (see the module docstring).
    - Faults: surfaces every error/warning through trigger() with position-first
      messages and the parser's runtime flags.

    Lifecycle
    - Options are configured before registration; a parse() call runs one scan.
      Calling parse() again re-scans and may re-mutate options already set.
    """

    __displayable__ = ("options", "shell", "fancy", "colorful", "strict")

    options = mirror("options")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    strict = mirror("strict")

    def __init__(self, *options, shell=False, fancy=False, colorful=False, strict=False):
        """
        Create a parser, optionally registering options right away.

        Parameters
        - *options: Option instances registered in the given order.
        - shell, fancy, colorful, strict: runtime flags (see the module docstring).
        """
        self._options = []
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._strict = bool(strict)
        self._prog = Unset
        self._tokens = deque()
        self._index = 0
        for option in options:
            self.register(option)

    def register(self, option, /):
        """
        Register an option and return it (so declarations can be written inline).

        The parser keeps a reference only: the option stays owned by the caller.
        Registering the same object again is a no-op.
        """
        if not isinstance(option, Option):
            raise ConfigurationError(
                "register() argument must be an option, got %r" % (option,),
                title="not an option",
                code=FaultCode.NOT_AN_OPTION,
                hint="build it with IntOption/FloatOption/StrOption/BoolOption or option()",
                docs=getdoc(FaultCode.NOT_AN_OPTION),
            )
        if all(option is not registered for registered in self._options):
            self._options.append(option)
        return option

    def lookup(self, alias, /):
        """
        Return the first registered option declaring `alias` (exact, case-sensitive).

        Raises
        - TypeError when alias is not a string.
        - UnknownOptionError when no option declares it; the hint suggests close aliases.
        """
        if not isinstance(alias, str):
            raise TypeError("lookup() argument must be a string")
        for option in self._options:
            if alias in option.aliases:
                return option

        spellings = list(dict.fromkeys(_spell(known) for option in self._options for known in option.aliases))
        suggestions = difflib.get_close_matches(_spell(alias), spellings, 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "known options are %s" % (", ".join(spellings) or "none")
        raise UnknownOptionError(
            "unknown option %r" % alias,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=alias,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        )

    def __getitem__(self, alias, /):
        """
        Value of the option declaring `alias` (see lookup()).
        """
        return self.lookup(alias).value

    def __contains__(self, alias, /):
        return any(alias in option.aliases for option in self._options)

    def __rich_repr__(self):
        for name in type(self).__displayable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def trigger(self, fault, /, **options):
        """
        Surface a fault with the parser's runtime flags and the program name merged in.
        """
        trigger(
            fault,
            **options,
            prog=self._prog,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
        )

    def parse(self, argv=Unset, /):
        """
        Scan an argument vector and populate the registered options.

        Parameters
        - argv:
          • Unset: read sys.argv.
          • str: shell-like command line, split with shlex.split.
          • Iterable[str]: the vector itself.
          In every form element zero is the program name: it is skipped and its
          basename labels rendered faults.

        Raises
        - TypeError when argv is not one of the forms above.
        - UnknownOptionError, MissingValueError, ParseError, ValidationError
          (and FlagAssignmentError on strict parsers) on the first bad token.
        """
        if argv is Unset:
            tokens = list(sys.argv)
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            tokens = list(argv)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        self._prog = os.path.basename(tokens[0]) if tokens else Unset
        self._tokens = deque(tokens[1:])
        self._index = 0

        while self._tokens:
            token = self._next()

            if token == "-":
                self.trigger(MalformedTokenWarning(
                    "lone hyphen at %s position was skipped" % ordinal(self._index),
                    title="malformed token",
                    code=FaultCode.MALFORMED_TOKEN,
                    input=token,
                    index=self._index,
                    hint="write '-x' for a short option or '--name' for a long one",
                    docs=getdoc(FaultCode.MALFORMED_TOKEN),
                ))
            elif token == "--":
                break
            elif token.startswith("--"):
                self._parse_long(token[2:])
            elif token.startswith("-") and len(token) > 2:
                self._parse_cluster(token[1:])
            elif token.startswith("-"):
                self._parse_short(token[1:])
            else:
                self.trigger(StrayTokenWarning(
                    "stray token %r at %s position was skipped" % (token, ordinal(self._index)),
                    title="stray token",
                    code=FaultCode.STRAY_TOKEN,
                    input=token,
                    index=self._index,
                    hint="positional arguments are not collected; "
                         "attach values to their option (e.g. --name=%s)" % token,
                    docs=getdoc(FaultCode.STRAY_TOKEN),
                ))

    def _next(self):
        self._index += 1
        return self._tokens.popleft()

    def _resolve(self, alias, input, index):
        """
        lookup() with position-first copy for the scan.
        """
        try:
            return self.lookup(alias)
        except UnknownOptionError as fault:
            self.trigger(
                fault,
                message="unknown option %r at %s position" % (input, ordinal(index)),
                input=input,
                index=index,
            )

    def _take(self, option, input, index):
        """
        raw text of the value following a spaced option ('' when it stands alone).
        """
        if option.arity is Arity.NONE:
            return ""
        if self._tokens:
            return self._next()
        if option.arity is Arity.REQUIRED:
            self.trigger(MissingValueError(
                "option %r at %s position requires a value" % (input, ordinal(index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                input=input,
                index=index,
                option=option,
                hint="provide a value (e.g., %s <%s> or --%s=<%s>)" % (
                    input, type(option).__type__.__name__, option.longest, type(option).__type__.__name__
                ),
                docs=getdoc(FaultCode.MISSING_VALUE),
            ))
        return ""

    def _feed(self, option, text, input, index):
        """
        option.parse(text) with the token position added to its faults.
        """
        try:
            option.parse(text)
        except OptionException as fault:
            self.trigger(
                fault,
                message="%s at %s position" % (fault.message, ordinal(index)),
                input=input,
                index=index,
            )

    def _parse_long(self, body):
        index = self._index
        name, separator, inline = body.partition("=")
        option = self._resolve(name, input := "--" + name, index)

        if option.arity is Arity.NONE and separator:
            if self._strict:
                self.trigger(FlagAssignmentError(
                    "option %r at %s position cannot have an inline value" % (input, ordinal(index)),
                    title="option takes no value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    input=input,
                    index=index,
                    option=option,
                    hint="remove everything from '=' (for example: %s)" % input,
                    docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
                ))
            self.trigger(IgnoredInlineValueWarning(
                "option %r at %s position takes no value; inline value %r was ignored" % (
                    input, ordinal(index), inline
                ),
                title="ignored inline value",
                code=FaultCode.IGNORED_INLINE_VALUE,
                input=input,
                index=index,
                option=option,
                hint="remove everything from '=' (for example: %s)" % input,
                docs=getdoc(FaultCode.IGNORED_INLINE_VALUE),
            ))
            self._feed(option, "", input, index)
        elif separator:
            self._feed(option, inline, input, index)
        else:
            self._feed(option, self._take(option, input, index), input, index)

    def _parse_cluster(self, body):
        index = self._index
        option = self._resolve(body[0], "-" + body[0], index)

        if option.arity is Arity.REQUIRED:
            # attached value: -n10
            self._feed(option, body[1:], "-" + body[0], index)
            return

        # no-value cluster: -abc → -a -b -c
        for alias in body:
            self._feed(self._resolve(alias, "-" + alias, index), "", "-" + alias, index)

    def _parse_short(self, alias):
        index = self._index
        option = self._resolve(alias, input := "-" + alias, index)
        self._feed(option, self._take(option, input, index), input, index)


def parse(argv=Unset, /, *options, **flags):
    """
    Convenience runner: build a Parser over `options`, scan `argv`, return the parser.

    Parameters
    - argv: Unset | str | Iterable[str] (see Parser.parse).
    - *options: Option instances, registered in order.
    - **flags: Parser runtime flags (shell, fancy, colorful, strict).
    """
    parser = Parser(*options, **flags)
    parser.parse(argv)
    return parser


__all__ = (
    "Parser",
    "parse",
)
