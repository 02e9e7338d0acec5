r"""
Optionist option descriptors.

Overview
- Arity: whether an option takes no value, an optional value, or a required value.
- Option[_T]: abstract, type-erased descriptor shared by every value type. The parser
  only talks to this interface (aliases, arity, parse(), is_set).
- Concrete variants, one per value type:
  • IntOption: decimal integers ("10", "-3", "+7").
  • FloatOption: finite decimal reals ("0.5", ".5", "1e-3").
  • StrOption: raw text, unchanged.
  • BoolOption: presence flag; also accepts true/false, yes/no, on/off, 1/0 literals.
- option(type, *aliases, ...): builder picking the variant registered for a Python type.

Fluent configuration (each returns the option itself)
- default(value): initial value, only for Arity.OPTIONAL options.
- bind(setter) / bind(target, key): write-through of every successfully parsed value.
- check(predicate): validator run once per converted raw value.

Validation highlights
- Aliases are given without hyphens and must match r"[A-Za-z0-9-]+" with at least one
  letter or digit; duplicates are rejected. Lookup by the parser is exact and case-sensitive.
- Violations are reported at construction/configuration time as ConfigurationError.

Quick example:
    >>> from optionist.options import IntOption, Arity
    >>> threads = IntOption("t", "threads", arity=Arity.REQUIRED, descr="worker count")
    >>> threads.check(lambda count: count > 0).parse("4")
    >>> threads.value, threads.is_set
    (4, True)

Extending
- Subclass Option[_T] with a `type=` class keyword and implement _convert(text):
      class PathOption(Option[Path], type=Path):
          def _convert(self, text, /):
              return Path(text)
  option(Path, "o", "output") then builds a PathOption.
"""
import functools
import math
import operator
import re
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from enum import Enum

from rich.text import Text

from .faults import *
from .utils import *


class Arity(Enum):
    """
    how many values follow an option on the command line.

    - NONE: presence only (`-v`, `--verbose`); never consumes a token.
    - OPTIONAL: may take a value (`--level=3`, `--level 3`) or stand alone (`--level`).
    - REQUIRED: must take a value (`-n3`, `-n 3`, `--count=3`, `--count 3`).
    """
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


# Registry of builder variants keyed by Python type, filled by Option.__init_subclass__.
_variants = {}


def _sanitize_aliases(cls, aliases, /):
    """
    Internal: validate and normalize the alias collection of an option.

    Rules
    - at least one alias is required.
    - each alias is a string matching r"[A-Za-z0-9-]+" that holds at least one
      letter or digit (hyphen-only names would collide with "-" and "--").
    - duplicates are rejected; declaration order is preserved.

    Raises
    - ConfigurationError for any violation.
    """
    if not aliases:
        raise ConfigurationError(
            f"{cls.__typename__} must specify at least one alias",
            title="missing aliases",
            code=FaultCode.INVALID_ALIASES,
            hint="pass one or more names, e.g. %s(\"v\", \"verbose\")" % cls.__name__,
            docs=getdoc(FaultCode.INVALID_ALIASES),
        )

    sanitized = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise ConfigurationError(
                f"{cls.__typename__} aliases must be strings, got {alias!r}",
                title="invalid alias",
                code=FaultCode.INVALID_ALIASES,
                hint="spell every alias as a string",
                docs=getdoc(FaultCode.INVALID_ALIASES),
            )
        elif not re.fullmatch(r"[A-Za-z0-9-]*[A-Za-z0-9][A-Za-z0-9-]*", alias):
            raise ConfigurationError(
                f"{cls.__typename__} alias {alias!r} must only hold ascii letters, digits, and hyphens",
                title="invalid alias",
                code=FaultCode.INVALID_ALIASES,
                hint="drop leading hyphens and any other character (e.g. \"dry-run\", not \"--dry_run\")",
                docs=getdoc(FaultCode.INVALID_ALIASES),
            )
        elif alias in sanitized:
            raise ConfigurationError(
                f"{cls.__typename__} alias {alias!r} is declared more than once",
                title="duplicated alias",
                code=FaultCode.INVALID_ALIASES,
                hint="keep a single %r" % alias,
                docs=getdoc(FaultCode.INVALID_ALIASES),
            )
        sanitized.append(alias)
    return tuple(sanitized)


class Option[_T](ABC):
    """
    Abstract, type-erased option descriptor.

    The parser handles every option through this interface regardless of its
    value type: it reads `aliases` and `arity` to route tokens and calls
    `parse(text)` with the raw value text ("" when no value was given).

    State
    - value: current value (initial/default until a successful parse).
    - is_set: False until a successful parse, then True for good.
    - Both only change through parse() (and default() before parsing).

    Subclasses
    - implement _convert(text) for non-empty text, raising ValueError or
      OverflowError when the text is not an exhaustive literal of the type.
    - may override _presence() (value stored when the option appears without
      a value) and the class attributes __arity__ (default arity) and
      __initial__ (value before any default/parse).
    - declare the Python type they build with the `type=` class keyword to be
      reachable from the option() builder.
    """

    __typename__ = "option"
    __displayable__ = ("aliases", "arity", "descr", "value", "is_set")
    __arity__ = Arity.REQUIRED
    __initial__ = None
    __type__ = object
    __example__ = "<value>"

    aliases = mirror("aliases")
    arity = mirror("arity")
    descr = mirror("descr")
    value = mirror("value")
    is_set = mirror("is_set")

    def __init_subclass__(cls, /, type=Unset, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = re.sub(r"(?<!^)(?=[A-Z])", r"-", cls.__name__).lower()
        if type is not Unset:
            cls.__type__ = type
            _variants[type] = cls

    def __init__(self, *aliases, arity=Unset, descr=Unset):
        """
        Declare an option.

        Parameters
        - aliases: one or more str, without hyphens ("x", "percent", "dry-run").
          Single-character aliases are reachable as "-x", all of them as "--alias".
        - arity: Arity (defaults to the variant's __arity__).
        - descr: str | Text, an opaque description (not interpreted); blank text is rejected.

        Raises
        - ConfigurationError on invalid aliases, arity, or description.
        """
        cls = type(self)
        self._aliases = _sanitize_aliases(cls, aliases)

        if not isinstance(arity := coalesce(arity, cls.__arity__), Arity):
            raise ConfigurationError(
                f"{cls.__typename__} 'arity' must be an Arity member, got {arity!r}",
                title="invalid arity",
                code=FaultCode.INVALID_ARITY,
                hint="use Arity.NONE, Arity.OPTIONAL, or Arity.REQUIRED",
                docs=getdoc(FaultCode.INVALID_ARITY),
            )
        self._arity = arity

        if not isinstance(descr, str | Text | Unset):
            raise ConfigurationError(
                f"{cls.__typename__} 'descr' must be a string",
                title="invalid description",
                code=FaultCode.INVALID_DESCRIPTION,
                hint="describe the option with a short sentence",
                docs=getdoc(FaultCode.INVALID_DESCRIPTION),
            )
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ConfigurationError(
                f"{cls.__typename__} 'descr' cannot be empty",
                title="invalid description",
                code=FaultCode.INVALID_DESCRIPTION,
                hint="omit 'descr' instead of passing blank text",
                docs=getdoc(FaultCode.INVALID_DESCRIPTION),
            )
        self._descr = coalesce(descr)

        self._value = cls.__initial__
        self._is_set = False
        self._validator = Unset
        self._binding = Unset

    @property
    def longest(self):
        """
        The longest alias (first one on ties), used as display name in diagnostics.
        """
        return max(self._aliases, key=len)

    def default(self, value, /):
        """
        Set the value reported until a successful parse. Only OPTIONAL options accept one:
        a REQUIRED option always receives a value and a NONE option never does.
        """
        cls = type(self)
        if self._arity is not Arity.OPTIONAL:
            raise ConfigurationError(
                "%s %r %s can't have a default value" % (cls.__typename__, self.longest, {
                    Arity.REQUIRED: "requires a value so it",
                    Arity.NONE: "takes no value so it",
                }[self._arity]),
                title="illegal default",
                code=FaultCode.ILLEGAL_DEFAULT,
                hint="declare it with arity=Arity.OPTIONAL to give it a default",
                option=self,
                docs=getdoc(FaultCode.ILLEGAL_DEFAULT),
            )
        if not isinstance(value, cls.__type__) or (isinstance(value, bool) and cls.__type__ is not bool):
            raise ConfigurationError(
                "%s %r default must be %s, got %r" % (cls.__typename__, self.longest, cls.__type__.__name__, value),
                title="illegal default",
                code=FaultCode.ILLEGAL_DEFAULT,
                hint="pass a %s default" % cls.__type__.__name__,
                option=self,
                docs=getdoc(FaultCode.ILLEGAL_DEFAULT),
            )
        self._value = value
        return self

    def bind(self, target, key=Unset, /):
        """
        Record a write-through target for parsed values.

        Forms
        - bind(setter): setter(value) is called after every successful parse.
        - bind(mapping, key): mapping[key] = value.
        - bind(object, "name"): setattr(object, "name", value).

        The target is caller-owned and must stay alive while parsing; nothing is
        written until a parse succeeds.
        """
        cls = type(self)
        if key is Unset and callable(target):
            setter = target
        elif key is not Unset and isinstance(target, MutableMapping):
            setter = functools.partial(operator.setitem, target, key)
        elif isinstance(key, str) and key.isidentifier():
            setter = functools.partial(setattr, target, key)
        else:
            raise ConfigurationError(
                "%s %r can't be bound to %r" % (cls.__typename__, self.longest, target),
                title="invalid binding",
                code=FaultCode.INVALID_BINDING,
                hint="bind a callable, a (mapping, key) pair, or an (object, attribute) pair",
                option=self,
                docs=getdoc(FaultCode.INVALID_BINDING),
            )
        self._binding = setter
        return self

    def check(self, predicate, /):
        """
        Record a validator: predicate(value) must be truthy for a parsed value to be accepted.
        """
        if not callable(predicate):
            raise ConfigurationError(
                "%s %r validator must be callable" % (type(self).__typename__, self.longest),
                title="invalid validator",
                code=FaultCode.INVALID_VALIDATOR,
                hint="pass a function taking the value and returning a bool",
                option=self,
                docs=getdoc(FaultCode.INVALID_VALIDATOR),
            )
        self._validator = predicate
        return self

    def parse(self, text, /):
        """
        Convert raw text, validate it, then commit it.

        Behavior
        - non-empty text: _convert(text) then the validator (if any).
        - empty text on a REQUIRED option: ParseError.
        - empty text otherwise: the option is present without a value and takes
          _presence() (the validator is not run: there is no raw value to check).
        - on success: value is stored, is_set becomes True, the binding is written.

        Raises
        - ParseError when the text is not a literal of the declared type.
        - ValidationError when the validator rejects the converted value.
        State is untouched when an error is raised.
        """
        if not isinstance(text, str):
            raise TypeError("parse() argument must be a string")

        cls = type(self)
        if text:
            try:
                value = self._convert(text)
            except (ValueError, OverflowError) as exception:
                raise ParseError(
                    "value %r for option %r is not a valid %s" % (text, self.longest, cls.__type__.__name__),
                    title="unparsable value",
                    code=FaultCode.UNPARSABLE_VALUE,
                    hint="%s, e.g. %s" % (exception, cls.__example__),
                    option=self,
                    text=text,
                    docs=getdoc(FaultCode.UNPARSABLE_VALUE),
                ) from exception
            if self._validator is not Unset and not self._validator(value):
                raise ValidationError(
                    "value %r for option %r was rejected" % (text, self.longest),
                    title="rejected value",
                    code=FaultCode.REJECTED_VALUE,
                    hint="pick another value for %r" % self.longest,
                    option=self,
                    text=text,
                    docs=getdoc(FaultCode.REJECTED_VALUE),
                )
        elif self._arity is Arity.REQUIRED:
            raise ParseError(
                "option %r requires a value but got empty text" % self.longest,
                title="empty value",
                code=FaultCode.UNPARSABLE_VALUE,
                hint="pass a non-empty %s, e.g. %s" % (cls.__type__.__name__, cls.__example__),
                option=self,
                text=text,
                docs=getdoc(FaultCode.UNPARSABLE_VALUE),
            )
        else:
            value = self._presence()

        self._value = value
        self._is_set = True
        if self._binding is not Unset:
            self._binding(value)

    @abstractmethod
    def _convert(self, text, /):
        raise NotImplementedError

    def _presence(self):
        return self._value

    def __rich_repr__(self):
        for name in type(self).__displayable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"{type(self).__typename__}({
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        })"


class IntOption(Option[int], type=int):
    """
    Decimal integer option: an optional sign followed by digits, nothing else.
    """
    __example__ = "42"

    def _convert(self, text, /):
        if not re.fullmatch(r"[+-]?[0-9]+", text):
            raise ValueError("expected an optionally signed decimal integer")
        return int(text)


class FloatOption(Option[float], type=float):
    """
    Finite decimal real option ("0.5", "-.5", "1e-3"); "inf", "nan", and overflowing
    literals such as "1e999" are rejected.
    """
    __example__ = "0.5"

    def _convert(self, text, /):
        if not re.fullmatch(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", text):
            raise ValueError("expected a decimal number")
        if not math.isfinite(value := float(text)):
            raise OverflowError("out of range")
        return value

    def default(self, value, /):
        # ints are accepted and widened, as the conversion never yields them
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        return super().default(value)


class StrOption(Option[str], type=str):
    """
    Text option: the raw token is the value.
    """
    __example__ = "'text'"

    def _convert(self, text, /):
        return text


class BoolOption(Option[bool], type=bool):
    """
    Presence flag. With Arity.NONE (the default) appearing sets it to True; with
    OPTIONAL or REQUIRED arity the value may be spelled as a literal:
    true/false, yes/no, on/off, 1/0 (case-insensitive).
    """
    __arity__ = Arity.NONE
    __initial__ = False
    __example__ = "true"

    __literals__ = {
        "true": True, "yes": True, "on": True, "1": True,
        "false": False, "no": False, "off": False, "0": False,
    }

    def _convert(self, text, /):
        try:
            return type(self).__literals__[text.lower()]
        except KeyError:
            raise ValueError("expected one of %s" % "/".join(type(self).__literals__)) from None

    def _presence(self):
        return True


def option(type, /, *aliases, **kwargs):
    """
    Build the option variant registered for a Python type.

    Usage
    - option(int, "n", "count", arity=Arity.REQUIRED)  → IntOption
    - option(float, "r", "ratio", arity=Arity.OPTIONAL).default(0.5)  → FloatOption
    - option(bool, "v", "verbose")  → BoolOption

    Parameters
    - type: a Python type with a registered variant (int, float, str, bool, or any
      type declared by an Option subclass through the `type=` class keyword).
    - *aliases, **kwargs: forwarded to the variant's constructor.

    Raises
    - ConfigurationError when no variant is registered for the type.
    """
    try:
        variant = _variants[type]
    except (KeyError, TypeError):
        raise ConfigurationError(
            "no option variant is registered for %r" % (type,),
            title="unsupported type",
            code=FaultCode.UNSUPPORTED_TYPE,
            hint="use one of %s or subclass Option with a type= keyword" % ", ".join(
                getattr(key, "__name__", repr(key)) for key in _variants
            ),
            docs=getdoc(FaultCode.UNSUPPORTED_TYPE),
        ) from None
    return variant(*aliases, **kwargs)


__all__ = (
    # Enumerations
    "Arity",

    # Classes (descriptors)
    "Option",
    "IntOption",
    "FloatOption",
    "StrOption",
    "BoolOption",

    # Builders
    "option",
)
