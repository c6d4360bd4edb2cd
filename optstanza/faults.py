"""
Optstanza faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the package
  can surface. Codes are grouped by tier so logs and searches stay predictable.
- Three error tiers that are never conflated:
  • SpecError: the option specification text itself is broken (developer bug,
    raised while compiling).
  • ParseFault: the command line supplied by the end user is wrong (reported
    through the spec's usage/exit collaborator, then raised).
  • ProgrammerError: the consuming program misused the accessor API (e.g., read
    a value by alias instead of by canonical name).
- OptionsWarning: soft diagnostics, emitted through the warnings module.
- UsageExit: raised after an explicit usage/exit request when the injected exit
  function returned instead of terminating.
- trigger(): central entry point to surface any fault.

Integration
- The parse engine builds faults and calls trigger(fault, spec=spec, ...).
- Parse faults write "error\\n\\nusage" to the spec's error sink and call
  spec.exit(EX_USAGE). A real exit never returns; a substituted one (tests) does,
  and the fault is raised so no partially parsed result reaches the caller.
"""
import copy
import inspect
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, UnsetType, nullify

EX_USAGE = 64
"""
exit status for incorrect command lines (sysexits.h convention).
"""


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - parse faults, user input (111xx)
      • MISSING_ARGUMENT, UNEXPECTED_ARGUMENT, UNKNOWN_OPTION, UNEXPECTED_POSITIONAL
    - warnings (121xx)
      • EMPTY_INLINE_VALUE
    - spec compilation (211xx)
      • MALFORMED_LINE, INVALID_NAME, DUPLICATED_NAME
    - accessor misuse and conversions (311xx)
      • UNKNOWN_CANONICAL, BAD_INTEGER, VALUELESS_FLAG
    - usage requests (411xx)
      • USAGE_REQUESTED, USAGE_ERROR
    """
    # --- parse faults (11xxx) ---
    MISSING_ARGUMENT      = 11111
    UNEXPECTED_ARGUMENT   = 11112
    UNKNOWN_OPTION        = 11113
    UNEXPECTED_POSITIONAL = 11121

    # --- warnings (12xxx) ---
    EMPTY_INLINE_VALUE    = 12111

    # --- spec compilation (21xxx) ---
    MALFORMED_LINE        = 21101
    INVALID_NAME          = 21102
    DUPLICATED_NAME       = 21103

    # --- accessor (31xxx) ---
    UNKNOWN_CANONICAL     = 31101
    BAD_INTEGER           = 31102
    VALUELESS_FLAG        = 31103

    # --- usage (41xxx) ---
    USAGE_REQUESTED       = 41101
    USAGE_ERROR           = 41102

    def normalize(self):
        """
        label shown in fault headers: the number, unless the program defines a
        __codes__ mapping (FaultCode → label) in __main__.
        """
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))


class _Fault:
    """
    state shared by errors and warnings: the message, possibly Unset, plus
    read-only options (code, title, hint, and whatever context the raiser
    attached, e.g. the spec line or the offending token).
    """
    palette = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(nullify(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return nullify(self.message, "")

    def __rich__(self):
        styles = defaultdict(str, self.palette | getattr(__import__("__main__"), "__styles__", {}))
        code = nullify(self.options.get("code", Unset), FaultCode.USAGE_REQUESTED)
        title = self.options.get("title", type(self).__name__)

        lines = [
            Text.assemble("[ ", (code.normalize(), styles["code"]), " | ", (title.title(), styles["title"]), " ]"),
            Text(str(self), styles["message"]),
        ]
        if hint := self.options.get("hint"):
            lines.append(Text.assemble((" → ", styles["hint-arrow"]), (hint, styles["hint"])))
        return Group(*lines)

    def __replace__(self, *unused, **overrides):
        assert not unused, "only keyword overrides are accepted"
        return type(self)(self.message, **(dict(self.options) | overrides))


class OptionsException(_Fault, Exception):
    """
    base type for every error raised by the package.
    """
    palette = {
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __trigger__(self) -> None:
        raise self from None


class SpecError(OptionsException): ...
class MalformedLineError(SpecError): ...
class InvalidNameError(SpecError): ...
class DuplicatedNameError(SpecError): ...


class ParseFault(OptionsException):
    """
    a command line error made by the end user.

    triggering writes the message and the usage text to the spec's error sink and
    asks the spec to exit with EX_USAGE; if the exit function returns, the fault
    is raised to abort parsing.
    """

    def __trigger__(self) -> None:
        spec = self.options["spec"]
        spec.exit(spec._emit(self if spec.colorful else self.message))
        raise self from None


class MissingArgumentError(ParseFault): ...
class UnexpectedArgumentError(ParseFault): ...
class UnknownOptionError(ParseFault): ...
class UnexpectedPositionalError(ParseFault): ...


class ProgrammerError(OptionsException): ...
class UnknownCanonicalError(ProgrammerError): ...
class ValuelessFlagError(ProgrammerError): ...


class BadIntegerError(OptionsException, ValueError): ...


class UsageExit(OptionsException):
    """
    raised by print_usage_and_exit() when the injected exit function returns.

    this keeps "print usage and stop" a hard stop even when exit is substituted,
    so a parse callback asking for usage short-circuits the remaining tokens.
    """

    @property
    def status(self):
        return self.options.get("status", 0)


class OptionsWarning(_Fault, ABC, Warning):
    palette = {
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __trigger__(self) -> None:
        warnings.warn(self, stacklevel=len(inspect.stack()))


class EmptyValueWarning(OptionsWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with extra runtime options merged in (via copy.replace).

    errors end up raised, parse faults after reporting through their spec;
    warnings are emitted and trigger() returns normally.
    """
    for method in ("__trigger__", "__replace__"):
        if not callable(getattr(fault, method, None)):
            raise TypeError("trigger() argument must define %s()" % method)
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "EX_USAGE",
    "FaultCode",
    "OptionsException",
    "SpecError",
    "MalformedLineError",
    "InvalidNameError",
    "DuplicatedNameError",
    "ParseFault",
    "MissingArgumentError",
    "UnexpectedArgumentError",
    "UnknownOptionError",
    "UnexpectedPositionalError",
    "ProgrammerError",
    "UnknownCanonicalError",
    "ValuelessFlagError",
    "BadIntegerError",
    "UsageExit",
    "OptionsWarning",
    "EmptyValueWarning",
    "trigger",
)
