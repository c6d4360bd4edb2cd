r"""
Optstanza parse engine: tokens + compiled tables → Options.

Scanning
- tokens are read left to right by index; an option requiring an argument may
  consume the following token, so the index can advance by two.
- "--" stops scanning; every later token goes to `leftover` untouched.
- a token not shaped like an option goes to `extra` (or aborts the parse with
  UnexpectedPositionalError when spec.unknown_values_fatal is set).
- option shape: one or two dashes, a name of word characters and dashes, and an
  optional inline "=value":  (--?)([-\w]+)(=(.*))?

Resolution
- each option token is decoded into an ordered list of Occurrence entries:
  • a registered alias (any dash count) → one occurrence.
  • a single-dash multi-character name that is not an alias, whose every
    character is a registered alias → one occurrence per character (clustering:
    "-abc" ≡ "-a -b -c").
  • anything else → one unknown occurrence for the whole name.
- only the last occurrence may take a value (inline or the following token).
  an argument-requiring option earlier in a cluster is a missing argument.
- every occurrence, clustered or not, then goes through the same branch:
  • with a value: store it (last occurrence wins).
  • without a value: count up ("" → "1" → "2" ...).
  • with spec.parse_callback installed: call it instead of storing.

Unknown options
- fatal (UnknownOptionError) unless spec.unknown_options_fatal is False or a
  callback is installed. otherwise a best-effort guess: the inline value if any,
  else the next token when it does not start with "-", else no value. the guess
  can take a positional that merely follows the option; dependents rely on it.
"""
import difflib
import re
from typing import NamedTuple

from .faults import *
from .result import Options

_TOKEN = re.compile(r"(?P<presented>(?P<dashes>--?)(?P<name>[-\w]+))(?:=(?P<value>.*))?", re.ASCII)


class Occurrence(NamedTuple):
    option: str
    canonical: str | None
    last: bool


def decode(spec, dashes, name, /):
    """
    Resolve an option name into the occurrences it stands for.

    `option` is the name as presented without dashes (a single character for
    cluster members); `canonical` is None for an unknown option.
    """
    if (canonical := spec.canonical(name)) or dashes == "--" or len(name) == 1:
        return [Occurrence(name, canonical or None, True)]

    members = [
        Occurrence(char, spec.canonical(char) or None, index == len(name) - 1)
        for index, char in enumerate(name)
    ]
    if any(member.canonical is None for member in members):
        return [Occurrence(name, None, True)]
    return members


def _hint(spec, presented):
    names = [("-" if len(name) == 1 else "--") + name for name in spec.aliases]
    try:
        return "did you mean %r? run with --help to see all options" % difflib.get_close_matches(presented, names, 1)[0]
    except IndexError:
        return "run with --help to see all options"


def parse(spec, tokens, /):
    """
    Run one parse of `tokens` against `spec` and return a fresh Options.

    Faults are raised through trigger(), which reports via the spec's usage/exit
    collaborator before raising; nothing partial is returned on error.
    """
    result = Options(spec)
    callback = spec.parse_callback

    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1

        if token == "--":
            result.leftover.extend(tokens[index:])
            break

        if not (match := _TOKEN.fullmatch(token)):
            if spec.unknown_values_fatal:
                trigger(UnexpectedPositionalError(
                    "unexpected argument: %s" % token,
                    title="unexpected positional",
                    code=FaultCode.UNEXPECTED_POSITIONAL,
                    token=token,
                    index=index - 1,
                    hint="remove it, or pass it after '--'",
                ), spec=spec)
            result.extra.append(token)
            continue

        presented = match["presented"]
        value = match["value"]  # None without '=', "" for a bare '='
        *leading, last = members = decode(spec, match["dashes"], match["name"])

        for member in leading:
            if spec.requires_argument(member.canonical):
                trigger(MissingArgumentError(
                    "missing argument: %s" % member.canonical,
                    title="missing argument",
                    code=FaultCode.MISSING_ARGUMENT,
                    token=token,
                    index=index - 1,
                    input=member.option,
                    hint="only the last option of a cluster can take an argument (e.g. -%s value)" % member.option,
                ), spec=spec)

        if last.canonical is None:
            if callback is None and spec.unknown_options_fatal:
                trigger(UnknownOptionError(
                    "unexpected option: %s" % token,
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    token=token,
                    index=index - 1,
                    input=presented,
                    hint=_hint(spec, presented),
                ), spec=spec)
            if value is None and index < len(tokens) and not tokens[index].startswith("-"):
                value = tokens[index]
                index += 1
        elif spec.requires_argument(last.canonical):
            if value is None:
                if index >= len(tokens):
                    trigger(MissingArgumentError(
                        "missing argument: %s" % last.canonical,
                        title="missing argument",
                        code=FaultCode.MISSING_ARGUMENT,
                        token=token,
                        index=index - 1,
                        input=last.option,
                        hint="give a value: %s=<value> or %s <value>" % (presented, presented),
                    ), spec=spec)
                value = tokens[index]
                index += 1
            elif not value:
                trigger(EmptyValueWarning(
                    "empty inline value for option %s" % last.canonical,
                    title="empty inline value",
                    code=FaultCode.EMPTY_INLINE_VALUE,
                    token=token,
                    index=index - 1,
                    hint="add a value after '=' or drop the '='",
                ))
        elif value is not None:
            trigger(UnexpectedArgumentError(
                "unexpected argument: %s: %s" % (last.canonical, value),
                title="option takes no argument",
                code=FaultCode.UNEXPECTED_ARGUMENT,
                token=token,
                index=index - 1,
                input=last.option,
                hint="remove everything from '=' (for example: %s)" % presented,
            ), spec=spec)

        for member in members:
            argument = value if member.last else None
            if callback is not None:
                callback(spec, member.option, argument)
            elif member.canonical is not None:
                result._record(member.canonical, argument)

        if callback is None:
            result.flags.append((presented,) if value is None else (presented, value))

    return result


__all__ = (
    "Occurrence",
    "decode",
    "parse",
)
