"""
Optstanza parse results and typed value access.

What this module provides
- Options: the result of OptionSpec.parse(). It holds
  • the stored string value of every canonical option (seeded from the declared
    defaults, overwritten or counted up while parsing),
  • flags: every option occurrence exactly as presented, in order, as tuples
    ("--name",) or ("--name", "value"),
  • extra: non-option tokens seen before any "--" terminator,
  • leftover: tokens strictly after a "--" terminator, untouched.
- getall(): collect every value given to a repeated argument option.

Access contract
- Values are read by canonical name only (the last name on a spec line).
  Reading an undeclared name is a defect in the consuming program and raises
  UnknownCanonicalError, which is distinct from user input errors.
- get() returns "" for declared options that were neither given nor defaulted.

Quick example
    >>> opt = spec.parse(["-vv", "--repeat=3", "file"])
    >>> opt.getint("verbose"), opt.getint("repeat"), opt.extra
    (2, 3, ['file'])
"""
import difflib
from types import MappingProxyType

from .faults import *

FALSE_SPELLINGS = frozenset({"", "0", "false", "off", "nil", "null", "no"})
"""
values read as False by Options.getbool(); every other value is True.
"""


class Options:
    """
    Parsed command line: stored values plus the flags/extra/leftover logs.

    Each parse produces a fresh Options; nothing is shared with the spec or with
    other results except the (immutable) alias table used for diagnostics.
    """

    def __init__(self, spec, /):
        self._aliases = spec.aliases
        self._values = dict(spec.defaults)
        self._known = frozenset(self._aliases.values())
        self.flags = []
        self.extra = []
        self.leftover = []

    @property
    def values(self):
        return MappingProxyType(self._values)

    @property
    def known(self):
        return self._known

    def _check(self, canonical):
        if canonical in self._known:
            return
        if (alias := self._aliases.get(canonical)) is not None:
            hint = "%r is an alias; read it by its canonical name %r" % (canonical, alias)
        elif suggestions := difflib.get_close_matches(canonical, self._known, 1):
            hint = "did you mean %r?" % suggestions[0]
        else:
            hint = "declare it in the option spec or fix the name"
        raise UnknownCanonicalError(
            "[programmer error] unknown option: %r" % canonical,
            title="unknown canonical name",
            code=FaultCode.UNKNOWN_CANONICAL,
            input=canonical,
            hint=hint,
        )

    def _record(self, canonical, value):
        """
        store one occurrence: last value wins, or count up when there is no value.
        """
        if value is None:
            self._values[canonical] = str(self.getint(canonical) + 1)
        else:
            self._values[canonical] = value

    def get(self, canonical, /):
        """
        Return the stored value of an option, or "" when it is unset.

        Raises UnknownCanonicalError when `canonical` is not a declared canonical name.
        """
        self._check(canonical)
        return self._values.get(canonical, "")

    def getint(self, canonical, /):
        """
        Return the value as an integer; "" reads as 0.

        Counting options (no argument) report how many times they were given.
        """
        if not (value := self.get(canonical)):
            return 0
        try:
            return int(value)
        except ValueError:
            raise BadIntegerError(
                "bad integer value for option %s: %s" % (canonical, value),
                title="bad integer value",
                code=FaultCode.BAD_INTEGER,
                input=canonical,
                value=value,
            ) from None

    def getbool(self, canonical, /):
        """
        Return False for "" and the spellings in FALSE_SPELLINGS, True otherwise.
        """
        return self.get(canonical) not in FALSE_SPELLINGS

    def have(self, canonical, /):
        """
        Return True when the option has a value, either declared default or given.
        """
        self._check(canonical)
        return canonical in self._values

    def getall(self, presented, /):
        return getall(presented, self.flags)

    def __rich_repr__(self):
        yield "values", dict(self._values)
        yield "flags", self.flags
        yield "extra", self.extra
        yield "leftover", self.leftover

    def __repr__(self):
        return "options(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def getall(presented, flags, /):
    """
    Gather every value given to an option, in command line order.

    `presented` is compared literally against the flags log, dashes included
    ("--author", not "author"), so each spelling is collected separately.
    The option must take an argument: a matching entry without a value raises
    ValuelessFlagError.
    """
    values = []
    for entry in flags:
        if entry[0] != presented:
            continue
        if len(entry) != 2:
            raise ValuelessFlagError(
                "[programmer error] option does not appear to take arguments: %s" % presented,
                title="valueless flag",
                code=FaultCode.VALUELESS_FLAG,
                input=presented,
                hint="getall() only applies to options declared with a trailing '='",
            )
        values.append(entry[1])
    return values


__all__ = (
    "FALSE_SPELLINGS",
    "Options",
    "getall",
)
