"""
Optstanza specification compiler: option text → immutable option tables.

The specification text has two stanzas separated by a line holding exactly "--":

    cat - concatenate files to standard output
    Usage: cat [OPTIONS] file...
    --
    n,numerate,number     number input lines
    i,input-encoding=     charset input is encoded in [utf-8]
    v,verbose             be verbose

- the synopsis is copied verbatim into the usage text.
- every option line is "name[,name...][=]<whitespace><description>":
  • the last name is canonical; every name (canonical included) is an alias of it.
  • a trailing "=" marks an option that requires an argument.
  • a description ending in "[...]" declares the canonical option's default.
- blank lines in the option stanza are passed through to the usage text.

Compiled tables
- aliases: every declared name → canonical name.
- defaults: canonical → default string (only for bracketed descriptions).
- required: canonical names declared with "=".
- usage: synopsis, blank line, one rendered line per option.

The tables are written once while compiling and are only readable afterwards,
so one OptionSpec can be shared by any number of parse() calls. Runtime
configuration (fatal flags, callback, exit function, sinks) lives in plain
attributes that must be set before the spec is used.

Errors in the text are developer bugs and raise SpecError subclasses right away.
"""
import re
import sys
from collections import defaultdict
from collections.abc import Iterable
from enum import Enum

from rich.console import Console
from rich.text import Text

from . import engine
from .faults import *
from .utils import *

_LINE = re.compile(r"(?P<names>[-\w,]+)(?P<marker>=?)\s+(?P<descr>.*)", re.ASCII)
_DEFAULT = re.compile(r"\[(?P<default>.*)\]$")

_CONFIGURABLE = frozenset({
    "unknown_options_fatal",
    "unknown_values_fatal",
    "parse_callback",
    "exit",
    "stdout",
    "stderr",
    "colorful",
})


class Stanza(Enum):
    """
    compiler state: which stanza of the specification text is being read.
    """
    SYNOPSIS = "synopsis"
    OPTIONS = "options"


def _pretty(name):
    return ("-" if len(name) == 1 else "--") + name


class OptionSpec(SealedStorage):
    """
    Compiled option specification plus its runtime configuration.

    Read-only tables
    - aliases, defaults, required, usage (see module docstring).

    Configuration (plain attributes, set before use)
    - unknown_options_fatal: unknown options abort the parse [True].
    - unknown_values_fatal: non-option tokens abort the parse [False].
    - parse_callback: callable(spec, option, argument) receiving every occurrence
      instead of the result values; `argument` is None when nothing was consumed.
    - exit: callable(status) used to terminate [sys.exit].
    - stdout / stderr: sinks for usage and error output [live sys streams].
    - colorful: render usage and faults with rich styles [False].
    """
    aliases = view("aliases")
    defaults = view("defaults")
    required = view("required")
    usage = view("usage")

    def __new__(cls, text, /):
        if not isinstance(text, str):
            raise TypeError("OptionSpec() argument must be a string")

        aliases = {}
        defaults = {}
        required = set()
        entries = []

        stanza = Stanza.SYNOPSIS
        for number, line in enumerate(text.split("\n")):
            match stanza:
                case Stanza.SYNOPSIS:
                    if line == "--":
                        stanza = Stanza.OPTIONS
                        entries.append("")
                        continue
                    entries.append(line)
                case Stanza.OPTIONS:
                    if not line.strip():
                        entries.append("")
                        continue
                    if not (parts := _LINE.fullmatch(line)):
                        raise MalformedLineError(
                            "%d: no parse: %s" % (number, line),
                            title="malformed option line",
                            code=FaultCode.MALFORMED_LINE,
                            line=number,
                            text=line,
                            hint="write 'name[,name...][=]  description [default]'",
                        )
                    names = parts["names"].split(",")
                    canonical = names[-1]
                    for name in names:
                        if name in ("", "-", "--"):
                            raise InvalidNameError(
                                "%d: bad name: %r" % (number, name),
                                title="invalid option name",
                                code=FaultCode.INVALID_NAME,
                                line=number,
                                text=line,
                                input=name,
                            )
                        if name in aliases:
                            raise DuplicatedNameError(
                                "%d: duplicate name: %s" % (number, name),
                                title="duplicated option name",
                                code=FaultCode.DUPLICATED_NAME,
                                line=number,
                                text=line,
                                input=name,
                                hint="%r already names option %r" % (name, aliases[name]),
                            )
                        aliases[name] = canonical
                    if parts["marker"]:
                        required.add(canonical)
                    if default := _DEFAULT.search(parts["descr"]):
                        defaults[canonical] = default["default"]
                    entries.append((tuple(names), parts["marker"], parts["descr"]))

        with super().__new__(cls) as self:
            setattr(self, "-aliases", aliases)
            setattr(self, "-defaults", defaults)
            setattr(self, "-required", frozenset(required))
            setattr(self, "-entries", tuple(entries))
            setattr(self, "-usage", "".join(map(cls._line, entries)))

        self.unknown_options_fatal = True
        self.unknown_values_fatal = False
        self.parse_callback = None
        self.exit = sys.exit
        self.stdout = None
        self.stderr = None
        self.colorful = False
        return self

    @staticmethod
    def _line(entry):
        if isinstance(entry, str):
            return entry + "\n"
        names, marker, descr = entry
        return "  " + ", ".join(map(_pretty, names)) + marker + "  " + descr + "\n"

    def set_unknown_options_fatal(self, value, /):
        self.unknown_options_fatal = value
        return self

    def set_unknown_values_fatal(self, value, /):
        self.unknown_values_fatal = value
        return self

    def set_parse_callback(self, callback, /):
        self.parse_callback = callback
        return self

    def canonical(self, name, /):
        """
        Return the canonical name for any declared alias, or "" when unknown.

        Handy in parse callbacks, which receive names as presented.
        """
        return object.__getattribute__(self, "-aliases").get(name, "")

    def requires_argument(self, canonical, /):
        return canonical in object.__getattribute__(self, "-required")

    def parse(self, tokens=Unset, /):
        """
        Parse command line tokens (without the program name) into an Options.

        Parameters
        - tokens: Unset | Iterable[str]
          • Unset: read sys.argv[1:].
          • Iterable[str]: the tokens, used verbatim.

        Raises
        - TypeError: when tokens is a bare string or holds non-string items.
        - ParseFault subclasses (after reporting) for command line errors.
        """
        if tokens is Unset:
            tokens = sys.argv[1:]
        elif isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")
        return engine.parse(self, tokens)

    def _console(self, stderr):
        return Console(
            file=self.stderr if stderr else self.stdout,
            stderr=stderr,
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    def _emit(self, error, /):
        """
        write usage (and the error, if any) to the proper sink; return the exit status.

        plain output goes to the sink byte for byte; only the colorful form is
        rendered by rich.
        """
        console = self._console(bool(error))
        if self.colorful:
            console.print(*((error, "") if error else ()), self, sep="\n")
        elif error:
            console.file.write("%s\n\n%s\n" % (error, self.usage))
        else:
            console.file.write(self.usage + "\n")
        return EX_USAGE if error else 0

    def print_usage_and_exit(self, error="", /):
        """
        Write the usage text and terminate.

        - error == "": usage goes to stdout and the exit status is 0, so
          "prog --help | less" behaves as expected.
        - otherwise: "error", a blank line and the usage go to stderr and the
          status is EX_USAGE.

        If the configured exit function returns, UsageExit is raised instead.
        """
        status = self._emit(error)
        self.exit(status)
        raise UsageExit(
            error,
            title="usage error" if error else "usage requested",
            code=FaultCode.USAGE_ERROR if error else FaultCode.USAGE_REQUESTED,
            status=status,
        )

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "synopsis": "#E6E6F0",
            "option-name": "bold #00E5FF",
            "argument-marker": "bold #FF4DA6",
            "descr": "#C8C8D0",
            "default": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        text = Text()
        for entry in object.__getattribute__(self, "-entries"):
            if isinstance(entry, str):
                text.append(entry + "\n", styles["synopsis"])
                continue
            names, marker, descr = entry
            text.append("  ")
            for index, name in enumerate(names):
                if index:
                    text.append(", ")
                text.append(_pretty(name), styles["option-name"])
            text.append(marker, styles["argument-marker"])
            text.append("  ")
            if default := _DEFAULT.search(descr):
                text.append(descr[:default.start()], styles["descr"])
                text.append(descr[default.start():], styles["default"])
            else:
                text.append(descr, styles["descr"])
            text.append("\n")
        return text

    def __rich_repr__(self):
        yield "aliases", dict(self.aliases)
        yield "defaults", dict(self.defaults)
        yield "required", set(self.required)
        yield "unknown_options_fatal", self.unknown_options_fatal
        yield "unknown_values_fatal", self.unknown_values_fatal

    def __repr__(self):
        return "option-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def options(text, /, **config):
    """
    Compile a specification text and apply configuration in one step.

        spec = options(SPEC, unknown_options_fatal=False, exit=recorder)

    Unknown configuration keywords raise TypeError.
    """
    spec = OptionSpec(text)
    for key, value in config.items():
        if key not in _CONFIGURABLE:
            raise TypeError("options() got an unexpected keyword argument %r" % key)
        setattr(spec, key, value)
    return spec


__all__ = (
    "Stanza",
    "OptionSpec",
    "options",
)
