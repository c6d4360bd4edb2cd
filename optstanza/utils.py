"""
Optstanza utilities shared by the compiler, the engine and the accessor.

- Unset: "no value given", for parameters where None could be meaningful
  (parse() without tokens, faults without a message).
- nullify(): resolve Unset to a concrete fallback.
- SealedStorage / view(): compiled tables are written once while an OptionSpec
  is being built and are only reachable through read-only views afterwards.

    class Table(SealedStorage):
        names = view("names")

        def __new__(cls, names):
            with super().__new__(cls) as self:
                setattr(self, "-names", list(names))
            return self

    Table("ab").names        → ('a', 'b')
    getattr(table, "-names") → AttributeError
"""
from collections.abc import Mapping, Sequence, Set
from contextlib import contextmanager
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    type of the Unset sentinel; there is exactly one instance and it is falsy.
    """
    __slots__ = ()

    def __new__(cls):
        return Unset if "Unset" in globals() else object.__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def nullify(value, default=None, /):
    """
    `default` if `value` is Unset, else `value` (None, 0 and "" are kept).
    """
    return default if value is Unset else value


class SealedStorage:
    """
    Mixin for objects whose compiled tables must not change after construction.

    Tables live under attribute names starting with '-', which attribute syntax
    cannot spell. Plain attribute access to those names always fails; setattr()
    only succeeds inside the `with super().__new__(cls) as self:` block of the
    subclass constructor. Ordinary attributes are untouched.
    """
    __slots__ = ("__sealed",)

    @contextmanager
    def __new__(cls):
        instance = super().__new__(cls)
        instance.__sealed = False
        yield instance
        instance.__sealed = True

    def __getattribute__(self, name, /):
        if name[:1] == "-":
            raise AttributeError("%r is compiled storage, read it through its view" % name)
        return super().__getattribute__(name)

    def __setattr__(self, name, value, /):
        if name[:1] == "-" and self.__sealed:
            raise AttributeError("compiled storage %r is sealed" % name)
        super().__setattr__(name, value)

    def __delattr__(self, name, /):
        if name[:1] == "-":
            raise AttributeError("compiled storage %r cannot be deleted" % name)
        super().__delattr__(name)


_FREEZERS = (
    (Mapping, MappingProxyType),
    (Set, frozenset),
    (Sequence, tuple),
)


def view(name, /):
    """
    Property exposing the table stored under '-' + name without letting it change.

    mappings come back as MappingProxyType, sets as frozenset, other sequences as
    tuple; strings and scalars are returned as stored.
    """
    key = "-" + name

    def getter(self):
        value = object.__getattribute__(self, key)
        if isinstance(value, str):
            return value
        for kind, freeze in _FREEZERS:
            if isinstance(value, kind):
                return freeze(value)
        return value

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


__all__ = (
    "UnsetType",
    "Unset",
    "nullify",
    "SealedStorage",
    "view",
)
