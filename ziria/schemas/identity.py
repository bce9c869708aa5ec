"""
Identity references.

A raw path identifier is either an account's unique id or its display name.
It is sniffed once into one of two variants; only ``ByName`` needs a trip to
the identity resolver before the cache can be consulted.
"""

from dataclasses import dataclass
from re import compile as re_compile
from uuid import UUID

UUID_PATTERN = re_compile(
    r"^(?:[0-9a-fA-F]{32}|[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})$",
)
NAME_PATTERN = re_compile(r"^[A-Za-z0-9_]{1,16}$")


@dataclass(frozen=True, slots=True)
class ById:
    """Identifier that already is a unique account id."""

    identity: UUID


@dataclass(frozen=True, slots=True)
class ByName:
    """Identifier that is a display name and must be resolved."""

    name: str

    @property
    def is_plausible(self) -> bool:
        """Whether the name could belong to an account at all."""
        return NAME_PATTERN.fullmatch(self.name) is not None


IdentityRef = ById | ByName


def parse_identifier(raw: str) -> IdentityRef:
    """
    Sniff a raw identifier into an ``IdentityRef``.

    Examples:
    --------
    >>> parse_identifier("069a79f444e94726a5befca90e38aaf5")
    ById(identity=UUID('069a79f4-44e9-4726-a5be-fca90e38aaf5'))
    >>> parse_identifier("Notch")
    ByName(name='Notch')
    """
    if UUID_PATTERN.fullmatch(raw):
        return ById(UUID(raw))
    return ByName(raw)
