"""Tests for ziria/utils/cache_keys.py."""

from uuid import UUID

from ziria.schemas import ById, parse_identifier
from ziria.utils.cache_keys import derive_key

NOTCH = UUID("069a79f444e94726a5befca90e38aaf5")


def test_key_layout() -> None:
    assert derive_key(NOTCH, True) == "069a79f444e94726a5befca90e38aaf51"
    assert derive_key(NOTCH, False) == "069a79f444e94726a5befca90e38aaf50"


def test_overlay_changes_key() -> None:
    assert derive_key(NOTCH, True) != derive_key(NOTCH, False)


def test_identity_changes_key() -> None:
    other = UUID("853c80ef3c3749fdaa49938b674adae6")
    assert derive_key(NOTCH, False) != derive_key(other, False)


def test_identifier_spelling_does_not_matter() -> None:
    """Dashed, plain and upper-case ids all land on one key."""
    spellings = [
        "069a79f444e94726a5befca90e38aaf5",
        "069a79f4-44e9-4726-a5be-fca90e38aaf5",
        "069A79F444E94726A5BEFCA90E38AAF5",
    ]
    keys = set()
    for raw in spellings:
        ref = parse_identifier(raw)
        assert isinstance(ref, ById)
        keys.add(derive_key(ref.identity, False))
    assert keys == {"069a79f444e94726a5befca90e38aaf50"}
