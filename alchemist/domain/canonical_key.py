"""Order-independent lookup keys for a pair of element names.

Both names are stripped and case-folded, sorted, then joined with
KEY_SEPARATOR. Names that themselves contain the separator can collide
with other pairs; that is accepted.
"""

KEY_SEPARATOR = "_"


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def canonicalize(first: str, second: str) -> str:
    """Return the canonical key for an unordered pair of names."""
    return KEY_SEPARATOR.join(sorted((normalize_name(first), normalize_name(second))))


def split_key(key: str) -> tuple[str, str]:
    """Recover display names from a key.

    Splits at the first separator so multi-word names ("monte carlo")
    survive intact.
    """
    first, sep, second = key.partition(KEY_SEPARATOR)
    if not sep:
        return key.title(), ""
    return first.title(), second.title()
