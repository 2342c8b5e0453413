"""Constraints on a synthesized element before it may be stored."""

MAX_NAME_WORDS = 2
MAX_NAME_LENGTH = 40
MAX_EMOJI_LENGTH = 16


def validate_element_name(name: str) -> str:
    """Return the stripped name or raise ValueError."""
    name = " ".join(name.split())
    if not name:
        raise ValueError("name must not be empty")
    if len(name.split(" ")) > MAX_NAME_WORDS:
        raise ValueError(f"name must have at most {MAX_NAME_WORDS} words")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"name must be at most {MAX_NAME_LENGTH} characters")
    return name


def validate_element_emoji(emoji: str) -> str:
    emoji = emoji.strip()
    if not emoji:
        raise ValueError("emoji must not be empty")
    if len(emoji) > MAX_EMOJI_LENGTH:
        raise ValueError(f"emoji must be at most {MAX_EMOJI_LENGTH} characters")
    return emoji
