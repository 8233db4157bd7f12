"""Parsers for the text printed by the nordvpn program.

The program prints two shapes of output: ``key: value`` listings
(``status``, ``settings``) and comma separated lists (``countries``,
``groups``). Older versions prefix output with a spinner made of dashes and
carriage returns, which is why leading ``-`` and ``\\r`` are stripped too.
"""

from typing import List, Tuple

LEADING_CHARS = " \r\n-"


def parse_key_value(text: str) -> List[Tuple[str, str]]:
    """Parse a ``key: value`` listing.

    Lines without a colon are skipped.

    Args:
        text: Raw program output

    Returns:
        List of (key, value) pairs in output order
    """
    result = []

    for line in text.split("\n"):
        key, sep, value = line.lstrip(LEADING_CHARS).partition(":")
        if not sep:
            continue
        result.append((key.strip(), value.strip()))

    return result


def parse_list(text: str) -> List[str]:
    """Parse a comma separated list.

    Underscores become spaces, undoing the slugging done on connect.

    Args:
        text: Raw program output

    Returns:
        List of entries, empty segments dropped
    """
    text = text.lstrip(LEADING_CHARS).replace("_", " ")
    return [item.strip() for item in text.split(",") if item.strip()]
