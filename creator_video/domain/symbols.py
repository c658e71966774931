"""Heuristic extraction of ticker-like tokens from video text.

Approximate and best-effort: any uppercase 1-5 letter word that is not a
common English word is treated as a symbol. ``$``-prefixed tokens are always
kept. The result is derived data, never an authoritative list.
"""

import re

SYMBOL_PATTERN = re.compile(r"(?<![\w$])([A-Z]{1,5})\b")
DOLLAR_SYMBOL_PATTERN = re.compile(r"\$([A-Za-z]{1,5})\b")

COMMON_WORDS: frozenset[str] = frozenset(
    {
        "A", "I", "THE", "AND", "FOR", "ARE", "BUT", "NOT", "YOU", "ALL",
        "CAN", "HER", "WAS", "ONE", "OUR", "HAD", "WORDS", "WHAT", "WERE",
        "THEY", "WE", "WHEN", "YOUR", "SAID", "THERE", "EACH", "WHICH", "DO",
        "HOW", "THEIR", "IF", "WILL", "UP", "OTHER", "ABOUT", "OUT", "MANY",
        "THEN", "THEM", "THESE", "SO", "SOME", "WOULD", "MAKE", "LIKE",
        "INTO", "HIM", "HAS", "TWO", "MORE", "GO", "NO", "WAY", "COULD", "MY",
        "THAN", "FIRST", "BEEN", "CALL", "WHO", "ITS", "NOW", "FIND", "LONG",
        "DOWN", "DAY", "DID", "GET", "COME", "MADE", "MAY", "PART", "OVER",
        "NEW", "SOUND", "TAKE", "ONLY", "WORK", "KNOW", "PLACE", "YEAR",
        "LIVE", "ME", "BACK", "GIVE", "MOST", "VERY", "AFTER", "JUST",
        "NAME", "GOOD", "MAN", "THINK", "SAY", "GREAT", "WHERE", "HELP",
        "MUCH", "LINE", "RIGHT", "TOO", "MEAN", "OLD", "ANY", "SAME", "TELL",
        "BOY", "CAME", "WANT", "SHOW", "ALSO", "FORM", "THREE", "SMALL",
        "SET", "PUT", "END", "WHY", "AGAIN", "TURN", "HERE", "OFF", "WENT",
        "IS", "IT", "IN", "ON", "AT", "TO", "OF", "OR", "AN", "AS", "BE",
        "BY", "HE", "US", "AM", "OK",
    }
)


def extract_trading_symbols(title: str, description: str | None = None) -> list[str]:
    """Scan title and description for ticker-like tokens.

    Args:
        title: Video title.
        description: Optional video description.

    Returns:
        Symbols in order of first appearance, uppercase, without duplicates.
    """
    content = f"{title} {description or ''}"
    found: list[tuple[int, str]] = [
        (match.start(), match.group(1).upper())
        for match in DOLLAR_SYMBOL_PATTERN.finditer(content)
    ]
    found.extend(
        (match.start(), match.group(1))
        for match in SYMBOL_PATTERN.finditer(content)
        if match.group(1) not in COMMON_WORDS
    )

    symbols: dict[str, None] = {}
    for _, symbol in sorted(found):
        symbols.setdefault(symbol, None)
    return list(symbols)
