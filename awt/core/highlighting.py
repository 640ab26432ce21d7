"""Highlighting of search terms in table cells."""

import re

from rich.text import Text

HIGHLIGHT_STYLE = "bold black on yellow"


def highlight_text(text: str, patterns: list[str]) -> Text:
    """Highlight every case-insensitive occurrence of the given patterns.

    Longer patterns are matched first so that a full SKU wins over one of
    its fragments.

    Args:
        text: The cell text
        patterns: Strings to highlight

    Returns:
        Rich Text object with highlighted patterns
    """
    rich_text = Text(text or "")
    terms = sorted({p for p in patterns if p and p.strip()}, key=len, reverse=True)
    if not text or not terms:
        return rich_text

    regex = re.compile("|".join(re.escape(term) for term in terms), re.IGNORECASE)
    for match in regex.finditer(text):
        rich_text.stylize(HIGHLIGHT_STYLE, match.start(), match.end())

    return rich_text
