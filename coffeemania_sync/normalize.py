"""Text and value normalisers shared by the extractors."""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_RUBLE_RE = re.compile(r"\s*₽")
_DIGITS_RE = re.compile(r"\d+")


# --- Text ----------------------------------------------------------------------


def clean_text(text: str | None) -> str:
    """Collapse whitespace (including non-breaking spaces) and strip."""
    if not text:
        return ""
    text = text.replace("\xa0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def safe_filename(name: str) -> str:
    """Keep only alphanumerics, space, underscore and hyphen."""
    return "".join(c for c in name if c.isalnum() or c in " _-").strip()


# --- Values --------------------------------------------------------------------


def parse_price(raw_price: str | None) -> str:
    """Normalise a display price: ``'350\\xa0₽'`` → ``'350 ₽'``."""
    return _RUBLE_RE.sub(" ₽", clean_text(raw_price))


def parse_calories(cal_str: str | None) -> int:
    """Parse a calorie value, falling back to the first digit run, else 0."""
    cal_str = clean_text(cal_str)
    try:
        return int(cal_str)
    except ValueError:
        match = _DIGITS_RE.search(cal_str)
        return int(match.group(0)) if match else 0
