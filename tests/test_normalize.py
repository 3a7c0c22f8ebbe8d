"""Tests for text and value normalisers."""

from coffeemania_sync.normalize import clean_text, parse_calories, parse_price, safe_filename


def test_clean_text_collapses_whitespace() -> None:
    """Non-breaking spaces, tabs and newlines collapse to single spaces."""
    assert clean_text("  Чизкейк\xa0 Нью-Йорк\n\t ") == "Чизкейк Нью-Йорк"
    assert clean_text(None) == ""
    assert clean_text("") == ""


def test_parse_price_spacing() -> None:
    """The ruble sign is always separated by exactly one space."""
    assert parse_price("350₽") == "350 ₽"
    assert parse_price("350\xa0₽") == "350 ₽"
    assert parse_price("  1 200   ₽ ") == "1 200 ₽"
    assert parse_price(None) == ""


def test_parse_calories() -> None:
    """Direct integer, digit-run fallback, zero when there are no digits."""
    assert parse_calories("250") == 250
    assert parse_calories("≈250 ккал") == 250
    assert parse_calories("н/д") == 0
    assert parse_calories(None) == 0


def test_safe_filename() -> None:
    assert safe_filename("Чизкейк «Нью-Йорк»!") == "Чизкейк Нью-Йорк"
    assert safe_filename("Кофе/чай_2") == "Кофечай_2"
    assert safe_filename("???") == ""
