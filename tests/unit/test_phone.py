"""Unit tests for phone number normalization."""

import pytest

from imessage_archive.phone import normalize_phone_number


@pytest.mark.parametrize("raw, expected", [
    ("555-123-4567", "+15551234567"),
    ("(555) 123-4567", "+15551234567"),
    ("5551234567", "+15551234567"),
    ("15551234567", "+15551234567"),
    ("1 (555) 123-4567", "+15551234567"),
    ("+1 (555) 123-4567", "+15551234567"),
    ("+44 20 7946 0958", "+442079460958"),
    ("+15551234567", "+15551234567"),
])
def test_normalizes_to_handle_form(raw, expected):
    assert normalize_phone_number(raw) == expected


def test_short_numbers_keep_digits_only():
    assert normalize_phone_number("123-45") == "12345"


def test_eleven_digits_not_starting_with_one_are_not_prefixed():
    assert normalize_phone_number("25551234567") == "25551234567"


def test_only_leading_plus_survives():
    assert normalize_phone_number("+1555+1234567") == "+15551234567"


def test_embedded_plus_without_leading_plus_is_dropped():
    assert normalize_phone_number("555+1234567") == "+15551234567"


def test_nothing_dialable_returns_input():
    assert normalize_phone_number("ext.") == "ext."


def test_empty_string():
    assert normalize_phone_number("") == ""
