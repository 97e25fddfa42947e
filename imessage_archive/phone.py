"""Phone number normalization to the form chat.db uses for handle ids."""

import re

_NON_DIALABLE = re.compile(r"[^0-9+]")


def normalize_phone_number(phone: str) -> str:
    """
    Normalize a phone number to an iMessage handle.

    Examples:
        "555-123-4567"     -> "+15551234567"
        "15551234567"      -> "+15551234567"
        "+44 20 7946 0958" -> "+442079460958"

    Args:
        phone: Phone number as typed in Contacts

    Returns:
        Normalized number. If nothing dialable remains the input is
        returned untouched.
    """
    cleaned = _NON_DIALABLE.sub("", phone)

    # Only a leading plus survives
    if cleaned.startswith("+"):
        return "+" + cleaned[1:].replace("+", "")
    cleaned = cleaned.replace("+", "")

    # North American default
    if len(cleaned) == 10:
        return f"+1{cleaned}"

    if len(cleaned) == 11 and cleaned.startswith("1"):
        return f"+{cleaned}"

    return cleaned or phone
