"""
Plain-text recovery from the attributedBody column of chat.db.

Newer macOS releases often leave message.text NULL and store the visible
content only inside attributedBody, a "streamtyped" NSAttributedString
archive. The heuristic below slices the payload out between the class
markers and strips the container framing around it.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

NUMBER_MARKER = "NSNumber"
STRING_MARKER = "NSString"
DICTIONARY_MARKER = "NSDictionary"

# Framing around the payload once it has been cut out of the archive
HEADER_CHARS = 6
FOOTER_CHARS = 12

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE_RUN = re.compile(r"\s+")


def extract_text_from_attributed_body(blob: Optional[bytes]) -> str:
    """
    Extract readable text from an attributedBody blob.

    Args:
        blob: Raw bytes from message.attributedBody, or None

    Returns:
        Best-effort plain text. Empty string when nothing can be recovered;
        this function never raises.
    """
    if not blob:
        return ""

    try:
        body = bytes(blob).decode("utf-8", errors="replace")

        if NUMBER_MARKER in body:
            body = body.split(NUMBER_MARKER, 1)[0]
        if STRING_MARKER in body:
            body = body.split(STRING_MARKER, 1)[1]
        if DICTIONARY_MARKER in body:
            body = body.split(DICTIONARY_MARKER, 1)[0]

        if len(body) > HEADER_CHARS + FOOTER_CHARS:
            body = body[HEADER_CHARS:-FOOTER_CHARS]

        body = _CONTROL_CHARS.sub("", body)
        return _WHITESPACE_RUN.sub(" ", body).strip()

    except Exception as e:
        logger.warning(f"Failed to decode attributedBody: {e}")
        return ""
