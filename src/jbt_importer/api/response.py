"""Marker scanning for Jelly runner HTML pages.

The Jelly runner has no API. Both the token page and the script result page
are full HTML documents, so the values we need are cut out of the page
text at fixed markers and offsets.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field

TOKEN_MARKER = 'name="atl_token"'

# Jira echoes the executed script back HTML-escaped; the outcome sits
# between the opening JiraJelly tag and its closing tag.
JELLY_MARKERS = (
    "xmlns:j='jelly:core'",
    'xmlns:j="jelly:core"',
)
JELLY_ESCAPED_MARKER = 'xmlns:j=&quot;jelly:core&quot;'
JELLY_END_MARKER = '/JiraJelly'
# Skips the escaped '>' closing the opening tag
JELLY_LEAD = 4
# Drops the escaped '<' opening the closing tag
JELLY_TRAIL = 4

SCRIPT_EXCEPTION_MARKER = 'id="scriptException"'
SCRIPT_EXCEPTION_END_MARKER = '/div'
# Distance from the marker to the exception text, past the fixed wrapper markup
SCRIPT_EXCEPTION_OFFSET = 203
SCRIPT_EXCEPTION_TRAIL = 1

# Applied in order
HTML_REPLACEMENTS = (
    ('<BR>', '\n'),
    ('<b>', ''),
    ('</b>', ''),
    ('&nbsp;', ' '),
    ('&gt;', '>'),
    ('&lt;', '<'),
    ('&quot;', '"'),
    ('.<br/>', ''),
    ('.<BR/>', ''),
    ('.<br>', ''),
    ('.<BR>', ''),
)


class ResponseMarker(str, Enum):
    """Which marker a submission response matched."""

    NONE = 'none'
    JELLY_OUTPUT = 'jelly_output'
    SCRIPT_EXCEPTION = 'script_exception'


class SubmissionResponse(BaseModel):
    """Text extracted from a Jelly runner result page."""

    marker: ResponseMarker = Field(..., description='Marker found in the page')
    text: str = Field(default='', description='Extracted, reformatted text')

    class Config:
        """Pydantic configuration."""

        frozen = True


def extract_token(raw: str) -> str:
    """Return the value of the hidden ``atl_token`` field in ``raw``.

    Returns an empty string when the page carries no token field.
    """
    position = raw.find(TOKEN_MARKER)
    if position < 0:
        return ''

    rest = raw[position + len(TOKEN_MARKER):]
    start = rest.find('"')
    if start < 0:
        return ''
    end = rest.find('"', start + 1)
    if end < 0:
        return ''
    return rest[start + 1:end]


def _cut(raw: str, start: int, end_marker: str, trail: int) -> str:
    rest = raw[start:]
    end = rest.find(end_marker)
    if end < 0:
        return rest
    return rest[:max(end - trail, 0)]


def _find_jelly_output(raw: str) -> Optional[str]:
    result = None
    for marker in JELLY_MARKERS:
        position = raw.find(marker)
        if position >= 0:
            result = _cut(
                raw, position + len(marker) + JELLY_LEAD, JELLY_END_MARKER, JELLY_TRAIL
            )
            break

    position = raw.find(JELLY_ESCAPED_MARKER)
    if position >= 0:
        result = _cut(
            raw,
            position + len(JELLY_ESCAPED_MARKER) + JELLY_LEAD,
            JELLY_END_MARKER,
            JELLY_TRAIL,
        )
    return result


def _find_script_exception(raw: str) -> Optional[str]:
    position = raw.find(SCRIPT_EXCEPTION_MARKER)
    if position < 0:
        return None
    return _cut(
        raw,
        position + SCRIPT_EXCEPTION_OFFSET,
        SCRIPT_EXCEPTION_END_MARKER,
        SCRIPT_EXCEPTION_TRAIL,
    )


def reformat_html(text: str) -> str:
    """Turn the HTML fragments of an extracted message into plain text."""
    for old, new in HTML_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def parse_submission_response(raw: str) -> SubmissionResponse:
    """Extract the outcome or error text from a Jelly runner result page.

    The markers are checked independently and a later match overrides an
    earlier one, so a script exception wins over script output.
    """
    found: Tuple[ResponseMarker, str] = (ResponseMarker.NONE, '')

    output = _find_jelly_output(raw)
    if output is not None:
        found = (ResponseMarker.JELLY_OUTPUT, output)

    error = _find_script_exception(raw)
    if error is not None:
        found = (ResponseMarker.SCRIPT_EXCEPTION, error)

    marker, text = found
    return SubmissionResponse(marker=marker, text=reformat_html(text))
