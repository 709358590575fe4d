"""Classification of Jelly runner results into outcome buckets."""

from typing import Tuple

from ..api.response import ResponseMarker, SubmissionResponse
from ..models.outcome import OutcomeKind

FILE_ATTACHMENT_MARKER = 'Unable to make temporary copy of file'
WORKFLOW_TRANSITION_MARKER = 'that is not a valid workflow transition for the'

# Extracted script output up to this length is treated as a clean run.
SUCCESS_TEXT_THRESHOLD = 30

SCRIPT_EXCEPTION_MESSAGE = 'The Jelly script could not be run'


def classify_diagnostic(text: str) -> OutcomeKind:
    """Map free diagnostic text onto an outcome bucket.

    Empty text is a success; otherwise the known Jira messages select a
    specific bucket and anything else is a generic error.
    """
    if not text:
        return OutcomeKind.SUCCESS
    if FILE_ATTACHMENT_MARKER in text:
        return OutcomeKind.FILE_ATTACHMENT_ERROR
    if WORKFLOW_TRANSITION_MARKER in text:
        return OutcomeKind.WORKFLOW_TRANSITION_ERROR
    return OutcomeKind.OTHER_ERROR


def diagnostic_for(response: SubmissionResponse) -> str:
    """Return the diagnostic text of a submission, empty for a clean run."""
    if response.marker == ResponseMarker.SCRIPT_EXCEPTION:
        return response.text or SCRIPT_EXCEPTION_MESSAGE
    if len(response.text) > SUCCESS_TEXT_THRESHOLD:
        return response.text
    return ''


def classify_response(response: SubmissionResponse) -> Tuple[OutcomeKind, str]:
    """Classify a Jelly runner result page.

    Returns:
        Outcome bucket and the diagnostic text, empty for a clean run
    """
    diagnostic = diagnostic_for(response)
    return classify_diagnostic(diagnostic), diagnostic


def classify_outcome(response: SubmissionResponse) -> OutcomeKind:
    """Outcome bucket of a Jelly runner result page."""
    return classify_response(response)[0]
