"""Jira Jelly runner protocol."""

from .client import (
    JellyRunnerClient,
    JellyRunnerClientFactory,
    SubmissionClient,
    TokenProvider,
)
from .response import (
    ResponseMarker,
    SubmissionResponse,
    extract_token,
    parse_submission_response,
    reformat_html,
)

__all__ = [
    'JellyRunnerClient',
    'JellyRunnerClientFactory',
    'SubmissionClient',
    'TokenProvider',
    'ResponseMarker',
    'SubmissionResponse',
    'extract_token',
    'parse_submission_response',
    'reformat_html',
]
