"""Data models for exported issues and run outcomes."""

from .credentials import Credentials
from .issue import IssueDescriptor, IssueFileState
from .outcome import ImportOutcome, IssueOutcome, OutcomeKind

__all__ = [
    'Credentials',
    'IssueDescriptor',
    'IssueFileState',
    'ImportOutcome',
    'IssueOutcome',
    'OutcomeKind',
]
