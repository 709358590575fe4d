"""Per-issue outcome models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OutcomeKind(str, Enum):
    """Summary bucket an issue ends up in."""

    SUCCESS = 'success'
    FILE_ATTACHMENT_ERROR = 'file_attachment_error'
    WORKFLOW_TRANSITION_ERROR = 'workflow_transition_error'
    OTHER_ERROR = 'other_error'


class IssueOutcome(BaseModel):
    """Result of processing one issue in an import, transform or revert run."""

    issue_id: str = Field(..., description='External issue id')
    kind: OutcomeKind = Field(..., description='Outcome bucket')
    path: Optional[str] = Field(default=None, description='Primary file path')
    diagnostic: Optional[str] = Field(
        default=None, description='Diagnostic text for failed issues'
    )
    note: Optional[str] = Field(
        default=None, description='Informational note for successful issues'
    )
    completed_at: datetime = Field(
        default_factory=datetime.now, description='When processing finished'
    )

    @property
    def success(self) -> bool:
        """Whether the issue was processed cleanly."""
        return self.kind == OutcomeKind.SUCCESS

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


# Name used for the outcome of a Jira import submission.
ImportOutcome = IssueOutcome
