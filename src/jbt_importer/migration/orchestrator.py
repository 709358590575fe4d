"""Pipeline orchestrator driving import, transform and revert runs."""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..api.client import SubmissionClient, TokenProvider
from ..config.config import RunMode
from ..exceptions import (
    AuthenticationError,
    ConfigurationError,
    JBTImporterError,
    RemoteImportError,
)
from ..export.index import read_index
from ..export.lifecycle import FileLifecycleManager
from ..models.credentials import Credentials
from ..models.issue import IssueDescriptor
from ..models.outcome import IssueOutcome, OutcomeKind
from ..transform.stylesheet import StyleSheetTransformer
from ..utils.logging import get_logger
from .classification import classify_response

ProgressCallback = Callable[[int, int, str], None]


class RunSummary(BaseModel):
    """Summary of one pipeline run."""

    mode: RunMode = Field(..., description='Operation performed')
    started_at: datetime = Field(..., description='Run start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Run completion time'
    )
    outcomes: List[IssueOutcome] = Field(
        default_factory=list, description='Per-issue outcomes in manifest order'
    )

    @property
    def total(self) -> int:
        """Number of issues processed."""
        return len(self.outcomes)

    @property
    def successful(self) -> int:
        """Number of issues processed cleanly."""
        return self.count(OutcomeKind.SUCCESS)

    @property
    def failed(self) -> int:
        """Number of issues in any error bucket."""
        return self.total - self.successful

    def count(self, kind: OutcomeKind) -> int:
        """Number of issues in one bucket."""
        return sum(1 for outcome in self.outcomes if outcome.kind == kind)

    def issue_ids(self, kind: OutcomeKind) -> List[str]:
        """Ids of the issues in one bucket."""
        return [outcome.issue_id for outcome in self.outcomes if outcome.kind == kind]

    @property
    def counts(self) -> Dict[OutcomeKind, int]:
        """Issue count for every bucket."""
        return {kind: self.count(kind) for kind in OutcomeKind}

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


class PipelineOrchestrator:
    """Runs one operation over every issue in an export, one at a time.

    Only a failure to load the index or to obtain a security token stops a
    run; any other error is recorded against the issue and processing moves
    on to the next one.
    """

    def __init__(
        self,
        export_root: Union[str, Path],
        mode: RunMode,
        lifecycle: Optional[FileLifecycleManager] = None,
        transformer: Optional[StyleSheetTransformer] = None,
        token_provider: Optional[TokenProvider] = None,
        submission_client: Optional[SubmissionClient] = None,
        credentials: Optional[Credentials] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize pipeline orchestrator.

        Args:
            export_root: Export directory containing ``index.xml``
            mode: Operation to perform
            lifecycle: File lifecycle manager
            transformer: Style sheet transformer, required for TRANSFORM
            token_provider: Token source, required for IMPORT
            submission_client: Script submitter, required for IMPORT
            credentials: Jira credentials, required for IMPORT
            progress_callback: Called with (current, total, description)
        """
        self.export_root = export_root
        self.mode = RunMode(mode)
        self.lifecycle = lifecycle or FileLifecycleManager()
        self.transformer = transformer
        self.token_provider = token_provider
        self.submission_client = submission_client
        self.credentials = credentials
        self.progress_callback = progress_callback
        self.logger = get_logger('PipelineOrchestrator')

        self._token = ''
        self._check_collaborators()

    def _check_collaborators(self) -> None:
        if self.mode == RunMode.TRANSFORM and self.transformer is None:
            raise ConfigurationError('A transform run needs a style sheet transformer')
        if self.mode == RunMode.IMPORT and (
            self.token_provider is None
            or self.submission_client is None
            or self.credentials is None
        ):
            raise ConfigurationError(
                'An import run needs a token provider, a submission client '
                'and credentials'
            )

    def run(self) -> RunSummary:
        """Process every issue in the export.

        Returns:
            Run summary with one outcome per issue

        Raises:
            ManifestError: If the export index cannot be loaded
            AuthenticationError: If no security token is available
            TransportError: If the token request fails
        """
        started_at = datetime.now()
        self.logger.info(f'Starting {self.mode.value} run on {self.export_root}')

        issues = read_index(self.export_root)

        if self.mode == RunMode.IMPORT:
            self._token = self._obtain_token()

        outcomes = []
        total = len(issues)
        for position, issue in enumerate(issues, start=1):
            self._report_progress(position - 1, total, f'Issue {issue.id}')
            outcomes.append(self.process_issue(issue))
        self._report_progress(total, total, 'Done')

        summary = RunSummary(
            mode=self.mode,
            started_at=started_at,
            completed_at=datetime.now(),
            outcomes=outcomes,
        )
        self.logger.info(
            f'{self.mode.value.capitalize()} complete: '
            f'{summary.successful} clean, {summary.failed} with errors'
        )
        return summary

    def process_issue(self, issue: IssueDescriptor) -> IssueOutcome:
        """Run the configured operation on one issue and record its outcome."""
        self.logger.info(f'Processing issue {issue.id}: {issue.full_path}')

        handlers = {
            RunMode.IMPORT: self._import_issue,
            RunMode.TRANSFORM: self._transform_issue,
            RunMode.REVERT: self._revert_issue,
        }

        try:
            return handlers[self.mode](issue)
        except RemoteImportError as e:
            self.logger.warning(f'Issue {issue.id} imported with errors: {e.diagnostic}')
            return IssueOutcome(
                issue_id=issue.id,
                kind=e.kind,
                path=issue.full_path,
                diagnostic=e.diagnostic,
            )
        except JBTImporterError as e:
            self.logger.error(f'Error processing issue {issue.id}: {e}')
            return IssueOutcome(
                issue_id=issue.id,
                kind=OutcomeKind.OTHER_ERROR,
                path=issue.full_path,
                diagnostic=str(e),
            )

    def _obtain_token(self) -> str:
        token = self.token_provider.obtain_token(self.credentials)
        if not token:
            raise AuthenticationError('The security token is not valid')
        return token

    def _import_issue(self, issue: IssueDescriptor) -> IssueOutcome:
        xml_data = self.lifecycle.load(issue.full_path)
        if not xml_data.strip():
            raise RemoteImportError(
                'The file was empty',
                kind=OutcomeKind.OTHER_ERROR,
                diagnostic='The file was empty',
                issue_id=issue.id,
            )

        response = self.submission_client.submit(
            self._token, self.credentials, xml_data
        )
        kind, diagnostic = classify_response(response)
        if kind != OutcomeKind.SUCCESS:
            raise RemoteImportError(
                f'Jira reported a problem importing issue {issue.id}',
                kind=kind,
                diagnostic=diagnostic,
                issue_id=issue.id,
            )

        return IssueOutcome(
            issue_id=issue.id,
            kind=OutcomeKind.SUCCESS,
            path=issue.full_path,
            note=response.text or None,
        )

    def _transform_issue(self, issue: IssueDescriptor) -> IssueOutcome:
        backup = self.lifecycle.apply_transform(issue.full_path, self.transformer)
        return IssueOutcome(
            issue_id=issue.id,
            kind=OutcomeKind.SUCCESS,
            path=issue.full_path,
            note=f'Original kept in {backup}',
        )

    def _revert_issue(self, issue: IssueDescriptor) -> IssueOutcome:
        restored = self.lifecycle.revert(issue.full_path)
        return IssueOutcome(
            issue_id=issue.id,
            kind=OutcomeKind.SUCCESS,
            path=issue.full_path,
            note='Original restored' if restored else 'No backup to restore',
        )

    def _report_progress(self, current: int, total: int, description: str) -> None:
        if self.progress_callback is not None:
            self.progress_callback(current, total, description)
