"""Pipeline engine - main entry point for import, transform and revert runs."""

from typing import List, Optional, Tuple

from ..api.client import JellyRunnerClient, JellyRunnerClientFactory
from ..config.config import Config, RunMode
from ..export.index import read_index
from ..export.lifecycle import FileLifecycleManager
from ..models.credentials import Credentials
from ..models.issue import IssueDescriptor, IssueFileState
from ..transform.charmap import CharacterMap
from ..transform.stylesheet import StyleSheetTransformer
from ..utils.logging import get_logger
from .orchestrator import PipelineOrchestrator, ProgressCallback, RunSummary


class PipelineEngine:
    """Builds the pipeline collaborators from configuration and runs them."""

    def __init__(self, config: Config):
        """Initialize pipeline engine.

        Args:
            config: Importer configuration
        """
        self.config = config
        self.logger = get_logger('PipelineEngine')
        self.lifecycle = FileLifecycleManager()

    @property
    def mode(self) -> RunMode:
        """Operation selected by the configuration."""
        return self.config.run_mode

    def load_character_map(self) -> CharacterMap:
        """Load the configured character map, or the default one."""
        if self.config.export.character_map:
            character_map = CharacterMap.from_file(self.config.export.character_map)
            self.logger.info(
                f'Loaded {len(character_map)} character map entries from '
                f'{self.config.export.character_map}'
            )
            return character_map
        return CharacterMap.default()

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> RunSummary:
        """Execute the configured run.

        Args:
            progress_callback: Called with (current, total, description)

        Returns:
            Run summary
        """
        self.config.check_mode_requirements()
        mode = self.mode

        if mode == RunMode.IMPORT:
            return self._run_import(progress_callback)

        transformer = None
        if mode == RunMode.TRANSFORM:
            transformer = StyleSheetTransformer(
                self.config.export.stylesheet, self.load_character_map()
            )
            self.logger.info(f'XSLT file: {self.config.export.stylesheet}')

        orchestrator = PipelineOrchestrator(
            self.config.export.directory,
            mode,
            lifecycle=self.lifecycle,
            transformer=transformer,
            progress_callback=progress_callback,
        )
        return orchestrator.run()

    def _run_import(self, progress_callback: Optional[ProgressCallback]) -> RunSummary:
        credentials = Credentials(
            username=self.config.jira.username, password=self.config.jira.password
        )
        self.logger.info(f'Jira host: {self.config.jira.url}')

        client: JellyRunnerClient = JellyRunnerClientFactory.create_client(
            self.config.jira, credentials
        )
        try:
            orchestrator = PipelineOrchestrator(
                self.config.export.directory,
                RunMode.IMPORT,
                lifecycle=self.lifecycle,
                token_provider=client,
                submission_client=client,
                credentials=credentials,
                progress_callback=progress_callback,
            )
            return orchestrator.run()
        except Exception as e:
            self.logger.error(f'Import failed: {e}')
            raise
        finally:
            client.close()

    def issue_states(self) -> List[Tuple[IssueDescriptor, IssueFileState]]:
        """List every issue in the export with the state of its file."""
        return [
            (issue, self.lifecycle.state(issue.full_path))
            for issue in read_index(self.config.export.directory)
        ]
