"""Tests for CLI interface."""

import pytest
from unittest.mock import Mock, patch
from click.testing import CliRunner
from loguru import logger

from jbt_importer.api.client import JellyRunnerClient
from jbt_importer.api.response import ResponseMarker, SubmissionResponse
from jbt_importer.cli.main import cli, init
from jbt_importer.config.config import Config
from jbt_importer.migration.classification import FILE_ATTACHMENT_MARKER

from conftest import ORIGINAL_DETAILS

IMPORTER_ENV = [
    'JIRA_URL',
    'JIRA_USERNAME',
    'JIRA_PASSWORD',
    'BUGTRACK_EXPORT_DIR',
    'BUGTRACK_STYLESHEET',
    'BUGTRACK_REVERT',
    'BUGTRACK_CHARACTER_MAP',
    'LOG_LEVEL',
    'LOG_FILE',
]


@pytest.fixture(autouse=True)
def isolated_run(tmp_path, monkeypatch):
    """Run every command from an empty directory with no importer settings."""
    for name in IMPORTER_ENV:
        monkeypatch.delenv(name, raising=False)
    work_dir = tmp_path / 'work'
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    yield work_dir
    logger.remove()


def fake_jira_client(responses):
    """Jelly runner stand-in answering submissions in order."""
    client = Mock(spec=JellyRunnerClient)
    client.obtain_token.return_value = 'tok'
    client.submit.side_effect = [
        SubmissionResponse(marker=ResponseMarker.JELLY_OUTPUT, text=text)
        for text in responses
    ]
    return client


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_cli_help(self):
        """Test CLI help command."""
        result = self.runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert 'Jira BugTrack issue importer' in result.output
        for command in ('init', 'import', 'transform', 'revert', 'status'):
            assert command in result.output

    def test_cli_version(self):
        """Test CLI version command."""
        result = self.runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_init_command(self, tmp_path):
        """Test init command."""
        config_path = tmp_path / 'conf' / 'importer.yaml'

        result = self.runner.invoke(init, ['--output', str(config_path)])

        assert result.exit_code == 0
        assert 'Configuration template created' in result.output
        content = config_path.read_text(encoding='utf-8')
        assert 'jira:' in content
        assert 'export:' in content
        assert 'logging:' in content

    def test_init_command_default_output(self, isolated_run):
        """Test init command with default output."""
        result = self.runner.invoke(init)

        assert result.exit_code == 0
        assert (isolated_run / 'config.yaml').exists()

    def test_transform_and_revert(self, export_root, stylesheet):
        """Test a transform followed by a revert restores the export."""
        details = export_root / '2010' / '01' / 'details.xml'
        backup = export_root / '2010' / '01' / 'details.xml.old'

        result = self.runner.invoke(
            cli, ['transform', '-x', str(stylesheet), '-d', str(export_root)]
        )

        assert result.exit_code == 0, result.output
        assert 'Beginning transformation' in result.output
        assert 'Transform Summary' in result.output
        assert '<SUMMARY>' in details.read_text(encoding='utf-8')
        assert backup.exists()

        result = self.runner.invoke(cli, ['revert', '-d', str(export_root)])

        assert result.exit_code == 0, result.output
        assert 'Reverting transformation' in result.output
        assert details.read_text(encoding='utf-8') == ORIGINAL_DETAILS
        assert not backup.exists()

    def test_import_command(self, tmp_path):
        """Test an import run buckets Jira's answers per issue."""
        root = tmp_path / 'export'
        lines = ['<bugs>']
        for bug_id in ('1', '2'):
            (root / bug_id).mkdir(parents=True)
            (root / bug_id / 'issue.xml').write_text(
                f'<JiraJelly>{bug_id}</JiraJelly>', encoding='utf-8'
            )
            lines.append(
                f'<bug id="{bug_id}" base="{bug_id}">'
                '<file primary="true">issue.xml</file></bug>'
            )
        lines.append('</bugs>')
        (root / 'index.xml').write_text('\n'.join(lines), encoding='utf-8')
        client = fake_jira_client(['', f'{FILE_ATTACHMENT_MARKER} a.png'])

        with patch(
            'jbt_importer.migration.engine.JellyRunnerClientFactory.create_client',
            return_value=client,
        ) as mock_create:
            result = self.runner.invoke(
                cli,
                [
                    'import',
                    '-u',
                    'admin',
                    '-p',
                    'secret',
                    '-h',
                    'http://jira.example.com',
                    '-d',
                    str(root),
                ],
            )

        assert result.exit_code == 0, result.output
        assert 'Imported cleanly' in result.output
        assert 'File attachment errors (1):' in result.output
        jira_config, credentials = mock_create.call_args[0]
        assert jira_config.url == 'http://jira.example.com'
        assert credentials.username == 'admin'
        assert client.obtain_token.call_count == 1
        assert client.submit.call_count == 2
        client.close.assert_called_once()

    def test_import_without_credentials(self, export_root):
        """Test an import run without credentials fails."""
        result = self.runner.invoke(cli, ['import', '-d', str(export_root)])

        assert result.exit_code == 1
        assert 'Import failed' in result.output
        assert 'username' in result.output

    def test_transform_missing_stylesheet(self, export_root, tmp_path):
        """Test a missing style sheet fails the transform run."""
        result = self.runner.invoke(
            cli,
            ['transform', '-x', str(tmp_path / 'missing.xsl'), '-d', str(export_root)],
        )

        assert result.exit_code == 1
        assert 'Transform failed' in result.output

    def test_revert_missing_manifest(self, tmp_path):
        """Test a directory without an index fails the run."""
        result = self.runner.invoke(cli, ['revert', '-d', str(tmp_path)])

        assert result.exit_code == 1
        assert 'Revert failed' in result.output

    def test_unwritable_log_file(self, export_root, tmp_path, monkeypatch):
        """Test a log file that cannot be created fails the run cleanly."""
        blocker = tmp_path / 'not-a-directory'
        blocker.write_text('', encoding='utf-8')
        monkeypatch.setenv('LOG_FILE', str(blocker / 'jbt.log'))

        result = self.runner.invoke(cli, ['revert', '-d', str(export_root)])

        assert result.exit_code == 1
        assert 'Revert failed' in result.output
        assert not isinstance(result.exception, OSError)

        result = self.runner.invoke(cli, ['status', '-d', str(export_root)])

        assert result.exit_code == 1
        assert 'Failed to load status' in result.output

    def test_transform_without_stylesheet(self, export_root):
        """Test transform refuses a configuration without a style sheet."""
        result = self.runner.invoke(cli, ['transform', '-d', str(export_root)])

        assert result.exit_code == 2
        assert 'selects the import mode' in result.output
        assert not (export_root / '2010' / '01' / 'details.xml.old').exists()

    def test_config_file_values(self, export_root, stylesheet, tmp_path):
        """Test settings are read from the configuration file."""
        config_path = tmp_path / 'importer.yaml'
        Config(
            export={'directory': str(export_root), 'stylesheet': str(stylesheet)}
        ).to_file(str(config_path))

        result = self.runner.invoke(cli, ['--config', str(config_path), 'transform'])

        assert result.exit_code == 0, result.output
        assert (export_root / '2010' / '01' / 'details.xml.old').exists()

    def test_status_command(self, export_root, stylesheet):
        """Test status lists every issue with its file state."""
        result = self.runner.invoke(cli, ['status', '-d', str(export_root)])

        assert result.exit_code == 0, result.output
        assert 'Export Status' in result.output
        assert '100' in result.output
        assert 'original' in result.output

        self.runner.invoke(
            cli, ['transform', '-x', str(stylesheet), '-d', str(export_root)]
        )
        result = self.runner.invoke(cli, ['status', '-d', str(export_root)])

        assert 'transformed' in result.output

    def test_status_without_export_dir(self):
        """Test status fails when no export directory is configured."""
        result = self.runner.invoke(cli, ['status'])

        assert result.exit_code == 1
        assert 'Failed to load status' in result.output

    def test_verbose_flag(self):
        """Test verbose flag."""
        result = self.runner.invoke(cli, ['--verbose', '--help'])

        assert result.exit_code == 0


class TestConfigLoading:
    """Test configuration loading functions."""

    def _context(self, obj):
        ctx = Mock()
        ctx.obj = obj
        return ctx

    @patch('jbt_importer.config.config.Config.from_file')
    def test_load_config_with_file(self, mock_from_file):
        """Test loading config from specified file."""
        from jbt_importer.cli.main import _load_config

        mock_config = Mock(spec=Config)
        mock_from_file.return_value = mock_config

        with patch('pathlib.Path.exists', return_value=True):
            config = _load_config(
                self._context({'config_path': '/path/to/config.yaml'}), {}
            )

        assert config == mock_config
        mock_from_file.assert_called_once_with('/path/to/config.yaml', {})

    @patch('jbt_importer.config.config.Config.from_file')
    def test_load_config_default_locations(self, mock_from_file, isolated_run):
        """Test loading config from default locations."""
        from jbt_importer.cli.main import _load_config

        (isolated_run / 'config.yml').write_text('', encoding='utf-8')
        overrides = {'export': {'directory': '/export'}}

        _load_config(self._context({}), overrides)

        mock_from_file.assert_called_once_with('config.yml', overrides)

    @patch('jbt_importer.config.config.Config.from_env')
    def test_load_config_from_env(self, mock_from_env):
        """Test loading config from environment variables."""
        from jbt_importer.cli.main import _load_config

        mock_config = Mock(spec=Config)
        mock_from_env.return_value = mock_config

        config = _load_config(self._context({}), {})

        assert config == mock_config
        mock_from_env.assert_called_once_with({})
