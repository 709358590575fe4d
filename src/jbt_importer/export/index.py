"""Export index reader.

A BugTrack export directory holds an ``index.xml`` manifest::

    <bugs>
      <bug id="100" base="2010/01">
        <file primary="true">details.xml</file>
        <file>screenshot.png</file>
      </bug>
    </bugs>

Every ``file`` element flagged ``primary="true"`` produces one
:class:`IssueDescriptor`; bugs without a primary file are not importable
and are skipped.
"""

from pathlib import Path
from typing import Iterator, List, Union

from loguru import logger
from lxml import etree

from ..exceptions import ManifestError
from ..models.issue import IssueDescriptor

INDEX_FILE_NAME = 'index.xml'
PRIMARY_ATTRIBUTE = 'primary'
PRIMARY_VALUE = 'true'


class ExportIndexReader:
    """Reads the issue list out of an export manifest."""

    def __init__(self, export_root: Union[str, Path]):
        """Initialize index reader.

        Args:
            export_root: Export directory containing ``index.xml``
        """
        self.export_root = str(export_root)
        if self.export_root and not self.export_root.endswith(('/', '\\')):
            self.export_root += '/'
        self.logger = logger.bind(component='ExportIndexReader')

    @property
    def index_path(self) -> Path:
        """Location of the manifest file."""
        return Path(self.export_root + INDEX_FILE_NAME)

    def read(self) -> List[IssueDescriptor]:
        """Parse the manifest into issue descriptors, in document order.

        Returns:
            List of issue descriptors

        Raises:
            ManifestError: If the manifest is missing or is not well-formed XML
        """
        index_path = self.index_path
        try:
            found = index_path.is_file()
        except OSError as e:
            raise ManifestError(f'Error checking {index_path}: {e}') from e
        if not found:
            raise ManifestError(f'Export index not found: {index_path}')

        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            document = etree.parse(str(index_path), parser)
        except etree.XMLSyntaxError as e:
            raise ManifestError(f'Error parsing {index_path}: {e}') from e
        except OSError as e:
            raise ManifestError(f'Error loading {index_path}: {e}') from e

        issues = list(self._iter_descriptors(document))
        self.logger.info(f'Loaded {len(issues)} issues from {index_path}')
        return issues

    def _iter_descriptors(self, document) -> Iterator[IssueDescriptor]:
        for bug in document.iter('bug'):
            bug_id = bug.get('id', '')
            base = bug.get('base', '')

            primary_found = False
            for file_element in bug:
                # Skip comments and processing instructions
                if not isinstance(file_element.tag, str):
                    continue
                if file_element.get(PRIMARY_ATTRIBUTE) != PRIMARY_VALUE:
                    continue

                file_name = (file_element.text or '').strip()
                if not file_name:
                    self.logger.warning(
                        f'Issue {bug_id} has a primary file entry without a name'
                    )
                    continue

                primary_found = True
                yield IssueDescriptor(
                    id=bug_id,
                    base=base,
                    file_name=file_name,
                    export_root=self.export_root,
                )

            if not primary_found:
                self.logger.debug(f'Issue {bug_id} has no primary file, skipping')


def read_index(export_root: Union[str, Path]) -> List[IssueDescriptor]:
    """Read the issue descriptors listed in ``<export_root>/index.xml``."""
    return ExportIndexReader(export_root).read()
