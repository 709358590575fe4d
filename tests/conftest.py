"""Shared fixtures for importer tests."""

from pathlib import Path

import pytest

ORIGINAL_DETAILS = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<bug><summary>Crash on start</summary><owner>café</owner></bug>\n'
)

UPPERCASE_SUMMARY_XSLT = """<?xml version="1.0" encoding="UTF-8"?>
<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:output method="xml" indent="yes" encoding="UTF-8"/>
  <xsl:template match="@*|node()">
    <xsl:copy><xsl:apply-templates select="@*|node()"/></xsl:copy>
  </xsl:template>
  <xsl:template match="summary">
    <SUMMARY><xsl:apply-templates select="@*|node()"/></SUMMARY>
  </xsl:template>
</xsl:stylesheet>
"""


def write_index(root: Path, bugs) -> Path:
    """Write an ``index.xml`` listing ``bugs``.

    ``bugs`` is a list of (id, base, [(file_name, primary), ...]).
    """
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', '<bugs>']
    for bug_id, base, files in bugs:
        lines.append(f'  <bug id="{bug_id}" base="{base}">')
        for file_name, primary in files:
            flag = ' primary="true"' if primary else ''
            lines.append(f'    <file{flag}>{file_name}</file>')
        lines.append('  </bug>')
    lines.append('</bugs>')

    index = root / 'index.xml'
    index.write_text('\n'.join(lines), encoding='utf-8')
    return index


@pytest.fixture
def export_root(tmp_path):
    """Export with one issue: id 100 in 2010/01, primary file details.xml."""
    root = tmp_path / 'export'
    issue_dir = root / '2010' / '01'
    issue_dir.mkdir(parents=True)
    (issue_dir / 'details.xml').write_text(ORIGINAL_DETAILS, encoding='utf-8')
    (issue_dir / 'screenshot.png').write_bytes(b'\x89PNG')
    write_index(
        root, [('100', '2010/01', [('details.xml', True), ('screenshot.png', False)])]
    )
    return root


@pytest.fixture
def stylesheet(tmp_path):
    """Style sheet that renames ``summary`` elements to ``SUMMARY``."""
    path = tmp_path / 'uppercase.xsl'
    path.write_text(UPPERCASE_SUMMARY_XSLT, encoding='utf-8')
    return path
