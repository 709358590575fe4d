"""Jira BugTrack issue importer

Imports issues exported from BugTrack into Jira through the Jelly runner,
and transforms or reverts the exported issue files with an XSLT style sheet.
"""

__version__ = '0.1.0'
__author__ = 'JBT Importer Team'
__email__ = 'team@example.com'

from .cli import main

__all__ = ['main']
