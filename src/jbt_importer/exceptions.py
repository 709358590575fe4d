"""JBT importer exceptions."""

from typing import Optional


class JBTImporterError(Exception):
    """Base exception for importer errors."""

    def __init__(self, message: str, issue_id: Optional[str] = None):
        """Initialize importer error.

        Args:
            message: Error message
            issue_id: Id of the issue being processed, if any
        """
        super().__init__(message)
        self.message = message
        self.issue_id = issue_id


class ConfigurationError(JBTImporterError):
    """The configuration does not allow the requested run."""

    pass


class ManifestError(JBTImporterError):
    """The export index could not be loaded or parsed."""

    pass


class TransportError(JBTImporterError):
    """Network or HTTP level failure talking to Jira."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        """Initialize transport error.

        Args:
            message: Error message
            status_code: HTTP status code, when a response was received
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.status_code = status_code


class AuthenticationError(JBTImporterError):
    """No usable security token could be obtained."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class FileLifecycleError(JBTImporterError):
    """Local filesystem failure while handling an issue file."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class TransformError(JBTImporterError):
    """The style sheet could not be compiled or applied."""

    pass


class RemoteImportError(JBTImporterError):
    """Jira ran the import script but reported a problem."""

    def __init__(self, message: str, kind, diagnostic: str = '', **kwargs):
        """Initialize remote import error.

        Args:
            message: Error message
            kind: OutcomeKind bucket the failure was classified into
            diagnostic: Text extracted from the Jelly runner response
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.kind = kind
        self.diagnostic = diagnostic
