"""Issue file lifecycle: original, transformed (with backup) and reverted.

For a primary file ``P`` the manager keeps at most one backup, ``P.old``,
holding the untouched original. Transforms always read from the backup
when one exists, so re-running a transform starts from the original and
never from a previous transform's output. New content is written to
``P.tmp`` first and only renamed into place once the transform has
succeeded.
"""

import os
from pathlib import Path
from typing import Callable, Union

from loguru import logger

from ..exceptions import FileLifecycleError, TransformError
from ..models.issue import IssueFileState

BACKUP_SUFFIX = '.old'
TEMP_SUFFIX = '.tmp'

PathLike = Union[str, Path]
TransformFn = Callable[[Path], bytes]


def backup_path_for(path: PathLike) -> Path:
    """Return the backup location for an issue file."""
    return Path(str(path) + BACKUP_SUFFIX)


def temp_path_for(path: PathLike) -> Path:
    """Return the scratch location used while transforming an issue file."""
    return Path(str(path) + TEMP_SUFFIX)


def _exists(path: PathLike) -> bool:
    """Check whether ``path`` exists.

    Only a missing entry counts as absent. Other stat failures, such as
    EACCES or ENAMETOOLONG, raise FileLifecycleError.
    """
    try:
        os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise FileLifecycleError(f'Error checking {path}: {e}', path=str(path)) from e
    return True


class FileLifecycleManager:
    """Moves issue files between their original and transformed states."""

    def __init__(self):
        self.logger = logger.bind(component='FileLifecycleManager')

    def state(self, path: PathLike) -> IssueFileState:
        """Report the current state of an issue file.

        Args:
            path: Primary file path

        Returns:
            TRANSFORMED if a backup exists, ORIGINAL if only the live file
            exists, MISSING otherwise

        Raises:
            FileLifecycleError: If the file system cannot be queried
        """
        if _exists(backup_path_for(path)):
            return IssueFileState.TRANSFORMED
        if _exists(path):
            return IssueFileState.ORIGINAL
        return IssueFileState.MISSING

    def load(self, path: PathLike) -> str:
        """Read the live issue file as UTF-8 text.

        Raises:
            FileLifecycleError: If the file cannot be read
        """
        try:
            return Path(path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise FileLifecycleError(
                f'Error loading XML from {path}: {e}', path=str(path)
            ) from e

    def apply_transform(self, path: PathLike, transform_fn: TransformFn) -> Path:
        """Transform an issue file in place, keeping the original as a backup.

        Args:
            path: Primary file path
            transform_fn: Called with the source file path, returns the new
                file content

        Returns:
            Path of the backup holding the original content

        Raises:
            TransformError: If the transform fails; no file is modified
            FileLifecycleError: If a filesystem operation fails
        """
        live = Path(path)
        backup = backup_path_for(path)
        temp = temp_path_for(path)

        had_backup = _exists(backup)
        source = backup if had_backup else live
        if not _exists(source):
            raise FileLifecycleError(f'Issue file not found: {live}', path=str(live))

        try:
            content = transform_fn(source)
        except TransformError:
            self._discard(temp)
            raise
        except Exception as e:
            self._discard(temp)
            raise TransformError(f'Error transforming {source}: {e}') from e

        try:
            temp.write_bytes(content)
            if not had_backup:
                os.replace(live, backup)
                self.logger.debug(f'Backed up original to {backup}')
            os.replace(temp, live)
        except OSError as e:
            self._discard(temp)
            raise FileLifecycleError(
                f'Error installing transformed file {live}: {e}', path=str(live)
            ) from e

        return backup

    def revert(self, path: PathLike) -> bool:
        """Restore the original content of an issue file.

        Args:
            path: Primary file path

        Returns:
            True if a backup was restored, False if there was nothing to revert

        Raises:
            FileLifecycleError: If the backup cannot be checked or moved back
                into place
        """
        backup = backup_path_for(path)
        if not _exists(backup):
            return False

        try:
            os.replace(backup, path)
        except OSError as e:
            raise FileLifecycleError(
                f'Error restoring {path} from {backup}: {e}', path=str(path)
            ) from e
        return True

    def _discard(self, temp: Path) -> None:
        try:
            temp.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f'Could not remove temporary file {temp}: {e}')
