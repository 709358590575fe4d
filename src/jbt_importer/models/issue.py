"""Issue entity models."""

from enum import Enum
from pydantic import BaseModel, Field, validator


class IssueFileState(str, Enum):
    """Physical state of an issue's primary data file.

    A reverted file is indistinguishable from an original one: the backup
    file is the only record that a transform was ever applied.
    """

    ORIGINAL = 'original'
    TRANSFORMED = 'transformed'
    MISSING = 'missing'


class IssueDescriptor(BaseModel):
    """One issue listed in a BugTrack export index."""

    id: str = Field(..., description='External issue id')
    base: str = Field(default='', description='Directory of the issue files')
    file_name: str = Field(..., description='Primary XML file name')
    export_root: str = Field(default='', description='Export root directory')

    @validator('id', 'base', pre=True)
    def validate_text(cls, v):
        """Missing manifest attributes read as empty strings."""
        return v if v is not None else ''

    @validator('export_root')
    def validate_export_root(cls, v):
        """Make sure a non-empty export root ends with a separator."""
        if v and not v.endswith(('/', '\\')):
            return v + '/'
        return v

    @property
    def full_path(self) -> str:
        """Path of the primary XML file, using forward slashes."""
        return (self.export_root + self.base).replace('\\', '/') + '/' + self.file_name

    class Config:
        """Pydantic configuration."""

        frozen = True
