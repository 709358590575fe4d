"""Pipeline orchestration and outcome classification."""

from ..config.config import RunMode
from .classification import (
    FILE_ATTACHMENT_MARKER,
    SUCCESS_TEXT_THRESHOLD,
    WORKFLOW_TRANSITION_MARKER,
    classify_diagnostic,
    classify_outcome,
    classify_response,
)
from .orchestrator import PipelineOrchestrator, RunSummary
from .engine import PipelineEngine

__all__ = [
    'RunMode',
    'FILE_ATTACHMENT_MARKER',
    'SUCCESS_TEXT_THRESHOLD',
    'WORKFLOW_TRANSITION_MARKER',
    'classify_diagnostic',
    'classify_outcome',
    'classify_response',
    'PipelineOrchestrator',
    'RunSummary',
    'PipelineEngine',
]
