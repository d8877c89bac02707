"""
Data model for Veo video generation jobs.

Options come from the caller, requests go to the remote service, handles
come back from it and outcomes are returned to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class AspectRatio(str, Enum):
    """Supported output aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Resolution(str, Enum):
    """Supported output resolutions."""
    HD = "720p"
    FULL_HD = "1080p"


class JobPhase(str, Enum):
    """Lifecycle phase of a generation job."""
    SUBMITTING = "submitting"
    POLLING = "polling"
    RESOLVING = "resolving"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Classification of a failed job."""
    VALIDATION_FAILED = "validation_failed"
    CONFIGURATION_MISSING = "configuration_missing"
    SUBMISSION_FAILED = "submission_failed"
    POLLING_FAILED = "polling_failed"
    CANCELLED = "cancelled"
    REMOTE_GENERATION_FAILED = "remote_generation_failed"
    EMPTY_RESULT = "empty_result"
    DOWNLOAD_FAILED = "download_failed"


@dataclass(frozen=True)
class ReferenceImage:
    """Raw image bytes plus their declared MIME type."""
    image_bytes: bytes
    mime_type: str


@dataclass(frozen=True)
class GenerationOptions:
    """What the user asked for."""
    prompt: str
    reference_image: Optional[ReferenceImage] = None
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE
    resolution: Resolution = Resolution.FULL_HD
    sound_enabled: bool = True


@dataclass(frozen=True)
class GenerationRequest:
    """Normalized payload sent to the remote service."""
    model: str
    prompt: str
    reference_image: Optional[ReferenceImage] = None
    video_count: int = 1


@dataclass(frozen=True)
class RemoteFailure:
    """Failure reported by the remote service for a finished operation."""
    message: str
    code: Optional[int] = None


@dataclass(frozen=True)
class OperationHandle:
    """
    A remote long-running operation.

    `token` is whatever the service returned and must be handed back to it
    untouched; only `done`, `video_uri` and `failure` are read locally.
    """
    token: Any
    done: bool = False
    video_uri: Optional[str] = None
    failure: Optional[RemoteFailure] = None


@dataclass(frozen=True)
class JobOutcome:
    """Terminal result of a single orchestrator run."""
    phase: JobPhase
    video_path: Optional[Path] = None
    video_uri: Optional[str] = None
    failure_kind: Optional[FailureKind] = None
    error_message: Optional[str] = None
    error_code: Optional[int] = None

    @classmethod
    def success(cls, video_path: Path) -> "JobOutcome":
        return cls(
            phase=JobPhase.SUCCEEDED,
            video_path=video_path,
            video_uri=video_path.resolve().as_uri(),
        )

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        message: str,
        code: Optional[int] = None,
    ) -> "JobOutcome":
        return cls(
            phase=JobPhase.FAILED,
            failure_kind=kind,
            error_message=message,
            error_code=code,
        )

    @property
    def succeeded(self) -> bool:
        return self.phase == JobPhase.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.phase == JobPhase.FAILED

    def describe(self) -> str:
        """Human-readable summary for display."""
        if self.succeeded:
            return f"Video ready: {self.video_path}"
        return f"Generation Failed: {self.error_message}"
