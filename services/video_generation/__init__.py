"""
Video Generation Service

Turns a prompt (plus optional reference image and rendering options) into a
local video file through Google Veo:
- RequestBuilder: options -> request with technical directives
- VeoClient: start / check status / retrieve against the Gemini API
- JobOrchestrator: submit -> poll -> resolve with progress and cancellation
"""

from .client import (
    RetrievalError,
    VeoClient,
    VideoGenerationService,
    VideoServiceError,
)
from .models import (
    AspectRatio,
    FailureKind,
    GenerationOptions,
    GenerationRequest,
    JobOutcome,
    JobPhase,
    OperationHandle,
    ReferenceImage,
    RemoteFailure,
    Resolution,
)
from .orchestrator import JobOrchestrator, PollRetryPolicy
from .request_builder import InvalidPromptError, build_prompt, build_request, validate_prompt

__all__ = [
    "AspectRatio",
    "FailureKind",
    "GenerationOptions",
    "GenerationRequest",
    "InvalidPromptError",
    "JobOrchestrator",
    "JobOutcome",
    "JobPhase",
    "OperationHandle",
    "PollRetryPolicy",
    "ReferenceImage",
    "RemoteFailure",
    "Resolution",
    "RetrievalError",
    "VeoClient",
    "VideoGenerationService",
    "VideoServiceError",
    "build_prompt",
    "build_request",
    "validate_prompt",
]
