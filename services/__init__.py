"""
VeoStudio Services

Core services for the video generation pipeline:
- video_generation: request building, Veo client and job orchestration
"""

from .video_generation import (
    GenerationOptions,
    JobOrchestrator,
    JobOutcome,
    VeoClient,
)

__all__ = [
    "GenerationOptions",
    "JobOrchestrator",
    "JobOutcome",
    "VeoClient",
]
