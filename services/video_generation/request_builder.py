"""
Request Builder - turns user options into a Veo generation request.

Veo takes a single prompt string plus an optional image, so rendering
preferences are appended to the prompt as a "Technical Directives" block.
"""

from .models import (
    AspectRatio,
    GenerationOptions,
    GenerationRequest,
    Resolution,
)

DEFAULT_VIDEO_MODEL = "veo-3.0-generate-preview"

SOUND_ON_DIRECTIVE = "include appropriate sound effects and ambient audio"
SOUND_OFF_DIRECTIVE = "be silent"


class InvalidPromptError(ValueError):
    """Raised when the prompt is empty after trimming whitespace."""


def validate_prompt(prompt: str) -> str:
    """Return the prompt unchanged, or raise InvalidPromptError if blank."""
    if not prompt or not prompt.strip():
        raise InvalidPromptError("Please enter a prompt.")
    return prompt


def build_prompt(
    prompt: str,
    aspect_ratio: AspectRatio,
    resolution: Resolution,
    sound_enabled: bool,
) -> str:
    """Append the technical directives block to the user prompt."""
    sound = SOUND_ON_DIRECTIVE if sound_enabled else SOUND_OFF_DIRECTIVE
    directives = [
        f"- Render the video in {AspectRatio(aspect_ratio).value} aspect ratio.",
        f"- The video should be rendered in high quality, specifically {Resolution(resolution).value}.",
        f"- The video should {sound}.",
    ]
    return f"{prompt}\n\n--- Technical Directives ---\n" + "\n".join(directives)


def build_request(
    options: GenerationOptions,
    model: str = DEFAULT_VIDEO_MODEL,
) -> GenerationRequest:
    """
    Build the request for a single video.

    The reference image, if any, is carried as-is; encoding it for transport
    is the client's job.
    """
    return GenerationRequest(
        model=model,
        prompt=build_prompt(
            options.prompt,
            options.aspect_ratio,
            options.resolution,
            options.sound_enabled,
        ),
        reference_image=options.reference_image,
        video_count=1,
    )
