#!/usr/bin/env python3
"""
VeoStudio - Main Entry Point

Generates a single video with Google Veo and saves it locally.

Usage:
    # Generate a video from a prompt
    python main.py generate --prompt "A neon hologram of a cat driving at top speed"

    # Animate a reference image, vertical, without sound
    python main.py generate --prompt "Waves crashing" --image beach.png --aspect-ratio 9:16 --no-sound

    # Check configuration
    python main.py check-config
"""

import argparse
import asyncio
import logging
import mimetypes
import signal
import sys
from pathlib import Path
from typing import Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("veostudio")


def load_reference_image(path: str):
    """Read an image file once and pair it with its MIME type."""
    from services.video_generation import ReferenceImage

    image_path = Path(path)
    mime_type, _ = mimetypes.guess_type(image_path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Not a recognised image file: {image_path}")
    return ReferenceImage(image_bytes=image_path.read_bytes(), mime_type=mime_type)


async def generate_video(
    prompt: str,
    image_path: Optional[str] = None,
    aspect_ratio: str = "16:9",
    resolution: str = "1080p",
    sound_enabled: bool = True,
    output_dir: Optional[str] = None,
) -> bool:
    """
    Generate one video and report the outcome on stdout.

    Args:
        prompt: What the video should show
        image_path: Optional reference image to animate
        aspect_ratio: "16:9" or "9:16"
        resolution: "720p" or "1080p"
        sound_enabled: Ask for sound effects and ambient audio
        output_dir: Where to save the video (defaults to config)

    Returns:
        True if a video was saved
    """
    from core.config import get_config
    from services.video_generation import (
        AspectRatio,
        GenerationOptions,
        JobOrchestrator,
        Resolution,
        VeoClient,
    )

    config = get_config()
    if output_dir:
        config.storage.output_dir = output_dir

    reference_image = load_reference_image(image_path) if image_path else None
    options = GenerationOptions(
        prompt=prompt,
        reference_image=reference_image,
        aspect_ratio=AspectRatio(aspect_ratio),
        resolution=Resolution(resolution),
        sound_enabled=sound_enabled,
    )

    # Ctrl+C abandons the job locally; the remote operation is left alone
    stop_event = asyncio.Event()

    def handle_signal():
        logger.info("Cancelling video generation...")
        stop_event.set()

    loop = asyncio.get_event_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    logger.info(f"Prompt: {prompt[:50]}...")
    logger.info(f"Aspect ratio: {aspect_ratio}, resolution: {resolution}, sound: {sound_enabled}")

    try:
        async with VeoClient(
            api_key=config.api.google_api_key,
            download_timeout=config.storage.download_timeout_seconds,
        ) as client:
            orchestrator = JobOrchestrator.from_config(client, config)
            outcome = await orchestrator.run(
                options,
                on_progress=lambda message: print(f"  {message}"),
                cancel_event=stop_event,
            )
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)

    print(outcome.describe())
    return outcome.succeeded


def check_config() -> bool:
    """Print configuration issues; True when there are none."""
    from core.config import get_config

    config = get_config()
    issues = config.validate()

    print(f"Model: {config.models.video_model}")
    print(f"Poll interval: {config.polling.poll_interval_seconds}s")
    print(f"Output directory: {config.storage.output_dir}")

    if not issues:
        print("Configuration OK")
        return True

    for issue in issues:
        print(f"  - {issue}")
    return False


def main():
    parser = argparse.ArgumentParser(
        description="VeoStudio - Google Veo video generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Generate a video
    python main.py generate --prompt "A neon hologram of a cat driving at top speed"

    # Vertical 720p video from a reference image
    python main.py generate -p "Slow zoom on the mountain" -i mountain.jpg --aspect-ratio 9:16 --resolution 720p

    # Check configuration
    python main.py check-config
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate a video")
    gen_parser.add_argument("--prompt", "-p", required=True, help="Video prompt")
    gen_parser.add_argument("--image", "-i", help="Reference image file")
    gen_parser.add_argument(
        "--aspect-ratio",
        choices=["16:9", "9:16"],
        default="16:9",
        help="Output aspect ratio",
    )
    gen_parser.add_argument(
        "--resolution",
        choices=["720p", "1080p"],
        default="1080p",
        help="Output resolution",
    )
    gen_parser.add_argument("--no-sound", action="store_true", help="Generate a silent video")
    gen_parser.add_argument("--output-dir", "-o", help="Output directory")

    # Config command
    subparsers.add_parser("check-config", help="Validate configuration")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "generate":
        try:
            ok = asyncio.run(
                generate_video(
                    prompt=args.prompt,
                    image_path=args.image,
                    aspect_ratio=args.aspect_ratio,
                    resolution=args.resolution,
                    sound_enabled=not args.no_sound,
                    output_dir=args.output_dir,
                )
            )
        except (OSError, ValueError) as e:
            print(f"Generation Failed: {e}")
            sys.exit(1)
        sys.exit(0 if ok else 1)

    elif args.command == "check-config":
        sys.exit(0 if check_config() else 1)


if __name__ == "__main__":
    main()
