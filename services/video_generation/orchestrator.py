"""
Job Orchestrator - drives one Veo generation job to a terminal outcome.

Lifecycle:
    SUBMITTING -> POLLING -> RESOLVING -> SUCCEEDED | FAILED

Every expected failure is classified into a JobOutcome instead of being
raised. Cancellation is observed before each remote call, while each remote
call is in flight and during every polling delay.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

import aiofiles
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from core.config import PLACEHOLDER_API_KEY, Config, get_config

from .client import VideoGenerationService, VideoServiceError
from .models import (
    FailureKind,
    GenerationOptions,
    GenerationRequest,
    JobOutcome,
    JobPhase,
    OperationHandle,
)
from .request_builder import (
    DEFAULT_VIDEO_MODEL,
    InvalidPromptError,
    build_request,
    validate_prompt,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

SUBMIT_MESSAGE = "Initiating generation..."
DOWNLOAD_MESSAGE = "Downloading generated video..."

# Cosmetic only, shown while waiting on the remote operation
POLLING_MESSAGES = [
    "Warming up the VEO engine...",
    "Composing your visual story...",
    "Rendering pixels into motion...",
    "This can take a few minutes, please be patient.",
    "Analyzing your creative prompt...",
    "Gathering visual elements...",
    "The final result will be worth the wait!",
    "Stitching frames together...",
]


class JobCancelled(Exception):
    """Raised internally when the caller's cancellation event is set."""


@dataclass
class PollRetryPolicy:
    """
    Retry policy for transient status-check errors.

    max_attempts=1 means the first polling error ends the job.
    """
    max_attempts: int = 1
    wait_seconds: float = 2.0


class _ProgressReporter:
    def __init__(self, callback: Optional[ProgressCallback]):
        self._callback = callback

    def emit(self, message: str):
        """Emit progress update via callback."""
        if self._callback:
            try:
                self._callback(message)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")


def _drain(task: "asyncio.Future[Any]"):
    # Abandoned calls may still fail; retrieve the error so it is not reported as lost
    if not task.cancelled():
        task.exception()


class JobOrchestrator:
    """
    Runs submit -> poll -> resolve for one generation request at a time.

    Usage:
        async with VeoClient(api_key) as client:
            orchestrator = JobOrchestrator(client, access_token=api_key)
            outcome = await orchestrator.run(
                GenerationOptions(prompt="A neon hologram of a cat driving"),
                on_progress=print,
                cancel_event=stop_event,
            )

    Each run() is independent; nothing about a job is kept on the instance.
    """

    def __init__(
        self,
        service: VideoGenerationService,
        access_token: Optional[str],
        poll_interval: float = 10.0,
        output_dir: Union[str, Path] = "output",
        poll_retry: Optional[PollRetryPolicy] = None,
        model: str = DEFAULT_VIDEO_MODEL,
    ):
        self.service = service
        self.access_token = access_token
        self.poll_interval = poll_interval
        self.output_dir = Path(output_dir)
        self.poll_retry = poll_retry or PollRetryPolicy()
        self.model = model

    @classmethod
    def from_config(
        cls,
        service: VideoGenerationService,
        config: Optional[Config] = None,
    ) -> "JobOrchestrator":
        """Build an orchestrator from the environment configuration."""
        config = config or get_config()
        return cls(
            service=service,
            access_token=config.api.google_api_key,
            poll_interval=config.polling.poll_interval_seconds,
            output_dir=config.storage.output_dir,
            poll_retry=PollRetryPolicy(
                max_attempts=config.polling.max_poll_attempts,
                wait_seconds=config.polling.retry_wait_seconds,
            ),
            model=config.models.video_model,
        )

    async def run(
        self,
        job: Union[GenerationOptions, GenerationRequest],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> JobOutcome:
        """
        Run a generation job to completion.

        Args:
            job: Raw options (validated and built here) or a prebuilt request
            on_progress: Called with human-readable status messages
            cancel_event: Set by the caller to abandon the job

        Returns:
            JobOutcome, exactly once
        """
        cancel_event = cancel_event or asyncio.Event()
        progress = _ProgressReporter(on_progress)

        try:
            outcome = await self._run(job, progress, cancel_event)
        except JobCancelled:
            outcome = JobOutcome.failure(
                FailureKind.CANCELLED,
                "Video generation was cancelled.",
            )

        if outcome.succeeded:
            logger.info(f"Job {JobPhase.SUCCEEDED.value}: {outcome.video_path}")
        else:
            logger.warning(
                f"Job {JobPhase.FAILED.value} [{outcome.failure_kind.value}]: "
                f"{outcome.error_message}"
            )
        return outcome

    async def _run(
        self,
        job: Union[GenerationOptions, GenerationRequest],
        progress: _ProgressReporter,
        cancel_event: asyncio.Event,
    ) -> JobOutcome:
        if isinstance(job, GenerationOptions):
            try:
                validate_prompt(job.prompt)
            except InvalidPromptError as e:
                return JobOutcome.failure(FailureKind.VALIDATION_FAILED, str(e))
            request = build_request(job, model=self.model)
        else:
            request = job

        token = (self.access_token or "").strip()
        if not token or token == PLACEHOLDER_API_KEY:
            return JobOutcome.failure(
                FailureKind.CONFIGURATION_MISSING,
                "API Key is not configured. Please set the GOOGLE_API_KEY environment variable.",
            )

        # SUBMITTING
        logger.info(f"Phase: {JobPhase.SUBMITTING.value}")
        progress.emit(SUBMIT_MESSAGE)
        try:
            handle = await self._cancellable(
                self.service.start_generation(request), cancel_event
            )
        except VideoServiceError as e:
            return JobOutcome.failure(
                FailureKind.SUBMISSION_FAILED, e.message, e.error_code
            )
        except JobCancelled:
            raise
        except Exception as e:
            return JobOutcome.failure(
                FailureKind.SUBMISSION_FAILED, f"{type(e).__name__}: {e}"
            )

        if handle.done and handle.failure:
            return JobOutcome.failure(
                FailureKind.SUBMISSION_FAILED,
                handle.failure.message,
                handle.failure.code,
            )

        # POLLING
        try:
            handle = await self._poll_until_done(handle, progress, cancel_event)
        except VideoServiceError as e:
            return JobOutcome.failure(
                FailureKind.POLLING_FAILED, e.message, e.error_code
            )
        except JobCancelled:
            raise
        except Exception as e:
            return JobOutcome.failure(
                FailureKind.POLLING_FAILED, f"{type(e).__name__}: {e}"
            )

        # RESOLVING
        return await self._resolve(handle, token, progress, cancel_event)

    async def _poll_until_done(
        self,
        handle: OperationHandle,
        progress: _ProgressReporter,
        cancel_event: asyncio.Event,
    ) -> OperationHandle:
        if not handle.done:
            logger.info(f"Phase: {JobPhase.POLLING.value} (every {self.poll_interval}s)")

        polls = 0
        while not handle.done:
            progress.emit(POLLING_MESSAGES[polls % len(POLLING_MESSAGES)])
            await self._sleep(self.poll_interval, cancel_event)
            handle = await self._check_status(handle, cancel_event)
            polls += 1
            logger.debug(f"Poll {polls}: done={handle.done}")

        return handle

    async def _check_status(
        self,
        handle: OperationHandle,
        cancel_event: asyncio.Event,
    ) -> OperationHandle:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.poll_retry.max_attempts),
            wait=wait_fixed(self.poll_retry.wait_seconds),
            retry=retry_if_exception_type(VideoServiceError),
            sleep=lambda seconds: self._sleep(seconds, cancel_event),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                refreshed = await self._cancellable(
                    self.service.check_status(handle), cancel_event
                )
        return refreshed

    async def _resolve(
        self,
        handle: OperationHandle,
        token: str,
        progress: _ProgressReporter,
        cancel_event: asyncio.Event,
    ) -> JobOutcome:
        logger.info(f"Phase: {JobPhase.RESOLVING.value}")

        if handle.failure:
            return JobOutcome.failure(
                FailureKind.REMOTE_GENERATION_FAILED,
                handle.failure.message,
                handle.failure.code,
            )

        if not handle.video_uri:
            return JobOutcome.failure(
                FailureKind.EMPTY_RESULT,
                "Video generation finished but returned no downloadable URI.",
            )

        progress.emit(DOWNLOAD_MESSAGE)
        try:
            data = await self._cancellable(
                self.service.retrieve(handle.video_uri, token),
                cancel_event,
            )
        except VideoServiceError as e:
            return JobOutcome.failure(
                FailureKind.DOWNLOAD_FAILED, e.message, e.error_code
            )
        except JobCancelled:
            raise
        except Exception as e:
            return JobOutcome.failure(
                FailureKind.DOWNLOAD_FAILED, f"{type(e).__name__}: {e}"
            )

        try:
            path = await self._save_video(data)
        except OSError as e:
            return JobOutcome.failure(
                FailureKind.DOWNLOAD_FAILED,
                f"Failed to save video file: {e}",
            )

        return JobOutcome.success(path)

    async def _save_video(self, data: bytes) -> Path:
        """Write the downloaded video to a new file in the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"veo_{uuid.uuid4().hex[:8]}.mp4"

        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError:
            # No partial videos left behind
            path.unlink(missing_ok=True)
            raise

        logger.info(f"Video saved: {path} ({len(data) / 1024 / 1024:.1f} MB)")
        return path

    async def _sleep(self, seconds: float, cancel_event: asyncio.Event):
        """Sleep for `seconds`, raising JobCancelled as soon as the event is set."""
        if cancel_event.is_set():
            raise JobCancelled()
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise JobCancelled()

    async def _cancellable(
        self,
        call: Awaitable[Any],
        cancel_event: asyncio.Event,
    ) -> Any:
        """Await a remote call, abandoning it if the event is set first."""
        if cancel_event.is_set():
            if asyncio.iscoroutine(call):
                call.close()
            raise JobCancelled()

        call_task = asyncio.ensure_future(call)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {call_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()
            if not call_task.done():
                call_task.add_done_callback(_drain)
                call_task.cancel()

        if call_task in done:
            return call_task.result()
        raise JobCancelled()
