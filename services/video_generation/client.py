"""
Veo Video Generation Client

Thin adapter over the Gemini API exposing the three remote capabilities the
orchestrator needs:
- start_generation: submit a request, get a long-running operation back
- check_status: refresh an operation
- retrieve: authenticated download of the finished video

Operations are returned as OperationHandle objects whose token is the SDK's
own operation object, so it can be passed back to the SDK unchanged.
"""

import logging
from typing import Any, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .models import GenerationRequest, OperationHandle, RemoteFailure

logger = logging.getLogger(__name__)


class VideoServiceError(Exception):
    """Raised when a call to the video generation service fails."""

    def __init__(self, message: str, error_code: Optional[int] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class RetrievalError(VideoServiceError):
    """Raised when the finished video cannot be downloaded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, error_code=status_code)


class VideoGenerationService(Protocol):
    """
    Remote capabilities consumed by JobOrchestrator.

    Implementations report failures as VideoServiceError (RetrievalError for
    retrieve); JobOrchestrator still classifies anything else they raise.
    """

    async def start_generation(self, request: GenerationRequest) -> OperationHandle:
        ...

    async def check_status(self, handle: OperationHandle) -> OperationHandle:
        ...

    async def retrieve(self, uri: str, credential: str) -> bytes:
        ...


def operation_to_handle(operation: Any) -> OperationHandle:
    """Read the fields the orchestrator cares about off an SDK operation."""
    failure = None
    error = getattr(operation, "error", None)
    if error:
        failure = RemoteFailure(
            message=error.get("message") or "Unknown error",
            code=error.get("code"),
        )

    video_uri = None
    response = getattr(operation, "response", None)
    generated = getattr(response, "generated_videos", None) if response else None
    if generated:
        video = generated[0].video
        video_uri = video.uri if video else None

    return OperationHandle(
        token=operation,
        done=bool(getattr(operation, "done", False)),
        video_uri=video_uri,
        failure=failure,
    )


class VeoClient:
    """
    Client for Veo video generation through the Gemini API.

    Usage:
        async with VeoClient(api_key) as client:
            handle = await client.start_generation(request)
            handle = await client.check_status(handle)
            data = await client.retrieve(handle.video_uri, api_key)
    """

    def __init__(
        self,
        api_key: str,
        download_timeout: float = 300.0,
        genai_client: Optional[genai.Client] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Gemini API key
            download_timeout: Seconds allowed for the video download
            genai_client: Optional pre-built SDK client (tests)
            http_client: Optional pre-built HTTP client for downloads (tests)
        """
        self._api_key = api_key
        self._genai = genai_client
        self._download_timeout = download_timeout
        self._http_client = http_client

    def _get_genai(self) -> genai.Client:
        """Get or create the SDK client (the SDK rejects a missing key on creation)."""
        if self._genai is None:
            self._genai = genai.Client(api_key=self._api_key)
        return self._genai

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client used for downloads."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._download_timeout,
                follow_redirects=True,
            )
        return self._http_client

    async def close(self):
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "VeoClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def start_generation(self, request: GenerationRequest) -> OperationHandle:
        """Submit a generation request and return the new operation."""
        image = None
        if request.reference_image is not None:
            image = types.Image(
                image_bytes=request.reference_image.image_bytes,
                mime_type=request.reference_image.mime_type,
            )

        logger.info(
            f"Veo request: model={request.model}, "
            f"image={'yes' if image else 'no'}, prompt={request.prompt[:50]}..."
        )

        try:
            operation = await self._get_genai().aio.models.generate_videos(
                model=request.model,
                prompt=request.prompt,
                image=image,
                config=types.GenerateVideosConfig(number_of_videos=request.video_count),
            )
        except genai_errors.APIError as e:
            raise VideoServiceError(e.message or str(e), error_code=e.code) from e
        except httpx.TimeoutException as e:
            raise VideoServiceError(f"Veo API timeout: {type(e).__name__}") from e
        except httpx.RequestError as e:
            raise VideoServiceError(f"Veo API request failed: {type(e).__name__}: {e}") from e
        except Exception as e:
            raise VideoServiceError(f"Veo API unexpected error: {type(e).__name__}: {e}") from e

        logger.info(f"Veo operation created: {getattr(operation, 'name', None)}")
        return operation_to_handle(operation)

    async def check_status(self, handle: OperationHandle) -> OperationHandle:
        """Refresh an operation previously returned by this client."""
        try:
            operation = await self._get_genai().aio.operations.get(handle.token)
        except genai_errors.APIError as e:
            raise VideoServiceError(e.message or str(e), error_code=e.code) from e
        except httpx.TimeoutException as e:
            raise VideoServiceError(f"Veo poll timeout: {type(e).__name__}") from e
        except httpx.RequestError as e:
            raise VideoServiceError(f"Veo poll failed: {type(e).__name__}: {e}") from e
        except Exception as e:
            raise VideoServiceError(f"Veo poll unexpected error: {type(e).__name__}: {e}") from e

        return operation_to_handle(operation)

    async def retrieve(self, uri: str, credential: str) -> bytes:
        """Download the video at `uri`, authenticating with the API key."""
        client = await self._get_http_client()

        try:
            # The key travels as a query parameter, merged with any existing query
            response = await client.get(uri, params={"key": credential})
        except httpx.TimeoutException as e:
            raise RetrievalError(f"Video download timed out: {type(e).__name__}") from e
        except httpx.RequestError as e:
            raise RetrievalError(f"Video download failed: {type(e).__name__}: {e}") from e
        except Exception as e:
            raise RetrievalError(f"Video download error: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise RetrievalError(
                f"Failed to download video file: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        logger.info(f"Video downloaded ({len(response.content) / 1024 / 1024:.1f} MB)")
        return response.content
