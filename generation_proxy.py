"""
Thumbnail Wizard - Generation Proxy
===================================
Turns wizard fields into one request to the OpenAI API and normalizes the
response.

Modes:
    - echo (default): the vision model describes the thumbnail and the face
      image is returned as the result
    - image (IMAGE_GENERATION_ENABLED=true): the description is rendered into
      an actual 1280x720 image with the OpenAI images API and stored in the
      thumbnails bucket

There is no automatic retry: the client is created with max_retries=0 and a
failure surfaces as a single GenerationError.
"""

import base64
import binascii
import io
import uuid
from dataclasses import dataclass, asdict
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI
from PIL import Image

from config import (
    OPENAI_API_KEY,
    OPENAI_VISION_MODEL,
    OPENAI_VISION_MAX_TOKENS,
    OPENAI_IMAGE_DETAIL,
    OPENAI_IMAGE_MODEL,
    OPENAI_IMAGE_SIZE,
    OPENAI_TIMEOUT_SECONDS,
    IMAGE_GENERATION_ENABLED,
    THUMBNAIL_WIDTH,
    THUMBNAIL_HEIGHT,
    THUMBNAILS_BUCKET,
)
from exceptions import GenerationError, StorageError
from prompt_generation import GenerationRequest, build_thumbnail_prompt, build_image_prompt
from storage import StorageBucket, get_bucket
from utils import setup_logger, is_data_uri, decode_data_uri

logger = setup_logger(__name__)


@dataclass
class GenerationResult:
    """Normalized proxy response."""
    result_url: str
    description: str

    def to_dict(self) -> dict:
        return asdict(self)


def create_openai_client() -> AsyncOpenAI:
    """OpenAI client without automatic retries."""
    if not OPENAI_API_KEY:
        raise GenerationError("OpenAI API key not set")

    kwargs = {"api_key": OPENAI_API_KEY, "max_retries": 0}
    if OPENAI_TIMEOUT_SECONDS:
        kwargs["timeout"] = OPENAI_TIMEOUT_SECONDS
    return AsyncOpenAI(**kwargs)


def _api_error_message(error: openai.APIStatusError) -> str:
    body = error.body
    if isinstance(body, dict):
        # Error bodies come either wrapped ({"error": {...}}) or bare
        details = body.get("error", body)
        if isinstance(details, dict) and details.get("message"):
            return details["message"]
    return error.message or "Unknown error"


class GenerationProxy:
    """Stateless handler: one GenerationRequest in, one GenerationResult out."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        image_generation_enabled: bool = IMAGE_GENERATION_ENABLED,
        output_bucket: Optional[StorageBucket] = None,
    ):
        self._client = client
        self.image_generation_enabled = image_generation_enabled
        self._output_bucket = output_bucket

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = create_openai_client()
        return self._client

    @property
    def output_bucket(self) -> StorageBucket:
        if self._output_bucket is None:
            self._output_bucket = get_bucket(THUMBNAILS_BUCKET)
        return self._output_bucket

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Run one generation.

        Raises:
            ValidationError: face image or title missing
            GenerationError: network error, non-2xx response or malformed payload
        """
        request.validate()

        prompt = build_thumbnail_prompt(request)
        logger.info(f"Generating thumbnail for '{request.video_title}' (style: {request.style or 'default'})")
        logger.debug(f"Prompt length: {len(prompt)} chars")

        description = await self._describe(request.face_image, prompt)

        if self.image_generation_enabled:
            result_url = await self._render_image(request, description)
        else:
            result_url = request.face_image

        logger.success(f"Thumbnail generated for '{request.video_title}'")
        return GenerationResult(result_url=result_url, description=description)

    # -------------------------------------------------------------------------
    # Vision call
    # -------------------------------------------------------------------------

    async def _describe(self, face_image: str, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=OPENAI_VISION_MODEL,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {
                                "type": "image_url",
                                "image_url": {"url": face_image, "detail": OPENAI_IMAGE_DETAIL},
                            },
                        ],
                    }
                ],
                max_tokens=OPENAI_VISION_MAX_TOKENS,
            )
        except openai.APIStatusError as e:
            message = _api_error_message(e)
            logger.error(f"OpenAI API error ({e.status_code}): {message}")
            raise GenerationError(f"OpenAI API error: {message}", status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            logger.error(f"OpenAI API unreachable: {e}")
            raise GenerationError("Could not reach the OpenAI API") from e
        except openai.APIError as e:
            logger.error(f"OpenAI API returned an invalid response: {e}")
            raise GenerationError("OpenAI API returned an invalid response") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            logger.error(f"Malformed OpenAI response: {e}")
            raise GenerationError("OpenAI API returned an invalid response") from e

        if not content or not content.strip():
            logger.error("OpenAI response contained no description")
            raise GenerationError("OpenAI API returned an empty description")

        return content.strip()

    # -------------------------------------------------------------------------
    # Image rendering
    # -------------------------------------------------------------------------

    async def _load_face_bytes(self, face_image: str) -> bytes:
        if is_data_uri(face_image):
            try:
                _, data = decode_data_uri(face_image)
            except ValueError as e:
                raise GenerationError(f"Invalid face image: {e}") from e
            return data

        try:
            async with httpx.AsyncClient(timeout=60) as http:
                response = await http.get(face_image)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to download face image: {e}")
            raise GenerationError("Could not download the face image") from e
        return response.content

    async def _render_image(self, request: GenerationRequest, description: str) -> str:
        face_bytes = await self._load_face_bytes(request.face_image)

        # Convert to PNG bytes (required format)
        try:
            img = Image.open(io.BytesIO(face_bytes))
            if max(img.size) > 1024:
                img.thumbnail((1024, 1024))
            face_buffer = io.BytesIO()
            img.save(face_buffer, format="PNG")
            face_buffer.seek(0)
        except OSError as e:
            raise GenerationError(f"Invalid face image: {e}") from e

        logger.info(f"Rendering image with OpenAI ({OPENAI_IMAGE_MODEL})...")
        try:
            response = await self.client.images.edit(
                model=OPENAI_IMAGE_MODEL,
                image=("face.png", face_buffer, "image/png"),
                prompt=build_image_prompt(request, description),
                size=OPENAI_IMAGE_SIZE,
            )
        except openai.APIStatusError as e:
            message = _api_error_message(e)
            logger.error(f"OpenAI image API error ({e.status_code}): {message}")
            raise GenerationError(f"OpenAI API error: {message}", status_code=e.status_code) from e
        except openai.APIError as e:
            logger.error(f"OpenAI image generation failed: {e}")
            raise GenerationError("OpenAI image generation failed") from e

        if not response.data or not response.data[0].b64_json:
            logger.error("No image data in response")
            raise GenerationError("OpenAI API returned no image")

        try:
            img_bytes = base64.b64decode(response.data[0].b64_json, validate=True)

            # Resize to exact thumbnail dimensions
            img = Image.open(io.BytesIO(img_bytes))
            img = img.resize((THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT), Image.Resampling.LANCZOS)
            out = io.BytesIO()
            img.save(out, "PNG")
        except (binascii.Error, ValueError, OSError) as e:
            logger.error(f"Unreadable image in OpenAI response: {e}")
            raise GenerationError("OpenAI API returned an invalid image") from e

        object_name = f"thumbnail-{uuid.uuid4().hex}.png"
        try:
            return await self.output_bucket.upload(object_name, out.getvalue(), "image/png")
        except StorageError as e:
            logger.error(f"Could not store rendered thumbnail: {e}")
            raise GenerationError("Could not store the generated thumbnail") from e
