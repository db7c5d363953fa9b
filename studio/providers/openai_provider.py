"""OpenAI provider using openai SDK with native async."""

import asyncio
import base64
import logging
import os
import time

from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from studio.models import ImageData, ModelResponse
from studio.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)

# gpt-image sizes closest to each supported aspect ratio
_IMAGE_SIZES = {
    "16:9": "1536x1024",
    "1:1": "1024x1024",
    "9:16": "1024x1536",
}


def _data_url(image: ImageData) -> str:
    encoded = base64.b64encode(image.data).decode("ascii")
    return f"data:{image.mime_type};base64,{encoded}"


class OpenAIProvider(AIProvider):
    """OpenAI provider via openai SDK. Honors base_url for compatible APIs."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate_structured(
        self,
        system_instruction: str,
        prompt: str,
        image: ImageData | None,
        schema: dict,
    ) -> ModelResponse:
        user_content: list[dict] = [{"type": "text", "text": prompt}]
        if image is not None:
            user_content.append({"type": "image_url", "image_url": {"url": _data_url(image)}})

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._config.model,
                    messages=[
                        {"role": "system", "content": system_instruction},
                        {"role": "user", "content": user_content},
                    ],
                    response_format={
                        "type": "json_schema",
                        "json_schema": {"name": "design_result", "schema": schema},
                    },
                    max_completion_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self._config.name, "Empty response content")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        logger.info("OpenAI synthesis: %.2fs, %s tokens", latency, token_count)

        return ModelResponse(
            provider=self._config.name,
            model=self._config.model,
            content=choice.message.content,
            latency_sec=latency,
            token_count=token_count,
        )

    async def generate_image(self, prompt: str) -> ImageData:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.images.generate(
                    model=self._config.image_model,
                    prompt=prompt,
                    size=_IMAGE_SIZES.get(self._config.aspect_ratio, "1024x1024"),
                    n=1,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Image request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"Image API call failed: {exc}") from exc

        latency = time.monotonic() - start

        encoded = response.data[0].b64_json if response.data else None
        if not encoded:
            raise ProviderError(self._config.name, "Model did not return an image")

        logger.info("OpenAI image: %.2fs", latency)
        return ImageData(data=base64.b64decode(encoded), mime_type="image/png")
