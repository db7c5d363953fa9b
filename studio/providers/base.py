"""Abstract base for all generative backends."""

from abc import ABC, abstractmethod

from studio.models import ImageData, ModelResponse


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class AIProvider(ABC):
    """Abstract base for all generative backends."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'gemini', 'openai')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate_structured(
        self,
        system_instruction: str,
        prompt: str,
        image: ImageData | None,
        schema: dict,
    ) -> ModelResponse:
        """Generate a JSON document constrained by ``schema``.

        Args:
            system_instruction: Workshop setup, roles and constraints.
            prompt: The user message text.
            image: Optional image attached to the user message.
            schema: JSON Schema the response must follow.

        Returns:
            ModelResponse whose content is the raw JSON text.

        Raises:
            ProviderError: On API failure, timeout, or empty response.
        """
        ...

    @abstractmethod
    async def generate_image(self, prompt: str) -> ImageData:
        """Render one image for the given prompt.

        Raises:
            ProviderError: On API failure, timeout, or when no image comes back.
        """
        ...
