"""Shared pytest fixtures."""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PlaybackConfig, PromptsConfig
from studio.models import (
    AgentRole,
    Constraints,
    DebateMessage,
    DesignResult,
    DesignSolution,
    Evaluation,
    ImageData,
    ModelResponse,
)
from studio.providers.base import AIProvider

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def design_payload() -> dict:
    """A valid structured response as the backend would return it."""
    return {
        "debateHistory": [
            {"role": "Chief Product Officer", "content": "We need a countertop hero product."},
            {"role": "Senior Industrial Designer", "content": "A stacked modular form in brushed steel."},
            {"role": "Technical Director", "content": "Modules add tooling cost."},
            {"role": "UX Researcher", "content": "Users want one-handed refills."},
            {"role": "Market Researcher", "content": "Competitors ignore small kitchens."},
        ],
        "solutions": [
            {
                "title": "Modular Brew Station",
                "consensusSummary": "Stackable modules with a shared water core.",
                "highlights": ["Modular", "Compact", "Steel"],
                "evaluation": {
                    "technicalFeasibility": 80,
                    "marketCompetitiveness": 70,
                    "aesthetics": 90,
                    "usability": 60,
                    "innovation": 100,
                },
                "refinedVisualPrompt": "stacked brushed steel coffee modules",
            },
            {
                "title": "Pocket Pour Over",
                "consensusSummary": "A folding pour-over cone with a built-in scale.",
                "highlights": ["Portable", "Precise", "Minimal"],
                "evaluation": {
                    "technicalFeasibility": 90,
                    "marketCompetitiveness": 65,
                    "aesthetics": 75,
                    "usability": 85,
                    "innovation": 55.5,
                },
                "refinedVisualPrompt": "folding silicone pour-over cone on a scale",
            },
        ],
    }


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="test",
        model="test-model-1",
        image_model="test-image-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        base_url=None,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        system="{rounds}\nPurpose: {purpose}\nTone: {brand_tone}\nAudience: {target_audience}\nPrice: {price_point}",
        user="User Idea: {idea}",
        image="Studio photo: {visual_prompt}. {brand_tone} aesthetic.",
        refine="Optimize the {title} further based on the feedback provided in the meeting...",
        modes={"quick": "Three rounds.", "deep": "Five rounds with cross-examination."},
    )


@pytest.fixture
def no_delay_playback() -> PlaybackConfig:
    return PlaybackConfig(base_delay_sec=0.6, per_char_sec=0.006, pause_sec=0.4, typing_interval_sec=0)


@pytest.fixture
def sample_app_config(tmp_path: Path, sample_prompts_config: PromptsConfig) -> AppConfig:
    model_cfg = ModelConfig(
        name="gemini",
        sdk="google-genai",
        model="gemini-3-pro-preview",
        image_model="gemini-2.5-flash-image",
        api_key_env="GEMINI_API_KEY",
        timeout_sec=60,
        max_tokens=4096,
    )
    return AppConfig(
        defaults=DefaultsConfig(provider="gemini", output_dir=tmp_path / "output"),
        models={"gemini": model_cfg},
        prompts=sample_prompts_config,
        available_providers={"gemini"},
    )


@pytest.fixture
def sample_constraints() -> Constraints:
    return Constraints(
        purpose="Revolutionize coffee making",
        brand_tone="Minimalist High-Tech",
        target_audience="Gen Z professionals",
    )


@pytest.fixture
def sample_evaluation() -> Evaluation:
    return Evaluation(
        technical_feasibility=80,
        market_competitiveness=70,
        aesthetics=90,
        usability=60,
        innovation=100,
    )


@pytest.fixture
def sample_transcript() -> tuple[DebateMessage, ...]:
    return (
        DebateMessage(AgentRole.CPO, "Opening position."),
        DebateMessage(AgentRole.DESIGN, "Form follows the ritual."),
        DebateMessage(AgentRole.TECH, "That hinge will crack."),
        DebateMessage(AgentRole.CPO, "Then we drop the hinge."),
        DebateMessage(AgentRole.UX, "Users will thank us."),
    )


@pytest.fixture
def sample_result(sample_transcript, sample_evaluation) -> DesignResult:
    first = DesignSolution(
        image=ImageData(PNG_BYTES),
        title="Modular Brew Station",
        consensus_summary="Stackable modules.",
        evaluation=sample_evaluation,
        highlights=("Modular", "Compact", "Steel"),
    )
    second = DesignSolution(
        image=ImageData(b"second-image", "image/jpeg"),
        title="Pocket Pour Over",
        consensus_summary="Folding cone.",
        evaluation=sample_evaluation,
        highlights=("Portable", "Precise", "Minimal"),
    )
    return DesignResult(solutions=(first, second), transcript=sample_transcript)


class RecordingSleep:
    """Stand-in for asyncio.sleep: records each delay and yields once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", payload: dict | None = None) -> None:
        self._name = provider_name
        content = json.dumps(payload if payload is not None else design_payload())
        # Shadow the class methods with AsyncMocks at the instance level.
        # ABC check passes because both are defined in the class body below.
        self.generate_structured = AsyncMock(  # type: ignore[method-assign]
            return_value=ModelResponse(
                provider=provider_name,
                model="mock-model",
                content=content,
                latency_sec=0.1,
                token_count=10,
            )
        )
        self.generate_image = AsyncMock(return_value=ImageData(PNG_BYTES))  # type: ignore[method-assign]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate_structured(self, system_instruction, prompt, image, schema) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return ModelResponse(self._name, "mock-model", json.dumps(design_payload()), 0.1, 10)

    async def generate_image(self, prompt: str) -> ImageData:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return ImageData(PNG_BYTES)


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
