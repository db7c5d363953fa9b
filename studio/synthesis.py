"""Synthesis: build the workshop prompt, call the backend, validate, render images."""

import json
import logging
import numbers

from config.config_loader import PromptsConfig
from studio.models import (
    Constraints,
    DebateMessage,
    DesignResult,
    DesignSolution,
    Evaluation,
    ImageData,
)
from studio.providers.base import AIProvider
from studio.roles import resolve_role

logger = logging.getLogger(__name__)

HIGHLIGHT_COUNT = 3
SOLUTION_COUNT = 2

# JSON key -> Evaluation field
_SCORE_FIELDS = {
    "technicalFeasibility": "technical_feasibility",
    "marketCompetitiveness": "market_competitiveness",
    "aesthetics": "aesthetics",
    "usability": "usability",
    "innovation": "innovation",
}

RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "debateHistory": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "role": {"type": "string"},
                    "content": {"type": "string"},
                },
                "required": ["role", "content"],
            },
        },
        "solutions": {
            "type": "array",
            "minItems": SOLUTION_COUNT,
            "maxItems": SOLUTION_COUNT,
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "consensusSummary": {"type": "string"},
                    "highlights": {
                        "type": "array",
                        "items": {"type": "string"},
                        "minItems": HIGHLIGHT_COUNT,
                        "maxItems": HIGHLIGHT_COUNT,
                    },
                    "evaluation": {
                        "type": "object",
                        "properties": {key: {"type": "number"} for key in _SCORE_FIELDS},
                        "required": list(_SCORE_FIELDS),
                    },
                    "refinedVisualPrompt": {"type": "string"},
                },
                "required": ["title", "consensusSummary", "evaluation", "refinedVisualPrompt", "highlights"],
            },
        },
    },
    "required": ["debateHistory", "solutions"],
}


class SynthesisError(Exception):
    """Raised when the backend returns a malformed or partial design result."""


def _require(obj: dict, key: str, where: str):
    if not isinstance(obj, dict) or key not in obj:
        raise SynthesisError(f"{where}: missing field '{key}'")
    return obj[key]


def _require_text(obj: dict, key: str, where: str) -> str:
    value = _require(obj, key, where)
    if not isinstance(value, str) or not value.strip():
        raise SynthesisError(f"{where}: '{key}' must be a non-empty string")
    return value.strip()


def _parse_transcript(raw: object) -> tuple[DebateMessage, ...]:
    if not isinstance(raw, list):
        raise SynthesisError("debateHistory must be a list")
    messages: list[DebateMessage] = []
    for i, entry in enumerate(raw):
        where = f"debateHistory[{i}]"
        role_name = _require_text(entry, "role", where)
        role = resolve_role(role_name)
        if role is None:
            raise SynthesisError(f"{where}: unknown role '{role_name}'")
        messages.append(DebateMessage(role=role, content=_require_text(entry, "content", where)))
    return tuple(messages)


def _parse_evaluation(raw: object, where: str) -> Evaluation:
    scores: dict[str, float] = {}
    for key, field_name in _SCORE_FIELDS.items():
        value = _require(raw, key, where)
        # bool is a numbers.Number subclass; a true/false score is malformed
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise SynthesisError(f"{where}: '{key}' must be a number, got {value!r}")
        if not 0 <= value <= 100:
            raise SynthesisError(f"{where}: '{key}' out of range [0, 100]: {value}")
        scores[field_name] = float(value)
    return Evaluation(**scores)


def _parse_highlights(raw: object, where: str) -> tuple[str, str, str]:
    if not isinstance(raw, list) or len(raw) != HIGHLIGHT_COUNT:
        count = len(raw) if isinstance(raw, list) else "non-list"
        raise SynthesisError(f"{where}: expected exactly {HIGHLIGHT_COUNT} highlights, got {count}")
    if not all(isinstance(h, str) and h.strip() for h in raw):
        raise SynthesisError(f"{where}: highlights must be non-empty strings")
    return tuple(h.strip() for h in raw)  # type: ignore[return-value]


def parse_design_payload(text: str) -> tuple[tuple[DebateMessage, ...], list[dict]]:
    """Validate the structured response.

    Returns:
        (transcript, solution drafts) where each draft holds the parsed
        solution fields plus its visual prompt; images are not attached yet.

    Raises:
        SynthesisError: On invalid JSON or any schema-contract violation.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SynthesisError(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise SynthesisError("Response must be a JSON object")

    transcript = _parse_transcript(_require(payload, "debateHistory", "response"))

    raw_solutions = _require(payload, "solutions", "response")
    if not isinstance(raw_solutions, list) or len(raw_solutions) != SOLUTION_COUNT:
        count = len(raw_solutions) if isinstance(raw_solutions, list) else "non-list"
        raise SynthesisError(f"Expected exactly {SOLUTION_COUNT} solutions, got {count}")

    drafts: list[dict] = []
    for i, raw in enumerate(raw_solutions):
        where = f"solutions[{i}]"
        drafts.append({
            "title": _require_text(raw, "title", where),
            "consensus_summary": _require_text(raw, "consensusSummary", where),
            "evaluation": _parse_evaluation(_require(raw, "evaluation", where), f"{where}.evaluation"),
            "highlights": _parse_highlights(_require(raw, "highlights", where), where),
            "visual_prompt": _require_text(raw, "refinedVisualPrompt", where),
        })
    return transcript, drafts


class SynthesisClient:
    """One opaque call: idea + optional image + constraints -> DesignResult."""

    def __init__(self, provider: AIProvider, prompts: PromptsConfig) -> None:
        self._provider = provider
        self._prompts = prompts

    @property
    def provider(self) -> AIProvider:
        return self._provider

    def build_system_instruction(self, constraints: Constraints) -> str:
        rounds = self._prompts.modes.get(constraints.mode) or self._prompts.modes.get("quick", "")
        return self._prompts.system.format(
            rounds=rounds.strip(),
            purpose=constraints.purpose,
            brand_tone=constraints.brand_tone,
            target_audience=constraints.target_audience,
            price_point=constraints.price_point,
        )

    def build_image_prompt(self, visual_prompt: str, constraints: Constraints) -> str:
        return self._prompts.image.format(visual_prompt=visual_prompt, brand_tone=constraints.brand_tone)

    async def synthesize(
        self,
        prompt: str,
        image: ImageData | None,
        constraints: Constraints,
    ) -> DesignResult:
        """Run the workshop and return the complete result.

        Image generation runs after the debate validates, one solution at a
        time. Any image failure fails the whole call.

        Raises:
            ProviderError: If either backend call fails.
            SynthesisError: If the structured response breaks the contract.
        """
        logger.info(
            "Running synthesis via %s (%s mode, image=%s)",
            self._provider.name(), constraints.mode, image is not None,
        )
        response = await self._provider.generate_structured(
            system_instruction=self.build_system_instruction(constraints),
            prompt=self._prompts.user.format(idea=prompt),
            image=image,
            schema=RESPONSE_SCHEMA,
        )
        transcript, drafts = parse_design_payload(response.content)
        logger.info("Debate synthesized: %d messages, %d solutions", len(transcript), len(drafts))

        solutions: list[DesignSolution] = []
        for draft in drafts:
            rendered = await self._provider.generate_image(
                self.build_image_prompt(draft["visual_prompt"], constraints)
            )
            solutions.append(DesignSolution(image=rendered, **draft))
            logger.debug("Rendered image for '%s' (%d bytes)", draft["title"], len(rendered.data))

        return DesignResult(solutions=(solutions[0], solutions[1]), transcript=transcript)
