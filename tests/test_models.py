"""Tests for studio/models.py dataclasses."""

import dataclasses

import pytest

from studio.models import AgentRole, Constraints, DebateMessage, ImageData, ModelResponse


def test_agent_role_has_five_members():
    assert len(AgentRole) == 5
    assert AgentRole.CPO.value == "Chief Product Officer"
    assert AgentRole("Market Researcher") is AgentRole.MARKET


def test_constraints_defaults():
    c = Constraints()
    assert c.price_point == "Premium"
    assert c.mode == "quick"
    assert c.purpose == ""


def test_debate_message_is_immutable():
    msg = DebateMessage(AgentRole.UX, "Too heavy.")
    with pytest.raises(dataclasses.FrozenInstanceError):
        msg.content = "Fine."  # type: ignore[misc]


def test_image_data_default_mime():
    assert ImageData(b"x").mime_type == "image/png"


def test_model_response_fields():
    r = ModelResponse(
        provider="gemini",
        model="gemini-3-pro-preview",
        content="{}",
        latency_sec=1.2,
        token_count=None,
    )
    assert r.provider == "gemini"
    assert r.token_count is None


def test_design_result_keeps_transcript_order(sample_result):
    roles = [m.role for m in sample_result.transcript]
    assert roles == [AgentRole.CPO, AgentRole.DESIGN, AgentRole.TECH, AgentRole.CPO, AgentRole.UX]
    assert len(sample_result.solutions) == 2
