"""Tests for config/config_loader.py."""

from pathlib import Path

import pytest
import yaml

from config.config_loader import AppConfig, ModelConfig, PlaybackConfig, PromptsConfig, load_config


def _settings(**overrides) -> dict:
    settings = {
        "defaults": {
            "provider": "gemini",
            "output_dir": "./output",
            "price_point": "Mid-range",
            "mode": "deep",
        },
        "playback": {
            "base_delay_sec": 0.5,
            "per_char_sec": 0.01,
            "pause_sec": 0.2,
            "typing_interval_sec": 0,
        },
        "models": {
            "gemini": {
                "sdk": "google-genai",
                "model": "gemini-3-pro-preview",
                "image_model": "gemini-2.5-flash-image",
                "api_key_env": "TEST_GEMINI_KEY",
                "timeout_sec": 120,
                "max_tokens": 8192,
            }
        },
        "prompts": {
            "system": "{rounds}\n{purpose} {brand_tone} {target_audience} {price_point}",
            "user": "User Idea: {idea}",
            "image": "Photo: {visual_prompt}, {brand_tone}",
            "refine": "Optimize the {title}",
            "modes": {"quick": "3 rounds", "deep": "5 rounds"},
        },
    }
    settings.update(overrides)
    return settings


@pytest.fixture
def minimal_settings(tmp_path: Path) -> Path:
    """Write a minimal valid settings.yaml to a temp path."""
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(_settings()), encoding="utf-8")
    return path


def test_load_config_returns_app_config(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config, AppConfig)


def test_load_config_defaults(minimal_settings):
    config = load_config(minimal_settings)
    assert config.defaults.provider == "gemini"
    assert config.defaults.price_point == "Mid-range"
    assert config.defaults.mode == "deep"
    assert isinstance(config.defaults.output_dir, Path)


def test_load_config_models(minimal_settings):
    config = load_config(minimal_settings)
    model = config.models["gemini"]
    assert isinstance(model, ModelConfig)
    assert model.image_model == "gemini-2.5-flash-image"
    assert model.base_url is None
    assert model.aspect_ratio == "16:9"


def test_load_config_prompts(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config.prompts, PromptsConfig)
    assert "{idea}" in config.prompts.user
    assert config.prompts.modes == {"quick": "3 rounds", "deep": "5 rounds"}


def test_load_config_playback(minimal_settings):
    config = load_config(minimal_settings)
    assert config.playback == PlaybackConfig(
        base_delay_sec=0.5, per_char_sec=0.01, pause_sec=0.2, typing_interval_sec=0.0
    )


def test_load_config_playback_defaults_when_missing(tmp_path: Path):
    settings = _settings()
    del settings["playback"]
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    assert load_config(path).playback == PlaybackConfig()


def test_load_config_rejects_negative_delay(tmp_path: Path):
    settings = _settings(playback={"pause_sec": -1})
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    with pytest.raises(ValueError, match="pause_sec"):
        load_config(path)


def test_load_config_available_providers_with_key(minimal_settings, monkeypatch):
    monkeypatch.setenv("TEST_GEMINI_KEY", "test-key")
    config = load_config(minimal_settings)
    assert "gemini" in config.available_providers


def test_load_config_no_available_providers_without_key(minimal_settings, monkeypatch):
    monkeypatch.delenv("TEST_GEMINI_KEY", raising=False)
    config = load_config(minimal_settings)
    assert "gemini" not in config.available_providers


def test_load_config_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/settings.yaml"))


def test_bundled_settings_load():
    """The shipped settings.yaml parses and its prompt templates format cleanly."""
    config = load_config()
    assert {"gemini", "openai"} <= set(config.models)
    assert {"quick", "deep"} <= set(config.prompts.modes)
    config.prompts.system.format(
        rounds="r", purpose="p", brand_tone="b", target_audience="t", price_point="$"
    )
    assert "Lamp" in config.prompts.refine.format(title="Lamp")
