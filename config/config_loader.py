"""Load settings.yaml into typed dataclasses. Validates API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    image_model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None
    aspect_ratio: str = "16:9"


@dataclass
class PromptsConfig:
    system: str
    user: str
    image: str
    refine: str
    modes: dict[str, str] = field(default_factory=dict)


@dataclass
class PlaybackConfig:
    """Pacing for the debate replay. All values in seconds."""

    base_delay_sec: float = 0.6
    per_char_sec: float = 0.006
    pause_sec: float = 0.4
    typing_interval_sec: float = 0.012   # 0 disables the typing effect


@dataclass
class DefaultsConfig:
    provider: str
    output_dir: Path
    price_point: str = "Premium"
    mode: str = "quick"


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    available_providers: set[str] = field(default_factory=set)


def _load_playback(raw: dict | None) -> PlaybackConfig:
    playback = PlaybackConfig(**{k: float(v) for k, v in (raw or {}).items()})
    for name, value in vars(playback).items():
        if value < 0:
            raise ValueError(f"playback.{name} must be >= 0, got {value}")
    return playback


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError on a
    negative playback delay.
    Logs missing API keys but does not raise — callers check
    available_providers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        provider=str(defaults_raw["provider"]),
        output_dir=Path(defaults_raw["output_dir"]),
        price_point=str(defaults_raw.get("price_point", "Premium")),
        mode=str(defaults_raw.get("mode", "quick")),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        system=prompts_raw["system"],
        user=prompts_raw["user"],
        image=prompts_raw["image"],
        refine=prompts_raw["refine"],
        modes={k: str(v) for k, v in prompts_raw.get("modes", {}).items()},
    )

    playback = _load_playback(raw.get("playback"))

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            image_model=model_raw["image_model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
            aspect_ratio=str(model_raw.get("aspect_ratio", "16:9")),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s — set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        models=models,
        prompts=prompts,
        playback=playback,
        available_providers=available_providers,
    )
