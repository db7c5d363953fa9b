"""Pure dataclasses for the Council AI design workshop. No logic, no deps."""

from dataclasses import dataclass
from enum import Enum


class AgentRole(str, Enum):
    CPO = "Chief Product Officer"
    DESIGN = "Senior Industrial Designer"
    TECH = "Technical Director"
    UX = "UX Researcher"
    MARKET = "Market Researcher"


@dataclass
class Constraints:
    purpose: str = ""
    brand_tone: str = ""
    target_audience: str = ""
    price_point: str = "Premium"
    mode: str = "quick"    # "quick" or "deep"


@dataclass(frozen=True)
class ImageData:
    data: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class DebateMessage:
    role: AgentRole
    content: str


@dataclass(frozen=True)
class Evaluation:
    technical_feasibility: float
    market_competitiveness: float
    aesthetics: float
    usability: float
    innovation: float


@dataclass(frozen=True)
class DesignSolution:
    image: ImageData
    title: str
    consensus_summary: str
    evaluation: Evaluation
    highlights: tuple[str, str, str]
    visual_prompt: str = ""


@dataclass(frozen=True)
class DesignResult:
    solutions: tuple[DesignSolution, DesignSolution]
    transcript: tuple[DebateMessage, ...]


@dataclass
class ModelResponse:
    provider: str          # "gemini", "openai"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None
