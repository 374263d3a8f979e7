"""Models, resolutions and durations offered by the CLI"""
from dataclasses import dataclass
from typing import Tuple

ALLOWED_DURATIONS: Tuple[int, ...] = (4, 8, 12)
DEFAULT_DURATION = 4


@dataclass(frozen=True)
class ResolutionOption:
    label: str
    value: str


@dataclass(frozen=True)
class ModelOption:
    name: str
    rate_per_second: float
    resolutions: Tuple[ResolutionOption, ...]

    def estimate_cost(self, seconds: int) -> float:
        """Estimated price in USD for a clip of the given length."""
        return self.rate_per_second * seconds


PORTRAIT_720 = ResolutionOption("Portrait (720x1280)", "720x1280")
LANDSCAPE_720 = ResolutionOption("Landscape (1280x720)", "1280x720")

MODEL_OPTIONS: Tuple[ModelOption, ...] = (
    ModelOption(
        name="sora-2",
        rate_per_second=0.10,
        resolutions=(PORTRAIT_720, LANDSCAPE_720),
    ),
    ModelOption(
        name="sora-2-pro",
        rate_per_second=0.30,
        resolutions=(
            PORTRAIT_720,
            LANDSCAPE_720,
            ResolutionOption("Portrait (1024x1792)", "1024x1792"),
            ResolutionOption("Landscape (1792x1024)", "1792x1024"),
        ),
    ),
)
