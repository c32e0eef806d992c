"""Engine and service settings, read from the environment."""
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DB_PATH = Path(os.environ.get(
    "FAMILYGRAPH_DB_PATH", Path(__file__).resolve().parent.parent / "graph_data"
))
LOG_LEVEL = os.environ.get("FAMILYGRAPH_LOG_LEVEL", "INFO")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


def _require_finite(**values):
    for name, value in values.items():
        if value is None or not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number (got {value!r})")


@dataclass(frozen=True)
class Bounds:
    """Canvas the force layout keeps its nodes inside."""
    width: float = 800.0
    height: float = 600.0

    def __post_init__(self):
        _require_finite(width=self.width, height=self.height)
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas bounds must be positive (got {self.width}x{self.height})")

    @property
    def center(self):
        return self.width / 2.0, self.height / 2.0


@dataclass(frozen=True)
class TreeLayoutSettings:
    row_height: float = 150.0
    spacing: float = 120.0

    def __post_init__(self):
        _require_finite(row_height=self.row_height, spacing=self.spacing)
        if self.row_height <= 0:
            raise ValueError("row_height must be positive")
        if self.spacing <= 0:
            raise ValueError("spacing must be positive")


@dataclass(frozen=True)
class ForceSettings:
    damping: float = 0.9
    repulsion: float = 3000.0
    attraction: float = 0.1
    step_scale: float = 0.1
    spring_length: float = 60.0
    min_distance: float = 1.0
    max_speed: float = 50.0
    inset: float = 60.0
    jitter: float = 100.0
    alpha: float = 1.0
    alpha_decay: float = 0.02
    alpha_min: float = 0.001
    max_iterations: int = 300

    def __post_init__(self):
        _require_finite(
            damping=self.damping, repulsion=self.repulsion,
            attraction=self.attraction, step_scale=self.step_scale,
            spring_length=self.spring_length, min_distance=self.min_distance,
            max_speed=self.max_speed, inset=self.inset, jitter=self.jitter,
            alpha=self.alpha, alpha_decay=self.alpha_decay, alpha_min=self.alpha_min,
        )
        if not 0.0 <= self.damping < 1.0:
            raise ValueError(f"damping must be in [0, 1) (got {self.damping})")
        if self.repulsion < 0 or self.attraction < 0:
            raise ValueError("repulsion and attraction must not be negative")
        if self.step_scale <= 0:
            raise ValueError("step_scale must be positive")
        if self.min_distance < 1.0:
            raise ValueError("min_distance must be at least 1")
        if self.max_speed <= 0:
            raise ValueError("max_speed must be positive")
        if self.inset < 0 or self.jitter < 0 or self.spring_length < 0:
            raise ValueError("inset, jitter and spring_length must not be negative")
        if not 0.0 <= self.alpha_decay < 1.0:
            raise ValueError("alpha_decay must be in [0, 1)")
        if self.max_iterations < 0:
            raise ValueError("max_iterations must not be negative")

    def check_bounds(self, bounds: Bounds) -> None:
        if 2 * self.inset >= min(bounds.width, bounds.height):
            raise ValueError(
                f"inset {self.inset} leaves no room on a {bounds.width}x{bounds.height} canvas"
            )


def load_bounds() -> Bounds:
    return Bounds(
        width=_env_float("FAMILYGRAPH_CANVAS_WIDTH", Bounds.width),
        height=_env_float("FAMILYGRAPH_CANVAS_HEIGHT", Bounds.height),
    )


def load_tree_settings() -> TreeLayoutSettings:
    return TreeLayoutSettings(
        row_height=_env_float("FAMILYGRAPH_ROW_HEIGHT", TreeLayoutSettings.row_height),
        spacing=_env_float("FAMILYGRAPH_SPACING", TreeLayoutSettings.spacing),
    )


def load_force_settings() -> ForceSettings:
    return ForceSettings(
        damping=_env_float("FAMILYGRAPH_DAMPING", ForceSettings.damping),
        repulsion=_env_float("FAMILYGRAPH_REPULSION", ForceSettings.repulsion),
        attraction=_env_float("FAMILYGRAPH_ATTRACTION", ForceSettings.attraction),
        step_scale=_env_float("FAMILYGRAPH_STEP_SCALE", ForceSettings.step_scale),
        max_iterations=_env_int("FAMILYGRAPH_MAX_ITERATIONS", ForceSettings.max_iterations),
    )


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
