"""
Human-like pointer simulation for roasting.

Produces the mouse movement used to press a challenge widget:
- eased multi-step path (smoothstep) bent along a Bezier curve
- small per-step jitter and randomized step delays
- a short hesitation, then press, hold, release

Separate from stealth.py:
- stealth.py: what the page can read about the browser
- human_behavior.py: how the browser moves
"""

import asyncio
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roasting.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class PointerConfig:
    """Configuration for pointer movement and clicks."""

    # Target jitter around the requested point
    target_jitter: float = 5.0

    # Where the pointer "comes from", relative to the target
    start_offset_x: tuple[float, float] = (-100.0, -50.0)
    start_offset_y: tuple[float, float] = (-50.0, -20.0)

    # Path
    min_steps: int = 5
    max_steps: int = 10
    step_jitter: float = 1.0
    curve_variance: float = 15.0

    # Timing (seconds)
    step_delay: tuple[float, float] = (0.020, 0.050)
    pre_press_pause: tuple[float, float] = (0.100, 0.300)
    hold: tuple[float, float] = (0.050, 0.150)


@dataclass
class Point:
    """2D point."""

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


def smoothstep(t: float) -> float:
    """Ease-in/ease-out curve on [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return t * t * (3 - 2 * t)


# =============================================================================
# Pointer Path
# =============================================================================


class PointerPath:
    """Generates pointer paths ending exactly on the target.

    Positions follow a quadratic Bezier curve whose control point is pushed
    off the straight line; progress along the curve is eased with smoothstep
    so the pointer accelerates then slows down near the target.
    """

    def __init__(self, config: PointerConfig | None = None, rng: random.Random | None = None):
        self._config = config or PointerConfig()
        self._rng = rng or random.Random()

    @property
    def config(self) -> PointerConfig:
        return self._config

    def start_for(self, target: Point) -> Point:
        cfg = self._config
        return Point(
            target.x + self._rng.uniform(*cfg.start_offset_x),
            target.y + self._rng.uniform(*cfg.start_offset_y),
        )

    def generate(self, start: Point, end: Point) -> list[Point]:
        """Generate the intermediate and final positions from start to end.

        Args:
            start: Where the pointer currently is.
            end: Target position.

        Returns:
            Positions to move through; the last one is exactly ``end``.
        """
        cfg = self._config
        steps = self._rng.randint(cfg.min_steps, cfg.max_steps)

        mid = Point((start.x + end.x) / 2, (start.y + end.y) / 2)
        angle = math.atan2(end.y - start.y, end.x - start.x) + math.pi / 2
        offset = self._rng.uniform(-cfg.curve_variance, cfg.curve_variance)
        control = Point(mid.x + offset * math.cos(angle), mid.y + offset * math.sin(angle))

        path: list[Point] = []
        for i in range(1, steps + 1):
            t = smoothstep(i / steps)
            x = (1 - t) ** 2 * start.x + 2 * (1 - t) * t * control.x + t**2 * end.x
            y = (1 - t) ** 2 * start.y + 2 * (1 - t) * t * control.y + t**2 * end.y
            if i < steps:
                x += self._rng.uniform(-cfg.step_jitter, cfg.step_jitter)
                y += self._rng.uniform(-cfg.step_jitter, cfg.step_jitter)
            path.append(Point(x, y))

        path[-1] = Point(end.x, end.y)
        return path


# =============================================================================
# Pointer Simulator
# =============================================================================


class HumanPointer:
    """Moves the Playwright mouse along a human-like path and clicks."""

    def __init__(
        self,
        config: PointerConfig | None = None,
        rng: random.Random | None = None,
        sleep: SleepFn | None = None,
    ):
        self._rng = rng or random.Random()
        self._path = PointerPath(config, self._rng)
        self._sleep = sleep or asyncio.sleep

    async def click(self, page: "Page", x: float, y: float) -> Point:
        """Move to (x, y) with small jitter and click there.

        Args:
            page: Playwright page.
            x: Target x in CSS pixels.
            y: Target y in CSS pixels.

        Returns:
            The point actually clicked.
        """
        cfg = self._path.config
        target = Point(
            x + self._rng.uniform(-cfg.target_jitter, cfg.target_jitter),
            y + self._rng.uniform(-cfg.target_jitter, cfg.target_jitter),
        )
        start = self._path.start_for(target)

        await page.mouse.move(start.x, start.y)
        for point in self._path.generate(start, target):
            await page.mouse.move(point.x, point.y)
            await self._sleep(self._rng.uniform(*cfg.step_delay))

        await self._sleep(self._rng.uniform(*cfg.pre_press_pause))
        await page.mouse.down()
        await self._sleep(self._rng.uniform(*cfg.hold))
        await page.mouse.up()

        logger.debug("Pointer click dispatched", x=round(target.x), y=round(target.y))
        return target
