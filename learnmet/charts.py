"""Chart-data shaping: color palettes and radar chart axes."""

import re
from math import sqrt
from random import Random
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .guards import finite_or_zero, round_half_up, safe_divide
from .log import get_logger
from .models import ColorScheme, RadarChartOptions, SkillScore

logger = get_logger(__name__)

DEFAULT_BASE_COLOR = "#3f51b5"
MIN_COLOR_DISTANCE = 100
MAX_RANDOM_ATTEMPTS = 10_000

_HEX_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

RGB = Tuple[int, int, int]


def generate_chart_colors(
    count: int,
    base_color: str = DEFAULT_BASE_COLOR,
    scheme: Any = ColorScheme.SEQUENTIAL,
    rng: Optional[Random] = None,
) -> List[str]:
    """
    Build ``count`` hex colors derived from ``base_color``.

    - sequential: the base color scaled from 50% to 100% of its RGB values.
    - diverging: red blending into the base color, then the base color
      blending into green.
    - random: the base color first, then random colors at least
      ``MIN_COLOR_DISTANCE`` apart in RGB space. Sampling stops after
      ``MAX_RANDOM_ATTEMPTS`` draws, so large counts may return fewer colors.

    Any other scheme repeats the base color ``count`` times.
    """
    if count is None or count <= 0:
        return []

    try:
        scheme = ColorScheme(scheme)
    except ValueError:
        return [base_color] * count

    base = hex_to_rgb(base_color)
    if scheme == ColorScheme.SEQUENTIAL:
        return _sequential_colors(count, base)
    if scheme == ColorScheme.DIVERGING:
        return _diverging_colors(count, base)
    return _random_colors(count, base_color, rng or Random())


def hex_to_rgb(color: str) -> RGB:
    """Parse ``#rrggbb`` (``#`` optional); anything else is black."""
    match = _HEX_PATTERN.match(color or "")
    if not match:
        return (0, 0, 0)
    return tuple(int(part, 16) for part in match.groups())


def rgb_to_hex(red: int, green: int, blue: int) -> str:
    return "#{:02x}{:02x}{:02x}".format(*(min(max(int(channel), 0), 255) for channel in (red, green, blue)))


def format_radar_chart_data(
    skills: Optional[Iterable[SkillScore]],
    options: RadarChartOptions = RadarChartOptions(),
) -> Dict:
    """Scale skill scores and grid levels to the unit interval by ``max_value``."""
    if skills is None:
        return {"axes": [], "levels": []}

    axes = [
        {"axis": skill.name, "value": safe_divide(finite_or_zero(skill.score), options.max_value)}
        for skill in skills
    ]
    levels = [
        {"level": level, "level_value": safe_divide(level, options.max_value)}
        for level in options.levels
    ]
    return {"axes": axes, "levels": levels}


def _sequential_colors(count: int, base: RGB) -> List[str]:
    colors = []
    for index in range(count):
        factor = 0.5 + safe_divide(index, count - 1) * 0.5
        colors.append(rgb_to_hex(*(_channel(channel * factor) for channel in base)))
    return colors


def _diverging_colors(count: int, base: RGB) -> List[str]:
    red, green, blue = base
    colors = []
    for index in range(count):
        position = safe_divide(index, count - 1)
        if position < 0.5:
            factor = position * 2
            colors.append(
                rgb_to_hex(
                    _channel(255 - (255 - red) * factor),
                    _channel(green * factor),
                    _channel(blue * factor),
                )
            )
        else:
            factor = (position - 0.5) * 2
            colors.append(
                rgb_to_hex(
                    _channel(red * (1 - factor)),
                    _channel(green + (100 - green) * factor),
                    _channel(blue * (1 - factor)),
                )
            )
    return colors


def _random_colors(count: int, base_color: str, rng: Random) -> List[str]:
    colors = [base_color]
    accepted = [hex_to_rgb(base_color)]
    attempts = 0
    while len(colors) < count and attempts < MAX_RANDOM_ATTEMPTS:
        attempts += 1
        candidate = (rng.randrange(256), rng.randrange(256), rng.randrange(256))
        if all(_distance(candidate, existing) > MIN_COLOR_DISTANCE for existing in accepted):
            accepted.append(candidate)
            colors.append(rgb_to_hex(*candidate))

    if len(colors) < count:
        logger.warning(
            "Generated %d of %d distinct colors after %d attempts", len(colors), count, attempts
        )
    return colors


def _distance(first: RGB, second: RGB) -> float:
    return sqrt(sum((a - b) ** 2 for a, b in zip(first, second)))


def _channel(value: float) -> int:
    return int(round_half_up(value))
