"""
Polity regime classification bands.

Static lookup from score range to regime label, used only as background
context on the trend chart.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

SCORE_MIN = -10
SCORE_MAX = 10


@dataclass(frozen=True)
class ClassificationBand:
    range_start: int
    range_end: int
    label: str
    color: str

    def contains(self, score: int) -> bool:
        return self.range_start <= score <= self.range_end

    def render_bounds(self, padding: float = 0.5) -> Tuple[float, float]:
        """Bounds widened by half a unit so adjacent bands touch on the chart."""
        return self.range_start - padding, self.range_end + padding


# Ordered by score range: fixes legend order and drawing order
CLASSIFICATION_BANDS: Tuple[ClassificationBand, ...] = (
    ClassificationBand(-10, -6, 'Autocracy', '#f4a582'),
    ClassificationBand(-5, 5, 'Anocracy', '#f7f7f7'),
    ClassificationBand(6, 10, 'Democracy', '#92c5de'),
)


def classify_score(score: int, bands: Tuple[ClassificationBand, ...] = CLASSIFICATION_BANDS) -> Optional[str]:
    """Return the regime label for a score, or None outside the score domain."""
    for band in bands:
        if band.contains(score):
            return band.label
    return None
