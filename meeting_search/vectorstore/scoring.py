"""Conversion of raw store scores into relevance scores.

Qdrant reports a similarity for Cosine and Dot collections (higher is
better) and a distance for Euclid and Manhattan collections (lower is
better). Callers always see a relevance score where higher is better.
"""

from enum import Enum

from meeting_search.exceptions import ConfigurationError

SCORE_DECIMALS = 3


class ScoreConvention(str, Enum):
    """Orientation of the raw score returned by the store."""

    SIMILARITY = "similarity"
    DISTANCE = "distance"


_METRIC_CONVENTIONS = {
    "cosine": ScoreConvention.SIMILARITY,
    "dot": ScoreConvention.SIMILARITY,
    "euclid": ScoreConvention.DISTANCE,
    "manhattan": ScoreConvention.DISTANCE,
}


def convention_for_distance(metric: str) -> ScoreConvention:
    """Map a collection distance metric name to its score convention.

    Raises:
        ConfigurationError: If the metric is unknown.
    """
    try:
        return _METRIC_CONVENTIONS[metric.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported distance metric: {metric}",
            details={"supported": sorted(_METRIC_CONVENTIONS)},
        ) from None


def to_relevance_score(raw_score: float, convention: ScoreConvention) -> float:
    """Convert a raw store score into a relevance score (higher is better).

    Similarities pass through; distances become ``1 - distance``. The result
    is rounded to three decimals. Both mappings are non-decreasing in
    relevance, so the store's own ranking is never reversed.
    """
    if convention is ScoreConvention.DISTANCE:
        return round(1.0 - raw_score, SCORE_DECIMALS)
    return round(raw_score, SCORE_DECIMALS)
