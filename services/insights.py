"""
Aggregate statistics over the whole journal.

Everything here is recomputed from the dream list on every call.
"""
import math
from collections import Counter
from typing import List, NamedTuple, Tuple

UNKNOWN_MOOD = 'Unknown'
MIN_DREAMS = 2


class SentimentPoint(NamedTuple):
    date: object
    score: int
    mood: str


class Insights(NamedTuple):
    total: int
    lucid_count: int
    lucidity: int
    sentiment: List[SentimentPoint]
    moods: List[Tuple[str, int]]


class InsufficientData(NamedTuple):
    total: int
    message: str = "Not enough stardust yet."


def sentiment_series(dreams) -> List[SentimentPoint]:
    points = [
        SentimentPoint(d.date, d.analysis.sentiment_score, d.analysis.mood)
        for d in dreams if d.analysis is not None
    ]
    # sorted() is stable so equal dates keep journal order
    return sorted(points, key=lambda p: p.date)


def mood_ranking(dreams) -> List[Tuple[str, int]]:
    counts = Counter((d.analysis.mood if d.analysis else '') or UNKNOWN_MOOD for d in dreams)
    # Counter keeps first-seen order, sorted() keeps it for ties
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def lucidity_ratio(dreams) -> int:
    if not dreams:
        return 0
    lucid = sum(1 for d in dreams if d.is_lucid)
    # Round half up
    return math.floor(100 * lucid / len(dreams) + 0.5)


def summarize(dreams):
    """Return ``Insights`` or ``InsufficientData`` when there is too little to chart."""
    if len(dreams) < MIN_DREAMS:
        return InsufficientData(total=len(dreams))
    return Insights(
        total=len(dreams),
        lucid_count=sum(1 for d in dreams if d.is_lucid),
        lucidity=lucidity_ratio(dreams),
        sentiment=sentiment_series(dreams),
        moods=mood_ranking(dreams),
    )
