"""Summarise detected events into reusable budget templates."""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence

from .data_models import Archetype, Event
from .numeric import coefficient_of_variation, mean, to_score

ARCHETYPE_NAMES: Dict[str, str] = {
    "Concert/Event": "Concert or Event",
    "Trip": "Trip",
    "Weekend Trip": "Weekend Getaway",
    "Day Trip": "Day Trip",
    "Social Week": "Social Week",
    "Special Period": "Special Occasion",
}

SINGLE_OCCURRENCE_CONFIDENCE = 50


def archetype_confidence(events: Sequence[Event]) -> int:
    """Frequency points (max 50) plus amount-consistency points (max 50)."""
    if len(events) < 2:
        return SINGLE_OCCURRENCE_CONFIDENCE
    cv = coefficient_of_variation([event.totalAmount for event in events])
    occurrence_score = min(len(events) * 15, 50)
    consistency_score = max(0.0, 50 - cv * 100)
    return to_score(occurrence_score + consistency_score)


def _category_breakdown(events: Sequence[Event]) -> Dict[str, float]:
    total_spend = sum(event.totalAmount for event in events)
    breakdown: Dict[str, float] = defaultdict(float)
    for event in events:
        for priority, amount in event.categoryPriorityMix.items():
            breakdown[priority] += amount
    if total_spend <= 0:
        return {priority: 0.0 for priority in breakdown}
    return {priority: amount / total_spend * 100 for priority, amount in breakdown.items()}


def generate_budget_archetypes(events: Sequence[Event]) -> List[Archetype]:
    if not events:
        return []

    grouped: Dict[str, List[Event]] = {}
    for event in events:
        grouped.setdefault(event.eventType, []).append(event)

    archetypes = [
        Archetype(
            type=event_type,
            name=ARCHETYPE_NAMES.get(event_type, event_type),
            recommendedAmount=to_score(mean([event.totalAmount for event in group])),
            typicalDuration=to_score(mean([event.durationDays for event in group])),
            occurrences=len(group),
            categoryBreakdown=_category_breakdown(group),
            confidence=archetype_confidence(group),
            lastOccurrence=max(event.startDate for event in group),
        )
        for event_type, group in grouped.items()
    ]
    archetypes.sort(key=lambda archetype: archetype.confidence, reverse=True)
    return archetypes
