"""Budget archetypes synthesised from detected events."""
from datetime import date

from finlens.core.archetypes import archetype_confidence, generate_budget_archetypes
from finlens.core.data_models import Event


def _event(event_type, start, amount, duration=2, mix=None):
    return Event(
        startDate=start,
        endDate=start,
        durationDays=duration,
        totalAmount=amount,
        transactionCount=2,
        categoryPriorityMix=mix or {},
        eventType=event_type,
    )


def test_empty_events_yield_no_archetypes():
    assert generate_budget_archetypes([]) == []


def test_single_occurrence_has_fixed_confidence():
    archetypes = generate_budget_archetypes([_event("Weekend Trip", date(2024, 3, 2), 640.4, duration=3)])

    assert len(archetypes) == 1
    archetype = archetypes[0]
    assert archetype.name == "Weekend Getaway"
    assert archetype.confidence == 50
    assert archetype.recommendedAmount == 640
    assert archetype.typicalDuration == 3
    assert archetype.occurrences == 1


def test_consistent_groups_rank_first():
    events = [
        _event("Special Period", date(2024, 1, 5), 100),
        _event("Concert/Event", date(2024, 2, 1), 400, mix={"wants": 300, "needs": 100}),
        _event("Concert/Event", date(2024, 5, 1), 400, mix={"wants": 400}),
        _event("Concert/Event", date(2024, 3, 1), 400, mix={"wants": 400}),
    ]

    archetypes = generate_budget_archetypes(events)

    assert [archetype.type for archetype in archetypes] == ["Concert/Event", "Special Period"]
    concert = archetypes[0]
    # min(3 * 15, 50) + (50 - 0)
    assert concert.confidence == 95
    assert concert.lastOccurrence == date(2024, 5, 1)
    assert concert.categoryBreakdown == {"wants": 1100 / 1200 * 100, "needs": 100 / 1200 * 100}
    assert archetypes[1].name == "Special Occasion"


def test_confidence_penalises_amount_spread():
    events = [_event("Trip", date(2024, 1, 1), 100), _event("Trip", date(2024, 2, 1), 300)]

    # cv = 100 / 200 = 0.5 -> 30 + 0
    assert archetype_confidence(events) == 30


def test_recommended_amount_rounds_half_up():
    events = [_event("Day Trip", date(2024, 1, 1), 100), _event("Day Trip", date(2024, 2, 1), 101, duration=3)]

    archetype = generate_budget_archetypes(events)[0]

    assert archetype.recommendedAmount == 101
    assert archetype.typicalDuration == 3
