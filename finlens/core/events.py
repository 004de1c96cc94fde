"""Detect life events (trips, concerts, ...) from clusters of spending spikes."""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import date
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .buckets import category_lookup
from .data_models import AnchorExpense, Category, Event, Transaction
from .numeric import upper_median

logger = logging.getLogger("finlens.core.events")

MIN_EXPENSES = 3
SPIKE_MULTIPLIER = 2.0
ELEVATED_MULTIPLIER = 1.2
WINDOW_DAYS = 7
MIN_CLUSTER_DAYS = 2

ANCHOR_KEYWORDS = ("ticket", "concert", "festival", "gig", "show", "flight", "hotel")

KNOWN_CITIES = (
    "Amsterdam", "Athens", "Barcelona", "Berlin", "Bratislava", "Brussels",
    "Budapest", "Copenhagen", "Dublin", "Edinburgh", "Florence", "Gothenburg",
    "Hamburg", "Helsinki", "Istanbul", "Krakow", "Lisbon", "London", "Madrid",
    "Milan", "Munich", "Oslo", "Paris", "Porto", "Prague", "Reykjavik", "Riga",
    "Rome", "Stockholm", "Tallinn", "Tampere", "Turku", "Venice", "Vienna",
    "Vilnius", "Warsaw", "Zurich", "New York", "Los Angeles", "Tokyo",
)
_CITY_PATTERNS = [(city, re.compile(r"\b%s\b" % re.escape(city), re.IGNORECASE)) for city in KNOWN_CITIES]


class EventSignals(NamedTuple):
    """Keyword evidence extracted from one cluster of transactions."""

    ticket: bool
    flight: bool
    accommodation: bool
    transport: bool
    dining: bool
    transaction_count: int


def _mentions(texts: Sequence[str], keywords: Tuple[str, ...]) -> bool:
    return any(keyword in text for text in texts for keyword in keywords)


def extract_signals(transactions: Sequence[Transaction], categories: Dict[str, Category]) -> EventSignals:
    names = []
    for tx in transactions:
        category = categories.get(tx.categoryId) if tx.categoryId else None
        if category is not None and category.name:
            names.append(category.name.lower())
    titles = [tx.title.lower() for tx in transactions if tx.title]

    return EventSignals(
        ticket=_mentions(names, ("ticket", "entertainment"))
        or _mentions(titles, ("ticket", "concert", "festival", "gig")),
        flight=_mentions(names, ("flight", "airline")) or _mentions(titles, ("flight", "airport")),
        accommodation=_mentions(names, ("hotel", "accommodation", "airbnb"))
        or _mentions(titles, ("hotel", "airbnb")),
        transport=_mentions(names, ("transport", "travel", "train")) or _mentions(titles, ("transport", "train")),
        dining=_mentions(names, ("dining", "restaurant", "food")),
        transaction_count=len(transactions),
    )


# Evaluated top to bottom; the first matching predicate names the event.
EVENT_TYPE_RULES: List[Tuple[Callable[[EventSignals], bool], str]] = [
    (lambda s: s.ticket, "Concert/Event"),
    (lambda s: s.flight or (s.accommodation and s.transport), "Trip"),
    (lambda s: s.accommodation and s.transaction_count <= 7, "Weekend Trip"),
    (lambda s: s.transport and s.dining and s.transaction_count <= 5, "Day Trip"),
    (lambda s: s.dining and s.transaction_count >= 5, "Social Week"),
]
DEFAULT_EVENT_TYPE = "Special Period"


def infer_event_type(signals: EventSignals) -> str:
    for predicate, event_type in EVENT_TYPE_RULES:
        if predicate(signals):
            return event_type
    return DEFAULT_EVENT_TYPE


def identify_anchor_expense(
    transactions: Sequence[Transaction], categories: Dict[str, Category]
) -> Optional[AnchorExpense]:
    """First transaction mentioning an anchor keyword, else the largest one."""
    if not transactions:
        return None

    def category_name(tx: Transaction) -> Optional[str]:
        category = categories.get(tx.categoryId) if tx.categoryId else None
        return category.name if category is not None else None

    for tx in transactions:
        title = (tx.title or "").lower()
        name = (category_name(tx) or "").lower()
        if any(keyword in title or keyword in name for keyword in ANCHOR_KEYWORDS):
            return AnchorExpense(title=tx.title, amount=tx.amount, category=category_name(tx))

    largest = transactions[0]
    for tx in transactions[1:]:
        if tx.amount > largest.amount:
            largest = tx
    return AnchorExpense(title=largest.title, amount=largest.amount, category=category_name(largest))


def extract_locations(transactions: Sequence[Transaction]) -> List[str]:
    found: List[str] = []
    for tx in transactions:
        if not tx.title:
            continue
        for city, pattern in _CITY_PATTERNS:
            if city not in found and pattern.search(tx.title):
                found.append(city)
    return found


def _priority_mix(transactions: Sequence[Transaction], categories: Dict[str, Category]) -> Dict[str, float]:
    mix: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        category = categories.get(tx.categoryId) if tx.categoryId else None
        priority = tx.financialPriority or (category.priority if category is not None else None)
        if priority:
            mix[priority] += tx.amount
    return dict(mix)


def _daily_groups(expenses: Sequence[Transaction]) -> List[Tuple[date, float, List[Transaction]]]:
    by_day: Dict[date, List[Transaction]] = defaultdict(list)
    for tx in expenses:
        by_day[tx.effective_date].append(tx)
    return [(day, sum(tx.amount for tx in txs), txs) for day, txs in sorted(by_day.items())]


def analyze_event_patterns(
    transactions: Sequence[Transaction],
    categories: Optional[Sequence[Category]] = None,
) -> List[Event]:
    """
    Cluster days of elevated spending into discrete events.
    A day above twice the median daily total opens a window of up to
    WINDOW_DAYS days; later days in the window above 1.2x the median join the
    cluster. Clusters need at least MIN_CLUSTER_DAYS days.
    """
    expenses = sorted(
        (tx for tx in transactions or [] if tx.is_paid_expense),
        key=lambda tx: tx.effective_date,
    )
    if len(expenses) < MIN_EXPENSES:
        return []

    lookup = category_lookup(categories)
    days = _daily_groups(expenses)
    baseline = upper_median([total for _day, total, _txs in days])
    threshold = baseline * SPIKE_MULTIPLIER

    events: List[Event] = []
    index = 0
    while index < len(days):
        start_day, start_total, _ = days[index]
        if start_total <= threshold:
            index += 1
            continue

        cluster = [days[index]]
        cursor = index + 1
        while cursor < len(days) and (days[cursor][0] - start_day).days <= WINDOW_DAYS:
            if days[cursor][1] > baseline * ELEVATED_MULTIPLIER:
                cluster.append(days[cursor])
            cursor += 1

        if len(cluster) < MIN_CLUSTER_DAYS:
            index += 1
            continue

        cluster_txs = [tx for _day, _total, txs in cluster for tx in txs]
        first_day, last_day = cluster[0][0], cluster[-1][0]
        events.append(
            Event(
                startDate=first_day,
                endDate=last_day,
                durationDays=(last_day - first_day).days + 1,
                totalAmount=sum(tx.amount for tx in cluster_txs),
                transactionCount=len(cluster_txs),
                categoryPriorityMix=_priority_mix(cluster_txs, lookup),
                eventType=infer_event_type(extract_signals(cluster_txs, lookup)),
                anchorExpense=identify_anchor_expense(cluster_txs, lookup),
                locations=extract_locations(cluster_txs),
                transactions=cluster_txs,
            )
        )
        index = cursor

    logger.debug("Detected %s events over %s spending days (baseline %.2f)", len(events), len(days), baseline)
    return events
