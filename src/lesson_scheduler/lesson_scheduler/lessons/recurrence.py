from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator

from ..common.datetime_utils import add_months
from ..core.constants import DAYS_PER_WEEK, DEFAULT_MAX_OCCURRENCES
from ..core.enums import RecurrenceFrequency
from .model import RecurrenceRule, TimeWindow


@dataclass(frozen=True)
class RecurrenceExpander:
    """Turn a template window plus a rule into a finite list of windows.

    Termination is the first of: ``end_date`` passed (inclusive, compared on
    the occurrence's start date), ``max_occurrences`` emitted, or ``cap``
    emitted. The cap applies even when the rule names a larger count.
    """

    cap: int = DEFAULT_MAX_OCCURRENCES

    def expand(self, window: TimeWindow, rule: RecurrenceRule) -> list[TimeWindow]:
        rule.validate()
        limit = min(rule.max_occurrences or self.cap, self.cap)

        if rule.weekdays is not None:
            starts = self._weekday_starts(window.start, rule)
        else:
            starts = self._stepped_starts(window.start, rule)

        out: list[TimeWindow] = []
        for start in starts:
            if len(out) >= limit:
                break
            if rule.end_date is not None and start.date() > rule.end_date:
                break
            out.append(window.shifted_to(start))
        return out

    @staticmethod
    def _stepped_starts(first: datetime, rule: RecurrenceRule) -> Iterator[datetime]:
        k = 0
        while True:
            if rule.frequency == RecurrenceFrequency.WEEKLY:
                yield first + timedelta(days=DAYS_PER_WEEK * rule.interval * k)
            else:
                yield add_months(first, rule.interval * k, anchor_day=first.day)
            k += 1

    @staticmethod
    def _weekday_starts(first: datetime, rule: RecurrenceRule) -> Iterator[datetime]:
        # Day-by-day walk; each 7-day span from ``first`` is one cadence tick,
        # and only every ``interval``-th tick emits.
        weekdays = rule.weekdays or frozenset()
        offset = 0
        while True:
            tick = offset // DAYS_PER_WEEK
            candidate = first + timedelta(days=offset)
            if tick % rule.interval == 0 and candidate.weekday() in weekdays:
                yield candidate
            offset += 1
