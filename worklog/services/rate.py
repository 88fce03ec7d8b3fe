"""Billing rate resolution for timesheet entries.

Rates are looked up from the most specific place that defines one: the entry
itself, its activity, its project and finally (hourly rates only) the user
and the configured default. A fixed rate always wins over an hourly one.
"""
import logging
from typing import Iterable, List, Optional, Union

from worklog.core.config import RateRule, settings

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def calculate_rate(hourly_rate: float, seconds: int) -> float:
    """Price of ``seconds`` of work at ``hourly_rate``, rounded to cents."""
    return round(float(hourly_rate) * (seconds / 3600), 2)


class RateCalculator:
    def __init__(self, rules: Optional[Iterable[Union[RateRule, dict]]] = None):
        if rules is None:
            rules = settings.RATE_RULES
        self.rules: List[RateRule] = [
            rule if isinstance(rule, RateRule) else RateRule(**rule) for rule in rules
        ]

    @staticmethod
    def find_fixed_rate(entry) -> Optional[float]:
        if entry.fixed_rate is not None:
            return entry.fixed_rate

        if entry.activity is not None and entry.activity.fixed_rate is not None:
            return entry.activity.fixed_rate

        if entry.project is not None and entry.project.fixed_rate is not None:
            return entry.project.fixed_rate

        return None

    @staticmethod
    def find_hourly_rate(entry) -> float:
        if entry.hourly_rate is not None:
            return entry.hourly_rate

        for owner in (entry.activity, entry.project, entry.user):
            if owner is not None and owner.hourly_rate is not None:
                return owner.hourly_rate

        return settings.DEFAULT_HOURLY_RATE

    def get_rate_factor(self, entry) -> float:
        """Sum of the factors of all rules matching the entry's weekday.

        Running entries are matched on their begin, all others on their end.
        """
        moment = entry.end if entry.end is not None else entry.begin
        if moment is None or not self.rules:
            return 1.0

        weekday = WEEKDAYS[moment.weekday()]
        factor = 0.0
        for rule in self.rules:
            if weekday in (day.lower() for day in rule.days):
                factor += rule.factor

        if factor <= 0:
            return 1.0
        return factor

    def get_rate(self, entry) -> float:
        fixed_rate = self.find_fixed_rate(entry)
        if fixed_rate is not None:
            logger.debug(f"Using fixed rate {fixed_rate} for timesheet {entry.id}")
            return fixed_rate

        # stopped entries use the stored duration
        seconds = entry.duration if entry.end is None else (entry._duration or 0)
        hourly_rate = float(self.find_hourly_rate(entry) * self.get_rate_factor(entry))
        return calculate_rate(hourly_rate, seconds)

    def calculate(self, entry) -> None:
        """Store the resolved rate on a stopped entry, clear it on a running one."""
        if entry.end is None:
            entry.rate = None
            return
        entry.rate = self.get_rate(entry)
