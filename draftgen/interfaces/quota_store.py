"""Quota ledger interface.

Per-user monthly draft counters. The increment must be atomic with respect
to the cap check so that concurrent requests from one user can never push
the counter past the plan limit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone

from draftgen.interfaces.identity import Identity


def start_of_month(moment: datetime) -> datetime:
    """Return midnight UTC on the first day of ``moment``'s month."""
    moment = moment.astimezone(timezone.utc) if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
    return datetime(moment.year, moment.month, 1, tzinfo=timezone.utc)


def start_of_next_month(moment: datetime) -> datetime:
    """Return midnight UTC on the first day of the month after ``moment``'s."""
    current = start_of_month(moment)
    if current.month == 12:
        return current.replace(year=current.year + 1, month=1)
    return current.replace(month=current.month + 1)


@dataclass(frozen=True)
class QuotaState:
    """The quota-relevant slice of a user record.

    Attributes:
        user_id: Owner of the counter.
        plan: Pricing plan key ('free', 'pro' or 'unlimited').
        drafts_used_this_month: Successful drafts in the current period.
        drafts_reset_date: Start of the period the counter applies to.
    """

    user_id: str
    plan: str
    drafts_used_this_month: int
    drafts_reset_date: datetime


class BaseQuotaStore(ABC):
    """Abstract base class for the quota ledger.

    Writes are staged on the caller's unit of work; nothing is durable
    until it commits.
    """

    @abstractmethod
    async def get_or_create(self, identity: Identity, now: datetime) -> QuotaState:
        """Load the caller's quota record, creating a zero-usage one if absent.

        Creation is an idempotent upsert. A record whose reset date precedes
        the start of ``now``'s month is reset to zero before being returned.

        Args:
            identity: The verified caller.
            now: Current time.

        Returns:
            The current quota state.
        """

    @abstractmethod
    async def atomic_increment_if_below_limit(
        self, user_id: str, limit: int | None
    ) -> tuple[bool, int]:
        """Increment the counter by one only while it is below ``limit``.

        Args:
            user_id: Owner of the counter.
            limit: Plan cap, or None for no cap.

        Returns:
            ``(ok, count)``: whether the increment happened, and the counter
            value after the attempt.
        """

    @abstractmethod
    async def reset_expired(self, period_start: datetime) -> int:
        """Reset every counter whose reset date precedes ``period_start``.

        Returns:
            Number of records reset.
        """
