"""Daily check-in streak, as reported by the service."""

import logging
from typing import List, Optional, Sequence

from .errors import CheckInFailed, ServiceError
from .models import CheckInResult, CheckInState, Milestone

logger = logging.getLogger(__name__)


def achieved_milestones(
    consecutive_days: int, milestones: Sequence[Milestone]
) -> List[Milestone]:
    return [m for m in milestones if consecutive_days >= m.days]


def next_milestone(
    consecutive_days: int, milestones: Sequence[Milestone]
) -> Optional[Milestone]:
    for m in milestones:
        if consecutive_days < m.days:
            return m
    return None


class CheckInTracker:
    """
    Read-through cache of the service's check-in state.

    The state only changes from a service response; nothing here derives
    streak days or badges on its own.
    """

    def __init__(self, service):
        self.service = service
        self.state = CheckInState()
        self.loaded = False
        self.in_flight = False

    async def load(self) -> CheckInState:
        self.state = await self.service.fetch_check_in_state()
        self.loaded = True
        return self.state

    async def check_in(self) -> Optional[CheckInResult]:
        """Check in for today; returns None when there is nothing to do."""
        if self.state.today_checked_in or self.in_flight:
            return None
        self.in_flight = True
        try:
            if not self.loaded:
                await self.load()
                if self.state.today_checked_in:
                    return None
            result = await self.service.perform_check_in()
        except ServiceError as e:
            logger.warning(f"Check-in failed: {e}")
            if isinstance(e, CheckInFailed):
                raise
            raise CheckInFailed(str(e), status_code=e.status_code) from e
        finally:
            self.in_flight = False

        badges = result.badges if result.badges is not None else self.state.badges
        self.state = CheckInState(
            consecutive_days=result.consecutive_days,
            today_checked_in=True,
            badges=badges,
        )
        logger.info(f"Checked in, streak is now {result.consecutive_days} days")
        return result
