"""Decision collector — waits for one qualifying button press or a deadline.

A collector is armed on a single approver message. ``offer()`` is called by the
gateway for every decision event on that message; the first event passing the
filter resolves the collector and every later event is ignored. ``wait()``
returns that event, or None if the deadline passed first.

All state changes happen without an ``await`` in between, so under asyncio the
check-and-set in ``offer()`` cannot interleave with another offer or with the
deadline.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from app.schemas.transfer import DecisionEvent, MessageHandle

logger = logging.getLogger(__name__)

DecisionFilter = Callable[[DecisionEvent], bool]


def manage_authority_filter(surface: MessageHandle) -> DecisionFilter:
    """Accept events on ``surface`` from actors who may manage roles."""

    def check(event: DecisionEvent) -> bool:
        return event.message_id == surface.message_id and event.actor_has_manage_authority

    return check


class DecisionCollector:
    def __init__(
        self,
        surface: MessageHandle,
        *,
        timeout: float,
        check: DecisionFilter | None = None,
    ) -> None:
        self.surface = surface
        self._timeout = timeout
        self._check = check or manage_authority_filter(surface)
        self._outcome: asyncio.Future[DecisionEvent] = asyncio.get_running_loop().create_future()
        self._stopped = False

    @property
    def armed(self) -> bool:
        return not self._stopped and not self._outcome.done()

    def offer(self, event: DecisionEvent) -> bool:
        """Deliver a candidate event. Returns True only for the event that resolves us."""
        if not self.armed:
            return False
        if not self._check(event):
            logger.debug(
                "Ignoring decision on %s from %s (filter rejected)",
                self.surface.message_id, event.actor_id,
            )
            return False
        self._outcome.set_result(event)
        self._stopped = True
        return True

    def stop(self) -> None:
        """Stop accepting events. A pending ``wait()`` returns None."""
        self._stopped = True
        if not self._outcome.done():
            self._outcome.cancel()

    async def wait(self) -> DecisionEvent | None:
        """Block until resolved. None means the deadline passed with no qualifying event."""
        try:
            await asyncio.wait_for(asyncio.shield(self._outcome), timeout=self._timeout)
        except TimeoutError:
            pass
        except asyncio.CancelledError:
            # Only swallow the cancellation stop() caused, not our own task's
            if not self._outcome.cancelled():
                raise
        finally:
            self._stopped = True

        # A delivered event wins even if the deadline fired at the same moment
        if self._outcome.done() and not self._outcome.cancelled():
            return self._outcome.result()
        return None
