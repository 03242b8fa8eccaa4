"""
Client Poller
Keeps one client's notification state in sync with the feed on a fixed
interval, and drives at most one transient alert at a time.
"""
import asyncio
import enum
import logging
from typing import Callable, List, Optional, Protocol

from app.client.feed import FeedUnavailableError
from app.client.state import ClientNotification, ClientNotificationState
from app.core.config import settings
from app.schemas.notification import NotificationEventResponse, NotificationFeedResponse
from app.services.visibility import Identity

logger = logging.getLogger(__name__)

# Views used by reception, hosts and admins; kiosk-facing views stay silent
INTERNAL_VIEWS = frozenset({"reception", "host-portal", "admin", "staff-management"})

AlertCallback = Callable[[NotificationEventResponse, bool], None]


class NotificationFeed(Protocol):
    async def fetch(self, last_id: int, identity: Identity) -> NotificationFeedResponse:
        ...


class PollerState(str, enum.Enum):
    IDLE = "IDLE"
    POLLING = "POLLING"
    SUSPENDED = "SUSPENDED"


class NotificationPoller:
    """
    Scheduled, cancellable polling loop owned by one client session.

    Every interval a tick issues one feed request, unless the previous one is
    still in flight, in which case the tick is skipped. New events advance the
    cursor, are prepended as unread, and the highest-id event of the batch
    becomes the active alert. on_alert receives that event and whether the
    current view should play a sound.

    stop() cancels the ticker, the in-flight request and all timers; no state
    changes after it returns. The poller can also be used as an async context
    manager.
    """

    def __init__(
        self,
        feed: NotificationFeed,
        identity: Identity,
        view: str = "check-in",
        on_alert: Optional[AlertCallback] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        dismiss_after: Optional[float] = None,
        mark_read_delay: Optional[float] = None,
        max_items: Optional[int] = None,
    ):
        self.feed = feed
        self.identity = identity
        self.view = view
        self.on_alert = on_alert
        self.interval = interval if interval is not None else settings.notification_poll_interval_seconds
        self.timeout = timeout if timeout is not None else settings.notification_poll_timeout_seconds
        self.dismiss_after = dismiss_after if dismiss_after is not None else settings.notification_alert_dismiss_seconds
        self.mark_read_delay = mark_read_delay if mark_read_delay is not None else settings.notification_mark_read_delay_seconds
        self.state = ClientNotificationState(max_items=max_items or settings.notification_max_client_items)
        self.status = PollerState.IDLE

        self._stop_event: Optional[asyncio.Event] = None
        self._ticker: Optional[asyncio.Task] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._request: Optional[asyncio.Future] = None
        self._in_flight = False
        self._dismiss_handle: Optional[asyncio.TimerHandle] = None
        self._mark_read_handle: Optional[asyncio.TimerHandle] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_suspended(self) -> bool:
        return self.status == PollerState.SUSPENDED

    def start(self) -> None:
        """Start ticking. Must be called from a running event loop."""
        if self.is_suspended:
            raise RuntimeError("A stopped poller cannot be restarted; create a new one")
        if self._ticker is not None:
            return
        self._stop_event = asyncio.Event()
        self._ticker = asyncio.create_task(self._run())
        logger.info(f"[Poller] Started for role={self.identity.role} user={self.identity.name} every {self.interval}s")

    async def stop(self) -> None:
        """Suspend the poller and cancel everything it scheduled."""
        if self.is_suspended:
            return
        self.status = PollerState.SUSPENDED
        if self._stop_event is not None:
            self._stop_event.set()

        self._cancel_timer("_dismiss_handle")
        self._cancel_timer("_mark_read_handle")

        pending = [t for t in (self._ticker, self._poll_task, self._request) if t is not None and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._ticker = None
        self._poll_task = None
        self._request = None
        logger.info(f"[Poller] Stopped at cursor {self.state.last_seen_event_id}")

    async def __aenter__(self) -> "NotificationPoller":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _run(self) -> None:
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                return
            except asyncio.TimeoutError:
                pass
            self.tick()

    def tick(self) -> bool:
        """
        Launch one poll in the background unless one is already running.

        Returns True when a poll was started; skipped ticks are not queued.
        """
        if self.is_suspended:
            return False
        if self._in_flight:
            logger.debug("[Poller] Previous request still in flight, skipping tick")
            return False
        self._in_flight = True
        self._poll_task = asyncio.create_task(self._poll())
        return True

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def poll_once(self) -> List[ClientNotification]:
        """
        Run one poll now and return the newly added notifications.

        Returns an empty list when nothing is new, when the request fails or
        times out, when another request is already in flight, or when the
        poller has been stopped.
        """
        if self.is_suspended or self._in_flight:
            return []
        self._in_flight = True
        return await self._poll()

    async def _poll(self) -> List[ClientNotification]:
        cursor = self.state.last_seen_event_id
        self.status = PollerState.POLLING
        # A request abandoned on timeout keeps the poller in flight until it
        # actually finishes, so a client never has two requests open
        request = asyncio.ensure_future(self.feed.fetch(cursor, self.identity))
        request.add_done_callback(self._request_finished)
        self._request = request
        try:
            response = await asyncio.wait_for(asyncio.shield(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[Poller] Poll after {cursor} timed out after {self.timeout}s")
            return []
        except FeedUnavailableError as e:
            logger.warning(f"[Poller] Poll after {cursor} failed: {e}")
            return []
        except Exception:
            logger.warning(f"[Poller] Poll after {cursor} failed unexpectedly", exc_info=True)
            return []
        finally:
            if request.done():
                self._in_flight = False
            if not self.is_suspended:
                self.status = PollerState.IDLE

        if self.is_suspended:
            return []
        return self._apply(response)

    def _request_finished(self, request: asyncio.Future) -> None:
        if request is self._request:
            self._request = None
        self._in_flight = False

    def _apply(self, response: NotificationFeedResponse) -> List[ClientNotification]:
        added = self.state.merge(response.notifications)
        if not added:
            return []

        # added is most-recent-first; only the newest event of a batch is announced
        alert = added[0].event
        self.state.active_alert = alert
        self._schedule_dismiss()

        audible = self.view in INTERNAL_VIEWS
        logger.info(f"[Poller] {len(added)} new notification(s), cursor now {self.state.last_seen_event_id}; alert {alert.id} {alert.type.value}")
        if self.on_alert is not None:
            try:
                self.on_alert(alert, audible)
            except Exception:
                logger.exception(f"[Poller] Alert callback failed for event {alert.id}")
        return added

    # ------------------------------------------------------------------
    # Alert and read state
    # ------------------------------------------------------------------

    def _schedule_dismiss(self) -> None:
        self._cancel_timer("_dismiss_handle")
        loop = asyncio.get_running_loop()
        self._dismiss_handle = loop.call_later(self.dismiss_after, self.dismiss_alert)

    def _cancel_timer(self, name: str) -> None:
        handle = getattr(self, name)
        if handle is not None:
            handle.cancel()
            setattr(self, name, None)

    def dismiss_alert(self) -> None:
        """Hide the active alert now (user action or auto-dismiss)."""
        self._cancel_timer("_dismiss_handle")
        self.state.active_alert = None

    def mark_all_read(self) -> None:
        self.state.mark_all_read()

    def clear(self) -> None:
        self.state.clear()

    def open_notification_list(self) -> None:
        """Mark everything read after a short delay so the unread badge visibly counts down."""
        if self.is_suspended:
            return
        self._cancel_timer("_mark_read_handle")
        loop = asyncio.get_running_loop()
        self._mark_read_handle = loop.call_later(self.mark_read_delay, self._mark_read_from_timer)

    def _mark_read_from_timer(self) -> None:
        self._mark_read_handle = None
        self.mark_all_read()

    def set_view(self, view: str) -> None:
        self.view = view
