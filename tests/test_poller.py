import asyncio

import pytest

from app.client.poller import NotificationPoller, PollerState
from app.client.state import ClientNotificationState
from app.models.notification import NotificationType
from app.services.visibility import Identity

from tests.helpers import FakeFeed, make_event


def make_poller(feed, **kwargs):
    options = dict(interval=60, timeout=1, dismiss_after=60, mark_read_delay=0.01)
    options.update(kwargs)
    return NotificationPoller(feed, Identity.from_hints("reception", "Rita"), **options)


def run(coro):
    return asyncio.run(coro)


def test_batch_produces_one_alert_for_highest_id():
    feed = FakeFeed()
    feed.add(1, 2, 3)
    alerts = []
    poller = make_poller(feed, on_alert=lambda event, audible: alerts.append(event.id))

    async def scenario():
        added = await poller.poll_once()
        await poller.stop()
        return added

    added = run(scenario())

    assert [n.id for n in added] == [3, 2, 1]
    assert [n.id for n in poller.state.notifications] == [3, 2, 1]
    assert poller.state.unread_count == 3
    assert poller.state.last_seen_event_id == 3
    assert alerts == [3]


def test_cursor_is_sent_and_only_moves_forward():
    feed = FakeFeed()
    feed.add(1, 2)
    poller = make_poller(feed)

    async def scenario():
        await poller.poll_once()
        await poller.poll_once()
        feed.add(5)
        await poller.poll_once()
        await poller.stop()

    run(scenario())

    assert feed.calls == [0, 2, 2]
    assert poller.state.last_seen_event_id == 5
    assert [n.id for n in poller.state.notifications] == [5, 2, 1]


def test_replayed_events_are_not_duplicated():
    state = ClientNotificationState(last_seen_event_id=0)
    state.merge([make_event(1), make_event(2)])

    added = state.merge([make_event(2), make_event(1), make_event(3)])

    assert [n.id for n in added] == [3]
    assert [n.id for n in state.notifications] == [3, 2, 1]


def test_events_at_or_below_cursor_are_ignored():
    state = ClientNotificationState(last_seen_event_id=10)

    assert state.merge([make_event(9), make_event(10)]) == []
    assert state.last_seen_event_id == 10
    assert state.notifications == []


def test_list_is_capped_keeping_most_recent():
    feed = FakeFeed()
    feed.add(*range(1, 61))
    poller = make_poller(feed, max_items=50)

    async def scenario():
        await poller.poll_once()
        await poller.stop()

    run(scenario())

    ids = [n.id for n in poller.state.notifications]
    assert len(ids) == 50
    assert ids[0] == 60
    assert ids[-1] == 11
    assert poller.state.last_seen_event_id == 60


def test_mark_all_read_is_idempotent_and_clear_keeps_cursor():
    feed = FakeFeed()
    feed.add(1, 2)
    poller = make_poller(feed)

    async def scenario():
        await poller.poll_once()
        poller.mark_all_read()
        poller.mark_all_read()
        assert poller.state.unread_count == 0
        assert len(poller.state.notifications) == 2

        poller.clear()
        assert poller.state.notifications == []
        assert await poller.poll_once() == []
        await poller.stop()

    run(scenario())

    assert poller.state.last_seen_event_id == 2
    assert feed.calls == [0, 2]


def test_failed_poll_leaves_state_unchanged():
    feed = FakeFeed()
    feed.add(1)
    poller = make_poller(feed)

    async def scenario():
        await poller.poll_once()
        feed.add(2)
        feed.fail = True
        failed = await poller.poll_once()
        feed.fail = False
        recovered = await poller.poll_once()
        await poller.stop()
        return failed, recovered

    failed, recovered = run(scenario())

    assert failed == []
    assert [n.id for n in recovered] == [2]
    assert feed.calls == [0, 1, 1]


def test_timed_out_poll_is_dropped():
    feed = FakeFeed()
    feed.add(1)
    poller = make_poller(feed, timeout=0.05)

    async def scenario():
        feed.gate = asyncio.Event()
        result = await poller.poll_once()
        await poller.stop()
        return result

    assert run(scenario()) == []
    assert poller.state.last_seen_event_id == 0
    assert poller.state.active_alert is None


def test_timed_out_request_blocks_new_ones_until_it_finishes():
    feed = FakeFeed()
    feed.add(1)
    poller = make_poller(feed, timeout=0.05)

    async def scenario():
        feed.gate = asyncio.Event()
        assert await poller.poll_once() == []
        assert poller.in_flight
        assert poller.tick() is False
        assert await poller.poll_once() == []

        # the late answer arrives but is not applied
        feed.gate.set()
        await asyncio.sleep(0.01)
        assert not poller.in_flight
        assert poller.state.last_seen_event_id == 0

        feed.gate = None
        added = await poller.poll_once()
        await poller.stop()
        return added

    added = run(scenario())

    assert [n.id for n in added] == [1]
    assert feed.calls == [0, 0]


class ExplodingFeed(FakeFeed):
    async def fetch(self, last_id, identity):
        self.calls.append(last_id)
        raise KeyError("notifications")


def test_unexpected_feed_error_is_contained():
    feed = ExplodingFeed()
    poller = make_poller(feed)

    async def scenario():
        assert await poller.poll_once() == []
        assert not poller.in_flight

        assert poller.tick() is True
        task = poller._poll_task
        await asyncio.sleep(0.01)
        assert task.done()
        assert task.result() == []
        await poller.stop()

    run(scenario())

    assert feed.calls == [0, 0]
    assert poller.state.last_seen_event_id == 0


def test_tick_is_skipped_while_request_in_flight():
    feed = FakeFeed()
    feed.add(1)
    poller = make_poller(feed)

    async def scenario():
        feed.gate = asyncio.Event()
        assert poller.tick() is True
        await asyncio.sleep(0)
        assert poller.in_flight
        assert poller.status == PollerState.POLLING
        assert poller.tick() is False
        assert await poller.poll_once() == []

        feed.gate.set()
        await asyncio.sleep(0.01)
        assert not poller.in_flight
        assert poller.status == PollerState.IDLE
        await poller.stop()

    run(scenario())

    assert feed.calls == [0]
    assert poller.state.last_seen_event_id == 1


def test_stop_cancels_in_flight_request_and_timers():
    feed = FakeFeed()
    feed.add(1)
    alerts = []
    poller = make_poller(feed, dismiss_after=0.05, on_alert=lambda event, audible: alerts.append(event.id))

    async def scenario():
        await poller.poll_once()
        assert poller.state.active_alert is not None

        feed.add(2)
        feed.gate = asyncio.Event()
        poller.tick()
        await asyncio.sleep(0)
        await poller.stop()

        feed.gate.set()
        await asyncio.sleep(0.1)

    run(scenario())

    assert poller.status == PollerState.SUSPENDED
    assert alerts == [1]
    assert poller.state.last_seen_event_id == 1
    # the dismiss timer was cancelled along with everything else
    assert poller.state.active_alert is not None
    assert poller.tick() is False


def test_stopped_poller_cannot_restart():
    poller = make_poller(FakeFeed())

    async def scenario():
        poller.start()
        await poller.stop()
        with pytest.raises(RuntimeError):
            poller.start()
        assert await poller.poll_once() == []

    run(scenario())


def test_alert_is_dismissed_automatically():
    feed = FakeFeed()
    feed.add(1)
    poller = make_poller(feed, dismiss_after=0.02)

    async def scenario():
        await poller.poll_once()
        assert poller.state.active_alert.id == 1
        await asyncio.sleep(0.05)
        assert poller.state.active_alert is None
        await poller.stop()

    run(scenario())


def test_newer_alert_replaces_current_one():
    feed = FakeFeed()
    feed.add(1)
    poller = make_poller(feed)

    async def scenario():
        await poller.poll_once()
        feed.add(2, event_type=NotificationType.CHECK_IN_APPROVED)
        await poller.poll_once()
        active = poller.state.active_alert
        poller.dismiss_alert()
        await poller.stop()
        return active

    active = run(scenario())

    assert active.id == 2
    assert active.type == NotificationType.CHECK_IN_APPROVED
    assert poller.state.active_alert is None


def test_opening_list_marks_read_after_delay():
    feed = FakeFeed()
    feed.add(1, 2)
    poller = make_poller(feed, mark_read_delay=0.02)

    async def scenario():
        await poller.poll_once()
        poller.open_notification_list()
        assert poller.state.unread_count == 2
        await asyncio.sleep(0.05)
        assert poller.state.unread_count == 0
        await poller.stop()

    run(scenario())


@pytest.mark.parametrize("view, audible", [
    ("reception", True),
    ("host-portal", True),
    ("admin", True),
    ("staff-management", True),
    ("check-in", False),
    ("check-out", False),
])
def test_alert_sound_depends_on_view(view, audible):
    feed = FakeFeed()
    feed.add(1)
    calls = []
    poller = make_poller(feed, view=view, on_alert=lambda event, flag: calls.append(flag))

    async def scenario():
        await poller.poll_once()
        await poller.stop()

    run(scenario())

    assert calls == [audible]


def test_failing_alert_callback_does_not_lose_events():
    feed = FakeFeed()
    feed.add(1)

    def broken(event, audible):
        raise RuntimeError("display gone")

    poller = make_poller(feed, on_alert=broken)

    async def scenario():
        await poller.poll_once()
        await poller.stop()

    run(scenario())

    assert poller.state.last_seen_event_id == 1
    assert len(poller.state.notifications) == 1


def test_ticker_polls_on_interval():
    feed = FakeFeed()
    feed.add(1)

    async def scenario():
        async with make_poller(feed, interval=0.01) as poller:
            await asyncio.sleep(0.1)
        return poller

    poller = run(scenario())

    assert len(feed.calls) >= 2
    assert feed.calls[0] == 0
    assert set(feed.calls[1:]) == {1}
    assert poller.status == PollerState.SUSPENDED
