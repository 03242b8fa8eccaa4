"""
Terminal notification watcher.

    python -m app.client --role staff --user-name "John Host" --view host-portal
"""
import argparse
import asyncio
import logging
import sys

from app.client.feed import HttpNotificationFeed
from app.client.poller import NotificationPoller
from app.core.config import settings
from app.models.notification import NotificationType
from app.schemas.notification import NotificationEventResponse
from app.services.visibility import Identity

logger = logging.getLogger(__name__)

ALERT_TITLES = {
    NotificationType.NEW_VISITOR: "Arrival Alert",
    NotificationType.CHECK_IN_APPROVED: "Visit Approved",
    NotificationType.CHECK_IN_DECLINED: "Visit Declined",
}


def describe_alert(event: NotificationEventResponse) -> tuple[str, str]:
    """Title and body shown for an alert."""
    title = ALERT_TITLES.get(event.type, "Status Update")
    name = event.visitor_name or "Visitor"
    if event.type == NotificationType.CHECK_IN_APPROVED:
        body = f"{name} has been approved."
    elif event.type == NotificationType.CHECK_IN_DECLINED:
        body = f"{name} has been declined."
    elif event.visitor_name:
        body = f"{event.visitor_name} is here to see you."
    else:
        body = event.message or "A visitor has checked in."
    return title, body


def print_alert(event: NotificationEventResponse, audible: bool) -> None:
    title, body = describe_alert(event)
    bell = "\a" if audible else ""
    print(f"{bell}[{event.created_at:%H:%M:%S}] {title}: {body}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Watch the visitor notification feed from a terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m app.client --role reception --view reception
  python -m app.client --role staff --user-name "John Host" --view host-portal
  python -m app.client --base-url http://kiosk.local:8000 --since 120
        """
    )
    parser.add_argument("--base-url", default=settings.api_base_url,
                        help=f"API base URL (default: {settings.api_base_url})")
    parser.add_argument("--role", default=None, help="staff, reception or admin")
    parser.add_argument("--user-name", default=None, help="Staff name; staff only see their own visitors")
    parser.add_argument("--view", default="reception",
                        help="Current view; internal views (reception, host-portal, admin, staff-management) ring the bell")
    parser.add_argument("--since", type=int, default=0,
                        help="Start after this event id (default: 0, replays history)")
    parser.add_argument("--interval", type=float, default=settings.notification_poll_interval_seconds,
                        help="Seconds between polls")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    return parser


async def watch(args: argparse.Namespace) -> None:
    feed = HttpNotificationFeed(base_url=args.base_url)
    poller = NotificationPoller(
        feed,
        Identity.from_hints(args.role, args.user_name),
        view=args.view,
        on_alert=print_alert,
        interval=args.interval,
    )
    poller.state.last_seen_event_id = max(args.since, 0)
    try:
        async with poller:
            await asyncio.Event().wait()
    finally:
        feed.close()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format=settings.log_format
    )
    try:
        asyncio.run(watch(args))
    except KeyboardInterrupt:
        logger.info("Watcher interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
