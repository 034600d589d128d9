import logging
from enum import Enum
from typing import NamedTuple, Optional, Protocol, Tuple

from adlinkcrawl.domain.options import Options

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    INTERMEDIATE = "intermediate"
    FINAL = "final"


class NotificationEvent(NamedTuple):
    kind: NotificationKind
    num_errors: int
    report_url: str
    recipients: Tuple[str, ...]


class Notifier(Protocol):
    def notify(self, event: NotificationEvent) -> None: ...


class LoggingNotifier:
    """Default notifier: writes the notification to the log."""

    def notify(self, event: NotificationEvent) -> None:
        logger.info(
            "[%s] %d error(s) found; report at %s (to: %s)",
            event.kind.value,
            event.num_errors,
            event.report_url,
            ", ".join(event.recipients),
        )


class NotificationService:
    """Decides whether a run warrants a notification and sends it.

    A final notification goes out once the whole fleet has completed; an
    intermediate one may go out after each partial run when enabled.
    """

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier or LoggingNotifier()

    def decide(self, *, did_complete: bool, num_errors: int, new_errors: int, options: Options) -> Optional[NotificationKind]:
        if did_complete:
            if options.email_on_completion and (num_errors > 0 or options.email_non_errors):
                return NotificationKind.FINAL
            return None
        if options.email_each_run and (new_errors > 0 or options.email_non_errors):
            return NotificationKind.INTERMEDIATE
        return None

    def after_run(self, *, did_complete: bool, num_errors: int, new_errors: int, options: Options) -> Optional[NotificationEvent]:
        """Send the notification for this run, if any. Returns the event sent."""
        kind = self.decide(did_complete=did_complete, num_errors=num_errors, new_errors=new_errors, options=options)
        if kind is None:
            return None
        if not options.recipient_emails:
            logger.warning("No recipient addresses configured; skipping %s notification", kind.value)
            return None
        event = NotificationEvent(
            kind=kind,
            num_errors=num_errors,
            report_url=options.report_url,
            recipients=tuple(options.recipient_emails),
        )
        self.notifier.notify(event)
        return event
