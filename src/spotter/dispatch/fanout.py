"""Bounded-concurrency fan-out with per-recipient failure isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from spotter.core.types import UserHandle

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10
DEFAULT_SEND_TIMEOUT = 10.0


@dataclass
class FanoutReport:
    """Aggregate of one batch; `failures` maps recipient to error text."""

    sent: int = 0
    failed: int = 0
    failures: dict[UserHandle, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.sent + self.failed


async def fan_out(
    recipients: Iterable[UserHandle],
    send: Callable[[UserHandle], Awaitable[None]],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    timeout: float | None = DEFAULT_SEND_TIMEOUT,
) -> FanoutReport:
    """Run `send` once per recipient.

    At most `concurrency` sends are in flight. A send that raises or exceeds
    `timeout` seconds is counted as failed; the batch itself never raises
    for a recipient failure.

    Args:
        recipients: User handles to deliver to.
        send: Coroutine function delivering to one recipient.
        concurrency: Maximum number of sends in flight.
        timeout: Per-send timeout in seconds, None for no limit.

    Returns:
        FanoutReport with sent/failed counts.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    semaphore = asyncio.Semaphore(concurrency)
    report = FanoutReport()

    async def deliver(recipient: UserHandle) -> None:
        async with semaphore:
            try:
                await asyncio.wait_for(send(recipient), timeout)
            except asyncio.TimeoutError:
                report.failed += 1
                report.failures[recipient] = f"timed out after {timeout}s"
            except Exception as e:
                report.failed += 1
                report.failures[recipient] = str(e) or type(e).__name__
            else:
                report.sent += 1

    await asyncio.gather(*(deliver(recipient) for recipient in recipients))

    if report.failed:
        logger.warning(
            f"Fan-out finished with {report.failed} failure(s)",
            extra={"sent": report.sent, "failed": report.failed},
        )
    else:
        logger.debug(f"Fan-out delivered to {report.sent} recipient(s)")
    return report
