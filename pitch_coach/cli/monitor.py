"""Terminal pitch monitor: prints feedback for every voiced tick."""

import time
from collections import Counter
from typing import Callable, Optional

from ..core.interfaces import IPitchSource
from ..logger import get_logger
from ..session import FeedbackFrame, PracticeSession

logger = get_logger(__name__)


def format_frame(frame: FeedbackFrame) -> str:
    """One line of monitor output for a tick with a detected pitch."""
    classification = frame.classification
    config = frame.config
    return (
        f"[{frame.elapsed:6.2f}s] {frame.frequency:7.1f}Hz  {frame.detected.label:<6} "
        f"target {config.target.label(config.naming):<6} "
        f"{classification.cents:+4d} cents  {classification.status.value:<7} {classification.label}"
    )


def run_monitor(
    session: PracticeSession,
    pitch_source: IPitchSource,
    duration: float = 10.0,
    rate: float = 60.0,
    output: Callable[[str], None] = print,
    sleep: Callable[[float], None] = time.sleep,
    max_ticks: Optional[int] = None,
) -> Counter:
    """Tick the session at ``rate`` Hz for ``duration`` seconds.

    Args:
        session: Idle practice session to drive
        pitch_source: Source of one pitch reading per tick
        duration: Run time in seconds
        rate: Ticks per second
        output: Callable receiving each formatted line
        sleep: Sleep function between ticks
        max_ticks: Stop after this many ticks regardless of duration

    Returns:
        Counter of ticks per tolerance status ('perfect', 'close', 'far', 'silent')
    """
    counts: Counter = Counter()
    if not pitch_source.start():
        logger.error("Failed to start pitch source")
        return counts

    session.start()
    logger.info(f"Monitoring pitch for {duration} seconds...")
    interval = 1.0 / rate
    ticks = 0
    try:
        while True:
            frame = session.tick(pitch_source.read())
            ticks += 1
            if frame.has_signal:
                counts[frame.classification.status.value] += 1
                output(format_frame(frame))
            else:
                counts["silent"] += 1

            if frame.elapsed >= duration or (max_ticks is not None and ticks >= max_ticks):
                break
            sleep(interval)
    except KeyboardInterrupt:
        logger.info("Monitor interrupted by user")
    finally:
        session.stop()
        pitch_source.stop()

    logger.info(f"Monitor finished after {ticks} ticks")
    for status, count in counts.most_common():
        logger.info(f"  {status}: {count} ticks")
    return counts
