import math
import signal
import time
from typing import Callable, Optional

from core.config import (
    DELAY_SECONDS,
    ESTIMATED_TOTAL,
    OUTPUT_DIR,
    PAGE_SIZE,
    SAVE_EVERY,
    SOURCE,
    STAGNATION_WINDOW,
    SUMMARY_TOP_N,
)
from core.logger import get_logger
from core.registry import Registry
from core.report import build_summary
from core.storage import Checkpoint
from fetchers import FETCHERS

logger = get_logger(__name__)

INIT = "INIT"
RUNNING = "RUNNING"
EXHAUSTED = "EXHAUSTED"
STAGNANT = "STAGNANT"
INTERRUPTED = "INTERRUPTED"
FINALIZING = "FINALIZING"
DONE = "DONE"
FAILED = "FAILED"

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ScrapeInterrupted(BaseException):
    """Raised out of the loop when the operator asks the run to stop.

    Derives from BaseException so the fetcher's catch-all cannot eat it.
    """


class Scraper:
    """
    Drives fetch -> merge -> checkpoint until the catalog runs dry, stops
    yielding new icons, or the operator interrupts. Owns all run state.
    """

    def __init__(
        self,
        fetcher,
        checkpoint: Checkpoint,
        page_size: int = PAGE_SIZE,
        delay: float = DELAY_SECONDS,
        save_every: int = SAVE_EVERY,
        stagnation_window: int = STAGNATION_WINDOW,
        estimated_total: int = ESTIMATED_TOTAL,
        summary_top_n: int = SUMMARY_TOP_N,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.fetcher = fetcher
        self.checkpoint = checkpoint
        self.page_size = page_size
        self.delay = delay
        self.save_every = max(1, save_every)
        self.stagnation_window = max(1, stagnation_window)
        self.estimated_total = estimated_total
        self.summary_top_n = summary_top_n
        self._sleep = sleep or time.sleep

        self.registry = Registry()
        self.total_available: Optional[int] = None
        self.start_page = 0
        self.pages_fetched = 0
        self.state = INIT
        self.stop_reason: Optional[str] = None

        self._total_captured = False
        self._stop_requested = False
        self._finalized = False

    # --- interruption -------------------------------------------------

    def request_stop(self) -> None:
        self._stop_requested = True

    def _handle_signal(self, signum, frame) -> None:
        name = signal.Signals(signum).name
        self.request_stop()
        if self.state != RUNNING:
            logger.warning("Received %s; stopping after current step.", name)
            return
        logger.warning("Received %s! Saving progress...", name)
        raise ScrapeInterrupted(name)

    def _install_signal_handlers(self) -> dict:
        previous = {}
        for sig in STOP_SIGNALS:
            try:
                previous[sig] = signal.signal(sig, self._handle_signal)
            except ValueError as e:
                # Not on the main thread; the stop flag still works.
                logger.debug("Cannot install handler for %s: %s", sig, e)
        return previous

    @staticmethod
    def _restore_signal_handlers(previous: dict) -> None:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    # --- run ----------------------------------------------------------

    def run(self) -> int:
        """Scrape, always finalize, and return the process exit status."""
        previous = self._install_signal_handlers()
        try:
            return self._run()
        finally:
            self._restore_signal_handlers(previous)

    def _run(self) -> int:
        exit_code = 0
        try:
            self._scrape()
        except ScrapeInterrupted as e:
            self.state = INTERRUPTED
            logger.info("Interrupted (%s); finalizing.", e)
        except Exception as e:
            self.state = FAILED
            logger.error("Failed: %s", e)
            logger.debug("Scrape failure details", exc_info=True)
            exit_code = 1

        self.stop_reason = self.state

        try:
            self.finalize()
        except Exception as e:
            self.state = FAILED
            logger.error("Final save failed: %s", e)
            logger.debug("Final save failure details", exc_info=True)
            return 1

        return exit_code

    def _scrape(self) -> None:
        self.state = INIT
        self.start_page, self.registry, self.total_available = self.checkpoint.load()

        catalog_size = self.total_available or self.estimated_total
        total_pages = math.ceil(catalog_size / self.page_size)
        logger.info("Estimated pages: %d", total_pages)
        logger.info("Starting from page: %d", self.start_page)

        self.state = RUNNING
        stale_pages = 0

        for page in range(self.start_page, total_pages):
            if self._stop_requested:
                raise ScrapeInterrupted("stop requested")

            items = self.fetcher.fetch(page)
            self._capture_total()
            if not items:
                logger.info("No more icons at page %d", page)
                self.state = EXHAUSTED
                return

            self.pages_fetched += 1
            new_count = self.registry.merge(items)

            if page % 10 == 0 or new_count < len(items):
                logger.info("Page %d: +%d new icons (%d returned)", page, new_count, len(items))

            if page % self.save_every == 0:
                self.checkpoint.save(self.registry, self.total_available)

            self._sleep(self.delay)

            stale_pages = 0 if new_count else stale_pages + 1
            past_window = page > self.start_page + self.stagnation_window
            if past_window and stale_pages >= self.stagnation_window:
                logger.info("No new icons in the last %d pages, stopping", stale_pages)
                self.state = STAGNANT
                return

        self.state = EXHAUSTED

    def _capture_total(self) -> None:
        if self._total_captured:
            return
        total = getattr(self.fetcher, "total_available", None)
        if total is None:
            return
        if self.total_available is not None and total != self.total_available:
            logger.info("Remote total changed: %d -> %d", self.total_available, total)
        self.total_available = total
        self._total_captured = True

    def finalize(self) -> None:
        """Final save and summary. Every stop path ends here, once."""
        if self._finalized:
            return
        self._finalized = True
        self.state = FINALIZING

        self.checkpoint.save(self.registry, self.total_available)
        logger.info(
            "\n%s",
            build_summary(self.registry, self.total_available, self.summary_top_n),
        )

        self.state = DONE


def build_scraper() -> Scraper:
    fetcher_cls = FETCHERS.get(SOURCE)
    if not fetcher_cls:
        logger.error("No fetcher registered for source '%s'.", SOURCE)
        raise SystemExit(1)

    return Scraper(
        fetcher=fetcher_cls(page_size=PAGE_SIZE),
        checkpoint=Checkpoint(OUTPUT_DIR, PAGE_SIZE),
    )


def main() -> None:
    logger.info("LaMetric Icon Scraper - Full Database (output: %s)", OUTPUT_DIR)
    try:
        raise SystemExit(build_scraper().run())
    except Exception as e:
        logger.error("Fatal scraper error: %s", e)
        logger.debug("Fatal scraper error details", exc_info=True)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
