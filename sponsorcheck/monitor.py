"""
Page monitor: keeps the sponsorship badge in sync with the job on screen.

Four producers feed one decision: history navigation, debounced mutation
batches, delegated clicks on job cards and a fallback poll. Each of them ends
in check_for_change(), which compares the stored JobIdentity with the one
read from the page and reclassifies only when something actually changed.

The monitor runs on a single cooperative thread. A busy flag keeps at most
one classify-and-render cycle in flight; triggers that arrive meanwhile are
dropped and the next poll or mutation picks the state up again.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from bs4 import NavigableString, Tag
from soupsieve import SelectorSyntaxError

from .analyzer import Status, Verdict, analyze
from .badge import BadgeRenderer
from .config import Settings
from .extract import extract_description, extract_job_id, fingerprint
from .highlighter import Highlighter
from .logger import StructuredLogger, get_logger
from .page import CLICK, MUTATION, NAVIGATION, Page
from .timers import Scheduler, TimerHandle
from .urls import canonical_url, is_job_page

JOB_CONTENT_SELECTORS = [
    ".jobs-description",
    ".jobs-details",
    ".jobs-search__job-details",
    '[class*="jobs-description"]',
    '[class*="job-details"]',
]

JOB_LIST_ITEM_SELECTOR = '[data-job-id], [class*="job-card"], [class*="jobs-search-result"]'

_SELECTOR_ERRORS = (SelectorSyntaxError, ValueError, TypeError)


class Phase(Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    PROCESSING = "processing"


@dataclass(frozen=True)
class JobIdentity:
    job_id: Optional[str] = None
    content_fingerprint: Optional[str] = None


EMPTY_IDENTITY = JobIdentity()


def needs_reclassification(stored: JobIdentity, current: JobIdentity, indicator_present: bool) -> bool:
    """True when the job, its content, or the badge on the page has changed."""
    return (
        current.job_id != stored.job_id
        or current.content_fingerprint != stored.content_fingerprint
        or not indicator_present
    )


@dataclass
class MonitorState:
    identity: JobIdentity = EMPTY_IDENTITY
    busy: bool = False
    phase: Phase = Phase.IDLE
    attached: bool = False
    last_url: Optional[str] = None
    verdict: Optional[Verdict] = None
    debounce_timer: Optional[TimerHandle] = None
    poll_timer: Optional[TimerHandle] = None
    retry_timer: Optional[TimerHandle] = None
    retry_job_id: Optional[str] = None
    retry_count: int = 0
    pending: Dict[int, TimerHandle] = field(default_factory=dict)


def _matches_any(target: Tag, selectors: Iterable[str]) -> bool:
    for selector in selectors:
        try:
            if target.css.closest(selector) is not None:
                return True
            if target.css.select_one(selector) is not None:
                return True
        except _SELECTOR_ERRORS:
            continue
    return False


def affects_job_content(target) -> bool:
    """
    True when a mutation target is, sits inside, or contains a job container.

    Text-node targets are judged by their parent element; anything that is
    not an element is ignored.
    """
    if isinstance(target, NavigableString):
        target = target.parent
    if not isinstance(target, Tag):
        return False
    return _matches_any(target, JOB_CONTENT_SELECTORS)


def is_job_list_item(target) -> bool:
    if isinstance(target, NavigableString):
        target = target.parent
    if not isinstance(target, Tag):
        return False
    try:
        return target.css.closest(JOB_LIST_ITEM_SELECTOR) is not None
    except _SELECTOR_ERRORS:
        return False


class PageMonitor:
    def __init__(
        self,
        page: Page,
        scheduler: Scheduler,
        settings: Optional[Settings] = None,
        badge: Optional[BadgeRenderer] = None,
        highlighter: Optional[Highlighter] = None,
        classify: Callable[[Optional[str]], Verdict] = analyze,
        logger: Optional[StructuredLogger] = None,
    ):
        self.page = page
        self.scheduler = scheduler
        self.settings = settings or Settings()
        self.logger = logger or get_logger()
        self.badge = badge or BadgeRenderer(page, self.logger)
        self.highlighter = highlighter or Highlighter(page, self.logger)
        self.classify = classify
        self.state = MonitorState()
        self._verdict_listeners: List[Callable[[Verdict], None]] = []

    # Lifecycle

    def attach(self) -> None:
        """Start listening to the page and run the initial check."""
        if self.state.attached:
            return
        self.state.attached = True
        self.state.last_url = self.page.url
        self.page.subscribe(NAVIGATION, self._on_navigation)
        self.page.subscribe(MUTATION, self._on_mutations)
        self.page.subscribe(CLICK, self._on_click)
        self.logger.debug("Page monitor attached", url=self.page.url)
        self._guarded(self._process)
        self._schedule_poll()

    def detach(self) -> None:
        """Stop listening and cancel every pending timer."""
        if not self.state.attached:
            return
        self.page.unsubscribe(NAVIGATION, self._on_navigation)
        self.page.unsubscribe(MUTATION, self._on_mutations)
        self.page.unsubscribe(CLICK, self._on_click)
        for handle in list(self.state.pending.values()):
            handle.cancel()
        self.state.pending.clear()
        self.state.debounce_timer = None
        self.state.poll_timer = None
        self.state.retry_timer = None
        self.state.attached = False
        self.state.busy = False
        self.state.phase = Phase.IDLE
        self.logger.debug("Page monitor detached", url=self.page.url)

    def add_verdict_listener(self, callback: Callable[[Verdict], None]) -> None:
        self._verdict_listeners.append(callback)

    # Timer plumbing

    def _later(self, delay: float, callback: Callable, *args) -> TimerHandle:
        key: List[int] = []

        def fire():
            self.state.pending.pop(key[0], None)
            self._guarded(callback, *args)

        handle = self.scheduler.call_later(delay, fire)
        key.append(id(handle))
        self.state.pending[id(handle)] = handle
        return handle

    def _guarded(self, callback: Callable, *args) -> None:
        if not self.state.attached:
            return
        try:
            callback(*args)
        except Exception as e:
            self.logger.error(
                "Page monitor callback failed",
                callback=getattr(callback, "__name__", repr(callback)),
                error=str(e),
                url=self.page.url,
            )
            self.logger.record_error(type(e).__name__)
            self.state.busy = False
            self.state.phase = Phase.IDLE
            self._drop_indicator()

    def _drop_indicator(self) -> None:
        try:
            self.badge.remove()
            self.highlighter.remove_highlights()
        except Exception as e:
            self.logger.error("Could not remove badge after failure", error=str(e))

    def _schedule_poll(self) -> None:
        self.state.poll_timer = self._later(self.settings.poll_interval, self._poll)

    # Producers

    def _on_navigation(self, kind: str) -> None:
        self._guarded(self._navigated, kind)

    def _navigated(self, kind: str) -> None:
        # The SPA updates location after pushState returns; look a moment later.
        self._later(self.settings.navigation_delay, self._check_url, kind)

    def _check_url(self, kind: str) -> None:
        url = self.page.url
        if canonical_url(url or "") == canonical_url(self.state.last_url or ""):
            return
        self.state.last_url = url
        self.logger.debug("URL changed", via=kind, url=url)
        self.handle_url_change()

    def _on_mutations(self, targets) -> None:
        self._guarded(self._mutated, targets)

    def _mutated(self, targets) -> None:
        if not any(affects_job_content(t) for t in targets):
            return
        if self.state.debounce_timer is not None:
            self.state.debounce_timer.cancel()
            self.state.pending.pop(id(self.state.debounce_timer), None)
        self.state.debounce_timer = self._later(self.settings.debounce_delay, self._debounced_check)

    def _debounced_check(self) -> None:
        self.state.debounce_timer = None
        self.check_for_change()

    def _on_click(self, target) -> None:
        self._guarded(self._clicked, target)

    def _clicked(self, target) -> None:
        # Click handlers run before the SPA swaps the job pane.
        if is_job_list_item(target):
            self._later(self.settings.click_delay, self.check_for_change)

    def _poll(self) -> None:
        self._schedule_poll()
        if is_job_page(self.page.url):
            self.check_for_change()

    # Decision

    def read_identity(self) -> Tuple[JobIdentity, Optional[str]]:
        """Job identity and description as currently shown on the page."""
        job_id = extract_job_id(self.page)
        description = extract_description(self.page, self.settings.min_description_length)
        return JobIdentity(job_id, fingerprint(description, self.settings.fingerprint_prefix)), description

    def handle_url_change(self) -> None:
        """Clear everything shown for the old job and process the new one."""
        new_job_id = extract_job_id(self.page)
        if new_job_id == self.state.identity.job_id:
            return
        self._reset_identity()
        # No-op when another trigger already processed the new job.
        self._later(self.settings.navigation_settle_delay, self._process)

    def check_for_change(self) -> None:
        self.logger.record_check()
        if self.state.busy:
            self.logger.record_skipped_busy()
            return
        current, _ = self.read_identity()
        if self.state.retry_timer is not None and self.state.retry_job_id == current.job_id:
            # the pending retry owns this job until it fires
            return
        if not needs_reclassification(self.state.identity, current, self.badge.is_present()):
            return
        if current.job_id != self.state.identity.job_id:
            self._reset_identity()
        self._process(True)

    def check_now(self) -> None:
        """Run a change check immediately, outside any timer."""
        self._guarded(self.check_for_change)

    def _reset_identity(self) -> None:
        self.state.identity = EMPTY_IDENTITY
        self.state.verdict = None
        if self.state.retry_timer is not None:
            self.state.retry_timer.cancel()
            self.state.pending.pop(id(self.state.retry_timer), None)
            self.state.retry_timer = None
        self.badge.remove()
        self.highlighter.remove_highlights()

    # Processing

    def _process(self, force: bool = False) -> None:
        if self.state.busy:
            self.logger.record_skipped_busy()
            return
        if not is_job_page(self.page.url):
            return

        current, description = self.read_identity()
        if not force and not needs_reclassification(self.state.identity, current, self.badge.is_present()):
            return

        if description is None:
            self._schedule_retry(current.job_id)
            return

        self.state.retry_job_id = None
        self.state.retry_count = 0
        self.state.busy = True
        self.state.phase = Phase.PROCESSING
        self.state.identity = current

        verdict = self.classify(description)
        self.logger.record_classification(verdict.status.value)

        if extract_job_id(self.page) != current.job_id:
            self._discard_stale(current.job_id)
            return

        self.state.verdict = verdict
        self.badge.render(verdict)
        self.logger.info(
            "Job classified",
            job_id=current.job_id,
            status=verdict.status.value,
            confidence=verdict.confidence.label,
            cited=verdict.cited_phrase,
        )
        for listener in self._verdict_listeners:
            listener(verdict)

        if verdict.status is Status.NOT_SPONSORABLE:
            self._later(self.settings.highlight_delay, self._highlight, verdict, description, current.job_id)
        else:
            self.highlighter.remove_highlights()
            self._finish()

    def _highlight(self, verdict: Verdict, description: str, job_id: Optional[str]) -> None:
        try:
            if self.state.identity.job_id != job_id or extract_job_id(self.page) != job_id:
                self.logger.record_stale_result()
                self.logger.debug("Skipping highlight for a job no longer shown", job_id=job_id)
                return
            self.highlighter.highlight(verdict, description)
        finally:
            self._finish()

    def _discard_stale(self, job_id: Optional[str]) -> None:
        self.logger.record_stale_result()
        self.logger.debug("Discarding verdict for a job no longer shown", job_id=job_id)
        self.state.identity = EMPTY_IDENTITY
        self._finish()

    def _finish(self) -> None:
        self.state.busy = False
        self.state.phase = Phase.IDLE

    def _schedule_retry(self, job_id: Optional[str]) -> None:
        """Wait for a description that is still loading, once per pending id."""
        if self.state.retry_timer is not None:
            return
        if self.state.retry_job_id != job_id:
            self.state.retry_job_id = job_id
            self.state.retry_count = 0
        if self.state.retry_count >= self.settings.max_extraction_retries:
            self.logger.debug("Description never appeared, waiting for next trigger", job_id=job_id)
            self.state.phase = Phase.IDLE
            return
        self.state.retry_count += 1
        self.state.phase = Phase.EXTRACTING
        self.logger.record_extraction_retry()
        self.state.retry_timer = self._later(self.settings.retry_delay, self._retry, job_id)

    def _retry(self, job_id: Optional[str]) -> None:
        self.state.retry_timer = None
        self.state.phase = Phase.IDLE
        if extract_job_id(self.page) != job_id:
            self.logger.debug("Job changed before retry, dropping it", job_id=job_id)
            return
        self._process(True)
