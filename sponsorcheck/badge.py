"""
Sponsorship badge rendered into the page.

The badge is a pure view of a Verdict: color and icon by status, label from
the verdict message, and the evidence as hover text. It is placed next to the
job title when one of the known containers is present and otherwise floats
in a fixed corner of the page.
"""

from dataclasses import dataclass
from typing import List, Optional

from bs4 import Tag

from .analyzer import Status, Verdict
from .logger import StructuredLogger, get_logger
from .page import Page

BADGE_ID = "h1b-sponsor-badge"
BADGE_CONTAINER_ID = "h1b-sponsor-badge-container"
BADGE_CLASS = "h1b-sponsor-badge"
FLOATING_CLASS = "h1b-sponsor-badge--floating"

CONTAINER_SELECTORS = [
    ".jobs-details-top-card__job-title-lockup",
    ".jobs-details__main-content .jobs-details-top-card",
    ".jobs-search__job-details .jobs-details-top-card",
    ".jobs-details__main-content",
    "[data-job-id]",
]

TITLE_SELECTOR = 'h1[class*="job-title"], h2[class*="job-title"]'

MAX_TOOLTIP_KEYWORDS = 5


@dataclass(frozen=True)
class BadgeStyle:
    background: str
    border: str
    text: str
    icon: str


STYLES = {
    Status.SPONSORABLE: BadgeStyle("#057642", "#034d2e", "#ffffff", "✓"),
    Status.NOT_SPONSORABLE: BadgeStyle("#c7372f", "#a02e27", "#ffffff", "✗"),
    Status.UNCLEAR: BadgeStyle("#e37318", "#b85a14", "#ffffff", "?"),
}

DEFAULT_STYLE = BadgeStyle("#666666", "#444444", "#ffffff", "?")

WRAPPER_CSS = "margin: 8px 0; display: flex; align-items: center;"
FLOATING_CSS = "position: fixed; top: 80px; right: 24px; z-index: 10000;"


def style_for(status: Status) -> BadgeStyle:
    return STYLES.get(status, DEFAULT_STYLE)


def tooltip_text(verdict: Verdict) -> str:
    """Hover text: message, confidence, deciding phrase and matched keywords."""
    lines = [verdict.message, "", f"Confidence: {verdict.confidence.label.upper()}", ""]
    if verdict.cited_phrase:
        lines.extend([f'Deciding phrase: "{verdict.cited_phrase}"', ""])

    keywords = verdict.phrases()
    if keywords:
        shown = ", ".join(keywords[:MAX_TOOLTIP_KEYWORDS])
        if len(keywords) > MAX_TOOLTIP_KEYWORDS:
            shown += f" (+{len(keywords) - MAX_TOOLTIP_KEYWORDS} more)"
        lines.append(f"Matched keywords:\n{shown}")
    else:
        lines.append("No specific keywords found")
    return "\n".join(lines)


def badge_css(style: BadgeStyle) -> str:
    return (
        "display: inline-flex; align-items: center; gap: 6px; padding: 6px 12px; "
        f"background-color: {style.background}; border: 1px solid {style.border}; "
        f"border-radius: 16px; color: {style.text}; font-size: 13px; font-weight: 600; "
        "cursor: help; z-index: 10000; position: relative;"
    )


def find_container(page: Page) -> Optional[Tag]:
    """First known anchor for the badge, else the parent of a job title."""
    for selector in CONTAINER_SELECTORS:
        element = page.select_one(selector)
        if element is not None:
            return element

    title = page.select_one(TITLE_SELECTOR)
    if title is not None and title.parent is not None:
        return title.parent
    return None


class BadgeRenderer:
    def __init__(self, page: Page, logger: Optional[StructuredLogger] = None):
        self.page = page
        self.logger = logger or get_logger()

    def is_present(self) -> bool:
        return self.page.get_element_by_id(BADGE_ID) is not None

    def _build(self, verdict: Verdict) -> Tag:
        soup = self.page.soup
        style = style_for(verdict.status)

        wrapper = soup.new_tag("div", attrs={"id": BADGE_CONTAINER_ID, "style": WRAPPER_CSS})
        badge = soup.new_tag(
            "div",
            attrs={
                "id": BADGE_ID,
                "class": BADGE_CLASS,
                "data-status": verdict.status.value,
                "data-confidence": verdict.confidence.label,
                "title": tooltip_text(verdict),
                "style": badge_css(style),
            },
        )
        icon = soup.new_tag("span", attrs={"class": f"{BADGE_CLASS}__icon"})
        icon.string = style.icon
        label = soup.new_tag("span", attrs={"class": f"{BADGE_CLASS}__label"})
        label.string = verdict.message

        badge.append(icon)
        badge.append(label)
        wrapper.append(badge)
        return wrapper

    def render(self, verdict: Verdict) -> bool:
        """
        Show the badge for a verdict, replacing any badge already on the page.

        Returns:
            True if a badge is on the page afterwards.
        """
        self.remove()
        wrapper = self._build(verdict)

        container = find_container(self.page)
        if container is not None:
            title = container.find(["h1", "h2"])
            if title is not None:
                title.insert_after(wrapper)
            else:
                container.insert(0, wrapper)
            return True

        body = self.page.body
        if body is None:
            self.logger.warning("No badge anchor and no document body; badge not shown",
                                url=self.page.url)
            return False

        self.logger.record_render_fallback()
        self.logger.debug("Badge container not found, using floating badge", url=self.page.url)
        wrapper["class"] = FLOATING_CLASS
        wrapper["style"] = WRAPPER_CSS + " " + FLOATING_CSS
        body.append(wrapper)
        return True

    def remove(self) -> None:
        for element_id in (BADGE_ID, BADGE_CONTAINER_ID):
            existing: List[Tag] = self.page.soup.find_all(id=element_id)
            for el in existing:
                if not el.decomposed:
                    el.decompose()
