"""Job id, description and fingerprint extraction from a Page."""

import copy
from typing import List, Optional

from bs4 import Tag

from .badge import BADGE_CONTAINER_ID, BADGE_ID
from .page import Page
from .urls import job_id_from_url

DESCRIPTION_SELECTORS = [
    ".jobs-description-content__text",
    ".show-more-less-html__markup",
    ".jobs-description__text",
    ".jobs-box__html-content",
    '[class*="jobs-description"]',
    '[class*="description-content"]',
    ".jobs-description-content",
    ".jobs-box--fadeout",
]

MAIN_CONTENT_SELECTORS = [".jobs-details__main-content", ".jobs-search__job-details"]

EXCLUDE_SELECTORS = [
    "nav",
    "header",
    "footer",
    "button",
    ".jobs-details-top-card",
    f"#{BADGE_CONTAINER_ID}",
    f"#{BADGE_ID}",
]

MIN_DESCRIPTION_LENGTH = 100
FINGERPRINT_PREFIX = 200


def extract_job_id(page: Page) -> Optional[str]:
    """Job id from the URL, else from the first data-job-id attribute."""
    job_id = job_id_from_url(page.url)
    if job_id:
        return job_id
    el = page.select_one("[data-job-id]")
    if el is not None:
        value = el.get("data-job-id")
        return value or None
    return None


def _is_within(inner: Tag, outer: Tag) -> bool:
    return any(parent is outer for parent in inner.parents)


def _description_elements(page: Page, min_length: int) -> List[Tag]:
    # Selectors overlap; a container nested in (or wrapping) one already
    # taken would repeat the same text.
    elements: List[Tag] = []
    for selector in DESCRIPTION_SELECTORS:
        for el in page.select(selector):
            if len(el.get_text().strip()) <= min_length:
                continue
            if any(el is c or _is_within(el, c) or _is_within(c, el) for c in elements):
                continue
            elements.append(el)
    return elements


def _main_content_text(page: Page) -> str:
    for selector in MAIN_CONTENT_SELECTORS:
        main = page.select_one(selector)
        if main is None:
            continue
        clone = copy.copy(main)
        for sel in EXCLUDE_SELECTORS:
            try:
                found = clone.select(sel)
            except ValueError:
                continue
            for el in found:
                if not el.decomposed:
                    el.decompose()
        return clone.get_text()
    return ""


def extract_description(page: Page, min_length: int = MIN_DESCRIPTION_LENGTH) -> Optional[str]:
    """
    Description text of the job currently shown, or None while it is loading.

    Every description container whose text is longer than min_length
    contributes once. When none qualify, the main job pane is used with its
    navigation and top card stripped.
    """
    parts = [el.get_text().strip() for el in _description_elements(page, min_length)]
    description = " ".join(parts)
    if not description:
        description = _main_content_text(page)
    return description.strip() or None


def fingerprint(text: Optional[str], prefix: int = FINGERPRINT_PREFIX) -> Optional[str]:
    """Bounded prefix plus total length. Cheap and order-sensitive."""
    if not text:
        return None
    return f"{text[:prefix].strip()}|{len(text)}"
