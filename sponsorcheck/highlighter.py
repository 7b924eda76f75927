"""
Highlights the phrase that ruled sponsorship out.

Only NotSponsorable verdicts are highlighted. The cited phrase is wrapped in a
span inside the first description container whose text contains it; when the
phrase is split across elements, the sentence around it is tried instead.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from .analyzer import Status, Verdict
from .logger import StructuredLogger, get_logger
from .page import Page

HIGHLIGHT_CLASS = "h1b-sponsor-highlight"

HIGHLIGHT_SELECTORS = [
    ".jobs-description-content__text",
    ".show-more-less-html__markup",
    ".jobs-description__text",
    ".jobs-box__html-content",
    ".jobs-description-content",
    '[class*="jobs-description"]',
]

SENTENCE_END = re.compile(r"[.!?]\s+|$")
MIN_SENTENCE_LENGTH = 10


def extract_sentence(text: str, start: int, length: int) -> Optional[str]:
    """The sentence around text[start:start + length], or None if too short."""
    end = len(text)
    end_match = SENTENCE_END.search(text, start + length)
    if end_match:
        end = end_match.end()

    begin = 0
    for m in SENTENCE_END.finditer(text):
        if m.end() > start:
            break
        if m.group(0):
            begin = m.end()

    sentence = text[begin:end].strip()
    return sentence if len(sentence) > MIN_SENTENCE_LENGTH else None


def _inside_highlight(node: NavigableString) -> bool:
    parent = node.parent
    return parent is not None and HIGHLIGHT_CLASS in (parent.get("class") or [])


def highlight_phrase_in_element(soup: BeautifulSoup, element: Tag, phrase: str) -> bool:
    """Wrap the first case-insensitive occurrence of phrase in one text node."""
    needle = phrase.strip()
    if not needle:
        return False
    needle_lower = needle.lower()

    for node in list(element.find_all(string=True)):
        if not isinstance(node, NavigableString) or _inside_highlight(node):
            continue
        node_text = str(node)
        index = node_text.lower().find(needle_lower)
        if index == -1:
            continue

        span = soup.new_tag("span", attrs={"class": HIGHLIGHT_CLASS})
        span.string = node_text[index:index + len(needle)]

        before = node_text[:index]
        after = node_text[index + len(needle):]
        pieces = [NavigableString(before)] if before else []
        pieces.append(span)
        if after:
            pieces.append(NavigableString(after))
        node.replace_with(*pieces)
        return True
    return False


class Highlighter:
    def __init__(self, page: Page, logger: Optional[StructuredLogger] = None):
        self.page = page
        self.logger = logger or get_logger()

    def highlight(self, verdict: Verdict, text: Optional[str]) -> bool:
        """
        Mark the cited phrase of a NotSponsorable verdict in the page.

        Prior highlights are always removed first. Returns True when a phrase
        or sentence was marked.
        """
        self.remove_highlights()
        if verdict.status is not Status.NOT_SPONSORABLE:
            return False
        phrase = verdict.cited_phrase
        if not phrase or not text:
            return False

        match_index = text.lower().find(phrase.lower())
        if match_index == -1:
            return False
        sentence = extract_sentence(text, match_index, len(phrase)) or phrase

        for selector in HIGHLIGHT_SELECTORS:
            for element in self.page.select(selector):
                if element.select_one(f".{HIGHLIGHT_CLASS}") is not None:
                    continue
                if highlight_phrase_in_element(self.page.soup, element, phrase):
                    return True
                if sentence != phrase and highlight_phrase_in_element(self.page.soup, element, sentence):
                    return True

        self.logger.debug("Cited phrase not found in description containers", phrase=phrase)
        return False

    def remove_highlights(self) -> int:
        """Unwrap every highlight span. Returns how many were removed."""
        removed = 0
        for span in self.page.select(f".{HIGHLIGHT_CLASS}"):
            parent = span.parent
            span.unwrap()
            if parent is not None:
                parent.smooth()
            removed += 1
        return removed
