"""
Tests for the negative phrase highlighter.
"""

import pytest

from conftest import DESCRIPTION_A, DESCRIPTION_B, SEARCH_URL
from sponsorcheck.analyzer import Status, Verdict, analyze
from sponsorcheck.highlighter import (
    HIGHLIGHT_CLASS,
    Highlighter,
    extract_sentence,
    highlight_phrase_in_element,
)
from sponsorcheck.page import Page
from sponsorcheck.patterns import Confidence

DESCRIPTION_SELECTOR = ".jobs-description-content__text"


def page_with(inner_html: str) -> Page:
    html = f'<html><body><div class="jobs-description-content__text">{inner_html}</div></body></html>'
    return Page(html, SEARCH_URL.format(job_id="1"))


class TestExtractSentence:
    def test_middle_sentence(self):
        text = "We build tools. Applicants must be US citizens only. Apply today!"
        start = text.index("US citizens")
        assert extract_sentence(text, start, len("US citizens only")) == "Applicants must be US citizens only."

    def test_first_sentence(self):
        text = "US citizens only for this role. Great pay."
        assert extract_sentence(text, 0, 16) == "US citizens only for this role."

    def test_last_sentence_without_terminator(self):
        text = "Great pay. Sorry, we cannot sponsor visas"
        start = text.index("cannot")
        assert extract_sentence(text, start, len("cannot sponsor")) == "Sorry, we cannot sponsor visas"

    def test_too_short(self):
        assert extract_sentence("Hi. No way. Bye.", 4, 3) is None


class TestHighlightPhrase:
    def test_wraps_case_insensitive_match(self):
        page = page_with("Note: us citizens ONLY, sorry.")
        element = page.select_one(DESCRIPTION_SELECTOR)
        assert highlight_phrase_in_element(page.soup, element, "US citizens only")

        span = element.select_one(f".{HIGHLIGHT_CLASS}")
        assert span.get_text() == "us citizens ONLY"
        assert element.get_text() == "Note: us citizens ONLY, sorry."

    def test_phrase_split_across_elements(self):
        page = page_with("US <b>citizens</b> only")
        element = page.select_one(DESCRIPTION_SELECTOR)
        assert not highlight_phrase_in_element(page.soup, element, "US citizens only")

    def test_blank_phrase(self):
        page = page_with("Anything")
        assert not highlight_phrase_in_element(page.soup, page.select_one(DESCRIPTION_SELECTOR), "  ")


class TestHighlighter:
    def test_highlights_cited_phrase(self, job_page):
        highlighter = Highlighter(job_page)
        assert highlighter.highlight(analyze(DESCRIPTION_A), DESCRIPTION_A)

        spans = job_page.select(f".{HIGHLIGHT_CLASS}")
        assert [s.get_text() for s in spans] == ["US citizens only"]

    def test_positive_verdict_not_highlighted(self, job_page):
        highlighter = Highlighter(job_page)
        assert not highlighter.highlight(analyze(DESCRIPTION_B), DESCRIPTION_B)
        assert job_page.select(f".{HIGHLIGHT_CLASS}") == []

    def test_positive_verdict_clears_old_highlight(self, job_page):
        highlighter = Highlighter(job_page)
        highlighter.highlight(analyze(DESCRIPTION_A), DESCRIPTION_A)
        highlighter.highlight(analyze(DESCRIPTION_B), DESCRIPTION_B)
        assert job_page.select(f".{HIGHLIGHT_CLASS}") == []

    def test_highlight_twice_keeps_one(self, job_page):
        highlighter = Highlighter(job_page)
        verdict = analyze(DESCRIPTION_A)
        highlighter.highlight(verdict, DESCRIPTION_A)
        highlighter.highlight(verdict, DESCRIPTION_A)
        assert len(job_page.select(f".{HIGHLIGHT_CLASS}")) == 1

    def test_phrase_split_by_markup(self):
        page = page_with("We build tools. <i>Hiring</i> note: US citizens only. Apply now.")
        text = page.select_one(DESCRIPTION_SELECTOR).get_text()
        verdict = Verdict(Status.NOT_SPONSORABLE, Confidence.HIGH, "Hiring note: US citizens")
        assert Highlighter(page).highlight(verdict, text) is False
        assert page.select(f".{HIGHLIGHT_CLASS}") == []

    def test_explicit_verdict(self):
        page = page_with("Intro. Sorry, no sponsorship is offered for this role. Thanks.")
        text = page.select_one(DESCRIPTION_SELECTOR).get_text()
        verdict = Verdict(Status.NOT_SPONSORABLE, Confidence.HIGH, "no sponsorship")
        assert Highlighter(page).highlight(verdict, text)
        assert page.select_one(f".{HIGHLIGHT_CLASS}").get_text() == "no sponsorship"

    def test_phrase_missing_from_text(self, job_page):
        verdict = Verdict(Status.NOT_SPONSORABLE, Confidence.HIGH, "green card holder")
        assert not Highlighter(job_page).highlight(verdict, DESCRIPTION_A)

    @pytest.mark.parametrize("text", [None, ""])
    def test_no_text(self, job_page, text):
        assert not Highlighter(job_page).highlight(analyze(DESCRIPTION_A), text)

    def test_remove_restores_text(self, job_page):
        highlighter = Highlighter(job_page)
        element = job_page.select_one(DESCRIPTION_SELECTOR)
        original = str(element)

        highlighter.highlight(analyze(DESCRIPTION_A), DESCRIPTION_A)
        assert str(element) != original

        assert highlighter.remove_highlights() == 1
        assert str(element) == original
        assert len(element.contents) == 1

    def test_remove_without_highlights(self, job_page):
        assert Highlighter(job_page).remove_highlights() == 0
