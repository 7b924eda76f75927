"""
Tests for the sponsorship analyzer.
"""

import re

import pytest

from sponsorcheck.analyzer import (
    Evidence,
    Status,
    analyze,
    collect_matches,
    is_negated,
)
from sponsorcheck.patterns import (
    CATALOGUE,
    TIER_ORDER,
    Confidence,
    EvidenceTier,
    rules_for,
)


class TestInvalidInput:
    """Anything without usable text is UNCLEAR."""

    @pytest.mark.parametrize("value", [None, "", "   \n\t", 42, b"visa sponsorship", ["no sponsorship"]])
    def test_unclear_low(self, value):
        verdict = analyze(value)
        assert verdict.status is Status.UNCLEAR
        assert verdict.confidence is Confidence.LOW
        assert verdict.evidence == ()
        assert verdict.cited_phrase is None


class TestPrecedence:
    """Tier precedence: SP > SN > MP > MN > silence."""

    def test_strong_positive_beats_strong_negative(self):
        text = "We will sponsor H1B visas for this role. Applicants must be a U.S. citizen or green card holder."
        verdict = analyze(text)
        assert verdict.status is Status.SPONSORABLE
        assert verdict.confidence is Confidence.HIGH
        assert verdict.cited_phrase in text
        tiers = {e.tier for e in verdict.evidence}
        assert EvidenceTier.STRONG_POSITIVE in tiers
        assert EvidenceTier.STRONG_NEGATIVE in tiers

    def test_strong_negative_only(self):
        text = "Great team, great benefits. US citizens only."
        verdict = analyze(text)
        assert verdict.status is Status.NOT_SPONSORABLE
        assert verdict.confidence is Confidence.HIGH
        assert verdict.cited_phrase == "US citizens only"
        assert verdict.cited_phrase in text
        assert verdict.score == -3

    def test_strong_negative_beats_moderate_positive(self):
        text = "Relocation assistance offered. US citizens only."
        verdict = analyze(text)
        assert verdict.status is Status.NOT_SPONSORABLE
        assert verdict.confidence is Confidence.HIGH
        assert verdict.evidence == (
            Evidence("Relocation assistance", EvidenceTier.MODERATE_POSITIVE),
            Evidence("US citizens only", EvidenceTier.STRONG_NEGATIVE),
        )

    def test_moderate_positive_only(self):
        verdict = analyze("We welcome global talent from every background.")
        assert verdict.status is Status.SPONSORABLE
        assert verdict.confidence is Confidence.MEDIUM
        assert verdict.cited_phrase == "global talent"

    def test_moderate_positive_beats_moderate_negative(self):
        text = "Immigration support is available. You should be eligible to work in the United States."
        verdict = analyze(text)
        assert verdict.status is Status.SPONSORABLE
        assert verdict.confidence is Confidence.MEDIUM

    def test_moderate_negative_only(self):
        text = "Applicants must be legally authorized to work for any employer."
        verdict = analyze(text)
        assert verdict.status is Status.NOT_SPONSORABLE
        assert verdict.confidence is Confidence.MEDIUM
        assert verdict.cited_phrase == "legally authorized to work"
        assert verdict.score == -1

    def test_no_evidence_is_weak_yes(self):
        verdict = analyze("We build great software with a friendly team in Denver.")
        assert verdict.status is Status.SPONSORABLE
        assert verdict.confidence is Confidence.LOW
        assert verdict.cited_phrase is None
        assert verdict.evidence == ()
        assert verdict.score == 0


class TestNegation:
    """Positive phrases right after a negation cue do not count."""

    def test_no_sponsorship_available(self):
        text = "Unfortunately there is no sponsorship available for this position."
        verdict = analyze(text)
        assert verdict.status is Status.NOT_SPONSORABLE
        assert verdict.cited_phrase == "no sponsorship"
        assert all(not e.tier.is_positive for e in verdict.evidence)
        assert "sponsorship available" not in verdict.phrases()

    def test_no_relocation_assistance(self):
        verdict = analyze("Please note: no relocation assistance for this role.")
        assert verdict.status is Status.NOT_SPONSORABLE
        assert verdict.confidence is Confidence.MEDIUM
        assert verdict.phrases(EvidenceTier.MODERATE_POSITIVE) == []

    def test_negation_outside_window(self):
        text = "There is no parking on site, but we offer visa sponsorship"
        verdict = analyze(text)
        assert verdict.status is Status.SPONSORABLE
        assert verdict.confidence is Confidence.HIGH

    def test_period_ends_negation(self):
        verdict = analyze("No pets allowed. We offer visa sponsorship.")
        assert verdict.status is Status.SPONSORABLE
        assert verdict.cited_phrase == "visa sponsorship"

    def test_is_negated_helper(self):
        text = "We do not offer visa sponsorship"
        assert is_negated(text, text.index("visa"))
        assert not is_negated(text, 0)

    def test_negative_tiers_not_suppressed(self):
        text = "Note that we cannot sponsor anyone."
        matches = collect_matches(text)
        assert [m.text for m in matches] == ["cannot sponsor"]


class TestEvidence:
    """Evidence ordering and de-duplication."""

    def test_duplicates_collapse(self):
        verdict = analyze("US citizens only. Repeat: US citizens only.")
        assert verdict.evidence == (Evidence("US citizens only", EvidenceTier.STRONG_NEGATIVE),)

    def test_overlapping_rules_all_recorded(self):
        verdict = analyze("Sadly we are unable to sponsor work visas at this time.")
        assert verdict.phrases(EvidenceTier.STRONG_NEGATIVE) == [
            "unable to sponsor",
            "unable to sponsor work visas",
        ]

    def test_catalogue_order(self):
        text = "US citizens only. We offer visa sponsorship. Global talent welcome."
        verdict = analyze(text)
        assert [e.tier for e in verdict.evidence] == [
            EvidenceTier.STRONG_POSITIVE,
            EvidenceTier.MODERATE_POSITIVE,
            EvidenceTier.STRONG_NEGATIVE,
        ]

    def test_cited_phrase_is_substring(self):
        texts = [
            "MUST BE A U.S. CITIZEN to apply.",
            "ITAR Compliance applies to this program.",
            "Candidates should be Authorized To Work In The US.",
            "We provide sponsorship for the right person.",
        ]
        for text in texts:
            verdict = analyze(text)
            assert verdict.cited_phrase is not None
            assert verdict.cited_phrase in text

    def test_idempotent(self):
        text = "We offer H1B sponsorship. Must have work authorization."
        assert analyze(text) == analyze(text)

    def test_to_dict(self):
        data = analyze("US citizens only.").to_dict()
        assert data["status"] == "no"
        assert data["confidence"] == "high"
        assert data["message"] == "No Sponsorship"
        assert data["evidence"] == [{"phrase": "US citizens only", "tier": "strong_negative"}]


class TestCatalogue:
    """Table-driven checks per tier."""

    TIER_SAMPLES = {
        EvidenceTier.STRONG_POSITIVE: [
            "H1B sponsorship",
            "H-1B sponsorship",
            "visa sponsorship",
            "willing to sponsor",
            "sponsorship available",
            "TN visa",
            "OPT to H1B",
        ],
        EvidenceTier.MODERATE_POSITIVE: [
            "open to international candidates",
            "international applicants welcome",
            "global talent",
            "immigration support",
        ],
        EvidenceTier.STRONG_NEGATIVE: [
            "U.S. citizens only",
            "must be a United States citizen",
            "cannot sponsor",
            "can't sponsor",
            "will not sponsor",
            "security clearance required",
            "ITAR eligible",
            "green card holder",
            "export control regulations",
        ],
        EvidenceTier.MODERATE_NEGATIVE: [
            "authorized to work in the U.S.",
            "eligible to work in the United States",
            "legally authorized to work",
            "local candidates only",
        ],
    }

    EXPECTED = {
        EvidenceTier.STRONG_POSITIVE: (Status.SPONSORABLE, Confidence.HIGH),
        EvidenceTier.MODERATE_POSITIVE: (Status.SPONSORABLE, Confidence.MEDIUM),
        EvidenceTier.STRONG_NEGATIVE: (Status.NOT_SPONSORABLE, Confidence.HIGH),
        EvidenceTier.MODERATE_NEGATIVE: (Status.NOT_SPONSORABLE, Confidence.MEDIUM),
    }

    @pytest.mark.parametrize(
        "tier,phrase",
        [(tier, phrase) for tier, phrases in TIER_SAMPLES.items() for phrase in phrases],
    )
    def test_phrase_matches_its_tier(self, tier, phrase):
        assert any(rule.pattern.search(phrase) for rule in rules_for(tier))
        verdict = analyze(f"About the role: {phrase}.")
        assert (verdict.status, verdict.confidence) == self.EXPECTED[tier]

    def test_rules_grouped_in_tier_order(self):
        positions = [TIER_ORDER.index(rule.tier) for rule in CATALOGUE]
        assert positions == sorted(positions)

    def test_rules_case_insensitive(self):
        assert all(rule.pattern.flags & re.IGNORECASE for rule in CATALOGUE)
        assert analyze("VISA SPONSORSHIP").status is Status.SPONSORABLE

    def test_tier_weights(self):
        assert [t.weight for t in TIER_ORDER] == [3, 1, -3, -1]
        assert EvidenceTier.STRONG_NEGATIVE.confidence > EvidenceTier.MODERATE_NEGATIVE.confidence
