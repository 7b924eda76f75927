"""
Sponsorship analyzer.

Turns job description text into a Verdict: whether the employer sponsors work
visas, how strong the evidence is, and which phrase decided it. The analyzer
is a pure function of its input and never raises.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .patterns import (
    CATALOGUE,
    NEGATION_LOOKBEHIND,
    NEGATION_PATTERNS,
    Confidence,
    EvidenceTier,
    PatternRule,
)


class Status(Enum):
    SPONSORABLE = "yes"
    NOT_SPONSORABLE = "no"
    UNCLEAR = "unclear"


MESSAGES = {
    Status.SPONSORABLE: "Sponsorship Available",
    Status.NOT_SPONSORABLE: "No Sponsorship",
    Status.UNCLEAR: "Sponsorship Unclear",
}

# Explicit "we sponsor" language outranks the authorization boilerplate that
# shows up in nearly every posting.
PRECEDENCE = (
    (EvidenceTier.STRONG_POSITIVE, Status.SPONSORABLE),
    (EvidenceTier.STRONG_NEGATIVE, Status.NOT_SPONSORABLE),
    (EvidenceTier.MODERATE_POSITIVE, Status.SPONSORABLE),
    (EvidenceTier.MODERATE_NEGATIVE, Status.NOT_SPONSORABLE),
)


@dataclass(frozen=True)
class Evidence:
    phrase: str
    tier: EvidenceTier


@dataclass(frozen=True)
class Match:
    text: str
    start: int
    tier: EvidenceTier

    @property
    def end(self) -> int:
        return self.start + len(self.text)


@dataclass(frozen=True)
class Verdict:
    status: Status
    confidence: Confidence
    cited_phrase: Optional[str] = None
    evidence: Tuple[Evidence, ...] = field(default_factory=tuple)
    score: int = 0

    @property
    def message(self) -> str:
        return MESSAGES[self.status]

    def phrases(self, tier: Optional[EvidenceTier] = None) -> List[str]:
        """Evidence phrases, optionally restricted to one tier."""
        return [e.phrase for e in self.evidence if tier is None or e.tier is tier]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "confidence": self.confidence.label,
            "score": self.score,
            "cited_phrase": self.cited_phrase,
            "evidence": [
                {"phrase": e.phrase, "tier": e.tier.name.lower()} for e in self.evidence
            ],
        }


UNCLEAR = Verdict(status=Status.UNCLEAR, confidence=Confidence.LOW)


def is_negated(text: str, start: int) -> bool:
    """True when a negation cue sits just before position ``start``."""
    context = text[max(0, start - NEGATION_LOOKBEHIND):start]
    return any(p.search(context) for p in NEGATION_PATTERNS)


def find_matches(rule: PatternRule, text: str) -> List[Match]:
    """All non-overlapping matches of one rule, in text order."""
    return [
        Match(text=m.group(0), start=m.start(), tier=rule.tier)
        for m in rule.pattern.finditer(text)
        if m.group(0)
    ]


def collect_matches(text: str, catalogue: Tuple[PatternRule, ...] = CATALOGUE) -> List[Match]:
    """
    Scan every rule of the catalogue and keep the surviving matches.

    Positive matches preceded by a negation cue are dropped. Negative tiers
    already carry their negation and are kept as-is.
    """
    surviving: List[Match] = []
    for rule in catalogue:
        for match in find_matches(rule, text):
            if rule.tier.is_positive and is_negated(text, match.start):
                continue
            surviving.append(match)
    return surviving


def _dedupe(matches: List[Match]) -> Tuple[Evidence, ...]:
    seen = set()
    evidence = []
    for m in matches:
        if m.text in seen:
            continue
        seen.add(m.text)
        evidence.append(Evidence(phrase=m.text, tier=m.tier))
    return tuple(evidence)


def analyze(text: Any, catalogue: Tuple[PatternRule, ...] = CATALOGUE) -> Verdict:
    """
    Classify a job description.

    Args:
        text: Description text. Anything that is not a non-blank string
            yields an UNCLEAR verdict.
        catalogue: Rules to scan, defaults to the built-in catalogue.

    Returns:
        Verdict with status, confidence, cited phrase and evidence.
    """
    if not isinstance(text, str) or not text.strip():
        return UNCLEAR

    matches = collect_matches(text, catalogue)
    evidence = _dedupe(matches)

    for tier, status in PRECEDENCE:
        deciding = [m for m in matches if m.tier is tier]
        if deciding:
            return Verdict(
                status=status,
                confidence=tier.confidence,
                cited_phrase=deciding[0].text,
                evidence=evidence,
                score=tier.weight,
            )

    # Silence on sponsorship is the common case and reads as a weak yes.
    return Verdict(status=Status.SPONSORABLE, confidence=Confidence.LOW, evidence=evidence)
