"""
Sponsorship phrase catalogue.

The catalogue is a declarative table of (pattern, tier) records. It is
compiled once at import time and scanned in order by the analyzer, so the
position of a rule in the table is also its position in a verdict's evidence.
"""

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Pattern, Tuple


class Confidence(IntEnum):
    """Strength of the evidence behind a verdict. Ordered LOW < MEDIUM < HIGH."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class EvidenceTier(Enum):
    """Priority class of a matched phrase: (weight, confidence)."""

    STRONG_POSITIVE = (3, Confidence.HIGH)
    MODERATE_POSITIVE = (1, Confidence.MEDIUM)
    STRONG_NEGATIVE = (-3, Confidence.HIGH)
    MODERATE_NEGATIVE = (-1, Confidence.MEDIUM)

    @property
    def weight(self) -> int:
        return self.value[0]

    @property
    def confidence(self) -> Confidence:
        return self.value[1]

    @property
    def is_positive(self) -> bool:
        return self.weight > 0


# Tiers in catalogue order. Decision precedence is a different ordering and
# lives in the analyzer.
TIER_ORDER: Tuple[EvidenceTier, ...] = tuple(EvidenceTier)


@dataclass(frozen=True)
class PatternRule:
    pattern: Pattern[str]
    tier: EvidenceTier

    @property
    def source(self) -> str:
        return self.pattern.pattern


_US = r"U\.?S\.?"

STRONG_POSITIVE_PATTERNS = [
    r"\bH1B\s+sponsorship\b",
    r"\bH1B\s+visa\s+sponsorship\b",
    r"\bH-1B\s+sponsorship\b",
    r"\bvisa\s+sponsorship\b",
    r"\bwork\s+visa\s+sponsorship\b",
    r"\bemployment\s+visa\s+sponsorship\b",
    r"\bsponsor\s+H-?1B\b",
    r"\bsponsor\s+visas?\b",
    r"\bprovide\s+sponsorship\b",
    r"\bsponsorship\s+available\b",
    r"\bsponsorship\s+provided\b",
    r"\boffers\s+sponsorship\b",
    r"\bwilling\s+to\s+sponsor\b",
    r"\bwill\s+sponsor\b",
    r"\bcan\s+sponsor\b",
    r"\bsponsor\s+for\s+international\s+candidates\b",
    r"\binternational\s+sponsorship\b",
    r"\bwork\s+authorization\s+sponsorship\b",
    r"\bemployment\s+authorization\s+sponsorship\b",
    r"\bTN\s+visa\b",
    r"\bE-3\s+visa\b",
    r"\bO-1\s+visa\b",
    r"\bL-1\s+visa\b",
    r"\bJ-1\s+visa\b",
    r"\bOPT\s+to\s+H-?1B\b",
]

MODERATE_POSITIVE_PATTERNS = [
    r"\bopen\s+to\s+international\s+candidates\b",
    r"\binternational\s+applicants\s+welcome\b",
    r"\bglobal\s+talent\b",
    r"\bdiverse\s+candidates\b",
    r"\binternational\s+experience\s+preferred\b",
    r"\brelocation\s+assistance\b",
    r"\bimmigration\s+support\b",
]

STRONG_NEGATIVE_PATTERNS = [
    rf"\b{_US}\s+citizens?\s+only\b",
    rf"\b{_US}\s+citizenship\s+required\b",
    rf"\bmust\s+be\s+(?:a\s+)?{_US}\s+citizen\b",
    r"\bmust\s+be\s+(?:a\s+)?United\s+States\s+citizen\b",
    rf"\b{_US}\s+citizenship\s+only\b",
    r"\bno\s+sponsorship\b",
    r"\bdoes\s+not\s+sponsor\b",
    r"\bcannot\s+sponsor\b",
    r"\bcan[’']t\s+sponsor\b",
    r"\bunable\s+to\s+sponsor\b",
    r"\bunable\s+to\s+sponsor.*work\s+visas?\b",
    r"\bnot\s+sponsoring\b",
    r"\bsponsorship\s+not\s+available\b",
    r"\bno\s+visa\s+sponsorship\b",
    r"\bmust\s+have\s+work\s+authorization\b",
    rf"\bmust\s+be\s+authorized\s+to\s+work\s+in\s+the\s+{_US}\b",
    r"\bmust\s+be\s+authorized\s+to\s+work\s+in\s+the\s+United\s+States\b",
    r"\bmust\s+be\s+currently\s+authorized\s+to\s+work\b",
    rf"\bmust\s+be\s+currently\s+authorized\s+to\s+work\s+in\s+the\s+(?:{_US}|United\s+States)\b",
    r"\bno\s+visa\s+support\b",
    r"\bwill\s+not\s+sponsor\b",
    r"\bsponsorship\s+not\s+provided\b",
    rf"\b{_US}\s+work\s+authorization\s+required\b",
    r"\bcitizenship\s+required\b",
    rf"\b{_US}\s+citizenship\s+mandatory\b",
    r"\bsecurity\s+clearance\s+required\b",
    rf"\bmust\s+possess\s+{_US}\s+citizenship\b",
    r"\bITAR\s+requirements?\b",
    r"\bITAR\s+compliance\b",
    r"\bITAR\s+eligible\b",
    r"\bmust\s+be\s+ITAR\s+eligible\b",
    rf"\b{_US}\s+citizen\s+or\s+national\b",
    rf"\b{_US}\s+lawful\s+permanent\s+resident\b",
    r"\bgreen\s+card\s+holder\b",
    r"\bexport\s+control\s+regulations?\b",
    r"\bDepartment\s+of\s+State\s+authorization\b",
]

MODERATE_NEGATIVE_PATTERNS = [
    rf"\bauthorized\s+to\s+work\s+in\s+the\s+{_US}\b",
    r"\bauthorized\s+to\s+work\s+in\s+the\s+United\s+States\b",
    rf"\bcurrently\s+authorized\s+to\s+work\s+in\s+the\s+(?:{_US}|United\s+States)\b",
    rf"\beligible\s+to\s+work\s+in\s+the\s+{_US}\b",
    r"\beligible\s+to\s+work\s+in\s+the\s+United\s+States\b",
    r"\blegally\s+authorized\s+to\s+work\b",
    r"\bno\s+relocation\s+assistance\b",
    r"\blocal\s+candidates\s+only\b",
]

CATALOGUE_TABLE = [
    (EvidenceTier.STRONG_POSITIVE, STRONG_POSITIVE_PATTERNS),
    (EvidenceTier.MODERATE_POSITIVE, MODERATE_POSITIVE_PATTERNS),
    (EvidenceTier.STRONG_NEGATIVE, STRONG_NEGATIVE_PATTERNS),
    (EvidenceTier.MODERATE_NEGATIVE, MODERATE_NEGATIVE_PATTERNS),
]

# Cues that flip a following positive phrase ("no visa sponsorship").
NEGATION_CUES = [
    r"\bno\s+",
    r"\bnot\s+",
    r"\bdoesn[’']t\s+",
    r"\bdoes\s+not\s+",
    r"\bcannot\s+",
    r"\bcan[’']t\s+",
    r"\bwill\s+not\s+",
    r"\bwon[’']t\s+",
]

NEGATION_LOOKBEHIND = 50
NEGATION_WINDOW = 20


def load_catalogue() -> Tuple[PatternRule, ...]:
    """Compile the catalogue table into ordered rules."""
    rules: List[PatternRule] = []
    for tier, patterns in CATALOGUE_TABLE:
        for p in patterns:
            rules.append(PatternRule(pattern=re.compile(p, re.IGNORECASE), tier=tier))
    return tuple(rules)


def _compile_negations() -> Tuple[Pattern[str], ...]:
    # A cue only counts when it is the tail of the lookbehind context: at most
    # NEGATION_WINDOW non-period characters may separate it from the match.
    return tuple(
        re.compile(cue + r"[^.]{0,%d}$" % NEGATION_WINDOW, re.IGNORECASE)
        for cue in NEGATION_CUES
    )


CATALOGUE: Tuple[PatternRule, ...] = load_catalogue()
NEGATION_PATTERNS: Tuple[Pattern[str], ...] = _compile_negations()


def rules_for(tier: EvidenceTier) -> Tuple[PatternRule, ...]:
    return tuple(r for r in CATALOGUE if r.tier is tier)
