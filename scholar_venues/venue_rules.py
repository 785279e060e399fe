"""
Ordered venue classification rules.

Rules are evaluated top to bottom against the cleaned, lower-cased venue
text and the first match wins. Patterns overlap (every NAACL paper is
also "computational linguistics"), so the order of VENUE_RULES is part
of the classification contract: move a rule and results change.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

WORKSHOP_SUFFIX = " Workshop"
GENERIC_WORKSHOP = "Workshop"


@dataclass(frozen=True)
class VenueRule:
    """One (pattern, canonical name) entry of the classification table."""

    area: str
    base: str
    pattern: re.Pattern
    workshop_label: Optional[str] = None
    exclude: Optional[re.Pattern] = None

    @property
    def supports_workshop(self) -> bool:
        return self.workshop_label is not None

    def matches(self, text: str) -> bool:
        if not self.pattern.search(text):
            return False
        return not (self.exclude and self.exclude.search(text))

    def label(self, is_workshop: bool) -> str:
        if is_workshop and self.workshop_label:
            return self.workshop_label
        return self.base


def _compile(patterns) -> re.Pattern:
    return re.compile("|".join(f"(?:{p})" for p in patterns), re.IGNORECASE)


def _rule(
    area: str,
    base: str,
    *patterns: str,
    workshop: bool = True,
    workshop_label: Optional[str] = None,
    exclude: Optional[str] = None,
) -> VenueRule:
    if workshop and workshop_label is None:
        workshop_label = base + WORKSHOP_SUFFIX
    return VenueRule(
        area=area,
        base=base,
        pattern=_compile(patterns),
        workshop_label=workshop_label if workshop else None,
        exclude=re.compile(exclude, re.IGNORECASE) if exclude else None,
    )


CV = "computer vision"
ML = "machine learning"
AI = "artificial intelligence"
NLP = "natural language processing"
DM = "data mining and web"
ROBOTICS = "robotics"
SIGNAL = "signal processing"
MEDICAL = "medical imaging"
GRAPHICS = "graphics and visualization"
IEEE_TRANS = "ieee transactions"
JOURNALS = "journals"
HIGH_IMPACT = "high-impact journals"
PREPRINTS = "preprints and other sources"
PUBLISHERS = "publishers"
MISC = "additional conferences"


VENUE_RULES: Tuple[VenueRule, ...] = (
    # Computer vision conferences
    _rule(
        CV, "CVPR",
        r"computer vision and pattern recognition",
        r"\bcvpr",
        r"cvf.*?computer vision and pattern",
        r"ieee.*?computer.*?society.*?conference.*?computer vision and pattern",
        r"ieee.*?conference.*?computer vision and pattern",
        r"\d{4}.*?ieee.*?computer.*?society.*?conference.*?computer vision",
    ),
    _rule(
        CV, "ICCV",
        r"international conference on computer vision",
        r"\biccv",
        r"ieee.*?international.*?conference.*?computer vision",
    ),
    _rule(
        CV, "ECCV",
        r"european conference on computer vision",
        r"\beccv",
        r"european.*?conference.*?computer vision",
    ),
    _rule(
        CV, "WACV",
        r"winter conference on applications of computer vision",
        r"\bwacv",
        r"cvf.*?winter conference",
    ),
    _rule(CV, "BMVC", r"british machine vision conference", r"\bbmvc"),
    _rule(CV, "ACCV", r"asian conference on computer vision", r"\baccv"),

    # Machine learning conferences
    _rule(
        ML, "NeurIPS",
        r"neural information processing systems",
        r"\bneurips",
        r"\bnips\b",
        r"advances in neural information processing",
    ),
    _rule(ML, "ICML", r"international conference on machine learning", r"\bicml"),
    _rule(ML, "ICLR", r"international conference on learning representations", r"\biclr"),
    _rule(ML, "AISTATS", r"artificial intelligence and statistics", r"\baistats"),

    # AI conferences
    _rule(
        AI, "AAAI",
        r"\baaai",
        r"association for the advancement of artificial intelligence",
        r"national conference on artificial intelligence",
    ),
    _rule(AI, "IJCAI", r"international joint conference on artificial intelligence", r"\bijcai"),
    _rule(AI, "UAI", r"uncertainty in artificial intelligence", r"\buai\b"),

    # NLP conferences; ACL must not swallow its regional chapters
    _rule(
        NLP, "ACL",
        r"association for computational linguistics",
        r"\bacl\b",
        exclude=r"naacl|eacl|north american chapter|european chapter",
    ),
    _rule(NLP, "NAACL", r"north american chapter", r"\bnaacl"),
    _rule(NLP, "EMNLP", r"empirical methods in natural language processing", r"\bemnlp"),
    _rule(NLP, "CoNLL", r"conference on computational natural language learning", r"\bconll"),
    _rule(
        NLP, "EACL",
        r"european chapter.*?(?:acl|association for computational linguistics)",
        r"\beacl",
    ),
    _rule(NLP, "COLING", r"international conference on computational linguistics", r"\bcoling"),

    # Data mining and web
    _rule(
        DM, "ACM SIGKDD",
        r"sigkdd",
        r"knowledge discovery and data mining",
        r"\bkdd\b",
        workshop_label="KDD Workshop",
    ),
    _rule(DM, "ICDM", r"international conference on data mining", r"\bicdm"),
    _rule(
        DM, "WWW",
        r"world wide web conference",
        r"international world wide web",
        r"\bweb conference",
        r"\bwww\b",
    ),

    # Robotics
    _rule(
        ROBOTICS, "ICRA",
        r"international conference on robotics and automation",
        r"\bicra",
        r"ieee.*?robotics and automation",
    ),
    _rule(
        ROBOTICS, "IROS",
        r"intelligent robots and systems",
        r"\biros\b",
        r"ieee.*?rsj.*?intelligent robots",
    ),

    # Signal processing
    _rule(
        SIGNAL, "ICASSP",
        r"acoustics.*?speech.*?signal processing",
        r"\bicassp",
        r"international conference on acoustics",
    ),
    _rule(SIGNAL, "ICIP", r"international conference on image processing", r"\bicip"),

    # Medical imaging
    _rule(MEDICAL, "MICCAI", r"medical image computing and computer.assisted", r"\bmiccai"),
    _rule(MEDICAL, "IPMI", r"information processing in medical imaging", r"\bipmi"),

    # Graphics and visualization
    _rule(GRAPHICS, "SIGGRAPH", r"siggraph", r"computer graphics and interactive techniques"),
    _rule(GRAPHICS, "IEEE VIS", r"ieee visualization", r"\bvis\b", r"visualization conference"),

    # IEEE transactions
    _rule(
        IEEE_TRANS, "IEEE TPAMI",
        r"transactions on pattern analysis and machine intelligence",
        r"\btpami",
        r"ieee.*?pattern analysis",
        workshop=False,
    ),
    _rule(IEEE_TRANS, "IEEE TIP", r"transactions on image processing", r"\btip\b", workshop=False),
    _rule(IEEE_TRANS, "IEEE TNN", r"transactions on neural networks", r"\btnn(?:ls)?\b", workshop=False),
    _rule(IEEE_TRANS, "IEEE TCYB", r"transactions on cybernetics", r"\btcyb\b", workshop=False),
    _rule(IEEE_TRANS, "IEEE TMM", r"transactions on multimedia", r"\btmm\b", workshop=False),
    _rule(IEEE_TRANS, "IEEE Access", r"ieee access", workshop=False),

    # Other major journals
    _rule(JOURNALS, "IJCV", r"international journal of computer vision", r"\bijcv", workshop=False),
    _rule(JOURNALS, "JMLR", r"journal of machine learning research", r"\bjmlr", workshop=False),
    _rule(JOURNALS, "Machine Learning Journal", r"machine learning journal", r"^machine learning$",
          workshop=False),
    _rule(JOURNALS, "CVIU", r"computer vision and image understanding", r"\bcviu", workshop=False),
    _rule(JOURNALS, "Pattern Recognition", r"pattern recognition(?:\s|$)", workshop=False),
    _rule(JOURNALS, "Medical Image Analysis", r"medical image analysis", workshop=False),
    _rule(JOURNALS, "Neurocomputing", r"neurocomputing", workshop=False),

    # High-impact journals
    _rule(HIGH_IMPACT, "Science", r"^science(?:\s|$)", workshop=False),
    _rule(HIGH_IMPACT, "Nature Communications", r"nature communications", workshop=False),
    _rule(HIGH_IMPACT, "Nature Machine Intelligence", r"nature machine intelligence", workshop=False),
    _rule(HIGH_IMPACT, "Nature", r"^nature$", workshop=False),
    _rule(
        HIGH_IMPACT, "PNAS",
        r"proceedings of the national academy of sciences",
        r"national academy of sciences",
        r"\bpnas",
        workshop=False,
    ),

    # Preprints and other sources
    _rule(PREPRINTS, "arXiv", r"arxiv", r"ar xiv", r"\bcorr\b", workshop=False),
    _rule(PREPRINTS, "bioRxiv", r"biorxiv", workshop=False),
    _rule(PREPRINTS, "US Patents", r"patent", workshop=False),
    _rule(PREPRINTS, "Available at SSRN", r"\bssrn", r"social science research network",
          workshop=False),

    # Publishers
    _rule(PUBLISHERS, "Springer", r"springer", r"lecture notes in computer science", r"\blncs\b",
          workshop=False),
    _rule(PUBLISHERS, "MIT Press", r"mit press", workshop=False),

    # Additional conferences
    _rule(MISC, "ACM CHI", r"conference on human factors", r"\bchi\b", r"acm chi",
          workshop_label="CHI Workshop"),
    _rule(MISC, "ACM SIGIR", r"sigir", r"information retrieval", workshop_label="SIGIR Workshop"),
    _rule(MISC, "INTERSPEECH", r"interspeech"),
    _rule(MISC, "ISCA", r"\bisca\b", workshop=False),
)


# Second pass for workshop papers no area rule recognised
WORKSHOP_ACRONYMS: Tuple[Tuple[re.Pattern, str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), acronym + WORKSHOP_SUFFIX)
    for pattern, acronym in (
        (r"\bcvpr", "CVPR"),
        (r"\biccv", "ICCV"),
        (r"\beccv", "ECCV"),
        (r"\bneurips|\bnips\b", "NeurIPS"),
        (r"\bicml", "ICML"),
        (r"\baaai", "AAAI"),
        (r"\bijcai", "IJCAI"),
    )
)


@dataclass(frozen=True)
class LooseRule:
    """Relaxed confirmation rule: every ``required`` pattern must match."""

    base: str
    required: Tuple[re.Pattern, ...]
    exclude: Optional[re.Pattern] = None

    def matches(self, text: str) -> bool:
        if self.exclude and self.exclude.search(text):
            return False
        return all(p.search(text) for p in self.required)


def _loose(base: str, *required: str, exclude: Optional[str] = None) -> LooseRule:
    return LooseRule(
        base=base,
        required=tuple(re.compile(p, re.IGNORECASE) for p in required),
        exclude=re.compile(exclude, re.IGNORECASE) if exclude else None,
    )


# Formatting variants of the highest-volume venues that slipped past the
# primary table
LOOSE_RULES: Tuple[LooseRule, ...] = (
    _loose("CVPR", r"computer vision.*pattern", r"ieee|conference|proceedings"),
    _loose("ICCV", r"international.*computer vision", r"ieee|conference|proceedings",
           exclude=r"pattern"),
    _loose("ECCV", r"european.*computer vision"),
    _loose("MICCAI", r"medical.*image.*computing"),
)


def canonical_labels() -> List[str]:
    """Every label the rule tables can produce, in table order."""
    labels = []
    for rule in VENUE_RULES:
        labels.append(rule.base)
        if rule.workshop_label:
            labels.append(rule.workshop_label)
    labels.extend(label for _, label in WORKSHOP_ACRONYMS)
    labels.extend(rule.base for rule in LOOSE_RULES)
    labels.append(GENERIC_WORKSHOP)
    # Keep first occurrence only
    return list(dict.fromkeys(labels))
