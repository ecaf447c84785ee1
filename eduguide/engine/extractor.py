"""Attribute extraction from free-text student messages.

Every extractor is best-effort and independent: a miss simply leaves the
field out of the patch, and out-of-range numbers count as a miss.
"""

from __future__ import annotations

import re

from eduguide.models import SchoolType, UserProfile, unique_strings

from .rules import all_matches, first_match, phrases, rule_table

GPA_RANGE = (0.0, 4.5)
SAT_RANGE = (400, 1600)
ACT_RANGE = (1, 36)

_GPA_PATTERNS = [
    re.compile(r"(?:my\s+)?gpa\s*(?:is|of|:)?\s*(\d\.\d+)", re.IGNORECASE),
    re.compile(r"(\d\.\d+)\s*gpa", re.IGNORECASE),
    re.compile(r"grade\s*point\s*average\s*(?:is|of|:)?\s*(\d\.\d+)", re.IGNORECASE),
]
_SAT_PATTERN = re.compile(r"\bsat\s*(?:score|:)?\s*(?:is|of|was)?\s*(\d{3,4})\b", re.IGNORECASE)
_ACT_PATTERN = re.compile(r"\bact\s*(?:score|:)?\s*(?:is|of|was)?\s*(\d{1,2})\b", re.IGNORECASE)

# Names that contain another state's name come first
STATE_NAMES: list[tuple[str, str]] = [
    ("washington dc", "DC"), ("district of columbia", "DC"), ("west virginia", "WV"),
    ("alabama", "AL"), ("alaska", "AK"), ("arizona", "AZ"), ("arkansas", "AR"),
    ("california", "CA"), ("colorado", "CO"), ("connecticut", "CT"), ("delaware", "DE"),
    ("florida", "FL"), ("georgia", "GA"), ("hawaii", "HI"), ("idaho", "ID"),
    ("illinois", "IL"), ("indiana", "IN"), ("iowa", "IA"), ("kansas", "KS"),
    ("kentucky", "KY"), ("louisiana", "LA"), ("maine", "ME"), ("maryland", "MD"),
    ("massachusetts", "MA"), ("michigan", "MI"), ("minnesota", "MN"), ("mississippi", "MS"),
    ("missouri", "MO"), ("montana", "MT"), ("nebraska", "NE"), ("nevada", "NV"),
    ("new hampshire", "NH"), ("new jersey", "NJ"), ("new mexico", "NM"), ("new york", "NY"),
    ("north carolina", "NC"), ("north dakota", "ND"), ("ohio", "OH"), ("oklahoma", "OK"),
    ("oregon", "OR"), ("pennsylvania", "PA"), ("rhode island", "RI"), ("south carolina", "SC"),
    ("south dakota", "SD"), ("tennessee", "TN"), ("texas", "TX"), ("utah", "UT"),
    ("vermont", "VT"), ("virginia", "VA"), ("washington", "WA"), ("wisconsin", "WI"),
    ("wyoming", "WY"), ("dc", "DC"),
]

STATE_CODES = sorted({code for _, code in STATE_NAMES})

CITY_STATES: list[tuple[str, str]] = [
    ("los angeles", "CA"), ("san francisco", "CA"), ("san diego", "CA"), ("sacramento", "CA"),
    ("houston", "TX"), ("dallas", "TX"), ("austin", "TX"), ("san antonio", "TX"),
    ("new york", "NY"), ("nyc", "NY"), ("manhattan", "NY"), ("brooklyn", "NY"),
    ("miami", "FL"), ("orlando", "FL"), ("tampa", "FL"), ("jacksonville", "FL"),
    ("chicago", "IL"), ("atlanta", "GA"), ("seattle", "WA"), ("portland", "OR"),
    ("boston", "MA"), ("philadelphia", "PA"), ("phoenix", "AZ"), ("denver", "CO"),
    ("detroit", "MI"), ("ann arbor", "MI"), ("columbus", "OH"), ("nashville", "TN"),
    ("minneapolis", "MN"), ("boulder", "CO"), ("madison", "WI"),
]

MAJOR_KEYWORDS: list[tuple[str, list[str]]] = [
    ("Computer Science", [
        "computer science", "cs", "programming", "coding", "software", "tech", "computer",
        "ai", "artificial intelligence", "data science", "cybersecurity", "information technology", "it",
    ]),
    ("Engineering", ["engineering", "mechanical", "electrical", "civil", "aerospace", "biomedical"]),
    ("Business", [
        "business", "management", "marketing", "finance", "accounting", "mba",
        "entrepreneurship", "economics",
    ]),
    ("Biology", ["biology", "pre-med", "premed", "medical", "biomedical", "life science", "health", "pre med"]),
    ("Nursing", ["nursing", "nurse", "rn", "healthcare", "health care"]),
    ("Psychology", ["psychology", "mental health", "counseling", "behavioral"]),
    ("Education", ["education", "teaching", "teacher", "pedagogy"]),
    ("Criminal Justice", ["criminal justice", "law enforcement", "criminology", "police", "forensic"]),
    ("Liberal Arts", ["liberal arts", "humanities", "general studies", "undecided"]),
    ("Film & Television", ["film", "cinema", "movie", "television", "media", "production"]),
    ("Political Science", [
        "political science", "politics", "government", "public policy", "international relations",
    ]),
    ("Mathematics", ["math", "mathematics", "statistics", "actuarial"]),
]

# Codes that are also everyday words only count in capitals ("IN", not "in")
WORD_LIKE_CODES = frozenset({"AL", "CO", "DE", "HI", "ID", "IN", "LA", "MA", "ME", "OH", "OK", "OR", "PA"})

_STATE_NAME_RULES = rule_table((phrases(name), code) for name, code in STATE_NAMES)
_STATE_CODE_RULES = rule_table(
    (re.compile(rf"\b{code}\b", 0 if code in WORD_LIKE_CODES else re.IGNORECASE), code)
    for code in STATE_CODES
)
_CITY_RULES = rule_table((phrases(city), code) for city, code in CITY_STATES)
_MAJOR_RULES = rule_table((phrases(*keywords), major) for major, keywords in MAJOR_KEYWORDS)

_BUDGET_RULES = rule_table([
    (r"\b(cheap|affordable|(?<!unlimited\s)budget|low[\s-]?cost|free|community college|inexpensive|save money)\b", "low"),
    (r"\b(moderate|mid[\s-]?range|reasonable|state school)\b", "medium"),
    (r"\b(expensive|private|ivy|elite|money.*(not|no|isn't|isnt).*(issue|problem|concern)|unlimited budget)\b", "high"),
])

_COMMUNITY_COLLEGE_CUE = re.compile(r"\b(community college|cc|2[\s-]?year|two[\s-]?year|associate)\b", re.IGNORECASE)
_UNIVERSITY_CUE = re.compile(r"\b(university|4[\s-]?year|four[\s-]?year|bachelor)\b", re.IGNORECASE)
_PUBLIC_CUE = re.compile(r"\b(public|state)\b", re.IGNORECASE)
_PRIVATE_CUE = re.compile(r"\bprivate\b", re.IGNORECASE)
_TECHNICAL_CUE = re.compile(r"\b(technical|trade|vocational)\b", re.IGNORECASE)

DEMOGRAPHIC_RULES = rule_table([
    (r"\b(first[\s-]?gen|first generation|first in.*(family|fam).*college)\b", "first-generation"),
    (r"\b(veteran|military|vet|armed forces|gi bill)\b", "military"),
    (r"\b(international|foreign|visa|f1|f-1)\b", "international"),
    (r"\b(transfer|transferring|currently at|coming from)\b", "transfer"),
    (r"\b(adult learner|returning student|non[\s-]?traditional|going back to school)\b", "non-traditional"),
    (r"\b(low[\s-]?income|financial need|can't afford|economically disadvantaged)\b", "low-income"),
    (r"\b(disabled|disability|accommodations|ada|learning disability)\b", "disability"),
])


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return low <= value <= high


def extract_gpa(message: str) -> float | None:
    for pattern in _GPA_PATTERNS:
        match = pattern.search(message)
        if match:
            gpa = float(match.group(1))
            if _in_range(gpa, GPA_RANGE):
                return gpa
    return None


def extract_state(message: str) -> str | None:
    """Full state name, then a postal code, then a known city."""
    return (
        first_match(_STATE_NAME_RULES, message)
        or first_match(_STATE_CODE_RULES, message)
        or first_match(_CITY_RULES, message)
    )


def extract_major(message: str) -> str | None:
    return first_match(_MAJOR_RULES, message)


def extract_budget(message: str) -> str | None:
    return first_match(_BUDGET_RULES, message)


def extract_school_types(message: str) -> list[str]:
    types: list[str] = []
    if _COMMUNITY_COLLEGE_CUE.search(message):
        types.append(SchoolType.COMMUNITY_COLLEGE.value)
    if _UNIVERSITY_CUE.search(message):
        universities: list[str] = []
        if _PUBLIC_CUE.search(message):
            universities.append(SchoolType.PUBLIC_UNIVERSITY.value)
        if _PRIVATE_CUE.search(message):
            universities.append(SchoolType.PRIVATE_UNIVERSITY.value)
        types.extend(universities or [
            SchoolType.PUBLIC_UNIVERSITY.value,
            SchoolType.PRIVATE_UNIVERSITY.value,
        ])
    if _TECHNICAL_CUE.search(message):
        types.append(SchoolType.TECHNICAL_COLLEGE.value)
    return types


def extract_sat_score(message: str) -> int | None:
    match = _SAT_PATTERN.search(message)
    if match:
        score = int(match.group(1))
        if _in_range(score, SAT_RANGE):
            return score
    return None


def extract_act_score(message: str) -> int | None:
    match = _ACT_PATTERN.search(message)
    if match:
        score = int(match.group(1))
        if _in_range(score, ACT_RANGE):
            return score
    return None


def extract_demographics(message: str) -> list[str]:
    return all_matches(DEMOGRAPHIC_RULES, message)


def extract_profile_updates(message: str, current_profile: UserProfile | None = None) -> UserProfile:
    """Build the profile patch for one message.

    Only newly detected fields are set. Accumulating fields in the patch
    carry the union of what was already known and what was found, so the
    caller can store the patch values as-is.

    Args:
        message: Raw student message
        current_profile: Profile accumulated so far

    Returns:
        UserProfile: Patch with unknown fields left as None
    """
    current = current_profile or UserProfile()
    patch = UserProfile()

    patch.gpa = extract_gpa(message)

    state = extract_state(message)
    if state:
        patch.state = state
        patch.preferred_states = unique_strings([*(current.preferred_states or []), state])

    patch.intended_major = extract_major(message)
    patch.budget = extract_budget(message)

    school_types = extract_school_types(message)
    if school_types:
        patch.school_type = unique_strings([*(current.school_type or []), *school_types])

    patch.sat_score = extract_sat_score(message)
    patch.act_score = extract_act_score(message)

    demographics = extract_demographics(message)
    if demographics:
        patch.demographics = unique_strings([*(current.demographics or []), *demographics])

    return patch
