"""Scope guard and intent classification.

Intents are checked in a fixed order and the first matching rule wins, so
"hi, can you recommend a college?" is a greeting.
"""

from __future__ import annotations

import re
from enum import Enum

from .rules import first_match, rule_table


class Intent(str, Enum):
    GREETING = "greeting"
    RECOMMENDATION = "recommendation"
    GPA_DISCUSSION = "gpa-discussion"
    FINANCIAL_AID = "financial-aid"
    ADMISSIONS = "admissions"
    COMMUNITY_COLLEGE = "community-college"
    COMPARISON = "comparison"
    MAJOR_SELECTION = "major-selection"
    ONLINE_LEARNING = "online-learning"
    TEST_PREP = "test-prep"
    ESSAY_HELP = "essay-help"
    THANKS = "thanks"
    GENERAL = "general"


OUT_OF_SCOPE = "out-of-scope"

TRADING_KEYWORDS = [
    "fx",
    "forex",
    "xauusd",
    "mt5",
    "oanda",
    "broker",
    "take profit",
    "stop loss",
    "order block",
    "liquidity sweep",
    "choch",
    "backtest",
    "paper trading",
    "risk orchestrator",
    "position sizing",
    "trailing stop",
    "kill switch",
    "flatten positions",
    "trade execution",
]

_TRADING_TOKEN_PATTERNS = [
    re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
    for keyword in TRADING_KEYWORDS
    if " " not in keyword
]
_TRADING_PHRASES = [keyword for keyword in TRADING_KEYWORDS if " " in keyword]

INTENT_RULES = rule_table([
    (r"\b(hello|hi|hey|good morning|good afternoon|good evening|howdy|what's up|sup)\b", Intent.GREETING),
    (
        r"\b(recommend|suggest|find|best|which|what.*college|help me (find|choose|pick|decide)|match|good for me"
        r"|(want|plan|hoping) to (study|attend|go to)|looking for)\b",
        Intent.RECOMMENDATION,
    ),
    (r"\b(gpa|grade point|grades?|transcript|academic)\b", Intent.GPA_DISCUSSION),
    (r"\b(financial aid|fafsa|scholarship|grant|loan|money|cost|afford|tuition|pay for)\b", Intent.FINANCIAL_AID),
    (r"\b(admission|requirement|apply|application|deadline|acceptance|admit|get into|get in)\b", Intent.ADMISSIONS),
    (r"\b(community college|cc|transfer|2[\s-]?year|two[\s-]?year)\b", Intent.COMMUNITY_COLLEGE),
    (r"\b(compare|vs|versus|difference|better|between)\b", Intent.COMPARISON),
    (r"\b(major|study|program|degree|field|career)\b", Intent.MAJOR_SELECTION),
    (r"\b(online|distance|remote|virtual)\b", Intent.ONLINE_LEARNING),
    (r"\b(test|sat|act|exam|standardized|prep)\b", Intent.TEST_PREP),
    (r"\b(essay|personal statement|sop|statement of purpose)\b", Intent.ESSAY_HELP),
    (r"\b(thank|thanks|thx|appreciate)\b", Intent.THANKS),
])


def is_out_of_scope(message: str) -> bool:
    """True when the message asks about trading systems rather than college."""
    lower = message.lower()
    if any(phrase in lower for phrase in _TRADING_PHRASES):
        return True
    return any(pattern.search(lower) for pattern in _TRADING_TOKEN_PATTERNS)


def classify_intent(message: str) -> Intent:
    return first_match(INTENT_RULES, message) or Intent.GENERAL
