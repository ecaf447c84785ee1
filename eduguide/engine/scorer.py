"""College fit scoring and ranking.

Scores are additive from a base of 50 and clamped to [0, 100] as the very
last step. Ranking is a stable sort, so equal scores keep catalog order.
"""

from __future__ import annotations

from typing import Iterable

from eduguide.models import CollegeEntry, SchoolType, ScoredCandidate, UserProfile

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100


def _gpa_points(college: CollegeEntry, gpa: float) -> int:
    # Open admission: every applicant fits
    if college.type == SchoolType.COMMUNITY_COLLEGE.value:
        return 15
    if gpa >= college.avg_gpa:
        return 25
    if gpa >= college.min_gpa:
        return 15
    if gpa >= college.min_gpa - 0.3:
        return 5
    return -20


def _budget_points(college: CollegeEntry, profile: UserProfile) -> int:
    tuition = college.tuition_in_state if profile.state == college.state else college.tuition_out_state
    if profile.budget == "low":
        if tuition <= 5000:
            return 20
        if tuition <= 15000:
            return 10
        if tuition > 30000:
            return -15
    elif profile.budget == "medium":
        if tuition <= 25000:
            return 15
        if tuition > 50000:
            return -10
    elif profile.budget == "high":
        return 5
    return 0


def _demographic_points(college: CollegeEntry, demographics: list[str]) -> int:
    points = 0
    is_community_college = college.type == SchoolType.COMMUNITY_COLLEGE.value
    if "first-generation" in demographics and college.financial_aid_percent > 70:
        points += 10
    if "transfer" in demographics and "transfer" in college.tags:
        points += 15
    if "military" in demographics and "military-friendly" in college.tags:
        points += 15
    if "low-income" in demographics and is_community_college:
        points += 15
    if "low-income" in demographics and college.financial_aid_percent > 75:
        points += 10
    return points


def _test_score_points(college: CollegeEntry, sat_score: int) -> int:
    bounds = college.sat_bounds()
    if bounds is None:
        return 0
    low, high = bounds
    if low <= sat_score <= high:
        return 10
    if sat_score > high:
        return 15
    if sat_score < low - 100:
        return -10
    return 0


def score_college(college: CollegeEntry, profile: UserProfile) -> int:
    """Score how well one college fits one profile.

    Args:
        college: Catalog entry
        profile: Merged student profile

    Returns:
        int: Fit score in [0, 100]
    """
    score = BASE_SCORE

    if profile.gpa is not None:
        score += _gpa_points(college, profile.gpa)

    if profile.state and college.state == profile.state:
        score += 20
    elif profile.preferred_states and college.state in profile.preferred_states:
        score += 15

    if profile.intended_major:
        major = profile.intended_major.lower()
        if any(major in m.lower() or m.lower() in major for m in college.majors):
            score += 20

    if profile.budget:
        score += _budget_points(college, profile)

    if profile.school_type:
        score += 15 if college.type in profile.school_type else -10

    if profile.demographics:
        score += _demographic_points(college, profile.demographics)

    if profile.sat_score:
        score += _test_score_points(college, profile.sat_score)

    for interest in profile.interests or []:
        if interest in college.tags:
            score += 5

    return max(MIN_SCORE, min(MAX_SCORE, score))


def rank_colleges(
    profile: UserProfile,
    colleges: Iterable[CollegeEntry],
    limit: int | None = 5,
) -> list[ScoredCandidate]:
    """Score every college and return the best ``limit`` candidates."""
    scored = [ScoredCandidate(college, score_college(college, profile)) for college in colleges]
    scored.sort(key=lambda candidate: candidate.score, reverse=True)
    return scored if limit is None else scored[:limit]


def recommend(profile: UserProfile, colleges: Iterable[CollegeEntry], limit: int = 5) -> list[CollegeEntry]:
    return [candidate.college for candidate in rank_colleges(profile, colleges, limit)]
