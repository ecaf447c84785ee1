"""Official-site research for recommended colleges.

Fetches a college's public website, keeps the few lines most relevant to
the student's question and packages them with a citation. Every failure is
reported as ``Unavailable`` so a chat turn never fails because of research.
"""

from __future__ import annotations

import logging
import os
import re
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable

import requests
from bs4 import BeautifulSoup

from config import FIRECRAWL_API_URL, MAX_RESEARCH_COLLEGES, RESEARCH_TIMEOUT, USE_DIRECT_RESEARCH
from eduguide.models import ChatSource, CollegeEntry, ResearchNote, UserProfile

from .outcome import Outcome, Unavailable

logger = logging.getLogger(__name__)

STOP_WORDS = {
    "a", "an", "and", "at", "for", "in", "of", "on", "the", "to",
    "university", "college", "campus", "school",
}

# Acronyms that are also everyday words would match ordinary prose
_AMBIGUOUS_ACRONYMS = {
    "am", "as", "be", "do", "go", "he", "hi", "if", "is", "it", "me", "my",
    "no", "or", "so", "up", "us", "we",
}

DOMAIN_KEYWORDS = [
    "admissions", "financial aid", "scholarships", "academics",
    "programs", "student life", "transfer",
]

_ASSIGNMENT_CUE = re.compile(
    r"\b(assignment|homework|essay|paper|discussion post|worksheet|lab report|quiz|study guide|project|draft|outline)\b",
    re.IGNORECASE,
)
_MESSAGE_TOKEN = re.compile(r"[a-zA-Z][a-zA-Z-]{3,}")
_MARKDOWN_NOISE = re.compile(r"[#>*`-]+")

SUMMARY_MIN_LINE = 45
SUMMARY_MAX_LINE = 260
SUMMARY_MAX_CHARS = 360
FALLBACK_MAX_CHARS = 320


class ResearchServiceError(Exception):
    """Raised when a research provider call fails."""
    pass


@dataclass
class ScrapedPage:
    """Text and metadata of one fetched page."""
    text: str
    title: str | None = None
    description: str | None = None
    url: str | None = None


def _text_or_none(value) -> str | None:
    return value if isinstance(value, str) else None


def detect_assignment_support_intent(message: str) -> bool:
    """True when the message is about coursework."""
    return _ASSIGNMENT_CUE.search(message) is not None


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    text = re.sub(r"[^a-z0-9\s]", " ", text.lower())
    return re.sub(r"\s+", " ", text).strip()


def build_acronym(name: str) -> str:
    parts = [part.strip().lower() for part in re.split(r"[\s,]+", name)]
    return "".join(part[0] for part in parts if part and part not in STOP_WORDS)


def build_college_aliases(college: CollegeEntry) -> list[str]:
    """Names a student might use for a college.

    Full normalised name, acronym of the significant words, the name
    without a leading "university of" / "college of" / "the", and the city.
    """
    aliases: dict[str, None] = {}
    full_name = normalize_text(college.name)
    if full_name:
        aliases[full_name] = None

    acronym = build_acronym(college.name)
    if len(acronym) >= 2 and acronym not in _AMBIGUOUS_ACRONYMS:
        aliases[acronym] = None

    short_name = re.sub(r"^(university of|college of|the) ", "", full_name).strip()
    if short_name and short_name != full_name:
        aliases[short_name] = None

    if college.city:
        aliases[normalize_text(college.city)] = None

    return list(aliases)


def _alias_pattern(alias: str) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(part) for part in alias.split())
    return re.compile(rf"\b{body}\b")


def find_mentioned_colleges(message: str, colleges: Iterable[CollegeEntry]) -> list[CollegeEntry]:
    """Colleges named in the message, in catalog order."""
    normalized = normalize_text(message)
    if not normalized:
        return []
    return [
        college for college in colleges
        if any(_alias_pattern(alias).search(normalized) for alias in build_college_aliases(college) if alias)
    ]


def pick_research_colleges(
    message: str,
    catalog: Iterable[CollegeEntry],
    recommended: list[CollegeEntry] | None,
    limit: int = MAX_RESEARCH_COLLEGES,
) -> list[CollegeEntry]:
    """Explicitly mentioned colleges first, else the top recommendations."""
    mentioned = find_mentioned_colleges(message, catalog)
    if mentioned:
        return mentioned[:limit]
    return list(recommended or [])[:limit]


def build_research_keywords(message: str, college: CollegeEntry, profile: UserProfile) -> list[str]:
    keywords: dict[str, None] = dict.fromkeys([college.name, college.city, college.state, *DOMAIN_KEYWORDS])
    if profile.intended_major:
        keywords[profile.intended_major] = None
    if detect_assignment_support_intent(message):
        keywords["academic support"] = None
    for token in _MESSAGE_TOKEN.findall(message)[:12]:
        keywords[token.lower()] = None
    return list(keywords)


def sentence_score(line: str, keywords: Iterable[str]) -> int:
    """Relevance of one line: keyword hits plus fixed domain cues."""
    normalized = line.lower()
    score = 0
    for keyword in keywords:
        token = keyword.lower().strip()
        if token and token in normalized:
            score += 4 if " " in token else 2

    for cue, points in (("admission", 2), ("scholar", 2), ("program", 2), ("student", 1), ("campus", 1), ("support", 1)):
        if cue in normalized:
            score += points
    return score


def extract_research_summary(text: str, keywords: list[str]) -> str:
    """Pick the two most relevant mid-length lines of a page.

    Args:
        text: Page text or markdown, one block per line
        keywords: Relevance keywords from ``build_research_keywords``

    Returns:
        str: Up to two lines joined; empty when the page has no usable lines
    """
    candidates = []
    for raw in re.split(r"\n+", text):
        line = re.sub(r"\s+", " ", _MARKDOWN_NOISE.sub(" ", raw)).strip()
        if SUMMARY_MIN_LINE <= len(line) <= SUMMARY_MAX_LINE:
            candidates.append(line)

    scored = [(line, sentence_score(line, keywords)) for line in candidates]
    scored = [entry for entry in scored if entry[1] > 0]
    scored.sort(key=lambda entry: entry[1], reverse=True)

    if not scored:
        return " ".join(candidates[:2])[:FALLBACK_MAX_CHARS]
    return " ".join(line for line, _ in scored[:2])[:SUMMARY_MAX_CHARS]


class ResearchService:
    """Fetches research notes from college websites."""

    # Common headers to mimic a browser request
    HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(
        self,
        timeout: float = RESEARCH_TIMEOUT,
        session: requests.Session | None = None,
        use_direct: bool = USE_DIRECT_RESEARCH,
    ):
        self.timeout = timeout
        self.use_direct = use_direct
        self.session = session or requests.Session()
        self.session.headers.update(self.HEADERS)

    @property
    def firecrawl_key(self) -> str | None:
        return os.environ.get("FIRECRAWL_API_KEY")

    @property
    def enabled(self) -> bool:
        return bool(self.firecrawl_key) or self.use_direct

    def gather(self, colleges: list[CollegeEntry], message: str, profile: UserProfile) -> list[ResearchNote]:
        """Research colleges in parallel and keep the notes that came back."""
        if not colleges or not self.enabled:
            return []

        with ThreadPoolExecutor(max_workers=len(colleges)) as pool:
            futures = [pool.submit(self.fetch_note, college, message, profile) for college in colleges]
            outcomes = [self._collect(future, college) for future, college in zip(futures, colleges)]

        notes = [outcome for outcome in outcomes if not isinstance(outcome, Unavailable)]
        logger.info("[research] requested=%d collected=%d", len(colleges), len(notes))
        return notes

    @staticmethod
    def _collect(future: Future, college: CollegeEntry) -> Outcome[ResearchNote]:
        try:
            return future.result()
        except Exception as e:
            logger.exception("[research] %s failed unexpectedly", college.name)
            return Unavailable(f"unexpected error: {e}")

    def fetch_note(self, college: CollegeEntry, message: str, profile: UserProfile) -> Outcome[ResearchNote]:
        """Research one college.

        Returns:
            ResearchNote on success, ``Unavailable`` when no provider is
            configured or the fetch failed
        """
        try:
            page = self._fetch_page(college)
        except ResearchServiceError as e:
            logger.warning("[research] %s unavailable: %s", college.name, e)
            return Unavailable(str(e))

        summary = (
            (page.text and extract_research_summary(page.text, build_research_keywords(message, college, profile)))
            or (page.description or "").strip()
            or college.description
        )
        source = ChatSource(
            title=(page.title or "").strip() or f"{college.name} official site",
            url=(page.url or "").strip() or college.website,
            note=summary,
        )
        return ResearchNote(college=college, summary=summary, source=source)

    def _fetch_page(self, college: CollegeEntry) -> ScrapedPage:
        if self.firecrawl_key:
            return self._scrape_firecrawl(college.website, self.firecrawl_key)
        if self.use_direct:
            return self._fetch_direct(college.website)
        raise ResearchServiceError("no research provider configured")

    def _scrape_firecrawl(self, url: str, api_key: str) -> ScrapedPage:
        """Scrape a page as markdown through the Firecrawl API."""
        try:
            response = self.session.post(
                FIRECRAWL_API_URL,
                headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
                json={
                    "url": url,
                    "formats": ["markdown"],
                    "onlyMainContent": True,
                    "timeout": int(self.timeout * 1000),
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ResearchServiceError(f"Firecrawl request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        data = payload.get("data")
        if not response.ok or not payload.get("success") or not isinstance(data, dict):
            error = payload.get("error")
            raise ResearchServiceError(f"Firecrawl scrape failed ({response.status_code}): {error or 'no data'}")

        metadata = data.get("metadata") or {}
        markdown = data.get("markdown") or ""
        if not isinstance(metadata, dict) or not isinstance(markdown, str):
            raise ResearchServiceError("Firecrawl returned a malformed page payload")

        return ScrapedPage(
            text=markdown.strip(),
            title=_text_or_none(metadata.get("title")),
            description=_text_or_none(metadata.get("description")),
            url=_text_or_none(metadata.get("sourceURL")) or _text_or_none(metadata.get("url")),
        )

    def _fetch_direct(self, url: str) -> ScrapedPage:
        """Fetch a page directly and extract its main text."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ResearchServiceError(f"fetch of {url} failed: {e}") from e

        soup = BeautifulSoup(response.text, "html.parser")

        title = soup.title.get_text(strip=True) if soup.title else None
        meta = soup.find("meta", attrs={"name": "description"})
        description = meta.get("content") if meta else None

        for element in soup(["script", "style", "nav", "footer", "header", "aside"]):
            element.decompose()

        main_content = (
            soup.find("main")
            or soup.find("article")
            or soup.find(id=re.compile(r"content|main", re.I))
            or soup.body
        )
        text = (main_content or soup).get_text(separator="\n", strip=True)

        return ScrapedPage(text=text, title=title, description=description, url=response.url or url)
