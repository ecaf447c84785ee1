"""官网调研服务单元测试。"""

from unittest.mock import MagicMock

import pytest
import requests

from eduguide.models import ResearchNote, UserProfile
from eduguide.services.outcome import Unavailable
from eduguide.services.research_service import (
    ResearchService,
    build_acronym,
    build_college_aliases,
    build_research_keywords,
    detect_assignment_support_intent,
    extract_research_summary,
    find_mentioned_colleges,
    normalize_text,
    pick_research_colleges,
    sentence_score,
)

PAGE_MARKDOWN = """# Welcome
Short line
Our admissions team reviews every application holistically for fall entry.
The campus has over forty dining options and lots of green spaces to relax.
Scholarships are available for students majoring in Computer Science programs.
"""


def make_response(*, ok=True, status_code=200, payload=None, text="", url=None):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    response.text = text
    response.url = url
    return response


class TestAliases:
    """测试学校别名匹配。"""

    def test_normalize_text(self):
        """测试文本规范化。"""
        assert normalize_text("  Texas A&M   University! ") == "texas a m university"

    def test_acronym_skips_stop_words(self):
        """测试首字母缩写跳过停用词。"""
        assert build_acronym("New York University") == "ny"
        assert build_acronym("Massachusetts Institute of Technology") == "mit"

    def test_aliases(self, make_college):
        """测试全名、缩写、去前缀名称和城市。"""
        college = make_college(name="University of Pacifica Northern", city="Los Angeles")

        aliases = build_college_aliases(college)

        assert aliases == ["university of pacifica northern", "pn", "pacifica northern", "los angeles"]

    def test_ambiguous_acronym_is_skipped(self, make_college):
        """测试与常用词相同的缩写不作为别名。"""
        college = make_college(name="Arizona State University", city="Tempe")

        assert "as" not in build_college_aliases(college)
        assert find_mentioned_colleges("as a student I want options", [college]) == []

    def test_find_mentioned_colleges(self, small_catalog):
        """测试从消息中找出提到的学校。"""
        mentioned = find_mentioned_colleges("Is Bay State Institute worth it?", small_catalog)

        assert [c.id for c in mentioned] == ["priv-ma"]

    def test_find_by_city(self, small_catalog):
        """测试通过城市名匹配。"""
        mentioned = find_mentioned_colleges("anything in los angeles?", small_catalog)

        assert [c.id for c in mentioned] == ["pub-ca"]

    def test_pick_prefers_mentions(self, small_catalog):
        """测试优先选择消息中提到的学校，否则使用推荐结果。"""
        recommended = list(small_catalog)[:3]

        picked = pick_research_colleges("Tell me about Piedmont Technical College", small_catalog, recommended)
        fallback = pick_research_colleges("ok", small_catalog, recommended)

        assert [c.id for c in picked] == ["tech-nc"]
        assert [c.id for c in fallback] == ["cc-tx", "pub-tx"]

    def test_pick_with_no_recommendations(self, small_catalog):
        """测试没有推荐结果时返回空列表。"""
        assert pick_research_colleges("ok", small_catalog, None) == []


class TestSummary:
    """测试页面摘要提取。"""

    def test_assignment_detection(self):
        """测试作业类消息识别。"""
        assert detect_assignment_support_intent("Can you help with my homework?")
        assert not detect_assignment_support_intent("Which college is best?")

    def test_keywords(self, make_college):
        """测试关键词包含学校信息、专业和消息词汇。"""
        college = make_college()
        keywords = build_research_keywords("What about housing here?", college, UserProfile(intended_major="Nursing"))

        assert keywords[:3] == ["Test State University", "Testville", "TX"]
        assert "Nursing" in keywords
        assert "housing" in keywords
        assert "academic support" not in keywords

    def test_sentence_score(self):
        """测试句子打分。"""
        assert sentence_score("Financial aid for every student", ["financial aid"]) == 5
        assert sentence_score("Nothing relevant here", ["financial aid"]) == 0

    def test_top_two_lines(self):
        """测试选出得分最高的两行。"""
        summary = extract_research_summary(PAGE_MARKDOWN, ["admissions", "scholarships", "Computer Science"])

        assert summary.startswith("Scholarships are available for students majoring in Computer Science programs.")
        assert "Our admissions team" in summary
        assert "dining" not in summary
        assert len(summary) <= 360

    def test_fallback_to_first_lines(self):
        """测试没有得分行时取前两行。"""
        text = "\n".join([
            "A long line about the weather in the region during the autumn months.",
            "Another long line about the local coffee shops and their opening hours.",
            "A third long line that should not be included in the fallback summary.",
        ])

        summary = extract_research_summary(text, ["zzz"])

        assert summary.startswith("A long line about the weather")
        assert "third" not in summary

    def test_empty_page(self):
        """测试没有可用行时返回空字符串。"""
        assert extract_research_summary("tiny\nlines", ["admissions"]) == ""


class TestResearchService:
    """测试 ResearchService 的网络调用。"""

    def test_no_provider_configured(self, monkeypatch, make_college):
        """测试未配置时返回 Unavailable 且 gather 为空。"""
        monkeypatch.delenv("FIRECRAWL_API_KEY", raising=False)
        session = MagicMock()
        service = ResearchService(session=session, use_direct=False)

        outcome = service.fetch_note(make_college(), "hi", UserProfile())

        assert isinstance(outcome, Unavailable)
        assert service.gather([make_college()], "hi", UserProfile()) == []
        session.post.assert_not_called()
        session.get.assert_not_called()

    def test_firecrawl_success(self, monkeypatch, make_college):
        """测试 Firecrawl 成功返回摘要和引用。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        session = MagicMock()
        session.post.return_value = make_response(payload={
            "success": True,
            "data": {
                "markdown": PAGE_MARKDOWN,
                "metadata": {"title": "Admissions | Test State", "sourceURL": "https://www.test-state.edu/admit"},
            },
        })
        service = ResearchService(session=session, timeout=5)

        note = service.fetch_note(make_college(), "scholarships for computer science", UserProfile())

        assert isinstance(note, ResearchNote)
        assert note.summary.startswith("Scholarships are available")
        assert note.source.title == "Admissions | Test State"
        assert note.source.url == "https://www.test-state.edu/admit"
        assert note.source.note == note.summary

        kwargs = session.post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer fc-test"
        assert kwargs["json"]["url"] == "https://www.test-state.edu"
        assert kwargs["json"]["timeout"] == 5000
        assert kwargs["timeout"] == 5

    def test_firecrawl_without_markdown_uses_description(self, monkeypatch, make_college):
        """测试没有正文时使用页面描述，再退回目录描述。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        session = MagicMock()
        session.post.return_value = make_response(payload={
            "success": True,
            "data": {"metadata": {"description": "Official page description."}},
        })
        service = ResearchService(session=session)

        note = service.fetch_note(make_college(), "hi", UserProfile())

        assert note.summary == "Official page description."
        assert note.source.title == "Test State University official site"
        assert note.source.url == "https://www.test-state.edu"

    @pytest.mark.parametrize("response", [
        make_response(ok=False, status_code=402, payload={"success": False, "error": "Payment required"}),
        make_response(payload={"success": True}),
        make_response(payload=["unexpected"]),
    ])
    def test_firecrawl_failures_are_unavailable(self, monkeypatch, make_college, response):
        """测试失败响应转为 Unavailable。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        session = MagicMock()
        session.post.return_value = response
        service = ResearchService(session=session)

        assert isinstance(service.fetch_note(make_college(), "hi", UserProfile()), Unavailable)

    def test_network_error_is_unavailable(self, monkeypatch, make_college):
        """测试网络异常转为 Unavailable。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("boom")
        service = ResearchService(session=session)

        assert isinstance(service.fetch_note(make_college(), "hi", UserProfile()), Unavailable)

    def test_direct_fetch(self, monkeypatch, make_college):
        """测试直接抓取页面并用 BeautifulSoup 解析。"""
        monkeypatch.delenv("FIRECRAWL_API_KEY", raising=False)
        html = """<html><head><title>Test State University</title>
        <meta name="description" content="Welcome to Test State."></head>
        <body><nav>Menu Home About</nav><main>
        <p>Our admissions office helps transfer students plan their next step every term.</p>
        <p>Too short.</p>
        </main></body></html>"""
        session = MagicMock()
        session.get.return_value = make_response(text=html, url="https://www.test-state.edu/")
        service = ResearchService(session=session, use_direct=True)

        note = service.fetch_note(make_college(), "transfer help", UserProfile())

        assert note.summary == "Our admissions office helps transfer students plan their next step every term."
        assert note.source.title == "Test State University"
        assert note.source.url == "https://www.test-state.edu/"

    def test_gather_drops_failures(self, monkeypatch, small_catalog):
        """测试并行调研时丢弃失败的结果。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        good = make_response(payload={"success": True, "data": {"markdown": PAGE_MARKDOWN, "metadata": {}}})
        bad = make_response(ok=False, status_code=500, payload={})

        def post(url, **kwargs):
            return good if kwargs["json"]["url"] == "https://www.lonestar.edu" else bad

        session = MagicMock()
        session.post.side_effect = post
        service = ResearchService(session=session)
        colleges = [small_catalog.get("cc-tx"), small_catalog.get("pub-tx")]

        notes = service.gather(colleges, "admissions", UserProfile())

        assert [note.college.id for note in notes] == ["cc-tx"]
        assert notes[0].source.url == "https://www.lonestar.edu"

    @pytest.mark.parametrize("data", [
        {"markdown": "x", "metadata": "oops"},
        {"markdown": ["not", "str"], "metadata": {}},
    ])
    def test_malformed_page_is_unavailable(self, monkeypatch, make_college, data):
        """测试 success 为真但字段类型错误的响应转为 Unavailable。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        session = MagicMock()
        session.post.return_value = make_response(payload={"success": True, "data": data})
        service = ResearchService(session=session)

        assert isinstance(service.fetch_note(make_college(), "hi", UserProfile()), Unavailable)
        assert service.gather([make_college()], "hi", UserProfile()) == []

    def test_non_string_metadata_fields_are_ignored(self, monkeypatch, make_college):
        """测试 metadata 中非字符串的字段被忽略。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        session = MagicMock()
        session.post.return_value = make_response(payload={
            "success": True,
            "data": {"markdown": PAGE_MARKDOWN, "metadata": {"title": ["x"], "sourceURL": 42}},
        })
        service = ResearchService(session=session)

        note = service.fetch_note(make_college(), "admissions", UserProfile())

        assert note.source.title == "Test State University official site"
        assert note.source.url == "https://www.test-state.edu"

    def test_gather_isolates_unexpected_errors(self, monkeypatch, small_catalog):
        """测试一所学校抛出未预期异常时，其他学校的结果仍然保留。"""
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        good = make_response(payload={"success": True, "data": {"markdown": PAGE_MARKDOWN, "metadata": {}}})

        def post(url, **kwargs):
            if kwargs["json"]["url"] == "https://www.test-state.edu":
                raise RuntimeError("parser exploded")
            return good

        session = MagicMock()
        session.post.side_effect = post
        service = ResearchService(session=session)
        colleges = [small_catalog.get("pub-tx"), small_catalog.get("cc-tx")]

        notes = service.gather(colleges, "admissions", UserProfile())

        assert [note.college.id for note in notes] == ["cc-tx"]
