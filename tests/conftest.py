"""测试配置和共享 Fixtures。"""

import pytest

from eduguide.data import CollegeCatalog
from eduguide.engine import AdvisorEngine
from eduguide.models import ChatSource, CollegeEntry, ResearchNote, UserProfile
from eduguide.services.llm_service import LLMService, LLMServiceError


# ============================================================================
# Mock Services
# ============================================================================

class MockLLMService:
    """测试用 Mock LLM 服务。

    可以通过设置 response 属性来控制返回值。
    可以通过设置 should_fail 来模拟失败。
    """

    def __init__(self):
        self.response = "Here's a tailored answer for you."
        self.should_fail = False
        self.call_count = 0
        self.last_prompt = None
        self.last_instructions = None

    def call(self, prompt: str, *, instructions: str | None = None) -> str:
        self.call_count += 1
        self.last_prompt = prompt
        self.last_instructions = instructions

        if self.should_fail:
            raise LLMServiceError("Mock LLM failure")

        return self.response

    def reset(self):
        """重置状态。"""
        self.call_count = 0
        self.last_prompt = None
        self.last_instructions = None


class MockResearchService:
    """测试用 Mock 调研服务，返回预设的 ResearchNote。"""

    def __init__(self, notes=None):
        self.notes = notes or []
        self.requested = []

    def gather(self, colleges, message, profile):
        self.requested = list(colleges)
        return [note for note in self.notes if note.college in colleges]


# ============================================================================
# Catalog Fixtures
# ============================================================================

def build_college(**overrides) -> CollegeEntry:
    """创建测试用 CollegeEntry，未指定字段使用默认值。"""
    values = {
        "id": "test-public",
        "name": "Test State University",
        "city": "Testville",
        "state": "TX",
        "type": "Public University",
        "tuition_in_state": 11000,
        "tuition_out_state": 30000,
        "min_gpa": 3.0,
        "avg_gpa": 3.5,
        "sat_range": "1100-1300",
        "acceptance_rate": "60%",
        "graduation_rate": "70%",
        "financial_aid_percent": 70,
        "majors": ("Computer Science", "Engineering"),
        "tags": ("research", "transfer"),
        "description": "A public university used in tests.",
        "website": "https://www.test-state.edu",
    }
    values.update(overrides)
    return CollegeEntry(**values)


@pytest.fixture
def make_college():
    """返回 CollegeEntry 工厂函数。"""
    return build_college


@pytest.fixture
def small_catalog() -> CollegeCatalog:
    """创建五所学校的小型目录（用于可预测的排序测试）。"""
    return CollegeCatalog([
        build_college(
            id="cc-tx", name="Lone Star Community College", city="Houston", state="TX",
            type="Community College", tuition_in_state=2000, tuition_out_state=8000,
            min_gpa=0.0, avg_gpa=2.7, sat_range="N/A", financial_aid_percent=80,
            majors=("Computer Science", "Nursing", "Business"), tags=("transfer", "affordable"),
            website="https://www.lonestar.edu",
        ),
        build_college(id="pub-tx"),
        build_college(
            id="priv-ma", name="Bay State Institute", city="Cambridge", state="MA",
            type="Private University", tuition_in_state=60000, tuition_out_state=60000,
            min_gpa=3.9, avg_gpa=4.0, sat_range="1500-1580", financial_aid_percent=55,
            tags=("research",), website="https://www.baystate.edu",
        ),
        build_college(
            id="pub-ca", name="University of Pacifica", city="Los Angeles", state="CA",
            tuition_in_state=13000, tuition_out_state=43000, min_gpa=3.7, avg_gpa=3.9,
            sat_range="1290-1510", financial_aid_percent=58,
            majors=("Biology", "Psychology"), tags=("research", "military-friendly"),
            website="https://www.pacifica.edu",
        ),
        build_college(
            id="tech-nc", name="Piedmont Technical College", city="Raleigh", state="NC",
            type="Technical College", tuition_in_state=2400, tuition_out_state=8500,
            min_gpa=0.0, avg_gpa=2.6, sat_range="N/A", financial_aid_percent=60,
            majors=("Engineering", "Computer Science"), tags=("online", "affordable"),
            website="https://www.piedmonttech.edu",
        ),
    ])


@pytest.fixture
def default_catalog() -> CollegeCatalog:
    """内置的完整学校目录。"""
    return CollegeCatalog.default()


@pytest.fixture
def engine(small_catalog) -> AdvisorEngine:
    """基于小型目录的 AdvisorEngine。"""
    return AdvisorEngine(small_catalog)


# ============================================================================
# Profile Fixtures
# ============================================================================

@pytest.fixture
def sample_profile() -> UserProfile:
    """创建示例学生 Profile。"""
    return UserProfile(
        gpa=3.6,
        state="TX",
        preferred_states=["TX"],
        intended_major="Computer Science",
        budget="low",
        demographics=["first-generation"],
    )


@pytest.fixture
def empty_profile() -> UserProfile:
    """创建空 Profile（用于边界测试）。"""
    return UserProfile()


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def mock_llm() -> MockLLMService:
    """创建 Mock LLM 服务。"""
    return MockLLMService()


@pytest.fixture
def failing_llm(mock_llm: MockLLMService) -> MockLLMService:
    """创建总是失败的 Mock LLM。"""
    mock_llm.should_fail = True
    return mock_llm


@pytest.fixture
def research_note(small_catalog) -> ResearchNote:
    """创建示例 ResearchNote。"""
    college = small_catalog.get("pub-tx")
    summary = "Admissions for Computer Science programs open every fall with merit scholarships."
    return ResearchNote(
        college=college,
        summary=summary,
        source=ChatSource(title="Test State Admissions", url="https://www.test-state.edu/admissions", note=summary),
    )


@pytest.fixture
def mock_research() -> MockResearchService:
    """创建不返回任何调研结果的 Mock 调研服务。"""
    return MockResearchService()


@pytest.fixture(autouse=True)
def reset_llm_facade():
    """每个测试后重置全局 LLM 实例。"""
    yield
    LLMService.reset()
