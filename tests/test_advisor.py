"""AdvisorEngine 端到端测试。"""

import pytest

from eduguide.engine import AdvisorEngine, process_message, recommend
from eduguide.engine.composer import ONBOARDING_QUESTIONS, REFUSAL_MESSAGE, gpa_commentary
from eduguide.models import UserProfile


class ExplodingCatalog:
    """一旦被遍历就失败的目录，用来证明没有进行打分。"""

    def __iter__(self):
        raise AssertionError("catalog should not be scored")


class TestScenarios:
    """测试典型对话场景。"""

    def test_gpa_major_state_budget_message(self, default_catalog):
        """测试包含 GPA、专业、州和预算的推荐请求。"""
        message = "My GPA is 3.6 and I want to study Computer Science in Texas on a budget"

        response = AdvisorEngine(default_catalog).process_message(message, UserProfile())

        patch = response.profile_updates
        assert patch.gpa == 3.6
        assert patch.state == "TX"
        assert patch.intended_major == "Computer Science"
        assert patch.budget == "low"
        assert response.intent == "recommendation"

        merged = UserProfile().merged_with(patch)
        assert response.colleges == recommend(merged, default_catalog, 5)
        assert len(response.colleges) == 5

    def test_greeting_has_no_updates_or_colleges(self, engine):
        """测试问候语不产生 patch 和学校。"""
        response = engine.process_message("hi there, can someone help me", UserProfile())

        assert response.intent == "greeting"
        assert response.colleges is None
        assert response.profile_updates.is_empty()

    def test_trading_request_is_refused(self, engine):
        """测试交易类请求返回固定拒答。"""
        response = engine.process_message(
            "I need help with fx risk orchestrator kill switch for xauusd trading",
            UserProfile(gpa=3.0),
        )

        data = response.to_dict()
        assert data["content"] == REFUSAL_MESSAGE
        assert data["profileUpdates"] == {}
        assert data["followUpQuestions"] == ONBOARDING_QUESTIONS
        assert "colleges" not in data
        assert response.intent == "out-of-scope"

    def test_scope_guard_runs_before_scoring(self):
        """测试范围守卫在打分之前短路。"""
        engine = AdvisorEngine(ExplodingCatalog())

        response = engine.process_message("what's a good stop loss for picking a college major")

        assert response.content == REFUSAL_MESSAGE

    def test_greeting_wins_over_recommendation(self, engine):
        """测试问候优先于推荐。"""
        response = engine.process_message("hi, can you recommend a college?")

        assert response.intent == "greeting"

    def test_module_level_entry_point(self):
        """测试模块级 process_message 使用内置目录。"""
        response = process_message("Can you recommend some schools?")

        assert response.intent == "recommendation"
        assert len(response.colleges) == 5


class TestComposerBranches:
    """测试每个意图的回复模板。"""

    def test_greeting_uses_name(self, engine):
        """测试问候语使用用户名。"""
        response = engine.process_message("Hello!", user_name="Sam")

        assert response.content.startswith("Hi Sam!")

    def test_greeting_without_name(self, engine):
        """测试没有用户名时的问候语。"""
        assert engine.process_message("Hello!").content.startswith("Hi there!")

    def test_gpa_discussion_with_gpa(self, engine):
        """测试提供 GPA 时给出分档评价和学校。"""
        response = engine.process_message("My GPA is 3.9")

        assert response.intent == "gpa-discussion"
        assert "**3.9**" in response.content
        assert "excellent GPA" in response.content
        assert len(response.colleges) == 4

    def test_gpa_discussion_without_gpa(self, engine):
        """测试没有 GPA 时提示输入。"""
        response = engine.process_message("What's my chance with my grades?")

        assert response.intent == "gpa-discussion"
        assert response.colleges is None
        assert "What's your current GPA?" in response.content

    @pytest.mark.parametrize("gpa, phrase", [
        (3.9, "excellent"),
        (3.6, "strong GPA"),
        (3.1, "solid GPA"),
        (2.6, "several paths"),
        (2.0, "Community colleges offer open enrollment"),
    ])
    def test_gpa_tiers(self, gpa, phrase):
        """测试五档 GPA 评价。"""
        assert phrase in gpa_commentary(gpa)

    def test_recommendation_without_profile(self, engine):
        """测试没有 Profile 时给出通用推荐并请求更多信息。"""
        response = engine.process_message("Can you recommend some schools?")

        assert "popular options" in response.content
        assert len(response.colleges) == 5

    def test_recommendation_summarises_profile(self, engine, sample_profile):
        """测试有 Profile 时在回复中总结已知信息。"""
        response = engine.process_message("Can you recommend some schools?", sample_profile)

        assert "GPA: 3.6" in response.content
        assert "Location: TX" in response.content

    def test_financial_aid_scores_with_low_budget(self, engine, small_catalog):
        """测试助学金分支强制按低预算打分。"""
        profile = UserProfile(state="TX", budget="high")

        response = engine.process_message("How do I apply for financial aid?", profile)

        assert response.intent == "financial-aid"
        expected = recommend(UserProfile(state="TX", budget="low"), small_catalog, 3)
        assert response.colleges == expected
        assert [c.id for c in response.colleges] == ["cc-tx", "pub-tx", "tech-nc"]
        assert recommend(profile, small_catalog, 3) != expected
        assert response.profile_updates.budget is None
        assert "As a TX resident" in response.content

    def test_admissions(self, engine):
        """测试录取分支。"""
        response = engine.process_message("When is the application deadline?", UserProfile(gpa=3.2))

        assert response.intent == "admissions"
        assert "Key Deadlines" in response.content
        assert "strong candidate" in response.content
        assert len(response.colleges) == 3

    def test_community_college_forces_school_type(self, default_catalog):
        """测试社区大学分支强制 schoolType 并只推荐社区大学。"""
        engine = AdvisorEngine(default_catalog)
        current = UserProfile(school_type=["Public University"])

        response = engine.process_message("Tell me about community college options in Texas", current)

        assert response.intent == "community-college"
        assert response.profile_updates.school_type == ["Community College"]
        assert len(response.colleges) == 4
        assert all(c.type == "Community College" for c in response.colleges)
        assert "near TX" in response.content

    def test_comparison(self, engine):
        """测试对比分支。"""
        response = engine.process_message("UCLA versus Berkeley")

        assert response.intent == "comparison"
        assert len(response.colleges) == 4

    def test_major_selection_with_major(self, engine):
        """测试识别到专业时给出专业介绍和学校。"""
        response = engine.process_message("I can't pick a major, maybe nursing")

        assert response.intent == "major-selection"
        assert response.profile_updates.intended_major == "Nursing"
        assert "CCNE" in response.content
        assert len(response.colleges) == 4

    def test_major_selection_without_major(self, engine):
        """测试没有专业时给出通用指导。"""
        response = engine.process_message("I can't pick a major")

        assert response.colleges is None
        assert "Choosing a major" in response.content

    def test_test_prep_without_score(self, engine):
        """测试没有考试分数时不推荐学校。"""
        response = engine.process_message("When should I take the SAT?")

        assert response.intent == "test-prep"
        assert response.colleges is None
        assert "test-optional schools" in response.content

    def test_test_prep_with_known_score(self, engine):
        """测试已知 SAT 分数时推荐 3 所学校。"""
        response = engine.process_message("When should I take the SAT?", UserProfile(sat_score=1400))

        assert len(response.colleges) == 3
        assert "SAT score of 1400" in response.content

    @pytest.mark.parametrize("message, intent", [
        ("Do you offer online classes?", "online-learning"),
        ("Can you look at my essay?", "essay-help"),
        ("thanks!", "thanks"),
    ])
    def test_informational_branches_attach_no_colleges(self, engine, message, intent):
        """测试纯信息类分支不推荐学校。"""
        response = engine.process_message(message)

        assert response.intent == intent
        assert response.colleges is None

    def test_thanks_uses_name(self, engine):
        """测试感谢回复使用用户名。"""
        response = engine.process_message("thanks!", user_name="Maya")

        assert response.content.startswith("You're welcome, Maya!")

    def test_general_without_updates(self, engine):
        """测试无新信息时的通用回复。"""
        response = engine.process_message("ok")

        assert response.intent == "general"
        assert len(response.colleges) == 3

    def test_general_echoes_updates(self, engine):
        """测试有新信息时回显并推荐 4 所学校。"""
        response = engine.process_message("I'm a veteran")

        assert response.intent == "general"
        assert "Background: military" in response.content
        assert len(response.colleges) == 4
