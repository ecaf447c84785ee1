"""CollegeCatalog 单元测试。"""

import json

from eduguide.data import CollegeCatalog


class TestDefaultCatalog:
    """测试内置目录。"""

    def test_loads_bundled_colleges(self, default_catalog):
        """测试加载内置目录。"""
        assert len(default_catalog) == 38
        assert default_catalog.get("ca-ucla").name == "University of California, Los Angeles"

    def test_default_is_cached(self):
        """测试默认目录只加载一次。"""
        assert CollegeCatalog.default() is CollegeCatalog.default()

    def test_ids_are_unique(self, default_catalog):
        """测试 id 唯一。"""
        ids = [college.id for college in default_catalog]
        assert len(ids) == len(set(ids))

    def test_states_and_types(self, default_catalog):
        """测试去重并排序的州和学校类型。"""
        states = default_catalog.states()

        assert states == sorted(set(states))
        assert "TX" in states
        assert default_catalog.types() == [
            "Community College",
            "Private University",
            "Public University",
            "Technical College",
        ]

    def test_community_colleges_have_open_admission(self, default_catalog):
        """测试社区大学没有 SAT 要求和最低 GPA。"""
        for college in default_catalog:
            if college.type == "Community College":
                assert college.sat_range == "N/A"
                assert college.min_gpa == 0.0

    def test_get_unknown(self, default_catalog):
        """测试查询不存在的 id。"""
        assert default_catalog.get("nope") is None


class TestSearch:
    """测试目录筛选。"""

    def test_filter_by_state_and_type(self, small_catalog):
        """测试按州和类型筛选。"""
        results = small_catalog.search(state="TX", type="Community College")

        assert [c.id for c in results] == ["cc-tx"]

    def test_filter_by_max_tuition(self, small_catalog):
        """测试按州内学费上限筛选。"""
        results = small_catalog.search(max_tuition=5000)

        assert [c.id for c in results] == ["cc-tx", "tech-nc"]

    def test_filter_by_student_gpa(self, small_catalog):
        """测试按学生 GPA 筛选（保留最低 GPA 不高于学生的学校）。"""
        results = small_catalog.search(min_gpa=3.2)

        assert [c.id for c in results] == ["cc-tx", "pub-tx", "tech-nc"]

    def test_filter_by_major_and_query(self, small_catalog):
        """测试按专业和关键词筛选。"""
        assert [c.id for c in small_catalog.search(major="psych")] == ["pub-ca"]
        assert [c.id for c in small_catalog.search(query="military")] == ["pub-ca"]

    def test_no_filters_returns_everything_in_order(self, small_catalog):
        """测试无筛选条件时按目录顺序返回全部。"""
        assert [c.id for c in small_catalog.search()] == [c.id for c in small_catalog]


class TestFromJson:
    """测试从 JSON 文件加载。"""

    def test_from_json(self, tmp_path):
        """测试加载 JSON 数组。"""
        path = tmp_path / "colleges.json"
        path.write_text(json.dumps([
            {"id": "a", "name": "A College", "city": "X", "state": "OH", "type": "Community College",
             "tuitionInState": 1000, "tuitionOutState": 2000},
        ]))

        catalog = CollegeCatalog.from_json(path)

        assert len(catalog) == 1
        assert catalog.get("a").state == "OH"
