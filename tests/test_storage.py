"""Tests for IdeaDAO and ElementDAO."""
from dataclasses import replace

from spark.storage.dao import Element, ElementDAO, Idea, IdeaDAO


def _idea(iid: str, status: str = "active", sort_order: int = 0) -> Idea:
    return Idea(
        id=iid,
        title=f"Idea {iid}",
        created_at="2025-01-01T00:00:00+00:00",
        updated_at="2025-01-01T00:00:00+00:00",
        status=status,
        sort_order=sort_order,
    )


class TestIdeaDAO:
    def test_insert_and_find(self, tmp_settings):
        dao = IdeaDAO()
        dao.insert(_idea("a"))

        found = dao.find_by_id("a")
        assert found is not None
        assert found.title == "Idea a"
        assert found.status == "active"
        assert found.current_thinking is None

    def test_find_nonexistent(self, tmp_settings):
        assert IdeaDAO().find_by_id("missing") is None

    def test_update_immutable(self, tmp_settings):
        dao = IdeaDAO()
        original = _idea("a")
        dao.insert(original)

        dao.update(replace(original, current_thinking="new", status="archived"))

        found = dao.find_by_id("a")
        assert found.current_thinking == "new"
        assert found.status == "archived"
        assert original.current_thinking is None

    def test_find_all_with_status_filter(self, tmp_settings):
        dao = IdeaDAO()
        dao.insert(_idea("a", sort_order=2))
        dao.insert(_idea("b", sort_order=1))
        dao.insert(_idea("c", status="archived"))

        active = dao.find_all(status="active")
        assert [i.id for i in active] == ["b", "a"]
        assert [i.id for i in dao.find_all(status="archived")] == ["c"]
        assert len(dao.find_all()) == 3

    def test_count_active(self, tmp_settings):
        dao = IdeaDAO()
        dao.insert(_idea("a"))
        dao.insert(_idea("b", status="archived"))
        assert dao.count_active() == 1

    def test_next_sort_order(self, tmp_settings):
        dao = IdeaDAO()
        assert dao.next_sort_order() == 1
        dao.insert(_idea("a", sort_order=4))
        assert dao.next_sort_order() == 5

    def test_delete_cascades_to_elements(self, sample_idea):
        IdeaDAO().delete("idea-1")
        assert IdeaDAO().find_by_id("idea-1") is None
        assert ElementDAO().find_by_id("el-1") is None
        assert ElementDAO().find_by_idea("idea-1") == []


class TestElementDAO:
    def test_metadata_round_trip(self, sample_idea):
        found = ElementDAO().find_by_id("el-2")
        assert found.metadata["title"] == "The Slow Web"
        assert found.is_archived is False

    def test_legacy_keys_normalized_on_load(self, sample_idea):
        found = ElementDAO().find_by_id("el-3")
        assert found.metadata == {
            "url": "https://cdn.example.com/notes.pdf",
            "filename": "notes.pdf",
        }

    def test_find_by_idea_order(self, sample_idea):
        dao = ElementDAO()
        assert [e.id for e in dao.find_by_idea("idea-1")] == ["el-3", "el-2", "el-1"]
        assert [e.id for e in dao.find_by_idea("idea-1", newest_first=False)] == ["el-1", "el-2", "el-3"]

    def test_archived_excluded(self, sample_idea):
        dao = ElementDAO()
        el = dao.find_by_id("el-1")
        dao.update(replace(el, is_archived=True))

        assert "el-1" not in [e.id for e in dao.find_by_idea("idea-1")]
        assert [e.id for e in dao.find_by_idea("idea-1", archived=True)] == ["el-1"]

    def test_find_unfiled_splits_inbox_and_drawer(self, tmp_settings):
        dao = ElementDAO()
        dao.insert(Element(id="in", type="thought", content="inbox", created_at="2025-01-01"))
        dao.insert(Element(
            id="dr", type="thought", content="drawer",
            metadata={"drawer": True}, created_at="2025-01-02",
        ))
        dao.insert(Element(
            id="gone", type="thought", content="archived",
            is_archived=True, created_at="2025-01-03",
        ))

        assert [e.id for e in dao.find_unfiled(drawer=False)] == ["in"]
        assert [e.id for e in dao.find_unfiled(drawer=True)] == ["dr"]
        assert [e.id for e in dao.find_unfiled()] == ["dr", "in"]
        assert dao.count_unfiled(drawer=False) == 1

    def test_delete(self, sample_idea):
        dao = ElementDAO()
        dao.delete("el-1")
        assert dao.find_by_id("el-1") is None

    def test_delete_by_idea(self, sample_idea):
        dao = ElementDAO()
        dao.insert(Element(id="loose", type="thought", created_at="2025-01-13T00:00:00+00:00"))

        assert dao.delete_by_idea("idea-1") == 3
        assert dao.find_by_idea("idea-1") == []
        assert dao.find_by_id("loose") is not None
