"""Unit tests for data_store.py"""

from datetime import date
import json

import pytest

from seedble.data_store import JsonDataStore, StoreSnapshot, new_skill
from seedble.engine.review_lifecycle import complete_review, create_review, start_review
from seedble.errors import NotFoundError, PersistenceError, ValidationError
from seedble.models import Assessment, CandidateUser, KnowledgeCircle, UserSkillEntry
from seedble.review_models import ReviewDetail, SkillRating


class TestJsonDataStore:
    """Test JsonDataStore persistence and lookups."""

    @pytest.fixture
    def store(self, tmp_path):
        store = JsonDataStore(str(tmp_path / "data.json"))
        store.add_user(CandidateUser(id="u1", full_name="Marco Rossi", role="Senior Developer"))
        store.add_user(CandidateUser(id="u2", full_name="Anna Bianchi", role="UX Designer"))
        return store

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonDataStore(str(tmp_path / "nothing.json"))
        assert store.load().is_empty()
        assert store.list_skills() == []

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError, match="Failed to load"):
            JsonDataStore(str(path)).list_skills()

    def test_data_persists_across_instances(self, store):
        again = JsonDataStore(str(store.path))
        assert [u.full_name for u in again.list_candidate_users()] == ["Anna Bianchi", "Marco Rossi"]

    def test_write_leaves_no_temp_file(self, store):
        assert not store.path.with_suffix(".tmp").exists()
        assert json.loads(store.path.read_text(encoding="utf-8"))["version"] == "1.0"

    def test_duplicate_user_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add_user(CandidateUser(id="u1", full_name="Other"))

    def test_get_user_not_found(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.get_user("ghost")
        assert exc.value.kind == "user"
        assert exc.value.key == "ghost"

    def test_get_or_create_skill_is_case_insensitive(self, store):
        created = store.get_or_create_skill("React", "technical")
        again = store.get_or_create_skill("  react ", "soft")
        assert again.id == created.id
        assert again.category == "technical"
        assert created.description == "technical skill: React"
        assert len(store.list_skills()) == 1

    def test_blank_skill_name_rejected(self, store):
        with pytest.raises(ValidationError):
            store.get_or_create_skill("  ", "technical")

    def test_upsert_user_skills_replaces_by_key(self, store):
        skill = store.get_or_create_skill("SQL", "technical")
        store.upsert_user_skills([UserSkillEntry(user_id="u1", skill_id=skill.id, level=2, interest=3)])
        store.upsert_user_skills([UserSkillEntry(user_id="u1", skill_id=skill.id, level=5, interest=5)])
        entries = store.get_user_skill_entries("u1")
        assert [(e.level, e.interest) for e in entries] == [(5, 5)]

    def test_upsert_unknown_skill_rejected(self, store):
        with pytest.raises(NotFoundError):
            store.upsert_user_skills([UserSkillEntry(user_id="u1", skill_id="nope", level=2, interest=3)])

    def test_assessments(self, store):
        store.create_assessment(Assessment(id="a1", user_id="u1"))
        saved = store.save_assessment(Assessment(id="a1", user_id="u1", status="completed"))
        assert store.get_assessment("a1") == saved
        assert [a.id for a in store.list_assessments("u1")] == ["a1"]
        with pytest.raises(NotFoundError):
            store.get_assessment("a2")

    def test_project_and_members(self, store):
        project = store.create_project("Shop", date(2025, 1, 1), required_skills=["React"])
        store.add_project_member(project.id, "u1", "Senior Developer")
        assert [m.user_id for m in store.list_project_members(project.id)] == ["u1"]
        assert [p.id for p in store.get_user_projects("u1")] == [project.id]
        assert store.get_user_projects("u2") == []

    def test_duplicate_member_rejected(self, store):
        project = store.create_project("Shop", date(2025, 1, 1))
        store.add_project_member(project.id, "u1", "Dev")
        with pytest.raises(ValidationError, match="already a member"):
            store.add_project_member(project.id, "u1", "Dev")

    def test_member_of_unknown_project_rejected(self, store):
        with pytest.raises(NotFoundError):
            store.add_project_member("nope", "u1", "Dev")

    def test_invalid_project_rejected(self, store):
        with pytest.raises(ValidationError, match="Invalid project"):
            store.create_project("", date(2025, 1, 1))

    def test_peer_review_requires_known_references(self, store):
        with pytest.raises(NotFoundError):
            store.create_peer_review(create_review("u1", "u2", "no-project"))

    def test_review_submission_written_together(self, store):
        project = store.create_project("Shop", date(2025, 1, 1))
        review = store.create_peer_review(create_review("u1", "u2", project.id))
        skill = store.get_or_create_skill("Leadership", "soft")
        done = review.model_copy(update={"feedback": "ok"})
        store.save_review_submission(done, [ReviewDetail(id="d1", review_id=review.id, skill_id=skill.id, score=4)])

        assert store.get_peer_review(review.id).feedback == "ok"
        assert [d.id for d in store.list_review_details(review.id)] == ["d1"]

    def test_review_submission_with_unknown_skill_writes_nothing(self, store):
        project = store.create_project("Shop", date(2025, 1, 1))
        review = store.create_peer_review(create_review("u1", "u2", project.id))
        with pytest.raises(NotFoundError):
            store.save_review_submission(
                review.model_copy(update={"feedback": "x"}),
                [ReviewDetail(id="d1", review_id=review.id, skill_id="ghost", score=4)],
            )
        assert store.get_peer_review(review.id).feedback == ""
        assert store.list_review_details(review.id) == []

    def test_second_submission_rejected(self, store):
        project = store.create_project("Shop", date(2025, 1, 1))
        review = store.create_peer_review(create_review("u1", "u2", project.id))
        skill = store.get_or_create_skill("Leadership", "soft")
        started = start_review(review)
        rating = SkillRating(skill="Leadership", category="soft", score=4, skill_id=skill.id)
        first, first_details = complete_review(started, [rating], "first")
        second, second_details = complete_review(started, [rating.model_copy(update={"score": 1})], "second")
        store.save_review_submission(first, first_details)

        with pytest.raises(ValidationError, match="already 'completed'"):
            store.save_review_submission(second, second_details)
        assert store.get_peer_review(review.id).feedback == "first"
        assert [d.id for d in store.list_review_details(review.id)] == [first_details[0].id]

    def test_submission_adds_new_skills(self, store):
        project = store.create_project("Shop", date(2025, 1, 1))
        review = store.create_peer_review(create_review("u1", "u2", project.id))
        existing = store.get_or_create_skill("Leadership", "soft")
        duplicate = new_skill("leadership", "soft")
        fresh = new_skill("Pairing", "process")

        store.save_review_submission(
            review,
            [
                ReviewDetail(id="d1", review_id=review.id, skill_id=duplicate.id, score=4),
                ReviewDetail(id="d2", review_id=review.id, skill_id=fresh.id, score=3),
            ],
            new_skills=[duplicate, fresh],
        )

        assert sorted(s.name for s in store.list_skills()) == ["Leadership", "Pairing"]
        details = {d.id: d.skill_id for d in store.list_review_details(review.id)}
        assert details == {"d1": existing.id, "d2": fresh.id}

    def test_knowledge_circle_member_counts(self, store):
        store.add_knowledge_circle(KnowledgeCircle(id="c1", name="Frontend"))
        store.add_circle_member("c1", "u1")
        store.add_circle_member("c1", "u2")
        store.add_circle_member("c1", "u2")
        circles = store.list_knowledge_circles()
        assert [(c.name, c.member_count) for c in circles] == [("Frontend", 2)]

    def test_replace_snapshot(self, store):
        store.replace(StoreSnapshot())
        assert store.list_candidate_users() == []
