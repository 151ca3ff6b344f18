"""Tests for TagRepository"""
import pytest

from taskboard.application.tasks import CreateTaskUseCase
from taskboard.errors import NoTagsFound, TagNotFound
from taskboard.infrastructure.db.models import TaskTagModel
from taskboard.infrastructure.repositories.tags import TagRepository


class TestTagRepository:
    def test_create_lowercases_title(self, db_session, user_id):
        repo = TagRepository(db_session)
        tag_id = repo.create_tag(user_id, "Work")
        assert repo.get_tag_id_by_title("WORK", user_id) == tag_id
        assert [t.title for t in repo.get_tags_by_user_id(user_id)] == ["work"]

    def test_unknown_title(self, db_session, user_id):
        with pytest.raises(TagNotFound):
            TagRepository(db_session).get_tag_id_by_title("nope", user_id)

    def test_no_tags_found(self, db_session, user_id):
        with pytest.raises(NoTagsFound):
            TagRepository(db_session).get_tags_by_user_id(user_id)

    def test_tags_are_per_user(self, db_session, user_id, other_user_id):
        repo = TagRepository(db_session)
        repo.create_tag(user_id, "work")
        with pytest.raises(TagNotFound):
            repo.get_tag_id_by_title("work", other_user_id)

    def test_link_keeps_order_and_is_idempotent(self, db_session, user_id):
        task = CreateTaskUseCase(db_session).execute(user_id=user_id, title="Task")
        repo = TagRepository(db_session)
        for title in ("zeta", "alpha", "mid"):
            repo.create_tag(user_id, title)

        repo.link_tags_to_task(task.id, user_id, ["zeta", "alpha"])
        repo.link_tags_to_task(task.id, user_id, ["alpha", "mid"])
        db_session.commit()

        assert repo.get_tags_by_task_id(task.id, user_id) == ["zeta", "alpha", "mid"]

    def test_link_unknown_tag_fails(self, db_session, user_id):
        task = CreateTaskUseCase(db_session).execute(user_id=user_id, title="Task")
        with pytest.raises(TagNotFound):
            TagRepository(db_session).link_tags_to_task(task.id, user_id, ["missing"])

    def test_unlink(self, db_session, user_id):
        task = CreateTaskUseCase(db_session).execute(user_id=user_id, title="Task", tags=["a", "b"])
        repo = TagRepository(db_session)
        repo.unlink_tags_from_task(task.id, user_id, ["A"])
        db_session.commit()
        assert repo.get_tags_by_task_id(task.id, user_id) == ["b"]

    def test_batch_lookup(self, db_session, user_id):
        uc = CreateTaskUseCase(db_session)
        first = uc.execute(user_id=user_id, title="One", tags=["x"])
        second = uc.execute(user_id=user_id, title="Two", tags=["y", "x"])
        third = uc.execute(user_id=user_id, title="Three")

        tags = TagRepository(db_session).get_tags_by_task_ids([first.id, second.id, third.id], user_id)
        assert tags == {first.id: ["x"], second.id: ["y", "x"]}

    def test_link_folds_case(self, db_session, user_id):
        uc = CreateTaskUseCase(db_session)
        upper = uc.execute(user_id=user_id, title="Upper")
        lower = uc.execute(user_id=user_id, title="Lower")
        repo = TagRepository(db_session)
        repo.create_tag(user_id, "Work")

        repo.link_tags_to_task(upper.id, user_id, ["Work"])
        repo.link_tags_to_task(lower.id, user_id, ["work"])
        repo.link_tags_to_task(upper.id, user_id, ["work"])
        db_session.commit()

        assert repo.get_tags_by_task_id(upper.id, user_id) == repo.get_tags_by_task_id(lower.id, user_id) == ["work"]
        links = db_session.query(TaskTagModel).filter(TaskTagModel.task_id == upper.id).count()
        assert links == 1
