"""
Tests for list use-cases: default list, create/update/delete cascade
"""
import pytest

from taskboard.application.headings import CreateHeadingUseCase, HeadingReadService
from taskboard.application.lists import (
    CreateDefaultListUseCase, CreateListUseCase, DeleteListUseCase, ListReadService, UpdateListUseCase,
)
from taskboard.application.tasks import CreateTaskUseCase, TaskReadService
from taskboard.domain.pagination import Pagination
from taskboard.domain.statuses import TaskStatus
from taskboard.errors import CannotDeleteDefaultList, InvalidData, ListNotFound, NoListsFound
from taskboard.infrastructure.db.models import TaskModel


class TestDefaultList:
    def test_user_has_inbox(self, db_session, user_id):
        inbox = ListReadService(db_session).get_default_list(user_id)
        assert inbox.title == "Inbox"
        assert inbox.is_default is True

    def test_create_default_is_idempotent(self, db_session, user_id):
        first = ListReadService(db_session).get_default_list(user_id)
        again = CreateDefaultListUseCase(db_session).execute(user_id)
        assert again.id == first.id
        assert len(ListReadService(db_session).get_lists_by_user_id(user_id)) == 1

    def test_inbox_has_default_heading(self, db_session, user_id):
        inbox = ListReadService(db_session).get_default_list(user_id)
        headings = HeadingReadService(db_session).get_headings_by_list_id(inbox.id, user_id)
        assert [(h.title, h.is_default) for h in headings] == [("Default", True)]

    def test_inbox_cannot_be_deleted(self, db_session, user_id):
        inbox = ListReadService(db_session).get_default_list(user_id)
        with pytest.raises(CannotDeleteDefaultList):
            DeleteListUseCase(db_session).execute(inbox.id, user_id)


class TestCreateAndUpdate:
    def test_create_list_with_default_heading(self, db_session, user_id):
        work = CreateListUseCase(db_session).execute(user_id, "  Work ")
        assert work.title == "Work"
        assert work.is_default is False
        headings = HeadingReadService(db_session).get_headings_by_list_id(work.id, user_id)
        assert len(headings) == 1 and headings[0].is_default

    def test_lists_are_ordered_by_creation(self, db_session, user_id):
        CreateListUseCase(db_session).execute(user_id, "B")
        CreateListUseCase(db_session).execute(user_id, "A")
        titles = [l.title for l in ListReadService(db_session).get_lists_by_user_id(user_id)]
        assert titles == ["Inbox", "B", "A"]

    def test_no_lists_for_unknown_user(self, db_session):
        with pytest.raises(NoListsFound):
            ListReadService(db_session).get_lists_by_user_id("0" * 27)

    def test_empty_title_fails(self, db_session, user_id):
        with pytest.raises(InvalidData):
            CreateListUseCase(db_session).execute(user_id, "  ")

    def test_rename(self, db_session, user_id):
        work = CreateListUseCase(db_session).execute(user_id, "Work")
        renamed = UpdateListUseCase(db_session).execute(work.id, user_id, "Job")
        assert renamed.title == "Job"

    def test_rename_foreign_list(self, db_session, user_id, other_user_id):
        theirs = CreateListUseCase(db_session).execute(other_user_id, "Theirs")
        with pytest.raises(ListNotFound):
            UpdateListUseCase(db_session).execute(theirs.id, user_id, "Mine")


class TestDeleteList:
    def test_delete_archives_tasks_of_every_heading(self, db_session, user_id):
        work = CreateListUseCase(db_session).execute(user_id, "Work")
        heading = CreateHeadingUseCase(db_session).execute(work.id, user_id, "Q1")
        first = CreateTaskUseCase(db_session).execute(user_id=user_id, title="A", list_id=work.id)
        second = CreateTaskUseCase(db_session).execute(user_id=user_id, title="B", heading_id=heading.id)

        DeleteListUseCase(db_session).execute(work.id, user_id)

        with pytest.raises(ListNotFound):
            ListReadService(db_session).get_list_by_id(work.id, user_id)
        rows = db_session.query(TaskModel).filter(TaskModel.id.in_([first.id, second.id])).all()
        assert all(row.deleted_at is not None for row in rows)
        assert all(row.status_id == 4 for row in rows)

        archived = TaskReadService(db_session).get_archived_tasks(user_id, Pagination())
        assert sorted(t.title for t in archived[0].tasks) == ["A", "B"]
        assert archived[0].tasks[0].status == TaskStatus.ARCHIVED.value

    def test_delete_twice(self, db_session, user_id):
        work = CreateListUseCase(db_session).execute(user_id, "Work")
        DeleteListUseCase(db_session).execute(work.id, user_id)
        with pytest.raises(ListNotFound):
            DeleteListUseCase(db_session).execute(work.id, user_id)
