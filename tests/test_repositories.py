"""
Tests for the catalog and directory repositories.

Authors, books and users are plain CRUD with a few rules layered on top:
books need an existing author, emails are unique, and nothing referenced by
the lending ledger can be deleted.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from library_lending.database import (
    AuthorCreateSchema,
    AuthorRepository,
    AuthorUpdateSchema,
    BookCreateSchema,
    BookListFilter,
    BookRepository,
    BookUpdateSchema,
    BorrowRepository,
    ConflictError,
    DuplicateError,
    NotFoundError,
    UserCreateSchema,
    UserRepository,
)
from library_lending.database.schema import User as UserDB
from library_lending.security import verify_password


class TestAuthorRepository:
    """Test author CRUD."""

    def test_author_crud(self, test_db_session):
        repo = AuthorRepository(test_db_session)

        author = repo.create(AuthorCreateSchema(name="N. K. Jemisin"))
        assert author.name == "N. K. Jemisin"
        assert author.bio is None

        assert repo.get_by_id(author.id) == author
        assert repo.exists(author.id)

        updated = repo.update(author.id, AuthorUpdateSchema(bio="Broken Earth trilogy"))
        assert updated.name == "N. K. Jemisin"
        assert updated.bio == "Broken Earth trilogy"

        assert repo.delete(author.id) is True
        assert repo.get_by_id(author.id) is None
        assert repo.delete(author.id) is False

    def test_update_missing_author(self, test_db_session):
        repo = AuthorRepository(test_db_session)

        assert repo.update("missing", AuthorUpdateSchema(name="Nobody")) is None

    def test_update_cannot_clear_name(self):
        with pytest.raises(ValidationError):
            AuthorUpdateSchema(name=None)

    def test_delete_author_with_books_conflicts(self, test_db_session, author, book):
        repo = AuthorRepository(test_db_session)

        with pytest.raises(ConflictError, match="still has 1 book"):
            repo.delete(author.id)

        assert repo.exists(author.id)
        assert repo.count_books(author.id) == 1

    def test_get_all_lists_every_author(self, test_db_session):
        repo = AuthorRepository(test_db_session)
        for name in ("A", "B", "C"):
            repo.create(AuthorCreateSchema(name=name))

        assert {a.name for a in repo.get_all()} == {"A", "B", "C"}

    def test_get_all_newest_first(self, test_db_session):
        repo = AuthorRepository(test_db_session)
        for name in ("First", "Second", "Third"):
            repo.create(AuthorCreateSchema(name=name))

        assert [a.name for a in repo.get_all()] == ["Third", "Second", "First"]

    def test_timestamps_use_application_clock(self, test_db_session, book, user):
        before = datetime.now()
        author = AuthorRepository(test_db_session).create(AuthorCreateSchema(name="Clocked"))
        record = BorrowRepository(test_db_session).borrow_book(user.id, book.id)
        after = datetime.now()

        assert before <= author.created_at <= record.borrowed_at <= after
        assert author.created_at.tzinfo is None

        updated = AuthorRepository(test_db_session).update(
            author.id, AuthorUpdateSchema(bio="Updated")
        )
        assert author.updated_at <= updated.updated_at <= datetime.now()


class TestBookRepository:
    """Test book CRUD and the catalog listing."""

    def test_create_book(self, test_db_session, author):
        repo = BookRepository(test_db_session)

        book = repo.create(
            BookCreateSchema(
                title="The Left Hand of Darkness",
                description="Gethen",
                published_year=1969,
                author_id=author.id,
            )
        )

        assert book.title == "The Left Hand of Darkness"
        assert book.published_year == 1969
        assert book.author_id == author.id
        assert book.created_at is not None

    def test_create_book_requires_author(self, test_db_session):
        repo = BookRepository(test_db_session)

        with pytest.raises(NotFoundError, match="Author missing not found"):
            repo.create(BookCreateSchema(title="Orphan", author_id="missing"))

        assert repo.list_books() == []

    def test_negative_published_year_rejected(self, author):
        with pytest.raises(ValidationError):
            BookCreateSchema(title="Too old", published_year=-5, author_id=author.id)

    def test_partial_update(self, test_db_session, book):
        repo = BookRepository(test_db_session)

        updated = repo.update(book.id, BookUpdateSchema(description="A young wizard"))

        assert updated.description == "A young wizard"
        assert updated.title == book.title
        assert updated.published_year == book.published_year

    def test_update_to_missing_author(self, test_db_session, book):
        repo = BookRepository(test_db_session)

        with pytest.raises(NotFoundError):
            repo.update(book.id, BookUpdateSchema(author_id="missing"))

    def test_update_cannot_clear_required_fields(self):
        with pytest.raises(ValidationError):
            BookUpdateSchema(title=None)
        with pytest.raises(ValidationError):
            BookUpdateSchema(author_id=None)

    def test_update_missing_book(self, test_db_session):
        assert BookRepository(test_db_session).update("missing", BookUpdateSchema()) is None

    def test_list_books_by_author(self, test_db_session, books):
        repo = BookRepository(test_db_session)
        other_author = AuthorRepository(test_db_session).create(AuthorCreateSchema(name="Other"))
        other_book = repo.create(BookCreateSchema(title="Elsewhere", author_id=other_author.id))

        listed = repo.list_books(BookListFilter(author_id=other_author.id))

        assert [b.id for b in listed] == [other_book.id]
        assert listed[0].author.name == "Other"
        assert listed[0].is_borrowed is False

    def test_list_books_combines_filters(self, test_db_session, books, user):
        repo = BookRepository(test_db_session)
        other_author = AuthorRepository(test_db_session).create(AuthorCreateSchema(name="Other"))
        other_book = repo.create(BookCreateSchema(title="Elsewhere", author_id=other_author.id))
        BorrowRepository(test_db_session).borrow_book(user.id, other_book.id)
        BorrowRepository(test_db_session).borrow_book(user.id, books[0].id)

        listed = repo.list_books(BookListFilter(author_id=other_author.id, is_borrowed=True))

        assert [b.id for b in listed] == [other_book.id]

    def test_get_with_status(self, test_db_session, book, author, user):
        repo = BookRepository(test_db_session)

        assert repo.get_with_status(book.id).is_borrowed is False

        record = BorrowRepository(test_db_session).borrow_book(user.id, book.id)
        found = repo.get_with_status(book.id)

        assert found.is_borrowed is True
        assert found.active_borrow.id == record.id
        assert found.author.id == author.id
        assert repo.get_with_status("missing") is None

    def test_delete_book(self, test_db_session, book):
        repo = BookRepository(test_db_session)

        assert repo.delete(book.id) is True
        assert repo.get_by_id(book.id) is None

    def test_delete_borrowed_book_conflicts(self, test_db_session, book, user):
        BorrowRepository(test_db_session).borrow_book(user.id, book.id)

        with pytest.raises(ConflictError, match="currently borrowed"):
            BookRepository(test_db_session).delete(book.id)

    def test_delete_book_with_history_conflicts(self, test_db_session, book, user):
        borrows = BorrowRepository(test_db_session)
        borrows.return_book(borrows.borrow_book(user.id, book.id).id)

        with pytest.raises(ConflictError, match="lending history"):
            BookRepository(test_db_session).delete(book.id)


class TestUserRepository:
    """Test user creation, lookup and deletion."""

    def test_create_user_hashes_password(self, test_db_session):
        repo = UserRepository(test_db_session)

        user = repo.create(
            UserCreateSchema(email="New@Example.com", name="New Reader", password="hunter22")
        )

        assert user.email == "new@example.com"
        assert not hasattr(user, "password")
        assert not hasattr(user, "password_hash")

        stored = test_db_session.get(UserDB, user.id)
        assert stored.password_hash != "hunter22"
        assert verify_password("hunter22", stored.password_hash)

    def test_duplicate_email_rejected(self, test_db_session, user):
        repo = UserRepository(test_db_session)

        with pytest.raises(DuplicateError):
            repo.create(
                UserCreateSchema(email="READER@example.com", name="Copycat", password="secret99")
            )

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            UserCreateSchema(email="not-an-email", name="X", password="secret123")

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError):
            UserCreateSchema(email="a@b.co", name="X", password="123")

    def test_get_login_record(self, test_db_session, user):
        repo = UserRepository(test_db_session)

        found_user, password_hash = repo.get_login_record("Reader@Example.com")

        assert found_user.id == user.id
        assert verify_password("secret123", password_hash)
        assert repo.get_login_record("unknown@example.com") is None

    def test_delete_user(self, test_db_session, user):
        repo = UserRepository(test_db_session)

        assert repo.delete(user.id) is True
        assert repo.get_by_id(user.id) is None

    def test_delete_user_with_borrow_records_conflicts(self, test_db_session, book, user):
        borrows = BorrowRepository(test_db_session)
        borrows.return_book(borrows.borrow_book(user.id, book.id).id)

        with pytest.raises(ConflictError, match="has borrow records"):
            UserRepository(test_db_session).delete(user.id)

        assert UserRepository(test_db_session).exists(user.id)
