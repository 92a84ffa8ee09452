"""
Borrow repository implementation for the Library Lending service.

This is the lending core. It executes the two ledger transitions and the
user history query:

1. **Borrow**: open a new record for a book that has no open record
2. **Return**: close an open record by stamping ``returned_at``
3. **History**: list a user's records with book and author embedded

Invariant: a book has at most one borrow record with ``returned_at`` unset.
The check in ``borrow_book`` rejects the common case with a clear message;
the partial unique index ``uq_borrow_records_open_book`` rejects the insert of
a concurrent second borrow that slipped past the check, and that rejection is
reported as the same ConflictError.
"""

import logging
from datetime import datetime

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..models.circulation import BorrowRecord as BorrowModel
from ..models.circulation import BorrowRecordWithBook
from ..observability.metrics import record_circulation_event
from .errors import ConflictError, NotFoundError, RepositoryException
from .schema import Book as BookDB
from .schema import BorrowRecord as BorrowDB
from .schema import User as UserDB
from .session import safe_commit, safe_query

logger = logging.getLogger(__name__)

OPEN_BOOK_INDEX = "uq_borrow_records_open_book"
SQLITE_OPEN_BOOK_VIOLATION = "UNIQUE constraint failed: borrow_records.book_id"


def _violates_open_book_index(error: IntegrityError) -> bool:
    """True if the store rejected a second open record for a book."""
    message = str(error.orig)
    # SQLite names the indexed column, other backends name the index
    return OPEN_BOOK_INDEX in message or SQLITE_OPEN_BOOK_VIOLATION in message


class BorrowRepository:
    """
    Repository for the borrow/return lifecycle.

    Every check happens before the single write, so a failed operation never
    leaves partial state behind.
    """

    def __init__(self, session: Session):
        """Initialize with the database session used for the whole operation."""
        self.session = session

    def borrow_book(self, user_id: str, book_id: str) -> BorrowModel:
        """
        Lend a book to a user.

        Checks run in a fixed order: the book must exist, then it must not be
        on loan, then the user must exist. When several conditions fail the
        first one in that order is reported.

        Args:
            user_id: Borrowing user
            book_id: Book to lend

        Returns:
            The new open borrow record

        Raises:
            NotFoundError: If the book or the user does not exist
            ConflictError: If the book already has an open borrow record
        """
        book = safe_query(
            self.session,
            lambda s: s.execute(
                select(BookDB).where(BookDB.id == book_id).with_for_update()
            ).scalar_one_or_none(),
            "Failed to get book for borrowing",
        )

        if book is None:
            raise NotFoundError(f"Book {book_id} not found")

        if self._open_record_for_book(book_id) is not None:
            raise ConflictError("Book is already borrowed")

        user = safe_query(
            self.session,
            lambda s: s.execute(select(UserDB).where(UserDB.id == user_id)).scalar_one_or_none(),
            "Failed to get user for borrowing",
        )

        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        record = BorrowDB(
            user_id=user_id,
            book_id=book_id,
            borrowed_at=datetime.now(),
            returned_at=None,
        )
        self.session.add(record)

        try:
            safe_commit(self.session, "borrow book")
        except IntegrityError as e:
            if not _violates_open_book_index(e):
                logger.error("Borrow of book %s failed integrity check: %s", book_id, e.orig)
                raise RepositoryException(
                    f"Database operation 'borrow book' failed: {e.orig}"
                ) from e
            logger.info("Concurrent borrow of book %s rejected by the store", book_id)
            raise ConflictError("Book is already borrowed") from e

        self.session.refresh(record)
        logger.info("Book %s borrowed by user %s (record %s)", book_id, user_id, record.id)
        record_circulation_event("borrow")
        return BorrowModel.model_validate(record)

    def return_book(self, record_id: str) -> BorrowModel:
        """
        Close an open borrow record.

        Args:
            record_id: Borrow record to close

        Returns:
            The closed record with ``returned_at`` set

        Raises:
            NotFoundError: If the record does not exist
            ConflictError: If the record was already returned
        """
        record = safe_query(
            self.session,
            lambda s: s.execute(
                select(BorrowDB).where(BorrowDB.id == record_id).with_for_update()
            ).scalar_one_or_none(),
            "Failed to get borrow record for return",
        )

        if record is None:
            raise NotFoundError(f"Borrow record {record_id} not found")

        if record.returned_at is not None:
            raise ConflictError("Book already returned")

        record.returned_at = datetime.now()
        safe_commit(self.session, "return book")
        self.session.refresh(record)

        logger.info("Borrow record %s returned (book %s)", record.id, record.book_id)
        record_circulation_event("return")
        return BorrowModel.model_validate(record)

    def list_borrowed_for_user(
        self, user_id: str, active_only: bool = False
    ) -> list[BorrowRecordWithBook]:
        """
        List a user's borrow records, most recent first.

        An unknown user is not an error; it simply has no records.

        Args:
            user_id: User whose records to list
            active_only: Only include records that are still open

        Returns:
            Records with their book and the book's author embedded
        """
        query = select(BorrowDB).where(BorrowDB.user_id == user_id)

        if active_only:
            query = query.where(BorrowDB.returned_at.is_(None))

        query = query.order_by(BorrowDB.borrowed_at.desc()).options(
            joinedload(BorrowDB.book).joinedload(BookDB.author)
        )

        records = safe_query(
            self.session,
            lambda s: s.execute(query).unique().scalars().all(),
            "Failed to list borrowed books",
        )
        return [BorrowRecordWithBook.model_validate(record) for record in records]

    def _open_record_for_book(self, book_id: str) -> BorrowDB | None:
        query = select(BorrowDB).where(
            and_(BorrowDB.book_id == book_id, BorrowDB.returned_at.is_(None))
        )
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalars().first(),
            "Failed to check open borrow records",
        )
