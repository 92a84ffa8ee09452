"""User directory routes and the per-user borrowed list."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from ...database.borrow_repository import BorrowRepository
from ...database.user_repository import UserCreateSchema, UserRepository
from ...models.circulation import BorrowRecordWithBook
from ...models.user import User
from ..dependencies import get_current_user, get_db

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[User])
def list_users(session: Session = Depends(get_db)) -> list[User]:
    return UserRepository(session).get_all()


@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_user(body: UserCreateSchema, session: Session = Depends(get_db)) -> User:
    return UserRepository(session).create(body)


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, session: Session = Depends(get_db)) -> User:
    user = UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
)
def delete_user(user_id: str, session: Session = Depends(get_db)) -> Response:
    if not UserRepository(session).delete(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/borrowed",
    response_model=list[BorrowRecordWithBook],
    dependencies=[Depends(get_current_user)],
)
def list_borrowed(
    user_id: str,
    active: str | None = Query(None, description="Pass 'true' to list open loans only"),
    session: Session = Depends(get_db),
) -> list[BorrowRecordWithBook]:
    """A user's borrow records, most recent first. Unknown users get an empty list."""
    return BorrowRepository(session).list_borrowed_for_user(user_id, active_only=active == "true")
