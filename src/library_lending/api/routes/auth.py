"""Registration and login routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import AuthResult, AuthService, LoginRequest
from ...database.user_repository import UserCreateSchema
from ..dependencies import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def register(body: UserCreateSchema, session: Session = Depends(get_db)) -> AuthResult:
    return AuthService(session).register(body)


@router.post("/login", response_model=AuthResult)
def login(body: LoginRequest, session: Session = Depends(get_db)) -> AuthResult:
    return AuthService(session).login(body)
