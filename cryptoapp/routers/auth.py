from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from cryptoapp import crud, oauth2, schemas
from cryptoapp.core.database import Database, get_database, get_db

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(request: Request, user_id: int) -> str:
    return oauth2.create_access_token(
        data={"user_id": str(user_id)},
        settings=request.app.state.settings,
    )


# --- REGISTRATION ---
@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=schemas.Token)
def register(
    user: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        new_user = crud.users.register(
            db,
            username=user.username,
            email=user.email,
            password=user.password,
            min_password_length=request.app.state.settings.MIN_PASSWORD_LENGTH,
        )

    return {"user": new_user, "token": _issue_token(request, new_user.user_id)}


# --- LOGIN ---
@router.post("/login", response_model=schemas.Token)
def login(
    credentials: schemas.UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        user = crud.users.verify(db, credentials.email, credentials.password)

    return {"user": user, "token": _issue_token(request, user.user_id)}


# --- CURRENT USER ---
@router.get("/user", response_model=schemas.UserEnvelope)
def current_user(
    user_id: int = Depends(oauth2.get_current_user_id),
    db: Session = Depends(get_db),
    store: Database = Depends(get_database),
):
    with store.guard():
        user = crud.users.get_by_id(db, user_id)

    return {"user": user}
