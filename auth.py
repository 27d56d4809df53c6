"""
Session helpers. Sessions are signed cookies managed by Starlette's SessionMiddleware.
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

import crud
from database import get_db
from models import User

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency returning the signed-in user; 401 when there is none."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = crud.get_user(db, user_id)
    if not user:
        logger.warning(f"[AUTH] Session refers to unknown user {user_id}")
        request.session.clear()
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def login_user(request: Request, user: User):
    request.session[SESSION_USER_KEY] = user.id


def logout_user(request: Request):
    request.session.clear()
