"""
FastAPI dependencies: bearer token decoding and the session resolver
handed to workflows.
"""
import logging
import os
import uuid
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from database import get_session
from models import User
from services.guards import CurrentUser

load_dotenv()
SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = "HS256"

logger = logging.getLogger(__name__)


def verify_token(request: Request) -> Optional[dict]:
     """Decoded JWT payload of the Authorization header, or None."""
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          return None
     if not SECRET_KEY:
          logger.error("JWT_SECRET is not configured; rejecting token")
          return None
     token = auth.split(" ", 1)[1]
     try:
          return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
     except JWTError:
          logger.info("Invalid bearer token")
          return None


def get_current_user(
     db: Session = Depends(get_session),
     token: Optional[dict] = Depends(verify_token)
) -> Optional[CurrentUser]:
     """
     Load the user named by the token's `id` claim.

     Returns None when there is no token or no such user; the workflow
     guard turns that into a not-authenticated result.
     """
     if not token or not token.get("id"):
          return None
     try:
          user_id = uuid.UUID(str(token["id"]))
     except ValueError:
          return None
     user = db.query(User).filter(User.id == user_id).first()
     if user is None:
          return None
     return CurrentUser.model_validate(user)


def get_session_resolver(user: Optional[CurrentUser] = Depends(get_current_user)):
     """Zero-argument resolver in the shape workflows expect."""
     return lambda: user
