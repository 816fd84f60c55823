import sqlite3

from fastapi import APIRouter, Depends, HTTPException

from ..auth import AuthError, EmailTaken, sign_in, sign_out, sign_up
from ..config import Settings
from .deps import bearer_token, current_user, get_db, get_settings
from .schemas import SignInRequest, SignUpRequest

router = APIRouter(prefix='/auth', tags=["Auth"])

@router.post('/signup', status_code=201, summary="Create an account")
def signup(req: SignUpRequest, conn: sqlite3.Connection = Depends(get_db), settings: Settings = Depends(get_settings)):
    try:
        return sign_up(conn, req.email, req.password, req.display_name, settings=settings)
    except EmailTaken as e:
        raise HTTPException(409, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))

@router.post('/signin', summary="Sign in and receive a bearer token")
def signin(req: SignInRequest, conn: sqlite3.Connection = Depends(get_db), settings: Settings = Depends(get_settings)):
    try:
        return sign_in(conn, req.email, req.password, settings=settings)
    except AuthError as e:
        raise HTTPException(401, str(e))

@router.post('/signout', summary="End the current session")
def signout(token: str | None = Depends(bearer_token), conn: sqlite3.Connection = Depends(get_db)):
    if not token:
        raise HTTPException(401, 'Not signed in.')
    return {'ok': sign_out(conn, token)}

@router.get('/me', summary="Current user profile")
def me(user: dict = Depends(current_user)):
    return user
