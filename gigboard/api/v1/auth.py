from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gigboard.core.auth_deps import get_current_principal
from gigboard.core.security import issue_token
from gigboard.db.session import get_db
from gigboard.policies.ownership import Principal
from gigboard.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from gigboard.schemas.gigs import user_summary
from gigboard.services import auth_service

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(req: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register(
        db,
        name=req.name,
        email=req.email,
        password=req.password,
        avatar=req.avatar,
    )
    token = issue_token(auth_service.principal_for(user))
    return TokenResponse(access_token=token, user=user_summary(user))


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    principal = auth_service.authenticate(db, req.email, req.password)
    if not principal:
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    token = issue_token(principal)
    return TokenResponse(access_token=token)


@router.get("/me")
def get_me(principal: Principal = Depends(get_current_principal)):
    return {
        "user_id": principal.user_id,
        "name": principal.name,
        "email": principal.email,
    }
