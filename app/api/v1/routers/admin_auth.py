from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.security import verify_password, create_access_token, get_current_admin
from app.db.session import get_db
from app import models
from app.schemas.auth import LoginRequest, TokenResponse, AdminOut

router = APIRouter(prefix="/admin/auth", tags=["admin"])


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    admin = db.query(models.Admin).filter(models.Admin.email == email).first()
    if not admin or not admin.is_active or not verify_password(payload.password, admin.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Ungültige Anmeldedaten")
    token = create_access_token(subject=str(admin.id), role=admin.role)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=AdminOut)
def me(admin: models.Admin = Depends(get_current_admin)):
    return admin
