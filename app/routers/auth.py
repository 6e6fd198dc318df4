import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.mailer import send_otp_email
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.common import StatusResponse
from app.schemas.user import (
    SendOtpRequest,
    RegisterRequest,
    VerifyEmailRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserEnvelope,
    LoginResponse,
)
from app.services.otp_service import OtpStore, OtpState, generate_code, registration_key, reset_key

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

RESET_SENT = "If the email exists, a reset code has been sent"


def _otp_ttl() -> timedelta:
    return timedelta(minutes=settings.OTP_EXPIRE_MIN)


@router.post("/send-otp", response_model=StatusResponse)
def send_registration_otp(data: SendOtpRequest, db: Session = Depends(get_db)):
    """Envoie un code de vérification avant l'inscription"""

    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="User already exists with this email")

    code = generate_code()
    OtpStore(db).put(registration_key(data.email), code, _otp_ttl())

    if not send_otp_email(data.email, code, "verification"):
        raise HTTPException(status_code=500, detail="Failed to send verification email")

    return {"success": True, "message": "Verification code sent to your email"}


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Créer un nouvel utilisateur (code OTP requis)"""

    store = OtpStore(db)
    key = registration_key(data.email)
    if store.verify(key, data.otp) != OtpState.VALID:
        raise HTTPException(status_code=400, detail="Invalid or expired verification code")

    # Vérifie si l'email existe déjà
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="User already exists with this email")

    # Vérifie si le username existe déjà
    if db.query(User).filter(User.username == data.username).first():
        raise HTTPException(status_code=400, detail="Username already taken")

    new_user = User(email=data.email, username=data.username, name=data.name)
    new_user.set_password(data.password)

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    store.remove(key)
    logger.info("User %s registered", new_user.id)

    return {"success": True, "message": "Registration successful", "user": new_user}


@router.post("/verify-email", response_model=StatusResponse)
def verify_email(data: VerifyEmailRequest, db: Session = Depends(get_db)):
    store = OtpStore(db)
    key = registration_key(data.email)
    state = store.verify(key, data.otp)

    if state == OtpState.ABSENT:
        raise HTTPException(status_code=400, detail="OTP not found or expired")
    if state == OtpState.EXPIRED:
        raise HTTPException(status_code=400, detail="OTP expired")
    if state == OtpState.INVALID:
        raise HTTPException(status_code=400, detail="Invalid OTP")

    store.remove(key)
    return {"success": True, "message": "Email verified successfully"}


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Se connecter et recevoir le token"""

    # Cherche l'utilisateur avec son username
    user = db.query(User).filter(User.username == credentials.username).first()
    if not user or not user.verify_password(credentials.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(user.id, user.email, user.username)

    return {"success": True, "message": "Login successful", "token": token, "user": user}


@router.post("/forgot-password", response_model=StatusResponse)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    # même réponse que l'email existe ou non
    user = db.query(User).filter(User.email == data.email).first()
    if not user:
        return {"success": True, "message": RESET_SENT}

    code = generate_code()
    OtpStore(db).put(reset_key(data.email), code, _otp_ttl())
    send_otp_email(data.email, code, "reset")

    return {"success": True, "message": RESET_SENT}


@router.post("/reset-password", response_model=StatusResponse)
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    store = OtpStore(db)
    key = reset_key(data.email)
    state = store.verify(key, data.otp)

    if state == OtpState.ABSENT:
        raise HTTPException(status_code=400, detail="Reset code not found or expired")
    if state == OtpState.EXPIRED:
        raise HTTPException(status_code=400, detail="Reset code expired")
    if state == OtpState.INVALID:
        raise HTTPException(status_code=400, detail="Invalid reset code")

    user = db.query(User).filter(User.email == data.email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.set_password(data.new_password)
    db.commit()
    store.remove(key)

    return {"success": True, "message": "Password reset successfully"}


@router.get("/profile", response_model=UserEnvelope)
def profile(current_user: User = Depends(get_current_user)):
    return {"success": True, "user": current_user}
