from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.session_context import SessionContext, get_session_context
from app.models.profile import Profile
from app.models.user import User
from app.models.user_role import AppRole, UserRole
from app.schemas.user_schemas import UserRegister, UserLogin, Token, UserResponse
from app.utils.hash import hash_password, verify_password
from app.utils.token import create_access_token


router = APIRouter()


# -------- AUTH ROUTES --------

@router.post("/register", response_model=UserResponse)
def register_user(payload: UserRegister, session: Session = Depends(get_session)):
    existing_user = session.exec(select(User).where(User.email == payload.email)).first()
    if existing_user:
        raise HTTPException(400, "Email already registered")

    user = User(
        email=payload.email,
        password=hash_password(payload.password)
    )
    session.add(user)
    session.flush()

    # every account gets a profile and the customer role
    session.add(Profile(id=user.id, email=user.email, full_name=payload.full_name))
    session.add(UserRole(user_id=user.id, role=AppRole.customer.value))

    session.commit()
    session.refresh(user)

    return UserResponse(
        message="Registration successful.",
        user_id=user.id,
        email=user.email,
        roles=[AppRole.customer.value],
    )


@router.post("/login", response_model=Token)
def login(payload: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email)).first()

    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(401, "Invalid email or password")

    if not user.can_login:
        raise HTTPException(403, "User account is disabled")

    token = create_access_token(user.id)
    return Token(access_token=token, token_type="bearer")


@router.post("/logout")
def logout():
    # tokens are stateless; the client drops its session context
    return {"message": "Logout successful"}


@router.get("/session")
def current_session(ctx: SessionContext = Depends(get_session_context)):
    profile = ctx.profile
    return {
        "user_id": ctx.user_id,
        "email": ctx.user.email,
        "roles": ctx.roles,
        "is_admin": ctx.is_admin,
        "is_seller": ctx.is_seller,
        "profile": {
            "full_name": profile.full_name,
            "phone": profile.phone,
            "address": profile.address,
            "avatar_url": profile.avatar_url,
        } if profile else None,
    }
