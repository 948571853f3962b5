from fastapi import APIRouter, Depends, Form, Request, status
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.exceptions import AuthError, ConflictError, ValidationError
from ..core.messages import get_message
from ..core.security import Identity
from ..core.sessions import get_session
from ..services.auth_service import AuthService
from .deps import get_current_identity, verify_csrf
from .templating import redirect, render

router = APIRouter(prefix="/users", tags=["Users"])

FORM_ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    AuthError: status.HTTP_401_UNAUTHORIZED,
}


def form_error_status(exc: Exception) -> int:
    return FORM_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)


@router.get("/register")
async def register_form(request: Request):
    return render(request, "users/register.html")

@router.post("/register", dependencies=[Depends(verify_csrf)])
async def register(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db)
):
    """Create an account, then send the user to the login page."""
    try:
        AuthService(db).register(username, password)
    except (ValidationError, ConflictError) as e:
        return render(
            request, "users/register.html",
            {"error": e.message, "form": {"username": username}},
            status_code=form_error_status(e),
        )

    get_session(request).flash(get_message("registration_success"))
    return redirect("/users/login")

@router.get("/login")
async def login_form(request: Request):
    return render(request, "users/login.html")

@router.post("/login", dependencies=[Depends(verify_csrf)])
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db)
):
    """Verify credentials and bind the identity to a fresh session id."""
    try:
        identity = AuthService(db).login(username, password)
    except AuthError as e:
        return render(
            request, "users/login.html",
            {"error": e.message, "form": {"username": username}},
            status_code=form_error_status(e),
        )

    session = get_session(request)
    session.regenerate()
    session["user_id"] = identity.user_id
    session["username"] = identity.username
    return redirect("/appointments")

@router.get("/logout")
async def logout(request: Request, db: Session = Depends(get_db)):
    AuthService(db).logout(get_session(request))
    return redirect("/users/login")

@router.get("/profile")
async def profile(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    user = AuthService(db).get_profile(identity)
    return render(request, "users/profile.html", {"user": user})

@router.post("/profile", dependencies=[Depends(verify_csrf)])
async def update_profile(
    request: Request,
    username: str = Form(""),
    current_password: str = Form("", alias="currentPassword"),
    new_password: str = Form("", alias="newPassword"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Update the caller's username and/or password."""
    auth_service = AuthService(db)
    try:
        user = auth_service.update_profile(
            identity,
            new_username=username,
            current_password=current_password,
            new_password=new_password,
        )
    except (ValidationError, ConflictError, AuthError) as e:
        return render(
            request, "users/profile.html",
            {"user": auth_service.get_profile(identity), "error": e.message},
            status_code=form_error_status(e),
        )

    get_session(request)["username"] = user.username
    return render(
        request, "users/profile.html",
        {"user": user, "message": get_message("profile_updated")},
    )

@router.post("/delete", dependencies=[Depends(verify_csrf)])
async def delete_account(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    AuthService(db).delete_account(identity, get_session(request))
    return redirect("/users/login")
