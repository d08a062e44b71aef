"""
api/routes/v1/user.py -- Profile of the authenticated user.

Routes:
  GET /api/v1/user/profile  -- requires auth (require_session)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import UserResponse
from auth.dependencies import require_session
from auth.models import Principal
from auth.store import UserStore

router = APIRouter()


@router.get("/user/profile", response_model=UserResponse)
def profile(request: Request, principal: Principal = Depends(require_session)) -> UserResponse:
    """Return the stored account behind the caller's token.

    The token can outlive its account (there is no revocation store), so a
    valid token for a deleted user answers 404 rather than 401.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.find_by_id(principal.user_id)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    return UserResponse.from_user(user)
