from fastapi import Depends, HTTPException
from bazarika.models.profile import Profile
from bazarika.utils.token import get_current_user, is_admin

def require_admin(current_user: Profile = Depends(get_current_user)):
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
