from fastapi import Depends, HTTPException
from app.dependencies.session_context import SessionContext, get_session_context
from app.models.user_role import AppRole


def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return ctx


def require_staff(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.has_role(AppRole.admin.value, AppRole.seller.value):
        raise HTTPException(status_code=403, detail="Forbidden: Not admin or seller")
    return ctx
