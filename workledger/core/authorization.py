from enum import Enum

from fastapi import Depends, HTTPException, Request

from workledger.deps.auth import require_auth


class Role(Enum):
    ADMIN = "ADMIN"
    USER = "USER"


_RANK = {
    Role.USER: 1,
    Role.ADMIN: 2,
}


def require_role(role: Role):
    def dependency(request: Request, claims: dict = Depends(require_auth)):
        try:
            user_role = Role(str(claims.get("role") or "USER").upper())
        except ValueError as exc:
            raise HTTPException(status_code=403, detail="Invalid role claim") from exc

        if _RANK[user_role] < _RANK[role]:
            raise HTTPException(status_code=403, detail="Insufficient role")

        request.state.role = user_role.value
        return user_role

    return dependency
