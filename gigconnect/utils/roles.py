from fastapi import Depends

from .dependencies import get_current_user
from .error_handlers import ForbiddenError, get_error_message
from .jwt import TokenClaims


def _role_required(*allowed_roles: str, error_key: str):
    def check_role(user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
        if user.role not in allowed_roles:
            raise ForbiddenError(get_error_message(error_key))
        return user
    return check_role


client_only = _role_required("client", "both", error_key="clients_only")
freelancer_only = _role_required("freelancer", "both", error_key="freelancers_only")
