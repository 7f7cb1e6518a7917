from fastapi import Depends, Request, WebSocket
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .error_handlers import MissingToken
from .jwt import TokenClaims, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """REST auth gate: verify the bearer token on every request."""
    if credentials is None or not credentials.credentials:
        raise MissingToken()

    claims = decode_access_token(credentials.credentials)
    request.state.user = claims
    return claims


def authenticate_websocket(websocket: WebSocket) -> TokenClaims:
    """
    Realtime auth gate: the token travels in the handshake query string
    (`/ws?token=...`) since browsers can't set headers on a WebSocket upgrade.
    Called once, before the connection is accepted.
    """
    token = (websocket.query_params.get("token") or "").strip()
    if not token:
        raise MissingToken()
    return decode_access_token(token)
