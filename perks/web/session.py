"""
Cookie-held session for the web frontend.

The browser keeps the API's access and refresh tokens in HTTP-only cookies.
The API client may rotate or drop them while serving a page; ``apply`` then
writes the outcome back onto the outgoing response.
"""
from typing import Optional

from fastapi import Request
from starlette.responses import Response

from perks.core.config import settings

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


class WebSession:

    def __init__(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.changed = False
        self.cleared = False

    @classmethod
    def from_request(cls, request: Request) -> "WebSession":
        return cls(request.cookies.get(ACCESS_COOKIE), request.cookies.get(REFRESH_COOKIE))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token or self.refresh_token)

    def update(self, access_token: str, refresh_token: str) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.changed = True
        self.cleared = False

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.changed = False
        self.cleared = True

    def apply(self, response: Response) -> Response:
        if self.cleared:
            response.delete_cookie(ACCESS_COOKIE)
            response.delete_cookie(REFRESH_COOKIE)
        elif self.changed:
            response.set_cookie(
                ACCESS_COOKIE,
                self.access_token,
                max_age=settings.JWT_ACCESS_EXPIRE_MINUTES * 60,
                httponly=True,
                secure=settings.WEB_COOKIE_SECURE,
                samesite="lax",
            )
            response.set_cookie(
                REFRESH_COOKIE,
                self.refresh_token,
                max_age=settings.JWT_REFRESH_EXPIRE_DAYS * 24 * 3600,
                httponly=True,
                secure=settings.WEB_COOKIE_SECURE,
                samesite="lax",
            )
        return response
