"""
HTTP client the web frontend uses to talk to the perks API.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from perks.core.config import settings
from perks.web.session import WebSession

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error envelope returned by the API (or a transport failure)."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class PerksApiClient:
    """
    Thin async wrapper over the REST API.

    Calls that carry a ``WebSession`` send its access token as a bearer
    token. On a 401 the client refreshes the pair once with the session's
    refresh token and retries; if the refresh is rejected the session is
    cleared and the 401 is raised.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_URL,
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            raise ApiError(response.status_code, "Unexpected response from the API")
        if not body.get("success"):
            raise ApiError(response.status_code, body.get("message") or "An error occurred", body.get("errors"))
        return body.get("data")

    async def _send(
        self,
        method: str,
        path: str,
        session: Optional[WebSession] = None,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        if session and session.access_token:
            headers["Authorization"] = f"Bearer {session.access_token}"

        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise ApiError(503, "The deals service is unavailable, please try again later.")

        if response.status_code == 401 and session and session.refresh_token:
            if await self._refresh(session):
                return await self._send(method, path, WebSession(session.access_token), json, params)
            session.clear()
        return self._unwrap(response)

    async def _refresh(self, session: WebSession) -> bool:
        try:
            tokens = await self.refresh(session.refresh_token)
        except ApiError as e:
            logger.info(f"Session refresh rejected: {e.message}")
            return False
        session.update(tokens["accessToken"], tokens["refreshToken"])
        return True

    # Auth

    async def register(self, form: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("POST", "/auth/register", json=form)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._send("POST", "/auth/login", json={"email": email, "password": password})

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        return await self._send("POST", "/auth/refresh", json={"refreshToken": refresh_token})

    async def profile(self, session: WebSession) -> Dict[str, Any]:
        return (await self._send("GET", "/auth/profile", session))["user"]

    async def logout(self, session: WebSession) -> None:
        await self._send("POST", "/auth/logout", session)

    # Deals

    async def list_deals(self, params: Dict[str, Any], session: Optional[WebSession] = None) -> Dict[str, Any]:
        query = {key: value for key, value in params.items() if value not in (None, "")}
        return await self._send("GET", "/deals", session, params=query)

    async def get_deal(self, deal_id: str, session: Optional[WebSession] = None) -> Dict[str, Any]:
        return (await self._send("GET", f"/deals/{deal_id}", session))["deal"]

    async def featured_deals(self, limit: int = 6) -> List[Dict[str, Any]]:
        return (await self._send("GET", "/deals/featured", params={"limit": limit}))["deals"]

    async def popular_deals(self, limit: int = 6) -> List[Dict[str, Any]]:
        return (await self._send("GET", "/deals/popular", params={"limit": limit}))["deals"]

    async def categories(self) -> List[Dict[str, Any]]:
        return await self._send("GET", "/deals/categories")

    # Claims

    async def claim_deal(self, deal_id: str, session: WebSession) -> Dict[str, Any]:
        return (await self._send("POST", "/claims", session, json={"dealId": deal_id}))["claim"]

    async def list_claims(self, session: WebSession, status: Optional[str] = None, page: int = 1) -> Dict[str, Any]:
        params = {"page": page}
        if status:
            params["status"] = status
        return await self._send("GET", "/claims", session, params=params)

    async def claim_stats(self, session: WebSession) -> Dict[str, Any]:
        return await self._send("GET", "/claims/stats", session)
