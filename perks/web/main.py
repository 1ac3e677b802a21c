"""
Server-rendered frontend for browsing and claiming deals.

Every page is backed by the REST API through ``PerksApiClient``; this app
holds no database connection of its own.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Form, Query, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from perks.core.config import settings
from perks.web.client import ApiError, PerksApiClient
from perks.web.session import WebSession

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).with_name("templates")))


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.api_client = PerksApiClient(settings.API_URL)
    yield
    await app.state.api_client.aclose()


app = FastAPI(title=f"{settings.PROJECT_NAME} Web", lifespan=lifespan, docs_url=None, redoc_url=None)


def get_api_client(request: Request) -> PerksApiClient:
    return request.app.state.api_client


def get_web_session(request: Request) -> WebSession:
    return WebSession.from_request(request)


def render(request: Request, name: str, session: WebSession, context: Dict[str, Any], status_code: int = 200):
    context.setdefault("is_authenticated", session.is_authenticated)
    response = templates.TemplateResponse(request, name, context, status_code=status_code)
    return session.apply(response)


def redirect(url: str, session: Optional[WebSession] = None) -> RedirectResponse:
    response = RedirectResponse(url, status_code=303)
    if session is not None:
        session.apply(response)
    return response


@app.get("/")
async def home(
    request: Request,
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    context = {
        "featured": await api.featured_deals(),
        "popular": await api.popular_deals(),
        "categories": await api.categories(),
    }
    return render(request, "index.html", session, context)


@app.get("/deals")
async def deals(
    request: Request,
    category: Optional[str] = None,
    is_locked: Optional[str] = Query(None, alias="isLocked"),
    search: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = 1,
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    filters = {"category": category, "isLocked": is_locked, "search": search, "sort": sort, "page": page}
    try:
        result = await api.list_deals(filters)
    except ApiError as e:
        return render(request, "deals.html", session, {"error": e.message, "deals": [], "filters": filters},
                      status_code=e.status_code)
    context = {"deals": result["deals"], "pagination": result["pagination"], "filters": filters}
    return render(request, "deals.html", session, context)


@app.get("/deals/{deal_id}")
async def deal_detail(
    request: Request,
    deal_id: str,
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    try:
        deal = await api.get_deal(deal_id)
    except ApiError as e:
        return render(request, "error.html", session, {"message": e.message}, status_code=e.status_code)
    return render(request, "deal_detail.html", session, {"deal": deal})


@app.post("/deals/{deal_id}/claim")
async def claim_deal(
    request: Request,
    deal_id: str,
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    if not session.is_authenticated:
        return redirect("/login")
    try:
        claim = await api.claim_deal(deal_id, session)
    except ApiError as e:
        if e.status_code == 401:
            session.clear()
            return redirect("/login", session)
        try:
            deal = await api.get_deal(deal_id)
        except ApiError:
            return render(request, "error.html", session, {"message": e.message}, status_code=e.status_code)
        return render(request, "deal_detail.html", session, {"deal": deal, "error": e.message},
                      status_code=e.status_code)
    logger.info(f"Claim {claim['id']} created from the web app")
    return render(request, "claim_success.html", session, {"claim": claim}, status_code=201)


@app.get("/login")
async def login_page(request: Request, session: WebSession = Depends(get_web_session)):
    if session.is_authenticated:
        return redirect("/dashboard")
    return render(request, "login.html", session, {})


@app.post("/login")
async def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    try:
        data = await api.login(email, password)
    except ApiError as e:
        return render(request, "login.html", session, {"error": e.message, "email": email},
                      status_code=e.status_code)
    session.update(data["accessToken"], data["refreshToken"])
    return redirect("/dashboard", session)


@app.get("/register")
async def register_page(request: Request, session: WebSession = Depends(get_web_session)):
    if session.is_authenticated:
        return redirect("/dashboard")
    return render(request, "register.html", session, {"form": {}})


@app.post("/register")
async def register(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    company: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    form = {"name": name, "email": email, "password": password}
    if company:
        form["company"] = company
    if role:
        form["role"] = role
    try:
        data = await api.register(form)
    except ApiError as e:
        form.pop("password")
        return render(request, "register.html", session, {"error": e.message, "errors": e.errors, "form": form},
                      status_code=e.status_code)
    session.update(data["accessToken"], data["refreshToken"])
    return redirect("/dashboard", session)


@app.get("/dashboard")
async def dashboard(
    request: Request,
    status: Optional[str] = None,
    page: int = 1,
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    if not session.is_authenticated:
        return redirect("/login")
    try:
        user = await api.profile(session)
        claims = await api.list_claims(session, status=status, page=page)
        stats = await api.claim_stats(session)
    except ApiError as e:
        if e.status_code == 401:
            session.clear()
            return redirect("/login", session)
        raise
    context = {
        "user": user,
        "claims": claims["claims"],
        "pagination": claims["pagination"],
        "stats": stats,
        "status": status,
    }
    return render(request, "dashboard.html", session, context)


@app.post("/logout")
async def logout(
    api: PerksApiClient = Depends(get_api_client),
    session: WebSession = Depends(get_web_session),
):
    if session.is_authenticated:
        try:
            await api.logout(session)
        except ApiError as e:
            logger.info(f"API logout failed, clearing cookies anyway: {e.message}")
    session.clear()
    return redirect("/", session)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    logger.warning(f"API error on {request.url.path}: {exc.status_code} {exc.message}")
    return templates.TemplateResponse(
        request, "error.html", {"message": exc.message, "is_authenticated": False}, status_code=exc.status_code
    )
