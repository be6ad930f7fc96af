from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from site_sentinel.analysis.analysis_service import AnalysisRequest, analyze_finding, build_analysis_agent
from site_sentinel.auth.google_oauth import (
    ACCESS_TOKEN_COOKIE,
    ACCESS_TOKEN_MAX_AGE,
    GoogleOAuthClient,
    require_access_token,
)
from site_sentinel.config import AppConfig, GoogleOAuthConfig
from site_sentinel.errors import (
    AnalysisError,
    AuthenticationRequired,
    ConfigError,
    InspectionError,
    OAuthError,
    ProjectNotFoundError,
    StoreError,
)
from site_sentinel.inspector.driver import PlaywrightDriver
from site_sentinel.inspector.inspector import Inspector
from site_sentinel.inspector.models import Finding
from site_sentinel.logging_setup import configure_logging
from site_sentinel.service import MonitoringService
from site_sentinel.store.base import ProjectStore
from site_sentinel.store.memory_store import InMemoryProjectStore
from site_sentinel.store.models import Project, ProjectCreate, ProjectUpdate
from site_sentinel.store.supabase_store import SupabaseProjectStore

logger = logging.getLogger(__name__)


class CheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    message: str
    detected_errors: list[Finding]


class MessageResponse(BaseModel):
    message: str


class AnalysisResponse(BaseModel):
    recommendations: str


class AuthUrlResponse(BaseModel):
    url: str


def _build_store(config: AppConfig) -> ProjectStore:
    if config.supabase_enabled:
        return SupabaseProjectStore(config.supabase_url, config.supabase_key)
    logger.warning("Supabase is not configured; using an in-memory project store")
    return InMemoryProjectStore()


def _build_oauth() -> GoogleOAuthClient | None:
    try:
        return GoogleOAuthClient(GoogleOAuthConfig.from_env())
    except ConfigError as exc:
        logger.warning("Google sign-in disabled: %s", exc)
        return None


def create_app(
    config: AppConfig | None = None,
    store: ProjectStore | None = None,
    inspector: Inspector | None = None,
    oauth: GoogleOAuthClient | None = None,
    analyzer: Any = None,
) -> FastAPI:
    """Wire the HTTP surface around explicitly constructed collaborators."""
    config = config or AppConfig.from_env()
    configure_logging(config.log_level)

    store = store if store is not None else _build_store(config)
    inspector = inspector or Inspector(
        PlaywrightDriver(),
        user_agent=config.user_agent,
        navigation_timeout_ms=config.navigation_timeout_ms,
    )
    service = MonitoringService(store, inspector)
    analyzer = analyzer or (lambda req: analyze_finding(req, build_analysis_agent(config.analysis_model)))

    app = FastAPI(title="Site Sentinel API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.oauth = oauth

    @app.exception_handler(AuthenticationRequired)
    async def _auth_required(request: Request, exc: AuthenticationRequired) -> JSONResponse:
        return JSONResponse(status_code=401, content={"message": "Authentication required"})

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    def _oauth_client() -> GoogleOAuthClient:
        if app.state.oauth is None:
            raise HTTPException(status_code=503, detail="Google sign-in is not configured")
        return app.state.oauth

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/projects", response_model=list[Project])
    async def list_projects() -> list[Project]:
        return store.list_projects()

    @app.post("/api/projects", response_model=Project)
    async def create_project(payload: ProjectCreate) -> Project:
        project = store.create_project(payload)
        logger.info("Created project %s (%s)", project.id, project.url)
        return project

    @app.get("/api/projects/{project_id}", response_model=Project)
    async def get_project(project_id: str) -> Project:
        project = store.find_project(project_id)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    @app.put("/api/projects/{project_id}", response_model=Project)
    async def update_project(project_id: str, payload: ProjectUpdate) -> Project:
        project = store.update_project(project_id, payload)
        if project is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    @app.delete("/api/projects/{project_id}", response_model=MessageResponse)
    async def delete_project(project_id: str) -> MessageResponse:
        if not store.delete_project(project_id):
            raise HTTPException(status_code=404, detail="Project not found")
        return MessageResponse(message="Project deleted successfully")

    @app.post("/api/projects/{project_id}/check", response_model=CheckResponse)
    @app.post("/api/projects/{project_id}/fetch-errors-playwright", response_model=CheckResponse)
    async def check_project(project_id: str) -> Any:
        """Run one inspection of the project's URL and store what it finds."""
        try:
            result = await service.run_check(project_id)
        except ProjectNotFoundError:
            return JSONResponse(status_code=404, content={"message": "Project not found or URL missing"})
        except InspectionError as exc:
            logger.error("Site check failed for project %s: %s", project_id, exc)
            return JSONResponse(
                status_code=500,
                content={"message": "Failed to check site", "error": str(exc)},
            )
        return CheckResponse(message=result.message, detected_errors=result.detected_errors)

    @app.get("/api/projects/{project_id}/errors", response_model=list[Finding])
    async def list_project_errors(project_id: str) -> list[Finding]:
        return store.list_findings(project_id)

    @app.post("/api/analyze-error", response_model=AnalysisResponse)
    async def analyze_error(request: Request) -> Any:
        try:
            payload = AnalysisRequest.model_validate(await request.json())
        except (ValidationError, ValueError):
            return JSONResponse(status_code=400, content={"error": "Missing required error details"})
        try:
            recommendations = await analyzer(payload)
        except AnalysisError as exc:
            return JSONResponse(status_code=500, content={"error": str(exc)})
        return AnalysisResponse(recommendations=recommendations)

    @app.get("/api/auth/google", response_model=AuthUrlResponse)
    async def google_auth_url(client: GoogleOAuthClient = Depends(_oauth_client)) -> AuthUrlResponse:
        return AuthUrlResponse(url=client.authorization_url())

    @app.get("/api/auth/google/callback")
    async def google_auth_callback(
        code: str | None = None,
        client: GoogleOAuthClient = Depends(_oauth_client),
    ) -> Any:
        if not code:
            return JSONResponse(status_code=400, content={"error": "No code provided"})
        try:
            tokens = await client.exchange_code(code)
        except OAuthError as exc:
            return JSONResponse(status_code=500, content={"error": str(exc)})

        response = RedirectResponse(url=client.app_url + "/", status_code=307)
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            tokens.access_token,
            max_age=ACCESS_TOKEN_MAX_AGE,
            httponly=True,
            secure=client.app_url.startswith("https://"),
            samesite="lax",
        )
        return response

    @app.get("/api/auth/google/session")
    async def google_auth_session(
        request: Request,
        client: GoogleOAuthClient = Depends(_oauth_client),
    ) -> dict[str, bool]:
        require_access_token(request)
        return {"authenticated": True}

    return app


app = create_app(oauth=_build_oauth())
