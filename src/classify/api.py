"""
FastAPI Backend for the classification service
Classify, query, fetch and delete content over HTTP
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .classification_service import ClassificationService
from .classifier import Classifier, create_classifier
from .config import AppConfig
from .content import (
    ClassifyRequest,
    ClassifyResponse,
    ContentStorage,
    DeleteContentResponse,
    ErrorResponse,
    create_content_storage
)
from .deletion_service import DeletionService
from .errors import (
    ClassifierTimeoutError,
    ClassifyError,
    InvalidContentError,
    StorageTimeoutError,
    UrlError
)
from .middleware import ApiKeyMiddleware
from .reconcile_service import IndexReconciler
from .redis_client import close_redis_client, create_redis_client
from .search import SearchService
from .tags import ContentQueryResponse, TagStorage, TagsResponse, create_tag_storage, normalize_tags

logger = logging.getLogger(__name__)

SERVICE_NAME = "classify"
CLASSIFY_PATH = "/classify"


@dataclass
class AppServices:
    """Everything the request handlers need, built once per process"""
    content_storage: ContentStorage
    tag_storage: TagStorage
    classifier: Classifier
    redis_client: Optional[object] = None

    classification: ClassificationService = field(init=False)
    deletion: DeletionService = field(init=False)
    search: SearchService = field(init=False)
    reconciler: IndexReconciler = field(init=False)

    def __post_init__(self):
        self.classification = ClassificationService(self.content_storage, self.tag_storage, self.classifier)
        self.deletion = DeletionService(self.content_storage, self.tag_storage)
        self.search = SearchService(self.content_storage, self.tag_storage)
        self.reconciler = IndexReconciler(self.content_storage, self.tag_storage)


async def build_services(config: AppConfig) -> AppServices:
    """
    Build stores and classifier from configuration.

    One Redis pool is shared by the Redis content store and the tag index.
    """
    redis_client = None
    if config.uses_redis:
        redis_client = await create_redis_client(config.redis, timeout=config.storage.timeout_seconds)

    try:
        content_storage = await create_content_storage(config.storage, redis_client=redis_client)
        tag_storage = create_tag_storage(
            config.tag_storage, redis_client=redis_client, timeout=config.storage.timeout_seconds
        )
    except ClassifyError:
        if redis_client is not None:
            await close_redis_client(redis_client)
        raise

    classifier = create_classifier(config.classifier)
    logger.info(f"Classifier ready: {classifier.name}")

    return AppServices(
        content_storage=content_storage,
        tag_storage=tag_storage,
        classifier=classifier,
        redis_client=redis_client,
    )


async def close_services(services: AppServices) -> None:
    await services.content_storage.close()
    await services.tag_storage.close()
    if services.redis_client is not None:
        await close_redis_client(services.redis_client)


def _error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error).model_dump())


def _request_error_response(request: Request, status_code: int, error: str) -> JSONResponse:
    """Failure body in the schema of the route that failed"""
    if request.url.path == CLASSIFY_PATH:
        body = ClassifyResponse(content=None, success=False, error=error)
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
    return _error_response(status_code, error)


def _status_for(error: ClassifyError) -> int:
    if isinstance(error, (InvalidContentError, UrlError)):
        return 400
    if isinstance(error, (StorageTimeoutError, ClassifierTimeoutError)):
        return 504
    return 500


def create_app(config: AppConfig, services: Optional[AppServices] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration
        services: Pre-built services; when given the app uses them as-is and
            leaves closing them to the caller

    Returns:
        The application, ready for uvicorn
    """
    start_time = datetime.now(timezone.utc)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = services is None
        app.state.services = services if services is not None else await build_services(config)

        if config.reconcile_on_startup:
            try:
                report = await app.state.services.reconciler.reconcile()
                logger.info(
                    f"Startup reconciliation repaired {report.repaired} of {report.scanned} records, "
                    f"pruned {report.pruned} stale tag entries"
                )
            except ClassifyError as e:
                logger.error(f"Startup reconciliation failed: {e}")

        logger.info(f"{SERVICE_NAME} API v{__version__} started")
        try:
            yield
        finally:
            if owned:
                await close_services(app.state.services)
            logger.info(f"{SERVICE_NAME} API stopped")

    app = FastAPI(
        title="Classify API",
        description="Content classification with tag-based retrieval",
        version=__version__,
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    app.add_middleware(ApiKeyMiddleware, api_key=config.api.api_key)

    # =============================================
    # Error handlers
    # =============================================
    @app.exception_handler(ClassifyError)
    async def classify_error_handler(request: Request, exc: ClassifyError):
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return _request_error_response(request, status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _request_error_response(request, 400, f"Invalid request: {exc.errors()}")

    # =============================================
    # Content
    # =============================================
    @app.post(CLASSIFY_PATH, response_model=ClassifyResponse)
    async def classify_content(body: ClassifyRequest, request: Request):
        """Classify text or a URL; 409 with the stored record if the text was seen before"""
        outcome = await request.app.state.services.classification.classify(body.content)
        response = ClassifyResponse(content=outcome.content)
        if outcome.is_duplicate:
            return JSONResponse(status_code=409, content=response.model_dump(mode="json"))
        return response

    @app.get("/content/{content_id}", response_class=PlainTextResponse)
    async def get_content(content_id: str, request: Request):
        """Raw text of one record"""
        content = await request.app.state.services.content_storage.get(content_id)
        if content is None:
            return _error_response(404, f"Not found: content {content_id}")
        return PlainTextResponse(content.content)

    @app.delete("/content/{content_id}", response_model=DeleteContentResponse)
    async def delete_content(content_id: str, request: Request):
        """Delete a record; removed_tags lists the tags this deletion left empty"""
        outcome = await request.app.state.services.deletion.delete(content_id)
        if not outcome.deleted:
            response = DeleteContentResponse(success=False, id=content_id, error="Content not found")
            return JSONResponse(status_code=404, content=response.model_dump())
        return DeleteContentResponse(success=True, id=outcome.content_id, removed_tags=outcome.removed_tags)

    # =============================================
    # Tags
    # =============================================
    @app.get("/query", response_model=ContentQueryResponse)
    async def query_content(request: Request, tags: Optional[str] = Query(None)):
        """Content holding any of the comma-separated tags, newest update first"""
        tag_list = normalize_tags((tags or "").split(","))
        if not tag_list:
            return _error_response(400, "Invalid request: at least one tag is required")

        items = await request.app.state.services.search.query_by_tags(tag_list)
        return ContentQueryResponse(items=items, tags=tag_list, count=len(items))

    @app.get("/tags", response_model=TagsResponse)
    async def list_tags(request: Request):
        """Every tag with at least one member"""
        tags = await request.app.state.services.search.list_tags()
        return TagsResponse(tags=tags, count=len(tags))

    # =============================================
    # Health
    # =============================================
    @app.get("/health")
    async def health_check():
        """
        Basic health check endpoint.
        Returns service status and uptime.
        """
        now = datetime.now(timezone.utc)
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__,
            "uptime_seconds": int((now - start_time).total_seconds()),
            "timestamp": now.isoformat(),
        }

    return app
