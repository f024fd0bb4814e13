# blog_service.py
import asyncio
import logging
import socket
from typing import Optional, Type, TypeVar

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CollectorRegistry, Counter
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from prometheus_fastapi_instrumentator.metrics import Info
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogapi.auth import require_user
from blogapi.config import REQUEST_LATENCY_BUCKETS, config
from blogapi.context import AppContext
from blogapi.database import BlogDatabase
from blogapi.errors import AuthError, BlogAPIError, NotFound, ValidationError
from blogapi.models.entities import User
from blogapi.models.schemas import PostCreate, PostUpdate, UserIn

# --- 기본 로깅 ---
logging.basicConfig(level=config.server.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger('BlogServiceApp')

router = APIRouter()


def get_context(request: Request) -> AppContext:
    return request.app.state.context


BodyT = TypeVar("BodyT", bound=BaseModel)


async def read_body(request: Request, model: Type[BodyT]) -> BodyT:
    """Parse the JSON body of an already authenticated request."""
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Malformed JSON in request body")
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e.errors()))


# --- API 핸들러 함수 ---
@router.get("/public", response_class=PlainTextResponse)
async def handle_public():
    return "Hello World!"


@router.post("/users", status_code=201)
async def create_user(payload: UserIn, ctx: AppContext = Depends(get_context)):
    """Register a user. The password is stored as an argon2 digest only."""
    digest = await ctx.users.hash_password(payload.password)
    user = await ctx.users.create(payload.username, digest, payload.first_name, payload.last_name)
    return JSONResponse(content=user.api_repr(), status_code=201)


@router.get("/posts")
async def handle_get_posts(ctx: AppContext = Depends(get_context)):
    posts = await ctx.posts.get_all()
    return JSONResponse(content=[post.api_repr() for post in posts])


@router.get("/posts/{post_id}")
async def handle_get_post_by_id(post_id: str, ctx: AppContext = Depends(get_context)):
    post = await ctx.posts.get_by_id(post_id)
    if post is None:
        raise NotFound()
    return JSONResponse(content=post.api_repr())


@router.post("/posts", status_code=201)
async def create_post(
    request: Request,
    user: User = Depends(require_user),
    ctx: AppContext = Depends(get_context),
):
    payload = await read_body(request, PostCreate)
    new_post = await ctx.posts.create({
        "title": payload.title,
        "content": payload.content,
        "author": user.author,
    })
    return JSONResponse(content=new_post.api_repr(), status_code=201)


@router.put("/posts/{post_id}", status_code=204)
async def update_post(
    post_id: str,
    request: Request,
    user: User = Depends(require_user),
    ctx: AppContext = Depends(get_context),
):
    payload = await read_body(request, PostUpdate)
    if not (payload.id and payload.id == post_id):
        raise ValidationError("Request path id and request body id values must match")

    updated = await ctx.posts.update(post_id, payload.changes())
    if updated is None:
        raise NotFound()
    return Response(status_code=204)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    user: User = Depends(require_user),
    ctx: AppContext = Depends(get_context),
):
    if not await ctx.posts.delete(post_id):
        raise NotFound()
    return Response(status_code=204)


@router.get("/health")
async def handle_health():
    """헬스 체크 엔드포인트"""
    return {"status": "ok", "service": "blog-service"}


@router.get("/stats")
async def handle_stats(ctx: AppContext = Depends(get_context)):
    """대시보드를 위한 통계 엔드포인트"""
    is_db_healthy = await ctx.health_check()
    try:
        post_count = await ctx.posts.count()
        user_count = await ctx.users.count()
    except BlogAPIError as e:
        logger.error(f"Failed to get counts: {e}", exc_info=True)
        post_count = user_count = 0
        is_db_healthy = False

    return {
        "blog_service": {
            "service_status": "online" if is_db_healthy else "degraded",
            "database": {"status": "healthy" if is_db_healthy else "unhealthy"},
            "post_count": post_count,
            "user_count": user_count,
        }
    }


# --- 에러 응답 ---
def describe_validation_error(exc: RequestValidationError) -> str:
    return describe_errors(exc.errors())


def describe_errors(errors) -> str:
    for error in errors:
        if error.get("type") == "json_invalid":
            return "Malformed JSON in request body"
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        if error.get("type") == "missing":
            return f"Missing `{field}` in request body" if field else "Missing request body"
        if field:
            return f"Invalid `{field}` in request body"
    return "Invalid request body"


def register_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(BlogAPIError)
    async def handle_blog_error(request: Request, exc: BlogAPIError):
        headers = {"WWW-Authenticate": "Basic"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)

    @application.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"message": describe_validation_error(exc)})

    @application.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # unmatched paths and unmatched methods on known paths are both "not found"
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"message": NotFound.message})
        if exc.status_code == 401:
            return await handle_blog_error(request, AuthError())
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @application.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


# --- Prometheus 메트릭 설정 ---
def configure_metrics(application: FastAPI) -> None:
    """Instrument the app and expose /metrics on a registry owned by this app."""
    registry = CollectorRegistry()

    # api-gateway와 동일한 형식의 status 레이블(2xx, 4xx, 5xx)을 사용
    http_requests_total = Counter(
        "http_requests_total",
        "Total number of HTTP requests",
        ("method", "status"),
        registry=registry,
    )

    def http_requests_total_metric(info: Info) -> None:
        status_code = info.response.status_code if info.response else 500
        status_group = "unknown"
        if 200 <= status_code < 300:
            status_group = "2xx"
        elif 300 <= status_code < 400:
            status_group = "3xx"
        elif 400 <= status_code < 500:
            status_group = "4xx"
        elif 500 <= status_code < 600:
            status_group = "5xx"

        http_requests_total.labels(info.method, status_group).inc()

    instrumentator = Instrumentator(registry=registry)
    instrumentator.add(metrics.latency(buckets=REQUEST_LATENCY_BUCKETS, registry=registry))
    instrumentator.add(http_requests_total_metric)
    instrumentator.instrument(application).expose(application, include_in_schema=False)


def create_app(context: AppContext) -> FastAPI:
    application = FastAPI(title="Blog API")
    application.state.context = context

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    register_error_handlers(application)
    configure_metrics(application)
    application.include_router(router)
    return application


class BlogServer:
    """Owns the database connection, the stores and the HTTP listener.

    ``start`` returns once the database answers and the socket is listening;
    ``stop`` returns once both are closed.
    """

    def __init__(self, host: Optional[str] = None):
        self.host = host or config.server.host
        self.port: Optional[int] = None
        self.context: Optional[AppContext] = None
        self.app: Optional[FastAPI] = None
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None

    async def start(self, database_url: Optional[str] = None, port: Optional[int] = None):
        database_url = database_url or config.DATABASE_URL
        port = config.PORT if port is None else port

        database = BlogDatabase(database_url)
        await database.initialize()

        # bound up front: a busy port raises OSError here
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, port))
        except OSError as e:
            sock.close()
            logger.error(f"Could not bind {self.host}:{port}: {e}")
            await database.close()
            raise
        self.port = sock.getsockname()[1]

        self.context = AppContext.from_database(database)
        self.app = create_app(self.context)
        self._server = uvicorn.Server(
            uvicorn.Config(self.app, host=self.host, port=self.port, lifespan="off", log_config=None)
        )
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[sock]))

        while not self._server.started:
            if self._serve_task.done():
                await database.close()
                raise RuntimeError(f"Blog service failed to start on port {self.port}")
            await asyncio.sleep(0.05)
        logger.info(f"Your app is listening on port {self.port}")

    async def wait_closed(self):
        if self._serve_task is not None:
            await self._serve_task

    async def stop(self):
        if self._server is not None:
            logger.info("Closing server")
            self._server.should_exit = True
            await self._serve_task
            self._server = None
            self._serve_task = None
        if self.context is not None and self.context.database is not None:
            await self.context.database.close()


async def main():
    server = BlogServer()
    await server.start(config.DATABASE_URL, config.PORT)
    try:
        await server.wait_closed()
    finally:
        await server.stop()


if __name__ == "__main__":
    asyncio.run(main())
