# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Request-boundary interception of unhandled exceptions.

Two forms are provided: ``wrap_handler`` for any plain or async handler
function, and ``RaygunMiddleware`` for Starlette/FastAPI applications. Both
report the exception and then re-raise the same exception object, so the
host's own error handling runs exactly as it would without them.
"""

import functools
import inspect
from typing import Any, Callable, Mapping

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .error_reporter import ErrorReporter
from .frames import extract_trace, skip_frames
from .logger import create_logger
from .models import RequestContext

logger = create_logger(name="raygun_reporter.middleware")

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Request plumbing between the reporter and the application handler
FRAMEWORK_MODULES = (
    "raygun_reporter",
    "starlette",
    "fastapi",
    "anyio",
    "asyncio",
    "concurrent",
    "contextlib",
    "threading",
)


def _is_form(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES)


async def request_context_from_starlette(request: Request) -> RequestContext:
    """Build a RequestContext from a Starlette request.

    The URL is ``scheme://host[:port]path`` without the query string, which is
    reported separately. Form fields are included only for form posts whose
    body can still be parsed; file uploads are left out.
    """
    url = request.url
    host = url.hostname or ""
    port = f":{url.port}" if url.port else ""

    form: dict[str, Any] = {}
    if _is_form(request):
        try:
            form_data = await request.form()
            form = {key: value for key, value in form_data.items() if isinstance(value, str)}
        except Exception as e:
            logger.debug("Could not read form parameters", path=url.path, error=str(e))

    return RequestContext(
        host_name=host,
        url=f"{url.scheme}://{host}{port}{url.path}",
        method=request.method,
        remote_ip=request.client.host if request.client else "",
        query_params=dict(request.query_params),
        form_params=form,
        headers=tuple(request.headers.items()),
    )


def application_trace(exception: BaseException) -> list[tuple[str, str, int, dict[str, Any]]]:
    """Raw trace of an exception starting at the first application frame."""
    return extract_trace(exception, skip_frames(exception.__traceback__, FRAMEWORK_MODULES))


def _capture(
    reporter: ErrorReporter,
    request_ctx: RequestContext,
    exception: Exception,
    extra: Mapping[str, Any] | None,
) -> None:
    try:
        reporter.capture_request_exception(
            request_ctx, exception, trace=application_trace(exception), extra=extra
        )
    except Exception:
        logger.exception("Error reporter failed while capturing request exception")


def wrap_handler(
    handler: Callable[..., Any],
    reporter: ErrorReporter,
    context_factory: Callable[..., Any],
    extra: Mapping[str, Any] | None = None,
) -> Callable[..., Any]:
    """Wrap a request handler so unhandled exceptions are reported.

    Args:
        handler: Plain or async handler to wrap
        reporter: Reporter receiving request captures
        context_factory: Called with the handler's arguments to build the
            RequestContext; may be async when wrapping an async handler
        extra: Free-form data added to every capture

    Returns:
        Handler with the same signature and the same return values and
        exceptions as ``handler``
    """
    if inspect.iscoroutinefunction(handler):
        @functools.wraps(handler)
        async def async_wrapped(*args: Any, **kwargs: Any) -> Any:
            try:
                return await handler(*args, **kwargs)
            except Exception as exc:
                try:
                    request_ctx = context_factory(*args, **kwargs)
                    if inspect.isawaitable(request_ctx):
                        request_ctx = await request_ctx
                    await run_in_threadpool(_capture, reporter, request_ctx, exc, extra)
                except Exception:
                    logger.exception("Could not build request context for error report")
                raise

        return async_wrapped

    @functools.wraps(handler)
    def wrapped(*args: Any, **kwargs: Any) -> Any:
        try:
            return handler(*args, **kwargs)
        except Exception as exc:
            try:
                request_ctx = context_factory(*args, **kwargs)
            except Exception:
                logger.exception("Could not build request context for error report")
            else:
                _capture(reporter, request_ctx, exc, extra)
            raise

    return wrapped


class RaygunMiddleware(BaseHTTPMiddleware):
    """Starlette middleware reporting exceptions that escape the application.

    Example:
        app = FastAPI()
        app.add_middleware(RaygunMiddleware, reporter=RaygunErrorReporter.from_env())
    """

    def __init__(
        self,
        app: ASGIApp,
        reporter: ErrorReporter,
        extra: Mapping[str, Any] | None = None,
    ):
        """Initialize the middleware.

        Args:
            app: Wrapped ASGI application
            reporter: Reporter receiving request captures
            extra: Free-form data added to every capture (e.g. {"env": "prod"})
        """
        super().__init__(app)
        self.reporter = reporter
        self.extra = dict(extra or {})

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if _is_form(request):
            # Cache the body so form fields are still readable after a failure
            await request.body()
        try:
            return await call_next(request)
        except Exception as exc:
            try:
                request_ctx = await request_context_from_starlette(request)
                await run_in_threadpool(_capture, self.reporter, request_ctx, exc, self.extra)
            except Exception:
                logger.exception("Could not build request context for error report")
            raise
