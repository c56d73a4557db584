"""Security response headers.

Process rows carry customer names and credit amounts, so API responses are
also marked uncacheable.
"""

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

# Swagger UI needs inline scripts and styles from its CDN
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com; "
    "frame-ancestors 'none'"
)
API_ONLY_CSP = "default-src 'none'; frame-ancestors 'none'"

NO_CACHE_PREFIX = "/api/"


def build_security_headers(serve_docs: bool) -> dict[str, str]:
    """Headers added to every response."""
    return {
        "Content-Security-Policy": DOCS_CSP if serve_docs else API_ONLY_CSP,
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }


async def security_headers_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
    headers: dict[str, str],
) -> Response:
    response = await call_next(request)
    response.headers.update(headers)
    if request.url.path.startswith(NO_CACHE_PREFIX):
        response.headers["Cache-Control"] = "no-store"
    return response
