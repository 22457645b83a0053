"""Security middleware and utilities"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import bleach
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

class SecurityMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        path = request.url.path
        is_docs_endpoint = path.startswith('/api/docs') or path.startswith('/api/redoc') or path.startswith('/api/openapi.json')

        if is_docs_endpoint:
            # Swagger UI loads its assets from a CDN
            response.headers["Content-Security-Policy"] = (
                "default-src 'self' 'unsafe-inline' https: data:; "
                "img-src 'self' data: https:"
            )
        else:
            response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        return response

class InputSanitizer:
    """Input sanitization for free-text fields"""

    @staticmethod
    def clean_text(value: str, max_length: int) -> str:
        value = value.replace("\x00", "")
        return bleach.clean(value, tags=[], strip=True).strip()[:max_length]

    @staticmethod
    def sanitize_product_data(data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize product input data"""
        if data.get('name'):
            data['name'] = InputSanitizer.clean_text(data['name'], 200)

        if data.get('description'):
            data['description'] = bleach.clean(
                data['description'],
                tags=['p', 'br', 'strong', 'em', 'u', 'ul', 'ol', 'li'],
                strip=True
            )[:5000]

        return data

    @staticmethod
    def sanitize_review(data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize review data"""
        for field, limit in (("title", 200), ("comment", 2000), ("user_name", 100)):
            if data.get(field):
                data[field] = InputSanitizer.clean_text(data[field], limit)
        return data
