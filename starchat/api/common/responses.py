from typing import Any, Optional

from fastapi.responses import JSONResponse


class APIResponse:
    @staticmethod
    def error(
        message: str,
        status_code: int = 400,
        errors: Optional[dict[str, list[str]]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> JSONResponse:
        """Renders the error body every endpoint shares: ``{message, errors?}``."""
        content: dict[str, Any] = {"message": message}
        if errors:
            content["errors"] = errors
        return JSONResponse(status_code=status_code, content=content, headers=headers)

    @staticmethod
    def from_http_detail(
        detail: Any, status_code: int, headers: Optional[dict[str, str]] = None
    ) -> JSONResponse:
        """Builds the error body from an HTTPException detail of any shape."""
        if isinstance(detail, dict) and "message" in detail:
            return APIResponse.error(
                str(detail["message"]),
                status_code=status_code,
                errors=detail.get("errors"),
                headers=headers,
            )
        if isinstance(detail, str):
            return APIResponse.error(detail, status_code=status_code, headers=headers)
        # fastapi-users uses error codes and {"code", "reason"} dicts as details
        if isinstance(detail, dict):
            message = str(detail.get("reason") or detail.get("code") or "Error")
        else:
            message = str(detail)
        return APIResponse.error(message, status_code=status_code, headers=headers)
