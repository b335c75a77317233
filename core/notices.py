# core/notices.py

from typing import Any, Literal, Optional
from fastapi.responses import JSONResponse
from pydantic import BaseModel


ErrorKind = Literal["permission_denied", "validation", "not_found", "backend"]

STATUS_BY_KIND = {
    "permission_denied": 403,
    "validation": 400,
    "not_found": 404,
    "backend": 500,
}

PERMISSION_DENIED = "You don't have permission to perform this action"


# ============================================================
# User-facing notice (toast)
# ============================================================
class Notice(BaseModel):
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


# ============================================================
# Outcome of every mutation path
# ============================================================
class ActionResult(BaseModel):
    """
    Mutations never raise for expected failures; they return one of these.
    """
    ok: bool
    notice: Notice
    error_kind: Optional[ErrorKind] = None
    data: Optional[Any] = None

    @classmethod
    def success(cls, title: str, description: str, data: Any = None) -> "ActionResult":
        return cls(ok=True, notice=Notice(title=title, description=description), data=data)

    @classmethod
    def _failure(cls, kind: ErrorKind, title: str, description: str) -> "ActionResult":
        return cls(
            ok=False,
            error_kind=kind,
            notice=Notice(title=title, description=description, variant="destructive"),
        )

    @classmethod
    def denied(cls, description: str = PERMISSION_DENIED) -> "ActionResult":
        return cls._failure("permission_denied", "Permission denied", description)

    @classmethod
    def invalid(cls, description: str) -> "ActionResult":
        return cls._failure("validation", "Validation error", description)

    @classmethod
    def not_found(cls, what: str) -> "ActionResult":
        return cls._failure("not_found", "Not found", f"{what} not found")

    @classmethod
    def failed(cls, description: str) -> "ActionResult":
        return cls._failure("backend", "Error", description)

    @property
    def status_code(self) -> int:
        if self.ok:
            return 200
        return STATUS_BY_KIND.get(self.error_kind, 500)


def to_response(result: ActionResult, success_status: int = 200) -> JSONResponse:
    status_code = success_status if result.ok else result.status_code
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
