from typing import Any

from pydantic import BaseModel, model_serializer


class APIResponse(BaseModel):
    """The single response envelope: ``{success, data?, error?}``."""

    success: bool = True
    data: Any = None
    error: str | None = None

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        payload = handler(self)
        return {k: v for k, v in payload.items() if k == "success" or v is not None}


def ok(data: Any = None) -> APIResponse:
    return APIResponse(success=True, data=data)


def deleted(kind: str, namespace: str, name: str) -> APIResponse:
    return ok({"name": name, "namespace": namespace, "message": f"{kind} deleted successfully"})
