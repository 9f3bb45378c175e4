"""Unit tests for the error hierarchy and the JSON envelope handlers."""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from acquisition.middleware.error_handler import (
    AcquisitionError,
    StorageError,
    StorageQuotaError,
    UnknownCategoryError,
    register_error_handlers,
)


class _Body(BaseModel):
    ids: list[str]


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/unknown")
    async def unknown():
        raise UnknownCategoryError("Unknown category 'gallery'", category="gallery")

    @app.get("/quota")
    async def quota():
        raise StorageQuotaError()

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret internals")

    @app.post("/body")
    async def body(payload: _Body):
        return {"ok": True}

    return app


class TestErrorHierarchy:
    def test_default_message(self):
        assert str(StorageError()) == "Storage operation failed"

    def test_details_are_kept(self):
        error = UnknownCategoryError(category="gallery")
        assert error.message == "Unknown category"
        assert error.details == {"category": "gallery"}

    def test_quota_is_a_storage_error(self):
        assert issubclass(StorageQuotaError, StorageError)
        assert issubclass(StorageError, AcquisitionError)


class TestHandlers:
    def test_acquisition_error_envelope(self):
        response = TestClient(_app()).get("/unknown")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "data": None,
            "error": "Unknown category 'gallery'",
            "meta": {"category": "gallery"},
        }

    def test_status_code_from_class(self):
        response = TestClient(_app()).get("/quota")
        assert response.status_code == 507
        assert response.json()["meta"] is None

    def test_validation_error(self):
        response = TestClient(_app()).post("/body", json={"ids": "not-a-list"})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation error"
        assert body["meta"]["fields"][0]["field"].endswith("ids")

    def test_unhandled_error_is_generic(self):
        response = TestClient(_app(), raise_server_exceptions=False).get("/crash")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "secret" not in response.text
