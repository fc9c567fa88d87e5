"""
Tests for ServiceResult and BaseService.
"""

import pytest
from django.contrib.auth import get_user_model

from core.services import BaseService, ServiceResult


class TestServiceResult:
    def test_success(self):
        result = ServiceResult.success({"id": 1}, message="done")

        assert result.success is True
        assert bool(result) is True
        assert result.data == {"id": 1}
        assert result.to_response() == {"message": "done"}

    def test_success_without_message(self):
        assert ServiceResult.success(None).to_response() == {"message": "ok"}

    def test_failure(self):
        result = ServiceResult.failure(
            "Invoice not open",
            error_code="INVALID_STATE",
            errors={"state": ["must be open"]},
        )

        assert result.success is False
        assert bool(result) is False
        assert result.data is None
        assert result.to_response() == {
            "error": "Invoice not open",
            "error_code": "INVALID_STATE",
            "errors": {"state": ["must be open"]},
        }


class ExampleService(BaseService):
    pass


class TestBaseService:
    def test_logger_named_after_service(self):
        assert ExampleService.get_logger().name == f"{__name__}.ExampleService"

    def test_atomic_rolls_back_on_error(self, db):
        User = get_user_model()

        with pytest.raises(RuntimeError):
            with ExampleService.atomic():
                User.objects.create_user(email="rollback@example.com")
                raise RuntimeError("abort")

        assert not User.objects.filter(email="rollback@example.com").exists()
