"""
Tests for the base exception hierarchy.
"""

from core.exceptions import BaseApplicationError, ConflictError
from payments.exceptions import InvalidStateTransitionError, PaymentError


class TestBaseApplicationError:
    def test_defaults(self):
        error = BaseApplicationError("Something broke")

        assert error.message == "Something broke"
        assert error.error_code == "APPLICATION_ERROR"
        assert error.details == {}

    def test_to_dict_includes_details_when_present(self):
        error = ConflictError(
            "Task already assigned",
            error_code="TASK_ALREADY_ASSIGNED",
            details={"task_id": "t-1"},
        )

        assert error.to_dict() == {
            "error": "Task already assigned",
            "error_code": "TASK_ALREADY_ASSIGNED",
            "details": {"task_id": "t-1"},
        }

    def test_to_dict_omits_empty_details(self):
        assert "details" not in ConflictError("Duplicate").to_dict()

    def test_str_includes_code(self):
        assert str(ConflictError("Duplicate")) == "[CONFLICT] Duplicate"

    def test_domain_errors_share_base(self):
        for cls in (ConflictError, PaymentError, InvalidStateTransitionError):
            assert issubclass(cls, BaseApplicationError)
        assert issubclass(InvalidStateTransitionError, ConflictError)
