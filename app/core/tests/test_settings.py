"""
Tests for the environment-driven settings module.
"""

from config import settings as project_settings


class TestStripeSettings:
    def test_only_server_side_keys_are_configured(self):
        stripe_settings = {
            name for name in dir(project_settings) if name.startswith("STRIPE_")
        }

        assert stripe_settings == {
            "STRIPE_SECRET_KEY",
            "STRIPE_WEBHOOK_SECRET",
            "STRIPE_API_TIMEOUT_SECONDS",
        }

    def test_timeout_is_an_int(self):
        assert isinstance(project_settings.STRIPE_API_TIMEOUT_SECONDS, int)


class TestLoggingSettings:
    def test_payments_logger_propagates_to_root(self):
        payments_logger = project_settings.LOGGING["loggers"]["payments"]

        assert payments_logger.get("propagate", True) is True
        assert "handlers" not in payments_logger
