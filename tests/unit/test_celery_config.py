"""Unit tests for Celery configuration.

Tests Celery instance initialization, broker and backend URL construction
from Redis settings, and serialization settings.
"""

import os
from typing import Generator

import pytest


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Fixture to clean environment variables before and after tests."""
    original_env = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(original_env)


def make_valid_env() -> dict[str, str]:
    """Create a complete valid environment configuration."""
    return {
        "POSTGRES_HOST": "localhost",
        "POSTGRES_PORT": "5432",
        "POSTGRES_USER": "testuser",
        "POSTGRES_PASSWORD": "testpass",
        "POSTGRES_DB": "testdb",
        "REDIS_HOST": "redis-test",
        "REDIS_PORT": "6380",
        "SECRET_KEY": "test-secret-key",
        "DEBUG": "false",
    }


class TestCeleryInstanceInitialization:
    def test_celery_app_has_unique_application_name(self) -> None:
        from banqa.core.celery_app import celery_app

        assert celery_app.main == "banqa_worker"

    def test_celery_app_is_celery_instance(self) -> None:
        from celery import Celery
        from banqa.core.celery_app import celery_app

        assert isinstance(celery_app, Celery)

    def test_tasks_are_registered_by_name(self) -> None:
        from banqa.core.celery_app import celery_app
        import banqa.worker  # noqa: F401

        assert "send_email_notification" in celery_app.tasks
        assert "audit_log_transaction" in celery_app.tasks


class TestCeleryConfigurationLoading:
    def test_celery_broker_url_uses_redis_settings(self, clean_env: None) -> None:
        from banqa.core.config import Settings

        env = make_valid_env()
        os.environ.update(env)

        settings = Settings(_env_file=None)

        assert settings.celery_broker_url == f"redis://{env['REDIS_HOST']}:{env['REDIS_PORT']}/0"

    def test_celery_result_backend_uses_redis_settings(self, clean_env: None) -> None:
        from banqa.core.config import Settings

        env = make_valid_env()
        os.environ.update(env)

        settings = Settings(_env_file=None)

        assert settings.celery_result_backend == f"redis://{env['REDIS_HOST']}:{env['REDIS_PORT']}/0"

    def test_celery_uses_default_redis_when_not_specified(self, clean_env: None) -> None:
        from banqa.core.config import Settings

        os.environ.pop("REDIS_HOST", None)
        os.environ.pop("REDIS_PORT", None)

        settings = Settings(_env_file=None)

        assert settings.celery_broker_url == "redis://localhost:6379/0"
        assert settings.celery_result_backend == "redis://localhost:6379/0"


class TestCelerySerializationSettings:
    def test_task_serializer_is_json(self) -> None:
        from banqa.core.celery_app import celery_app

        assert celery_app.conf.task_serializer == "json"

    def test_result_serializer_is_json(self) -> None:
        from banqa.core.celery_app import celery_app

        assert celery_app.conf.result_serializer == "json"

    def test_accept_content_includes_json(self) -> None:
        from banqa.core.celery_app import celery_app

        assert "json" in celery_app.conf.accept_content


class TestCeleryAdditionalSettings:
    def test_timezone_is_utc(self) -> None:
        from banqa.core.celery_app import celery_app

        assert celery_app.conf.timezone == "UTC"
        assert celery_app.conf.enable_utc is True

    def test_task_limits_are_set(self) -> None:
        from banqa.core.celery_app import celery_app

        assert celery_app.conf.task_track_started is True
        assert celery_app.conf.task_time_limit == 300
        assert celery_app.conf.result_expires == 3600
