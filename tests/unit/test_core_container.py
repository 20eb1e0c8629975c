"""Unit tests for the container package.

Tests cover:
- get_redis_client() builds a pooled client from settings
- get_logger() selects the renderer by environment
- get_admission_controller() wiring and singleton pattern

Note:
    Factories use local imports, so patches target the import location
    (e.g., redis.asyncio.ConnectionPool), not the container module.
"""

from unittest.mock import MagicMock, patch

import pytest

from gatekeeper.core.config import Settings
from gatekeeper.core.container import (
    get_admission_controller,
    get_event_bus,
    get_logger,
    get_procedure_executor,
    get_redis_client,
)
from gatekeeper.infrastructure.admission import AdmissionController


@pytest.fixture(autouse=True)
def clear_container_caches():
    factories = (
        get_redis_client,
        get_logger,
        get_event_bus,
        get_procedure_executor,
        get_admission_controller,
    )
    for factory in factories:
        factory.cache_clear()
    yield
    for factory in factories:
        factory.cache_clear()


@pytest.mark.unit
class TestGetRedisClient:
    """Test get_redis_client() container function."""

    def test_builds_pool_from_settings(self):
        with patch("gatekeeper.core.container.infrastructure.settings") as mock_settings:
            mock_settings.redis_url = "redis://cache:6379/2"
            mock_settings.redis_max_connections = 7
            mock_settings.redis_socket_timeout = 1.5

            with patch("redis.asyncio.ConnectionPool") as mock_pool_cls:
                with patch("redis.asyncio.Redis") as mock_redis_cls:
                    mock_pool = MagicMock()
                    mock_pool_cls.from_url.return_value = mock_pool

                    client = get_redis_client()

                    call_args = mock_pool_cls.from_url.call_args
                    assert call_args[0][0] == "redis://cache:6379/2"
                    assert call_args[1]["max_connections"] == 7
                    assert call_args[1]["decode_responses"] is False
                    assert call_args[1]["socket_timeout"] == 1.5
                    mock_redis_cls.assert_called_once_with(connection_pool=mock_pool)
                    assert client is mock_redis_cls.return_value


@pytest.mark.unit
class TestGetLogger:
    @pytest.mark.parametrize(
        ("is_development", "use_json"),
        [(True, False), (False, True)],
    )
    def test_renderer_follows_environment(self, is_development, use_json):
        with patch("gatekeeper.core.container.infrastructure.settings") as mock_settings:
            mock_settings.is_development = is_development
            mock_settings.log_level = "DEBUG"
            mock_settings.app_name = "Gatekeeper"
            mock_settings.environment.value = "testing"

            with patch(
                "gatekeeper.infrastructure.logging.console_adapter.ConsoleAdapter"
            ) as mock_adapter_cls:
                logger = get_logger()

                mock_adapter_cls.assert_called_once_with(use_json=use_json, level="DEBUG")
                mock_adapter_cls.return_value.bind.assert_called_once_with(
                    app="Gatekeeper", environment="testing"
                )
                assert logger is mock_adapter_cls.return_value.bind.return_value


@pytest.mark.unit
class TestGetAdmissionController:
    """Test get_admission_controller() wiring."""

    def _patch_settings(self, settings: Settings):
        return patch("gatekeeper.core.container.admission.settings", settings)

    def test_wires_controller_from_settings(self):
        settings = Settings(
            admission_namespace="gw",
            free_requests_per_minute=3,
            warn_percentage=50,
        )

        with self._patch_settings(settings):
            with patch(
                "gatekeeper.core.container.admission.get_redis_client",
                return_value=MagicMock(),
            ):
                controller = get_admission_controller()

        assert isinstance(controller, AdmissionController)
        assert controller.rule_for("free").limit == 3
        assert controller.rule_for("enterprise").enabled is False
        assert controller._keys.namespace == "gw"
        assert controller._warn_percentage == 50

    def test_singleton_and_shared_executor(self):
        with patch(
            "gatekeeper.core.container.admission.get_redis_client",
            return_value=MagicMock(),
        ):
            first = get_admission_controller()
            second = get_admission_controller()
            executor = get_procedure_executor()

        assert first is second
        assert first._executor is executor
        assert first._limiter._executor is executor
        assert first._bans._executor is executor
