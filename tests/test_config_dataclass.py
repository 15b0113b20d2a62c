"""Tests for the typed AppConfig dataclasses."""

from studio_actions.config import CONFIG, AppConfig, GuardConfig, SanityConfig


class TestSanityConfig:
    def test_defaults(self):
        c = SanityConfig()
        assert c.dataset == "production"
        assert c.api_version == "2024-01-01"
        assert c.is_configured is False

    def test_configured(self):
        c = SanityConfig(project_id="p", token="t")
        assert c.is_configured is True

    def test_partial(self):
        assert SanityConfig(project_id="p").is_configured is False


class TestGuardConfig:
    def test_defaults(self):
        c = GuardConfig()
        assert c.max_query_length == 5000
        assert c.max_result_bytes == 1_000_000


class TestAppConfig:
    def test_defaults(self):
        c = AppConfig()
        assert c.port == 3000
        assert c.store_backend == "sanity"
        assert isinstance(c.sanity, SanityConfig)
        assert isinstance(c.guard, GuardConfig)

    def test_from_env(self):
        c = AppConfig.from_env()
        assert c.store_backend in ("sanity", "json")
        assert c.guard.max_query_length == CONFIG["max_query_length"]
        assert c.sanity.dataset == CONFIG["sanity_dataset"]

    def test_custom(self):
        c = AppConfig(store_backend="json", remote_api_secret="x", guard=GuardConfig(max_query_length=10))
        assert c.store_backend == "json"
        assert c.guard.max_query_length == 10
