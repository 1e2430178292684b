"""Property-based tests for configuration service."""

import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from compactgui_browser.models import FALLBACK_DATABASE_URL, PRIMARY_DATABASE_URL, AppConfig
from compactgui_browser.services import ConfigurationService, ErrorCategory, get_error_service


# Strategies for generating valid configuration data
valid_urls = st.sampled_from([
    PRIMARY_DATABASE_URL,
    FALLBACK_DATABASE_URL,
    "https://mirror.example.com/database.json",
    "http://localhost:8000/database.json",
])

valid_paths = st.builds(
    lambda x: Path.home() / "test" / x,
    st.text(min_size=1, max_size=50, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")))
)

valid_ttl = st.floats(min_value=0.01, max_value=24 * 30, allow_nan=False, allow_infinity=False)
valid_timeout = st.floats(min_value=0.1, max_value=300.0, allow_nan=False, allow_infinity=False)
valid_page_sizes = st.sampled_from([12, 24, 48, 96])
valid_debounce = st.integers(min_value=0, max_value=5000)
valid_log_levels = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

valid_config_strategy = st.builds(
    AppConfig,
    primary_url=valid_urls,
    fallback_url=valid_urls,
    storage_path=valid_paths,
    cache_ttl_hours=valid_ttl,
    request_timeout=valid_timeout,
    page_size=valid_page_sizes,
    search_debounce_ms=valid_debounce,
    log_level=valid_log_levels,
)


def _valid_config(**changes: object) -> AppConfig:
    values: dict[str, object] = {
        "primary_url": PRIMARY_DATABASE_URL,
        "fallback_url": FALLBACK_DATABASE_URL,
        "storage_path": Path.home() / ".local" / "share" / "compactgui-browser",
    }
    values.update(changes)
    return AppConfig(**values)  # type: ignore[arg-type]


def _write_config(path: Path, config: AppConfig) -> None:
    data = {
        "primary_url": config.primary_url,
        "fallback_url": config.fallback_url,
        "storage_path": str(config.storage_path),
        "cache_ttl_hours": config.cache_ttl_hours,
        "request_timeout": config.request_timeout,
        "page_size": config.page_size,
        "search_debounce_ms": config.search_debounce_ms,
        "log_level": config.log_level,
    }
    path.write_text(json.dumps(data), encoding="utf-8")


@given(valid_config_strategy)
def test_configuration_round_trip(config: AppConfig) -> None:
    """For any valid configuration file, loading it preserves all values."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "test_config.json"
        service = ConfigurationService(config_path)

        _write_config(config_path, config)
        loaded_config = service.load_config()

        assert loaded_config == config


def test_configuration_round_trip_example(tmp_path: Path) -> None:
    config = _valid_config(cache_ttl_hours=6.0, page_size=48, log_level="DEBUG")
    _write_config(tmp_path / "config.json", config)

    assert ConfigurationService(tmp_path / "config.json").load_config() == config


def create_invalid_config_strategy() -> st.SearchStrategy[AppConfig]:
    """Create strategy for invalid but constructible configs."""
    return st.one_of(
        # Non-http(s) source URLs
        st.builds(_valid_config, primary_url=st.sampled_from(["", "ftp://example.com/db.json", "database.json"])),
        st.builds(_valid_config, fallback_url=st.sampled_from(["file:///tmp/db.json", "not a url"])),

        # Relative storage paths
        st.builds(
            _valid_config,
            storage_path=st.builds(
                Path,
                st.text(min_size=1, max_size=10, alphabet=st.characters(whitelist_categories=("Lu", "Ll"))),
            ),
        ),

        # Non-positive cache TTL
        st.builds(_valid_config, cache_ttl_hours=st.floats(max_value=0.0, allow_nan=False, allow_infinity=False)),

        # Request timeout out of range
        st.builds(
            _valid_config,
            request_timeout=st.one_of(
                st.floats(max_value=0.0, allow_nan=False, allow_infinity=False),
                st.floats(min_value=301.0, max_value=10_000.0),
            ),
        ),

        # Page size not offered
        st.builds(_valid_config, page_size=st.integers().filter(lambda x: x not in (12, 24, 48, 96))),

        # Debounce out of range
        st.builds(
            _valid_config,
            search_debounce_ms=st.one_of(st.integers(max_value=-1), st.integers(min_value=5001)),
        ),

        # Invalid log level
        st.builds(
            _valid_config,
            log_level=st.text(min_size=1).filter(lambda x: x not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        ),
    )


@given(create_invalid_config_strategy())
def test_configuration_validation_rejects_invalid(config: AppConfig) -> None:
    """Invalid configurations are rejected with error messages."""
    service = ConfigurationService()
    result = service.validate_config(config)

    assert not result.is_valid
    assert len(result.errors) > 0
    assert all(isinstance(error, str) for error in result.errors)


@given(valid_config_strategy)
def test_configuration_validation_accepts_valid(config: AppConfig) -> None:
    service = ConfigurationService()
    result = service.validate_config(config)

    assert result.is_valid
    assert len(result.errors) == 0


def test_configuration_validation_examples() -> None:
    service = ConfigurationService()

    result = service.validate_config(service.get_default_config())
    assert result.is_valid

    result = service.validate_config(_valid_config(page_size=10))
    assert not result.is_valid
    assert "page_size must be one of: 12, 24, 48, 96" in result.errors


def test_default_config() -> None:
    config = ConfigurationService().get_default_config()

    assert config.primary_url == PRIMARY_DATABASE_URL
    assert config.fallback_url == FALLBACK_DATABASE_URL
    assert config.cache_ttl_hours == 24.0
    assert config.page_size == 24
    assert config.search_debounce_ms == 300


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    service = ConfigurationService(tmp_path / "missing.json")

    assert service.load_config() == service.get_default_config()


@pytest.mark.parametrize(
    "content",
    [
        "{broken json",
        json.dumps({"page_size": 7}),
        json.dumps({"primary_url": "ftp://example.com"}),
    ],
)
def test_invalid_file_uses_defaults(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(content, encoding="utf-8")
    service = ConfigurationService(config_path)

    assert service.load_config() == service.get_default_config()


def test_partial_file_fills_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"page_size": 96, "log_level": "debug"}), encoding="utf-8")
    service = ConfigurationService(config_path)

    config = service.load_config()

    assert config.page_size == 96
    assert config.log_level == "DEBUG"
    assert config.primary_url == PRIMARY_DATABASE_URL


def test_invalid_file_is_reported_as_configuration_error(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    _write_config(config_path, _valid_config(request_timeout=0))

    config = ConfigurationService(config_path).load_config()

    assert config.request_timeout == 30.0
    error = get_error_service().get_recent_errors(1)[0]
    assert error.category == ErrorCategory.CONFIGURATION
    assert "request_timeout must be a positive number" in error.message
