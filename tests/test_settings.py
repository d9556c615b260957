from __future__ import annotations

import pytest

from tale_weaver.common import (
    DEFAULT_PLACEHOLDER_IMAGE_URL,
    ConfigurationError,
    TaleWeaverSettings,
)


def test_from_env_defaults():
    settings = TaleWeaverSettings.from_env()

    assert settings == TaleWeaverSettings()
    assert settings.placeholder_image_url == DEFAULT_PLACEHOLDER_IMAGE_URL
    assert settings.max_concurrent_illustrations == 4
    assert settings.storage_backend == "local"


def test_from_env_reads_overrides(monkeypatch):
    for name, value in {
        "TALE_WEAVER_API_KEY": "primary",
        "OPENROUTER_API_KEY": "secondary",
        "TALE_WEAVER_STORY_MODEL": "openai/gpt-4.1-mini",
        "LITELLM_IMAGE_MODEL": "gemini/gemini-2.5-flash-image",
        "TALE_WEAVER_REQUEST_TIMEOUT": "15",
        "TALE_WEAVER_MAX_CONCURRENT_ILLUSTRATIONS": "2",
        "TALE_WEAVER_STORAGE_BACKEND": "S3",
        "TALE_WEAVER_STORAGE_BUCKET": "books",
        "AWS_DEFAULT_REGION": "eu-central-1",
    }.items():
        monkeypatch.setenv(name, value)

    settings = TaleWeaverSettings.from_env()

    assert settings.api_key == "primary"
    assert settings.story_model == "openai/gpt-4.1-mini"
    assert settings.image_model == "gemini/gemini-2.5-flash-image"
    assert settings.request_timeout == 15.0
    assert settings.max_concurrent_illustrations == 2
    assert settings.storage_backend == "s3"
    assert settings.storage_bucket == "books"
    assert settings.storage_region == "eu-central-1"


def test_from_env_falls_back_through_key_names(monkeypatch):
    monkeypatch.setenv("TALE_WEAVER_API_KEY", "")
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")

    assert TaleWeaverSettings.from_env().api_key == "or-key"


def test_explicit_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("TALE_WEAVER_REQUEST_TIMEOUT", "15")

    settings = TaleWeaverSettings.from_env(request_timeout=5.0, api_key="key")

    assert settings.request_timeout == 5.0
    assert settings.api_key == "key"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("TALE_WEAVER_REQUEST_TIMEOUT", "soon"),
        ("TALE_WEAVER_REQUEST_TIMEOUT", "0"),
        ("TALE_WEAVER_ILLUSTRATION_TIMEOUT", "-5"),
        ("TALE_WEAVER_MAX_CONCURRENT_ILLUSTRATIONS", "0"),
        ("TALE_WEAVER_MAX_CONCURRENT_ILLUSTRATIONS", "many"),
        ("TALE_WEAVER_STORAGE_BACKEND", "ftp"),
        ("TALE_WEAVER_PLACEHOLDER_IMAGE_URL", "   "),
    ],
)
def test_from_env_rejects_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        TaleWeaverSettings.from_env()


def test_s3_backend_requires_bucket():
    with pytest.raises(ConfigurationError):
        TaleWeaverSettings.from_env(storage_backend="s3", storage_bucket=" ")


def test_direct_construction_rejects_blank_placeholder():
    with pytest.raises(ValueError):
        TaleWeaverSettings(placeholder_image_url=" ")


def test_settings_are_immutable():
    settings = TaleWeaverSettings()

    with pytest.raises(ValueError):
        settings.max_concurrent_illustrations = 8
