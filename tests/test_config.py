"""Settings loading from files and environment."""

from __future__ import annotations

import json
import logging

import pytest

from gradelink.config import OutcomeServiceSettings, configure_logging, load_settings
from gradelink.integration.errors import LTIConfigurationError
from gradelink.integration.extensions.capabilities import OUTCOME_DATA_TYPES

pytestmark = pytest.mark.unit


def test_defaults():
    settings = OutcomeServiceSettings(consumer_key="k", consumer_secret="hunter2")

    assert settings.timeout_seconds == 10.0
    assert settings.verify_tls is True
    assert settings.log_level == "INFO"
    assert settings.outcome_data_values_accepted == list(OUTCOME_DATA_TYPES)
    assert settings.consumer_secret.get_secret_value() == "hunter2"
    assert "hunter2" not in repr(settings.consumer_secret)


def test_yaml_file(tmp_path):
    path = tmp_path / "gradelink.yaml"
    path.write_text(
        "consumer_key: k\n"
        "consumer_secret: s\n"
        "timeout_seconds: 3.5\n"
        "outcome_data_values_accepted: [text, url]\n"
    )

    settings = load_settings(path, environ={})

    assert settings.timeout_seconds == 3.5
    assert settings.outcome_data_values_accepted == ["text", "url"]


def test_json_file(tmp_path):
    path = tmp_path / "gradelink.json"
    path.write_text(json.dumps({"consumer_key": "k", "consumer_secret": "s", "verify_tls": False}))

    assert load_settings(path, environ={}).verify_tls is False


def test_toml_file_with_gradelink_table(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text(
        "[gradelink]\n"
        'consumer_key = "k"\n'
        'consumer_secret = "s"\n'
        'log_level = "debug"\n'
    )

    settings = load_settings(path, environ={})

    assert settings.consumer_key == "k"
    assert settings.log_level == "DEBUG"


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "gradelink.yml"
    path.write_text("consumer_key: from-file\nconsumer_secret: s\n")

    settings = load_settings(path, environ={
        "GRADELINK_CONSUMER_KEY": "from-env",
        "GRADELINK_TIMEOUT_SECONDS": "2",
        "GRADELINK_OUTCOME_DATA_VALUES_ACCEPTED": "url,date",
    })

    assert settings.consumer_key == "from-env"
    assert settings.timeout_seconds == 2.0
    assert settings.outcome_data_values_accepted == ["url", "date"]


def test_environment_only():
    settings = load_settings(environ={"GRADELINK_CONSUMER_KEY": "k", "GRADELINK_CONSUMER_SECRET": "s"})

    assert settings.consumer_key == "k"


@pytest.mark.parametrize(
    "environ",
    [
        {"GRADELINK_CONSUMER_SECRET": "s"},
        {"GRADELINK_CONSUMER_KEY": "", "GRADELINK_CONSUMER_SECRET": "s"},
        {"GRADELINK_CONSUMER_KEY": "k", "GRADELINK_CONSUMER_SECRET": "s", "GRADELINK_TIMEOUT_SECONDS": "0"},
        {"GRADELINK_CONSUMER_KEY": "k", "GRADELINK_CONSUMER_SECRET": "s", "GRADELINK_LOG_LEVEL": "chatty"},
    ],
)
def test_invalid_settings_raise(environ):
    with pytest.raises(LTIConfigurationError, match="Invalid outcome service settings"):
        load_settings(environ=environ)


def test_missing_file_raises(tmp_path):
    with pytest.raises(LTIConfigurationError, match="not found") as exc:
        load_settings(tmp_path / "absent.yaml", environ={})
    assert exc.value.context["path"].endswith("absent.yaml")


def test_malformed_file_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(LTIConfigurationError, match="Invalid configuration file"):
        load_settings(path, environ={})


def test_file_must_hold_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(LTIConfigurationError, match="mapping"):
        load_settings(path, environ={})


def test_configure_logging_sets_package_level():
    configure_logging(OutcomeServiceSettings(consumer_key="k", consumer_secret="s", log_level="warning"))

    assert logging.getLogger("gradelink").level == logging.WARNING

    configure_logging()
    assert logging.getLogger("gradelink").level == logging.INFO


@pytest.mark.parametrize("section", ["gradelink:\n", "gradelink: [a, b]\n", "gradelink: plain\n"])
def test_gradelink_section_must_be_mapping(tmp_path, section):
    path = tmp_path / "gradelink.yaml"
    path.write_text(section)

    with pytest.raises(LTIConfigurationError, match="must be a mapping") as exc:
        load_settings(path, environ={"GRADELINK_CONSUMER_KEY": "k", "GRADELINK_CONSUMER_SECRET": "s"})
    assert exc.value.context["path"] == str(path)
