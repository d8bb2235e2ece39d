from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from elscli.config import Config, OutputMode, Profile, loadConfig, parseConfig
from elscli.domain.error_codes import ErrorCode
from elscli.errors import ConfigError, InvalidOutputError, ProfileNotFoundError

FULL_CONFIG = """
[profiles.default]
maxAPITries = 3
output = "bodyOnly"
apiTimeoutSecs = 10
  [profiles.default.accessKey]
  email = "me@example.com"
  id = "AKID"
  secretAccessKey = "SECRET"
  expiryDate = "2030-01-01T00:00:00Z"

[profiles.staging]
apiUrl = "https://staging.example.com/v1"
"""


def test_new_profile_has_defaults():
    profile = Profile()
    assert profile.maxApiTries == 2
    assert profile.output == OutputMode.WHOLE_RESPONSE
    assert profile.apiTimeoutSecs == 30
    assert profile.accessKey is None


def test_zero_and_negative_values_are_defaulted():
    profile = Profile(maxApiTries=0, apiTimeoutSecs=-5)
    assert profile.maxApiTries == 2
    assert profile.apiTimeoutSecs == 30


def test_parse_full_profile():
    config = parseConfig(FULL_CONFIG, path="els-cli.toml")

    profile = config.resolveProfile("default")
    assert profile.maxApiTries == 3
    assert profile.output == OutputMode.BODY_ONLY
    assert profile.apiTimeoutSecs == 10
    assert profile.accessKey is not None
    assert profile.accessKey.id == "AKID"
    assert profile.accessKey.secretAccessKey == "SECRET"
    assert profile.accessKey.email == "me@example.com"
    assert profile.accessKey.expiryDate == datetime(2030, 1, 1, tzinfo=timezone.utc)


def test_parse_applies_defaults_to_sparse_profile():
    staging = parseConfig(FULL_CONFIG).resolveProfile("staging")
    assert staging.maxApiTries == 2
    assert staging.output == OutputMode.WHOLE_RESPONSE
    assert staging.apiUrl == "https://staging.example.com/v1"
    assert staging.accessKey is None


def test_keys_are_case_insensitive():
    config = parseConfig('[profiles.x]\nMaxApiTries = 5\nOUTPUT = "statusCodeOnly"\n')
    profile = config.resolveProfile("x")
    assert profile.maxApiTries == 5
    assert profile.output == OutputMode.STATUS_CODE_ONLY


def test_malformed_toml_raises_config_error():
    with pytest.raises(ConfigError) as exc:
        parseConfig("[profiles.default\nmaxAPITries = ", path="bad.toml")
    assert exc.value.code == ErrorCode.INVALID_CONFIG
    assert "bad.toml" in str(exc.value)


def test_invalid_output_in_profile():
    with pytest.raises(InvalidOutputError):
        parseConfig('[profiles.default]\noutput = "everything"\n')


def test_missing_default_profile_is_tolerated():
    profile = Config().resolveProfile("default")
    assert profile == Profile()


def test_missing_named_profile_is_an_error():
    with pytest.raises(ProfileNotFoundError) as exc:
        Config().resolveProfile("prod")
    assert exc.value.code == ErrorCode.PROFILE_NOT_FOUND


def test_with_output_overrides_profile():
    profile = Profile(output=OutputMode.BODY_ONLY)
    assert profile.withOutput(None) is profile
    assert profile.withOutput("statusCodeOnly").output == OutputMode.STATUS_CODE_ONLY
    with pytest.raises(InvalidOutputError):
        profile.withOutput("nope")


def test_load_config_missing_file_is_empty(tmp_path: Path):
    config = loadConfig(str(tmp_path / "missing.toml"))
    assert config.profiles == {}


def test_load_config_reads_file(tmp_path: Path):
    path = tmp_path / "els-cli.toml"
    path.write_text(FULL_CONFIG, encoding="utf-8")
    config = loadConfig(str(path))
    assert set(config.profiles) == {"default", "staging"}
    assert config.path == str(path)


def test_load_config_non_utf8_file_raises_config_error(tmp_path: Path):
    path = tmp_path / "els-cli.toml"
    path.write_bytes(b'[profiles.default]\noutput = "\xff"\n')

    with pytest.raises(ConfigError) as exc:
        loadConfig(str(path))

    assert exc.value.code == ErrorCode.INVALID_CONFIG
    assert "Invalid TOML" in str(exc.value)
    assert str(path) in str(exc.value)
