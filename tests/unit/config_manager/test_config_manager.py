from pathlib import Path

import pytest
from pydantic import ValidationError

from partstream.config_manager.config import ConfigManager
from partstream.exceptions import ConfigLoadError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PARTSTREAM_CONFIG",
        "PARTSTREAM_MAX_PART_SIZE",
        "PARTSTREAM_CONCURRENT_PARTS",
        "PARTSTREAM_ENDPOINT_URL",
        "PARTSTREAM_REGION",
    ):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "partstream.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_resolve_without_file_uses_defaults() -> None:
    config = ConfigManager().resolve()

    assert config.concurrent_parts == 1
    assert config.endpoint_url is None


def test_file_values_are_loaded(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        "max_part_size: 16mb\n"
        "concurrent_parts: 4\n"
        "upload_options:\n"
        "  ContentType: application/gzip\n",
    )

    config = ConfigManager(path).resolve()

    assert config.max_part_size == 16 * 1024 * 1024
    assert config.concurrent_parts == 4
    assert config.upload_options == {"ContentType": "application/gzip"}


def test_config_path_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = write_config(tmp_path, "concurrent_parts: 3\n")
    monkeypatch.setenv("PARTSTREAM_CONFIG", str(path))

    assert ConfigManager().resolve().concurrent_parts == 3


def test_env_overrides_file_and_kwargs_override_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = write_config(tmp_path, "concurrent_parts: 2\nmax_part_size: 8mb\n")
    monkeypatch.setenv("PARTSTREAM_CONCURRENT_PARTS", "6")
    monkeypatch.setenv("PARTSTREAM_MAX_PART_SIZE", "32mb")
    monkeypatch.setenv("PARTSTREAM_ENDPOINT_URL", "http://minio:9000")

    config = ConfigManager(path).resolve(concurrent_parts=10, region_name=None)

    assert config.concurrent_parts == 10
    assert config.max_part_size == 32 * 1024 * 1024
    assert config.endpoint_url == "http://minio:9000"
    assert config.region_name is None


def test_unparseable_env_values_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARTSTREAM_CONCURRENT_PARTS", "many")
    monkeypatch.setenv("PARTSTREAM_MAX_PART_SIZE", "huge")

    config = ConfigManager().resolve()

    assert config.concurrent_parts == 1
    assert config.max_part_size == 5 * 1024 * 1024


def test_missing_file_raises_config_load_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        ConfigManager(tmp_path / "absent.yaml").resolve()


def test_malformed_yaml_raises_config_load_error(tmp_path: Path) -> None:
    path = write_config(tmp_path, "concurrent_parts: [1, 2\n")

    with pytest.raises(ConfigLoadError):
        ConfigManager(path).resolve()


def test_non_mapping_yaml_raises_config_load_error(tmp_path: Path) -> None:
    path = write_config(tmp_path, "- just\n- a list\n")

    with pytest.raises(ConfigLoadError, match="mapping"):
        ConfigManager(path).resolve()


def test_invalid_values_raise_validation_error(tmp_path: Path) -> None:
    path = write_config(tmp_path, "max_part_size: 1mb\n")

    with pytest.raises(ValidationError):
        ConfigManager(path).resolve()
