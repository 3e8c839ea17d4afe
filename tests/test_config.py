import json
from pathlib import Path

from filecompare.config import AppConfig, dump_config, load_config
from filecompare.settings import Settings, _parse_bool, get_settings, prepare_config


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config.runtime.max_file_size_mb == 25
    assert config.runtime.worker.enabled is True
    assert config.compare.ignore_whitespace is True
    assert config.compare.ignore_empty_lines is False
    assert config.compare.case_sensitive is True
    assert config.history.limit == 50


def test_load_config_reads_sections(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[runtime]
output_dir = "out"
log_level = "DEBUG"
max_file_size_mb = 5
enable_local_api = true

[runtime.worker]
enabled = false
start_method = "forkserver"

[compare]
ignore_whitespace = false
case_sensitive = false

[history]
path = "out/history.json"
limit = 10

[api]
port = 9000
""",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.runtime.output_dir == Path("out")
    assert config.run_log_path == Path("out") / "log.jsonl"
    assert config.runtime.log_level == "DEBUG"
    assert config.runtime.enable_local_api is True
    assert config.runtime.worker.enabled is False
    assert config.runtime.worker.start_method == "forkserver"
    assert config.runtime.worker.poll_interval_s == 0.2
    assert config.compare.to_comparison_config().ignore_whitespace is False
    assert config.compare.case_sensitive is False
    assert config.history.limit == 10
    assert config.api.port == 9000
    assert config.api.host == "127.0.0.1"


def test_dump_config_is_json() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["runtime"]["worker"] == {"enabled": True, "start_method": "spawn", "poll_interval_s": 0.2}
    assert payload["history"]["limit"] == 50


def test_parse_bool() -> None:
    assert _parse_bool("Yes") is True
    assert _parse_bool("off") is False
    assert _parse_bool("maybe") is None
    assert _parse_bool(None) is None


def test_environment_overrides(monkeypatch, tmp_path: Path) -> None:
    path = tmp_path / "custom.toml"
    path.write_text("[runtime]\nenable_local_api = false\n", encoding="utf-8")
    monkeypatch.setenv("FILECOMPARE_CONFIG_PATH", str(path))
    monkeypatch.setenv("FILECOMPARE_ENABLE_LOCAL_API", "1")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.config_path == path
        assert prepare_config(settings).runtime.enable_local_api is True
    finally:
        get_settings.cache_clear()


def test_prepare_config_keeps_file_value_without_override(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[runtime]\nenable_local_api = true\n", encoding="utf-8")
    assert prepare_config(Settings(config_path=path)).runtime.enable_local_api is True
