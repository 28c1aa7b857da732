"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from fleetops.utils.config import (
    CONFIG_ENV_VAR,
    APIConfig,
    AppConfig,
    DatabaseConfig,
    OCRConfig,
    PreprocessingConfig,
    load_config,
)


class TestDatabaseConfig:
    """Tests for DatabaseConfig defaults."""

    def test_defaults(self) -> None:
        cfg = DatabaseConfig()
        assert cfg.url.startswith("sqlite:///")
        assert cfg.echo is False


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 3
        assert cfg.pdf_dpi == 300
        assert cfg.timeout_seconds == 30.0
        assert cfg.tesseract_cmd is None

    def test_custom_lang(self) -> None:
        cfg = OCRConfig(default_lang="fra", psm=6, timeout_seconds=5)
        assert cfg.default_lang == "fra"
        assert cfg.psm == 6
        assert cfg.timeout_seconds == 5.0


class TestPreprocessingConfig:
    def test_defaults(self) -> None:
        cfg = PreprocessingConfig()
        assert cfg.upscale_min_side == 1700
        assert cfg.denoise_enabled is True
        assert cfg.deskew_enabled is True
        assert cfg.binarize_enabled is False


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.database, DatabaseConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.preprocessing, PreprocessingConfig)
        assert isinstance(cfg.api, APIConfig)
        assert cfg.api.cors_origins == ["*"]
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            database=DatabaseConfig(url="sqlite://", echo=True),
            log_level="DEBUG",
        )
        assert cfg.database.echo is True
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_default_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"
        assert cfg.api.port == 8000

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "database": {"url": "sqlite:///tmp/test.db"},
            "ocr": {"default_lang": "deu", "psm": 6},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.database.url == "sqlite:///tmp/test.db"
        assert cfg.ocr.default_lang == "deu"
        assert cfg.ocr.psm == 6
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert isinstance(load_config(config_file), AppConfig)

    def test_env_var_selects_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "env.yaml"
        config_file.write_text("log_level: WARNING\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert load_config().log_level == "WARNING"

    def test_explicit_path_beats_env_var(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, "/nonexistent.yaml")
        config_file = tmp_path / "explicit.yaml"
        config_file.write_text("log_level: ERROR\n")
        assert load_config(config_file).log_level == "ERROR"
