"""Tests for TOML config loader."""

from pathlib import Path

from phaseguide.infrastructure.config.toml_loader import _apply_env_overrides, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(self):
        """Repository config/default.toml provides every section."""
        config = load_config()

        assert config.server.port == 8000
        assert config.workflows.default == "waterfall"
        assert config.workflows.domains == []
        assert config.persistence.state_dir == ".vibe"
        assert config.persistence.database_file == "conversation-state.sqlite"

    def test_missing_dir_uses_model_defaults(self, tmp_path: Path):
        config = load_config(tmp_path)

        assert config.workflows.default == "waterfall"
        assert config.log_level == "INFO"

    def test_loads_from_custom_dir(self, tmp_path: Path):
        (tmp_path / "default.toml").write_text(
            """
[server]
port = 9999

[workflows]
default = "epcc"
domains = ["code", "office"]

[logging]
level = "DEBUG"
file = "logs/phaseguide.log"
""",
            encoding="utf-8",
        )

        config = load_config(tmp_path)

        assert config.server.port == 9999
        assert config.workflows.default == "epcc"
        assert config.workflows.domains == ["code", "office"]
        assert config.log_level == "DEBUG"
        assert config.log_file == "logs/phaseguide.log"

    def test_merges_development_config(self, tmp_path: Path):
        """Merges development.toml over default.toml per section."""
        (tmp_path / "default.toml").write_text(
            '[workflows]\ndefault = "waterfall"\ndomains = ["code"]\n', encoding="utf-8"
        )
        (tmp_path / "development.toml").write_text(
            '[workflows]\ndefault = "minor"\n', encoding="utf-8"
        )

        config = load_config(tmp_path)

        assert config.workflows.default == "minor"
        assert config.workflows.domains == ["code"]


class TestEnvOverrides:
    def test_port_and_rate_limit(self, monkeypatch):
        monkeypatch.setenv("PORT", "8123")
        monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "7")

        result = _apply_env_overrides({})

        assert result["server"]["port"] == 8123
        assert result["security"]["rate_limit_requests_per_minute"] == 7

    def test_invalid_port_ignored(self, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-number")

        assert "server" not in _apply_env_overrides({})

    def test_workflow_overrides(self, monkeypatch):
        monkeypatch.setenv("VIBE_WORKFLOW_DOMAINS", "code, office ,")
        monkeypatch.setenv("VIBE_DEFAULT_WORKFLOW", "bugfix")
        monkeypatch.setenv("VIBE_WORKFLOWS_DIR", "/opt/workflows")

        workflows = _apply_env_overrides({})["workflows"]

        assert workflows == {
            "domains": ["code", "office"],
            "default": "bugfix",
            "bundled_dir": "/opt/workflows",
        }

    def test_empty_domains_env_clears_allow_list(self, monkeypatch):
        monkeypatch.setenv("VIBE_WORKFLOW_DOMAINS", "")

        result = _apply_env_overrides({"workflows": {"domains": ["office"]}})

        assert result["workflows"]["domains"] == []

    def test_cors_origins_split(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

        assert _apply_env_overrides({})["security"]["cors_origins"] == ["http://a.test", "http://b.test"]
