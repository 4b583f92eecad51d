from nova_shell.config import ShellConfig


def test_defaults_point_at_local_store():
    cfg = ShellConfig.default()
    assert cfg.database.dsn == "sqlite:///nova_shell.db"
    assert cfg.client.base_url == "http://localhost:3000"
    assert cfg.desktop.taskbar_height == 48


def test_environment_overrides():
    cfg = ShellConfig.from_env(
        {
            "NOVA_SHELL_DATABASE_URL": "sqlite://",
            "NOVA_SHELL_CORS_ORIGINS": "http://a.test, http://b.test,",
            "NOVA_SHELL_BASE_URL": "http://store:3000",
            "NOVA_SHELL_LOG_LEVEL": "debug",
        }
    )
    assert cfg.database.dsn == "sqlite://"
    assert cfg.api.cors_origins == ["http://a.test", "http://b.test"]
    assert cfg.client.base_url == "http://store:3000"
    assert cfg.observability.log_level == "DEBUG"


def test_empty_environment_keeps_defaults():
    cfg = ShellConfig.from_env({})
    assert cfg.api.cors_origins == ["*"]
