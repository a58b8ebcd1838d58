import pytest

from chat_proxy.config import ProxyConfig, Settings


def test_defaults(monkeypatch):
    for var in ("DEEPSEEK_API_KEY", "DEEPSEEK_API_URL", "DEEPSEEK_MODEL"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)

    cfg = s.proxy_config()
    assert cfg.api_key is None
    assert cfg.base_url == "https://api.deepseek.com"
    assert cfg.model == "deepseek-chat"
    assert cfg.temperature == 0.7
    assert cfg.max_tokens == 2000
    assert cfg.default_system_prompt == "You are a helpful assistant."


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-env")
    monkeypatch.setenv("DEEPSEEK_API_URL", "https://proxy.example.com/")
    monkeypatch.setenv("DEEPSEEK_MODEL", "deepseek-reasoner")

    cfg = Settings(_env_file=None).proxy_config()
    assert cfg.api_key == "sk-env"
    assert cfg.model == "deepseek-reasoner"
    assert cfg.completions_url == "https://proxy.example.com/v1/chat/completions"


def test_empty_key_counts_as_missing():
    cfg = Settings(_env_file=None, DEEPSEEK_API_KEY="").proxy_config()
    assert cfg.api_key is None


def test_proxy_config_is_immutable():
    cfg = ProxyConfig(api_key="k", base_url="https://x", model="m")
    with pytest.raises(AttributeError):
        cfg.model = "other"
