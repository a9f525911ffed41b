import pytest
from pydantic import ValidationError

from core.config import AppSettings, write_user_env_vars


def test_defaults(monkeypatch):
    for name in ("SUB2TENANT_MAX_CONCURRENCY", "SUB2TENANT_ISSUER_HOSTS", "SUB2TENANT_ARM_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    settings = AppSettings(_env_file=None)
    assert settings.max_concurrency == 10
    assert settings.issuer_hosts == ["login.windows.net", "login.microsoftonline.com"]
    assert settings.arm_base_url == "https://management.azure.com"


def test_env_overrides_with_comma_separated_hosts(monkeypatch):
    monkeypatch.setenv("SUB2TENANT_ISSUER_HOSTS", "Login.Microsoftonline.US, https://login.chinacloudapi.cn/")
    monkeypatch.setenv("SUB2TENANT_MAX_CONCURRENCY", "3")
    monkeypatch.setenv("SUB2TENANT_ARM_BASE_URL", "https://management.usgovcloudapi.net/")
    settings = AppSettings(_env_file=None)
    assert settings.issuer_hosts == ["login.microsoftonline.us", "login.chinacloudapi.cn"]
    assert settings.max_concurrency == 3
    assert settings.arm_base_url == "https://management.usgovcloudapi.net"


@pytest.mark.parametrize("kwargs", [{"max_concurrency": 0}, {"issuer_hosts": " , "}, {"http_timeout_seconds": 0}])
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, **kwargs)


def test_write_user_env_vars_merges_existing(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    write_user_env_vars({"SUB2TENANT_MAX_CONCURRENCY": "4"}, env_path=env_path)
    write_user_env_vars({"SUB2TENANT_ISSUER_HOSTS": "login.windows.net"}, env_path=env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert "SUB2TENANT_MAX_CONCURRENCY=4" in lines
    assert "SUB2TENANT_ISSUER_HOSTS=login.windows.net" in lines
