import pytest

from utils.runtime import max_upload_bytes, report_timeout_sec, session_slug


def test_defaults(monkeypatch):
    monkeypatch.delenv("TRANSFER_WIZARD_MAX_UPLOAD_BYTES", raising=False)
    monkeypatch.delenv("TRANSFER_WIZARD_REPORT_TIMEOUT_SEC", raising=False)
    assert max_upload_bytes() == 5 * 1024 * 1024
    assert report_timeout_sec() == 60


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TRANSFER_WIZARD_MAX_UPLOAD_BYTES", " 2048 ")
    monkeypatch.setenv("TRANSFER_WIZARD_REPORT_TIMEOUT_SEC", "5")
    assert max_upload_bytes() == 2048
    assert report_timeout_sec() == 5


@pytest.mark.parametrize("raw", ["abc", "0", "-1"])
def test_bad_env_values(monkeypatch, raw):
    monkeypatch.setenv("TRANSFER_WIZARD_MAX_UPLOAD_BYTES", raw)
    with pytest.raises(ValueError):
        max_upload_bytes()


def test_session_slug(monkeypatch):
    monkeypatch.delenv("TRANSFER_WIZARD_SLUG", raising=False)
    assert session_slug("given") == "given"
    generated = session_slug()
    assert len(generated.split("_")) == 2
    monkeypatch.setenv("TRANSFER_WIZARD_SLUG", "from-env")
    assert session_slug("given") == "from-env"
