import base64

import pytest
import yaml

from kubealertbot.kube_config import (
    ClusterConfig,
    load_config,
    load_incluster_config,
    load_kubeconfig,
)


def _write(tmp_path, **overrides):
    doc = {
        "current-context": "main",
        "contexts": [
            {"name": "main", "context": {"cluster": "c1", "user": "u1", "namespace": "apps"}},
            {"name": "other", "context": {"cluster": "c2", "user": "u2"}},
        ],
        "clusters": [
            {
                "name": "c1",
                "cluster": {
                    "server": "https://one.example.com",
                    "certificate-authority-data": base64.b64encode(b"CA-BYTES").decode(),
                },
            },
            {"name": "c2", "cluster": {"server": "https://two.example.com", "insecure-skip-tls-verify": True}},
        ],
        "users": [
            {"name": "u1", "user": {"token": "token"}},
            {"name": "u2", "user": {"tokenFile": "tok.txt"}},
        ],
    }
    doc.update(overrides)
    path = tmp_path / "config"
    path.write_text(yaml.safe_dump(doc))
    return path


def test_current_context(tmp_path):
    cfg = load_kubeconfig(_write(tmp_path))
    assert cfg.server == "https://one.example.com"
    assert cfg.token == "token"
    assert cfg.namespace == "apps"
    assert cfg.ca_data == b"CA-BYTES"


def test_named_context_with_relative_token_file(tmp_path):
    (tmp_path / "tok.txt").write_text("token\n")
    cfg = load_kubeconfig(_write(tmp_path), context="other")
    assert cfg.server == "https://two.example.com"
    assert cfg.token == "token"
    assert cfg.insecure is True
    assert cfg.namespace == "default"


def test_missing_context(tmp_path):
    with pytest.raises(ValueError):
        load_kubeconfig(_write(tmp_path), context="nope")


def test_no_current_context(tmp_path):
    with pytest.raises(ValueError):
        load_kubeconfig(_write(tmp_path, **{"current-context": ""}))


def test_disable_tls(tmp_path):
    cfg = ClusterConfig(server="https://x.example.com", ca_data=b"x", ca_file="ca.pem")
    cfg.disable_tls_verification()
    assert cfg.ssl_context() is False
    assert cfg.ca_data is None and cfg.ca_file == ""


def test_incluster(tmp_path, monkeypatch):
    (tmp_path / "token").write_text("token\n")
    (tmp_path / "namespace").write_text("monitoring")
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    monkeypatch.setenv("KUBERNETES_SERVICE_PORT", "443")
    cfg = load_incluster_config(tmp_path)
    assert cfg.server == "https://10.0.0.1:443"
    assert cfg.token == "token"
    assert cfg.namespace == "monitoring"
    assert cfg.ca_file == ""


def test_incluster_without_env(tmp_path, monkeypatch):
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_PORT", raising=False)
    with pytest.raises(ValueError):
        load_incluster_config(tmp_path)


def test_load_config_prefers_env(tmp_path, monkeypatch):
    monkeypatch.setenv("KUBECONFIG", str(_write(tmp_path)))
    assert load_config().server == "https://one.example.com"