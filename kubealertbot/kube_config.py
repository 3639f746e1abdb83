"""Locating and reading the credentials used to reach the Kubernetes API server."""

from __future__ import annotations

import base64
import os
import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SA_ROOT = Path("/var/run/secrets/kubernetes.io/serviceaccount")


@dataclass
class ClusterConfig:
    """Address of an API server and the credentials to talk to it."""

    server: str
    token: str = ""
    ca_data: bytes | None = None
    ca_file: str = ""
    client_cert_data: bytes | None = None
    client_cert_file: str = ""
    client_key_data: bytes | None = None
    client_key_file: str = ""
    insecure: bool = False
    namespace: str = "default"

    def disable_tls_verification(self) -> None:
        """Skip server certificate checks and drop any configured authority."""
        self.insecure = True
        self.ca_data = None
        self.ca_file = ""

    def ssl_context(self) -> ssl.SSLContext | bool:
        """Build the TLS settings for an HTTP client; False when verification is off."""
        if self.insecure:
            return False
        context = ssl.create_default_context(
            cafile=self.ca_file or None,
            cadata=self.ca_data.decode("ascii") if self.ca_data else None,
        )
        if self.client_cert_data or self.client_cert_file:
            with tempfile.TemporaryDirectory() as tmp:
                cert = self.client_cert_file or _dump(tmp, "client.crt", self.client_cert_data)
                key = self.client_key_file or (
                    _dump(tmp, "client.key", self.client_key_data) if self.client_key_data else None
                )
                context.load_cert_chain(cert, key)
        return context


def _dump(directory: str, name: str, data: bytes | None) -> str:
    target = Path(directory) / name
    target.write_bytes(data or b"")
    return str(target)


def _named(entries: Any, name: str, kind: str) -> dict[str, Any]:
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("name") == name:
            body = entry.get(kind)
            return body if isinstance(body, dict) else {}
    raise ValueError(f"{kind} {name!r} not found in kubeconfig")


def _resolve(base: Path, value: str) -> str:
    if not value:
        return ""
    candidate = Path(value).expanduser()
    return str(candidate if candidate.is_absolute() else base / candidate)


def _b64(value: Any) -> bytes | None:
    return base64.b64decode(value) if value else None


def _default_kubeconfig_path() -> Path:
    env = os.environ.get("KUBECONFIG", "")
    first = next((part for part in env.split(os.pathsep) if part), "")
    return Path(first) if first else Path.home() / ".kube" / "config"


def load_kubeconfig(path: str | os.PathLike[str] | None = None, context: str | None = None) -> ClusterConfig:
    """Read a kubeconfig file and return the settings of the chosen context."""
    file = Path(path) if path is not None else _default_kubeconfig_path()
    document = yaml.safe_load(file.read_text(encoding="utf-8")) or {}
    if not isinstance(document, dict):
        raise ValueError(f"{file} is not a kubeconfig document")
    name = context or document.get("current-context") or ""
    if not name:
        raise ValueError("kubeconfig has no current context")
    ctx = _named(document.get("contexts"), name, "context")
    cluster = _named(document.get("clusters"), ctx.get("cluster", ""), "cluster")
    user = _named(document.get("users"), ctx.get("user", ""), "user") if ctx.get("user") else {}
    server = cluster.get("server") or ""
    if not server:
        raise ValueError(f"cluster of context {name!r} has no server")

    base = file.parent
    token = user.get("token") or ""
    token_file = _resolve(base, user.get("tokenFile") or "")
    if not token and token_file:
        token = Path(token_file).read_text(encoding="utf-8").strip()

    return ClusterConfig(
        server=server,
        token=token,
        ca_data=_b64(cluster.get("certificate-authority-data")),
        ca_file=_resolve(base, cluster.get("certificate-authority") or ""),
        client_cert_data=_b64(user.get("client-certificate-data")),
        client_cert_file=_resolve(base, user.get("client-certificate") or ""),
        client_key_data=_b64(user.get("client-key-data")),
        client_key_file=_resolve(base, user.get("client-key") or ""),
        insecure=bool(cluster.get("insecure-skip-tls-verify", False)),
        namespace=ctx.get("namespace") or "default",
    )


def load_incluster_config(root: str | os.PathLike[str] = DEFAULT_SA_ROOT) -> ClusterConfig:
    """Build settings from the service account mounted into a pod."""
    host = os.environ.get("KUBERNETES_SERVICE_HOST", "")
    port = os.environ.get("KUBERNETES_SERVICE_PORT", "")
    if not host or not port:
        raise ValueError("not running inside a cluster: service host or port is unset")
    base = Path(root)
    token = (base / "token").read_text(encoding="utf-8").strip()
    ca = base / "ca.crt"
    ns_file = base / "namespace"
    namespace = ns_file.read_text(encoding="utf-8").strip() if ns_file.exists() else "default"
    address = f"[{host}]" if ":" in host else host
    return ClusterConfig(
        server=f"https://{address}:{port}",
        token=token,
        ca_file=str(ca) if ca.exists() else "",
        namespace=namespace or "default",
    )


def load_config() -> ClusterConfig:
    """Find settings: $KUBECONFIG, then the in-cluster account, then ~/.kube/config."""
    if os.environ.get("KUBECONFIG"):
        return load_kubeconfig()
    if os.environ.get("KUBERNETES_SERVICE_HOST"):
        return load_incluster_config()
    home = Path.home() / ".kube" / "config"
    if home.exists():
        return load_kubeconfig(home)
    raise ValueError("no Kubernetes configuration found")