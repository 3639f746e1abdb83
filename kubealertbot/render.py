"""Text and image rendering for bot replies."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable

import httpx
from PIL import Image, UnidentifiedImageError

from kubealertbot.domain import DeployStatus

log = logging.getLogger(__name__)

DASHBOARD_PATH = "/render/d/efa86fd1d0c121a26444b636a3f509a9/cluster-overview"
DASHBOARD_QUERY = "orgId=1&from=now-1h&to=now"
DASHBOARD_CROP = 130


def pretty_print_status(deploys: Iterable[DeployStatus]) -> str:
    """Describe deployments, their pods and container usage as Markdown text."""
    parts: list[str] = []
    for number, deploy in enumerate(deploys, start=1):
        parts.append(f"Deployment `{deploy.name}` (#{number})\n")
        parts.append(f"Status: {deploy.status}\n")
        if not deploy.pods:
            parts.append("\tNo pods found\n")
            continue
        for pod_name, pod in deploy.pods.items():
            parts.append(f"\tPod: `{pod_name}`\n")
            parts.append(f"\t\tTotal CPU: {pod.total_cpu:.3f} cores\n")
            parts.append(f"\t\tTotal Memory: {pod.total_mem:.3f} MB\n")
            if not pod.containers:
                parts.append("\t\tNo containers found\n")
                continue
            for container_name, container in pod.containers.items():
                parts.append(f"\t\tContainer: `{container_name}`\n")
                parts.append(f"\t\t\tCPU: {container.cpu:.3f} cores\n")
                parts.append(f"\t\t\tMemory: {container.memory:.3f} MB\n")
        parts.append("\n")
    return "".join(parts)


def numbered_list(items: Iterable[str]) -> str:
    """Lines of the form '1) item', joined by newlines."""
    return "\n".join(f"{number}) {item}" for number, item in enumerate(items, start=1))


def crop_top_pixels_png(data: bytes, crop_y: int) -> bytes:
    """Drop the top ``crop_y`` rows of a PNG image and return it as RGBA PNG bytes."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("data is not a readable image") from exc
    rgba = image.convert("RGBA")
    width, height = rgba.size
    if crop_y >= height:
        raise ValueError(f"cannot crop {crop_y} rows from an image {height} pixels high")
    cropped = rgba.crop((0, max(crop_y, 0), width, height))
    out = io.BytesIO()
    cropped.save(out, format="PNG")
    return out.getvalue()


def fetch_grafana_dashboard(
    address: str,
    token: str,
    transport: httpx.BaseTransport | None = None,
) -> bytes:
    """Download the rendered cluster dashboard from Grafana at 'host:port' and crop its header."""
    parts = address.split(":")
    if len(parts) < 2:
        raise ValueError(f"Grafana address must be host:port, got {address!r}")
    host, port = parts[0], parts[1]
    url = f"http://{host}:{port}{DASHBOARD_PATH}?{DASHBOARD_QUERY}"
    with httpx.Client(transport=transport, timeout=60.0) as client:
        response = client.get(url, headers={"Authorization": f"Bearer {token}"})
    if response.status_code != 200:
        log.error("failed to download dashboard: %s", response.status_code)
    return crop_top_pixels_png(response.content, DASHBOARD_CROP)