import io

import httpx
import pytest
from PIL import Image

from kubealertbot.domain import ContainerStatus, DeployStatus, PodStatus
from kubealertbot.render import (
    DASHBOARD_CROP,
    DASHBOARD_PATH,
    crop_top_pixels_png,
    fetch_grafana_dashboard,
    numbered_list,
    pretty_print_status,
)


def _png(width, height, mode="RGBA"):
    image = Image.new(mode, (width, height))
    for y in range(height):
        value = y % 256
        image.putpixel((0, y), (value, 0, 0, 255) if mode == "RGBA" else value)
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def _open(data):
    return Image.open(io.BytesIO(data))


def test_pretty_print_empty():
    assert pretty_print_status([]) == ""


def test_pretty_print_deploy_without_pods():
    text = pretty_print_status([DeployStatus(name="web", status="Available")])
    assert text == "Deployment `web` (#1)\nStatus: Available\n\tNo pods found\n"


def test_pretty_print_pod_without_containers():
    deploy = DeployStatus(name="api", status="Progressing", pods={"api-1": PodStatus()})
    text = pretty_print_status([deploy])
    assert "\tPod: `api-1`\n" in text
    assert "\t\tNo containers found\n" in text
    assert text.endswith("\n\n")


def test_pretty_print_containers_and_numbering():
    pod = PodStatus(
        containers={"app": ContainerStatus(cpu=0.25, memory=64.0)},
        total_cpu=0.25,
        total_mem=64.0,
    )
    deploys = [
        DeployStatus(name="a", status="Available", pods={"a-1": pod}),
        DeployStatus(name="b", status="Unknown"),
    ]
    text = pretty_print_status(deploys)
    assert "\t\tContainer: `app`\n" in text
    assert "\t\t\tCPU: 0.250 cores\n" in text
    assert "Deployment `b` (#2)\n" in text
    assert text.index("Deployment `a` (#1)") < text.index("Deployment `b` (#2)")


def test_numbered_list():
    assert numbered_list(["x", "y"]) == "1) x\n2) y"
    assert numbered_list([]) == ""


def test_crop_removes_top_rows():
    out = _open(crop_top_pixels_png(_png(10, 200), 50))
    assert out.size == (10, 150)
    assert out.getpixel((0, 0)) == (50, 0, 0, 255)


def test_crop_converts_to_rgba():
    out = _open(crop_top_pixels_png(_png(4, 20, mode="L"), 5))
    assert out.mode == "RGBA"
    assert out.size == (4, 15)


def test_crop_too_much_raises():
    with pytest.raises(ValueError):
        crop_top_pixels_png(_png(4, 20), 20)


def test_crop_rejects_non_image():
    with pytest.raises(ValueError):
        crop_top_pixels_png(b"not a png", 1)


def test_fetch_grafana_dashboard_requests_and_crops():
    seen = []
    source = _png(8, 300)

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=source)

    data = fetch_grafana_dashboard("grafana.local:3000", "token", transport=httpx.MockTransport(handler))
    assert _open(data).size == (8, 300 - DASHBOARD_CROP)
    request = seen[0]
    assert request.url.host == "grafana.local"
    assert request.url.port == 3000
    assert request.url.path == DASHBOARD_PATH
    assert request.url.params["from"] == "now-1h"
    assert request.headers["authorization"] == "Bearer token"


def test_fetch_grafana_dashboard_needs_port():
    with pytest.raises(ValueError):
        fetch_grafana_dashboard("grafana.local", "token")


def test_fetch_grafana_dashboard_bad_body():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="error"))
    with pytest.raises(ValueError):
        fetch_grafana_dashboard("grafana.local:3000", "token", transport=transport)