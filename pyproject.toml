[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubealertbot"
version = "0.1.0"
description = "Building blocks for a Telegram bot that relays Grafana alerts about Kubernetes workloads"
requires-python = ">=3.10"
keywords = ["kubernetes", "telegram", "bot", "alerts", "grafana", "monitoring"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "httpx",
    "pyyaml",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kubealertbot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
