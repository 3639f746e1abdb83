"""Alert parsing, status rendering, Telegram and kubeconfig helpers for a Kubernetes alert bot."""

__version__ = "0.1.0"