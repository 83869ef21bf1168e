"""Video studio service: provider proxies, webhook client and generation workflows."""

__version__ = "0.1.0"
