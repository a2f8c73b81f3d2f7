"""glance: a REST façade over the Kubernetes API."""

__version__ = "0.1.0"
