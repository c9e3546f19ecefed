from .config import UpstreamConfig, default_upstream_config
from .forwarder import forward, probe_all
from .normalizer import normalize, missing_key_envelope

__all__ = [
    "UpstreamConfig",
    "default_upstream_config",
    "forward",
    "probe_all",
    "normalize",
    "missing_key_envelope",
]
