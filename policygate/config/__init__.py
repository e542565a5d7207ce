from .loader import config_candidates, configure_logging, load_config
from .models import LoaderConfig, PolicyGateConfig

__all__ = [
    "LoaderConfig",
    "PolicyGateConfig",
    "config_candidates",
    "configure_logging",
    "load_config",
]
