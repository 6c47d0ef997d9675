"""Client configuration: environments, construction options and env settings."""

from .client_config import ClientConfig
from .environment import Environment
from .settings import Settings

__all__ = ["ClientConfig", "Environment", "Settings"]
