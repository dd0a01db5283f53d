"""
Initializes the config package.

The config package is responsible for loading the node connection settings of the
witness extractor from `env.yaml`.
"""

# This import is done to facilitate cleaner imports in the project
# `from config import EnvConfig` instead of `from config.env import EnvConfig`
from .env import Config, EnvConfig, RemoteNode

__all__ = ["Config", "EnvConfig", "RemoteNode"]
