"""
A module for exposing the node connection settings.

This module is responsible for loading, parsing, and validating the environment
configuration from the `env.yaml` file. It uses Pydantic to ensure that the configuration
adheres to expected formats and types.

Classes:
- EnvConfig: Loads the configuration and exposes it as Python objects.
- RemoteNode: Represents a remote node configuration with validation.
- Config: Represents the overall configuration structure with validation.

Usage:
- Initialize an instance of EnvConfig to load the configuration.
- Access configuration values via attributes (e.g., EnvConfig().remote_node.node_url).
"""

import os
from pathlib import Path
from typing import Dict

import yaml
from pydantic import BaseModel, HttpUrl, PositiveFloat, PositiveInt, ValidationError

ENV_PATH_VARIABLE = "WITNESS_ENV_PATH"
DEFAULT_ENV_PATH = Path("env.yaml")


def default_env_path() -> Path:
    """Return the configuration file path, `WITNESS_ENV_PATH` takes precedence."""
    return Path(os.environ.get(ENV_PATH_VARIABLE, DEFAULT_ENV_PATH))


class RemoteNode(BaseModel):
    """
    Represents a configuration for the node the witness is extracted from.

    Attributes:
    - node_url (HttpUrl): The JSON-RPC endpoint of the node, validated as a proper URL.
    - rpc_headers (Dict[str, str]): Extra HTTP headers sent with every request.
    - timeout (float): Per-request timeout in seconds.
    - max_retries (int): Attempts per request on transport failures.
    - max_workers (int): Upper bound on the requests in flight.

    """

    node_url: HttpUrl = HttpUrl("http://127.0.0.1:8545")
    rpc_headers: Dict[str, str] = {}
    timeout: PositiveFloat = 10.0
    max_retries: PositiveInt = 3
    max_workers: PositiveInt = 8


class Config(BaseModel):
    """
    Represents the overall environment configuration.

    Attributes:
    - remote_node (RemoteNode): The node connection settings.

    """

    remote_node: RemoteNode = RemoteNode()


class EnvConfig(Config):
    """
    Loads and validates environment configuration from `env.yaml`.

    This is a wrapper class for the Config model. It reads a config file from disk into a
    Config model and then exposes it. A missing file yields the default configuration.
    """

    def __init__(self, path: Path | str | None = None):
        """Init for the EnvConfig class."""
        env_path = Path(path) if path is not None else default_env_path()
        if not env_path.exists():
            super().__init__()
            return

        with env_path.open("r") as file:
            try:
                config_data = yaml.safe_load(file)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid configuration file '{env_path}': {e}") from e
        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ValueError(f"Invalid configuration file '{env_path}': expected a mapping")
        try:
            # Validate and parse with Pydantic
            super().__init__(**config_data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e
