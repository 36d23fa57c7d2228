from __future__ import annotations

import os


def resolve(config_value: str | None, env_name: str, default: str) -> str:
    """Resolve a parameter from explicit config, then environment, then default.

    An empty default degenerates to returning the environment variable name
    itself, which is what the legacy plugins did for every lookup.
    """
    if config_value:
        return config_value
    if env_name:
        env_value = os.environ.get(env_name)
        if env_value:
            return env_value
    return default or env_name
