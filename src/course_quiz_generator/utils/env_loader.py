"""
Minimal .env loader.

Reads KEY=VALUE pairs from a .env file in the current working directory
and exports them to os.environ. Comments, blank lines and lines without
'=' are ignored. Values override existing environment variables and are
kept verbatim (quotes are not stripped).
"""
import os
from pathlib import Path


def load_env(env_file: str = ".env") -> None:
    """
    Load environment variables from a .env file if it exists.

    Args:
        env_file: Name of the env file, resolved against the current directory.
    """
    env_path = Path.cwd() / env_file
    if not env_path.is_file():
        return

    with open(env_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue
            key, value = line.split('=', 1)
            key = key.strip()
            if key:
                os.environ[key] = value.strip()
