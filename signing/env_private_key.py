from __future__ import annotations

import os

from .local_key import LocalKeySigner


class EnvPrivateKeySigner(LocalKeySigner):
    """
    Development signer that reads a raw hex private key from PRIVATE_KEY env var.
    """

    def __init__(self, env_var: str = "PRIVATE_KEY") -> None:
        pk = os.getenv(env_var)
        if not pk:
            raise ValueError(f"{env_var} environment variable not set")
        super().__init__(pk)
