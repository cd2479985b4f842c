from __future__ import annotations
import json
import os
from pathlib import Path
from typing import Union
from loguru import logger

from keyczar.keys.key_type import KeyType
from keyczar.keys.registry import Key, read_key


# ---- Save/ Load a single key record (JSON) ---- #
def save_key(key: Key, path: Union[str, Path]) -> None:
    path = Path(path)
    # write then chmod 600 on *nix to avoid leaky perms
    with open(path, "w", encoding="utf-8") as f:
        f.write(key.to_json_string())
    try:
        os.chmod(path, 0o600)  # only owner can access
    except OSError as e:
        logger.warning("Could not restrict permissions of {}: {}", path, e)


def load_key(key_type: KeyType, path: Union[str, Path]) -> Key:
    with open(path, "r", encoding="utf-8") as f:
        return read_key(key_type, f.read())


def guess_key_type(text: str) -> KeyType:
    # private records nest the public key, anything unreadable is left to read_key to reject
    try:
        obj = json.loads(text)
    except ValueError:
        return KeyType.DSA_PRIV
    if isinstance(obj, dict) and "publicKey" not in obj and "y" in obj:
        return KeyType.DSA_PUB
    return KeyType.DSA_PRIV
