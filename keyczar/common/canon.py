import json
import hashlib


# ---- Render key records as compact JSON and compute keyczar key hashes ---- #
def canon(obj) -> str:
    # keep insertion order so records come back out in the order they were written
    return json.dumps(obj, separators=(',', ':'))


def strip_leading_zeros(b: bytes) -> bytes:
    stripped = b.lstrip(b"\x00")
    # zero keeps one byte
    return stripped or b"\x00"


def prefix_hash(*chunks: bytes) -> bytes:
    # SHA-1 over each chunk preceded by its 4-byte big-endian length
    h = hashlib.sha1()
    for c in chunks:
        h.update(len(c).to_bytes(4, "big"))
        h.update(c)
    return h.digest()
