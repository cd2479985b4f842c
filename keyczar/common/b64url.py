import base64
import binascii
import re

# make sure string only has legal Base64URL characters
_B64URL_RE = re.compile(r'[A-Za-z0-9_-]+')


def b64u(b: bytes) -> str:
    # encode byte and decode to string and strip "="
    return base64.urlsafe_b64encode(b).decode().rstrip("=")


def ub64u(s: str) -> bytes:
    if not is_b64u(s):
        raise ValueError(f"not a base64url string: {s[:16]!r}")
    # calculate how much padding needed to make length multiple of 4
    pad = "=" * ((4 - len(s) % 4) % 4)
    try:
        return base64.urlsafe_b64decode((s + pad).encode())
    except binascii.Error as e:
        raise ValueError(str(e)) from e


def is_b64u(s: str) -> bool:
    # check if characters and length are legal for base64url
    return isinstance(s, str) and bool(_B64URL_RE.fullmatch(s)) and (len(s) % 4 != 1)


# ---- Big integers as base64url ---- #
def int_to_bytes(n: int) -> bytes:
    # minimal two's complement, big-endian (a leading 0x00 keeps the sign bit clear)
    if n < 0:
        raise ValueError("negative integers are not encoded")
    return n.to_bytes(n.bit_length() // 8 + 1, "big")


def int_to_b64u(n: int) -> str:
    return b64u(int_to_bytes(n))


def b64u_to_int(s: str) -> int:
    # bytes are read as an unsigned magnitude, a sign byte is harmless
    return int.from_bytes(ub64u(s), "big")
