from __future__ import annotations
import json
from enum import Enum, auto
from typing import Any, Dict, Optional, Union
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import dsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from loguru import logger

from keyczar.common.b64url import int_to_b64u, b64u_to_int, is_b64u
from keyczar.common.canon import canon
from keyczar.keys.dsa_public import DSA_DIGEST_SIZE, DsaPublicKey, DsaVerifyingStream, require_size
from keyczar.keys.errors import (
    ActivationError,
    CryptoInitError,
    KeyGenerationError,
    MalformedKeyError,
    SigningError,
    VerificationError,
)
from keyczar.keys.interfaces import Bytes
from keyczar.keys.key_type import KeyParameters, KeyType
from keyczar.keys.provider import KEY_GEN_ALGORITHM, SIG_ALGORITHM, generate_key_pair, new_signature_context, signature_hash


class KeyState(Enum):
    INERT = auto()
    ACTIVE = auto()


class DsaPrivateKey:
    """DSA private key: the private exponent x paired with its public key.

    Keys come from generate() with the native handle already built, or from
    from_json() as an inert record that activate() turns into a usable key.
    read() does both steps. Signing streams refuse to start on an inert key.
    """

    def __init__(self, size: int, public_key: Optional[DsaPublicKey], x: str,
                 handle: Optional[dsa.DSAPrivateKey] = None) -> None:
        self.size = size
        self.public_key = public_key
        self.x = x
        self._handle = handle

    # ---- Key factory ---- #
    @classmethod
    def from_handle(cls, sk: dsa.DSAPrivateKey) -> "DsaPrivateKey":
        numbers = sk.private_numbers()
        return cls(
            size=numbers.public_numbers.parameter_numbers.p.bit_length(),
            public_key=DsaPublicKey.from_handle(sk),
            x=int_to_b64u(numbers.x),
            handle=sk,
        )

    @classmethod
    def generate(cls, params: Optional[KeyParameters] = None) -> "DsaPrivateKey":
        params = params or KeyParameters.default(KeyType.DSA_PRIV)
        if not KeyType.DSA_PRIV.is_acceptable_size(params.key_size):
            raise KeyGenerationError(f"unsupported DSA key size: {params.key_size}")
        try:
            _, sk = generate_key_pair(KEY_GEN_ALGORITHM, params.key_size)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyGenerationError(f"DSA key generation failed: {e}") from e
        key = cls.from_handle(sk)
        logger.debug("Generated DSA private key {}", key.hash().hex())
        return key

    @classmethod
    def from_json(cls, obj: Any) -> "DsaPrivateKey":
        # inert: no native handle until activate()
        if not isinstance(obj, dict):
            raise MalformedKeyError("private key record must be a JSON object")
        size = require_size(obj)
        if "publicKey" not in obj or obj["publicKey"] is None:
            raise MalformedKeyError("missing field: publicKey")
        public_key = DsaPublicKey.from_json(obj["publicKey"])
        x = obj.get("x")
        if not isinstance(x, str) or not is_b64u(x):
            raise MalformedKeyError("missing or invalid field: x")
        return cls(size, public_key, x)

    @classmethod
    def read(cls, text: Union[str, bytes]) -> "DsaPrivateKey":
        try:
            obj = json.loads(text)
        except (ValueError, TypeError) as e:
            raise MalformedKeyError(f"private key is not valid JSON: {e}") from e
        return cls.from_json(obj).activate()

    # ---- Codec ---- #
    def to_json(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "publicKey": self.public_key.to_json() if self.public_key is not None else None,
            "x": self.x,
        }

    def to_json_string(self) -> str:
        return canon(self.to_json())

    # ---- Activation ---- #
    @property
    def state(self) -> KeyState:
        return KeyState.INERT if self._handle is None else KeyState.ACTIVE

    def activate(self) -> "DsaPrivateKey":
        """Build the native handle from x and the public key's p, q, g.

        Runs once, right after from_json(). Activating an active key raises
        ActivationError.
        """
        if self._handle is not None:
            raise ActivationError("private key is already active")
        if self.public_key is None:
            raise ActivationError("private key has no public key")
        if not self.public_key.active:
            self.public_key.activate()
        try:
            x = b64u_to_int(self.x)
        except ValueError as e:
            raise MalformedKeyError(f"field x is not base64url: {e}") from e
        try:
            public_numbers = self.public_key.handle.public_numbers()
            self._handle = dsa.DSAPrivateNumbers(x=x, public_numbers=public_numbers).private_key()
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise ActivationError(f"provider rejected private key: {e}") from e
        logger.debug("Activated DSA private key of {} bits", self.size)
        return self

    @property
    def handle(self) -> Optional[dsa.DSAPrivateKey]:
        return self._handle

    # ---- Key surface ---- #
    def hash(self) -> bytes:
        return self.get_public().hash()

    def key_gen_algorithm(self) -> str:
        return KEY_GEN_ALGORITHM

    def get_public(self) -> DsaPublicKey:
        return self.public_key

    def type(self) -> KeyType:
        return KeyType.DSA_PRIV

    def get_stream(self) -> "DsaSigningStream":
        return DsaSigningStream(self)

    def __repr__(self) -> str:
        return f"DsaPrivateKey(size={self.size}, state={self.state.name})"


class StreamState(Enum):
    CREATED = auto()
    READY_SIGN = auto()
    READY_VERIFY = auto()
    FINALIZED = auto()


class DsaSigningStream:
    """Signs with the private key, or forwards verification to the public key's stream.

    The role is fixed by the first init_sign()/init_verify(). Calling the same
    init again starts a new session, calling the other one raises CryptoInitError.
    """

    def __init__(self, key: DsaPrivateKey) -> None:
        if key.get_public() is None:
            raise CryptoInitError("private key has no public key")
        self._key = key
        self._verifying_stream: DsaVerifyingStream = key.get_public().get_stream()
        self._ctx = None
        self._role: Optional[StreamState] = None
        self.state = StreamState.CREATED

    def digest_size(self) -> int:
        return DSA_DIGEST_SIZE

    # ---- Sign role ---- #
    def init_sign(self) -> None:
        if self._role is StreamState.READY_VERIFY:
            raise CryptoInitError("stream is bound to verification")
        if self._key.handle is None:
            raise CryptoInitError("private key has not been activated")
        self._ctx = new_signature_context(SIG_ALGORITHM)
        self._role = self.state = StreamState.READY_SIGN

    def update_sign(self, data: Bytes) -> None:
        if self.state is not StreamState.READY_SIGN:
            raise SigningError("update_sign called without an open signing session")
        self._ctx.update(bytes(data))

    def sign(self, output: Optional[bytearray] = None) -> bytes:
        if self.state is not StreamState.READY_SIGN:
            raise SigningError("sign called without an open signing session")
        ctx, self._ctx = self._ctx, None
        self.state = StreamState.FINALIZED
        try:
            sig = self._key.handle.sign(ctx.finalize(), Prehashed(signature_hash(SIG_ALGORITHM)))
        except (ValueError, TypeError) as e:
            raise SigningError(f"DSA signing failed: {e}") from e
        if output is not None:
            output.extend(sig)
        return sig

    # ---- Verify role, delegated ---- #
    def init_verify(self) -> None:
        if self._role is StreamState.READY_SIGN:
            raise CryptoInitError("stream is bound to signing")
        self._verifying_stream.init_verify()
        self._role = self.state = StreamState.READY_VERIFY

    def update_verify(self, data: Bytes) -> None:
        if self._role is StreamState.READY_SIGN:
            raise VerificationError("stream is bound to signing")
        self._verifying_stream.update_verify(data)

    def verify(self, signature: Bytes) -> bool:
        if self._role is StreamState.READY_SIGN:
            raise VerificationError("stream is bound to signing")
        if self.state is not StreamState.READY_VERIFY:
            return self._verifying_stream.verify(signature)
        try:
            return self._verifying_stream.verify(signature)
        finally:
            self.state = StreamState.FINALIZED
