from __future__ import annotations


# ---- Key errors ---- #
# Provider exceptions are chained (raise ... from e) so __cause__ keeps the original.
class KeyczarError(Exception):
    pass


class KeyGenerationError(KeyczarError):
    # provider could not generate a key, or the size is not supported
    pass


class MalformedKeyError(KeyczarError):
    # serialized record is not valid JSON or has missing / invalid fields
    pass


class ActivationError(KeyczarError):
    # decoded components were rejected by the provider
    pass


class CryptoInitError(KeyczarError):
    # stream could not be bound to the key
    pass


class SigningError(KeyczarError):
    pass


class VerificationError(KeyczarError):
    # signature blob is structurally malformed
    pass
