from concurrent.futures import ThreadPoolExecutor

import pytest

from keyczar.keys.dsa_private import DsaPrivateKey, StreamState
from keyczar.keys.errors import CryptoInitError, SigningError, VerificationError


def sign(key, *chunks: bytes) -> bytes:
    stream = key.get_stream()
    stream.init_sign()
    for c in chunks:
        stream.update_sign(c)
    return stream.sign()


def verify(key, sig: bytes, *chunks: bytes) -> bool:
    stream = key.get_stream()
    stream.init_verify()
    for c in chunks:
        stream.update_verify(c)
    return stream.verify(sig)


def test_hello_round_trip(dsa_key):
    sig = sign(dsa_key, "hello".encode("utf-8"))
    key = DsaPrivateKey.read(dsa_key.to_json_string())
    assert verify(key, sig, b"hello")
    assert not verify(key, sig, b"hellp")


def test_signatures_cross_verify_after_round_trip(dsa_key):
    key = DsaPrivateKey.read(dsa_key.to_json_string())
    assert verify(dsa_key, sign(key, b"from the copy"), b"from the copy")
    assert verify(key, sign(dsa_key, b"from the original"), b"from the original")
    assert verify(dsa_key.get_public(), sign(key, b"public"), b"public")


def test_wrong_key_does_not_verify(dsa_key, other_dsa_key):
    sig = sign(dsa_key, b"message")
    assert not verify(other_dsa_key, sig, b"message")


def test_chunking_does_not_matter_but_order_does(dsa_key):
    sig = sign(dsa_key, b"abc", b"def", b"")
    assert verify(dsa_key, sig, b"abcdef")
    assert verify(dsa_key, sig, b"a", b"bcde", b"f")
    assert not verify(dsa_key, sig, b"def", b"abc")


def test_empty_message(dsa_key):
    sig = sign(dsa_key)
    assert verify(dsa_key, sig)
    assert not verify(dsa_key, sig, b"\x00")


def test_flipping_a_message_bit_fails(dsa_key):
    message = bytearray(b"flip me")
    sig = sign(dsa_key, bytes(message))
    for i in range(len(message) * 8):
        flipped = bytearray(message)
        flipped[i // 8] ^= 1 << (i % 8)
        assert not verify(dsa_key, sig, bytes(flipped))


def test_flipping_a_signature_bit_fails(dsa_key):
    sig = sign(dsa_key, b"message")
    # low bits of the last byte belong to s, the DER structure stays intact
    for bit in range(8):
        flipped = bytearray(sig)
        flipped[-1] ^= 1 << bit
        assert not verify(dsa_key, bytes(flipped), b"message")


@pytest.mark.parametrize("cut", [1, 5])
def test_truncated_signature_is_an_error(dsa_key, cut):
    sig = sign(dsa_key, b"message")
    with pytest.raises(VerificationError):
        verify(dsa_key, sig[:-cut], b"message")


@pytest.mark.parametrize("blob", [b"", b"\x00", b"not a signature", b"\x30\x02\x02\x00"])
def test_garbage_signature_is_an_error(dsa_key, blob):
    with pytest.raises(VerificationError):
        verify(dsa_key, blob, b"message")


def test_sign_writes_into_caller_buffer(dsa_key):
    stream = dsa_key.get_stream()
    stream.init_sign()
    stream.update_sign(memoryview(b"buffered"))
    output = bytearray(b"prefix")
    sig = stream.sign(output)
    assert output == b"prefix" + sig
    assert verify(dsa_key, bytes(output[len(b"prefix"):]), b"buffered")


def test_digest_size_is_fixed(dsa_key):
    sig = sign(dsa_key, b"message")
    assert dsa_key.get_stream().digest_size() == 48
    assert dsa_key.get_public().get_stream().digest_size() == 48
    assert len(sig) != 48


def test_sign_without_init_fails(dsa_key):
    stream = dsa_key.get_stream()
    with pytest.raises(SigningError):
        stream.update_sign(b"data")
    with pytest.raises(SigningError):
        stream.sign()


def test_sign_once_per_session(dsa_key):
    stream = dsa_key.get_stream()
    stream.init_sign()
    stream.update_sign(b"data")
    first = stream.sign()
    assert stream.state is StreamState.FINALIZED
    with pytest.raises(SigningError):
        stream.sign()
    with pytest.raises(SigningError):
        stream.update_sign(b"more")
    # re-init starts a new session over fresh data
    stream.init_sign()
    stream.update_sign(b"other")
    second = stream.sign()
    assert verify(dsa_key, first, b"data")
    assert verify(dsa_key, second, b"other")


def test_roles_are_exclusive(dsa_key):
    stream = dsa_key.get_stream()
    stream.init_sign()
    assert stream.state is StreamState.READY_SIGN
    with pytest.raises(CryptoInitError):
        stream.init_verify()

    stream = dsa_key.get_stream()
    stream.init_verify()
    assert stream.state is StreamState.READY_VERIFY
    with pytest.raises(CryptoInitError):
        stream.init_sign()


def test_verify_without_init_fails(dsa_key):
    stream = dsa_key.get_stream()
    with pytest.raises(VerificationError):
        stream.update_verify(b"data")
    with pytest.raises(VerificationError):
        stream.verify(b"\x30\x00")


def test_failed_session_leaves_key_usable(dsa_key):
    stream = dsa_key.get_stream()
    stream.init_verify()
    stream.update_verify(b"message")
    with pytest.raises(VerificationError):
        stream.verify(b"")
    assert stream.state is StreamState.FINALIZED
    assert verify(dsa_key, sign(dsa_key, b"message"), b"message")


def test_concurrent_sessions(dsa_key):
    messages = [f"message {i}".encode() for i in range(16)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        sigs = list(pool.map(lambda m: sign(dsa_key, m[:4], m[4:]), messages))
    for m, sig in zip(messages, sigs):
        assert verify(dsa_key, sig, m)
    assert not verify(dsa_key, sigs[0], messages[1])


def test_verify_calls_on_signing_stream_leave_session_open(dsa_key):
    stream = dsa_key.get_stream()
    stream.init_sign()
    stream.update_sign(b"data")
    with pytest.raises(VerificationError):
        stream.update_verify(b"data")
    with pytest.raises(VerificationError):
        stream.verify(b"\x30\x00")
    assert stream.state is StreamState.READY_SIGN
    stream.update_sign(b" more")
    assert verify(dsa_key, stream.sign(), b"data more")


def test_verify_without_init_keeps_created_state(dsa_key):
    stream = dsa_key.get_stream()
    with pytest.raises(VerificationError):
        stream.verify(b"\x30\x00")
    assert stream.state is StreamState.CREATED
    stream.init_sign()
    stream.update_sign(b"data")
    assert verify(dsa_key, stream.sign(), b"data")
