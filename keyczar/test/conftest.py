import pytest

from keyczar.keys.dsa_private import DsaPrivateKey
from keyczar.keys.key_type import KeyParameters


# DSA parameter generation is slow, share one key per test session
@pytest.fixture(scope="session")
def dsa_key() -> DsaPrivateKey:
    return DsaPrivateKey.generate(KeyParameters(key_size=1024))


@pytest.fixture(scope="session")
def other_dsa_key() -> DsaPrivateKey:
    return DsaPrivateKey.generate(KeyParameters(key_size=1024))


@pytest.fixture
def dsa_record(dsa_key: DsaPrivateKey) -> dict:
    return dsa_key.to_json()
