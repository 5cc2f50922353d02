import hashlib

import pytest

from fck.algorithms import UnsupportedAlgorithmError, hasher_factory, supported_names


def test_supported_names_are_the_four_algorithms():
    assert supported_names() == ("md5", "sha1", "sha256", "sha512")


@pytest.mark.parametrize("name", ["md5", "sha1", "sha256", "sha512"])
def test_factory_digest_matches_hashlib(name):
    data = b"the quick brown fox"
    hasher = hasher_factory(name)()
    hasher.update(data)
    assert hasher.hexdigest() == hashlib.new(name, data).hexdigest()


def test_factory_creates_independent_objects():
    factory = hasher_factory("sha256")
    first = factory()
    second = factory()
    first.update(b"abc")
    assert second.hexdigest() == hashlib.sha256(b"").hexdigest()
    assert first.hexdigest() != second.hexdigest()


@pytest.mark.parametrize("name", ["md4", "SHA256", "", "crc32"])
def test_unknown_algorithm_raises(name):
    with pytest.raises(UnsupportedAlgorithmError) as info:
        hasher_factory(name)
    assert info.value.name == name


def test_unsupported_error_is_value_error():
    with pytest.raises(ValueError):
        hasher_factory("blake3")