"""
Tests for Ed25519 key pairs.
"""

import os
import stat
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wasmseal.crypto.keys import Ed25519KeyPair, SigningKeyPair


class TestKeyCreation:
    """Tests for generating and loading key pairs."""

    def test_generate(self):
        key_pair = Ed25519KeyPair.generate()
        assert isinstance(key_pair, SigningKeyPair)
        assert len(key_pair.public_key()) == 64
        bytes.fromhex(key_pair.public_key())

    def test_generated_keys_differ(self):
        assert Ed25519KeyPair.generate().public_key() != Ed25519KeyPair.generate().public_key()

    def test_from_seed_deterministic(self):
        seed = b'\x07' * 32
        assert Ed25519KeyPair.from_seed(seed).public_key() == Ed25519KeyPair.from_seed(seed).public_key()
        assert Ed25519KeyPair.from_seed(seed).seed == seed

    @pytest.mark.parametrize("size", [0, 31, 33, 64])
    def test_from_seed_wrong_size(self, size):
        with pytest.raises(ValueError):
            Ed25519KeyPair.from_seed(b'\x00' * size)


class TestKeyFiles:
    """Tests for saving and loading seed files."""

    def test_save_and_load(self, temp_dir, account_key):
        path = temp_dir / "account.key"
        account_key.save(path)
        loaded = Ed25519KeyPair.from_file(path)
        assert loaded.public_key() == account_key.public_key()

    def test_saved_owner_only(self, temp_dir, account_key):
        path = temp_dir / "account.key"
        account_key.save(path)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_load_raw_seed(self, temp_dir):
        path = temp_dir / "raw.key"
        path.write_bytes(b'\x11' * 32)
        assert Ed25519KeyPair.from_file(path).seed == b'\x11' * 32

    def test_load_hex_with_newline(self, temp_dir):
        path = temp_dir / "hex.key"
        path.write_text("22" * 32 + "\n")
        assert Ed25519KeyPair.from_file(path).seed == b'\x22' * 32

    def test_load_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            Ed25519KeyPair.from_file(temp_dir / "missing.key")

    def test_load_wrong_length(self, temp_dir):
        path = temp_dir / "short.key"
        path.write_bytes(b'\x01' * 10)
        with pytest.raises(ValueError):
            Ed25519KeyPair.from_file(path)

    def test_load_non_hex_names_file(self, temp_dir):
        path = temp_dir / "garbled.key"
        path.write_text("zz" * 32)
        with pytest.raises(ValueError, match="garbled.key"):
            Ed25519KeyPair.from_file(path)


class TestSignatures:
    """Tests for signing and verification."""

    def test_sign_and_verify(self, account_key):
        signature = account_key.sign(b'payload')
        assert len(signature) == 64
        assert Ed25519KeyPair.verify(account_key.public_key(), b'payload', signature)

    def test_modified_data_fails(self, account_key):
        signature = account_key.sign(b'payload')
        assert not Ed25519KeyPair.verify(account_key.public_key(), b'payloaD', signature)

    def test_other_key_fails(self, account_key, module_key):
        signature = account_key.sign(b'payload')
        assert not Ed25519KeyPair.verify(module_key.public_key(), b'payload', signature)

    @pytest.mark.parametrize("public_key", ["", "zz" * 32, "ab" * 16])
    def test_unusable_public_key_fails(self, account_key, public_key):
        signature = account_key.sign(b'payload')
        assert not Ed25519KeyPair.verify(public_key, b'payload', signature)

    def test_truncated_signature_fails(self, account_key):
        signature = account_key.sign(b'payload')
        assert not Ed25519KeyPair.verify(account_key.public_key(), b'payload', signature[:10])

    def test_repr_hides_seed(self, account_key):
        assert account_key.seed.hex() not in repr(account_key)
