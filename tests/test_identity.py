"""Tests for secp256k1 identity derivation and signing."""

from __future__ import annotations

import bech32
import pytest

from bonsai_cw.wallet.identity import SigningIdentity, address_prefix, pubkey_to_address

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class TestDerivation:
    def test_same_mnemonic_same_address(self, identity: SigningIdentity) -> None:
        again = SigningIdentity.from_mnemonic(identity.mnemonic, prefix="coral")
        assert again.address == identity.address
        assert again.pubkey == identity.pubkey

    def test_prefix_only_changes_human_readable_part(self, identity: SigningIdentity) -> None:
        other = SigningIdentity.from_mnemonic(identity.mnemonic, prefix="wasm")
        assert address_prefix(other.address) == "wasm"
        assert bech32.bech32_decode(other.address)[1] == bech32.bech32_decode(identity.address)[1]

    def test_address_encodes_twenty_bytes(self, identity: SigningIdentity) -> None:
        _, words = bech32.bech32_decode(identity.address)
        assert len(bech32.convertbits(words, 5, 8, False)) == 20

    def test_different_path_different_key(self, identity: SigningIdentity) -> None:
        other = SigningIdentity.from_mnemonic(identity.mnemonic, prefix="coral", hd_path="m/44'/118'/0'/0/1")
        assert other.address != identity.address

    def test_whitespace_in_mnemonic_is_normalised(self, identity: SigningIdentity) -> None:
        messy = "  " + "   ".join(identity.mnemonic.split()) + "\n"
        assert SigningIdentity.from_mnemonic(messy, prefix="coral").address == identity.address

    def test_invalid_mnemonic(self) -> None:
        with pytest.raises(ValueError):
            SigningIdentity.from_mnemonic("not a real mnemonic at all", prefix="coral")

    def test_compressed_pubkey(self, identity: SigningIdentity) -> None:
        assert len(identity.pubkey) == 33
        assert identity.pubkey[0] in (2, 3)

    def test_repr_hides_mnemonic(self, identity: SigningIdentity) -> None:
        assert identity.mnemonic not in repr(identity)

    def test_pubkey_to_address_rejects_uncompressed(self) -> None:
        with pytest.raises(ValueError):
            pubkey_to_address(b"\x04" + b"\x01" * 64, "coral")

    def test_address_prefix_of_garbage(self) -> None:
        assert address_prefix("coral1notbech32") is None


class TestSigning:
    def test_signature_is_compact_and_low_s(self, identity: SigningIdentity) -> None:
        signature = identity.sign(b"payload")
        assert len(signature) == 64
        s = int.from_bytes(signature[32:], "big")
        assert s <= SECP256K1_N // 2

    def test_verify(self, identity: SigningIdentity) -> None:
        signature = identity.sign(b"payload")
        assert identity.verify(b"payload", signature)
        assert not identity.verify(b"other payload", signature)
        assert not identity.verify(b"payload", signature[:63])

    def test_other_identity_does_not_verify(self, identity: SigningIdentity) -> None:
        other = SigningIdentity.generate(prefix="coral")
        assert not other.verify(b"payload", identity.sign(b"payload"))

    def test_amino_signature_shape(self, identity: SigningIdentity) -> None:
        signed = identity.amino_signature(b"payload")
        assert signed["pub_key"]["type"] == "tendermint/PubKeySecp256k1"
        assert set(signed) == {"pub_key", "signature"}
