"""
Tests for EIP-712 hashing

Checks:
1. Type hashes match the exchange contract
2. Golden vectors for domain separator, struct hash and sign hash
3. Agreement with eth_account's generic EIP-712 encoder
4. Purity, field-order sensitivity, encoding failures
"""

from dataclasses import replace

import pytest
from eth_account.messages import encode_typed_data

from opinion_sign_helper.exceptions import EncodingError
from opinion_sign_helper.opinion_order_signer import (
    EIP712_ORDER_MESSAGE_TYPE,
    build_order_message_data,
    get_eip712_domain_data,
)
from opinion_sign_helper.typed_data import (
    EIP712_DOMAIN_TYPEHASH,
    ORDER_TYPE_STRING,
    ORDER_TYPEHASH,
    abi_encode,
    build_domain,
    domain_separator,
    sign_hash,
    struct_hash,
)
from opinion_sign_helper.types import Side, SignatureType

from tests.unit.conftest import GOLDEN_CONTRACT, TEST_ADDRESS

GOLDEN_DOMAIN_SEPARATOR = "bc3ab95a20c3a96175cb0007d02d0ed5b42822c5667eff240ac078f8bd20973c"
GOLDEN_ZERO_ORDER_STRUCT_HASH = "539890086c5ddbce93f5826cb78c7a13fe6b5cea842340aed4ddca108d33638c"
GOLDEN_ZERO_ORDER_SIGN_HASH = "fce952d8f79c0d1bab7b6d529665c8716bd63f70bf5d694ee6b11379c9fc7104"
GOLDEN_SAMPLE_ORDER_STRUCT_HASH = "af6659a33818fe9720f91a232fb7e25e4794f72609b2c5307c725828f08c3c38"
GOLDEN_SAMPLE_ORDER_SIGN_HASH = "2d8688d89ac374a5588c246f09f4b8b755e8bfce54616b634ac2568d27d6df1b"


class TestTypeHashes:
    """The type strings are protocol constants"""

    def test_domain_typehash(self) -> None:
        assert EIP712_DOMAIN_TYPEHASH.hex() == (
            "8b73c3c69bb8fe3d512ecc4cf759cc79239f7b179b0ffacaa9a75d522b39400f"
        )

    def test_order_typehash(self) -> None:
        assert ORDER_TYPEHASH.hex() == (
            "a852566c4e14d00869b6db0220888a9090a13eccdaea03713ff0a3d27bf9767c"
        )

    def test_order_type_string_has_no_spaces_after_commas(self) -> None:
        assert ", " not in ORDER_TYPE_STRING
        assert ORDER_TYPE_STRING.count(",") == 11

    def test_message_type_matches_type_string(self) -> None:
        """The published EIP-712 types describe the same struct that is hashed"""
        fields = ",".join(f"{f['type']} {f['name']}" for f in EIP712_ORDER_MESSAGE_TYPE["Order"])
        assert f"Order({fields})" == ORDER_TYPE_STRING


class TestGoldenVectors:
    """Pinned hashes for fixed inputs"""

    def test_domain_separator(self, golden_domain) -> None:
        assert domain_separator(golden_domain).hex() == GOLDEN_DOMAIN_SEPARATOR

    def test_zero_order_struct_hash(self, zero_order) -> None:
        assert struct_hash(zero_order).hex() == GOLDEN_ZERO_ORDER_STRUCT_HASH

    def test_zero_order_sign_hash(self, golden_domain, zero_order) -> None:
        assert sign_hash(golden_domain, zero_order).hex() == GOLDEN_ZERO_ORDER_SIGN_HASH

    def test_sample_order_hashes(self, golden_domain, sample_order) -> None:
        assert struct_hash(sample_order).hex() == GOLDEN_SAMPLE_ORDER_STRUCT_HASH
        assert sign_hash(golden_domain, sample_order).hex() == GOLDEN_SAMPLE_ORDER_SIGN_HASH

    def test_build_domain_uses_fixed_name_and_version(self, golden_domain) -> None:
        assert build_domain(56, GOLDEN_CONTRACT) == golden_domain


class TestAgainstEthAccount:
    """Hand-rolled hashing agrees with eth_account's generic encoder"""

    def test_header_and_body_match(self, sample_order) -> None:
        domain = build_domain(56, TEST_ADDRESS)
        signable = encode_typed_data(
            get_eip712_domain_data(56, TEST_ADDRESS),
            EIP712_ORDER_MESSAGE_TYPE,
            build_order_message_data(sample_order),
        )
        assert signable.version == b"\x01"
        assert bytes(signable.header) == domain_separator(domain)
        assert bytes(signable.body) == struct_hash(sample_order)

    def test_golden_order_matches(self, golden_domain, zero_order) -> None:
        signable = encode_typed_data(
            golden_domain.to_dict(),
            EIP712_ORDER_MESSAGE_TYPE,
            build_order_message_data(zero_order),
        )
        assert bytes(signable.header).hex() == GOLDEN_DOMAIN_SEPARATOR
        assert bytes(signable.body).hex() == GOLDEN_ZERO_ORDER_STRUCT_HASH


class TestHashProperties:
    """Purity and sensitivity"""

    def test_pure(self, golden_domain, sample_order) -> None:
        assert domain_separator(golden_domain) == domain_separator(golden_domain)
        assert struct_hash(sample_order) == struct_hash(sample_order)
        assert len(struct_hash(sample_order)) == 32

    @pytest.mark.parametrize(
        "changes",
        [
            {"salt": 123456790},
            {"makerAmount": 10 * 10**18 + 1},
            {"side": Side.SELL},
            {"signatureType": SignatureType.POLY_GNOSIS_SAFE},
            {"taker": TEST_ADDRESS},
            {"feeRateBps": 1},
        ],
    )
    def test_any_field_change_changes_hash(self, sample_order, changes) -> None:
        assert struct_hash(replace(sample_order, **changes)) != struct_hash(sample_order)

    def test_swapping_maker_and_taker_changes_hash(self, sample_order) -> None:
        swapped = replace(sample_order, maker=sample_order.taker, taker=sample_order.maker)
        assert struct_hash(swapped) != struct_hash(sample_order)

    def test_domain_binds_chain_and_contract(self, golden_domain, zero_order) -> None:
        other_chain = replace(golden_domain, chainId=97)
        other_contract = replace(golden_domain, verifyingContract=TEST_ADDRESS)
        base = sign_hash(golden_domain, zero_order)
        assert sign_hash(other_chain, zero_order) != base
        assert sign_hash(other_contract, zero_order) != base


class TestAbiEncode:
    """Tests for abi_encode"""

    def test_static_slots(self) -> None:
        encoded = abi_encode(["uint256", "address", "uint8"], [1, TEST_ADDRESS, 1])
        assert len(encoded) == 96
        assert encoded[:32] == (1).to_bytes(32, "big")
        assert encoded[32:44] == b"\x00" * 12
        assert encoded[44:64] == bytes.fromhex(TEST_ADDRESS[2:])

    def test_count_mismatch(self) -> None:
        with pytest.raises(EncodingError, match="expected 2 values"):
            abi_encode(["uint256", "uint256"], [1])

    def test_out_of_range_value(self) -> None:
        with pytest.raises(EncodingError):
            abi_encode(["uint8"], [256])

    def test_wrong_type(self) -> None:
        with pytest.raises(EncodingError):
            abi_encode(["address"], [12345])
