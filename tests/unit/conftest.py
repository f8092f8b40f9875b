"""Shared fixtures: a well-known test key and the golden-vector domain/order."""

import pytest

from opinion_sign_helper.types import EIP712Domain, Order, Side, SignatureType, ZERO_ADDRESS

# Hardhat/Anvil default account #0; public test key, never funded on mainnet.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

GOLDEN_CONTRACT = "0x0000000000000000000000000000000000000001"


@pytest.fixture
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture
def golden_domain() -> EIP712Domain:
    return EIP712Domain(
        name="OPINION CTF Exchange",
        version="1",
        chainId=56,
        verifyingContract=GOLDEN_CONTRACT,
    )


@pytest.fixture
def zero_order() -> Order:
    """All-zero order except salt=1."""
    return Order(
        salt=1,
        maker=ZERO_ADDRESS,
        signer=ZERO_ADDRESS,
        taker=ZERO_ADDRESS,
        tokenId=0,
        makerAmount=0,
        takerAmount=0,
        expiration=0,
        nonce=0,
        feeRateBps=0,
        side=Side.BUY,
        signatureType=SignatureType.EOA,
    )


@pytest.fixture
def sample_order() -> Order:
    return Order(
        salt=123456789,
        maker=TEST_ADDRESS,
        signer=TEST_ADDRESS,
        taker=ZERO_ADDRESS,
        tokenId=42,
        makerAmount=10 * 10**18,
        takerAmount=20 * 10**18,
        expiration=0,
        nonce=0,
        feeRateBps=0,
        side=Side.BUY,
        signatureType=SignatureType.EOA,
    )
