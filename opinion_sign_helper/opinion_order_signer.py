#!/usr/bin/env python3
"""
===============================================================================
OPINION ORDER SIGNER
===============================================================================

Signs OPINION CTF Exchange orders locally. Users provide a private key and
an order (either a complete order or an order form with a price and a size)
and get back the signature and a payload ready for submission.

===============================================================================
HOW ORDER SIGNING WORKS - STEP BY STEP
===============================================================================

1. COMPUTE ORDER AMOUNTS (order forms only)
   - Resolve the maker amount from a quote- or base-token size
   - Convert it to minor units using the quote token's decimals
   - Cut the maker amount to 4 significant digits, derive the taker amount

2. BUILD EIP-712 MESSAGE DATA
   - The 12 Order fields, in the contract's struct order

3. CREATE EIP-712 DOMAIN DATA
   - Identify the contract ("OPINION CTF Exchange", version "1")
   - Chain ID and exchange address (prevents cross-chain/contract replay)

4. HASH
   - domainSeparator and structHash, then keccak256(0x1901 ++ both)

5. CRYPTOGRAPHIC SIGNING
   - secp256k1 signature over the hash, v normalized to 27/28

6. CREATE COMPLETE ORDER PAYLOAD
   - Flat string fields plus the 0x-prefixed 65-byte signature

===============================================================================
USAGE:
    python -m opinion_sign_helper.opinion_order_signer [order.json]

    The private key is read from OPINION_PRIVATE_KEY, or prompted for.
===============================================================================
"""

import json
import os
import sys
from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from .amounts import build_order_amounts
from .order_builder import OrderBuilder
from .signer import load_account, sign_order_hash
from .typed_data import EIP712_DOMAIN_NAME, EIP712_DOMAIN_VERSION, build_domain
from .types import Order, OrderData, OrderType, Side, SignatureType, SignedOrder


class ChainId(IntEnum):
    """Chains the exchange is deployed on."""
    BNB_MAINNET = 56


# Contracts the exchange settles against, per supported chain.
DEFAULT_CONTRACT_ADDRESSES: Dict[ChainId, Dict[str, str]] = {
    ChainId.BNB_MAINNET: {
        "conditional_tokens": "0xAD1a38cEc043e70E83a3eC30443dB285ED10D774",
        "multisend": "0x998739BFdAAdde7C933B942a68053933098f9EDa",
        "fee_manager": "0xC9063Dc52dEEfb518E5b6634A6b8D624bc5d7c36",
    },
}


PRIVATE_KEY_ENV_VAR = "OPINION_PRIVATE_KEY"


def get_contract_addresses(chain_id: int) -> Dict[str, str]:
    """Default contract addresses for ``chain_id``; unsupported chains raise ValueError."""
    try:
        return dict(DEFAULT_CONTRACT_ADDRESSES[ChainId(int(chain_id))])
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported chain_id: {chain_id}")


# ================================================================================
# EIP-712 TYPE DEFINITIONS - CRITICAL FOR SIGNATURE VERIFICATION
# ================================================================================
# These type definitions MUST match exactly what the exchange contract expects.
# They are published with every payload so wallets can display what is signed.
EIP712_ORDER_MESSAGE_TYPE: Dict[str, List[Dict[str, str]]] = {
    "Order": [
        {"name": "salt", "type": "uint256"},             # Unique per order
        {"name": "maker", "type": "address"},            # Funds source
        {"name": "signer", "type": "address"},           # Key that signs
        {"name": "taker", "type": "address"},            # Zero address = anyone
        {"name": "tokenId", "type": "uint256"},          # Outcome token
        {"name": "makerAmount", "type": "uint256"},      # Offered, minor units
        {"name": "takerAmount", "type": "uint256"},      # Requested, minor units
        {"name": "expiration", "type": "uint256"},       # 0 = never
        {"name": "nonce", "type": "uint256"},
        {"name": "feeRateBps", "type": "uint256"},
        {"name": "side", "type": "uint8"},               # 0 = BUY, 1 = SELL
        {"name": "signatureType", "type": "uint8"},      # 0 = EOA, 1 = Safe, 2 = Proxy
    ],
}


def get_eip712_domain_data(chain_id: int, exchange_address: str) -> Dict[str, Union[str, int]]:
    """
    ================================================================================
    EIP-712 DOMAIN DATA - CONTRACT IDENTIFICATION
    ================================================================================
    Domain data identifies the specific contract and chain for signature verification.
    """
    return {
        "name": EIP712_DOMAIN_NAME,
        "version": EIP712_DOMAIN_VERSION,
        "chainId": int(chain_id),
        "verifyingContract": build_domain(chain_id, exchange_address).verifyingContract,
    }


def build_order_message_data(order: Order) -> Dict[str, Any]:
    """EIP-712 message dict for ``order``, keyed by the field names in EIP712_ORDER_MESSAGE_TYPE."""
    return {
        "salt": order.salt,
        "maker": order.maker,
        "signer": order.signer,
        "taker": order.taker,
        "tokenId": order.tokenId,
        "makerAmount": order.makerAmount,
        "takerAmount": order.takerAmount,
        "expiration": order.expiration,
        "nonce": order.nonce,
        "feeRateBps": order.feeRateBps,
        "side": int(order.side),
        "signatureType": int(order.signatureType),
    }


def sign_order(
    order: Order,
    private_key: str,
    chain_id: int,
    exchange_address: str,
) -> Dict[str, Any]:
    """
    ================================================================================
    MAIN ORDER SIGNING FUNCTION - EIP-712 SIGNATURE GENERATION
    ================================================================================
    Args:
        order: Fully populated order
        private_key: Private key in hex format (with or without 0x prefix)
        chain_id: Chain the exchange contract lives on
        exchange_address: Exchange (verifying) contract address

    Returns:
        Dictionary containing the signature components and complete order payload
    """
    account = load_account(private_key)
    domain = build_domain(chain_id, exchange_address)

    signature = sign_order_hash(order, domain, account.key)
    signature_hex = "0x" + signature.hex()

    return {
        "signer": account.address,
        "r": "0x" + signature[:32].hex(),
        "s": "0x" + signature[32:64].hex(),
        "v": signature[64],
        "signature": signature_hex,
        "payload_to_sign": {
            "domain": domain.to_dict(),
            "types": EIP712_ORDER_MESSAGE_TYPE,
            "primaryType": "Order",
            "message": build_order_message_data(order),
        },
        "complete_order_payload": create_complete_order_payload(order, signature_hex),
    }


def create_complete_order_payload(order: Order, signature: str) -> Dict[str, str]:
    """Flat submission payload: every order field as a string, plus the signature."""
    return SignedOrder(order=order, signature=signature).to_payload()


def load_json_file(file_path: str) -> Dict[str, Any]:
    """Load JSON data from a file."""
    try:
        with open(file_path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in file {file_path}: {e}")


def order_from_dict(data: Dict[str, Any]) -> Order:
    """Build an Order from a dict using the payload field names; salt and amounts may be strings."""
    if "order" in data:
        data = data["order"]
    fields = {name: data[name] for name in Order.__dataclass_fields__ if name in data}
    missing = set(Order.__dataclass_fields__) - set(fields)
    if missing:
        raise ValueError(f"Order is missing fields: {sorted(missing)}")
    return Order(**fields)


def order_from_form(form: Dict[str, Any], builder: OrderBuilder) -> Order:
    """
    Turn a human order form into an Order.

    Expected keys: maker, token_id, side ("BUY"/"SELL"), price, decimals and
    one of amount_in_quote_token / amount_in_base_token. Optional:
    order_type ("LIMIT"/"MARKET"), signature_type ("EOA"/"POLY_GNOSIS_SAFE"/"POLY_PROXY").
    """
    try:
        side = Side[str(form["side"]).upper()]
        order_type = OrderType[str(form.get("order_type", "LIMIT")).upper()]
        signature_type = SignatureType[str(form.get("signature_type", "EOA")).upper()]
    except KeyError as e:
        raise ValueError(f"Invalid order form value: {e}")

    amounts = build_order_amounts(
        side,
        form.get("price"),
        int(form["decimals"]),
        amount_in_quote_token=form.get("amount_in_quote_token"),
        amount_in_base_token=form.get("amount_in_base_token"),
        order_type=order_type,
    )
    return builder.build_order(OrderData(
        maker=form["maker"],
        signer=form.get("signer") or builder.address,
        tokenId=form["token_id"],
        makerAmount=amounts.maker_amount,
        takerAmount=amounts.taker_amount,
        side=side,
        signatureType=signature_type,
    ))


def get_user_input(argv: List[str]) -> tuple[str, Dict[str, Any]]:
    """Get the private key and order document from env, argv or prompts."""
    print("OPINION Order Signer")
    print("=" * 50)

    private_key = os.getenv(PRIVATE_KEY_ENV_VAR, "").strip()
    if not private_key:
        private_key = input("Enter private key (hex, with or without 0x prefix): ").strip()

    order_doc: Optional[Dict[str, Any]] = None
    if argv:
        order_doc = load_json_file(argv[0])
        print(f"✅ Loaded order data from {argv[0]}")

    while order_doc is None:
        file_path = input("\nEnter path to order JSON file: ").strip()
        try:
            order_doc = load_json_file(file_path)
            print(f"✅ Loaded order data from {file_path}")
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ Error loading file: {e}")
            print("Example:")
            print(json.dumps({
                "chain_id": int(ChainId.BNB_MAINNET),
                "exchange_address": "0x5f45344126d6488025b0b84a3a8189f2487a7246",
                "order_form": {
                    "maker": "0x1111111111111111111111111111111111111111",
                    "token_id": "1234",
                    "side": "BUY",
                    "price": "0.55",
                    "amount_in_quote_token": "10",
                    "decimals": 18,
                    "signature_type": "POLY_GNOSIS_SAFE",
                },
            }, indent=2))

    return private_key, order_doc


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the order signer."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        private_key, order_doc = get_user_input(argv)
        chain_id = int(order_doc.get("chain_id", ChainId.BNB_MAINNET))
        contracts = get_contract_addresses(chain_id)
        exchange_address = order_doc["exchange_address"]

        if "order_form" in order_doc:
            builder = OrderBuilder(exchange_address, chain_id, private_key)
            order = order_from_form(order_doc["order_form"], builder)
        else:
            order = order_from_dict(order_doc)

        print("\n" + "=" * 50)
        print("SIGNING ORDER")
        print("=" * 50)

        signature_result = sign_order(order, private_key, chain_id, exchange_address)

        print("\n✅ Order signed successfully!")
        print(f"\nSigner: {signature_result['signer']}")
        print(f"R: {signature_result['r']}")
        print(f"S: {signature_result['s']}")
        print(f"V: {signature_result['v']}")

        print(f"\nChain {chain_id} contracts:")
        for name, address in contracts.items():
            print(f"  {name}: {address}")

        print("\n📋 Payload to sign:")
        print(json.dumps(signature_result['payload_to_sign'], indent=2))

        print("\n📦 Complete order payload (ready for API submission):")
        print(json.dumps(signature_result['complete_order_payload'], indent=2))
        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 130
    except Exception as e:
        print(f"\n❌ Error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
