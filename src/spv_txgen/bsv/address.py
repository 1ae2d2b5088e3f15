"""P2PKH addresses and WIF keys for mainnet and testnet.

The signer is configured with WIF keys and matched to the addresses a
pending transaction spends from; both encodings are Base58Check with a
network version byte.
"""

from __future__ import annotations

from typing import NamedTuple

from spv_txgen.bsv.keys import base58check_decode, base58check_encode
from spv_txgen.bsv.script import p2pkh_lock_script
from spv_txgen.utils.crypto import hash160


class _Network(NamedTuple):
    pubkey_hash: int
    wif: int


_MAINNET = _Network(pubkey_hash=0x00, wif=0x80)  # 1... / 5..., K..., L...
_TESTNET = _Network(pubkey_hash=0x6F, wif=0xEF)  # m..., n... / 9..., c...


def _network(testnet: bool) -> _Network:
    return _TESTNET if testnet else _MAINNET


class DecodedWIF(NamedTuple):
    privkey: bytes
    compressed: bool
    testnet: bool


def pubkey_to_address(pubkey: bytes, *, testnet: bool = False) -> str:
    """P2PKH address of a SEC-encoded public key."""
    return base58check_encode(bytes([_network(testnet).pubkey_hash]) + hash160(pubkey))


def address_to_pubkey_hash(address: str) -> bytes:
    """The 20-byte hash a P2PKH address pays to.

    Raises:
        ValueError: If the checksum fails or the address is not P2PKH.
    """
    payload = base58check_decode(address)
    if len(payload) != 21 or payload[0] not in (_MAINNET.pubkey_hash, _TESTNET.pubkey_hash):
        msg = f"Not a P2PKH address: {address}"
        raise ValueError(msg)
    return payload[1:]


def address_to_lock_script(address: str) -> bytes:
    return p2pkh_lock_script(address_to_pubkey_hash(address))


def validate_address(address: str) -> bool:
    try:
        address_to_pubkey_hash(address)
    except ValueError:
        return False
    return True


def privkey_to_wif(privkey: bytes, *, compressed: bool = True, testnet: bool = False) -> str:
    """Encode a 32-byte private key as WIF."""
    suffix = b"\x01" if compressed else b""
    return base58check_encode(bytes([_network(testnet).wif]) + privkey + suffix)


def wif_to_privkey(wif: str) -> DecodedWIF:
    """Decode a WIF key.

    Raises:
        ValueError: On a bad checksum, length, version byte or compression flag.
    """
    payload = base58check_decode(wif)
    if len(payload) not in (33, 34):
        msg = f"Invalid WIF payload length: {len(payload)}"
        raise ValueError(msg)
    if payload[0] not in (_MAINNET.wif, _TESTNET.wif):
        msg = f"Invalid WIF version byte: {payload[0]:#04x}"
        raise ValueError(msg)
    compressed = len(payload) == 34
    if compressed and payload[33] != 0x01:
        msg = "Invalid WIF compression flag"
        raise ValueError(msg)
    return DecodedWIF(payload[1:33], compressed, payload[0] == _TESTNET.wif)
