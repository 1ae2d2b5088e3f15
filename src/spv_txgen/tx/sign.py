"""Input signing — explicit-key signing, verification and the key signer.

Inputs are P2PKH. Each input is signed over the FORKID sighash of its spent
entry, and its unlocking script becomes ``<sig+0x41> <compressed pubkey>``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Self

from spv_txgen.bsv.address import pubkey_to_address, wif_to_privkey
from spv_txgen.bsv.keys import private_key_to_public_key, sign_digest, verify_signature
from spv_txgen.bsv.script import extract_pubkey_hash, p2pkh_unlock_script, read_pushes
from spv_txgen.bsv.sighash import SIGHASH_ALL_FORKID, signature_hash
from spv_txgen.errors.tx_errors import CryptoError
from spv_txgen.utils.crypto import hash160

if TYPE_CHECKING:
    from spv_txgen.config.settings import SignerConfig
    from spv_txgen.tx.signable import SignableTransaction

logger = logging.getLogger(__name__)


def sign_with_keys(
    signable: SignableTransaction, private_keys: Iterable[bytes]
) -> SignableTransaction:
    """Sign every input one of *private_keys* can unlock.

    Inputs no key matches are left as they are, so the result may be only
    partially signed; combine calls (or use :func:`is_fully_signed`) for
    multi-party signing.

    Args:
        signable: The transaction to sign; it is not modified.
        private_keys: 32-byte secp256k1 private keys.

    Returns:
        A new :class:`SignableTransaction` carrying the signatures.

    Raises:
        CryptoError: If a key is malformed or out of range.
    """
    keyring: dict[bytes, tuple[bytes, bytes]] = {}
    for privkey in private_keys:
        try:
            pubkey = private_key_to_public_key(privkey)
        except ValueError as exc:
            raise CryptoError(f"invalid private key: {exc}") from exc
        keyring[hash160(pubkey)] = (privkey, pubkey)

    signed = signable.clone()
    tx = signed.tx
    count = 0
    for index, entry in enumerate(signed.entries):
        pubkey_hash = extract_pubkey_hash(entry.script_pubkey)
        if pubkey_hash is None or pubkey_hash not in keyring:
            continue
        privkey, pubkey = keyring[pubkey_hash]
        digest = signature_hash(tx, index, entry.script_pubkey, entry.satoshis)
        signature = sign_digest(privkey, digest) + bytes([SIGHASH_ALL_FORKID])
        tx.inputs[index].script_sig = p2pkh_unlock_script(signature, pubkey)
        count += 1

    logger.debug("Signed %d of %d inputs", count, len(tx.inputs))
    return signed


def verify_input(signable: SignableTransaction, index: int) -> bool:
    """Check that input *index* carries a valid P2PKH signature for its entry."""
    entry = signable.entries[index]
    pubkey_hash = extract_pubkey_hash(entry.script_pubkey)
    script_sig = signable.tx.inputs[index].script_sig
    if pubkey_hash is None or not script_sig:
        return False
    try:
        items = read_pushes(script_sig)
    except ValueError:
        return False
    if len(items) != 2 or len(items[0]) < 2:
        return False
    signature, pubkey = items
    if signature[-1] != SIGHASH_ALL_FORKID or hash160(pubkey) != pubkey_hash:
        return False
    digest = signature_hash(signable.tx, index, entry.script_pubkey, entry.satoshis)
    return verify_signature(pubkey, digest, signature[:-1])


def is_fully_signed(signable: SignableTransaction) -> bool:
    """True if every input carries a valid signature."""
    return all(verify_input(signable, i) for i in range(len(signable.tx.inputs)))


class KeySigner:
    """A :class:`~spv_txgen.tx.interfaces.Signer` holding keys by address.

    Unlike :func:`sign_with_keys`, ``try_sign`` insists on a complete result:
    a transaction it returns has every input signed.
    """

    def __init__(self, private_keys: Iterable[bytes], *, testnet: bool = False) -> None:
        self._testnet = testnet
        self._keys: dict[str, bytes] = {}
        for privkey in private_keys:
            try:
                address = pubkey_to_address(private_key_to_public_key(privkey), testnet=testnet)
            except ValueError as exc:
                raise CryptoError(f"invalid private key: {exc}") from exc
            self._keys[address] = privkey

    @classmethod
    def from_wif(cls, wif_keys: Iterable[str], *, testnet: bool = False) -> Self:
        """Build a signer from WIF-encoded keys."""
        privkeys: list[bytes] = []
        for wif in wif_keys:
            try:
                privkey = wif_to_privkey(wif).privkey
            except ValueError as exc:
                raise CryptoError(f"invalid WIF key: {exc}") from exc
            privkeys.append(privkey)
        return cls(privkeys, testnet=testnet)

    @classmethod
    def from_config(cls, config: SignerConfig, *, testnet: bool = False) -> Self:
        return cls.from_wif(config.wif_keys, testnet=testnet)

    @property
    def addresses(self) -> list[str]:
        """Addresses this signer holds keys for."""
        return list(self._keys)

    def try_sign(
        self, signable: SignableTransaction, addresses: Sequence[str]
    ) -> SignableTransaction:
        """Sign *signable* with the keys for *addresses*.

        Raises:
            CryptoError: If a key is missing or an input is left unsigned.
        """
        missing = [address for address in addresses if address not in self._keys]
        if missing:
            raise CryptoError(f"no private key for address {missing[0]}", code="missing-key")
        signed = sign_with_keys(signable, (self._keys[address] for address in addresses))
        unsigned = [i for i in range(len(signed.tx.inputs)) if not verify_input(signed, i)]
        if unsigned:
            raise CryptoError(
                f"inputs left unsigned: {', '.join(str(i) for i in unsigned)}",
                code="incomplete-signature",
            )
        return signed
