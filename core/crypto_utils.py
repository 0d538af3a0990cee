"""
This file implements the core cryptographic utilities used by the handshake simulation

Includes:
- Key derivation (SHA-256, truncated to an AES-128 key)
- Random token generation
- AES-CBC encryption into the textual <ivHex>:<cipherHex> envelope
- Envelope decryption
"""

import os
import re
import secrets
from typing import Union
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend
from config import KEY_SIZE, IV_SIZE, TOKEN_BYTES
from core.errors import FormatError, DecryptionError

ENVELOPE_SEPARATOR = ":"
HEX_RE = re.compile(r"[0-9a-fA-F]*")

#Key derivation
def derive_key(passphrase: str, size: int = KEY_SIZE) -> bytes:
    digest = hashes.Hash(hashes.SHA256(), backend=default_backend())
    digest.update(passphrase.encode("utf-8"))
    return digest.finalize()[:size]

#Token generation (hex string)
def generate_token_hex(nbytes: int = TOKEN_BYTES) -> str:
    return secrets.token_hex(nbytes)

#AES-CBC mode with PKCS7 padding, fresh IV per call
def encrypt_message(key: bytes, plaintext: Union[bytes, str]) -> str:
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    iv = os.urandom(IV_SIZE)
    cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend())
    encryptor = cipher.encryptor()
    padder = padding.PKCS7(128).padder()
    padded_data = padder.update(plaintext) + padder.finalize()
    ciphertext = encryptor.update(padded_data) + encryptor.finalize()
    return iv.hex() + ENVELOPE_SEPARATOR + ciphertext.hex()

def split_envelope(envelope: str):
    """Return (iv, ciphertext) bytes from an envelope, or raise FormatError."""
    if envelope.count(ENVELOPE_SEPARATOR) != 1:
        raise FormatError("bad ciphertext format: expected exactly one ':' separator")
    iv_hex, ct_hex = envelope.split(ENVELOPE_SEPARATOR)
    if not (HEX_RE.fullmatch(iv_hex) and HEX_RE.fullmatch(ct_hex)):
        raise FormatError("bad ciphertext format: envelope parts must be plain hex")
    try:
        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(ct_hex)
    except ValueError as e:
        raise FormatError(f"bad ciphertext format: {e}") from e
    if len(iv) != IV_SIZE:
        raise FormatError(f"bad ciphertext format: IV is {len(iv)} bytes, expected {IV_SIZE}")
    return iv, ciphertext

def decrypt_message(key: bytes, envelope: str) -> bytes:
    iv, ciphertext = split_envelope(envelope)
    cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend())
    decryptor = cipher.decryptor()
    try:
        padded_plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        plaintext = unpadder.update(padded_plaintext) + unpadder.finalize()
    except ValueError as e:
        raise DecryptionError(f"decryption_failed: {e}") from e
    return plaintext

def decrypt_text(key: bytes, envelope: str) -> str:
    plaintext = decrypt_message(key, envelope)
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError(f"decryption_failed: plaintext is not text ({e})") from e
