"""
Encrypted attributes: AT_IV and AT_ENCR_DATA (RFC 4187 Section 10.12)

Nested attributes (AT_NEXT_PSEUDONYM, AT_NEXT_REAUTH_ID, AT_COUNTER,
AT_NONCE_S, ...) are serialized, padded to the AES block size with
AT_PADDING and encrypted with AES-128-CBC under K_encr.
"""

import logging
import os

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .attributes import (
    EncrDataAttribute, IvAttribute, PaddingAttribute,
    pack_attributes, unpack_attributes,
)
from .constants import ATTRIBUTE_HEADER_LENGTH, IV_LENGTH, K_ENCR_LENGTH
from .errors import EntropyError, FieldValidationError

logger = logging.getLogger(__name__)

AES_BLOCK_LENGTH = 16


def _cipher(k_encr, iv):
    if len(k_encr) != K_ENCR_LENGTH:
        raise FieldValidationError('K_encr', f"must be {K_ENCR_LENGTH} bytes, got {len(k_encr)}")
    if len(iv) != IV_LENGTH:
        raise FieldValidationError('AT_IV', f"must be {IV_LENGTH} bytes, got {len(iv)}")
    return Cipher(algorithms.AES(bytes(k_encr)), modes.CBC(bytes(iv)), backend=default_backend())


def encrypt_attributes(attributes, k_encr, iv=None):
    """Encrypt nested attributes; returns (IvAttribute, EncrDataAttribute)"""
    if iv is None:
        try:
            iv = os.urandom(IV_LENGTH)
        except (OSError, NotImplementedError) as e:
            raise EntropyError(f"Secure random source failed: {e}") from e

    plaintext = pack_attributes(attributes)
    if not plaintext:
        raise FieldValidationError('AT_ENCR_DATA', 'no attributes to encrypt')

    remainder = len(plaintext) % AES_BLOCK_LENGTH
    if remainder:
        padding = AES_BLOCK_LENGTH - remainder
        plaintext += PaddingAttribute(padding - ATTRIBUTE_HEADER_LENGTH).pack()

    encryptor = _cipher(k_encr, iv).encryptor()
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()

    logger.debug(f"Encrypted {len(attributes)} attributes into {len(ciphertext)} bytes")
    return IvAttribute(bytes(iv)), EncrDataAttribute(ciphertext)


def decrypt_attributes(encr_data, iv, k_encr):
    """Decrypt AT_ENCR_DATA and parse the nested attributes

    encr_data and iv may be the attributes themselves or their raw values.
    AT_PADDING is returned like any other nested attribute.
    """
    if isinstance(encr_data, EncrDataAttribute):
        encr_data = encr_data.encrypted_data
    if isinstance(iv, IvAttribute):
        iv = iv.iv

    if not encr_data or len(encr_data) % AES_BLOCK_LENGTH:
        raise FieldValidationError(
            'AT_ENCR_DATA',
            f"encrypted data must be a non-empty multiple of {AES_BLOCK_LENGTH} bytes, got {len(encr_data)}")

    decryptor = _cipher(k_encr, iv).decryptor()
    plaintext = decryptor.update(bytes(encr_data)) + decryptor.finalize()

    return unpack_attributes(plaintext)
