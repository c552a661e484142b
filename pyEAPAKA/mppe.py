"""
MS-MPPE-Send-Key / MS-MPPE-Recv-Key encryption (RFC 2548 Section 2.4.2)

    b(1) = MD5(Secret | Request-Authenticator | Salt)    c(1) = p(1) xor b(1)
    b(i) = MD5(Secret | c(i-1))                         c(i) = p(i) xor b(i)

The attribute value is Salt | c(1) | c(2) | ...
"""

import hashlib
import logging
import os

from .errors import EntropyError, FieldValidationError

logger = logging.getLogger(__name__)

MPPE_SALT_LENGTH = 2
MPPE_BLOCK_LENGTH = 16
REQUEST_AUTHENTICATOR_LENGTH = 16
MAX_MPPE_KEY_LENGTH = 255


def _as_bytes(value):
    return value.encode('utf-8') if isinstance(value, str) else bytes(value)


def generate_salt():
    """Two random bytes with the most significant bit set"""
    try:
        salt = bytearray(os.urandom(MPPE_SALT_LENGTH))
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source failed: {e}") from e
    salt[0] |= 0x80
    return bytes(salt)


def _crypt(data, secret, request_authenticator, salt, decrypt):
    out = b''
    b = hashlib.md5(secret + request_authenticator + salt).digest()
    for i in range(0, len(data), MPPE_BLOCK_LENGTH):
        block = data[i:i + MPPE_BLOCK_LENGTH]
        result = bytes(x ^ y for x, y in zip(block, b))
        out += result
        b = hashlib.md5(secret + (block if decrypt else result)).digest()
    return out


def _check_request_authenticator(request_authenticator):
    if len(request_authenticator) != REQUEST_AUTHENTICATOR_LENGTH:
        raise FieldValidationError(
            'Request Authenticator',
            f"must be {REQUEST_AUTHENTICATOR_LENGTH} bytes, got {len(request_authenticator)}")


def encrypt_mppe_key(key, secret, request_authenticator, salt=None, include_salt_in_padding=True):
    """Encrypt a key for an MS-MPPE-*-Key attribute

    By default the zero padding makes Salt | Key-Length | Key | Padding a
    multiple of 16 bytes, so a 32 byte key gives a 48 byte value. With
    include_salt_in_padding=False only Key-Length | Key | Padding is aligned,
    which is the String layout NAS implementations decrypt (50 bytes for a 32
    byte key).
    """
    if not 0 < len(key) <= MAX_MPPE_KEY_LENGTH:
        raise FieldValidationError('key', f"length must be 1..{MAX_MPPE_KEY_LENGTH}, got {len(key)}")
    _check_request_authenticator(request_authenticator)

    if salt is None:
        salt = generate_salt()
    elif len(salt) != MPPE_SALT_LENGTH or not salt[0] & 0x80:
        raise FieldValidationError('salt', 'must be 2 bytes with the most significant bit set')

    plaintext = bytes([len(key)]) + bytes(key)
    aligned = len(plaintext) + (MPPE_SALT_LENGTH if include_salt_in_padding else 0)
    plaintext += bytes((MPPE_BLOCK_LENGTH - aligned % MPPE_BLOCK_LENGTH) % MPPE_BLOCK_LENGTH)

    ciphertext = _crypt(plaintext, _as_bytes(secret), bytes(request_authenticator), salt, decrypt=False)
    logger.debug(f"MPPE key encrypted: {len(key)} byte key, salt={salt.hex()}")
    return salt + ciphertext


def decrypt_mppe_key(data, secret, request_authenticator):
    """Recover the key from an MS-MPPE-*-Key attribute value"""
    _check_request_authenticator(request_authenticator)
    if len(data) <= MPPE_SALT_LENGTH:
        raise FieldValidationError('MPPE key', f"value too short: {len(data)} bytes")

    salt = bytes(data[:MPPE_SALT_LENGTH])
    if not salt[0] & 0x80:
        raise FieldValidationError('salt', 'most significant bit is not set')

    plaintext = _crypt(bytes(data[MPPE_SALT_LENGTH:]), _as_bytes(secret),
                       bytes(request_authenticator), salt, decrypt=True)
    key_length = plaintext[0]
    if key_length == 0 or key_length > len(plaintext) - 1:
        raise FieldValidationError('MPPE key', f"invalid key length {key_length}")
    return plaintext[1:1 + key_length]
