#!/usr/bin/env python3
"""
AT_IV / AT_ENCR_DATA tests
"""

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

import pyEAPAKA.encr
from pyEAPAKA import (
    EAPPacket, parse, EAP_REQUEST, EAP_TYPE_AKA, AKA_REAUTHENTICATION,
    AT_IV, AT_ENCR_DATA, EntropyError, FieldValidationError,
    CounterAttribute, NonceSAttribute, NextReauthIdAttribute, PaddingAttribute,
    IvAttribute, EncrDataAttribute, MacAttribute,
    encrypt_attributes, decrypt_attributes,
)

K_ENCR = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
IV = b'\x42' * 16


def test_round_trip_with_padding():
    """AT_COUNTER alone is padded to one AES block with AT_PADDING"""
    print("Testing AT_ENCR_DATA encryption...")
    iv_attr, encr_attr = encrypt_attributes([CounterAttribute(5)], K_ENCR, iv=IV)
    assert iv_attr == IvAttribute(IV)
    assert len(encr_attr.encrypted_data) == 16

    decrypted = decrypt_attributes(encr_attr, iv_attr, K_ENCR)
    assert decrypted == [CounterAttribute(5), PaddingAttribute(10)]

    # raw values work as well
    assert decrypt_attributes(encr_attr.encrypted_data, IV, K_ENCR) == decrypted
    print("✓ AT_ENCR_DATA encryption passed")


def test_matches_aes_cbc():
    plaintext = CounterAttribute(5).pack() + PaddingAttribute(10).pack()
    encryptor = Cipher(algorithms.AES(K_ENCR), modes.CBC(IV), backend=default_backend()).encryptor()
    expected = encryptor.update(plaintext) + encryptor.finalize()

    _, encr_attr = encrypt_attributes([CounterAttribute(5)], K_ENCR, iv=IV)
    assert encr_attr.encrypted_data == expected


def test_block_aligned_needs_no_padding():
    attributes = [NonceSAttribute(b'\x07' * 16), CounterAttribute(1),
                  CounterAttribute(2), CounterAttribute(3)]
    _, encr_attr = encrypt_attributes(attributes, K_ENCR, iv=IV)
    assert len(encr_attr.encrypted_data) == 32
    assert decrypt_attributes(encr_attr, IV, K_ENCR) == attributes


def test_reauth_request():
    """Encrypted attributes inside a re-authentication request"""
    nested = [CounterAttribute(1), NonceSAttribute(b'\x5a' * 16),
              NextReauthIdAttribute('reauth-1@example.com')]
    iv_attr, encr_attr = encrypt_attributes(nested, K_ENCR)
    assert len(iv_attr.iv) == 16

    packet = EAPPacket(EAP_REQUEST, 9, EAP_TYPE_AKA, AKA_REAUTHENTICATION,
                       [iv_attr, encr_attr, MacAttribute()])
    parsed = parse(packet.pack())

    decrypted = decrypt_attributes(parsed.find_attribute(AT_ENCR_DATA),
                                   parsed.find_attribute(AT_IV), K_ENCR)
    assert decrypted[:3] == nested
    assert all(isinstance(a, PaddingAttribute) for a in decrypted[3:])


def test_random_iv():
    iv1, _ = encrypt_attributes([CounterAttribute(1)], K_ENCR)
    iv2, _ = encrypt_attributes([CounterAttribute(1)], K_ENCR)
    assert len(iv1.iv) == 16
    assert iv1 != iv2


def test_entropy_failure():
    def broken_urandom(n):
        raise OSError("no entropy")

    original = pyEAPAKA.encr.os.urandom
    pyEAPAKA.encr.os.urandom = broken_urandom
    try:
        try:
            encrypt_attributes([CounterAttribute(1)], K_ENCR)
            assert False, "entropy failure should raise"
        except EntropyError as e:
            assert isinstance(e.__cause__, OSError)

        # a caller supplied IV needs no randomness
        iv_attr, _ = encrypt_attributes([CounterAttribute(1)], K_ENCR, iv=IV)
        assert iv_attr.iv == IV
    finally:
        pyEAPAKA.encr.os.urandom = original


def test_errors():
    print("\nTesting AT_ENCR_DATA errors...")
    cases = [
        lambda: encrypt_attributes([], K_ENCR, iv=IV),
        lambda: encrypt_attributes([CounterAttribute(1)], bytes(8), iv=IV),
        lambda: encrypt_attributes([CounterAttribute(1)], K_ENCR, iv=bytes(8)),
        lambda: decrypt_attributes(b'', IV, K_ENCR),
        lambda: decrypt_attributes(bytes(17), IV, K_ENCR),
        lambda: decrypt_attributes(EncrDataAttribute(bytes(16)), IV, bytes(32)),
    ]
    for case in cases:
        try:
            case()
            assert False, "invalid input should be rejected"
        except FieldValidationError:
            pass
    print("✓ AT_ENCR_DATA errors passed")


def main():
    print("pyEAPAKA Encryption Tests")
    print("=========================\n")

    test_round_trip_with_padding()
    test_matches_aes_cbc()
    test_block_aligned_needs_no_padding()
    test_reauth_request()
    test_random_iv()
    test_entropy_failure()
    test_errors()

    print("\n✅ All encryption tests passed!")


if __name__ == "__main__":
    main()
