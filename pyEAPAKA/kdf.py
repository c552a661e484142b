"""
Key derivation for EAP-AKA (RFC 4187 Section 7) and EAP-AKA' (RFC 5448 Section 3)

All functions are pure: the same inputs always give the same keys.

CK'/IK' come in two flavours. derive_ck_prime_ik_prime() produces the values
deployed peers and servers built on the same construction expect (PRF+ over
IK|CK with "EAP-AKA'" in the seed). derive_ck_prime_ik_prime_ts33402()
follows 3GPP TS 33.402 Annex A.2 and reproduces the RFC 5448 Appendix C
test vectors. Both feed derive_keys_aka_prime() unchanged.
"""

import hashlib
import hmac
import logging
import struct
from collections import namedtuple

from .constants import NONCE_LENGTH, SQN_XOR_AK_LENGTH
from .errors import FieldValidationError

logger = logging.getLogger(__name__)

AKA_PRIME_LABEL = b"EAP-AKA'"
AKA_PRIME_REAUTH_LABEL = b"EAP-AKA' re-auth"

FC_CK_PRIME = 0x20
FC_IK_PRIME = 0x21

AKA_KEY_BLOCK_LENGTH = 160
AKA_PRIME_KEY_BLOCK_LENGTH = 208
REAUTH_KEY_BLOCK_LENGTH = 128

AkaKeys = namedtuple('AkaKeys', ['k_encr', 'k_aut', 'msk', 'emsk', 'mk'])
AkaPrimeKeys = namedtuple('AkaPrimeKeys', ['k_encr', 'k_aut', 'k_re', 'msk', 'emsk'])
AkaReauthKeys = namedtuple('AkaReauthKeys', ['msk', 'emsk', 'xkey'], defaults=(None,))


def _as_bytes(value):
    return value.encode('utf-8') if isinstance(value, str) else bytes(value)


def _check_length(field, value, length):
    if len(value) != length:
        raise FieldValidationError(field, f"must be {length} bytes, got {len(value)}")


# -----------------------------------------------------------------------------
# PRFs
# -----------------------------------------------------------------------------

def sha1_chain_prf(key, length, seed=b'\x00'):
    """Iterated SHA-1 expansion: x1 = SHA1(key|seed), xn = SHA1(key|xn-1)"""
    current = hashlib.sha1(key + seed).digest()
    output = current
    while len(output) < length:
        current = hashlib.sha1(key + current).digest()
        output += current
    return output[:length]


SHA1_INITIAL_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)


def _rotl(value, bits):
    return ((value << bits) | (value >> (32 - bits))) & 0xFFFFFFFF


def sha1_compress(block, state=SHA1_INITIAL_STATE):
    """SHA-1 compression of one 64 byte block, no message padding (the G function)"""
    w = list(struct.unpack('!16I', block))
    for i in range(16, 80):
        w.append(_rotl(w[i - 3] ^ w[i - 8] ^ w[i - 14] ^ w[i - 16], 1))

    a, b, c, d, e = state
    for i in range(80):
        if i < 20:
            f = (b & c) | (~b & d)
            k = 0x5A827999
        elif i < 40:
            f = b ^ c ^ d
            k = 0x6ED9EBA1
        elif i < 60:
            f = (b & c) | (b & d) | (c & d)
            k = 0x8F1BBCDC
        else:
            f = b ^ c ^ d
            k = 0xCA62C1D6
        a, b, c, d, e = (_rotl(a, 5) + f + e + k + w[i]) & 0xFFFFFFFF, a, _rotl(b, 30), c, d

    return struct.pack('!5I', *((s + v) & 0xFFFFFFFF for s, v in zip(state, (a, b, c, d, e))))


def fips186_2_prf(xkey, length):
    """FIPS 186-2 change notice 1 random number generator (RFC 4187 Appendix A)

    XSEED is always zero, so XVAL equals XKEY. Each round yields two 20 byte
    outputs w0|w1.
    """
    _check_length('XKEY', xkey, 20)
    modulus = 1 << 160
    xval = int.from_bytes(xkey, 'big')
    output = b''
    while len(output) < length:
        for _ in range(2):
            w = sha1_compress(xval.to_bytes(20, 'big') + bytes(44))
            output += w
            xval = (1 + xval + int.from_bytes(w, 'big')) % modulus
    return output[:length]


def prf_plus(key, seed, length):
    """PRF+ from IKEv2 (RFC 4306 Section 2.13) with HMAC-SHA-256

    T1 = HMAC(K, S | 0x01), Tn = HMAC(K, Tn-1 | S | n)
    """
    if length > 255 * hashlib.sha256().digest_size:
        raise FieldValidationError('length', f"PRF+ cannot produce {length} bytes")

    output = b''
    current = b''
    counter = 1
    while len(output) < length:
        current = hmac.new(key, current + seed + bytes([counter]), hashlib.sha256).digest()
        output += current
        counter += 1
    return output[:length]


# -----------------------------------------------------------------------------
# EAP-AKA
# -----------------------------------------------------------------------------

def derive_keys_aka(identity, ck, ik, prf=sha1_chain_prf):
    """EAP-AKA key hierarchy: MK = SHA1(Identity | IK | CK), then PRF(MK)

    prf is called as prf(mk, 160); pass fips186_2_prf for the RFC 4187
    Appendix A generator.
    """
    _check_length('CK', ck, 16)
    _check_length('IK', ik, 16)

    mk = hashlib.sha1(_as_bytes(identity) + ik + ck).digest()
    block = prf(mk, AKA_KEY_BLOCK_LENGTH)

    keys = AkaKeys(k_encr=block[0:16], k_aut=block[16:32],
                   msk=block[32:96], emsk=block[96:160], mk=mk)
    logger.debug(f"EAP-AKA MSK derived: {keys.msk.hex()[:32]}...")
    return keys


def derive_reauth_keys_aka(identity, counter, nonce_s, mk, prf=sha1_chain_prf):
    """EAP-AKA fast re-authentication keys (RFC 4187 Section 7)

    XKEY' = SHA1(Identity | counter | NONCE_S | MK), expanded with the same
    PRF that the full authentication used.
    """
    _check_length('NONCE_S', nonce_s, NONCE_LENGTH)
    if not 0 <= counter <= 0xFFFF:
        raise FieldValidationError('counter', f"{counter} does not fit in 16 bits")

    xkey = hashlib.sha1(_as_bytes(identity) + struct.pack('!H', counter) + nonce_s + mk).digest()
    block = prf(xkey, REAUTH_KEY_BLOCK_LENGTH)
    return AkaReauthKeys(msk=block[0:64], emsk=block[64:128], xkey=xkey)


# -----------------------------------------------------------------------------
# EAP-AKA'
# -----------------------------------------------------------------------------

def _ck_ik_seed(fc, network_name):
    return (bytes([fc]) + AKA_PRIME_LABEL + struct.pack('!H', len(AKA_PRIME_LABEL)) +
            network_name + struct.pack('!H', len(network_name)))


def derive_ck_prime_ik_prime(ck, ik, network_name):
    """CK', IK' as PRF+(IK | CK, FC | "EAP-AKA'" | 0x0008 | name | len(name))

    FC is 0x20 for CK' and 0x21 for IK'; each is the first 16 bytes of a 32
    byte PRF+ output.
    """
    name = _as_bytes(network_name)
    key = ik + ck
    ck_prime = prf_plus(key, _ck_ik_seed(FC_CK_PRIME, name), 32)[:16]
    ik_prime = prf_plus(key, _ck_ik_seed(FC_IK_PRIME, name), 32)[:16]
    return ck_prime, ik_prime


def derive_ck_prime_ik_prime_ts33402(ck, ik, network_name, sqn_xor_ak):
    """CK' | IK' = HMAC-SHA-256(CK | IK, S) per 3GPP TS 33.402 Annex A.2

    S = 0x20 | name | len(name) | SQN xor AK | 0x0006. SQN xor AK is the first
    six bytes of AUTN.
    """
    _check_length('SQN xor AK', sqn_xor_ak, SQN_XOR_AK_LENGTH)
    name = _as_bytes(network_name)
    s = (bytes([FC_CK_PRIME]) + name + struct.pack('!H', len(name)) +
         sqn_xor_ak + struct.pack('!H', len(sqn_xor_ak)))
    out = hmac.new(ck + ik, s, hashlib.sha256).digest()
    return out[:16], out[16:32]


def derive_keys_aka_prime(identity, ck_prime, ik_prime):
    """EAP-AKA' key hierarchy: MK = PRF'(IK' | CK', "EAP-AKA'" | Identity)"""
    block = prf_plus(ik_prime + ck_prime, AKA_PRIME_LABEL + _as_bytes(identity),
                     AKA_PRIME_KEY_BLOCK_LENGTH)

    keys = AkaPrimeKeys(k_encr=block[0:16], k_aut=block[16:48], k_re=block[48:80],
                        msk=block[80:144], emsk=block[144:208])
    logger.debug(f"EAP-AKA' MSK derived: {keys.msk.hex()[:32]}...")
    return keys


def derive_reauth_keys_aka_prime(identity, counter, nonce_s, k_re):
    """EAP-AKA' fast re-authentication keys (RFC 5448 Section 3.3)

    MK = PRF'(K_re, "EAP-AKA' re-auth" | Identity | counter | NONCE_S)
    """
    _check_length('NONCE_S', nonce_s, NONCE_LENGTH)
    if not 0 <= counter <= 0xFFFF:
        raise FieldValidationError('counter', f"{counter} does not fit in 16 bits")

    seed = AKA_PRIME_REAUTH_LABEL + _as_bytes(identity) + struct.pack('!H', counter) + nonce_s
    block = prf_plus(k_re, seed, REAUTH_KEY_BLOCK_LENGTH)
    return AkaReauthKeys(msk=block[0:64], emsk=block[64:128])
