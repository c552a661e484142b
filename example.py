#!/usr/bin/env python3
"""
Example usage of pyEAPAKA
Walks through an EAP-AKA full authentication between a server and a peer
and exports the MSK to a RADIUS Access-Accept
"""

import logging
import os

from pyrad.packet import AuthPacket

from pyEAPAKA import (
    EAPPacket, parse,
    EAP_REQUEST, EAP_RESPONSE, EAP_SUCCESS, EAP_TYPE_AKA,
    AKA_IDENTITY, AKA_CHALLENGE, AT_IDENTITY, AT_RES, AT_RAND, AT_IV, AT_ENCR_DATA,
    AnyIdReqAttribute, IdentityAttribute, RandAttribute, AutnAttribute,
    ResAttribute, MacAttribute, NextReauthIdAttribute,
    derive_keys_aka, calculate_and_set_mac, verify_mac,
    encrypt_attributes, decrypt_attributes,
)
from pyEAPAKA.radius import add_mppe_keys, load_dictionary

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Authentication vector as the HSS would hand it out
IDENTITY = "0001010123456789@wlan.mnc001.mcc001.3gppnetwork.org"
RAND = os.urandom(16)
AUTN = os.urandom(16)
XRES = bytes.fromhex("28d7b0f2a2ec3de5")
CK = bytes.fromhex("5349fbe098649f948f5d2e973a81c00f")
IK = bytes.fromhex("9744871ad32bf9bbd1dd5ce54e3e2e5a")

RADIUS_SECRET = b'testing123'


def server_identity_request():
    """Server asks for any identity"""
    request = EAPPacket(EAP_REQUEST, 1, EAP_TYPE_AKA, AKA_IDENTITY, [AnyIdReqAttribute()])
    return request.pack()


def peer_identity_response(data):
    request = parse(data)
    logger.info(f"Peer received {request!r}")
    response = EAPPacket(EAP_RESPONSE, request.identifier, EAP_TYPE_AKA, AKA_IDENTITY,
                         [IdentityAttribute(IDENTITY)])
    return response.pack()


def server_challenge(data):
    """Server derives keys for the identity and sends AKA-Challenge"""
    response = parse(data)
    identity = response.find_attribute(AT_IDENTITY).identity
    keys = derive_keys_aka(identity, CK, IK)

    iv, encr_data = encrypt_attributes([NextReauthIdAttribute('reauth-1@example.com')], keys.k_encr)
    challenge = EAPPacket(EAP_REQUEST, response.identifier + 1, EAP_TYPE_AKA, AKA_CHALLENGE, [
        RandAttribute(RAND),
        AutnAttribute(AUTN),
        iv,
        encr_data,
        MacAttribute(),
    ])
    calculate_and_set_mac(challenge, keys.k_aut)
    return challenge.pack(), keys


def peer_challenge_response(data):
    """Peer runs AKA on the USIM (here: the same vector) and answers with RES"""
    challenge = parse(data)
    logger.info(f"Peer received challenge, RAND={challenge.find_attribute(AT_RAND).rand.hex()}")
    keys = derive_keys_aka(IDENTITY, CK, IK)

    if not verify_mac(challenge, keys.k_aut):
        raise ValueError("Challenge MAC verification failed")

    nested = decrypt_attributes(challenge.find_attribute(AT_ENCR_DATA),
                                challenge.find_attribute(AT_IV), keys.k_encr)
    logger.info(f"Peer decrypted {nested}")

    response = EAPPacket(EAP_RESPONSE, challenge.identifier, EAP_TYPE_AKA, AKA_CHALLENGE,
                         [ResAttribute(XRES), MacAttribute()])
    calculate_and_set_mac(response, keys.k_aut)
    return response.pack()


def server_result(data, keys):
    response = parse(data)
    if not verify_mac(response, keys.k_aut):
        raise ValueError("Response MAC verification failed")
    if response.find_attribute(AT_RES).res != XRES:
        raise ValueError("RES does not match XRES")

    logger.info("Peer authenticated")
    return EAPPacket(EAP_SUCCESS, response.identifier).pack()


def radius_accept(msk):
    """Access-Accept carrying the MSK in MS-MPPE-Recv-Key / MS-MPPE-Send-Key"""
    request = AuthPacket(secret=RADIUS_SECRET, authenticator=os.urandom(16),
                         dict=load_dictionary())
    reply = request.CreateReply()
    add_mppe_keys(reply, msk)
    return reply


def main():
    """Run example EAP-AKA exchange"""
    print("pyEAPAKA Example - EAP-AKA Full Authentication")
    print("==============================================")
    print()

    data = server_identity_request()
    data = peer_identity_response(data)
    data, keys = server_challenge(data)
    data = peer_challenge_response(data)
    data = server_result(data, keys)

    print(f"Server sent: {parse(data)!r}")
    print(f"MSK: {keys.msk.hex()}")

    reply = radius_accept(keys.msk)
    print(f"Access-Accept MS-MPPE-Recv-Key: {reply['MS-MPPE-Recv-Key'][0].hex()}")
    print(f"Access-Accept MS-MPPE-Send-Key: {reply['MS-MPPE-Send-Key'][0].hex()}")


if __name__ == "__main__":
    main()
