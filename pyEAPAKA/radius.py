"""
MS-MPPE key attributes for RADIUS Access-Accept (RFC 2548, RFC 3079, RFC 5216 Section 2.3)

The MSK is exported to the NAS as two vendor attributes:
    MS-MPPE-Recv-Key = MSK[0:32]
    MS-MPPE-Send-Key = MSK[32:64]
"""

import logging
import os

from pyrad.dictionary import Dictionary

from .errors import FieldValidationError
from .mppe import encrypt_mppe_key

logger = logging.getLogger(__name__)

_DICTIONARY = os.path.join(os.path.dirname(__file__), 'dictionary')

MSK_LENGTH = 64


def load_dictionary():
    """pyrad dictionary with EAP-Message, Message-Authenticator and the MPPE keys"""
    return Dictionary(_DICTIONARY)


def mppe_key_values(msk, secret, request_authenticator):
    """Encrypted (recv_key, send_key) values for the two MPPE attributes"""
    if len(msk) != MSK_LENGTH:
        raise FieldValidationError('MSK', f"must be {MSK_LENGTH} bytes, got {len(msk)}")

    recv_key = encrypt_mppe_key(msk[:32], secret, request_authenticator,
                                include_salt_in_padding=False)
    send_key = encrypt_mppe_key(msk[32:64], secret, request_authenticator,
                                include_salt_in_padding=False)
    return recv_key, send_key


def add_mppe_keys(reply, msk, request_authenticator=None, secret=None):
    """Add MS-MPPE-Recv-Key and MS-MPPE-Send-Key to a pyrad reply packet

    The reply's dictionary must define both attributes (see load_dictionary).
    A reply made with request.CreateReply() already carries the Request
    Authenticator and shared secret, so both arguments are optional.
    """
    if request_authenticator is None:
        request_authenticator = reply.authenticator
    if secret is None:
        secret = reply.secret
    if request_authenticator is None:
        raise FieldValidationError('Request Authenticator', 'not set on the reply packet')

    recv_key, send_key = mppe_key_values(msk, secret, request_authenticator)
    reply.AddAttribute('MS-MPPE-Recv-Key', recv_key)
    reply.AddAttribute('MS-MPPE-Send-Key', send_key)
    logger.debug(f"MPPE keys added to RADIUS reply id={reply.id}")
