"""
EAP-AKA / EAP-AKA' protocol constants
RFC 3748 (EAP), RFC 4187 (EAP-AKA), RFC 5448 (EAP-AKA')
"""

# EAP Codes (RFC 3748 Section 4)
EAP_REQUEST = 1
EAP_RESPONSE = 2
EAP_SUCCESS = 3
EAP_FAILURE = 4

# EAP Types
EAP_TYPE_IDENTITY = 1
EAP_TYPE_AKA = 23        # RFC 4187
EAP_TYPE_AKA_PRIME = 50  # RFC 5448

AKA_TYPES = (EAP_TYPE_AKA, EAP_TYPE_AKA_PRIME)

# EAP-AKA Subtypes (RFC 4187 Section 11)
AKA_CHALLENGE = 1
AKA_AUTHENTICATION_REJECT = 2
AKA_SYNCHRONIZATION_FAILURE = 4
AKA_IDENTITY = 5
AKA_NOTIFICATION = 12
AKA_REAUTHENTICATION = 13
AKA_CLIENT_ERROR = 14

# Attribute Types (RFC 4187 Section 11, RFC 5448 Section 6.2)
AT_RAND = 1
AT_AUTN = 2
AT_RES = 3
AT_AUTS = 4
AT_PADDING = 6
AT_NONCE_MT = 7
AT_PERMANENT_ID_REQ = 10
AT_MAC = 11
AT_NOTIFICATION = 12
AT_ANY_ID_REQ = 13
AT_IDENTITY = 14
AT_VERSION_LIST = 15
AT_SELECTED_VERSION = 16
AT_FULLAUTH_ID_REQ = 17
AT_COUNTER = 19
AT_COUNTER_TOO_SMALL = 20
AT_NONCE_S = 21
AT_CLIENT_ERROR_CODE = 22
AT_KDF_INPUT = 23
AT_KDF = 24
AT_IV = 129
AT_ENCR_DATA = 130
AT_NEXT_PSEUDONYM = 132
AT_NEXT_REAUTH_ID = 133
AT_CHECKCODE = 134
AT_RESULT_IND = 135
AT_BIDDING = 136

# AT_NOTIFICATION codes (RFC 4187 Section 10.19)
NOTIFICATION_GENERAL_FAILURE_AFTER_AUTH = 0
NOTIFICATION_GENERAL_FAILURE = 16384
NOTIFICATION_SUCCESS = 32768
NOTIFICATION_TEMPORARILY_DENIED = 1026
NOTIFICATION_NOT_SUBSCRIBED = 1031

# AT_CLIENT_ERROR_CODE values (RFC 4187 Section 10.20)
CLIENT_ERROR_UNABLE_TO_PROCESS = 0

# AT_KDF values (RFC 5448 Section 3.2)
KDF_AKA_PRIME_SHA256 = 1

# Wire limits
EAP_HEADER_LENGTH = 4
AKA_HEADER_LENGTH = 4
ATTRIBUTE_HEADER_LENGTH = 2
MAX_ATTRIBUTE_LENGTH = 255 * 4
MAX_PACKET_LENGTH = 65535

# Key and field lengths
RAND_LENGTH = 16
AUTN_LENGTH = 16
AUTS_LENGTH = 14
MAC_LENGTH = 16
NONCE_LENGTH = 16
IV_LENGTH = 16
K_ENCR_LENGTH = 16
SQN_XOR_AK_LENGTH = 6

CODE_NAMES = {
    EAP_REQUEST: 'Request',
    EAP_RESPONSE: 'Response',
    EAP_SUCCESS: 'Success',
    EAP_FAILURE: 'Failure',
}

SUBTYPE_NAMES = {
    AKA_CHALLENGE: 'AKA-Challenge',
    AKA_AUTHENTICATION_REJECT: 'AKA-Authentication-Reject',
    AKA_SYNCHRONIZATION_FAILURE: 'AKA-Synchronization-Failure',
    AKA_IDENTITY: 'AKA-Identity',
    AKA_NOTIFICATION: 'AKA-Notification',
    AKA_REAUTHENTICATION: 'AKA-Reauthentication',
    AKA_CLIENT_ERROR: 'AKA-Client-Error',
}

ATTRIBUTE_NAMES = {
    AT_RAND: 'AT_RAND',
    AT_AUTN: 'AT_AUTN',
    AT_RES: 'AT_RES',
    AT_AUTS: 'AT_AUTS',
    AT_PADDING: 'AT_PADDING',
    AT_NONCE_MT: 'AT_NONCE_MT',
    AT_PERMANENT_ID_REQ: 'AT_PERMANENT_ID_REQ',
    AT_MAC: 'AT_MAC',
    AT_NOTIFICATION: 'AT_NOTIFICATION',
    AT_ANY_ID_REQ: 'AT_ANY_ID_REQ',
    AT_IDENTITY: 'AT_IDENTITY',
    AT_VERSION_LIST: 'AT_VERSION_LIST',
    AT_SELECTED_VERSION: 'AT_SELECTED_VERSION',
    AT_FULLAUTH_ID_REQ: 'AT_FULLAUTH_ID_REQ',
    AT_COUNTER: 'AT_COUNTER',
    AT_COUNTER_TOO_SMALL: 'AT_COUNTER_TOO_SMALL',
    AT_NONCE_S: 'AT_NONCE_S',
    AT_CLIENT_ERROR_CODE: 'AT_CLIENT_ERROR_CODE',
    AT_KDF_INPUT: 'AT_KDF_INPUT',
    AT_KDF: 'AT_KDF',
    AT_IV: 'AT_IV',
    AT_ENCR_DATA: 'AT_ENCR_DATA',
    AT_NEXT_PSEUDONYM: 'AT_NEXT_PSEUDONYM',
    AT_NEXT_REAUTH_ID: 'AT_NEXT_REAUTH_ID',
    AT_CHECKCODE: 'AT_CHECKCODE',
    AT_RESULT_IND: 'AT_RESULT_IND',
    AT_BIDDING: 'AT_BIDDING',
}


def attribute_name(attr_type):
    """Human readable attribute name, e.g. 'AT_MAC (11)'"""
    return f"{ATTRIBUTE_NAMES.get(attr_type, 'AT_UNKNOWN')} ({attr_type})"
