"""
Exception hierarchy. Everything derives from ValueError so callers that
already guard packet handling with ``except ValueError`` keep working.
"""

from .constants import attribute_name


class EAPAKAError(ValueError):
    """Base class for all EAP-AKA errors"""


class FramingError(EAPAKAError):
    """Malformed EAP header or attribute stream"""


class AttributeDecodeError(FramingError):
    """An attribute value could not be decoded"""
    def __init__(self, attr_type, reason):
        self.attr_type = attr_type
        self.reason = reason
        super().__init__(f"Failed to decode {attribute_name(attr_type)}: {reason}")


class FieldValidationError(EAPAKAError):
    """A value has the wrong length or is out of range"""
    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class ProtocolStateError(EAPAKAError):
    """Operation not possible for this packet (missing AT_MAC, wrong method type)"""


class EntropyError(EAPAKAError):
    """The secure random source failed"""
