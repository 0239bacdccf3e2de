"""
Utility functions for ID generation and payload checks
"""
import base64
import binascii
import random
import string


def generate_client_id(length: int = 9) -> str:
    """Generate a random client ID"""
    alphabet = string.ascii_lowercase + string.digits
    return "client_" + "".join(random.choice(alphabet) for _ in range(length))


def is_base64(data) -> bool:
    """Check that data is a string of standard, padded base64"""
    if not isinstance(data, str):
        return False
    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True
