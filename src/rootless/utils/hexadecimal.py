"""
Utility Functions For Hexadecimal Strings.

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Hexadecimal utility functions for addresses and command line input.
"""

from ethereum_types.bytes import Bytes, Bytes20


def has_hex_prefix(hex_string: str) -> bool:
    """
    Check if a hex string starts with hex prefix (0x).
    """
    return hex_string.startswith("0x")


def remove_hex_prefix(hex_string: str) -> str:
    """
    Remove 0x prefix from a hex string if present. This function returns the
    passed hex string if it isn't prefixed with 0x.
    """
    if has_hex_prefix(hex_string):
        return hex_string[len("0x") :]

    return hex_string


def hex_to_bytes(hex_string: str) -> Bytes:
    """
    Convert hex string to bytes.
    """
    return Bytes(bytes.fromhex(remove_hex_prefix(hex_string)))


def hex_to_address(hex_string: str) -> Bytes20:
    """
    Convert hex string to Address (20 bytes), left padding with zeros.
    """
    return Bytes20(
        bytes.fromhex(remove_hex_prefix(hex_string).rjust(40, "0"))
    )


def to_hex(data: bytes) -> str:
    """
    Format bytes as a 0x prefixed lowercase hex string.
    """
    return "0x" + data.hex()
