"""
Cryptographic primitives used by the account derivation scheme.
"""
