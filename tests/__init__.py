"""
Tests for rootless account derivation and the account proxies.
"""
