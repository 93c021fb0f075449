"""
Utility functions used by the rootless account scheme.
"""
