"""
Rootless account generation.

Accounts are derived by running secp256k1 public key recovery "backwards":
a fixed signature shape is combined with a commitment to an implementation
and its setup parameters, and the recovered address becomes the account.
Nobody ever held the private key for such an address, so the only way to
give it behaviour is the authorization that was mined for it, and the only
way to initialise it is the exact commitment that was mined.

The package contains the off-chain pieces (encoding and mining) together
with a small ledger model that runs the on-chain pieces (the claimable
proxy, the auto-initialising proxy, and a minimal wallet to delegate to).
"""

__version__ = "0.1.0"
