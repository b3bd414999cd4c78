"""
Concrete collaborators for the recipient sync pipeline.

This package contains address syntax and typo checks, PGP metadata,
the public key cache and the remediation confirmer.
"""

__all__ = ['address', 'typo', 'pgp', 'key_cache', 'confirmation']
