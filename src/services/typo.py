"""
Detection of likely typos in recipient domains.

Covers misspellings of the large mail providers and of common top-level
domains. It is a heuristic: a False result says nothing about deliverability.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Misspelled domain -> intended domain
DOMAIN_TYPOS = {
    'gmial.com': 'gmail.com',
    'gmal.com': 'gmail.com',
    'gmaill.com': 'gmail.com',
    'gamil.com': 'gmail.com',
    'gnail.com': 'gmail.com',
    'gmai.com': 'gmail.com',
    'gmail.co': 'gmail.com',
    'hotmial.com': 'hotmail.com',
    'hotmal.com': 'hotmail.com',
    'hotmai.com': 'hotmail.com',
    'hotmil.com': 'hotmail.com',
    'yaho.com': 'yahoo.com',
    'yahooo.com': 'yahoo.com',
    'yhoo.com': 'yahoo.com',
    'outlok.com': 'outlook.com',
    'outloo.com': 'outlook.com',
    'iclod.com': 'icloud.com',
    'icloud.co': 'icloud.com',
    'protonmial.com': 'protonmail.com',
    'protonmal.com': 'protonmail.com',
    'protonmail.co': 'protonmail.com',
    'proton.mr': 'proton.me',
}

# Misspelled top-level domain -> intended top-level domain
TLD_TYPOS = {
    'con': 'com',
    'cmo': 'com',
    'ocm': 'com',
    'vom': 'com',
    'xom': 'com',
    'comm': 'com',
    'coom': 'com',
    'nte': 'net',
    'ent': 'net',
    'nett': 'net',
    'ogr': 'org',
    'prg': 'org',
}


def suggest_correction(address: str) -> Optional[str]:
    """
    Suggest the address the user most likely meant.

    Returns:
        Corrected address, or None if the domain doesn't look like a typo
    """
    if not address or '@' not in address:
        return None

    local, _, domain = address.rpartition('@')
    domain = domain.lower()

    if domain in DOMAIN_TYPOS:
        return f"{local}@{DOMAIN_TYPOS[domain]}"

    head, dot, tld = domain.rpartition('.')
    if dot and tld in TLD_TYPOS:
        return f"{local}@{head}.{TLD_TYPOS[tld]}"

    return None


def check_typo(address: str) -> bool:
    """
    Check whether an address looks like a probable typo.

    Args:
        address: Email address to check

    Returns:
        True if the domain is a known misspelling

    Example:
        >>> check_typo("bob@gmial.com")
        True
        >>> check_typo("bob@gmail.com")
        False
    """
    suggestion = suggest_correction(address)
    if suggestion:
        logger.info(f"Probable typo: {address} (did you mean {suggestion}?)")
        return True
    return False
