"""
PGP metadata for composer recipients.

Turns a recipient's sending preferences into the encryption icon and
tooltip the composer shows next to the address.
"""

from dataclasses import replace
from typing import Optional

from domain.models import PgpInfo, PreferenceRecord, RecipientRecord

PGP_SCHEMES = ('pgp-mime', 'pgp-inline')

ICON_LOCK = 'fa-lock'
ICON_SIGNED = 'fa-pencil'


def _build_icon(preferences: PreferenceRecord):
    """Return (icon, tooltip) for the given preferences."""
    if preferences.encrypt:
        if preferences.is_internal:
            tooltip = 'End-to-end encrypted'
        else:
            tooltip = 'PGP-encrypted'
        if preferences.pinned:
            tooltip += ' to verified recipient'
        return ICON_LOCK, tooltip

    if preferences.sign:
        return ICON_SIGNED, 'PGP-signed'

    return None, None


def extend_pgp(
    record: RecipientRecord,
    preferences: Optional[PreferenceRecord]
) -> RecipientRecord:
    """
    Attach encryption capability metadata to a recipient.

    Args:
        record: Recipient to extend (not modified)
        preferences: Sending preferences for the recipient, or None if unknown

    Returns:
        New RecipientRecord with load_crypt_info cleared and pgp set
        (pgp stays as-is when no preferences are available)
    """
    if preferences is None:
        return replace(record, load_crypt_info=False)

    icon, tooltip = _build_icon(preferences)
    if preferences.warnings:
        warnings = ' '.join(preferences.warnings)
        tooltip = f"{tooltip}. {warnings}" if tooltip else warnings

    pgp = PgpInfo(
        encrypt=preferences.encrypt,
        sign=preferences.sign,
        is_pgp=preferences.scheme in PGP_SCHEMES,
        is_pgp_mime=preferences.scheme == 'pgp-mime',
        is_pinned=preferences.pinned,
        is_internal=preferences.is_internal,
        icon=icon,
        tooltip=tooltip,
    )
    return replace(record, pgp=pgp, load_crypt_info=False)
