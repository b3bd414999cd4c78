"""
Data models for the recipient sync domain.

These type-safe data structures define clear contracts between components.
"""

from dataclasses import dataclass, field, fields, replace
from typing import List, Optional, Dict, Any


@dataclass
class PreferenceRecord:
    """
    Sending preferences for one address, as returned by the preference service.

    Attributes:
        address: Email address the preferences belong to
        encrypt: Whether messages to this address will be encrypted
        sign: Whether messages to this address will be signed
        scheme: Package scheme ("pgp-mime", "pgp-inline", "proton", "cleartext")
        mime_type: MIME type used when sending
        primary_pinned: Whether the primary encryption key is pinned
        is_verified: Whether the contact signature verified
        pinned: Whether any key is pinned for the address
        is_internal: Whether the address is hosted internally
        has_pinned_keys: Whether the contact has pinned keys at all
        warnings: Human-readable warnings about the key setup
    """
    address: str
    encrypt: bool = False
    sign: bool = False
    scheme: str = 'cleartext'
    mime_type: str = 'text/html'
    primary_pinned: bool = False
    is_verified: bool = False
    pinned: bool = False
    is_internal: bool = False
    has_pinned_keys: bool = False
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, address: str, data: Dict[str, Any]) -> 'PreferenceRecord':
        """
        Build a record from the service's camelCase payload.

        Missing flags fall back to the dataclass defaults; an absent policy
        flag counts as a violation.
        """
        return cls(
            address=address,
            encrypt=bool(data.get('encrypt', False)),
            sign=bool(data.get('sign', False)),
            scheme=data.get('scheme', 'cleartext'),
            mime_type=data.get('mimeType', 'text/html'),
            primary_pinned=bool(data.get('primaryPinned', False)),
            is_verified=bool(data.get('isVerified', False)),
            pinned=bool(data.get('pinned', False)),
            is_internal=bool(data.get('isInternal', False)),
            has_pinned_keys=bool(data.get('hasPinnedKeys', False)),
            warnings=list(data.get('warnings') or []),
        )


# Mapping from address to its preferences; absent keys mean the fetch failed.
PreferenceMap = Dict[str, PreferenceRecord]


@dataclass
class PgpInfo:
    """Encryption capability shown next to a recipient in the composer."""
    encrypt: bool = False
    sign: bool = False
    is_pgp: bool = False
    is_pgp_mime: bool = False
    is_pinned: bool = False
    is_internal: bool = False
    icon: Optional[str] = None
    tooltip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'encrypt': self.encrypt,
            'sign': self.sign,
            'isPgp': self.is_pgp,
            'isPgpMime': self.is_pgp_mime,
            'isPinned': self.is_pinned,
            'isInternal': self.is_internal,
            'icon': self.icon,
            'tooltip': self.tooltip,
        }


@dataclass
class RecipientRecord:
    """
    A recipient entry as displayed by the composer.

    Optional fields set to None are considered absent, so a record can be
    layered on top of a cached one without clobbering what it doesn't carry.

    Attributes:
        address: Email address (unique key)
        name: Display name
        group: Contact group the recipient was added through
        pgp: Encryption metadata (None until enriched)
        invalid: Whether the address failed validation (None until enriched)
        load_crypt_info: True while encryption info still has to be loaded
    """
    address: str
    name: Optional[str] = None
    group: Optional[str] = None
    pgp: Optional[PgpInfo] = None
    invalid: Optional[bool] = None
    load_crypt_info: bool = False

    def merged_over(self, cached: 'RecipientRecord') -> 'RecipientRecord':
        """
        Return the cached record overridden by every field present on this one.

        load_crypt_info is always taken from the cached entry, which is
        by construction an enriched record.
        """
        overrides = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != 'load_crypt_info' and getattr(self, f.name) is not None
        }
        return replace(cached, **overrides)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecipientRecord':
        """Build a record from the composer's recipient shape."""
        pgp = data.get('PGP')
        return cls(
            address=data['Address'],
            name=data.get('Name'),
            group=data.get('Group'),
            pgp=PgpInfo(
                encrypt=pgp.get('encrypt', False),
                sign=pgp.get('sign', False),
                is_pgp=pgp.get('isPgp', False),
                is_pgp_mime=pgp.get('isPgpMime', False),
                is_pinned=pgp.get('isPinned', False),
                is_internal=pgp.get('isInternal', False),
                icon=pgp.get('icon'),
                tooltip=pgp.get('tooltip'),
            ) if pgp else None,
            invalid=data.get('invalid'),
            load_crypt_info=bool(data.get('loadCryptInfo', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the composer's recipient shape.

        Absent optional fields are left out; loadCryptInfo only appears when set.
        """
        result: Dict[str, Any] = {'Address': self.address}
        if self.name is not None:
            result['Name'] = self.name
        if self.group is not None:
            result['Group'] = self.group
        if self.pgp is not None:
            result['PGP'] = self.pgp.to_dict()
        if self.invalid is not None:
            result['invalid'] = self.invalid
        if self.load_crypt_info:
            result['loadCryptInfo'] = True
        return result


@dataclass
class SyncResult:
    """
    Outcome of one sync pass.

    Attributes:
        addresses_to_remove: Addresses the composer must drop (policy
            violations first, then fetch failures; may contain duplicates)
        failed_addresses: Addresses whose preferences could not be fetched
    """
    addresses_to_remove: List[str] = field(default_factory=list)
    failed_addresses: List[str] = field(default_factory=list)

    @property
    def has_removals(self) -> bool:
        return bool(self.addresses_to_remove)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'addressesToRemove': list(self.addresses_to_remove),
            'failedAddresses': list(self.failed_addresses),
        }

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        return (
            f"SyncResult(remove={len(self.addresses_to_remove)}, "
            f"failed={len(self.failed_addresses)})"
        )
