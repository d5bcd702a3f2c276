"""
Claim records embedded in signed modules.

A Claims record states who issued the module (account public key), which
module it describes (module public key), when it is valid, and, in its
ModuleMetadata, the module's name, granted capabilities and canonical hash.
"""

import copy
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import Revisions
from ..errors import InvalidTokenError

# JSON key carrying the module metadata inside the token payload
METADATA_KEY = 'wascap'
REVISION_KEY = 'wascap_revision'


def _new_claim_id() -> str:
    return uuid.uuid4().hex


def _field(key: str, where: Optional[str]) -> str:
    return f"{where}.{key}" if where else key


def _require_mapping(data: Any, where: str) -> None:
    if not isinstance(data, dict):
        raise InvalidTokenError(f"Claim '{where}' must be a JSON object")


def _optional_int(data: Dict[str, Any], key: str, where: Optional[str] = None) -> Optional[int]:
    value = data.get(key)
    # bool is an int subclass but never a valid timestamp or revision
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise InvalidTokenError(f"Claim '{_field(key, where)}' must be an integer")
    return value


def _optional_str(data: Dict[str, Any], key: str, where: Optional[str] = None) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidTokenError(f"Claim '{_field(key, where)}' must be a string")
    return value


def _optional_str_list(data: Dict[str, Any], key: str, where: Optional[str] = None) -> Optional[List[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidTokenError(f"Claim '{_field(key, where)}' must be a list of strings")
    return list(value)


@dataclass
class ModuleMetadata:
    """Module-specific part of a claim."""
    name: Optional[str] = None
    module_hash: Optional[str] = None
    tags: Optional[List[str]] = None
    caps: Optional[List[str]] = None
    provider: bool = False
    rev: Optional[int] = None
    ver: Optional[str] = None
    call_alias: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the token's JSON form; unset optionals are omitted."""
        data: Dict[str, Any] = {}
        if self.module_hash is not None:
            data['hash'] = self.module_hash
        if self.name is not None:
            data['name'] = self.name
        if self.tags is not None:
            data['tags'] = list(self.tags)
        if self.caps is not None:
            data['caps'] = list(self.caps)
        data['prov'] = self.provider
        if self.rev is not None:
            data['rev'] = self.rev
        if self.ver is not None:
            data['ver'] = self.ver
        if self.call_alias is not None:
            data['call_alias'] = self.call_alias
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModuleMetadata':
        """
        Create from the token's JSON form.

        A missing hash stays None so the extractor can refuse the claim.

        Raises:
            InvalidTokenError: if a field has the wrong type
        """
        _require_mapping(data, METADATA_KEY)
        provider = data.get('prov', False)
        if not isinstance(provider, bool):
            raise InvalidTokenError(f"Claim field '{METADATA_KEY}.prov' must be a boolean")
        return cls(
            name=_optional_str(data, 'name', METADATA_KEY),
            module_hash=_optional_str(data, 'hash', METADATA_KEY),
            tags=_optional_str_list(data, 'tags', METADATA_KEY),
            caps=_optional_str_list(data, 'caps', METADATA_KEY),
            provider=provider,
            rev=_optional_int(data, 'rev', METADATA_KEY),
            ver=_optional_str(data, 'ver', METADATA_KEY),
            call_alias=_optional_str(data, 'call_alias', METADATA_KEY),
        )


@dataclass
class Claims:
    """A claim record, prior to signing or after decoding."""
    issuer: str
    subject: str
    id: str = field(default_factory=_new_claim_id)
    issued_at: int = field(default_factory=lambda: int(time.time()))
    expires: Optional[int] = None
    not_before: Optional[int] = None
    metadata: Optional[ModuleMetadata] = None
    revision: Optional[int] = Revisions.CURRENT

    @classmethod
    def with_dates(
        cls,
        name: str,
        issuer: str,
        subject: str,
        caps: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        not_before: Optional[int] = None,
        expires: Optional[int] = None,
        provider: bool = False,
        rev: Optional[int] = None,
        ver: Optional[str] = None,
        call_alias: Optional[str] = None,
    ) -> 'Claims':
        """Build module claims with absolute temporal bounds."""
        return cls(
            issuer=issuer,
            subject=subject,
            expires=expires,
            not_before=not_before,
            metadata=ModuleMetadata(
                name=name,
                tags=tags,
                caps=caps,
                provider=provider,
                rev=rev,
                ver=ver,
                call_alias=call_alias,
            ),
        )

    def with_module_hash(self, module_hash: str) -> 'Claims':
        """Return a copy whose metadata records ``module_hash``."""
        updated = copy.deepcopy(self)
        if updated.metadata is None:
            updated.metadata = ModuleMetadata()
        updated.metadata.module_hash = module_hash
        return updated

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the token's JSON payload."""
        data: Dict[str, Any] = {
            'jti': self.id,
            'iat': self.issued_at,
            'iss': self.issuer,
            'sub': self.subject,
        }
        if self.expires is not None:
            data['exp'] = self.expires
        if self.not_before is not None:
            data['nbf'] = self.not_before
        if self.metadata is not None:
            data[METADATA_KEY] = self.metadata.to_dict()
        if self.revision is not None:
            data[REVISION_KEY] = self.revision
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Claims':
        """
        Create from the token's JSON payload.

        Raises:
            InvalidTokenError: if a required claim is missing or a field
                has the wrong type
        """
        _require_mapping(data, "payload")
        for key in ('iss', 'sub'):
            if not isinstance(data.get(key), str):
                raise InvalidTokenError(f"Claim '{key}' must be a string")
        metadata = data.get(METADATA_KEY)
        issued_at = _optional_int(data, 'iat')
        return cls(
            issuer=data['iss'],
            subject=data['sub'],
            id=_optional_str(data, 'jti') or "",
            issued_at=issued_at if issued_at is not None else 0,
            expires=_optional_int(data, 'exp'),
            not_before=_optional_int(data, 'nbf'),
            metadata=ModuleMetadata.from_dict(metadata) if metadata is not None else None,
            revision=_optional_int(data, REVISION_KEY),
        )


@dataclass
class Token:
    """A signed claim token: the raw encoded text and its decoded claims."""
    jwt: str
    claims: Claims
