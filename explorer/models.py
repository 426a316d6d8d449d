"""Pydantic models describing catalog apps and user status."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedRemoteData


class CatalogApp(BaseModel):
    """A single app listed by the remote catalog."""

    model_config = ConfigDict(frozen=True)

    appid: int = Field(strict=True)
    name: str = Field(strict=True)

    @classmethod
    def from_payload(cls, payload: object) -> "CatalogApp":
        """Validate one raw catalog item, raising ``MalformedRemoteData``."""

        if not isinstance(payload, Mapping):
            raise MalformedRemoteData(f"Catalog item is not an object: {payload!r}")
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MalformedRemoteData(
                f"Catalog item rejected: {payload!r}"
            ) from exc


class UserStatus(BaseModel):
    """Point-in-time snapshot of the user's owned, ignored and wishlisted apps."""

    model_config = ConfigDict(frozen=True)

    owned: frozenset[int] = Field(default_factory=frozenset)
    ignored: frozenset[int] = Field(default_factory=frozenset)
    wishlisted: frozenset[int] = Field(default_factory=frozenset)

    @classmethod
    def from_userdata(cls, data: Mapping[str, Any]) -> "UserStatus":
        """Build a snapshot from the store's dynamic userdata document."""

        return cls(
            owned=_int_ids(data.get("rgOwnedApps")),
            ignored=_int_ids(data.get("rgIgnoredApps")),
            wishlisted=_int_ids(data.get("rgWishlist")),
        )

    def to_userdata(self) -> dict[str, Any]:
        """Serialise back into the userdata layout used for the cached blob."""

        return {
            "rgOwnedApps": sorted(self.owned),
            "rgIgnoredApps": {str(appid): 0 for appid in sorted(self.ignored)},
            "rgWishlist": sorted(self.wishlisted),
        }

    def is_empty(self) -> bool:
        return not (self.owned or self.ignored or self.wishlisted)


class AppEntry(BaseModel):
    """Persisted view of a catalog app enriched with the user's flags."""

    appid: int
    name: str
    owned: bool = False
    ignored: bool = False
    wishlisted: bool = False
    seen: bool = False


def _int_ids(value: object) -> frozenset[int]:
    """Collect integer ids from an array or from the keys of an object."""

    if isinstance(value, Mapping):
        candidates: Any = value.keys()
    elif isinstance(value, (list, tuple, set, frozenset)):
        candidates = value
    else:
        return frozenset()

    ids: set[int] = set()
    for candidate in candidates:
        if isinstance(candidate, bool):
            continue
        try:
            ids.add(int(candidate))
        except (TypeError, ValueError):
            continue
    return frozenset(ids)
