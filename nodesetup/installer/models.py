"""
Catalog data model.

One :class:`CatalogEntry` per object in the distribution ``index.json``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    """A published release as listed in the remote catalog."""

    version: str
    """Version string exactly as published (e.g. 'v18.17.0')"""

    date: str = ""
    """Release date as published (e.g. '2023-07-18')"""

    files: Tuple[str, ...] = ()
    """Platform asset identifiers available for this release"""

    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    """Remaining catalog fields (npm, lts, security, ...), uninterpreted"""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        """
        Build an entry from one catalog object.

        Raises:
            ValueError: If the object has no version
        """
        version = data.get("version")
        if not version:
            raise ValueError(f"Catalog entry without version: {data!r}")

        files = data.get("files") or ()
        extra = {k: v for k, v in data.items() if k not in ("version", "date", "files")}
        return cls(
            version=str(version),
            date=str(data.get("date") or ""),
            files=tuple(str(f) for f in files),
            extra=extra,
        )

    @property
    def release_date(self) -> Optional[datetime]:
        """Parsed release date, or None when missing or malformed."""
        if not self.date:
            return None
        try:
            parsed = datetime.fromisoformat(self.date.replace("Z", "+00:00"))
        except ValueError:
            return None
        # Compare as naive UTC so dated and undated entries stay comparable
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    def supports(self, asset_id: str) -> bool:
        """Whether this release ships the given platform asset."""
        return asset_id in self.files


__all__ = ["CatalogEntry"]
