"""Timing — creation and modification instants of one resource.

Several platforms (most Linux filesystems through ``os.stat``) do not expose
a creation time.  ``Timing.derive`` therefore resolves ``created`` through a
fallback chain so pre-existing content is not mistaken for new content on
every rebuild:

1. the native creation instant (``st_birthtime``) when available,
2. the ``created`` value recorded for the same name in the previous manifest,
3. the current modification instant.

"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

_NS_PER_SECOND = 1_000_000_000
_NS_PER_MICROSECOND = 1_000


@dataclass(frozen=True, slots=True)
class Timing:
    """Creation and last-modified instants (UTC, microsecond precision).

    Attributes:
        created: When the resource first appeared.
        modified: Filesystem last-write instant as of the current scan.

    """

    created: datetime
    modified: datetime

    @classmethod
    def derive(cls, metadata: Any, previous: Timing | None = None) -> Timing:
        """Build the Timing of a file from its stat metadata.

        Args:
            metadata: ``os.stat_result`` (or anything exposing ``st_mtime_ns``
                and optionally ``st_birthtime_ns`` / ``st_birthtime``).
            previous: Timing recorded for the same name in the last manifest.

        Raises:
            OSError: If the modification time cannot be read.

        """
        mtime_ns = getattr(metadata, "st_mtime_ns", None)
        if mtime_ns is None:
            msg = "modification time is not available"
            raise OSError(msg)
        modified = from_ns(mtime_ns)

        birth_ns = _birthtime_ns(metadata)
        if birth_ns is not None:
            created = from_ns(birth_ns)
        elif previous is not None:
            created = previous.created
        else:
            created = modified
        return cls(created=created, modified=modified)

    def to_dict(self) -> dict[str, str]:
        """Serialize to RFC 3339 strings."""
        return {
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Timing:
        """Parse the form produced by ``to_dict``.

        Raises:
            KeyError, TypeError, ValueError: On a malformed entry.

        """
        return cls(
            created=_parse_instant(data["created"]),
            modified=_parse_instant(data["modified"]),
        )


def from_ns(ns: int) -> datetime:
    """Convert an epoch timestamp in nanoseconds to an aware UTC datetime.

    Integer arithmetic keeps the result identical for identical input, which
    change detection relies on.
    """
    seconds, remainder = divmod(ns, _NS_PER_SECOND)
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return moment.replace(microsecond=remainder // _NS_PER_MICROSECOND)


def _birthtime_ns(metadata: Any) -> int | None:
    birth_ns = getattr(metadata, "st_birthtime_ns", None)
    if birth_ns is not None:
        return int(birth_ns)
    birth = getattr(metadata, "st_birthtime", None)
    if birth is not None:
        return int(birth * _NS_PER_SECOND)
    return None


def _parse_instant(value: str) -> datetime:
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
