"""Sync pair definitions."""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import ConfigError

LITERAL_SEPARATOR = "::"
MIRROR_MODE = "mirror"
UPDATE_MODE = "update"


@dataclass
class SyncPair:
    """A source location, a destination location and how to sync them.

    Locations are local directory paths or ``s3://bucket/prefix`` URLs.
    """

    source: str
    """Location files are read from"""

    destination: str
    """Location files are written to"""

    delete_extraneous: bool = False
    """Delete destination files that are missing from the source"""

    alias: Optional[str] = None
    """Optional display name"""

    ignore: list[str] = field(default_factory=list)
    """Extra ignore patterns for a local source"""

    exclude_dot_files: bool = False
    """Skip dot files in a local source"""

    trust_mtime: bool = True
    """Accept equal size and mtime as unchanged without hashing"""

    def __post_init__(self) -> None:
        self.source = str(self.source).strip()
        self.destination = str(self.destination).strip()
        if not self.source:
            raise ConfigError("Sync pair source must not be empty")
        if not self.destination:
            raise ConfigError("Sync pair destination must not be empty")
        if self.source.rstrip("/") == self.destination.rstrip("/"):
            raise ConfigError(f"Source and destination are the same: {self.source}")

    @property
    def name(self) -> str:
        """Alias, or ``source -> destination``."""
        return self.alias or f"{self.source} -> {self.destination}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncPair":
        """Create sync pair from a dictionary with camelCase keys.

        Args:
            data: Dictionary with ``source``, ``destination`` and optional
                ``deleteExtraneous``, ``alias``, ``ignore``,
                ``excludeDotFiles`` and ``trustMtime`` keys

        Returns:
            SyncPair instance

        Raises:
            ConfigError: If required keys are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Sync pair must be an object, got {type(data).__name__}")

        missing = [key for key in ("source", "destination") if key not in data]
        if missing:
            raise ConfigError(f"Sync pair is missing: {', '.join(missing)}")

        ignore = data.get("ignore", [])
        if not isinstance(ignore, list) or not all(isinstance(p, str) for p in ignore):
            raise ConfigError("'ignore' must be a list of strings")

        for key in ("deleteExtraneous", "excludeDotFiles", "trustMtime"):
            if key in data and not isinstance(data[key], bool):
                raise ConfigError(f"'{key}' must be true or false")

        return cls(
            source=data["source"],
            destination=data["destination"],
            delete_extraneous=data.get("deleteExtraneous", False),
            alias=data.get("alias"),
            ignore=ignore,
            exclude_dot_files=data.get("excludeDotFiles", False),
            trust_mtime=data.get("trustMtime", True),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert sync pair to a dictionary with camelCase keys."""
        return {
            "source": self.source,
            "destination": self.destination,
            "deleteExtraneous": self.delete_extraneous,
            "alias": self.alias,
            "ignore": list(self.ignore),
            "excludeDotFiles": self.exclude_dot_files,
            "trustMtime": self.trust_mtime,
        }

    @classmethod
    def parse_literal(cls, literal: str) -> "SyncPair":
        """Parse a literal sync pair.

        Formats:
            ``SOURCE::DESTINATION``          copy new and changed files
            ``SOURCE::update::DESTINATION``  same as above
            ``SOURCE::mirror::DESTINATION``  also delete extraneous files

        Examples:
            >>> SyncPair.parse_literal("./docs::mirror::s3://bucket/docs").delete_extraneous
            True
        """
        parts = literal.split(LITERAL_SEPARATOR)
        if len(parts) == 2:
            source, destination = parts
            return cls(source=source, destination=destination)
        if len(parts) == 3:
            source, mode, destination = parts
            mode = mode.strip().lower()
            if mode not in (MIRROR_MODE, UPDATE_MODE):
                raise ConfigError(
                    f"Unknown mode '{mode}', expected '{UPDATE_MODE}' or '{MIRROR_MODE}'"
                )
            return cls(
                source=source,
                destination=destination,
                delete_extraneous=mode == MIRROR_MODE,
            )
        raise ConfigError(
            f"Invalid sync pair literal '{literal}', expected SOURCE::DESTINATION "
            f"or SOURCE::{MIRROR_MODE}::DESTINATION"
        )
