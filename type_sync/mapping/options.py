"""Per-call mapping options."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MapOptions:
    """Options for a single map/compile call.

    Holds a case-insensitive set of destination member names to skip. The
    plan itself is never changed.
    """

    ignored: set[str] = field(default_factory=set)

    def ignore(self, *names: str) -> MapOptions:
        """Skip the given destination members for this call."""
        self.ignored.update(n.lower() for n in names)
        return self

    @classmethod
    def ignoring(cls, *names: str) -> MapOptions:
        return cls().ignore(*names)

    def is_ignored(self, name: str) -> bool:
        return name.lower() in self.ignored

    @property
    def cache_key(self) -> frozenset[str]:
        return frozenset(self.ignored)
