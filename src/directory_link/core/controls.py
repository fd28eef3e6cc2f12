"""Registry of extended controls requested on a session."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class ExtendedControl:
    """A server control requested for every operation on the connection."""

    oid: str
    critical: bool = False
    # Accepted but never encoded or sent to the server
    value: Any = None

    def as_dict(self) -> Dict[str, Any]:
        return {"oid": self.oid, "value": self.value, "critical": self.critical}


class ControlRegistry:
    """
    Ordered, immutable sequence of extended controls.

    The whole sequence is applied as a single server-controls option, so a
    mutation produces a new registry that replaces the old one only after
    the option has been accepted.
    """

    def __init__(self, controls: Iterable[ExtendedControl] = ()):
        self._controls: Tuple[ExtendedControl, ...] = tuple(controls)

    @classmethod
    def from_option(cls, value: Optional[Iterable[Dict[str, Any]]]) -> "ControlRegistry":
        """Rebuild a registry from a previously applied server-controls option."""
        controls = [
            ExtendedControl(
                oid=item["oid"],
                critical=bool(item.get("critical", False)),
                value=item.get("value"),
            )
            for item in value or []
        ]
        return cls(controls)

    def with_control(self, control: ExtendedControl) -> "ControlRegistry":
        return ControlRegistry(self._controls + (control,))

    def as_option(self) -> List[Dict[str, Any]]:
        return [control.as_dict() for control in self._controls]

    @property
    def controls(self) -> Tuple[ExtendedControl, ...]:
        return self._controls

    def __contains__(self, oid: object) -> bool:
        return any(control.oid == oid for control in self._controls)

    def __iter__(self) -> Iterator[ExtendedControl]:
        return iter(self._controls)

    def __len__(self) -> int:
        return len(self._controls)

    def __repr__(self) -> str:
        return f"ControlRegistry({[control.oid for control in self._controls]!r})"
