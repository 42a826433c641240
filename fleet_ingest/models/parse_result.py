from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .records import OrderRecord, PartnerRecord
from .warning_record import ParseWarning

"""ParseResult model: the single value returned by a successful parse.

The result is immutable and owned by the caller; the engine keeps no reference
to it once returned.
"""

__all__ = [
    "ParseResult",
]


@dataclass(frozen=True)
class ParseResult:
    """Two typed record streams plus the warning log, all in row scan order."""
    orders: tuple[OrderRecord, ...] = ()
    partners: tuple[PartnerRecord, ...] = ()
    warnings: tuple[ParseWarning, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.orders and not self.partners

    def warning_messages(self) -> list[str]:
        """Warnings rendered as display strings ("Row 3: ...")."""
        return [str(w) for w in self.warnings]

    def summary(self) -> dict[str, int]:
        return {
            "orders": len(self.orders),
            "partners": len(self.partners),
            "warnings": len(self.warnings),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "orders": [o.to_dict() for o in self.orders],
            "partners": [p.to_dict() for p in self.partners],
            "warnings": self.warning_messages(),
        }
