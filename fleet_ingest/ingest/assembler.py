from __future__ import annotations

import logging

from ..models.config_models import IngestConfig
from ..models.parse_result import ParseResult
from ..models.records import OrderRecord, PartnerRecord
from ..models.row_data import RowData
from ..models.warning_record import ParseWarning
from ..tabular.normalizer import SheetData
from .classifier import RowKind, classify
from .coercer import coerce_order, coerce_partner

"""Result assembler: run classification + coercion per row and collect output.

Records and warnings are kept in row scan order; nothing is reordered or
deduplicated. Row-level problems only ever become warnings.
"""

__all__ = [
    "EMPTY_INPUT_MESSAGE",
    "ResultAssembler",
    "assemble",
]

logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "file appears to be empty or has no data rows"


class ResultAssembler:
    """Accumulates records for a single parse. One instance per parse call."""

    def __init__(self, config: IngestConfig) -> None:
        self.config = config
        self._orders: list[OrderRecord] = []
        self._partners: list[PartnerRecord] = []
        self._warnings: list[ParseWarning] = []
        self.unclassified_rows = 0

    def add_row(self, headers: tuple[str, ...], row: RowData) -> RowKind:
        kind = classify(headers, row)
        if kind is RowKind.ORDER:
            order, warnings = coerce_order(row, self.config)
            self._orders.append(order)
            self._warnings.extend(warnings)
        elif kind is RowKind.PARTNER:
            partner, warnings = coerce_partner(row, self.config)
            self._partners.append(partner)
            self._warnings.extend(warnings)
        else:
            self.unclassified_rows += 1
            if self.config.warn_unclassified:
                self.add_warning(
                    ParseWarning(
                        row_index=row.row_index,
                        message="Row could not be classified as an order or a partner, skipped",
                    )
                )
        return kind

    def add_warning(self, warning: ParseWarning) -> None:
        self._warnings.append(warning)

    def build(self) -> ParseResult:
        return ParseResult(
            orders=tuple(self._orders),
            partners=tuple(self._partners),
            warnings=tuple(self._warnings),
        )


def assemble(sheet: SheetData, config: IngestConfig) -> ParseResult:
    """Classify and coerce every row of a normalized sheet."""
    if not sheet.rows:
        return ParseResult(warnings=(ParseWarning.file_level(EMPTY_INPUT_MESSAGE),))

    logger.debug(f"headers found: {list(sheet.headers)}")
    assembler = ResultAssembler(config)
    for row in sheet.rows:
        assembler.add_row(sheet.headers, row)
    result = assembler.build()
    logger.debug(
        f"parsed orders={len(result.orders)} partners={len(result.partners)} "
        f"warnings={len(result.warnings)} unclassified={assembler.unclassified_rows}"
    )
    return result
