"""Read intake form responses from Google Sheets."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from shipsync.adapters.http_resilience import ServiceClient
from shipsync.config.sheets import SheetsConfig, get_sheets_config
from shipsync.domain.errors import ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Callable

    from shipsync.adapters.http_resilience import ResilienceConfig, ResilientClient
    from shipsync.domain.ports import RowSource

log = getLogger(__name__)


class SheetsAPIError(ExternalServiceError):
    service = "sheets"


class ValueRange(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    range: str = ""
    major_dimension: str = Field(default="ROWS", alias="majorDimension")
    values: list[list[str]] = Field(default_factory=list)


@dataclass(frozen=True)
class SheetValues:
    """Snapshot of one sheet; the first row is the header."""

    spreadsheet_id: str
    values: list[list[str]] = field(default_factory=list)

    @property
    def source_id(self) -> str:
        return self.spreadsheet_id

    def header(self) -> list[str]:
        return list(self.values[0]) if self.values else []

    def rows(self) -> list[list[str]]:
        return [list(row) for row in self.values[1:]]


@dataclass(kw_only=True)
class GoogleSheetsReader(ServiceClient):
    error_type: ClassVar[type[ExternalServiceError]] = SheetsAPIError

    config: SheetsConfig

    @classmethod
    def from_config(
        cls,
        config: SheetsConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> GoogleSheetsReader:
        resolved = config or get_sheets_config()
        if client_factory is None:
            return cls(config=resolved, resilience=resolved.resilience)
        return cls(config=resolved, resilience=resolved.resilience, client_factory=client_factory)

    async def read(self, spreadsheet_id: str) -> SheetValues:
        response = await self._request(
            "GET",
            f"{spreadsheet_id}/values/{quote(self.config.sheet_range, safe='')}",
            params={"valueRenderOption": "FORMATTED_VALUE"},
            headers={"Authorization": f"Bearer {self.config.access_token}"},
        )
        value_range = self._validate(ValueRange, response)
        log.info("Read %s rows from spreadsheet %s", len(value_range.values), spreadsheet_id)
        return SheetValues(spreadsheet_id=spreadsheet_id, values=value_range.values)

    async def read_all(self) -> list[SheetValues]:
        return [await self.read(spreadsheet_id) for spreadsheet_id in self.config.spreadsheet_ids]


if TYPE_CHECKING:
    _source_check: RowSource = SheetValues(spreadsheet_id="")
