"""Domain records shared by the store, the extraction client and the routes.

Attribute names are snake_case; the wire format (API bodies, stored JSON and
AI extraction payloads) keeps the camelCase field names of the dashboard.
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return uuid4().hex


def now_iso() -> str:
    return datetime.utcnow().isoformat()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ---------------- PRODUCTION ----------------

class ColorGroupData(CamelModel):
    group_name: str
    weight: float = 0
    percentage: Optional[float] = None

    @field_validator("weight", mode="before")
    @classmethod
    def _none_weight(cls, v):
        return 0 if v is None else v


class IndustryData(CamelModel):
    name: str = ""
    total: float = 0
    loading_cap: Optional[float] = None
    color_groups: List[ColorGroupData] = Field(default_factory=list)
    inhouse: float = 0
    sub_contract: float = 0

    @field_validator("total", "inhouse", "sub_contract", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("color_groups", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return [] if v is None else v


class ProductionRecord(CamelModel):
    id: str = Field(default_factory=new_id)
    date: str
    lantabur: IndustryData = Field(default_factory=lambda: IndustryData(name="Lantabur"))
    taqwa: IndustryData = Field(default_factory=lambda: IndustryData(name="Taqwa"))
    total_production: float = 0
    created_at: str = Field(default_factory=now_iso)

    def industry(self, name: str) -> IndustryData:
        if name == "lantabur":
            return self.lantabur
        if name == "taqwa":
            return self.taqwa
        raise ValueError(f"Unknown industry: {name}")


class ProductionRecordIn(CamelModel):
    """Manual entry form: totalProduction is always derived, never trusted."""
    id: Optional[str] = None
    date: str
    lantabur: IndustryData = Field(default_factory=IndustryData)
    taqwa: IndustryData = Field(default_factory=IndustryData)

    def to_record(self, record_id: Optional[str] = None) -> ProductionRecord:
        lantabur = self.lantabur.model_copy(update={"name": "Lantabur"})
        taqwa = self.taqwa.model_copy(update={"name": "Taqwa"})
        return ProductionRecord(
            id=record_id or self.id or new_id(),
            date=self.date,
            lantabur=lantabur,
            taqwa=taqwa,
            total_production=lantabur.total + taqwa.total,
        )


# ---------------- RFT ----------------

class ShadeStatus(str, Enum):
    PENDING = "pending"
    OK = "ok"
    NOT_OK = "not_ok"


def _flag_set(value) -> bool:
    # Model output sometimes quotes booleans: "true"/"false".
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


class RFTBatchEntry(CamelModel):
    mc: str = ""
    batch_no: str = ""
    buyer: str = ""
    order: str = ""
    colour: str = ""
    color_group: str = ""
    f_type: str = ""
    f_qty: float = 0
    load_cap_percent: float = 0
    shade: ShadeStatus = ShadeStatus.PENDING
    dyeing_type: str = ""
    shift_unload: str = ""
    remarks: str = ""

    @model_validator(mode="before")
    @classmethod
    def _shade_from_flags(cls, data):
        # Extraction payloads and older stored records carry shadeOk/shadeNotOk.
        if not isinstance(data, dict) or "shade" in data:
            return data
        data = dict(data)
        ok = data.pop("shadeOk", data.pop("shade_ok", None))
        not_ok = data.pop("shadeNotOk", data.pop("shade_not_ok", None))
        if _flag_set(ok):
            data["shade"] = ShadeStatus.OK
        elif _flag_set(not_ok):
            data["shade"] = ShadeStatus.NOT_OK
        return data

    @field_validator("f_qty", "load_cap_percent", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator(
        "mc", "batch_no", "buyer", "order", "colour", "color_group",
        "f_type", "dyeing_type", "shift_unload", "remarks", mode="before",
    )
    @classmethod
    def _none_is_blank(cls, v):
        if v is None:
            return ""
        return str(v)

    @property
    def shade_ok(self) -> bool:
        return self.shade == ShadeStatus.OK

    @property
    def shade_not_ok(self) -> bool:
        return self.shade == ShadeStatus.NOT_OK

    @classmethod
    def blank(cls) -> "RFTBatchEntry":
        """A new row in the RFT editor."""
        return cls(shade=ShadeStatus.OK, dyeing_type="B/D CARD", shift_unload="DAY")


class ShiftTotals(CamelModel):
    yousuf: float = 0
    humayun: float = 0

    @field_validator("yousuf", "humayun", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v


class RFTReportRecord(CamelModel):
    id: str = Field(default_factory=new_id)
    date: str
    unit: str = "Unit-02"
    company_name: str = "Lantabur Apparels Ltd."
    entries: List[RFTBatchEntry] = Field(default_factory=list)
    bulk_rft_percent: float = 0
    lab_rft_percent: float = 0
    shift_performance: ShiftTotals = Field(default_factory=ShiftTotals)
    shift_count: ShiftTotals = Field(default_factory=ShiftTotals)
    shift_source: Literal["extracted", "derived"] = "extracted"
    created_at: str = Field(default_factory=now_iso)

    @field_validator("bulk_rft_percent", "lab_rft_percent", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v


# ---------------- SETTINGS ----------------

ThemeType = Literal["light", "dark", "material", "tokio-night", "monokai", "dracula"]
AccentType = Literal["indigo", "blue", "emerald", "rose", "amber", "violet", "cyan"]


class AppSettings(CamelModel):
    theme: ThemeType = "light"
    accent: AccentType = "indigo"


# ---------------- UPLOADS ----------------

class DocumentUpload(CamelModel):
    base64_data: str
    mime_type: str
    replace_id: Optional[str] = None


class RFTDocumentUpload(CamelModel):
    base64_data: str
    mime_type: str
    draft: Optional[RFTReportRecord] = None
