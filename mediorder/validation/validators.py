# mediorder/validation/validators.py
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mediorder.parsers.models import ActiveIngredient

PZN_RE = re.compile(r"^\d{1,8}$")
PZN_WIDTH = 8


class IngredientInfo(BaseModel):
    name: str
    strength: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _not_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("Ingredient name is required")
        return v


class PznInfo(BaseModel):
    """What a lookup tier knows about one PZN (cache row, table row or web answer)."""

    model_config = ConfigDict(populate_by_name=True)

    brand_name: str = Field(alias="brandName")
    active_ingredients: List[IngredientInfo] = Field(default_factory=list, alias="activeIngredients")
    form_code: Optional[str] = Field(default=None, alias="formCode")

    @field_validator("brand_name")
    @classmethod
    def _brand_not_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("brandName is required")
        return v

    def ingredients(self) -> Tuple[ActiveIngredient, ...]:
        return tuple(ActiveIngredient(name=a.name, strength=a.strength) for a in self.active_ingredients)


class PznNumber(BaseModel):
    value: str

    @field_validator("value")
    @classmethod
    def _digits_only(cls, v: str):
        v = (v or "").strip()
        if not PZN_RE.match(v):
            raise ValueError(f"Invalid PZN: {v!r} (expected up to 8 digits)")
        return v


def normalize_pzn(pzn: str, width: int = PZN_WIDTH) -> str:
    """Upstream systems strip leading zeros; the reference table does not."""
    return pzn.strip().zfill(width)


def validate_pzn_or_raise(pzn: str, width: int = PZN_WIDTH) -> str:
    """Return the canonical zero-padded PZN or raise ValidationError."""
    return normalize_pzn(PznNumber(value=pzn).value, width)
