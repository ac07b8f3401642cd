# ===============================
# File: mediorder/parsers/models.py
# ===============================
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Patient:
    given_name: str = ""
    family_name: str = ""
    egk: Optional[str] = None  # eGK insurance card id
    birth_date: Optional[str] = None  # YYYYMMDD
    sex: Optional[str] = None  # M | W | D | X
    title: Optional[str] = None


@dataclass(frozen=True)
class Author:
    name: str = ""
    lanr: Optional[str] = None
    idf: Optional[str] = None
    kik: Optional[str] = None
    street: Optional[str] = None
    zip: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    print_timestamp: Optional[str] = None  # YYYYMMDD[HHmm[ss]] or "YYYY-MM-DD HH:MM"


@dataclass(frozen=True)
class Observations:
    allergies: Optional[str] = None
    weight: Optional[str] = None
    height: Optional[str] = None
    creatinine: Optional[str] = None
    pregnant: Optional[bool] = None
    breastfeeding: Optional[bool] = None


@dataclass(frozen=True)
class StructuredDosage:
    morning: str = "0"
    noon: str = "0"
    evening: str = "0"
    night: str = "0"
    type: str = field(default="structured", init=False)


@dataclass(frozen=True)
class FreeTextDosage:
    text: str
    type: str = field(default="freeText", init=False)


Dosage = Union[StructuredDosage, FreeTextDosage]


@dataclass(frozen=True)
class ActiveIngredient:
    name: str
    strength: Optional[str] = None


@dataclass(frozen=True)
class Medication:
    pzn: Optional[str] = None  # 7-8 digits, may come without leading zeros
    brand_name: Optional[str] = None
    form_code: Optional[str] = None
    form_free_text: Optional[str] = None
    dosage: Optional[Dosage] = None
    unit: Optional[str] = None
    instructions: Optional[str] = None
    reason: Optional[str] = None
    active_ingredients: Tuple[ActiveIngredient, ...] = ()
    kind: str = field(default="medication", init=False)


@dataclass(frozen=True)
class FreeText:
    text: str = ""
    kind: str = field(default="freeText", init=False)


@dataclass(frozen=True)
class Prescription:
    text: str = ""
    kind: str = field(default="prescription", init=False)


Entry = Union[Medication, FreeText, Prescription]


@dataclass(frozen=True)
class Section:
    code: Optional[str] = None
    free_title: Optional[str] = None
    entries: Tuple[Entry, ...] = ()


@dataclass(frozen=True)
class Plan:
    version: str
    uuid: str
    language: str
    patient: Patient
    author: Author
    observations: Observations
    sections: Tuple[Section, ...] = ()

    def medications(self) -> Tuple[Medication, ...]:
        return tuple(e for s in self.sections for e in s.entries if isinstance(e, Medication))


@dataclass(frozen=True)
class ScanResult:
    """Plan plus the raw UKF XML it came from (one string per scanned page)."""

    plan: Plan
    raw_xml: Tuple[str, ...]
