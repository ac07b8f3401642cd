from typing import Optional

from .models import Dosage, FreeTextDosage, Medication, StructuredDosage


def parse_dosage_fields(
    morning: Optional[str] = None,
    noon: Optional[str] = None,
    evening: Optional[str] = None,
    night: Optional[str] = None,
    free_text: Optional[str] = None,
) -> Optional[Dosage]:
    """Reconcile the m/d/v/h slots and the du free text of one <M> row.

    Some PVS systems set both m/d/v/h and du on the same row: any slot present
    means structured, and du is only used when all four slots are missing.
    Missing slots default to "0" one by one.
    """
    slots = (morning, noon, evening, night)
    if any(s is not None for s in slots):
        return StructuredDosage(
            morning="0" if morning is None else morning,
            noon="0" if noon is None else noon,
            evening="0" if evening is None else evening,
            night="0" if night is None else night,
        )
    if free_text:
        return FreeTextDosage(text=free_text)
    return None


def format_dosage(dosage: Optional[Dosage]) -> str:
    """Structured dosage as "m - d - v - h", free text as is."""
    if dosage is None:
        return ""
    if isinstance(dosage, FreeTextDosage):
        return dosage.text
    return f"{dosage.morning} - {dosage.noon} - {dosage.evening} - {dosage.night}"


def format_medication_line(med: Medication) -> str:
    parts = []
    if med.brand_name:
        parts.append(med.brand_name)
    if med.active_ingredients:
        ai = ", ".join(
            f"{a.name} {a.strength}" if a.strength else a.name for a in med.active_ingredients
        )
        parts.append(f"({ai})")
    dosage_str = format_dosage(med.dosage)
    if dosage_str:
        parts.append(dosage_str)
    return " ".join(parts)
