import xml.etree.ElementTree as ET
from typing import List

from .base import _attr, _first, _text, _tri_state, detect_version
from .constants import ROOT_TAG
from .dosage import parse_dosage_fields
from .errors import InvalidDocument, UnexpectedRoot
from .models import (
    ActiveIngredient,
    Author,
    Entry,
    FreeText,
    Medication,
    Observations,
    Patient,
    Plan,
    Prescription,
    Section,
)


def parse_ukf_xml(xml: str) -> Plan:
    """Parse a UKF XML document (root <MP>) into a Plan."""
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise InvalidDocument(str(e)) from e

    if root.tag != ROOT_TAG:
        raise UnexpectedRoot(root.tag)

    return Plan(
        version=detect_version(root),
        uuid=_text(root, "U"),
        language=_attr(root, "l") or "de",
        patient=_parse_patient(root),
        author=_parse_author(root),
        observations=_parse_observations(root),
        sections=tuple(_parse_section(s) for s in root.iter("S")),
    )


def _parse_patient(root: ET.Element) -> Patient:
    el = _first(root, "P")
    if el is None:
        return Patient()
    return Patient(
        given_name=_text(el, "g"),
        family_name=_text(el, "f"),
        egk=_attr(el, "egk"),
        birth_date=_attr(el, "b"),
        sex=_attr(el, "s"),
        title=_attr(el, "t"),
    )


def _parse_author(root: ET.Element) -> Author:
    el = _first(root, "A")
    if el is None:
        return Author()
    return Author(
        name=_text(el, "n"),
        lanr=_attr(el, "lanr"),
        idf=_attr(el, "idf"),
        kik=_attr(el, "kik"),
        street=_attr(el, "s"),
        zip=_attr(el, "z"),
        city=_attr(el, "c"),
        phone=_attr(el, "p"),
        email=_attr(el, "e"),
        print_timestamp=_attr(el, "t"),
    )


def _parse_observations(root: ET.Element) -> Observations:
    el = _first(root, "O")
    if el is None:
        return Observations()
    return Observations(
        allergies=_attr(el, "ai"),
        weight=_attr(el, "w"),
        height=_attr(el, "h"),
        creatinine=_attr(el, "c"),
        pregnant=_tri_state(el, "p"),
        breastfeeding=_tri_state(el, "b"),
    )


def _parse_section(el: ET.Element) -> Section:
    return Section(
        code=_attr(el, "c"),
        free_title=_attr(el, "t"),
        entries=tuple(_parse_entries(el)),
    )


def _parse_entries(section_el: ET.Element) -> List[Entry]:
    entries: List[Entry] = []
    for child in section_el:
        # M / X / R; unknown tags are skipped
        if child.tag == "M":
            entries.append(_parse_medication(child))
        elif child.tag == "X":
            entries.append(FreeText(text=_text(child, "t")))
        elif child.tag == "R":
            entries.append(Prescription(text=_text(child, "t")))
    return entries


def _parse_medication(el: ET.Element) -> Medication:
    return Medication(
        pzn=_attr(el, "p"),
        brand_name=_attr(el, "a"),
        form_code=_attr(el, "f"),
        form_free_text=_attr(el, "fd"),
        dosage=parse_dosage_fields(
            _attr(el, "m"),
            _attr(el, "d"),
            _attr(el, "v"),
            _attr(el, "h"),
            _attr(el, "du"),
        ),
        unit=_attr(el, "e"),
        instructions=_attr(el, "i"),
        reason=_attr(el, "r"),
        active_ingredients=tuple(_parse_active_ingredients(el)),
    )


def _parse_active_ingredients(med_el: ET.Element) -> List[ActiveIngredient]:
    ingredients: List[ActiveIngredient] = []
    for w in med_el.iter("W"):
        name = _attr(w, "w")
        if not name:
            continue
        ingredients.append(ActiveIngredient(name=name, strength=_attr(w, "s")))
    return ingredients
