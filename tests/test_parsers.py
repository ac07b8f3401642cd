# flake8: noqa

import dataclasses

import pytest

from bmp_samples import (
    FREE_TEXT_SECTION_XML,
    MINIMAL_BMP_XML,
    MULTI_INGREDIENT_XML,
    OBSERVATIONS_FULL_XML,
    SIMPLE_BMP_XML,
    METOPROLOL_XML,
)
from mediorder.parsers.errors import BmpError, InvalidDocument, UnexpectedRoot
from mediorder.parsers.models import (
    ActiveIngredient,
    FreeText,
    FreeTextDosage,
    Medication,
    Observations,
    Prescription,
    StructuredDosage,
)
from mediorder.parsers.ukf import parse_ukf_xml


def test_root_attributes():
    plan = parse_ukf_xml(SIMPLE_BMP_XML)
    assert plan.version == "025"
    assert plan.uuid == "11111111111111111111111111111111"
    assert plan.language == "de"


def test_language_defaults_to_de():
    plan = parse_ukf_xml('<MP v="025" U="abc"/>')
    assert plan.language == "de"
    assert plan.sections == ()


def test_patient_fields():
    patient = parse_ukf_xml(SIMPLE_BMP_XML).patient
    assert patient.given_name == "Max"
    assert patient.family_name == "Mustermann"
    assert patient.egk == "A123456789"
    assert patient.birth_date == "19550315"
    assert patient.sex == "M"
    assert patient.title is None


def test_minimal_patient_has_no_optional_fields():
    patient = parse_ukf_xml(MINIMAL_BMP_XML).patient
    assert patient.given_name == "Anna"
    assert patient.family_name == "Schmidt"
    assert patient.egk is None
    assert patient.birth_date is None


def test_missing_patient_and_author_degrade_to_empty_names():
    plan = parse_ukf_xml('<MP v="025" U="u1"><S c="411"/></MP>')
    assert plan.patient.given_name == ""
    assert plan.patient.family_name == ""
    assert plan.author.name == ""
    assert plan.observations == Observations()


def test_patient_element_without_names():
    plan = parse_ukf_xml('<MP v="025" U="u1"><P b="19000101"/></MP>')
    assert plan.patient.given_name == ""
    assert plan.patient.family_name == ""
    assert plan.patient.birth_date == "19000101"


def test_author_fields():
    author = parse_ukf_xml(SIMPLE_BMP_XML).author
    assert author.name == "Dr. med. Erika Musterärztin"
    assert author.lanr == "123456789"
    assert author.street == "Musterstr. 1"
    assert author.zip == "12345"
    assert author.city == "Musterstadt"
    assert author.phone == "030-1234567"
    assert author.email == "praxis@example.de"
    assert author.print_timestamp == "20240115120000"


def test_author_iso_like_timestamp_is_kept_verbatim():
    author = parse_ukf_xml(FREE_TEXT_SECTION_XML).author
    assert author.print_timestamp == "2024-01-15 12:00"


def test_observations_values_are_verbatim_strings():
    obs = parse_ukf_xml(SIMPLE_BMP_XML).observations
    assert obs.allergies == "Penicillin"
    assert obs.weight == "80"
    assert obs.height == "178"
    assert obs.creatinine == "1.2"
    assert obs.pregnant is None
    assert obs.breastfeeding is None

    obs = parse_ukf_xml(OBSERVATIONS_FULL_XML).observations
    assert obs.weight == "65,5"
    assert obs.creatinine == "0,9"


def test_pregnant_breastfeeding_tri_state():
    obs = parse_ukf_xml(OBSERVATIONS_FULL_XML).observations
    assert obs.pregnant is True
    assert obs.breastfeeding is False
    assert obs.allergies == "Sulfonamide, Latex"


def test_observations_missing():
    obs = parse_ukf_xml(MINIMAL_BMP_XML).observations
    assert obs.allergies is None
    assert obs.pregnant is None


def test_sections_in_document_order():
    sections = parse_ukf_xml(SIMPLE_BMP_XML).sections
    assert [s.code for s in sections] == ["411", "412"]
    assert len(sections[0].entries) == 2


def test_section_with_free_title():
    section = parse_ukf_xml(FREE_TEXT_SECTION_XML).sections[0]
    assert section.free_title == "Hinweise zur Einnahme"
    assert section.code is None


def test_medication_with_structured_dosage():
    med = parse_ukf_xml(SIMPLE_BMP_XML).sections[0].entries[0]
    assert isinstance(med, Medication)
    assert med.kind == "medication"
    assert med.pzn == "12345678"
    assert med.brand_name == "Metoprolol 47,5mg"
    assert med.form_code == "FTA"
    assert med.unit == "Stk"
    assert med.dosage == StructuredDosage(morning="1", noon="0", evening="0", night="0")
    assert med.active_ingredients == (ActiveIngredient("Metoprololsuccinat", "47,5 mg"),)


def test_medication_with_reason():
    med = parse_ukf_xml(SIMPLE_BMP_XML).sections[0].entries[1]
    assert med.reason == "Bluthochdruck"
    assert med.dosage == StructuredDosage(morning="1", noon="0", evening="1", night="0")


def test_medication_with_free_text_dosage():
    med = parse_ukf_xml(SIMPLE_BMP_XML).sections[1].entries[0]
    assert med.pzn is None
    assert med.dosage == FreeTextDosage(text="bei Bedarf, max. 3x täglich")


def test_structured_dosage_wins_over_du():
    xml = '<MP v="025" U="u"><S><M m="1" du="2x täglich"/></S></MP>'
    med = parse_ukf_xml(xml).sections[0].entries[0]
    assert med.dosage == StructuredDosage(morning="1", noon="0", evening="0", night="0")


def test_ingredients_in_order_and_nameless_skipped():
    med = parse_ukf_xml(MULTI_INGREDIENT_XML).sections[0].entries[0]
    assert [a.name for a in med.active_ingredients] == ["Amlodipin", "Valsartan", "Hydrochlorothiazid"]
    assert med.active_ingredients[2].strength is None


def test_medication_without_ingredients():
    med = parse_ukf_xml('<MP v="025" U="u"><S><M p="1234567"/></S></MP>').sections[0].entries[0]
    assert med.active_ingredients == ()
    assert med.dosage is None
    assert med.pzn == "1234567"


def test_free_text_and_prescription_entries_unknown_tag_skipped():
    entries = parse_ukf_xml(FREE_TEXT_SECTION_XML).sections[0].entries
    assert len(entries) == 2
    assert entries[0] == FreeText(text="Alle Medikamente mit ausreichend Wasser einnehmen.")
    assert entries[0].kind == "freeText"
    assert entries[1] == Prescription(text="Rezept für Physiotherapie bitte erneuern")
    assert entries[1].kind == "prescription"


def test_example_document_end_to_end():
    plan = parse_ukf_xml(METOPROLOL_XML)
    assert plan.patient.given_name == "Max"
    assert plan.patient.family_name == "Mustermann"
    assert plan.patient.birth_date == "19550315"
    assert len(plan.sections) == 1
    section = plan.sections[0]
    assert section.code == "411"
    (med,) = section.entries
    assert med.pzn == "12345678"
    assert med.brand_name == "Metoprolol"
    assert med.dosage == StructuredDosage("1", "0", "0", "0")
    assert med.active_ingredients == (ActiveIngredient("Metoprololsuccinat", "47,5 mg"),)


def test_parse_is_deterministic():
    assert parse_ukf_xml(SIMPLE_BMP_XML) == parse_ukf_xml(SIMPLE_BMP_XML)
    assert parse_ukf_xml(FREE_TEXT_SECTION_XML) == parse_ukf_xml(FREE_TEXT_SECTION_XML)


def test_plan_is_immutable():
    plan = parse_ukf_xml(SIMPLE_BMP_XML)
    with pytest.raises(dataclasses.FrozenInstanceError):
        plan.uuid = "other"


def test_invalid_xml_raises_invalid_document():
    with pytest.raises(InvalidDocument) as exc:
        parse_ukf_xml("<not valid xml")
    assert exc.value.detail


def test_wrong_root_raises_unexpected_root():
    with pytest.raises(UnexpectedRoot) as exc:
        parse_ukf_xml("<Root/>")
    assert exc.value.tag == "Root"
    assert "Expected root element <MP>" in str(exc.value)


def test_structural_errors_share_base_class():
    with pytest.raises(BmpError):
        parse_ukf_xml("<Root/>")
