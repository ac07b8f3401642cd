from mediorder.parsers.constants import SECTION_LABELS, form_label, section_label


def test_known_section_codes():
    assert section_label("411") == "Dauermedikation"
    assert section_label("412") == "Bedarfsmedikation"


def test_free_title_when_code_unknown_or_missing():
    assert section_label("999", "Mein Abschnitt") == "Mein Abschnitt"
    assert section_label(None, "Sonstiges") == "Sonstiges"


def test_code_then_default():
    assert section_label("999") == "999"
    assert section_label() == "Medikation"


def test_all_section_codes_present():
    expected = ["411", "412", "413", "414", "415", "416", "417", "418", "419", "421", "422"]
    assert sorted(SECTION_LABELS) == sorted(expected)


def test_form_label():
    assert form_label("FTA") == "Filmtabletten"
    assert form_label("fta") == "Filmtabletten"
    assert form_label("XYZ", "Kautabletten") == "Kautabletten"
    assert form_label("XYZ") == "XYZ"
    assert form_label() == ""
