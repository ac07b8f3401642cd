from typing import Dict, Optional, Tuple

UKF_VERSION = "025"
SUPPORTED_VERSIONS: Tuple[str, ...] = ("023", "024", "025", "026")

ROOT_TAG = "MP"
ROOT_TOKEN = "<" + ROOT_TAG

DEFAULT_SECTION_LABEL = "Medikation"

SECTION_LABELS: Dict[str, str] = {
    "411": "Dauermedikation",
    "412": "Bedarfsmedikation",
    "413": "Selbstmedikation",
    "414": "Besondere Anwendung",
    "415": "Zeitlich befristete Anwendung",
    "416": "Fertigspritze",
    "417": "Intramuskuläre Anwendung",
    "418": "Allergien und Unverträglichkeiten",
    "419": "Wichtige Hinweise",
    "421": "Wichtige Angaben",
    "422": "Anwendung unter die Haut",
}

# IFA Darreichungsformen (subset found on printed plans)
DOSAGE_FORM_LABELS: Dict[str, str] = {
    "TAB": "Tabletten",
    "FTA": "Filmtabletten",
    "RET": "Retardtabletten",
    "BTA": "Brausetabletten",
    "SMT": "Schmelztabletten",
    "KAP": "Kapseln",
    "HKP": "Hartkapseln",
    "WKA": "Weichkapseln",
    "TRO": "Tropfen",
    "LSG": "Lösung",
    "SAF": "Saft",
    "SIR": "Sirup",
    "SUS": "Suspension",
    "PUL": "Pulver",
    "GRA": "Granulat",
    "SAL": "Salbe",
    "CRE": "Creme",
    "GEL": "Gel",
    "PFL": "Pflaster",
    "SUP": "Zäpfchen",
    "SPR": "Spray",
    "DOS": "Dosieraerosol",
    "INH": "Inhalationskapseln",
    "AUG": "Augentropfen",
    "NAS": "Nasenspray",
    "FER": "Fertigspritzen",
    "ILO": "Injektionslösung",
    "AMP": "Ampullen",
}

ALLOWED_FRACTIONS: Tuple[str, ...] = ("1/2", "1/3", "1/4", "2/3", "3/4")


def section_label(code: Optional[str] = None, free_title: Optional[str] = None) -> str:
    """Known code -> label; else free title; else raw code; else the generic default."""
    if code and code in SECTION_LABELS:
        return SECTION_LABELS[code]
    if free_title:
        return free_title
    if code:
        return code
    return DEFAULT_SECTION_LABEL


def form_label(code: Optional[str] = None, free_text: Optional[str] = None) -> str:
    if code and code.upper() in DOSAGE_FORM_LABELS:
        return DOSAGE_FORM_LABELS[code.upper()]
    return free_text or code or ""
