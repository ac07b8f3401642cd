from typing import Optional
from xml.etree.ElementTree import Element


def _attr(el: Element, name: str) -> Optional[str]:
    return el.get(name)


def _text(el: Element, name: str) -> str:
    """Required textual attribute: "" when absent, never None."""
    return el.get(name) or ""


def _tri_state(el: Element, name: str) -> Optional[bool]:
    # "1" -> True, "0" -> False, anything else -> unknown
    val = el.get(name)
    if val == "1":
        return True
    if val == "0":
        return False
    return None


def _first(root: Element, tag: str) -> Optional[Element]:
    return next(root.iter(tag), None)


def detect_version(root: Element) -> str:
    """Return the UKF version declared on <MP v="...">, or "" if missing."""
    return root.get("v") or ""
