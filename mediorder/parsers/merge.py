from dataclasses import replace
from typing import Sequence

from .errors import EmptyMergeInput, PlanIdentityMismatch
from .models import Plan


def merge_pages(pages: Sequence[Plan]) -> Plan:
    """
    Merge the pages of a multi-page plan (one DataMatrix per page).
    - All pages must carry the same UUID.
    - Patient, author, observations, version and language come from page 0.
    - Sections are concatenated in page order.
    """
    if not pages:
        raise EmptyMergeInput()
    if len(pages) == 1:
        return pages[0]

    first = pages[0]
    for i, page in enumerate(pages[1:], start=1):
        if page.uuid != first.uuid:
            raise PlanIdentityMismatch(first.uuid, i, page.uuid)

    return replace(first, sections=tuple(s for p in pages for s in p.sections))
