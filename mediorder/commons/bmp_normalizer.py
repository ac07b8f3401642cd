from dataclasses import asdict
from typing import Dict, Iterable, Sequence, Union

from mediorder.commons.logger import logger
from mediorder.parsers.constants import SUPPORTED_VERSIONS, section_label
from mediorder.parsers.datamatrix import decode_payload, decode_payload_text
from mediorder.parsers.merge import merge_pages
from mediorder.parsers.models import Plan, ScanResult
from mediorder.parsers.ukf import parse_ukf_xml

Payload = Union[bytes, bytearray, str]


class BmpNormalizer:
    def __init__(self, supported_versions: Iterable[str] = SUPPORTED_VERSIONS):
        self.supported_versions = tuple(supported_versions)

    def to_xml(self, payload: Payload) -> str:
        if isinstance(payload, (bytes, bytearray)):
            return decode_payload(bytes(payload))
        return decode_payload_text(payload)

    def normalize(self, payload: Payload) -> ScanResult:
        """One scanned page (raw bytes or scanner string) -> Plan + raw XML."""
        xml = self.to_xml(payload)
        plan = parse_ukf_xml(xml)
        if plan.version not in self.supported_versions:
            logger.warning(f"Plan {plan.uuid}: UKF version {plan.version!r} not in {self.supported_versions}")
        return ScanResult(plan=plan, raw_xml=(xml,))

    def normalize_pages(self, payloads: Sequence[Payload]) -> ScanResult:
        """Pages of one multi-page plan, in scan order."""
        results = [self.normalize(p) for p in payloads]
        plan = merge_pages([r.plan for r in results])
        return ScanResult(plan=plan, raw_xml=tuple(x for r in results for x in r.raw_xml))

    def to_payload(self, result: ScanResult) -> Dict:
        """JSON-ready dict handed to the archive (plan + raw XML for audit)."""
        return {
            "uuid": result.plan.uuid,
            "patient_name": _patient_name(result.plan),
            "author_name": result.plan.author.name,
            "plan": plan_to_dict(result.plan),
            "raw_xml": list(result.raw_xml),
        }


def plan_to_dict(plan: Plan) -> Dict:
    data = asdict(plan)
    for section, raw in zip(data["sections"], plan.sections):
        section["label"] = section_label(raw.code, raw.free_title)
    return data


def _patient_name(plan: Plan) -> str:
    return f"{plan.patient.given_name} {plan.patient.family_name}".strip()
