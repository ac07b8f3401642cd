from pathlib import Path
from typing import Any, Dict, Sequence

import yaml

from mediorder.commons.bmp_normalizer import BmpNormalizer, Payload
from mediorder.commons.types import Settings
from mediorder.parsers.models import ScanResult

PACKAGE_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG = PACKAGE_ROOT / "configs" / "settings.yaml"
DEFAULT_REFERENCE_TABLE = PACKAGE_ROOT / "data" / "pzn_reference.yaml"


def load_settings(config_path_or_obj: Any = None) -> Settings:
    """Accepts a YAML path, an already loaded dict, a Settings, or None (bundled config)."""
    if isinstance(config_path_or_obj, Settings):
        return config_path_or_obj
    if config_path_or_obj is None:
        config_path_or_obj = DEFAULT_CONFIG
    if isinstance(config_path_or_obj, (str, Path)):
        with open(config_path_or_obj, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    elif isinstance(config_path_or_obj, dict):
        cfg = config_path_or_obj
    else:
        cfg = {}
    return Settings.model_validate(cfg)


class BmpEngine:
    """Facade that loads config and exposes read/serialise methods for scanned plans."""

    def __init__(self, config_path_or_obj: Any = None):
        self.settings = load_settings(config_path_or_obj)
        self.normalizer = BmpNormalizer()

    def read(self, payload: Payload) -> ScanResult:
        return self.normalizer.normalize(payload)

    def read_pages(self, payloads: Sequence[Payload]) -> ScanResult:
        return self.normalizer.normalize_pages(payloads)

    def to_payload(self, result: ScanResult) -> Dict:
        return self.normalizer.to_payload(result)

    @property
    def reference_table_path(self) -> Path:
        return Path(self.settings.lookup.reference_table or DEFAULT_REFERENCE_TABLE)
