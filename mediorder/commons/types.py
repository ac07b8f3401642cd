from typing import Any, Dict, Optional

from pydantic import BaseModel


class PathsCfg(BaseModel):
    logs_root: str = "logs"
    inbox: str = "inbox"
    archive: str = "archive"
    error: str = "error"


class NetworkCfg(BaseModel):
    enabled: bool = False
    base_url: str = "http://localhost:3456/api/pzn"
    timeout_sec: float = 10.0


class LookupCfg(BaseModel):
    cache_file: Optional[str] = "cache/pzn_cache.json"
    reference_table: Optional[str] = None  # None -> bundled data/pzn_reference.yaml
    pad_width: int = 8
    network: NetworkCfg = NetworkCfg()


class InboxCfg(BaseModel):
    filename_glob: str = "*.bin"


class Settings(BaseModel):
    app: Dict[str, Any] = {}
    paths: PathsCfg = PathsCfg()
    lookup: LookupCfg = LookupCfg()
    inbox: InboxCfg = InboxCfg()
