from __future__ import annotations

from .zone import Zone, default_zone_label, gen_zone_id, validate_zone_list, find_zone
from .signature import SignatureRecord, parse_data_uri
from .sign_document import SignDocument

__all__ = [
    "Zone",
    "default_zone_label",
    "gen_zone_id",
    "validate_zone_list",
    "find_zone",
    "SignatureRecord",
    "parse_data_uri",
    "SignDocument",
]
