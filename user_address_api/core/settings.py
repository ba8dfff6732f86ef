from __future__ import annotations

import os
from dataclasses import dataclass


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default) not in ("0", "false", "False")


@dataclass(frozen=True)
class Settings:
    # AWS
    aws_region: str = os.environ.get("AWS_REGION", "us-east-1")
    ddb_endpoint_url: str = os.environ.get("DDB_ENDPOINT_URL", "")

    # DynamoDB tables
    addresses_table_name: str = os.environ.get("ADDRESSES_TABLE", "user-addresses-dev")
    addresses_suburb_index: str = os.environ.get("ADDRESSES_SUBURB_INDEX", "suburbIndex")
    addresses_postcode_index: str = os.environ.get("ADDRESSES_POSTCODE_INDEX", "postcodeIndex")
    clients_table_name: str = os.environ.get("CLIENTS_TABLE", "user-address-clients-dev")

    # Addresses
    default_country: str = os.environ.get("DEFAULT_COUNTRY", "Australia")

    # Client credentials
    client_ttl_days: int = int(os.environ.get("CLIENT_TTL_DAYS", "2"))
    client_expiry_enforced: bool = _flag("CLIENT_EXPIRY_ENFORCED", "0")

    # Logging / metrics
    log_level: str = os.environ.get("LOG_LEVEL", "INFO")
    log_format: str = os.environ.get("LOG_FORMAT", "json")
    audit_log_enabled: bool = _flag("AUDIT_LOG_ENABLED", "1")
    metrics_enabled: bool = _flag("METRICS_ENABLED", "1")


S = Settings()
