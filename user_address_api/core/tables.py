from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .aws import ddb_resource
from .settings import S


@dataclass(frozen=True)
class Tables:
    addresses: Any
    clients: Any


def build_tables(ddb: Optional[Any] = None) -> Tables:
    ddb = ddb if ddb is not None else ddb_resource()
    return Tables(
        addresses=ddb.Table(S.addresses_table_name),
        clients=ddb.Table(S.clients_table_name),
    )
