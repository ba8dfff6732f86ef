"""Command line provisioning of API client credentials.

    user-address-init-client --name "My App" [--description "..."]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from user_address_api.core.logging import setup_logging
from user_address_api.core.settings import S
from user_address_api.core.aws import ddb_resource
from user_address_api.errors import ApiError
from user_address_api.services.clients import provision_client
from user_address_api.stores.clients import ClientStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="user-address-init-client",
        description="Create a clientId/clientSecret pair for the address API.",
    )
    parser.add_argument("--name", required=True, help="Client name")
    parser.add_argument("--description", default="", help="Optional description")
    parser.add_argument("--table", default=S.clients_table_name, help="Clients table (default: %(default)s)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(S.log_level, "standard", stream=sys.stderr)

    store = ClientStore(ddb_resource().Table(args.table))
    try:
        result = asyncio.run(provision_client(store, {"clientName": args.name, "description": args.description}))
    except ApiError as exc:
        print(json.dumps(exc.to_body()), file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
