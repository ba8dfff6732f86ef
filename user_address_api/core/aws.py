from __future__ import annotations

import boto3

from .settings import S


def ddb_resource():
    session = boto3.session.Session(region_name=S.aws_region or "us-east-1")
    return session.resource("dynamodb", endpoint_url=S.ddb_endpoint_url or None)
