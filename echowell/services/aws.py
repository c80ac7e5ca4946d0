"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3

from echowell.config.settings import settings


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
) -> Any:
    """Instantiate a boto3 client using configured credentials if available."""

    client_kwargs: dict[str, Any] = {"region_name": region_name or settings.aws.region}
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
    elif settings.aws.access_key and settings.aws.secret_key:
        client_kwargs["aws_access_key_id"] = settings.aws.access_key
        client_kwargs["aws_secret_access_key"] = settings.aws.secret_key
    return boto3.client(service_name, **client_kwargs)


def aws_credentials_configured() -> bool:
    """Whether explicit credentials were supplied (the default chain may still work)."""

    return bool(settings.aws.access_key and settings.aws.secret_key) or bool(
        settings.bedrock.api_key
    )


__all__ = ["create_boto3_client", "aws_credentials_configured"]
