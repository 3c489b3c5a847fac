from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import aws_cdk as cdk
import aws_cdk.assertions as assertions
import boto3
import pytest
from moto import mock_aws

from src.stacks.catalog_stack import CatalogStack

SETTINGS_VARS = (
    "CATALOG_STACK_ID",
    "APPSYNC_FIELD_LOG_LEVEL",
    "ENABLE_APPSYNC_LOGGING",
    "API_KEY_EXPIRY_DAYS",
    "ENABLE_XRAY",
    "RETAIN_TABLES",
    "ENABLE_MONITORING",
)


@pytest.fixture(autouse=True)
def mock_environment() -> Generator[None]:
    """Mock environment variables for all tests."""
    with patch.dict(os.environ, {
        "AWS_DEFAULT_REGION": "us-east-1",
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
    }):
        # patch.dict restores removed keys on exit
        for name in SETTINGS_VARS:
            os.environ.pop(name, None)
        yield


@pytest.fixture
def catalog_stack() -> CatalogStack:
    """Catalog stack with default settings."""
    app = cdk.App()
    return CatalogStack(app, "TestCatalogStack")


@pytest.fixture
def catalog_template(catalog_stack: CatalogStack) -> assertions.Template:
    return assertions.Template.from_stack(catalog_stack)


@pytest.fixture
def mock_dynamodb_client() -> Any:
    """Mock DynamoDB client."""
    with mock_aws():
        yield boto3.client("dynamodb", region_name="us-east-1")


@pytest.fixture
def sample_product_id() -> str:
    return "prod-123"
