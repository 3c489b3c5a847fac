from __future__ import annotations

import argparse
import json
import os
from typing import Any

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from src.resolvers import templates

load_dotenv(".env")


class TemplateEvaluationError(RuntimeError):
    pass


def get_stack_outputs(cloudformation_client, stack_name: str) -> dict[str, str]:
    """Get the catalog stack outputs keyed by OutputKey."""
    try:
        stacks = cloudformation_client.describe_stacks(StackName=stack_name)["Stacks"]
    except ClientError as exc:
        print(f"Failed to describe stack {stack_name}: {exc}")
        return {}

    if not stacks:
        return {}
    return {
        output["OutputKey"]: output["OutputValue"]
        for output in stacks[0].get("Outputs", [])
    }


def evaluate_template(appsync_client, template: str, context: dict[str, Any]) -> Any:
    """Render a mapping template with AppSync and parse the JSON it produces."""
    resp = appsync_client.evaluate_mapping_template(
        template=template, context=json.dumps(context))
    error = resp.get("error")
    if error:
        raise TemplateEvaluationError(error.get("message", "unknown evaluation error"))

    result = resp.get("evaluationResult") or ""
    if not result.strip():
        return None
    return json.loads(result)


def sample_cases(product_table: str, variant_table: str) -> dict[str, tuple[str, dict[str, Any]]]:
    """Owned request templates paired with a representative resolver context."""
    product_id = "sample-product"
    return {
        "Query.listVariantsByProduct": (
            templates.variants_by_product_argument(),
            {"arguments": {"productId": product_id}, "source": {}},
        ),
        "Product.variants": (
            templates.variants_of_source_product(),
            {"arguments": {}, "source": {"id": product_id, "name": "Sample"}},
        ),
        "Variant.product": (
            templates.get_by_source_field("id", templates.PRODUCT_KEY),
            {"arguments": {}, "source": {"id": "sample-variant", "productId": product_id}},
        ),
        "Mutation.addProductWithDefaultVariant": (
            templates.batch_put_with_default_variant_request(product_table, variant_table),
            {"arguments": {"input": {"name": "Sample", "price": 9.5}}, "source": {}},
        ),
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Show catalog API outputs and evaluate its request templates")
    parser.add_argument("--region", default=os.environ.get("AWS_REGION"))
    parser.add_argument(
        "--stack-name", default=os.environ.get("CATALOG_STACK_ID", "ProductCatalogStack"),
        help="CDK stack name for outputs")

    args = parser.parse_args()

    cfn = boto3.client("cloudformation", region_name=args.region)
    appsync = boto3.client("appsync", region_name=args.region)

    outputs = get_stack_outputs(cfn, args.stack_name)
    if not outputs:
        print("Warning: no stack outputs found, evaluating templates with placeholder table names")

    print("\n=== Stack outputs ===")
    for key, value in sorted(outputs.items()):
        print(f"{key}: {value}")

    product_table = outputs.get("ProductTableName", "product-table")
    variant_table = outputs.get("VariantTableName", "variant-table")

    print("\n=== Request templates ===")
    for field, (template, context) in sample_cases(product_table, variant_table).items():
        try:
            rendered = evaluate_template(appsync, template, context)
        except (ClientError, TemplateEvaluationError) as exc:
            print(field, "ERROR:", exc)
            continue
        print(field)
        print(json.dumps(rendered, indent=2))


if __name__ == "__main__":
    main()
