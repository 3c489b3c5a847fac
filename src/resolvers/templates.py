"""VTL mapping templates for the catalog resolvers.

Scan, GetItem-by-argument and PutItem come from the CDK ``MappingTemplate``
helpers. The templates here cover what those helpers cannot express: queries
on the product index, lookups keyed from the parent object and the
product + default variant batch write.
"""
from __future__ import annotations

QUERY_VERSION = "2017-02-28"
BATCH_VERSION = "2018-05-29"

# Global secondary index on the variant table; must match the stack definition
PRODUCT_INDEX_NAME = "product-gsi"
PRODUCT_KEY = "productId"

DEFAULT_VARIANT_NAME = "default"


def query_by_index(index_name: str, key_name: str, value_ref: str) -> str:
    """Query ``index_name`` for items whose ``key_name`` equals ``value_ref``.

    ``value_ref`` is a VTL reference such as ``$ctx.args.productId``.
    """
    return f"""{{
  "version": "{QUERY_VERSION}",
  "operation": "Query",
  "index": "{index_name}",
  "query": {{
    "expression": "{key_name} = :{key_name}",
    "expressionValues": {{
      ":{key_name}": {{
        "S": $util.toJson({value_ref})
      }}
    }}
  }}
}}"""


def variants_by_product_argument() -> str:
    return query_by_index(PRODUCT_INDEX_NAME, PRODUCT_KEY, f"$ctx.args.{PRODUCT_KEY}")


def variants_of_source_product() -> str:
    return query_by_index(PRODUCT_INDEX_NAME, PRODUCT_KEY, "$ctx.source.id")


def get_by_source_field(key_name: str, source_field: str) -> str:
    """GetItem keyed by a field of the parent object (``$ctx.source``)."""
    return f"""{{
  "version": "{QUERY_VERSION}",
  "operation": "GetItem",
  "key": {{
    "{key_name}": $util.dynamodb.toDynamoDBJson($ctx.source.{source_field})
  }}
}}"""


def batch_put_with_default_variant_request(product_table: str, variant_table: str) -> str:
    """BatchPutItem writing a new product and its default variant.

    Table names may be CDK tokens; they are resolved at synth time.
    """
    return f"""#set($productId = $util.autoId())
#set($product = {{}})
$util.qr($product.putAll($ctx.args.input))
$util.qr($product.put("id", $productId))
#set($variant = {{}})
$util.qr($variant.put("id", $util.autoId()))
$util.qr($variant.put("{PRODUCT_KEY}", $productId))
$util.qr($variant.put("name", "{DEFAULT_VARIANT_NAME}"))
#if(!$util.isNull($product.price))
  $util.qr($variant.put("price", $product.price))
#end
{{
  "version": "{BATCH_VERSION}",
  "operation": "BatchPutItem",
  "tables": {{
    "{product_table}": [$util.dynamodb.toMapValuesJson($product)],
    "{variant_table}": [$util.dynamodb.toMapValuesJson($variant)]
  }}
}}"""


def batch_put_with_default_variant_response(product_table: str, variant_table: str) -> str:
    """Return the written product, failing when either put was left unprocessed."""
    return f"""#if($ctx.error)
  $util.error($ctx.error.message, $ctx.error.type)
#end
#set($unprocessed = $util.defaultIfNull($ctx.result.unprocessedItems, {{}}))
#foreach($table in ["{product_table}", "{variant_table}"])
  #set($pending = $unprocessed.get($table))
  #if(!$util.isNull($pending) && !$pending.isEmpty())
    $util.error("Batch write left unprocessed items in $table", "BatchPutItemError")
  #end
#end
$util.toJson($ctx.result.data.get("{product_table}")[0])"""
