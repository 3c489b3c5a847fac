from __future__ import annotations

from pathlib import Path

from aws_cdk import CfnOutput, Duration, Expiration, RemovalPolicy, Stack
from aws_cdk import aws_appsync as appsync
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_logs as logs
from constructs import Construct

from src.config import FIELD_LOG_LEVELS
from src.resolvers import templates

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "graphql" / "schema.graphql"


def prefix_from_construct_id(construct_id: str) -> str:
    """``ProductCatalogStack`` -> ``productcatalog``."""
    return construct_id.lower().replace("stack", "")


class CatalogStack(Stack):
    """GraphQL API over the product and variant tables.

    Variants point at their product through ``productId``; the ``product-gsi``
    index on the variant table answers both ``Product.variants`` and
    ``listVariantsByProduct`` with the same query template.

    Exposes:
      - self.api (AppSync GraphQL API)
      - self.product_table / self.variant_table
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        field_log_level: str | None = "ALL",
        api_key_expiry_days: int | None = None,
        xray_enabled: bool = False,
        retain_tables: bool = False,
        **kwargs,
    ) -> None:
        if field_log_level is not None and field_log_level not in FIELD_LOG_LEVELS:
            raise ValueError(
                f"field_log_level must be one of {', '.join(FIELD_LOG_LEVELS)}, got {field_log_level!r}",
            )

        super().__init__(scope, construct_id, **kwargs)

        self.prefix = prefix_from_construct_id(construct_id)

        # === Tables ===
        removal_policy = RemovalPolicy.RETAIN if retain_tables else RemovalPolicy.DESTROY

        self.product_table: dynamodb.Table = dynamodb.Table(
            self,
            "ProductTable",
            table_name=f"{self.prefix}-product",
            partition_key=dynamodb.Attribute(name="id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=removal_policy,
        )

        self.variant_table: dynamodb.Table = dynamodb.Table(
            self,
            "VariantTable",
            table_name=f"{self.prefix}-variant",
            partition_key=dynamodb.Attribute(name="id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=removal_policy,
        )

        self.variant_table.add_global_secondary_index(
            index_name=templates.PRODUCT_INDEX_NAME,
            partition_key=dynamodb.Attribute(
                name=templates.PRODUCT_KEY,
                type=dynamodb.AttributeType.STRING,
            ),
            projection_type=dynamodb.ProjectionType.ALL,
        )

        # === GraphQL API ===
        api_key_config = None
        if api_key_expiry_days is not None:
            api_key_config = appsync.ApiKeyConfig(
                description=f"{self.prefix} API key",
                expires=Expiration.after(Duration.days(api_key_expiry_days)),
            )

        log_config = None
        if field_log_level is not None:
            log_config = appsync.LogConfig(
                field_log_level=appsync.FieldLogLevel[field_log_level],
                exclude_verbose_content=False,
                retention=logs.RetentionDays.THREE_MONTHS,
            )

        self.api = appsync.GraphqlApi(
            self,
            "Api",
            name=f"{self.prefix}-api",
            definition=appsync.Definition.from_file(str(SCHEMA_PATH)),
            authorization_config=appsync.AuthorizationConfig(
                default_authorization=appsync.AuthorizationMode(
                    authorization_type=appsync.AuthorizationType.API_KEY,
                    api_key_config=api_key_config,
                ),
            ),
            log_config=log_config,
            xray_enabled=xray_enabled,
        )

        self.product_data_source = self.api.add_dynamo_db_data_source(
            "ProductDataSource",
            self.product_table,
            description="Product table",
        )
        self.variant_data_source = self.api.add_dynamo_db_data_source(
            "VariantDataSource",
            self.variant_table,
            description="Variant table",
        )

        # The batch write puts into both tables through the product data source
        self.variant_table.grant_read_write_data(self.product_data_source)

        # === Resolvers ===
        def resolver(
            data_source: appsync.BaseDataSource,
            type_name: str,
            field_name: str,
            request: appsync.MappingTemplate,
            response: appsync.MappingTemplate,
        ) -> appsync.Resolver:
            id_ = f"{type_name}{field_name[0].upper()}{field_name[1:]}Resolver"
            return data_source.create_resolver(
                id_,
                type_name=type_name,
                field_name=field_name,
                request_mapping_template=request,
                response_mapping_template=response,
            )

        result_item = appsync.MappingTemplate.dynamo_db_result_item()
        result_list = appsync.MappingTemplate.dynamo_db_result_list()
        put_input = appsync.MappingTemplate.dynamo_db_put_item(
            appsync.PrimaryKey.partition("id").auto(),
            appsync.Values.projecting("input"),
        )

        # Products
        resolver(self.product_data_source, "Query", "listProducts",
                 appsync.MappingTemplate.dynamo_db_scan_table(), result_list)
        resolver(self.product_data_source, "Query", "getProduct",
                 appsync.MappingTemplate.dynamo_db_get_item("id", "id"), result_item)
        resolver(self.product_data_source, "Mutation", "addProduct",
                 put_input, result_item)
        resolver(
            self.product_data_source,
            "Mutation",
            "addProductWithDefaultVariant",
            appsync.MappingTemplate.from_string(
                templates.batch_put_with_default_variant_request(
                    self.product_table.table_name, self.variant_table.table_name),
            ),
            appsync.MappingTemplate.from_string(
                templates.batch_put_with_default_variant_response(
                    self.product_table.table_name, self.variant_table.table_name),
            ),
        )
        resolver(
            self.variant_data_source,
            "Product",
            "variants",
            appsync.MappingTemplate.from_string(templates.variants_of_source_product()),
            result_list,
        )

        # Variants
        resolver(self.variant_data_source, "Query", "listVariants",
                 appsync.MappingTemplate.dynamo_db_scan_table(), result_list)
        resolver(self.variant_data_source, "Query", "getVariant",
                 appsync.MappingTemplate.dynamo_db_get_item("id", "id"), result_item)
        resolver(
            self.variant_data_source,
            "Query",
            "listVariantsByProduct",
            appsync.MappingTemplate.from_string(templates.variants_by_product_argument()),
            result_list,
        )
        resolver(self.variant_data_source, "Mutation", "addVariant",
                 put_input, result_item)
        resolver(
            self.product_data_source,
            "Variant",
            "product",
            appsync.MappingTemplate.from_string(
                templates.get_by_source_field("id", templates.PRODUCT_KEY)),
            result_item,
        )

        # === Outputs ===
        CfnOutput(self, "GraphQLApiUrl", value=self.api.graphql_url,
                  export_name=f"{self.stack_name}-GraphQLApi-Url")
        CfnOutput(self, "GraphQLApiId", value=self.api.api_id,
                  export_name=f"{self.stack_name}-GraphQLApi-Id")
        CfnOutput(self, "GraphQLApiKey", value=self.api.api_key,
                  export_name=f"{self.stack_name}-GraphQLApi-Key")
        CfnOutput(self, "ProductTableName", value=self.product_table.table_name,
                  export_name=f"{self.stack_name}-ProductTable-Name")
        CfnOutput(self, "VariantTableName", value=self.variant_table.table_name,
                  export_name=f"{self.stack_name}-VariantTable-Name")
