from __future__ import annotations

from aws_cdk import App, Environment
from dotenv import load_dotenv

from src.config import load_settings
from src.stacks.catalog_stack import CatalogStack
from src.stacks.monitoring_stack import MonitoringStack

load_dotenv(".env")


app: App = App()
settings = load_settings()

print("#############################################################")
print(f"Deploying {settings.stack_id} to account {settings.account} in region {settings.region}")

# Adjust to your target account/region (or rely on CDK context/CLI)
env = Environment(account=settings.account, region=settings.region)


catalog = CatalogStack(
    app,
    settings.stack_id,
    env=env,
    field_log_level=settings.field_log_level,
    api_key_expiry_days=settings.api_key_expiry_days,
    xray_enabled=settings.xray_enabled,
    retain_tables=settings.retain_tables,
)


if settings.enable_monitoring:
    MonitoringStack(
        app,
        settings.monitoring_stack_id,
        env=env,
        api=catalog.api,
        tables=[catalog.product_table, catalog.variant_table],
    )


app.synth()
