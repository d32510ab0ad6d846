"""Configuration management for the Shopify to GMC bundle sync."""

import os
from typing import Optional, Mapping
from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigError


DEFAULT_API_VERSION = "2024-04"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
CONTENT_API_BASE = "https://shoppingcontent.googleapis.com/content/v2.1/"

_TRUTHY = {"1", "true", "yes", "on"}


class ShopifyConfig(BaseModel):
    """Shopify Admin API configuration."""
    store_domain: str = Field(..., description="Shop domain (e.g., 'mystore.myshopify.com')")
    access_token: str = Field(..., min_length=1, description="Shopify Admin API access token")
    api_version: str = Field(DEFAULT_API_VERSION, description="Shopify API version")
    bundle_tag: str = Field(..., description="Tag that marks bundle products")

    @field_validator("store_domain")
    @classmethod
    def _bare_host(cls, value: str) -> str:
        host = value.strip()
        for prefix in ("https://", "http://"):
            if host.startswith(prefix):
                host = host[len(prefix):]
        host = host.rstrip("/")
        if not host:
            raise ValueError("store domain must not be empty")
        return host

    @field_validator("bundle_tag")
    @classmethod
    def _normalize_tag(cls, value: str) -> str:
        tag = value.strip().lower()
        if not tag:
            raise ValueError("bundle tag must not be empty")
        return tag


class GoogleConfig(BaseModel):
    """Google OAuth2 client and Merchant Center configuration."""
    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    merchant_id: str = Field(..., min_length=1, description="Merchant Center account ID")
    token_uri: str = Field(GOOGLE_TOKEN_URI, description="OAuth2 token endpoint")
    content_api_base: str = Field(CONTENT_API_BASE, description="Content API base URL")


class SyncConfig(BaseModel):
    """Main configuration for a sync run."""
    shopify: ShopifyConfig
    google: GoogleConfig
    isolate_update_failures: bool = Field(
        False,
        description="Record a failed post-conflict update as a per-item error instead of aborting",
    )
    enable_metrics: bool = Field(False, description="Export OpenTelemetry metrics to the console")
    log_level: str = Field("INFO", description="Logging level name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "shopify": {
                    "store_domain": "mystore.myshopify.com",
                    "access_token": "shpat_xxxxx",
                    "api_version": DEFAULT_API_VERSION,
                    "bundle_tag": "bundle",
                },
                "google": {
                    "client_id": "xxxxx.apps.googleusercontent.com",
                    "client_secret": "GOCSPX-xxxxx",
                    "refresh_token": "1//xxxxx",
                    "merchant_id": "123456789",
                },
                "isolate_update_failures": False,
            }
        }
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from; defaults to ``os.environ`` after loading ``.env``

        Returns:
            Validated configuration

        Raises:
            ConfigError: When a required variable is missing or invalid
        """
        if environ is None:
            load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        def flag(name: str) -> bool:
            return environ.get(name, "").strip().lower() in _TRUTHY

        data = {
            "shopify": {
                "store_domain": environ.get("SHOPIFY_STORE_DOMAIN"),
                "access_token": environ.get("SHOPIFY_ADMIN_API_TOKEN"),
                "api_version": environ.get("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION,
                "bundle_tag": environ.get("BUNDLE_TAG"),
            },
            "google": {
                "client_id": environ.get("GMC_CLIENT_ID"),
                "client_secret": environ.get("GMC_CLIENT_SECRET"),
                "refresh_token": environ.get("GMC_REFRESH_TOKEN"),
                "merchant_id": environ.get("GMC_MERCHANT_ID"),
            },
            "isolate_update_failures": flag("SYNC_ISOLATE_UPDATE_FAILURES"),
            "enable_metrics": flag("SYNC_ENABLE_METRICS"),
            "log_level": environ.get("LOG_LEVEL") or "INFO",
        }
        try:
            return cls(**data)
        except ValidationError as e:
            problems = ", ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from e


ENV_TEMPLATE = """\
# Shopify Admin API
SHOPIFY_STORE_DOMAIN=your-store.myshopify.com
SHOPIFY_ADMIN_API_TOKEN=shpat_your_access_token_here
SHOPIFY_API_VERSION={api_version}
BUNDLE_TAG=bundle

# Google Merchant Center (OAuth2 refresh-token credentials)
GMC_CLIENT_ID=your-client-id.apps.googleusercontent.com
GMC_CLIENT_SECRET=your-client-secret
GMC_REFRESH_TOKEN=your-refresh-token
GMC_MERCHANT_ID=123456789

# Behaviour
SYNC_ISOLATE_UPDATE_FAILURES=false
SYNC_ENABLE_METRICS=false
LOG_LEVEL=INFO
""".format(api_version=DEFAULT_API_VERSION)
