import pytest

from shopify_gmc_sync.config import SyncConfig, DEFAULT_API_VERSION
from shopify_gmc_sync.exceptions import ConfigError


def make_env(**overrides):
    env = {
        "SHOPIFY_STORE_DOMAIN": "mystore.myshopify.com",
        "SHOPIFY_ADMIN_API_TOKEN": "shpat_test",
        "BUNDLE_TAG": "bundle",
        "GMC_CLIENT_ID": "client",
        "GMC_CLIENT_SECRET": "secret",
        "GMC_REFRESH_TOKEN": "refresh",
        "GMC_MERCHANT_ID": "123456",
    }
    env.update(overrides)
    return {k: v for k, v in env.items() if v is not None}


def test_from_env_defaults():
    cfg = SyncConfig.from_env(make_env())
    assert cfg.shopify.store_domain == "mystore.myshopify.com"
    assert cfg.shopify.api_version == DEFAULT_API_VERSION
    assert cfg.google.merchant_id == "123456"
    assert cfg.isolate_update_failures is False
    assert cfg.enable_metrics is False
    assert cfg.log_level == "INFO"


def test_bundle_tag_is_normalized():
    cfg = SyncConfig.from_env(make_env(BUNDLE_TAG="  Bundle "))
    assert cfg.shopify.bundle_tag == "bundle"


@pytest.mark.parametrize("tag", ["", "   ", None])
def test_empty_bundle_tag_is_rejected(tag):
    with pytest.raises(ConfigError, match="bundle_tag"):
        SyncConfig.from_env(make_env(BUNDLE_TAG=tag))


def test_missing_credentials_are_reported():
    with pytest.raises(ConfigError) as exc_info:
        SyncConfig.from_env(make_env(GMC_REFRESH_TOKEN=None, SHOPIFY_ADMIN_API_TOKEN=None))
    message = str(exc_info.value)
    assert "google.refresh_token" in message
    assert "shopify.access_token" in message


def test_store_domain_is_reduced_to_host():
    cfg = SyncConfig.from_env(make_env(SHOPIFY_STORE_DOMAIN="https://mystore.myshopify.com/"))
    assert cfg.shopify.store_domain == "mystore.myshopify.com"


def test_flags_and_overrides():
    cfg = SyncConfig.from_env(make_env(
        SYNC_ISOLATE_UPDATE_FAILURES="true",
        SYNC_ENABLE_METRICS="1",
        SHOPIFY_API_VERSION="2025-01",
        LOG_LEVEL="debug",
    ))
    assert cfg.isolate_update_failures is True
    assert cfg.enable_metrics is True
    assert cfg.shopify.api_version == "2025-01"
    assert cfg.log_level == "debug"
