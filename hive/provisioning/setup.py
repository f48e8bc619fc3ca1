"""Walk an app type's infrastructure needs in a fixed order."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hive.provisioning.backends import REDIS, ConnectionConfig
from hive.provisioning.provisioner import Provisioner

if TYPE_CHECKING:
    from hive.scaffold.app_types import AppType


def setup_infrastructure(provisioner: Provisioner, app_type: AppType) -> list[ConnectionConfig]:
    """Provision database, cache, queue, search and storage as *app_type* needs.

    Returns one ConnectionConfig per configured category, in that order.
    """
    prompts = provisioner.prompts
    configs: list[ConnectionConfig] = []
    cache: ConnectionConfig | None = None

    if app_type.databases:
        backend = provisioner.select_backend("database", app_type.databases)
        configs.append(provisioner.provision("database", backend.key))

    if app_type.supports_cache and prompts.confirm("Use Redis for cache and sessions?", True):
        cache = provisioner.provision("cache", REDIS.key)
        configs.append(cache)

    if app_type.supports_queue and prompts.confirm("Configure a queue backend?", False):
        backend = provisioner.select_backend("queue")
        if backend.key == REDIS.key and cache is not None:
            # Reuse the Redis instance already provisioned for the cache
            configs.append(ConnectionConfig(REDIS, "queue", dict(cache.values), cache.using_docker))
        else:
            configs.append(provisioner.provision("queue", backend.key))

    if app_type.supports_search:
        choice = prompts.select(
            "Which search engine?",
            {
                "none": "None",
                "meilisearch": "Meilisearch",
                "elasticsearch": "Elasticsearch",
                "opensearch": "Amazon OpenSearch",
            },
            default="none",
        )
        if choice != "none":
            configs.append(provisioner.provision("search", choice))

    if app_type.supports_storage and prompts.confirm("Configure object storage (MinIO/S3)?", False):
        backend = provisioner.select_backend("storage")
        configs.append(provisioner.provision("storage", backend.key))

    return configs


def merge_env(configs: list[ConnectionConfig]) -> dict[str, str]:
    """Combine the .env values of several configs; later ones win."""
    env: dict[str, str] = {}
    for config in configs:
        env.update(config.to_env())
    return env


def merge_config(configs: list[ConnectionConfig]) -> dict[str, object]:
    data: dict[str, object] = {}
    for config in configs:
        data.update(config.to_dict())
    data["using_docker"] = any(c.using_docker for c in configs)
    return data
