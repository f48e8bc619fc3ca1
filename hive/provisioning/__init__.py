"""Infrastructure provisioning: databases, caches, search, storage, queues."""

from hive.provisioning.backends import BACKENDS, CATEGORIES, Backend, ConnectionConfig, get_backend
from hive.provisioning.provisioner import Provisioner, generate_secret
from hive.provisioning.setup import merge_config, merge_env, setup_infrastructure

__all__ = [
    "BACKENDS",
    "CATEGORIES",
    "Backend",
    "ConnectionConfig",
    "Provisioner",
    "generate_secret",
    "get_backend",
    "merge_config",
    "merge_env",
    "setup_infrastructure",
]
