"""
hive/provisioning/backends.py - Infrastructure backend tables

Every backend hive can provision is described by data: its connection
fields, compose stub, local probe and install guidance. The provisioner
walks the same decision tree for all of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

from hive.provisioning import probes
from hive.utils.compose import normalize_name

CATEGORIES = ("database", "cache", "search", "storage", "queue")

# Env var that selects the driver for each category
CATEGORY_DRIVER_ENV = {
    "database": "DB_CONNECTION",
    "cache": "CACHE_STORE",
    "search": "SCOUT_DRIVER",
    "storage": "FILESYSTEM_DISK",
    "queue": "QUEUE_CONNECTION",
}


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Field:
    """A single connection setting of a backend."""

    key: str
    label: str
    env: str | None = None
    default: str | Callable[[str], str] = ""
    secret: bool = False
    generate: bool = False  # random value when provisioned with Docker
    docker_prompt: bool = False  # asked in the Docker flow as well
    port: bool = False

    def default_for(self, app_name: str) -> str:
        if callable(self.default):
            return self.default(app_name)
        return self.default


@dataclass(frozen=True)
class Backend:
    """Static description of one provisionable service."""

    key: str
    label: str
    category: str
    driver: str
    fields: tuple[Field, ...]
    kind: str = "container"  # "container", "managed" or "embedded"
    service: str | None = None
    stub: str | None = None
    docker_host: str = "localhost"
    admin_stub: str | None = None
    admin_label: str | None = None
    probe: Callable[[Mapping[str, str]], bool] | None = None
    post_start: Callable[[Path, Mapping[str, str]], bool] | None = None
    extra_env: Callable[[Mapping[str, str]], dict[str, str]] | None = None
    creates_database: bool = False
    install: dict[str, tuple[str, ...]] = field(default_factory=dict)
    docs_url: str = ""
    config_prefix: str | None = None

    @property
    def uses_docker(self) -> bool:
        return self.kind == "container"

    @property
    def stub_prefix(self) -> str:
        return self.key.upper()

    def defaults(self, app_name: str) -> dict[str, str]:
        return {f.key: f.default_for(app_name) for f in self.fields}


@dataclass
class ConnectionConfig:
    """The connection details a provisioning run hands back."""

    backend: Backend
    category: str
    values: dict[str, str]
    using_docker: bool = False

    def to_env(self) -> dict[str, str]:
        """Environment variables for the app's .env file."""
        env: dict[str, str] = {}
        driver_var = CATEGORY_DRIVER_ENV.get(self.category)
        if driver_var:
            env[driver_var] = self.backend.driver
        for f in self.backend.fields:
            if f.env and f.key in self.values:
                env[f.env] = self.values[f.key]
        if self.backend.extra_env:
            env.update(self.backend.extra_env(self.values))
        return env

    def to_dict(self) -> dict[str, Any]:
        prefix = self.backend.config_prefix or self.backend.key
        data: dict[str, Any] = {f"{self.category}_backend": self.backend.key}
        for key, value in self.values.items():
            data[f"{prefix}_{key}"] = value
        data["using_docker"] = self.using_docker
        return data


# ---------------------------------------------------------------------------
# Shared field builders
# ---------------------------------------------------------------------------

def _db_name(app_name: str) -> str:
    return normalize_name(app_name, "_")


def _port(env: str | None, default: int, label: str = "Port", docker_prompt: bool = True) -> Field:
    return Field("port", label, env=env, default=str(default), docker_prompt=docker_prompt, port=True)


def _database_fields(port: int) -> tuple[Field, ...]:
    return (
        Field("host", "Database host", env="DB_HOST", default="127.0.0.1"),
        Field("port", "Database port", env="DB_PORT", default=str(port), docker_prompt=True, port=True),
        Field("name", "Database name", env="DB_DATABASE", default=_db_name, docker_prompt=True),
        Field("user", "Database user", env="DB_USERNAME", default=lambda n: f"{_db_name(n)}_user", docker_prompt=True),
        Field("password", "Database password", env="DB_PASSWORD", secret=True, generate=True),
    )


def _aws_credentials() -> tuple[Field, ...]:
    return (
        Field("access_key", "AWS access key ID", env="AWS_ACCESS_KEY_ID"),
        Field("secret_key", "AWS secret access key", env="AWS_SECRET_ACCESS_KEY", secret=True),
    )


# ---------------------------------------------------------------------------
# Backend table
# ---------------------------------------------------------------------------

MYSQL = Backend(
    key="mysql",
    label="MySQL",
    category="database",
    driver="mysql",
    fields=_database_fields(3306)
    + (Field("root_password", "Root password", secret=True, generate=True),),
    service="mysql",
    stub="mysql.yml",
    admin_stub="phpmyadmin.yml",
    admin_label="phpMyAdmin",
    probe=probes.mysql,
    creates_database=True,
    install={
        "macos": ("brew install mysql", "brew services start mysql"),
        "linux": ("sudo apt-get install mysql-server", "sudo systemctl start mysql"),
        "windows": ("Download the MySQL Installer from https://dev.mysql.com/downloads/installer/",),
    },
    docs_url="https://dev.mysql.com/doc/refman/8.0/en/installing.html",
    config_prefix="db",
)

MARIADB = Backend(
    key="mariadb",
    label="MariaDB",
    category="database",
    driver="mariadb",
    fields=_database_fields(3306)
    + (Field("root_password", "Root password", secret=True, generate=True),),
    service="mariadb",
    stub="mariadb.yml",
    admin_stub="phpmyadmin.yml",
    admin_label="phpMyAdmin",
    probe=probes.mysql,
    creates_database=True,
    install={
        "macos": ("brew install mariadb", "brew services start mariadb"),
        "linux": ("sudo apt-get install mariadb-server", "sudo systemctl start mariadb"),
        "windows": ("Download the MariaDB MSI from https://mariadb.org/download/",),
    },
    docs_url="https://mariadb.com/kb/en/getting-installing-and-upgrading-mariadb/",
    config_prefix="db",
)

POSTGRESQL = Backend(
    key="postgresql",
    label="PostgreSQL",
    category="database",
    driver="pgsql",
    fields=_database_fields(5432),
    service="postgres",
    stub="postgresql.yml",
    admin_stub="adminer.yml",
    admin_label="Adminer",
    probe=probes.postgres,
    install={
        "macos": ("brew install postgresql@16", "brew services start postgresql@16"),
        "linux": ("sudo apt-get install postgresql", "sudo systemctl start postgresql"),
        "windows": ("Download the installer from https://www.postgresql.org/download/windows/",),
    },
    docs_url="https://www.postgresql.org/download/",
    config_prefix="db",
)

SQLITE = Backend(
    key="sqlite",
    label="SQLite",
    category="database",
    driver="sqlite",
    kind="embedded",
    fields=(Field("name", "Database file", env="DB_DATABASE", default="database/database.sqlite"),),
    config_prefix="db",
)

REDIS = Backend(
    key="redis",
    label="Redis",
    category="cache",
    driver="redis",
    fields=(
        Field("host", "Redis host", env="REDIS_HOST", default="127.0.0.1"),
        _port("REDIS_PORT", 6379, "Redis port"),
        Field("password", "Redis password", env="REDIS_PASSWORD", secret=True, generate=True),
    ),
    service="redis",
    stub="redis.yml",
    probe=probes.redis,
    install={
        "macos": ("brew install redis", "brew services start redis"),
        "linux": ("sudo apt-get install redis-server", "sudo systemctl start redis-server"),
        "windows": ("Use WSL 2 and follow the Linux instructions, or Memurai (https://www.memurai.com/)",),
    },
    docs_url="https://redis.io/docs/latest/operate/oss_and_stack/install/",
)

MEILISEARCH = Backend(
    key="meilisearch",
    label="Meilisearch",
    category="search",
    driver="meilisearch",
    fields=(
        Field("host", "Meilisearch host", default="http://localhost"),
        _port(None, 7700, "Meilisearch port"),
        Field("master_key", "Master key", env="MEILISEARCH_KEY", secret=True, generate=True),
    ),
    service="meilisearch",
    stub="meilisearch.yml",
    docker_host="http://localhost",
    probe=probes.http("/health", 7700),
    extra_env=lambda v: {"MEILISEARCH_HOST": f"{v['host']}:{v['port']}"},
    install={
        "macos": ("brew install meilisearch", "meilisearch --master-key <key>"),
        "linux": ("curl -L https://install.meilisearch.com | sh", "./meilisearch --master-key <key>"),
        "windows": ("Download the binary from https://github.com/meilisearch/meilisearch/releases",),
    },
    docs_url="https://www.meilisearch.com/docs/learn/getting_started/installation",
)

ELASTICSEARCH = Backend(
    key="elasticsearch",
    label="Elasticsearch",
    category="search",
    driver="elasticsearch",
    fields=(
        Field("host", "Elasticsearch host", env="ELASTICSEARCH_HOST", default="127.0.0.1"),
        _port("ELASTICSEARCH_PORT", 9200, "Elasticsearch port"),
        Field("user", "Elasticsearch user", env="ELASTICSEARCH_USER", default="elastic"),
        Field("password", "Elasticsearch password", env="ELASTICSEARCH_PASSWORD", secret=True, generate=True),
    ),
    service="elasticsearch",
    stub="elasticsearch.yml",
    probe=probes.http("/_cluster/health", 9200),
    install={
        "macos": ("brew tap elastic/tap", "brew install elastic/tap/elasticsearch-full"),
        "linux": ("Follow https://www.elastic.co/guide/en/elasticsearch/reference/current/deb.html",),
        "windows": ("Download the zip from https://www.elastic.co/downloads/elasticsearch",),
    },
    docs_url="https://www.elastic.co/guide/en/elasticsearch/reference/current/install-elasticsearch.html",
)

OPENSEARCH = Backend(
    key="opensearch",
    label="Amazon OpenSearch",
    category="search",
    driver="opensearch",
    kind="managed",
    fields=(
        Field("endpoint", "OpenSearch endpoint", env="OPENSEARCH_ENDPOINT"),
        Field("region", "AWS region", env="OPENSEARCH_REGION", default="us-east-1"),
        Field("index_prefix", "Index prefix", env="OPENSEARCH_INDEX_PREFIX", default=_db_name),
    ),
    docs_url="https://docs.aws.amazon.com/opensearch-service/latest/developerguide/createupdatedomains.html",
)

MINIO = Backend(
    key="minio",
    label="MinIO",
    category="storage",
    driver="s3",
    fields=(
        Field("host", "MinIO host", default="127.0.0.1"),
        _port(None, 9000, "MinIO API port"),
        Field("console_port", "MinIO console port", default="9001", port=True),
        Field("access_key", "Access key", env="AWS_ACCESS_KEY_ID", default="minioadmin", docker_prompt=True),
        Field("secret_key", "Secret key", env="AWS_SECRET_ACCESS_KEY", default="minioadmin", secret=True, generate=True),
        Field("bucket", "Bucket name", env="AWS_BUCKET", default=lambda n: normalize_name(n), docker_prompt=True),
    ),
    service="minio",
    stub="minio.yml",
    probe=probes.http("/minio/health/live", 9000),
    post_start=probes.create_minio_bucket,
    extra_env=lambda v: {
        "AWS_ENDPOINT": f"http://{v['host']}:{v['port']}",
        "AWS_DEFAULT_REGION": "us-east-1",
        "AWS_USE_PATH_STYLE_ENDPOINT": "true",
    },
    install={
        "macos": ("brew install minio/stable/minio", "minio server ~/minio-data --console-address :9001"),
        "linux": ("Download https://dl.min.io/server/minio/release/linux-amd64/minio", "minio server ~/minio-data"),
        "windows": ("Download https://dl.min.io/server/minio/release/windows-amd64/minio.exe",),
    },
    docs_url="https://min.io/docs/minio/linux/index.html",
)

S3 = Backend(
    key="s3",
    label="Amazon S3",
    category="storage",
    driver="s3",
    kind="managed",
    fields=(
        Field("region", "AWS region", env="AWS_DEFAULT_REGION", default="us-east-1"),
        Field("bucket", "Bucket name", env="AWS_BUCKET", default=lambda n: normalize_name(n)),
    )
    + _aws_credentials(),
    docs_url="https://docs.aws.amazon.com/AmazonS3/latest/userguide/create-bucket-overview.html",
)

RABBITMQ = Backend(
    key="rabbitmq",
    label="RabbitMQ",
    category="queue",
    driver="rabbitmq",
    fields=(
        Field("host", "RabbitMQ host", env="RABBITMQ_HOST", default="127.0.0.1"),
        _port("RABBITMQ_PORT", 5672, "RabbitMQ port"),
        Field("user", "RabbitMQ user", env="RABBITMQ_USER", default=_db_name, docker_prompt=True),
        Field("password", "RabbitMQ password", env="RABBITMQ_PASSWORD", secret=True, generate=True),
        Field("vhost", "Virtual host", env="RABBITMQ_VHOST", default="/"),
        Field("management_port", "Management UI port", default="15672", port=True),
    ),
    service="rabbitmq",
    stub="rabbitmq.yml",
    probe=probes.tcp(5672),
    install={
        "macos": ("brew install rabbitmq", "brew services start rabbitmq"),
        "linux": ("sudo apt-get install rabbitmq-server", "sudo systemctl start rabbitmq-server"),
        "windows": ("Download the installer from https://www.rabbitmq.com/docs/install-windows",),
    },
    docs_url="https://www.rabbitmq.com/docs/download",
    config_prefix="queue",
)

SQS = Backend(
    key="sqs",
    label="Amazon SQS",
    category="queue",
    driver="sqs",
    kind="managed",
    fields=(
        Field("region", "AWS region", env="AWS_DEFAULT_REGION", default="us-east-1"),
        Field("prefix", "Queue URL prefix", env="SQS_PREFIX", default="https://sqs.us-east-1.amazonaws.com/your-account-id"),
        Field("queue", "Queue name", env="SQS_QUEUE", default="default"),
    )
    + _aws_credentials(),
    docs_url="https://docs.aws.amazon.com/AWSSimpleQueueService/latest/SQSDeveloperGuide/",
    config_prefix="queue",
)

BACKENDS: dict[str, Backend] = {
    b.key: b
    for b in (MYSQL, MARIADB, POSTGRESQL, SQLITE, REDIS, MEILISEARCH, ELASTICSEARCH, OPENSEARCH, MINIO, S3, RABBITMQ, SQS)
}

# Backends offered per category, in menu order
CATEGORY_BACKENDS: dict[str, tuple[str, ...]] = {
    "database": ("mysql", "postgresql", "mariadb", "sqlite"),
    "cache": ("redis",),
    "search": ("meilisearch", "elasticsearch", "opensearch"),
    "storage": ("minio", "s3"),
    "queue": ("redis", "rabbitmq", "sqs"),
}


def get_backend(key: str) -> Backend:
    """Look up a backend by key. Raises KeyError for unknown keys."""
    if key not in BACKENDS:
        raise KeyError(f"Unknown backend '{key}'. Available: {', '.join(BACKENDS)}")
    return BACKENDS[key]
