"""Package types for make:package."""

from __future__ import annotations

from pathlib import Path

from hive.scaffold.stubs import stub_path, studly

AUTHOR_NAME = "PhpHive Team"
AUTHOR_EMAIL = "team@phphive.com"


def vendor_namespace(vendor: str) -> str:
    return "PhpHive" if vendor == "phphive" else studly(vendor)


class PackageType:
    key = ""
    name = ""
    description = ""
    # Relative stub target -> templated target path
    renames: dict[str, str] = {}

    def stub_dir(self) -> Path:
        return stub_path("packages", self.key)

    def variables(self, name: str, description: str | None = None, vendor: str = "phphive") -> dict[str, str]:
        namespace = studly(name)
        return {
            "PACKAGE_NAME": name,
            "PACKAGE_NAMESPACE": namespace,
            "COMPOSER_PACKAGE_NAME": f"{vendor}/{name}",
            "NPM_PACKAGE_NAME": f"@{vendor}/{name}",
            "DESCRIPTION": description or f"{self.name} package: {name}",
            "AUTHOR_NAME": AUTHOR_NAME,
            "AUTHOR_EMAIL": AUTHOR_EMAIL,
            "NAMESPACE": f"{vendor_namespace(vendor)}\\{namespace}",
        }

    def post_create_commands(self) -> list[str]:
        return ["composer install --prefer-dist --no-interaction"]


class LaravelPackageType(PackageType):
    key = "laravel"
    name = "Laravel"
    description = "Laravel package with a service provider"
    renames = {"src/Providers/ServiceProvider.php": "src/Providers/{{PACKAGE_NAMESPACE}}ServiceProvider.php"}


class SymfonyPackageType(PackageType):
    key = "symfony"
    name = "Symfony"
    description = "Symfony bundle"
    renames = {"src/Bundle.php": "src/{{PACKAGE_NAMESPACE}}Bundle.php"}


class MagentoPackageType(PackageType):
    key = "magento"
    name = "Magento"
    description = "Magento 2 module"

    def variables(self, name, description=None, vendor="phphive"):
        variables = super().variables(name, description, vendor)
        variables["MODULE_NAME"] = f"{vendor_namespace(vendor)}_{variables['PACKAGE_NAMESPACE']}"
        return variables


class SkeletonPackageType(PackageType):
    key = "skeleton"
    name = "Skeleton"
    description = "Framework-agnostic PHP library"
    renames = {
        "src/Package.php": "src/{{PACKAGE_NAMESPACE}}.php",
        "tests/PackageTest.php": "tests/{{PACKAGE_NAMESPACE}}Test.php",
    }


PACKAGE_TYPES: dict[str, PackageType] = {
    t.key: t for t in (LaravelPackageType(), SymfonyPackageType(), MagentoPackageType(), SkeletonPackageType())
}


def get_package_type(key: str) -> PackageType:
    if key not in PACKAGE_TYPES:
        raise KeyError(f"Unknown package type '{key}'. Available: {', '.join(PACKAGE_TYPES)}")
    return PACKAGE_TYPES[key]
