"""Read-only views of the settings, one per consuming subsystem."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from roadkill_config.application.ports import RoadkillConfiguration
from roadkill_config.config.schema import split_api_keys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticationSettings:
    use_windows_authentication: bool
    ldap_connection_string: str
    ldap_username: str
    ldap_password: str
    admin_role_name: str
    editor_role_name: str


@dataclass(frozen=True)
class StorageSettings:
    connection_string: str
    database_name: str
    attachments_folder: str
    attachments_route_path: str
    use_azure_file_storage: bool
    azure_connection_string: str
    azure_container: str


@dataclass(frozen=True)
class CacheSettings:
    use_object_cache: bool
    use_browser_cache: bool

    @property
    def browser_cache_active(self) -> bool:
        """Browser caching only applies when the object cache is on."""
        return self.use_object_cache and self.use_browser_cache


@dataclass(frozen=True)
class SearchSettings:
    ignore_search_index_errors: bool


@dataclass(frozen=True)
class ApiSettings:
    api_keys: List[str]

    @property
    def enabled(self) -> bool:
        return bool(self.api_keys)


def authentication_settings(config: RoadkillConfiguration) -> AuthenticationSettings:
    return AuthenticationSettings(
        use_windows_authentication=config.get("UseWindowsAuthentication"),
        ldap_connection_string=config.get("LdapConnectionString"),
        ldap_username=config.get("LdapUsername"),
        ldap_password=config.get("LdapPassword"),
        admin_role_name=config.get("AdminRoleName"),
        editor_role_name=config.get("EditorRoleName"),
    )


def storage_settings(config: RoadkillConfiguration) -> StorageSettings:
    """Storage view.  Logs (does not raise) on incomplete Azure settings."""
    view = StorageSettings(
        connection_string=config.get("ConnectionString"),
        database_name=config.get("DatabaseName"),
        attachments_folder=config.get("AttachmentsFolder"),
        attachments_route_path=config.get("AttachmentsRoutePath"),
        use_azure_file_storage=config.get("UseAzureFileStorage"),
        azure_connection_string=config.get("AzureConnectionString"),
        azure_container=config.get("AzureContainer"),
    )
    if view.use_azure_file_storage and not (view.azure_connection_string and view.azure_container):
        logger.warning(
            "UseAzureFileStorage is on but AzureConnectionString or AzureContainer is empty"
        )
    return view


def cache_settings(config: RoadkillConfiguration) -> CacheSettings:
    return CacheSettings(
        use_object_cache=config.get("UseObjectCache"),
        use_browser_cache=config.get("UseBrowserCache"),
    )


def search_settings(config: RoadkillConfiguration) -> SearchSettings:
    return SearchSettings(ignore_search_index_errors=config.get("IgnoreSearchIndexErrors"))


def api_settings(config: RoadkillConfiguration) -> ApiSettings:
    return ApiSettings(api_keys=split_api_keys(config.get("ApiKeys")))
