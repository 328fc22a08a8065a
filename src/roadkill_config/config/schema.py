"""Configuration schema: every setting a Roadkill wiki reads from its backing store.

Settings are identified by their *store key*, the PascalCase name used in the
JSON document or database row (``UseObjectCache``).  Each field also has a
snake_case attribute (``use_object_cache``); ``get``/``set`` accept either.

Required settings have no declared default.  When the backing store omits one
it keeps its zero value (``""`` or ``False``) and shows up in
``missing_required()``; the host decides what to do about it (see
``application/startup.py``).

Optional settings are modelled as ``Optional[...]`` with ``None`` meaning
"absent".  Their declared defaults live in ``OPTIONAL_DEFAULTS`` and are
filled in by ``apply_defaults()``, which ``from_store()`` runs once after
deserialization.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from roadkill_config.domain.errors import UnknownSettingError

SettingValue = Union[str, bool]

OPTIONAL_DEFAULTS: Dict[str, SettingValue] = {
    "IgnoreSearchIndexErrors": True,
    "AttachmentsFolder": "~/App_Data/Attachments",
    "AttachmentsRoutePath": "Attachments",
    "DatabaseName": "SqlServer2008",
    "IsPublicSite": True,
    "LdapConnectionString": "",
    "LdapUsername": "",
    "LdapPassword": "",
    "UseHtmlWhiteList": True,
    "UseObjectCache": True,
    "UseBrowserCache": True,
    "UserServiceType": "",
    # Historically declared as "" although the setting is boolean.
    "UseAzureFileStorage": False,
    "AzureConnectionString": "",
    "AzureContainer": "",
}

REQUIRED_KEYS = (
    "AdminRoleName",
    "EditorRoleName",
    "ApiKeys",
    "ConnectionString",
    "Installed",
    "UseWindowsAuthentication",
)

# Values hidden by default when settings are displayed.
SECRET_KEYS = frozenset({"ApiKeys", "ConnectionString", "LdapPassword", "AzureConnectionString"})


class RoadkillSettings(BaseModel):
    """The active settings of one running wiki.

    Built once at startup (``from_store``), read by the auth, storage, cache,
    search and REST API subsystems, and changed only through ``set`` followed
    by an explicit save and re-load.  ``set`` performs no validation.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # -- required -----------------------------------------------------------
    admin_role_name: str = Field("", alias="AdminRoleName", description="Name of the administrator role.")
    editor_role_name: str = Field("", alias="EditorRoleName", description="Name of the editor role.")
    api_keys: str = Field(
        "",
        alias="ApiKeys",
        description="Comma-separated keys for the REST API. Empty disables the API.",
    )
    connection_string: str = Field("", alias="ConnectionString", description="Database connection string.")
    installed: bool = Field(
        False,
        alias="Installed",
        description="Whether setup has completed. False routes the host to the setup workflow.",
    )
    use_windows_authentication: bool = Field(
        False,
        alias="UseWindowsAuthentication",
        description="Use Windows/Active Directory authentication instead of forms.",
    )

    # -- optional (None until apply_defaults) ---------------------------------
    ignore_search_index_errors: Optional[bool] = Field(
        None,
        alias="IgnoreSearchIndexErrors",
        description="Swallow search index update errors instead of raising them.",
    )
    attachments_folder: Optional[str] = Field(
        None,
        alias="AttachmentsFolder",
        description="Attachments folder; a leading '~/' is the application root.",
    )
    attachments_route_path: Optional[str] = Field(
        None, alias="AttachmentsRoutePath", description="URL path attachments are served under."
    )
    database_name: Optional[str] = Field(None, alias="DatabaseName", description="Database provider name.")
    is_public_site: Optional[bool] = Field(
        None, alias="IsPublicSite", description="All pages are visible to anonymous users."
    )
    ldap_connection_string: Optional[str] = Field(
        None, alias="LdapConnectionString", description="e.g. LDAP://mydc01.company.internal"
    )
    ldap_username: Optional[str] = Field(None, alias="LdapUsername", description="Account used to bind to the directory.")
    ldap_password: Optional[str] = Field(None, alias="LdapPassword", description="Password for LdapUsername.")
    use_html_white_list: Optional[bool] = Field(
        None,
        alias="UseHtmlWhiteList",
        description="Strip all HTML tags from markup except those in the whitelist.",
    )
    use_object_cache: Optional[bool] = Field(None, alias="UseObjectCache", description="Server-side page object caching.")
    use_browser_cache: Optional[bool] = Field(
        None, alias="UseBrowserCache", description="Browser caching of page content (needs UseObjectCache)."
    )
    user_service_type: Optional[str] = Field(
        None,
        alias="UserServiceType",
        description="Dotted name of a custom user service. Empty selects the built-in one.",
    )
    use_azure_file_storage: Optional[bool] = Field(
        None, alias="UseAzureFileStorage", description="Store attachments in Azure blob storage."
    )
    azure_connection_string: Optional[str] = Field(
        None, alias="AzureConnectionString", description="Azure storage account connection string."
    )
    azure_container: Optional[str] = Field(None, alias="AzureContainer", description="Azure blob container name.")

    @field_validator("admin_role_name", "editor_role_name", "api_keys", "connection_string", mode="before")
    @classmethod
    def _null_string_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("installed", "use_windows_authentication", mode="before")
    @classmethod
    def _null_bool_is_false(cls, v: Any) -> Any:
        return False if v is None else v

    # ------------------------------------------------------------------
    # Construction / serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_store(cls, values: Mapping[str, Any]) -> "RoadkillSettings":
        """Deserialize store values and apply optional defaults once.

        Unrecognized keys are ignored.  Raises ``pydantic.ValidationError``
        when a value cannot be coerced to its field type.
        """
        return cls.model_validate(dict(values)).apply_defaults()

    def to_store(self) -> Dict[str, SettingValue]:
        """Settings keyed by store key, with optional defaults resolved.

        Required settings that were never provided are left out, so they are
        still reported by ``missing_required()`` after a save and re-load.
        """
        missing = set(self.missing_required())
        return {key: self.get(key) for key in SETTING_KEYS if key not in missing}

    # ------------------------------------------------------------------
    # Capability interface
    # ------------------------------------------------------------------

    def get(self, name: str) -> Any:
        """Current value of *name*; optional settings never return ``None``."""
        key = resolve_setting(name)
        value = getattr(self, ATTR_BY_KEY[key])
        if value is None and key in OPTIONAL_DEFAULTS:
            return OPTIONAL_DEFAULTS[key]
        return value

    def set(self, name: str, value: Any) -> None:
        """Assign *value* in memory. Not validated and not persisted."""
        setattr(self, ATTR_BY_KEY[resolve_setting(name)], value)

    def apply_defaults(self) -> "RoadkillSettings":
        """Fill every absent optional setting from ``OPTIONAL_DEFAULTS``.

        Idempotent: values that are already set are left alone.
        """
        for key, default in OPTIONAL_DEFAULTS.items():
            attr = ATTR_BY_KEY[key]
            if getattr(self, attr) is None:
                # Bypass __setattr__ so model_fields_set keeps reflecting only
                # what the backing store (or set()) provided.
                self.__dict__[attr] = default
        return self

    def missing_required(self) -> List[str]:
        """Store keys of required settings never provided by the store or ``set``."""
        provided = self.model_fields_set
        return [key for key in REQUIRED_KEYS if ATTR_BY_KEY[key] not in provided]

    def source(self, name: str) -> str:
        """Where the value of *name* comes from: ``explicit``, ``default`` or ``missing``."""
        key = resolve_setting(name)
        if ATTR_BY_KEY[key] in self.model_fields_set:
            return "explicit"
        return "default" if key in OPTIONAL_DEFAULTS else "missing"

    # ------------------------------------------------------------------
    # Derived accessors
    # ------------------------------------------------------------------

    @property
    def api_key_list(self) -> List[str]:
        """``ApiKeys`` split on commas, blanks dropped."""
        return split_api_keys(self.api_keys)

    @property
    def rest_api_enabled(self) -> bool:
        return bool(self.api_key_list)

    def is_valid_api_key(self, key: Optional[str]) -> bool:
        """True if *key* is one of the configured REST API keys."""
        if not key or not key.strip():
            return False
        return key.strip() in self.api_key_list

    def attachments_directory(self, app_root: Union[str, Path]) -> Path:
        """Resolve ``AttachmentsFolder`` against the application root.

        ``~/`` (or ``~\\``) maps to *app_root*; absolute paths are returned
        as-is; other relative paths are joined to *app_root*.
        """
        folder = str(self.get("AttachmentsFolder")).replace("\\", "/")
        root = Path(app_root)
        if folder == "~" or folder.startswith("~/"):
            return root / folder[2:]
        path = Path(folder)
        if path.is_absolute():
            return path
        return root / path


KEY_BY_ATTR: Dict[str, str] = {
    name: info.alias or name for name, info in RoadkillSettings.model_fields.items()
}
ATTR_BY_KEY: Dict[str, str] = {key: attr for attr, key in KEY_BY_ATTR.items()}
SETTING_KEYS = tuple(KEY_BY_ATTR.values())


def split_api_keys(value: Optional[str]) -> List[str]:
    """Comma-separated API keys as a list, blanks dropped."""
    return [k.strip() for k in (value or "").split(",") if k.strip()]


def resolve_setting(name: str) -> str:
    """Return the store key for *name* (a store key or an attribute name)."""
    if name in ATTR_BY_KEY:
        return name
    if name in KEY_BY_ATTR:
        return KEY_BY_ATTR[name]
    raise UnknownSettingError(name)


def is_boolean_setting(name: str) -> bool:
    key = resolve_setting(name)
    if key in OPTIONAL_DEFAULTS:
        return isinstance(OPTIONAL_DEFAULTS[key], bool)
    return key in ("Installed", "UseWindowsAuthentication")


def parse_setting_value(name: str, raw: str) -> SettingValue:
    """Coerce a textual value (CLI argument, env var) to the type of *name*.

    Booleans accept the usual spellings (``true``/``false``, ``yes``/``no``,
    ``1``/``0``, ``on``/``off``).  Raises ``pydantic.ValidationError``
    (a ``ValueError``) for values that do not fit.
    """
    if is_boolean_setting(name):
        return TypeAdapter(bool).validate_python(raw.strip())
    return raw
