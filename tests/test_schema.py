"""Tests for config/schema.py: defaults, get/set, apply_defaults, derived accessors."""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from roadkill_config.config.schema import (
    OPTIONAL_DEFAULTS,
    REQUIRED_KEYS,
    SETTING_KEYS,
    RoadkillSettings,
    is_boolean_setting,
    parse_setting_value,
    resolve_setting,
)
from roadkill_config.domain.errors import UnknownSettingError


def _other_value(default):
    if isinstance(default, bool):
        return not default
    return (default + "-custom") if default else "custom"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("key", sorted(OPTIONAL_DEFAULTS))
def test_omitted_optional_setting_resolves_to_default(key, store_values):
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.get(key) == OPTIONAL_DEFAULTS[key]
    assert cfg.get(key) is not None


@pytest.mark.parametrize("key", sorted(OPTIONAL_DEFAULTS))
def test_explicit_optional_setting_is_not_overridden(key, store_values):
    value = _other_value(OPTIONAL_DEFAULTS[key])
    cfg = RoadkillSettings.from_store({**store_values, key: value})
    assert cfg.get(key) == value


def test_scenario_all_optional_omitted(store_values):
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.get("UseObjectCache") is True
    assert cfg.get("DatabaseName") == "SqlServer2008"
    assert cfg.get("AttachmentsFolder") == "~/App_Data/Attachments"
    assert cfg.missing_required() == []


def test_html_whitelist_explicit_false(store_values):
    store_values["UseHtmlWhiteList"] = False
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.get("UseHtmlWhiteList") is False


def test_azure_file_storage_defaults_to_boolean_false():
    cfg = RoadkillSettings.from_store({})
    assert cfg.get("UseAzureFileStorage") is False
    assert cfg.get("AzureConnectionString") == ""
    assert cfg.get("AzureContainer") == ""


def test_apply_defaults_is_idempotent(store_values):
    store_values["UseBrowserCache"] = False
    cfg = RoadkillSettings.from_store(store_values)
    once = cfg.to_store()
    cfg.apply_defaults()
    assert cfg.to_store() == once
    assert cfg.get("UseBrowserCache") is False


def test_apply_defaults_keeps_values_set_before_it():
    cfg = RoadkillSettings()
    cfg.set("DatabaseName", "Postgres")
    cfg.apply_defaults()
    assert cfg.get("DatabaseName") == "Postgres"
    assert cfg.database_name == "Postgres"
    assert cfg.use_object_cache is True


def test_get_substitutes_default_without_apply_defaults():
    cfg = RoadkillSettings.model_validate({})
    assert cfg.is_public_site is None
    assert cfg.get("IsPublicSite") is True


def test_to_store_has_every_key_and_no_nulls(store_values):
    data = RoadkillSettings.from_store(store_values).to_store()
    assert set(data) == set(SETTING_KEYS)
    assert all(v is not None for v in data.values())


# ---------------------------------------------------------------------------
# Required settings
# ---------------------------------------------------------------------------

def test_required_settings_get_no_default():
    cfg = RoadkillSettings.from_store({})
    assert cfg.get("ApiKeys") == ""
    assert cfg.get("Installed") is False
    assert cfg.missing_required() == list(REQUIRED_KEYS)


def test_null_required_values_become_zero_values():
    cfg = RoadkillSettings.from_store({"ApiKeys": None, "Installed": None, "AdminRoleName": None})
    assert cfg.get("ApiKeys") == ""
    assert cfg.get("Installed") is False
    assert cfg.get("AdminRoleName") == ""


@pytest.mark.parametrize("api_keys", ["", None, "  ,  "])
def test_empty_api_keys_disable_rest_api(api_keys, store_values):
    store_values["ApiKeys"] = api_keys
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.rest_api_enabled is False
    assert cfg.is_valid_api_key("anything") is False


def test_absent_api_keys_disable_rest_api(store_values):
    del store_values["ApiKeys"]
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.rest_api_enabled is False
    assert "ApiKeys" in cfg.missing_required()


def test_api_key_list_and_validation():
    cfg = RoadkillSettings.from_store({"ApiKeys": " key1, key2 ,,key3"})
    assert cfg.api_key_list == ["key1", "key2", "key3"]
    assert cfg.rest_api_enabled is True
    assert cfg.is_valid_api_key("key2")
    assert cfg.is_valid_api_key(" key3 ")
    assert not cfg.is_valid_api_key("key4")
    assert not cfg.is_valid_api_key("")
    assert not cfg.is_valid_api_key(None)


# ---------------------------------------------------------------------------
# get / set
# ---------------------------------------------------------------------------

def test_get_accepts_store_key_or_attribute(store_values):
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.get("AdminRoleName") == cfg.get("admin_role_name") == "Admins"


def test_unknown_setting_raises():
    cfg = RoadkillSettings.from_store({})
    with pytest.raises(UnknownSettingError, match="NoSuchSetting"):
        cfg.get("NoSuchSetting")
    with pytest.raises(KeyError):
        cfg.set("NoSuchSetting", 1)


def test_set_does_not_validate():
    cfg = RoadkillSettings.from_store({})
    cfg.set("ConnectionString", "not a connection string")
    cfg.set("LdapConnectionString", "ldap-without-scheme")
    assert cfg.get("ConnectionString") == "not a connection string"
    assert cfg.get("LdapConnectionString") == "ldap-without-scheme"


def test_set_required_setting_clears_missing():
    cfg = RoadkillSettings.from_store({})
    cfg.set("ConnectionString", "Server=y")
    assert "ConnectionString" not in cfg.missing_required()


def test_set_optional_to_none_falls_back_to_default():
    cfg = RoadkillSettings.from_store({"UseObjectCache": False})
    cfg.set("UseObjectCache", None)
    assert cfg.get("UseObjectCache") is True


def test_source_reports_origin(store_values):
    store_values["DatabaseName"] = "MySql"
    del store_values["ConnectionString"]
    cfg = RoadkillSettings.from_store(store_values)
    assert cfg.source("DatabaseName") == "explicit"
    assert cfg.source("UseObjectCache") == "default"
    assert cfg.source("ConnectionString") == "missing"
    assert cfg.source("AdminRoleName") == "explicit"


# ---------------------------------------------------------------------------
# Deserialization
# ---------------------------------------------------------------------------

def test_unrecognized_keys_are_ignored(store_values):
    store_values["SomeFutureSetting"] = "x"
    cfg = RoadkillSettings.from_store(store_values)
    assert "SomeFutureSetting" not in cfg.to_store()


def test_boolean_strings_are_coerced():
    cfg = RoadkillSettings.from_store({"Installed": "true", "UseObjectCache": "false"})
    assert cfg.get("Installed") is True
    assert cfg.get("UseObjectCache") is False


def test_invalid_boolean_raises_validation_error():
    with pytest.raises(ValidationError):
        RoadkillSettings.from_store({"UseObjectCache": "maybe"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_resolve_setting():
    assert resolve_setting("use_object_cache") == "UseObjectCache"
    assert resolve_setting("UseObjectCache") == "UseObjectCache"
    with pytest.raises(UnknownSettingError):
        resolve_setting("useobjectcache")


def test_is_boolean_setting():
    assert is_boolean_setting("Installed")
    assert is_boolean_setting("UseAzureFileStorage")
    assert not is_boolean_setting("ApiKeys")
    assert not is_boolean_setting("DatabaseName")


def test_parse_setting_value():
    assert parse_setting_value("UseObjectCache", "no") is False
    assert parse_setting_value("Installed", " TRUE ") is True
    assert parse_setting_value("DatabaseName", "MongoDB") == "MongoDB"
    with pytest.raises(ValueError):
        parse_setting_value("UseObjectCache", "perhaps")


@pytest.mark.parametrize(
    "folder, expected",
    [
        ("~/App_Data/Attachments", ("App_Data", "Attachments")),
        ("~\\Files\\Uploads", ("Files", "Uploads")),
        ("uploads", ("uploads",)),
    ],
)
def test_attachments_directory_relative(tmp_path, folder, expected):
    cfg = RoadkillSettings.from_store({"AttachmentsFolder": folder})
    assert cfg.attachments_directory(tmp_path) == tmp_path.joinpath(*expected)


def test_attachments_directory_absolute(tmp_path):
    target = tmp_path / "elsewhere"
    cfg = RoadkillSettings.from_store({"AttachmentsFolder": str(target)})
    assert cfg.attachments_directory(Path("/srv/wiki")) == target


def test_to_store_leaves_out_required_settings_never_provided(store_values):
    del store_values["ConnectionString"]
    cfg = RoadkillSettings.from_store(store_values)
    data = cfg.to_store()
    assert "ConnectionString" not in data
    assert data["Installed"] is True
    assert data["UseObjectCache"] is True

    cfg.set("ConnectionString", "")
    assert cfg.to_store()["ConnectionString"] == ""
