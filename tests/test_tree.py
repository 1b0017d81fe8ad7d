"""Tests for the configuration tree and its typed getters."""

from datetime import timedelta

import pytest

from dataknobs_treeconf import (
    ConfigTree,
    DefaultTable,
    ExpandMissingKeyError,
    MissingKeyError,
    NotAMappingError,
    NotFoundError,
    TreeConfError,
    TypeMismatchError,
)


@pytest.fixture
def tree(sample_config_dict):
    """Tree over the sample dictionary with an empty environment."""
    return ConfigTree(sample_config_dict, DefaultTable("APP_", environ={}.get))


class TestGetString:
    """Test string lookups."""

    def test_get_string(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value"}')
        assert config.get_string("key") == "value"
        assert config.get_string("nope") == "true"

    def test_missing_key(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value"}')
        with pytest.raises(MissingKeyError, match="Key 'missing' does not exist"):
            config.get_string("missing")

    def test_fallback(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value"}')
        assert config.get_string("missing", "deflt") == "deflt"
        assert config.get_string("key", "deflt") == "value"

    def test_nested(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value", "sub": { "key":"value" }}')
        assert config.get_string("sub.key") == "value"
        assert config.get_string("sub.nope.key", "deflt") == "deflt"

    def test_scalar_intermediate(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value", "sub": { "key":"value" }}')
        with pytest.raises(NotAMappingError) as exc_info:
            config.get_string("key.sub")
        assert exc_info.value.segment == "key"

    def test_scalar_intermediate_with_fallback(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value"}')
        assert config.get_string("nope.sub", "deflt") == "deflt"

    def test_scalar_intermediate_found_in_defaults(self, builder):
        builder.add_default("nope.sub", "from-defaults")
        config = builder.load_json('{ "nope": true}')
        assert config.get_string("nope.sub") == "from-defaults"

    def test_url_expansion(self, tree):
        assert tree.get_string("database.url") == "postgresql://localhost:5432/myapp"

    def test_number_as_string(self, tree):
        assert tree.get_string("database.port") == "5432"

    def test_fallback_expanded(self, tree):
        assert tree.get_string("missing", "${name}-default") == "myapp-default"


class TestDefaultsAndEnvironment:
    """Test lookups falling back to defaults and the environment."""

    def test_default_value(self, builder):
        builder.add_default("proc.limit", 8)
        config = builder.load({"name": "app"})
        assert config.get_int("proc.limit", 5) == 8

    def test_environment_value(self, builder, fake_env):
        fake_env["CTX_DATABASE_PORT"] = "6543"
        config = builder.load({"database": {"host": "localhost"}})
        assert config.get_int("database.port") == 6543

    def test_tree_beats_environment(self, builder, fake_env):
        fake_env["CTX_KEY"] = "env"
        config = builder.load({"key": "tree"})
        assert config.get_string("key") == "tree"

    def test_defaults_beat_environment(self, builder, fake_env):
        fake_env["CTX_TEST0"] = "B"
        builder.add_default("test0", "A")
        assert builder.config.get_string("test0") == "A"

    def test_defaults_beat_fallback(self, builder):
        builder.add_default("key", "default")
        assert builder.config.get_string("key", "fallback") == "default"

    def test_expanded_default(self, builder):
        builder.add_default("db.url", "pg://${db.host}")
        config = builder.load({"db": {"host": "localhost"}})
        assert config.get_string("db.url") == "pg://localhost"


class TestTypedGetters:
    """Test typed conversions."""

    def test_get_bool(self, builder):
        config = builder.load({"a": True, "b": "false", "c": "YES", "d": "maybe"})
        assert config.get_bool("a") is True
        assert config.get_bool("b") is False
        assert config.get_bool("c") is True
        with pytest.raises(TypeMismatchError):
            config.get_bool("d")

    def test_get_bool_fallback(self, builder):
        assert builder.config.get_bool("missing", False) is False

    def test_get_int_fallback(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value"}')
        assert config.get_int("missing", 5) == 5

    def test_get_int_from_bool_is_mismatch(self, builder):
        config = builder.load_json('{ "nope": true, "key":"value"}')
        with pytest.raises(TypeMismatchError) as exc_info:
            config.get_int("nope", 5)
        assert exc_info.value.key == "nope"
        assert exc_info.value.expected == "int"

    def test_get_int(self, tree):
        assert tree.get_int("database.port") == 5432
        assert tree.get_int("database.pool.size") == 10

    def test_get_int_non_numeric(self, tree):
        with pytest.raises(TypeMismatchError, match="cannot convert 'localhost' to int"):
            tree.get_int("database.host")

    def test_get_int_expanded(self, builder):
        config = builder.load({"base": 8000, "port": "${base}"})
        assert config.get_int("port") == 8000

    def test_get_uint(self, builder):
        config = builder.load({"workers": "4", "offset": -1})
        assert config.get_uint("workers") == 4
        with pytest.raises(TypeMismatchError):
            config.get_uint("offset")

    def test_get_float(self, builder):
        config = builder.load({"ratio": "0.75", "count": 3, "name": "x"})
        assert config.get_float("ratio") == 0.75
        assert config.get_float("count") == 3.0
        with pytest.raises(TypeMismatchError):
            config.get_float("name")

    def test_get_duration(self, tree):
        assert tree.get_duration("database.pool.timeout") == timedelta(seconds=30)
        assert tree.get_duration("missing", "2h") == timedelta(hours=2)
        assert tree.get_duration("missing", timedelta(minutes=1)) == timedelta(minutes=1)

    def test_get_duration_invalid(self, tree):
        with pytest.raises(TypeMismatchError):
            tree.get_duration("cache.ttl")

    def test_errors_are_treeconf_errors(self, tree):
        with pytest.raises(TreeConfError):
            tree.get_int("database.host")
        with pytest.raises(NotFoundError):
            tree.get_int("nothing")
        with pytest.raises(KeyError):
            tree.get_int("nothing")


class TestGet:
    """Test raw value access."""

    def test_get_mapping_expanded(self, tree, sample_config_dict):
        cache = tree.get("cache")
        assert cache == {"host": "localhost", "ttl": 3600}
        assert sample_config_dict["cache"]["host"] == "${database.host}"

    def test_get_list_expanded(self, tree):
        assert tree.get("servers") == ["localhost", "backup.example.com"]

    def test_get_keeps_dangling_nested_placeholder(self, builder):
        config = builder.load({"section": {"ok": "${name}", "bad": "${nothing}"}, "name": "app"})
        assert config.get("section") == {"ok": "app", "bad": "${nothing}"}

    def test_top_level_expansion_error_surfaces(self, builder):
        config = builder.load({"bad": "${nothing}"})
        with pytest.raises(ExpandMissingKeyError):
            config.get("bad")

    def test_none_fallback(self, builder):
        assert builder.config.get("missing", None) is None
        assert builder.config.get_string("missing", None) == ""


class TestGetConfig:
    """Test section extraction."""

    def test_get_config(self, tree):
        database = tree.get_config("database")
        assert database.parent is tree
        assert database.root is tree
        assert database.defaults is tree.defaults
        assert database.get_string("host") == "localhost"
        assert database.get_int("pool.size") == 10

    def test_sub_config_shares_storage(self, tree, sample_config_dict):
        database = tree.get_config("database")
        assert database.values is sample_config_dict["database"]
        database.set_value("user", "admin")
        assert tree.get_string("database.user") == "admin"

    def test_sub_config_expands_against_parents(self, tree):
        assert tree.get_config("database").get_string("url") == "postgresql://localhost:5432/myapp"

    def test_sub_config_local_lookup_only(self, tree):
        database = tree.get_config("database")
        with pytest.raises(MissingKeyError):
            database.get_string("name")

    def test_missing_section(self, tree):
        with pytest.raises(MissingKeyError):
            tree.get_config("nothing")

    def test_scalar_section(self, tree):
        with pytest.raises(NotAMappingError):
            tree.get_config("name")
        with pytest.raises(NotAMappingError):
            tree.get_config("name.sub")

    def test_list_section(self, tree):
        with pytest.raises(NotAMappingError):
            tree.get_config("servers")


class TestMutation:
    """Test merge and set_value."""

    def test_merge_first_wins(self, builder):
        builder.load_json('{ "nope": true, "key":"value"}')
        config = builder.load_json('{ "nope": false, "key2":"value2"}')
        assert config.get_bool("nope") is True
        assert config.get_string("key") == "value"
        assert config.get_string("key2") == "value2"

    def test_merge_returns_tree(self):
        tree = ConfigTree()
        assert tree.merge({"a": 1}) is tree
        assert tree.to_dict() == {"a": 1}

    def test_set_value(self):
        tree = ConfigTree({"a": {"b": 1}})
        assert tree.set_value("a.c.d", "x") is True
        assert tree.set_value("a.b", 2) is False
        assert tree.values == {"a": {"b": 1, "c": {"d": "x"}}}

    def test_set_value_copies_mapping(self):
        section = {"host": "localhost"}
        tree = ConfigTree()
        tree.set_value("db", section)
        tree.set_value("db", {"port": 5432})
        assert section == {"host": "localhost"}
        assert tree.values == {"db": {"host": "localhost", "port": 5432}}

    def test_merge_copies_input(self):
        data = {"a": {"b": 1}}
        tree = ConfigTree().merge(data)
        tree.merge({"a": {"c": 2}})
        assert data == {"a": {"b": 1}}
        assert tree.values["a"] is not data["a"]

    def test_set_value_through_scalar(self):
        tree = ConfigTree({"a": 1})
        with pytest.raises(NotAMappingError):
            tree.set_value("a.b", 2)


class TestIntrospection:
    """Test membership and export helpers."""

    def test_has(self, tree):
        assert tree.has("database.pool.size")
        assert "database.host" in tree
        assert "database.missing" not in tree
        assert not tree.has("name.sub")
        assert 42 not in tree

    def test_keys(self, tree):
        assert tree.keys() == ["name", "debug", "database", "cache", "servers"]
        assert list(tree) == tree.keys()

    def test_find(self, builder):
        builder.add_default("none", "--")
        config = builder.load({"a": 1})
        assert config.find("a") == (1, True)
        assert config.find("x.none") == ("--", True)
        assert config.find("missing") == (None, False)

    def test_to_dict(self, tree, sample_config_dict):
        exported = tree.to_dict()
        assert exported["database"]["url"] == "postgresql://localhost:5432/myapp"
        assert exported["servers"][0] == "localhost"
        exported["database"]["host"] = "changed"
        assert sample_config_dict["database"]["host"] == "localhost"

    def test_to_dict_raw(self, tree, sample_config_dict):
        raw = tree.to_dict(expand=False)
        assert raw == sample_config_dict
        assert raw is not sample_config_dict

    def test_max_recursion(self, tree):
        assert tree.max_recursion == 5

    def test_repr(self):
        assert repr(ConfigTree({"a": 1}, DefaultTable("x_"))) == "ConfigTree(keys=['a'], prefix='X_')"
