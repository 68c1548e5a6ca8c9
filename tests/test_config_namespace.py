import pytest

from checkkit.config_namespace import ConfigNamespace
from checkkit.errors import ConfigurationError


def test_get_int_validates_type_and_minimum():
    with pytest.raises(ConfigurationError, match=r"must be an int"):
        ConfigNamespace({"count": 2.0}, path="run").get_int("count")
    with pytest.raises(ConfigurationError, match=r"must be >= 0 \(got -1\)"):
        ConfigNamespace({"count": -1}, path="run").get_int("count", min_value=0)
    assert ConfigNamespace({}, path="run").get_int("count", default=20) == 20


def test_missing_required_key_reports_full_path():
    ns = ConfigNamespace({}, path="groups.workspace")
    with pytest.raises(ConfigurationError, match=r"Missing required config key: groups\.workspace\.steps"):
        ns.get_list("steps")


def test_unknown_key_enforcement_includes_path_and_consumed_keys():
    ns = ConfigNamespace({"known": 3, "typo": 1}, path="run")
    assert ns.get_int("known") == 3
    with pytest.raises(ConfigurationError, match=r"Unknown config keys under run: typo \(consumed: known\)"):
        ns.assert_consumed()


def test_assert_consumed_recurses_into_child_namespaces():
    ns = ConfigNamespace({"run": {"default_groups": ["a"], "extra": 1}}, path="")
    run = ns.namespace("run")
    run.get_list_str("default_groups")
    with pytest.raises(ConfigurationError, match=r"Unknown config keys under run: extra"):
        ns.assert_consumed()


def test_get_list_str_accepts_numbers_as_text_and_rejects_blanks():
    ns = ConfigNamespace({"argv": ["cargo", 1, "-D"]}, path="cmd")
    assert ns.get_list_str("argv") == ["cargo", "1", "-D"]

    with pytest.raises(ConfigurationError, match=r"cmd\.argv\[1\] cannot be empty"):
        ConfigNamespace({"argv": ["cargo", " "]}, path="cmd").get_list_str("argv")
    with pytest.raises(ConfigurationError, match=r"cannot be empty"):
        ConfigNamespace({"argv": []}, path="cmd").get_list_str("argv")


def test_get_str_mapping_stringifies_scalars():
    ns = ConfigNamespace({"env": {"CARGO_TARGET_DIR": "./target", "JOBS": 2}}, path="groups.g")
    assert ns.get_str_mapping("env") == {"CARGO_TARGET_DIR": "./target", "JOBS": "2"}

    with pytest.raises(ConfigurationError, match=r"must be a scalar"):
        ConfigNamespace({"env": {"X": ["a"]}}, path="g").get_str_mapping("env")


def test_namespace_must_be_mapping():
    with pytest.raises(ConfigurationError, match=r"groups must be a mapping"):
        ConfigNamespace({"groups": ["a"]}, path="").namespace("groups")


def test_namespace_default_none_yields_empty():
    child = ConfigNamespace({}, path="").namespace("axes", default=None)
    assert child.keys() == ()
    assert child.path == "axes"
