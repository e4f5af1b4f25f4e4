import pytest

from k3dctl.configfile import ConfigFileError, expand_env, load_config_file


def test_expand_plain_variable():
    assert expand_env("name: $NAME", {"NAME": "demo"}) == "name: demo"


def test_expand_braced_variable():
    assert expand_env("x${NAME}y", {"NAME": "demo"}) == "xdemoy"


def test_expand_unknown_variable_is_empty():
    assert expand_env("a$MISSING/b", {}) == "a/b"


def test_trailing_dollar_is_kept():
    assert expand_env("cost$", {}) == "cost$"


def test_dollar_followed_by_non_name_is_kept():
    assert expand_env("a $% b", {}) == "a $% b"


def test_unterminated_brace_is_eaten():
    assert expand_env("a${NAME", {"NAME": "demo"}) == "aNAME"


def test_empty_braces_are_eaten():
    assert expand_env("a${}b", {}) == "ab"


def test_special_variable_single_char():
    assert expand_env("$1x", {"1": "one"}) == "onex"


def test_text_without_variables_unchanged():
    text = "servers: 3\nagents: 2\n"
    assert expand_env(text, {}) == text


def test_load_config_file_expands_env(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("apiVersion: k3d.io/v1alpha3\nkind: Simple\nname: ${CLUSTER}\nservers: 1\n")
    data = load_config_file(path, {"CLUSTER": "demo"})
    assert data["name"] == "demo"
    assert data["servers"] == 1
    assert data["kind"] == "Simple"


def test_load_config_file_does_not_modify_original(tmp_path):
    path = tmp_path / "cfg.yaml"
    content = "name: $CLUSTER\n"
    path.write_text(content)
    load_config_file(path, {"CLUSTER": "demo"})
    assert path.read_text() == content


def test_load_config_file_empty_gives_empty_dict(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config_file(path, {}) == {}


def test_load_config_file_missing(tmp_path):
    with pytest.raises(ConfigFileError):
        load_config_file(tmp_path / "nope.yaml", {})


def test_load_config_file_not_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigFileError):
        load_config_file(path, {})


def test_load_config_file_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("a: [1, 2\n")
    with pytest.raises(ConfigFileError):
        load_config_file(path, {})