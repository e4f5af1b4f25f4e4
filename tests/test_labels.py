import pytest

from k3dctl.labels import ReservedLabelError, validate_runtime_label_key


@pytest.mark.parametrize("key", ["k3s.io/role", "k3d.cluster", "app"])
def test_reserved_keys_are_rejected(key):
    with pytest.raises(ReservedLabelError):
        validate_runtime_label_key(key)


@pytest.mark.parametrize("key", ["apps", "my.label", "k3sx", "team"])
def test_other_keys_are_accepted(key):
    assert validate_runtime_label_key(key) == key


def test_error_message_names_the_key():
    with pytest.raises(ReservedLabelError, match="k3d.role"):
        validate_runtime_label_key("k3d.role")