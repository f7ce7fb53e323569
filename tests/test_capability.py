from enum import Enum

import pytest

from capkit.core import Capability, Operation, kind_key, non_empty


class Kinds(str, Enum):
    LOCKABLE = "lockable"


def test_kind_key_normalises_enum_and_capability():
    cap = Capability.define(Kinds.LOCKABLE, "lock")
    assert cap.kind == "lockable"
    assert kind_key(Kinds.LOCKABLE) == "lockable"
    assert kind_key(cap) == "lockable"
    assert kind_key("lockable") == "lockable"


@pytest.mark.parametrize("bad", ["", None, 3])
def test_kind_key_rejects_invalid(bad):
    with pytest.raises(ValueError):
        kind_key(bad)


def test_capability_needs_operations():
    with pytest.raises(ValueError):
        Capability.define("empty")


def test_duplicate_operations_rejected():
    with pytest.raises(ValueError):
        Capability.define("dup", "go", Operation("go"))


def test_operation_lookup():
    cap = Capability.define("openable", "open", "close")
    assert cap.operation_names == ("open", "close")
    assert cap.operation("open").name == "open"
    assert cap.has_operation("close")
    with pytest.raises(ValueError, match="no operation 'smash'"):
        cap.operation("smash")


def test_bind_reports_missing_and_unknown():
    cap = Capability.define("openable", "open", "close")
    with pytest.raises(ValueError, match="missing close"):
        cap.bind({"open": lambda: "opened"})
    with pytest.raises(ValueError, match="unknown kick"):
        cap.bind({"open": lambda: 1, "close": lambda: 1, "kick": lambda: 1})
    with pytest.raises(ValueError, match="not callable"):
        cap.bind({"open": "nope", "close": lambda: 1})


def test_non_empty_postcondition():
    assert non_empty("Quack...")
    assert non_empty(False)
    assert non_empty(0)
    assert not non_empty(None)
    assert not non_empty("")
    assert not non_empty([])
