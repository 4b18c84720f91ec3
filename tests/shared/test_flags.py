"""Tests for single-active-flag enforcement over a member collection."""

from types import SimpleNamespace

import pytest
from shared.errors import NotFoundError
from shared.flags import active_members, at_most_one_active, find_member, set_active, unset_active


def _member(member_id, is_default=False, is_deleted=False):
    return SimpleNamespace(id=member_id, is_default=is_default, is_deleted=is_deleted)


@pytest.fixture()
def members():
    return [_member("a", is_default=True), _member("b"), _member("c")]


class TestSetActive:
    def test_moves_flag_to_target(self, members):
        target, previous = set_active(members, "is_default", "b")

        assert target.id == "b"
        assert previous.id == "a"
        assert [m.id for m in active_members(members, "is_default")] == ["b"]

    def test_setting_current_holder_is_a_no_op(self, members):
        target, previous = set_active(members, "is_default", "a")

        assert target.id == "a"
        assert previous is None
        assert [m.id for m in active_members(members, "is_default")] == ["a"]

    def test_repairs_a_collection_with_several_active(self):
        members = [_member("a", True), _member("b", True), _member("c")]
        set_active(members, "is_default", "c")
        assert [m.id for m in active_members(members, "is_default")] == ["c"]

    def test_any_sequence_keeps_at_most_one_active(self, members):
        for target in ["b", "c", "a", "c", "b"]:
            set_active(members, "is_default", target)
            assert at_most_one_active(members, "is_default")

    def test_missing_target(self, members):
        with pytest.raises(NotFoundError):
            set_active(members, "is_default", "zzz")

    def test_deleted_target(self):
        members = [_member("a"), _member("b", is_deleted=True)]
        with pytest.raises(NotFoundError):
            set_active(members, "is_default", "b")


class TestUnsetActive:
    def test_clears_only_the_target(self, members):
        unset_active(members, "is_default", "a")
        assert active_members(members, "is_default") == []

    def test_unsetting_a_sibling_leaves_holder(self, members):
        unset_active(members, "is_default", "b")
        assert [m.id for m in active_members(members, "is_default")] == ["a"]


def test_deleted_members_are_never_active():
    members = [_member("a", is_default=True, is_deleted=True), _member("b")]
    assert active_members(members, "is_default") == []


def test_find_member(members):
    assert find_member(members, "c").id == "c"
