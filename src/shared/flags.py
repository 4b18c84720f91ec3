"""Single-active-flag enforcement.

An owner (an aggregate) holds a collection of members, and at most one
non-deleted member may carry a given boolean flag: the default address and
the primary address of an address book. These helpers flip the flag inside
the owner's member collection, so "unset the siblings" and "set the target"
are one in-memory change that the owner's repository persists in a single
write. Callers wrap the call in ``protean.atomic_change`` so the owner's
invariants are checked once, after both halves have been applied.
"""

from collections.abc import Iterable

from shared.errors import NotFoundError


def _is_live(member) -> bool:
    return not getattr(member, "is_deleted", False)


def active_members(members: Iterable, flag: str) -> list:
    """Live members that currently carry ``flag``."""
    return [m for m in members if _is_live(m) and getattr(m, flag)]


def find_member(members: Iterable, member_id):
    """Return the live member with ``member_id`` or raise ``NotFoundError``."""
    member = next((m for m in members if str(m.id) == str(member_id)), None)
    if member is None or not _is_live(member):
        raise NotFoundError(f"{member_id} not found", member_id=str(member_id))
    return member


def set_active(members: Iterable, flag: str, target_id):
    """Make ``target_id`` the only live member carrying ``flag``.

    Returns ``(target, previous)`` where ``previous`` is the member that held
    the flag before, or ``None``.
    """
    members = list(members)
    target = find_member(members, target_id)

    previous = next((m for m in active_members(members, flag) if m is not target), None)
    for member in members:
        if member is not target and getattr(member, flag):
            setattr(member, flag, False)
    if not getattr(target, flag):
        setattr(target, flag, True)
    return target, previous


def unset_active(members: Iterable, flag: str, target_id):
    """Clear ``flag`` on ``target_id`` only; siblings are left untouched."""
    target = find_member(members, target_id)
    if getattr(target, flag):
        setattr(target, flag, False)
    return target


def at_most_one_active(members: Iterable, flag: str) -> bool:
    return len(active_members(members, flag)) <= 1
