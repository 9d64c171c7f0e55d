"""Ownership and sharing predicates for tasks."""

from __future__ import annotations

from typing import Protocol

from tasktracker.services._shared.errors import NotFoundError


class SharedResource(Protocol):
    id: int
    owner_id: int

    @property
    def shared_user_ids(self) -> set[int]: ...


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def can_read(resource: SharedResource, principal_id: int | None) -> bool:
    """Owners and principals the resource is shared with may read it."""
    if is_owner(actor_id=principal_id, owner_id=resource.owner_id):
        return True
    return principal_id is not None and int(principal_id) in resource.shared_user_ids


def can_write(resource: SharedResource, principal_id: int | None) -> bool:
    """Only the owner may write; shared access is read-only."""
    return is_owner(actor_id=principal_id, owner_id=resource.owner_id)


def assert_owner(resource: SharedResource, principal_id: int | None, *, entity: str = "Task") -> None:
    """
    Raise :class:`NotFoundError` unless ``principal_id`` owns ``resource``.

    Mutation paths report foreign resources as missing rather than forbidden.
    """
    if not can_write(resource, principal_id):
        raise NotFoundError(entity, resource.id)
