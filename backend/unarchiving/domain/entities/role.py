"""Roles and the acting user, resolved once at the application boundary."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Closed set of role names known to the unarchiving module."""

    ADMIN = "ADMIN"
    COORDENADOR = "COORDENADOR"
    OPERADOR = "OPERADOR"
    NUGECID_OPERATOR = "NUGECID_OPERATOR"
    NUGECID_VIEWER = "NUGECID_VIEWER"
    USUARIO = "USUARIO"

    @classmethod
    def resolve(cls, names: Iterable[str | None]) -> frozenset["Role"]:
        """Map raw role strings from the user provider onto known roles.

        Matching is case-insensitive. Unknown names are dropped: role
        vocabularies are owned by the identity provider, not by this module.
        """
        resolved: set[Role] = set()
        for name in names:
            if not name or not name.strip():
                continue
            try:
                resolved.add(cls(name.strip().upper()))
            except ValueError:
                logger.debug("Ignoring unknown role name %r", name)
        return frozenset(resolved)


_VIEWER_ROLES = frozenset({Role.NUGECID_VIEWER, Role.NUGECID_OPERATOR})
_OPERATOR_ROLES = frozenset({Role.NUGECID_OPERATOR, Role.COORDENADOR, Role.OPERADOR})


@dataclass(frozen=True)
class Actor:
    """The user performing an operation, with a typed role set."""

    user_id: int
    roles: frozenset[Role] = field(default_factory=frozenset)
    name: str | None = None

    @classmethod
    def from_raw(
        cls, user_id: int, role_names: Iterable[str | None], name: str | None = None
    ) -> "Actor":
        return cls(user_id=user_id, roles=Role.resolve(role_names), name=name)

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    @property
    def has_viewer_capability(self) -> bool:
        return bool(self.roles & _VIEWER_ROLES)

    @property
    def has_operator_capability(self) -> bool:
        return bool(self.roles & _OPERATOR_ROLES)
