"""Acting principals and the authorization rules for every transition."""

from dataclasses import dataclass, field
from uuid import UUID

from src.app.core.config import get_settings
from src.app.models import BuildingStatus, DeletionRequestStatus
from src.app.orchestration.errors import Unauthorized

SYSTEM_ROLE = "system"


@dataclass(frozen=True)
class Actor:
    """Who is asking for a transition.

    Passed explicitly to every engine call; nothing reads a global
    current user.
    """

    id: UUID
    roles: frozenset[str] = field(default_factory=frozenset)
    tenant_id: UUID | None = None

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_system(self) -> bool:
        return self.has_role(SYSTEM_ROLE)

    @property
    def is_admin(self) -> bool:
        return self.has_role(get_settings().admin_role)

    def belongs_to(self, tenant_id: UUID) -> bool:
        return self.tenant_id is not None and self.tenant_id == tenant_id

    def is_owner_of(self, tenant_id: UUID) -> bool:
        return self.belongs_to(tenant_id) and get_settings().tenant_owner_role in self.roles

    def is_operator_of(self, tenant_id: UUID) -> bool:
        settings = get_settings()
        return self.belongs_to(tenant_id) and bool(
            {settings.tenant_operator_role, settings.tenant_owner_role} & self.roles
        )


# Background reconciliation and cascade fan-out act as this principal
SYSTEM_ACTOR = Actor(id=UUID(int=0), roles=frozenset({SYSTEM_ROLE}))


def authorize_request_creation(actor: Actor, tenant_id: UUID) -> None:
    if not actor.is_owner_of(tenant_id):
        raise Unauthorized("Only an owner of this tenant may request its deletion")


def authorize_view(actor: Actor, tenant_id: UUID) -> None:
    """Reads are open to admins, the system and members of the tenant."""
    if actor.is_admin or actor.is_system or actor.belongs_to(tenant_id):
        return
    raise Unauthorized("You do not have access to this tenant")


def authorize_request_transition(
    actor: Actor, tenant_id: UUID, target: DeletionRequestStatus
) -> None:
    """Check that `actor` may move a tenant's deletion request to `target`.

    Raises:
        Unauthorized: If the actor lacks the role for this transition.
    """
    if target in (DeletionRequestStatus.APPROVED, DeletionRequestStatus.REJECTED):
        if not actor.is_admin:
            raise Unauthorized("Only platform administrators may approve or reject deletion requests")
    elif target == DeletionRequestStatus.CANCELED:
        if not actor.is_owner_of(tenant_id):
            raise Unauthorized("Only an owner of this tenant may cancel its deletion request")
    elif target == DeletionRequestStatus.COMPLETED:
        if not (actor.is_system or actor.is_admin):
            raise Unauthorized("Deletion requests are completed by the system or an administrator")
    else:
        raise Unauthorized(f"No actor may move a deletion request to {target.value}")


def authorize_building_transition(actor: Actor, tenant_id: UUID, target: BuildingStatus) -> None:
    """Check that `actor` may move a building of `tenant_id` to `target`.

    Raises:
        Unauthorized: If the actor lacks the role for this transition.
    """
    if target == BuildingStatus.PENDING_DELETION:
        if not actor.is_system:
            raise Unauthorized("Buildings enter PENDING_DELETION only through an approved request")
    elif target == BuildingStatus.ARCHIVED:
        if not (actor.is_admin or actor.is_operator_of(tenant_id)):
            raise Unauthorized(
                "Only an operator of the owning tenant or an administrator may complete a building"
            )
    else:
        raise Unauthorized(f"No actor may move a building to {target.value}")
