"""Bulk transitions with per-item success and failure."""

from datetime import datetime
from typing import Iterable, Optional

from placement_core.core.errors import BulkFailure, BulkResult
from placement_core.core.models import Actor, WorkflowInstance, utcnow
from placement_core.utils.logging import get_logger
from placement_core.workflow.engine import StateLike, WorkflowDefinition, request_state

logger = get_logger(__name__)


class BulkOperationCoordinator:
    """Applies one action to many instances, never stopping at the first failure."""

    def __init__(self, definition: WorkflowDefinition):
        self.definition = definition
        self.logger = logger.bind(component="bulk_coordinator", workflow=definition.name)

    def apply_bulk(
        self,
        instances: Iterable[WorkflowInstance],
        action: StateLike,
        actor: Actor,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BulkResult:
        """
        Transition every instance independently.

        Items already in the state the action leads to fail with
        NoOpTransition rather than IllegalTransition.

        Args:
            instances: Current snapshots of the entities to transition
            action: Action applied to each instance
            actor: Actor performing the operation
            notes: Note recorded on every successful transition
            now: Timestamp shared by all history entries of this run

        Returns:
            Succeeded ids with their new instances, and failed ids with errors.
            Failed instances are left as they were.
        """
        now = now or utcnow()
        result = BulkResult()

        for instance in instances:
            outcome = request_state(self.definition, instance, action, actor, note=notes, now=now)
            if outcome.success:
                result.succeeded.append(instance.id)
                result.instances[instance.id] = outcome.instance
            else:
                result.failed.append(BulkFailure(id=instance.id, error=outcome.error))

        self.logger.info(
            "Bulk operation completed",
            action=getattr(action, "value", action),
            actor_role=actor.role.value,
            total=result.total,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result


def apply_bulk(
    definition: WorkflowDefinition,
    instances: Iterable[WorkflowInstance],
    action: StateLike,
    actor: Actor,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BulkResult:
    """Functional form of :meth:`BulkOperationCoordinator.apply_bulk`."""
    return BulkOperationCoordinator(definition).apply_bulk(instances, action, actor, notes=notes, now=now)
