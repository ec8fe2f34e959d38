# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Slot capacity tracking. Pure computation, no side effects.
Groups the slots of one business day by instance and derives remaining capacity.
"""

from typing import Optional, Sequence

from shift_reconciler.core.config import settings
from shift_reconciler.models.domain import ShiftAssignment, ShiftSlot
from shift_reconciler.models.reconciliation import InstanceGroup, SlotCapacity
from shift_reconciler.services.collation import collation_key


def slot_capacity(
    slot: ShiftSlot,
    assignments: Sequence[ShiftAssignment],
    instance_name: Optional[str] = None,
) -> SlotCapacity:
    """Capacity of one slot. Only confirmed assignments for the slot are counted."""
    confirmed = [a for a in assignments if a.slot_id == slot.slot_id and a.is_confirmed]
    remaining = slot.required_count - len(confirmed)
    return SlotCapacity(
        slot=slot,
        instance_name=instance_name or slot.instance_name or settings.UNCLASSIFIED_INSTANCE_NAME,
        assignments=confirmed,
        confirmed_count=len(confirmed),
        remaining=remaining,
        is_full=remaining <= 0,
    )


def build_instance_groups(
    slots: Sequence[ShiftSlot],
    assignments: Sequence[ShiftAssignment],
) -> list[InstanceGroup]:
    """
    Group slots by instance id, order groups by name (unclassified last) and
    slots by ascending priority inside each group.
    """
    groups: dict[Optional[str], InstanceGroup] = {}

    for slot in slots:
        key = slot.instance_id
        group = groups.get(key)
        if group is None:
            if key is None:
                group = InstanceGroup(
                    instance_id=None,
                    instance_name=settings.UNCLASSIFIED_INSTANCE_NAME,
                    is_unclassified=True,
                )
            else:
                group = InstanceGroup(
                    instance_id=key,
                    instance_name=slot.instance_name or key,
                )
            groups[key] = group
        group.slots.append(slot_capacity(slot, assignments, group.instance_name))

    for group in groups.values():
        group.slots.sort(
            key=lambda c: (c.slot.priority, collation_key(c.slot.slot_name), c.slot.slot_id)
        )

    return sorted(
        groups.values(),
        key=lambda g: (g.is_unclassified, collation_key(g.instance_name), g.instance_id or ""),
    )
