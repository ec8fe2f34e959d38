# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Plain-text roster export (the "instance table" pasted into chat).
Pure computation: no side effects.
"""

from enum import Enum
from typing import Sequence

from shift_reconciler.models.reconciliation import InstanceGroup


class MemberSeparator(str, Enum):
    NEWLINE = "newline"
    COMMA = "comma"


def render_shift_text(
    groups: Sequence[InstanceGroup],
    separator: MemberSeparator = MemberSeparator.NEWLINE,
) -> str:
    """
    Instance name, then each slot name followed by its members.
    Instances are separated by a blank line; empty slots list no members.
    """
    separator = MemberSeparator(separator)
    lines: list[str] = []
    for i, group in enumerate(groups):
        if i > 0:
            lines.append("")
        lines.append(group.instance_name)
        for capacity in group.slots:
            lines.append(capacity.slot.slot_name)
            names = [a.member_display_name or a.member_id for a in capacity.assignments]
            if not names:
                continue
            if separator == MemberSeparator.COMMA:
                lines.append(", ".join(names))
            else:
                lines.extend(names)
    return "\n".join(lines)
