"""Read-model reducer for change feed events"""

from typing import Dict, Iterable, Optional
from khata.domain.models import ChangeEvent

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
CHANGE_KINDS = (INSERT, UPDATE, DELETE)


def apply_change(read_model: Dict[str, Dict], event: ChangeEvent) -> Dict[str, Dict]:
    """
    Fold one event into a read model keyed by record id.

    Returns a new dict; the input is not mutated. Insert and update both
    upsert, delete of an unknown id is a no-op.
    """
    if event.kind not in CHANGE_KINDS:
        raise ValueError(f"Unknown change kind: {event.kind!r}")

    key = str(event.record["id"])
    updated = dict(read_model)
    if event.kind == DELETE:
        updated.pop(key, None)
    else:
        updated[key] = dict(event.record)
    return updated


def fold_changes(
    events: Iterable[ChangeEvent],
    initial: Optional[Dict[str, Dict]] = None,
) -> Dict[str, Dict]:
    """Apply events in arrival order (no reordering or de-duplication)"""
    model = dict(initial or {})
    for event in events:
        model = apply_change(model, event)
    return model
