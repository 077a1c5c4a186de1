"""
Grouping of pending service records by accounting customer

Pure functions over already-loaded rows. Nothing here touches the session,
so inferred names live on the returned entries and never on the records.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

NO_CUSTOMER = "__no_customer__"


@dataclass
class GroupEntry:
    record: Any
    customer_name: Optional[str] = None
    inferred: bool = False


@dataclass
class CustomerGroup:
    key: str
    customer_name: Optional[str]
    entries: list[GroupEntry] = field(default_factory=list)
    suggested_customer_id: Optional[str] = None
    suggested_customer_name: Optional[str] = None


def _clean(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    name = name.strip()
    return name or None


def horse_names(record) -> list[str]:
    """Composite names the record's horse is known by: stored, then current"""
    names = []
    horse = getattr(record, "horse", None)
    for name in (getattr(record, "horse_name", None), horse.composite_name if horse is not None else None):
        name = _clean(name)
        if name and name not in names:
            names.append(name)
    return names


def index_siblings(siblings: Iterable) -> dict[tuple, list]:
    """
    Records keyed by every horse reference they carry, as (position, record)
    pairs so lookups can restore the original order.
    """
    by_ref: dict[tuple, list] = {}
    for position, record in enumerate(siblings):
        refs = []
        if getattr(record, "horse_id", None) is not None:
            refs.append(("id", record.horse_id))
        horse_name = _clean(getattr(record, "horse_name", None))
        if horse_name:
            refs.append(("name", horse_name))
        for ref in refs:
            by_ref.setdefault(ref, []).append((position, record))
    return by_ref


def siblings_for(record, by_ref: dict[tuple, list]) -> list:
    """
    Records sharing the horse of `record`, matched by id or composite name.
    Legacy rows without an id match on name alone; rows for a different
    horse id never match.
    """
    horse_id = getattr(record, "horse_id", None)
    refs = [("name", name) for name in horse_names(record)]
    if horse_id is not None:
        refs.insert(0, ("id", horse_id))

    found = {}
    for ref in refs:
        for position, sibling in by_ref.get(ref, []):
            sibling_id = getattr(sibling, "horse_id", None)
            if horse_id is not None and sibling_id is not None and sibling_id != horse_id:
                continue
            found[position] = sibling
    return [found[position] for position in sorted(found)]


def most_common_customer(siblings: Iterable) -> Optional[str]:
    """Most frequent customer name; among equal counts the first-seen name wins"""
    counts: "OrderedDict[str, int]" = OrderedDict()
    for record in siblings:
        name = _clean(record.customer_name)
        if name:
            counts[name] = counts.get(name, 0) + 1
    best_name, best_count = None, 0
    for name, count in counts.items():
        if count > best_count:
            best_name, best_count = name, count
    return best_name


def group_pending(
    pending: Iterable,
    siblings: Iterable,
    linked_customers: Optional[dict] = None,
) -> "OrderedDict[str, CustomerGroup]":
    """
    Assign each pending record to a customer group.

    Args:
        pending: records with status pending
        siblings: every record, in any status, sharing a horse reference
            with one of the pending records
        linked_customers: horse id -> display names linked to that horse

    Returns:
        Groups keyed by customer display name, in first-assigned order, with
        NO_CUSTOMER last when present.
    """
    linked_customers = linked_customers or {}
    by_ref = index_siblings(siblings)
    groups: "OrderedDict[str, CustomerGroup]" = OrderedDict()
    unassigned: list[GroupEntry] = []

    def _add(entry: GroupEntry, key: str) -> None:
        if key not in groups:
            groups[key] = CustomerGroup(key=key, customer_name=None if key == NO_CUSTOMER else key)
        groups[key].entries.append(entry)

    for record in pending:
        explicit = _clean(record.customer_name)
        if explicit:
            _add(GroupEntry(record=record, customer_name=explicit), explicit)
            continue

        name = most_common_customer(siblings_for(record, by_ref))
        if name:
            _add(GroupEntry(record=record, customer_name=name, inferred=True), name)
        else:
            unassigned.append(GroupEntry(record=record))

    leftovers = []
    for entry in unassigned:
        horse_id = getattr(entry.record, "horse_id", None)
        names = linked_customers.get(horse_id, []) if horse_id is not None else []
        if len(names) == 1:
            entry.customer_name = names[0]
            entry.inferred = True
            _add(entry, names[0])
        else:
            leftovers.append(entry)

    for entry in leftovers:
        _add(entry, NO_CUSTOMER)
    if NO_CUSTOMER in groups:
        groups.move_to_end(NO_CUSTOMER)
    return groups


def match_accounting_customer(name: Optional[str], customers: list[dict]) -> Optional[dict]:
    """
    Find the accounting customer for a display name.

    An exact case-insensitive match anywhere in the list beats any substring
    match; among candidates of the same kind the first one wins.
    """
    target = (name or "").strip().lower()
    if not target:
        return None

    for customer in customers:
        if (customer.get("display_name") or "").strip().lower() == target:
            return customer

    for customer in customers:
        candidate = (customer.get("display_name") or "").strip().lower()
        if candidate and (target in candidate or candidate in target):
            return customer
    return None


def suggest_customer_ids(groups: dict[str, CustomerGroup], customers: list[dict]) -> None:
    """Pre-select an accounting customer per group; the choice is only a suggestion"""
    by_id = {str(customer.get("id")): customer for customer in customers}
    for key, group in groups.items():
        if key == NO_CUSTOMER:
            continue
        match = by_id.get(key) or match_accounting_customer(group.customer_name, customers)
        if match:
            group.suggested_customer_id = str(match.get("id"))
            group.suggested_customer_name = match.get("display_name")
