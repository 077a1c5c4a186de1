from types import SimpleNamespace

from farrier.domain.approvals.grouping import (
    NO_CUSTOMER,
    group_pending,
    horse_names,
    match_accounting_customer,
    most_common_customer,
    suggest_customer_ids,
)


def record(id, horse_id=None, horse_name=None, customer_name=None, horse=None):
    return SimpleNamespace(
        id=id, horse_id=horse_id, horse_name=horse_name, customer_name=customer_name, horse=horse
    )


def keys(groups):
    return {key: [entry.record.id for entry in group.entries] for key, group in groups.items()}


def test_horse_names_include_current_composite_name():
    renamed = SimpleNamespace(composite_name="Star II - [Oak Hill]")
    assert horse_names(record(1, horse_id=7, horse_name="Star - [Oak Hill]", horse=renamed)) == [
        "Star - [Oak Hill]",
        "Star II - [Oak Hill]",
    ]
    assert horse_names(record(2, horse_name="  ")) == []


def test_explicit_customer_name_is_never_overridden():
    pending = [record(1, horse_id=7, customer_name="Zed Ranch")]
    siblings = pending + [record(10 + i, horse_id=7, customer_name="Acme") for i in range(5)]

    groups = group_pending(pending, siblings, {7: ["Other Owner"]})

    assert keys(groups) == {"Zed Ranch": [1]}
    assert groups["Zed Ranch"].entries[0].inferred is False


def test_star_groups_under_most_frequent_sibling_customer():
    pending = [record(1, horse_id=7), record(2, horse_id=7)]
    siblings = pending + [
        record(10, horse_id=7, customer_name="Acme"),
        record(11, horse_id=7, customer_name="Beta"),
        record(12, horse_id=7, customer_name="Acme"),
        record(13, horse_id=7, customer_name="Acme"),
    ]

    groups = group_pending(pending, siblings)

    assert keys(groups) == {"Acme": [1, 2]}
    assert all(entry.customer_name == "Acme" for entry in groups["Acme"].entries)


def test_mode_ties_go_to_first_seen_name():
    siblings = [
        record(1, customer_name="Beta"),
        record(2, customer_name="Acme"),
        record(3, customer_name="Acme"),
        record(4, customer_name="Beta"),
    ]
    assert most_common_customer(siblings) == "Beta"


def test_mode_ignores_blank_names():
    siblings = [record(1, customer_name="  "), record(2, customer_name=None), record(3, customer_name="Acme")]
    assert most_common_customer(siblings) == "Acme"


def test_legacy_records_group_by_composite_name():
    pending = [record(1, horse_name="Blaze - [North Barn]")]
    siblings = pending + [record(5, horse_name="Blaze - [North Barn]", customer_name="North Barn LLC")]

    assert keys(group_pending(pending, siblings)) == {"North Barn LLC": [1]}


def test_single_linked_customer_moves_record_out_of_no_customer():
    pending = [record(1, horse_id=7)]

    groups = group_pending(pending, pending, {7: ["Acme Stables"]})

    assert keys(groups) == {"Acme Stables": [1]}
    entry = groups["Acme Stables"].entries[0]
    assert entry.inferred is True
    assert entry.customer_name == "Acme Stables"
    # Inference is shown, not stored
    assert entry.record.customer_name is None


def test_multiple_linked_customers_stay_unassigned():
    pending = [record(1, horse_id=7), record(2, horse_name="Legacy - [Barn]")]

    groups = group_pending(pending, pending, {7: ["Acme", "Beta"]})

    assert keys(groups) == {NO_CUSTOMER: [1, 2]}
    assert groups[NO_CUSTOMER].customer_name is None


def test_no_customer_group_is_listed_last():
    pending = [record(1, horse_id=1), record(2, horse_id=2, customer_name="Acme")]

    assert list(group_pending(pending, pending)) == ["Acme", NO_CUSTOMER]


def test_exact_match_beats_substring_match():
    customers = [
        {"id": "1", "display_name": "Acme Stables North"},
        {"id": "2", "display_name": "acme stables"},
    ]
    assert match_accounting_customer("Acme Stables", customers)["id"] == "2"


def test_substring_match_either_direction_first_wins():
    customers = [
        {"id": "1", "display_name": "Beta"},
        {"id": "2", "display_name": "Acme Stables LLC"},
        {"id": "3", "display_name": "Acme Stables Inc"},
    ]
    assert match_accounting_customer("acme stables", customers)["id"] == "2"
    assert match_accounting_customer("Beta Farms", customers)["id"] == "1"
    assert match_accounting_customer("Gamma", customers) is None
    assert match_accounting_customer("", customers) is None


def test_suggestions_use_names_and_existing_ids():
    pending = [
        record(1, horse_id=1, customer_name="acme"),
        record(2, horse_id=2, customer_name="61"),
        record(3, horse_id=3),
    ]
    customers = [{"id": "58", "display_name": "Acme"}, {"id": "61", "display_name": "Beta Farms"}]
    groups = group_pending(pending, pending)

    suggest_customer_ids(groups, customers)

    assert groups["acme"].suggested_customer_id == "58"
    assert groups["61"].suggested_customer_id == "61"
    assert groups["61"].suggested_customer_name == "Beta Farms"
    assert groups[NO_CUSTOMER].suggested_customer_id is None


def test_legacy_siblings_inform_records_with_stable_id():
    pending = [record(1, horse_id=7, horse_name="Star - [Oak Hill]")]
    siblings = pending + [
        record(20, horse_name="Star - [Oak Hill]", customer_name="Acme Stables"),
        record(21, horse_name="Star - [Oak Hill]", customer_name="Acme Stables"),
    ]

    groups = group_pending(pending, siblings)

    assert keys(groups) == {"Acme Stables": [1]}
    assert groups["Acme Stables"].entries[0].inferred is True


def test_legacy_rows_match_the_horse_current_name():
    horse = SimpleNamespace(composite_name="Star - [Oak Hill]")
    pending = [record(1, horse_id=7, horse_name="Colt - [Oak Hill]", horse=horse)]
    siblings = pending + [record(20, horse_name="Star - [Oak Hill]", customer_name="Acme Stables")]

    assert keys(group_pending(pending, siblings)) == {"Acme Stables": [1]}


def test_same_name_on_another_horse_id_is_not_a_sibling():
    pending = [record(1, horse_id=7, horse_name="Star - [Oak Hill]")]
    siblings = pending + [record(20, horse_id=8, horse_name="Star - [Oak Hill]", customer_name="Beta")]

    assert keys(group_pending(pending, siblings)) == {NO_CUSTOMER: [1]}
