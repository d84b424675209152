import json

from wallet.config import CATEGORIES_KEY, INCOME_KEY
from wallet.domain import Category, WalletState
from wallet.events import EventBus, GOAL_CREATED, TRANSACTION_ADDED
from wallet.services import WalletService
from wallet.storage import LocalStore, StorageError


def make_service(tmp_path, **kwargs):
    state = WalletState(
        income=1000,
        categories=(
            Category("c0", "Essentials", 50, 0),
            Category("c1", "Savings", 30, 0),
            Category("c2", "Wants", 20, 0),
        ),
    )
    return WalletService(store=LocalStore(tmp_path), state=state, **kwargs)


def stored(tmp_path, key):
    return json.loads((tmp_path / f"{key}.json").read_text(encoding="utf-8"))


def test_loads_state_from_store(tmp_path):
    LocalStore(tmp_path).save_state(WalletState(income=7, categories=(Category("x", "X", 1, 7),)))
    svc = WalletService(store=LocalStore(tmp_path))
    assert svc.state.income == 7
    assert svc.state.categories[0].id == "x"


def test_scenario_persists_after_every_change(tmp_path):
    svc = make_service(tmp_path)

    svc.distribute()
    assert [c.balance for c in svc.state.categories] == [500, 300, 200]
    assert [c["balance"] for c in stored(tmp_path, CATEGORIES_KEY)] == [500, 300, 200]

    tx = svc.add_transaction("Rent", 600, "c0", "expense")
    assert tx.amount == -600
    assert svc.state.categories[0].balance == 0

    goal = svc.create_goal("Trip", 1000, "c1")
    assert goal.saved == 300
    assert svc.state.categories[1].balance == 0

    reloaded = LocalStore(tmp_path).load_state()
    assert reloaded == svc.state


def test_set_income_redistributes_and_persists(tmp_path):
    svc = make_service(tmp_path)
    svc.set_income("2000")
    assert svc.state.income == 2000
    assert [c.balance for c in svc.state.categories] == [1000, 600, 400]
    assert stored(tmp_path, INCOME_KEY) == 2000


def test_category_edits_do_not_redistribute(tmp_path):
    svc = make_service(tmp_path)
    svc.distribute()
    svc.update_category("c0", percent=90)
    assert svc.state.categories[0].percent == 90
    assert svc.state.categories[0].balance == 500

    svc.add_category("Travel")
    assert svc.state.categories[-1].name == "Travel"
    svc.remove_category("c2")
    assert [c.name for c in svc.state.categories] == ["Essentials", "Savings", "Travel"]
    assert [c["name"] for c in stored(tmp_path, CATEGORIES_KEY)] == ["Essentials", "Savings", "Travel"]


def test_overdraft_raises_alert_not_error(tmp_path):
    svc = make_service(tmp_path)
    svc.distribute()
    svc.add_transaction("Rent", 600, "c0", "expense")
    alerts = svc.pop_alerts()
    assert len(alerts) == 1
    assert "Essentials" in alerts[0]
    assert svc.pop_alerts() == []


def test_fully_funded_goal_alert(tmp_path):
    svc = make_service(tmp_path)
    svc.distribute()
    svc.create_goal("Phone", 100, "c1")
    assert any("fully funded" in a for a in svc.pop_alerts())


def test_empty_source_means_no_transfer(tmp_path):
    svc = make_service(tmp_path)
    svc.distribute()
    goal = svc.create_goal("Car", 100, "")
    assert goal.saved == 0
    assert [c.balance for c in svc.state.categories] == [500, 300, 200]


def test_export_import_round_trip(tmp_path):
    svc = make_service(tmp_path)
    svc.distribute()
    svc.add_transaction("Coffee", 4, "c2")
    exported = svc.export()

    # same income, so the imported balances are kept as exported
    other = WalletService(store=LocalStore(tmp_path / "other"), state=WalletState(income=1000))
    result = other.import_(exported)
    assert result.is_right()
    assert other.state == svc.state
    assert LocalStore(tmp_path / "other").load_state() == svc.state


def test_invalid_import_leaves_state_untouched(tmp_path):
    svc = make_service(tmp_path)
    before = svc.state
    result = svc.import_(b"{not json")
    assert result.is_left()
    assert result.get_error()["error"] == "invalid_format"
    assert svc.state is before


def test_partial_import_keeps_other_fields(tmp_path):
    svc = make_service(tmp_path)
    svc.import_(b'{"income": 10}')
    assert svc.state.income == 10
    assert [c.name for c in svc.state.categories] == ["Essentials", "Savings", "Wants"]
    assert [c.balance for c in svc.state.categories] == [5, 3, 2]


def test_import_with_new_income_redistributes(tmp_path):
    svc = WalletService(store=LocalStore(tmp_path), state=WalletState(
        income=100,
        categories=(Category("a", "A", 50, 0), Category("b", "B", 50, 0)),
    ))
    svc.distribute()
    assert [c.balance for c in svc.state.categories] == [50, 50]

    result = svc.import_(b'{"income": 1000}')
    assert [c.balance for c in svc.state.categories] == [500, 500]
    assert result.get_or_else(None) == svc.state
    assert [c["balance"] for c in stored(tmp_path, CATEGORIES_KEY)] == [500, 500]


def test_import_with_same_income_keeps_balances(tmp_path):
    svc = make_service(tmp_path)
    svc.distribute()
    svc.import_(b'{"income": 1000, "categories": [{"id": "c0", "name": "Rent", "percent": 100, "balance": 7}]}')
    assert [(c.name, c.balance) for c in svc.state.categories] == [("Rent", 7)]


def test_categories_with_same_name_are_told_apart_by_id(tmp_path):
    svc = WalletService(store=LocalStore(tmp_path), state=WalletState(income=0))
    svc.add_category()
    svc.add_category()
    first, second = svc.state.categories
    assert first.name == second.name == "New"

    svc.add_transaction("Gift", 30, second.id, "income")
    assert [c.balance for c in svc.state.categories] == [0, 30]


def test_storage_failure_is_surfaced(tmp_path):
    class BrokenStore(LocalStore):
        def save_state(self, state):
            raise StorageError("disk full")

    svc = WalletService(store=BrokenStore(tmp_path), state=WalletState(income=1))
    svc.set_income(5)
    assert svc.state.income == 5
    assert svc.last_error == "disk full"
    assert svc.persist() is False


def test_custom_bus_receives_events(tmp_path):
    bus = EventBus()
    seen = []
    bus.subscribe(TRANSACTION_ADDED, lambda e, p: seen.append(e.name) or {})
    bus.subscribe(GOAL_CREATED, lambda e, p: seen.append(e.name) or {})

    svc = make_service(tmp_path, bus=bus)
    svc.add_transaction("x", 1, None)
    svc.create_goal("g", 1)
    assert seen == [TRANSACTION_ADDED, GOAL_CREATED]
    assert (tmp_path / f"{INCOME_KEY}.json").exists()
