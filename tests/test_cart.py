import json

from spice_store.cart import CartStore, FileCartStorage, MemoryCartStorage, cart_key


def test_adding_same_item_twice_increments_quantity():
    cart = CartStore(MemoryCartStorage())
    cart.add_item("P1", "50g", 700)
    cart.add_item("P1", "50g", 700)

    assert len(cart) == 1
    assert cart.get("P1::50g").quantity == 2


def test_different_sizes_are_separate_lines():
    cart = CartStore(MemoryCartStorage())
    cart.add_item("P1", "10g", 140)
    cart.add_item("P1", "50g", 700)

    assert [line.key for line in cart] == ["P1::10g", "P1::50g"]


def test_update_quantity_to_zero_removes_line_and_is_idempotent():
    a = CartStore(MemoryCartStorage())
    b = CartStore(MemoryCartStorage())
    for cart in (a, b):
        cart.add_item("P1", "10g", 140)
        cart.add_item("P2", "25g", 350)

    a.update_quantity("P1::10g", 0)
    a.update_quantity("P1::10g", 0)
    b.remove_item("P1::10g")
    b.remove_item("P1::10g")

    assert [l.model_dump() for l in a] == [l.model_dump() for l in b]
    assert a.get("P1::10g") is None


def test_update_quantity_replaces_value():
    cart = CartStore(MemoryCartStorage())
    cart.add_item("P1", "10g", 140)
    cart.update_quantity("P1::10g", 5)

    assert cart.get("P1::10g").quantity == 5
    assert cart.total() == 700


def test_total_is_display_sum():
    cart = CartStore(MemoryCartStorage())
    cart.add_item("P1", "10g", 140)
    cart.add_item("P1", "10g", 140)
    cart.add_item("P2", "50g", 700)

    assert cart.total() == 980


def test_every_mutation_is_persisted():
    storage = MemoryCartStorage()
    cart = CartStore(storage)
    cart.add_item("P1", "10g", 140, name="Hing")
    cart.add_item("P1", "10g", 140)

    reloaded = CartStore(storage)
    line = reloaded.get("P1::10g")
    assert line.quantity == 2
    assert line.name == "Hing"


def test_corrupt_storage_falls_back_to_empty_cart():
    for raw in ("{not json", '{"a": 1}', "42", '[{"size": "10g"}]'):
        cart = CartStore(MemoryCartStorage(raw))
        assert len(cart) == 0


def test_old_saved_lines_without_cart_id_get_one():
    raw = json.dumps([{"id": "P1", "size": "25g", "price": 350, "quantity": 3}])
    cart = CartStore(MemoryCartStorage(raw))

    assert cart.get(cart_key("P1", "25g")).quantity == 3


def test_clear_empties_cart_and_storage():
    storage = MemoryCartStorage()
    cart = CartStore(storage)
    cart.add_item("P1", "10g", 140)
    cart.clear()

    assert len(cart) == 0
    assert storage.load() is None


def test_order_items_carry_no_prices():
    cart = CartStore(MemoryCartStorage())
    cart.add_item("P1", "10g", 140)
    cart.add_item("P2", None, 99)

    assert cart.to_order_items() == [
        {"id": "P1", "size": "10g", "quantity": 1},
        {"id": "P2", "size": None, "quantity": 1},
    ]


def test_file_storage_survives_restart(tmp_path):
    path = tmp_path / "cart" / "cart.json"
    cart = CartStore(FileCartStorage(path))
    cart.add_item("P1", "100g", 1400)

    assert CartStore(FileCartStorage(path)).get("P1::100g").quantity == 1

    cart.clear()
    assert not path.exists()


def test_undecodable_cart_file_falls_back_to_empty_cart(tmp_path):
    path = tmp_path / "cart.json"
    path.write_bytes(b"\xff\xfe[garbage")

    cart = CartStore(FileCartStorage(path))
    assert len(cart) == 0

    cart.add_item("P1", "10g", 140)
    assert CartStore(FileCartStorage(path)).get("P1::10g").quantity == 1


def test_saved_lines_are_rekeyed_and_merged():
    raw = json.dumps([
        {"id": "P1", "size": "10g", "price": 140, "quantity": 2, "cartId": "stale"},
        {"id": "P1", "size": "10g", "price": 140, "quantity": 1, "cartId": "P1::10g"},
    ])
    cart = CartStore(MemoryCartStorage(raw))

    assert len(cart) == 1
    assert cart.get("P1::10g").quantity == 3

    cart.add_item("P1", "10g", 140)
    assert len(cart) == 1
    assert cart.get("P1::10g").quantity == 4
