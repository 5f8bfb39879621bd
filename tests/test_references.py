import re
from datetime import datetime

import pytest

from database.models import Customer, Item
from services import references


def test_reference_id_format():
    now = datetime(2025, 3, 7, 14, 5, 9, 123456)
    reference = references.generate_reference_id(now)
    assert re.match(r"^CS-250307-\d{5}-123$", reference)


def test_order_number_format():
    number = references.generate_order_number(datetime(2025, 3, 7))
    assert re.match(r"^ORD-20250307-\d{4}$", number)


def test_unique_reference_gives_up_after_collisions(db, monkeypatch):
    customer = Customer(name="Sanne de Vries", email="sanne@example.nl")
    db.add(customer)
    db.flush()
    db.add(Item(reference_id="CS-250307-00001-000", customer_id=customer.id, title="Jas"))
    db.commit()

    monkeypatch.setattr(references, "generate_reference_id", lambda: "CS-250307-00001-000")
    with pytest.raises(RuntimeError):
        references.unique_reference_id(db)

    monkeypatch.setattr(references, "generate_reference_id", lambda: "CS-250307-00002-000")
    assert references.unique_reference_id(db) == "CS-250307-00002-000"
