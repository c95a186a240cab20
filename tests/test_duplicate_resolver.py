import uuid

import pytest
from sqlalchemy.exc import OperationalError

from conftest import API, START, order_payload

from orderdesk.core.errors import TransientError
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.routers import orders as orders_router
from orderdesk.schemas.order import OrderItemCreate
from orderdesk.services.duplicate_resolver import DuplicateResolver, lock_keys


class FailingRepo(OrderRepository):
    calls = 0

    def find_same_day_lines(self, *args, **kwargs):
        FailingRepo.calls += 1
        raise OperationalError("SELECT", {}, Exception("database is locked"))


class TestResolver:
    def test_lock_keys_cover_customer_and_every_product(self):
        customer_id = uuid.uuid4()
        p1, p2 = uuid.uuid4(), uuid.uuid4()
        keys = lock_keys(customer_id, [p1, p2], START.date())
        assert keys == [
            ("customer", customer_id),
            ("dup", customer_id, p1, START.date()),
            ("dup", customer_id, p2, START.date()),
        ]

    def test_lookup_failure_is_transient(self, session):
        resolver = DuplicateResolver(FailingRepo())
        items = [OrderItemCreate(product_id=uuid.uuid4(), quantity=1)]
        with pytest.raises(TransientError):
            resolver.resolve(session, uuid.uuid4(), items, {}, START.date(), None)

    def test_ignore_skips_the_lookup(self, session):
        FailingRepo.calls = 0
        resolver = DuplicateResolver(FailingRepo())
        items = [OrderItemCreate(product_id=uuid.uuid4(), quantity=1)]

        plan = resolver.resolve(session, uuid.uuid4(), items, {}, START.date(), "ignore")

        assert plan.remaining == items
        assert plan.merges == []
        assert FailingRepo.calls == 0

    def test_transient_error_reaches_the_client(self, client, monkeypatch, vendedor, customer, products):
        _, headers = vendedor
        monkeypatch.setattr(orders_router.service.resolver, "order_repo", FailingRepo())

        r = client.post(
            f"{API}/orders",
            json=order_payload(customer, [(products[0], 1)]),
            headers=headers,
        )

        assert r.status_code == 503
        assert r.json()["detail"]["kind"] == "transient_error"
        assert client.get(f"{API}/orders", headers=headers).json() == []
