import logging

import pytest

from marketplace.core.logging import ContextFilter, LogContext, get_logger
from marketplace.db import mongo


def _record(message="hello"):
    return logging.LogRecord("marketplace.test", logging.INFO, __file__, 1, message, None, None)


def test_log_context_nests_and_resets():
    context_filter = ContextFilter()
    with LogContext(user_id="u1"):
        with LogContext(order_id="ORD-1"):
            record = _record()
            context_filter.filter(record)
            assert (record.user_id, record.order_id) == ("u1", "ORD-1")
        record = _record()
        context_filter.filter(record)
        assert record.user_id == "u1"
        assert not hasattr(record, "order_id")

    record = _record()
    context_filter.filter(record)
    assert not hasattr(record, "user_id")


def test_loggers_are_namespaced():
    assert get_logger("orders").name == "marketplace.orders"
    assert get_logger("marketplace.services.cart").name == "marketplace.services.cart"


def test_collections_unavailable_before_connect(monkeypatch):
    monkeypatch.setattr(mongo, "_database", None)
    with pytest.raises(RuntimeError):
        mongo.get_users_collection()


def test_collection_report(db, run):
    run(db.users.insert_one({"email": "someone@example.com"}))
    report = {entry["collection"]: entry for entry in run(mongo.collection_report())}
    assert set(report) == set(mongo.COLLECTIONS)
    assert report["users"]["documents"] == 1
    assert report["orders"]["documents"] == 0
