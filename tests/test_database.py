from __future__ import annotations

import pytest
from sqlmodel import select

from inventory_service.db import atomic
from inventory_service.models import Warehouse


def warehouse_names(database):
    with database.session() as session:
        return session.exec(select(Warehouse.name).order_by(Warehouse.name)).all()


def test_session_scope_commits_on_success(database):
    with database.session_scope() as session:
        session.add(Warehouse(name="Склад W"))

    assert warehouse_names(database) == ["Склад W"]


def test_session_scope_rolls_back_and_reraises(database):
    with pytest.raises(RuntimeError):
        with database.session_scope() as session:
            session.add(Warehouse(name="Склад W"))
            session.flush()
            raise RuntimeError("boom")

    assert warehouse_names(database) == []


def test_nested_atomic_commits_once_with_outer_scope(database):
    with database.session() as session:
        with pytest.raises(RuntimeError):
            with atomic(session, "outer"):
                with atomic(session, "inner"):
                    session.add(Warehouse(name="Склад W"))
                assert session.info["atomic_depth"] == 1
                raise RuntimeError("outer fails after inner finished")

        assert session.info["atomic_depth"] == 0

    assert warehouse_names(database) == []
