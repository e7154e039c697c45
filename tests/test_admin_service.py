# tests/test_admin_service.py
"""Cascading user delete is all-or-nothing."""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from conftest import RC_VERDICT, add_document, add_vehicle
from app.errors import NotFoundError, StoreError
from app.models.document import Document
from app.models.user import User
from app.models.vehicle import Vehicle
from app.services.admin_service import delete_user_cascade, list_users_with_counts


class TestCascadingDelete:
    def test_failure_leaves_everything_in_place(self, db, citizen):
        vehicle = add_vehicle(db, citizen)
        add_document(db, RC_VERDICT, token="rc", vehicle=vehicle)
        citizen_id = citizen.id

        with patch.object(db, "commit", side_effect=OperationalError("DELETE", {}, Exception("disk I/O error"))):
            with pytest.raises(StoreError):
                delete_user_cascade(db, citizen_id)

        assert db.get(User, citizen_id) is not None
        assert db.query(Vehicle).count() == 1
        assert db.query(Document).count() == 1

    def test_other_users_untouched(self, db, citizen, make_user):
        other = make_user("ravi")
        add_vehicle(db, citizen, token="a")
        keep = add_vehicle(db, other, token="b")
        add_document(db, RC_VERDICT, token="rc-b", vehicle=keep)

        delete_user_cascade(db, citizen.id)

        assert [v.token for v in db.query(Vehicle).all()] == ["b"]
        assert db.query(Document).count() == 1
        assert [u["username"] for u in list_users_with_counts(db)] == ["ravi"]

    def test_unknown_user(self, db):
        with pytest.raises(NotFoundError):
            delete_user_cascade(db, 12345)
