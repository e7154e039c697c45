# tests/test_token_service.py
"""Token issuance: uniqueness across namespaces, forced collisions, backfill idempotence."""

import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.attributes import set_committed_value
from conftest import RC_VERDICT, SAMPLE_IMAGE, add_document, add_vehicle
from app.errors import NotFoundError, StoreError, TokenCollisionError, ValidationError
from app.models.document import Document
from app.models.vehicle import Vehicle
from app.services.document_service import issue_document
from app.services.token_service import commit_token_record
from app.services.vehicle_service import ensure_vehicle_token, list_owned_vehicles, register_vehicle
from app.utils.json_codec import decode_analysis, decode_images


class TestIssueDocument:
    def test_registration_certificate_attaches_to_vehicle(self, db, citizen):
        vehicle = register_vehicle(db, citizen, "DL01AB1234", "Honda City", "Car")

        document = issue_document(db, citizen, "Registration Certificate", [SAMPLE_IMAGE], RC_VERDICT, vehicle.id)

        assert document.status == "VALID"
        assert document.vehicle_id == vehicle.id
        assert document.user_id is None
        assert document.token and document.token != vehicle.token
        assert decode_images(document.image_url) == [SAMPLE_IMAGE]
        assert decode_analysis(document.analysis_result) == RC_VERDICT

    def test_driving_license_attaches_to_user(self, db, citizen):
        verdict = {"detectedType": "Driving License", "status": "EXPIRED", "issues": ["expired"]}
        document = issue_document(db, citizen, "Driving License", [SAMPLE_IMAGE], verdict, vehicle_id=99)

        assert document.user_id == citizen.id
        assert document.vehicle_id is None
        assert document.status == "EXPIRED"

    def test_vehicle_required_for_other_types(self, db, citizen):
        with pytest.raises(ValidationError):
            issue_document(db, citizen, "Insurance Policy", [SAMPLE_IMAGE], RC_VERDICT)
        assert db.query(Document).count() == 0

    def test_other_owners_vehicle_is_not_found(self, db, citizen, make_user):
        stranger = make_user("stranger")
        vehicle = add_vehicle(db, stranger)

        with pytest.raises(NotFoundError):
            issue_document(db, citizen, "PUC Certificate", [SAMPLE_IMAGE], RC_VERDICT, vehicle.id)

    def test_tokens_unique_over_many_issues(self, db, citizen):
        vehicles = [register_vehicle(db, citizen, f"KA0{i}X{i}", "Swift", "Car") for i in range(5)]
        documents = [
            issue_document(db, citizen, "Insurance Policy", [SAMPLE_IMAGE], RC_VERDICT, v.id)
            for v in vehicles for _ in range(3)
        ]
        tokens = [v.token for v in vehicles] + [d.token for d in documents]
        assert len(tokens) == len(set(tokens)) == 20


class TestForcedCollisions:
    def test_document_token_collision(self, db, citizen):
        with patch("app.services.token_service.new_token", return_value="fixed-token"):
            issue_document(db, citizen, "Driving License", [SAMPLE_IMAGE], RC_VERDICT)
            with pytest.raises(TokenCollisionError):
                issue_document(db, citizen, "Driving License", [SAMPLE_IMAGE], RC_VERDICT)
        assert db.query(Document).count() == 1

    def test_vehicle_token_cannot_reuse_document_token(self, db, citizen):
        add_document(db, RC_VERDICT, token="shared-token", user=citizen, doc_type="Driving License")

        with patch("app.services.token_service.new_token", return_value="shared-token"):
            with pytest.raises(TokenCollisionError):
                register_vehicle(db, citizen, "MH12AB0001", "Nexon", "Car")
        assert db.query(Vehicle).count() == 0

    def test_document_token_cannot_reuse_vehicle_token(self, db, citizen):
        vehicle = add_vehicle(db, citizen, token="shared-token")

        with patch("app.services.token_service.new_token", return_value="shared-token"):
            with pytest.raises(TokenCollisionError):
                issue_document(db, citizen, "Insurance Policy", [SAMPLE_IMAGE], RC_VERDICT, vehicle.id)
        assert db.query(Document).count() == 0

    def test_unique_violation_at_commit_is_collision(self):
        db = MagicMock()
        db.commit.side_effect = IntegrityError(
            "INSERT INTO documents", {}, Exception("UNIQUE constraint failed: documents.token")
        )
        with pytest.raises(TokenCollisionError):
            commit_token_record(db, MagicMock(), "store analysed document")
        db.rollback.assert_called_once()
        db.refresh.assert_not_called()

    def test_other_store_failure_is_store_error(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))
        with pytest.raises(StoreError) as exc:
            commit_token_record(db, MagicMock(), "register vehicle")
        assert not isinstance(exc.value, TokenCollisionError)
        db.rollback.assert_called_once()


class TestBackfill:
    def test_existing_token_is_noop(self):
        db = MagicMock()
        vehicle = MagicMock()
        vehicle.token = "already-set"

        assert ensure_vehicle_token(db, vehicle) == "already-set"
        db.commit.assert_not_called()

    def test_backfill_twice_writes_once(self, db, citizen):
        legacy = add_vehicle(db, citizen, token=None)

        first = ensure_vehicle_token(db, legacy)
        with patch.object(db, "commit") as commit:
            second = ensure_vehicle_token(db, legacy)

        assert first and first == second
        commit.assert_not_called()

    def test_concurrent_backfill_keeps_first_token(self, db, citizen):
        legacy = add_vehicle(db, citizen, token=None)
        db.query(Vehicle).filter(Vehicle.id == legacy.id).update({Vehicle.token: "won-elsewhere"})
        db.commit()
        set_committed_value(legacy, "token", None)   # stale read from before the other write

        assert ensure_vehicle_token(db, legacy) == "won-elsewhere"
        assert db.get(Vehicle, legacy.id).token == "won-elsewhere"

    def test_list_backfills_legacy_vehicles(self, db, citizen):
        legacy = add_vehicle(db, citizen, token=None)

        first = list_owned_vehicles(db, citizen)
        token = first[0].token
        second = list_owned_vehicles(db, citizen)

        assert token
        assert second[0].token == token
        assert db.get(Vehicle, legacy.id).token == token
