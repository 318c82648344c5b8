import pytest

from app import config
from app.errors import InvalidTransitionError, NotFoundError, ValidationError
from app.lifecycle import BookingLifecycleManager, UnavailabilityManager
from app.models import UnavailableSlot
from conftest import IN_5_DAYS, TODAY, booking_payload, fixed_clock


@pytest.mark.parametrize("method,path", [
    ("GET", "/admin/bookings"),
    ("PATCH", "/admin/bookings"),
    ("POST", "/admin/unavailable"),
    ("DELETE", "/admin/unavailable"),
    ("GET", "/admin/scents"),
    ("POST", "/admin/scents"),
])
def test_admin_routes_require_token(client, method, path):
    assert client.request(method, path, json={}).status_code == 401
    r = client.request(method, path, json={}, headers={"Authorization": "Bearer wrong"})
    assert r.status_code == 401


class TestBookingList:
    def test_upcoming_and_past_split_and_order(self, admin_client, make_booking):
        later_pm = make_booking(date="2026-03-20", time_of_day="afternoon")
        later_am = make_booking(date="2026-03-20", time_of_day="morning")
        today = make_booking(date=TODAY, time_of_day="afternoon", status="confirmed")
        stale = make_booking(date="2026-03-01", time_of_day="morning")
        done = make_booking(date="2026-03-05", time_of_day="afternoon", status="completed")
        cancelled_future = make_booking(date=IN_5_DAYS, time_of_day="morning", status="cancelled")

        data = admin_client.get("/admin/bookings").json()
        assert [b["id"] for b in data["upcoming"]] == [today.id, later_am.id, later_pm.id]
        assert [b["id"] for b in data["past"]] == [cancelled_future.id, done.id, stale.id]

    def test_completed_bookings_carry_review_message(self, admin_client, make_booking, monkeypatch):
        monkeypatch.setattr(config, "BUSINESS_NAME", "Shine Mobile")
        monkeypatch.setattr(config, "REVIEW_LINKS", [("Google", "https://g.page/r/shine"), ("Facebook", "")])
        done = make_booking(date="2026-03-05", status="completed", name="Casey Nguyen")
        make_booking(date="2026-03-06", status="cancelled")

        past = admin_client.get("/admin/bookings").json()["past"]
        by_id = {b["id"]: b for b in past}
        message = by_id[done.id]["reviewMessage"]
        assert message.startswith("Hi Casey! Thank you for choosing Shine Mobile.")
        assert "Google: https://g.page/r/shine" in message
        assert "Facebook" not in message
        assert message.endswith("Thanks again!")
        assert all("reviewMessage" not in b for b in past if b["id"] != done.id)


class TestStatusUpdates:
    def test_complete_and_cancel(self, admin_client, make_booking):
        a = make_booking(time_of_day="morning")
        b = make_booking(time_of_day="afternoon")
        r = admin_client.patch("/admin/bookings", json={"id": a.id, "status": "completed"})
        assert r.status_code == 200
        assert r.json()["booking"]["status"] == "completed"
        r = admin_client.patch("/admin/bookings", json={"id": b.id, "status": "cancelled"})
        assert r.json()["booking"]["status"] == "cancelled"

    def test_unknown_booking_is_404(self, admin_client):
        r = admin_client.patch("/admin/bookings", json={"id": "missing", "status": "completed"})
        assert r.status_code == 404

    def test_unknown_status_is_400(self, admin_client, make_booking):
        b = make_booking()
        r = admin_client.patch("/admin/bookings", json={"id": b.id, "status": "archived"})
        assert r.status_code == 400

    def test_malformed_rebook_date_is_400(self, admin_client, make_booking):
        b = make_booking(status="cancelled")
        r = admin_client.patch(
            "/admin/bookings", json={"id": b.id, "status": "pending", "date": "next week", "timeOfDay": "morning"}
        )
        assert r.status_code == 400

    def test_rebook_moves_cancelled_booking_and_takes_slot(self, admin_client, make_booking):
        b = make_booking(date=IN_5_DAYS, time_of_day="morning", status="cancelled")
        r = admin_client.patch(
            "/admin/bookings",
            json={"id": b.id, "status": "pending", "date": "2026-03-22", "timeOfDay": "afternoon"},
        )
        assert r.status_code == 200
        rebooked = r.json()["booking"]
        assert rebooked["id"] == b.id
        assert rebooked["status"] == "pending"
        assert (rebooked["date"], rebooked["timeOfDay"]) == ("2026-03-22", "afternoon")

        taken = admin_client.get("/bookings").json()["bookings"]
        assert {"date": "2026-03-22", "timeframe": "afternoon"} in taken
        assert admin_client.post(
            "/bookings", json=booking_payload(date="2026-03-22", timeOfDay="afternoon")
        ).status_code == 409

    def test_rebook_onto_pending_slot_conflicts(self, admin_client, make_booking):
        make_booking(date="2026-03-22", time_of_day="morning")
        b = make_booking(date=IN_5_DAYS, status="cancelled")
        r = admin_client.patch(
            "/admin/bookings",
            json={"id": b.id, "status": "pending", "date": "2026-03-22", "timeOfDay": "morning"},
        )
        assert r.status_code == 409

    def test_loose_transitions_by_default(self, admin_client, make_booking):
        b = make_booking(status="completed")
        r = admin_client.patch("/admin/bookings", json={"id": b.id, "status": "confirmed"})
        assert r.status_code == 200


class TestStrictTransitions:
    def test_completed_is_final(self, test_db_session, make_booking):
        manager = BookingLifecycleManager(test_db_session, clock=fixed_clock, strict=True)
        b = make_booking(status="completed")
        with pytest.raises(InvalidTransitionError):
            manager.update_status(b.id, "pending")

    def test_rebook_needs_a_new_slot(self, test_db_session, make_booking):
        manager = BookingLifecycleManager(test_db_session, clock=fixed_clock, strict=True)
        b = make_booking(status="cancelled")
        with pytest.raises(InvalidTransitionError):
            manager.update_status(b.id, "pending")
        assert manager.update_status(b.id, "pending", "2026-03-25", "morning").status == "pending"

    def test_allowed_transitions(self, test_db_session, make_booking):
        manager = BookingLifecycleManager(test_db_session, clock=fixed_clock, strict=True)
        b = make_booking()
        assert manager.update_status(b.id, "confirmed").status == "confirmed"
        assert manager.update_status(b.id, "completed").status == "completed"

    def test_not_found_before_transition_check(self, test_db_session):
        manager = BookingLifecycleManager(test_db_session, clock=fixed_clock, strict=True)
        with pytest.raises(NotFoundError):
            manager.update_status("nope", "pending")


class TestUnavailableSlots:
    def test_add_list_remove(self, admin_client):
        slots = [{"date": IN_5_DAYS, "timeOfDay": "all"}, {"date": "2026-03-18", "timeOfDay": "morning"}]
        r = admin_client.post("/admin/unavailable", json={"slots": slots})
        assert r.json() == {"success": True, "count": 2}

        listed = admin_client.get("/admin/unavailable").json()["slots"]
        assert {(s["date"], s["timeOfDay"]) for s in listed} == {(IN_5_DAYS, "all"), ("2026-03-18", "morning")}

        r = admin_client.request("DELETE", "/admin/unavailable", json={"slots": slots[:1]})
        assert r.json() == {"success": True, "removed": 1}
        listed = admin_client.get("/admin/unavailable").json()["slots"]
        assert [(s["date"], s["timeOfDay"]) for s in listed] == [("2026-03-18", "morning")]

    def test_duplicate_blocks_are_allowed(self, admin_client, test_db_session):
        body = {"slots": [{"date": IN_5_DAYS, "timeOfDay": "morning"}]}
        admin_client.post("/admin/unavailable", json=body)
        admin_client.post("/admin/unavailable", json=body)
        assert test_db_session.query(UnavailableSlot).count() == 2
        assert admin_client.get("/bookings").json()["bookings"] == [{"date": IN_5_DAYS, "timeframe": "morning"}]

    def test_removing_missing_block_is_noop(self, admin_client, make_block, test_db_session):
        keep = make_block(date="2026-03-18", time_of_day="afternoon")
        r = admin_client.request(
            "DELETE", "/admin/unavailable", json={"slots": [{"date": "2026-03-18", "timeOfDay": "morning"}]}
        )
        assert r.status_code == 200
        assert r.json()["removed"] == 0
        assert test_db_session.query(UnavailableSlot).one().id == keep.id

    def test_remove_matches_exact_time_of_day(self, test_db_session, make_block):
        make_block(time_of_day="all")
        manager = UnavailabilityManager(test_db_session)
        assert manager.remove_unavailable_slots([(IN_5_DAYS, "morning")]) == 0
        assert len(manager.list_unavailable_slots()) == 1

    @pytest.mark.parametrize("body", [
        {"slots": []},
        {},
        {"slots": [{"date": IN_5_DAYS, "timeOfDay": "evening"}]},
        {"slots": [{"date": "2026-13-01", "timeOfDay": "all"}]},
    ])
    def test_invalid_batches_are_400(self, admin_client, body):
        assert admin_client.post("/admin/unavailable", json=body).status_code == 400

    def test_empty_batch_rejected_by_manager(self, test_db_session):
        with pytest.raises(ValidationError):
            UnavailabilityManager(test_db_session).add_unavailable_slots([])


class TestScents:
    def test_crud(self, admin_client):
        r = admin_client.post("/admin/scents", json={"name": "  Coconut  "})
        assert r.status_code == 200
        scent = r.json()["scent"]
        assert scent["name"] == "Coconut"
        assert scent["enabled"] is True

        assert admin_client.patch("/admin/scents", json={"id": scent["id"], "enabled": False}).status_code == 200
        assert admin_client.get("/scents").json()["scents"] == []
        assert admin_client.get("/admin/scents").json()["scents"][0]["enabled"] is False

        assert admin_client.request("DELETE", "/admin/scents", json={"id": scent["id"]}).status_code == 200
        assert admin_client.get("/admin/scents").json()["scents"] == []

    def test_duplicate_name_is_400(self, admin_client, make_scent):
        make_scent(name="Vanilla")
        r = admin_client.post("/admin/scents", json={"name": "Vanilla"})
        assert r.status_code == 400
        assert r.json()["detail"] == "A scent with this name already exists"

    def test_blank_name_is_400(self, admin_client):
        assert admin_client.post("/admin/scents", json={"name": "  "}).status_code == 400

    def test_toggle_unknown_scent_is_404(self, admin_client):
        assert admin_client.patch("/admin/scents", json={"id": "missing", "enabled": True}).status_code == 404

    def test_disabling_scent_keeps_booking_text(self, admin_client, make_scent):
        scent = make_scent(name="Ocean Breeze")
        booking = admin_client.post("/bookings", json=booking_payload(scent="Ocean Breeze")).json()["booking"]
        admin_client.patch("/admin/scents", json={"id": scent.id, "enabled": False})
        upcoming = admin_client.get("/admin/bookings").json()["upcoming"]
        assert upcoming[0]["id"] == booking["id"]
        assert upcoming[0]["scent"] == "Ocean Breeze"
