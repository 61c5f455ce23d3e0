import pytest
from bson import ObjectId

from errors import Conflict, NotFound, PreconditionFailed, Unauthorized, ValidationError


def test_register_sets_workflow_defaults(user_workflow, db):
    user = user_workflow.register("Asha", "  Asha@Example.com ", "secret123", "9999999999")

    stored = db.users.find_one({"_id": user["_id"]})
    assert stored["email"] == "asha@example.com"
    assert stored["role"] == "user"
    assert stored["training_progress"] == 0
    assert stored["videos_watched"] == []
    assert stored["quiz_passed"] is False
    assert stored["meeting_scheduled"] is False
    assert stored["dashboard_access"] is False
    assert stored["password"] != "secret123"


def test_register_duplicate_email_is_conflict(user_workflow):
    user_workflow.register("Asha", "asha@example.com", "secret123")

    with pytest.raises(Conflict) as excinfo:
        user_workflow.register("Other", "ASHA@example.com", "secret456")
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "User with this email already exists"


def test_authenticate_returns_user_and_token(user_workflow):
    user_workflow.register("Asha", "asha@example.com", "secret123")

    user, token = user_workflow.authenticate("Asha@Example.com", "secret123")

    assert user["email"] == "asha@example.com"
    assert token


def test_authenticate_failures_are_indistinguishable(user_workflow):
    user_workflow.register("Asha", "asha@example.com", "secret123")

    with pytest.raises(Unauthorized) as wrong_password:
        user_workflow.authenticate("asha@example.com", "bad-password")
    with pytest.raises(Unauthorized) as unknown_email:
        user_workflow.authenticate("nobody@example.com", "secret123")

    assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_authenticate_requires_both_fields(user_workflow):
    with pytest.raises(ValidationError):
        user_workflow.authenticate("asha@example.com", "")


def test_update_progress_is_partial_and_persisted(user_workflow, db):
    user = user_workflow.register("Asha", "asha@example.com", "secret123")

    user_workflow.update_progress(str(user["_id"]), {"video_id": 5})
    user_workflow.update_progress(str(user["_id"]), {"video_id": 5, "training_progress": 1})

    stored = db.users.find_one({"_id": user["_id"]})
    assert stored["videos_watched"] == [5]
    assert stored["training_progress"] == 1
    assert stored["quiz_passed"] is False


def test_update_progress_quiz_failure_resets_videos(user_workflow, db):
    user = user_workflow.register("Asha", "asha@example.com", "secret123")
    for video in (1, 2, 3):
        user_workflow.update_progress(str(user["_id"]), {"video_id": video, "training_progress": video})

    updated = user_workflow.update_progress(
        str(user["_id"]), {"quiz_passed": False, "training_progress": 0, "video_id": 7}
    )

    assert updated["videos_watched"] == []
    assert db.users.find_one({"_id": user["_id"]})["videos_watched"] == []


def test_update_progress_unknown_user(user_workflow):
    with pytest.raises(NotFound):
        user_workflow.update_progress(str(ObjectId()), {"training_progress": 1})


def test_list_candidates_filters_by_workflow_and_role(user_workflow, db):
    eligible = user_workflow.register("Eligible", "eligible@example.com", "secret123")
    failed = user_workflow.register("Failed", "failed@example.com", "secret123")
    approved = user_workflow.register("Approved", "approved@example.com", "secret123")
    user_workflow.update_progress(str(eligible["_id"]), {"quiz_passed": True})
    user_workflow.update_progress(str(approved["_id"]), {"quiz_passed": True, "meeting_scheduled": True})
    user_workflow.approve_dashboard_access(str(approved["_id"]))
    db.users.insert_one({
        "name": "Admin", "email": "boss@example.com", "password": "x", "role": "admin",
        "quiz_passed": True, "dashboard_access": False, "meeting_scheduled": False,
    })

    candidates = user_workflow.list_candidates()

    assert [c["email"] for c in candidates] == ["eligible@example.com"]
    assert all("password" not in c for c in candidates)
    assert failed["email"] not in {c["email"] for c in candidates}


def test_schedule_meeting_requires_date_and_time(user_workflow):
    user = user_workflow.register("Asha", "asha@example.com", "secret123")

    with pytest.raises(ValidationError) as excinfo:
        user_workflow.schedule_meeting(str(user["_id"]), "2026-11-02", None)
    assert excinfo.value.message == "Please provide meeting date and time"


@pytest.mark.parametrize("user_id", [str(ObjectId()), "not-an-object-id"])
def test_schedule_meeting_unknown_user(user_workflow, user_id):
    with pytest.raises(NotFound):
        user_workflow.schedule_meeting(user_id, "2026-11-02", "10:30")


def test_schedule_meeting_sets_flag_only(user_workflow, db):
    user = user_workflow.register("Asha", "asha@example.com", "secret123")

    user_workflow.schedule_meeting(str(user["_id"]), "2026-11-02", "10:30")

    stored = db.users.find_one({"_id": user["_id"]})
    assert stored["meeting_scheduled"] is True
    assert "meeting_date" not in stored
    assert "meeting_time" not in stored


def test_approve_requires_scheduled_meeting(user_workflow, db):
    user = user_workflow.register("Asha", "asha@example.com", "secret123")
    user_workflow.update_progress(str(user["_id"]), {"quiz_passed": True})

    with pytest.raises(PreconditionFailed) as excinfo:
        user_workflow.approve_dashboard_access(str(user["_id"]))
    assert excinfo.value.status_code == 400
    assert db.users.find_one({"_id": user["_id"]})["dashboard_access"] is False

    user_workflow.schedule_meeting(str(user["_id"]), "2026-11-02", "10:30")
    approved = user_workflow.approve_dashboard_access(str(user["_id"]))

    assert approved["dashboard_access"] is True
    assert db.users.find_one({"_id": user["_id"]})["dashboard_access"] is True


def test_approve_unknown_user(user_workflow):
    with pytest.raises(NotFound):
        user_workflow.approve_dashboard_access(str(ObjectId()))


def test_approve_rejects_user_with_access_but_no_meeting(user_workflow, db):
    user = user_workflow.register("Asha", "asha@example.com", "secret123")
    user_workflow.update_progress(str(user["_id"]), {"meeting_scheduled": True, "dashboard_access": True})
    user_workflow.update_progress(str(user["_id"]), {"meeting_scheduled": False})

    with pytest.raises(PreconditionFailed) as excinfo:
        user_workflow.approve_dashboard_access(str(user["_id"]))

    assert excinfo.value.message == "Meeting must be scheduled before approving dashboard access"
    stored = db.users.find_one({"_id": user["_id"]})
    assert stored["meeting_scheduled"] is False
