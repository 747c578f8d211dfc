"""
tests/test_recipients.py
Tests for recipient resolution: dedup, ordering, self-exclusion.
"""

from services.notification.recipients import Role, index_recipients, resolve_recipients
from shared.models.models import Appointment, Chat
from tests.conftest import make_appointment


def _appts(*pairs):
    return [Appointment.model_validate(make_appointment(t, p)) for t, p in pairs]


def test_duplicate_tutor_resolved_once():
    appts = _appts(
        ("tutor@tutorbook.app", "pupil1@tutorbook.app"),
        ("tutor@tutorbook.app", "pupil2@tutorbook.app"),
    )
    assert resolve_recipients(appts, [Role.TO_USER]) == ["tutor@tutorbook.app"]


def test_pupils_in_first_encounter_order():
    appts = _appts(
        ("a@tutorbook.app", "zed@tutorbook.app"),
        ("b@tutorbook.app", "amy@tutorbook.app"),
        ("c@tutorbook.app", "zed@tutorbook.app"),
    )
    assert resolve_recipients(appts, [Role.FROM_USER]) == ["zed@tutorbook.app", "amy@tutorbook.app"]


def test_both_roles_dedupes_across_roles():
    appts = _appts(
        ("tutor@tutorbook.app", "pupil@tutorbook.app"),
        ("pupil@tutorbook.app", "tutor@tutorbook.app"),
    )
    assert resolve_recipients(appts) == ["tutor@tutorbook.app", "pupil@tutorbook.app"]


def test_contact_keys_compare_case_insensitively():
    appts = _appts(
        ("Tutor@tutorbook.app", "p1@tutorbook.app"),
        ("tutor@tutorbook.app", "p2@tutorbook.app"),
    )
    assert resolve_recipients(appts, [Role.TO_USER]) == ["Tutor@tutorbook.app"]


def test_actor_is_excluded():
    chat = Chat.model_validate({
        "createdBy": {"email": "me@tutorbook.app", "name": "Me"},
        "chatterEmails": ["me@tutorbook.app", "you@tutorbook.app", "them@tutorbook.app"],
    })
    assert resolve_recipients([chat], [Role.CHATTER], actor="me@tutorbook.app") == [
        "you@tutorbook.app",
        "them@tutorbook.app",
    ]


def test_chatters_fall_back_to_embedded_profiles():
    chat = Chat.model_validate({
        "createdBy": {"email": "me@tutorbook.app", "name": "Me"},
        "chatters": [
            {"email": "me@tutorbook.app", "name": "Me"},
            {"email": "you@tutorbook.app", "name": "You"},
        ],
    })
    assert resolve_recipients([chat], [Role.CHATTER], actor="me@tutorbook.app") == ["you@tutorbook.app"]


def test_index_maps_key_to_first_record():
    appts = [
        Appointment.model_validate(make_appointment("tutor@tutorbook.app", "p1@tutorbook.app", subject="Math")),
        Appointment.model_validate(make_appointment("tutor@tutorbook.app", "p2@tutorbook.app", subject="Art")),
    ]
    index = index_recipients(appts, [Role.TO_USER])
    assert list(index) == ["tutor@tutorbook.app"]
    assert index["tutor@tutorbook.app"].subject == "Math"


def test_empty_input():
    assert resolve_recipients([], [Role.TO_USER]) == []
