import uuid

import pytest

from exceptions import ConflictException, NotFoundException


def test_apply_creates_pending_application(application_service, make_user):
    member = make_user("member")

    application = application_service.apply(
        member["id"], ["yoga", "hiit", "yoga"], ["ACE CPT"], [{"day": "Mon", "time": "10am"}]
    )

    assert application["status"] == "pending"
    assert application["skills"] == ["yoga", "hiit"]
    assert application["slots"] == [{"day": "Mon", "time": "10am"}]


def test_apply_twice_conflicts(application_service, make_user):
    member = make_user("member")
    application_service.apply(member["id"], ["yoga"], [], [])

    with pytest.raises(ConflictException):
        application_service.apply(member["id"], ["pilates"], [], [])


def test_trainer_cannot_apply(application_service, make_user):
    trainer = make_user("trainer")
    with pytest.raises(ConflictException):
        application_service.apply(trainer["id"], ["yoga"], [], [])


def test_apply_unknown_user(application_service):
    with pytest.raises(NotFoundException):
        application_service.apply(str(uuid.uuid4()), ["yoga"], [], [])


def test_approve_promotes_and_registers_slots(application_service, slot_service, auth_service, make_user):
    member = make_user("member")
    application = application_service.apply(
        member["id"], ["yoga"], [], [{"day": "Mon", "time": "10am"}, {"day": "Wed", "time": "6pm"}]
    )

    approved = application_service.approve(application["id"], feedback="Welcome aboard")

    assert approved["status"] == "approved"
    assert approved["feedback"] == "Welcome aboard"
    assert approved["reviewed_at"]
    assert auth_service.get_profile(member["email"])["role"] == "trainer"
    assert slot_service.get_slots(member["id"]) == [
        {"day": "Mon", "time": "10am"},
        {"day": "Wed", "time": "6pm"},
    ]


def test_reviewed_application_cannot_be_reviewed_again(application_service, make_user):
    member = make_user("member")
    application = application_service.apply(member["id"], ["yoga"], [], [])
    application_service.reject(application["id"], feedback="Needs a certification")

    with pytest.raises(ConflictException):
        application_service.approve(application["id"])


def test_rejected_member_may_apply_again(application_service, make_user):
    member = make_user("member")
    application = application_service.apply(member["id"], ["yoga"], [], [])
    application_service.reject(application["id"])

    again = application_service.apply(member["id"], ["yoga"], ["ACE CPT"], [])

    assert again["status"] == "pending"
    assert len(application_service.list_applications("pending")) == 1
    assert len(application_service.list_applications()) == 2


def test_list_applications_includes_user(application_service, make_user):
    member = make_user("member", name="Sam")
    application_service.apply(member["id"], ["boxing"], [], [])

    listed = application_service.list_applications("pending")

    assert listed[0]["user_email"] == member["email"]
    assert listed[0]["user_name"] == "Sam"


def test_approve_unknown_application(application_service):
    with pytest.raises(NotFoundException):
        application_service.approve(str(uuid.uuid4()))
