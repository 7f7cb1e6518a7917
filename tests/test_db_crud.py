import pytest
from sqlalchemy.exc import IntegrityError

from gigconnect.models.freelancer_profile import FreelancerProfile
from gigconnect.models.gig import Gig
from gigconnect.models.gig_application import GigApplication
from gigconnect.models.message import Message
from gigconnect.models.user import User
from gigconnect.services.messaging import create_message, list_conversation, message_to_public
from gigconnect.utils.error_handlers import NotFoundError


def _user(db, email: str, role: str) -> User:
    user = User(email=email, password_hash="hashed", role=role, first_name="F", last_name="L")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_db_crud_operations_and_relationships(db_session):
    client = _user(db_session, "crud_client@example.com", "client")
    freelancer = _user(db_session, "crud_free@example.com", "freelancer")

    gig = Gig(client_id=client.id, title="CRUD Gig", budget_min=10, budget_max=20)
    db_session.add(gig)
    db_session.commit()
    db_session.refresh(gig)
    assert gig.client.email == "crud_client@example.com"
    assert gig.status == "open"
    assert gig.is_remote is False

    profile = FreelancerProfile(user_id=freelancer.id, title="Dev", hourly_rate=30)
    db_session.add(profile)
    db_session.commit()
    assert freelancer.freelancer_profile.title == "Dev"

    application = GigApplication(gig_id=gig.id, freelancer_id=freelancer.id, proposed_rate=15)
    db_session.add(application)
    db_session.commit()
    db_session.refresh(application)
    assert application.status == "pending"
    assert gig.applications[0].freelancer.email == "crud_free@example.com"


def test_duplicate_email_is_rejected_by_unique_index(db_session):
    _user(db_session, "same@example.com", "client")
    db_session.add(User(email="same@example.com", password_hash="x", role="client", first_name="A", last_name="B"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_duplicate_application_is_rejected_by_unique_constraint(db_session):
    owner = _user(db_session, "owner@example.com", "client")
    freelancer = _user(db_session, "applicant@example.com", "freelancer")
    gig = Gig(client_id=owner.id, title="Race")
    db_session.add(gig)
    db_session.commit()

    db_session.add(GigApplication(gig_id=gig.id, freelancer_id=freelancer.id))
    db_session.commit()
    db_session.add(GigApplication(gig_id=gig.id, freelancer_id=freelancer.id))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_create_message_and_conversation(db_session):
    a = _user(db_session, "ma@example.com", "both")
    b = _user(db_session, "mb@example.com", "both")
    c = _user(db_session, "mc@example.com", "both")

    first = create_message(db_session, sender_id=a.id, receiver_id=b.id, content="hello")
    create_message(db_session, sender_id=c.id, receiver_id=a.id, content="unrelated")
    second = create_message(db_session, sender_id=b.id, receiver_id=a.id, content="hey")

    public = message_to_public(first)
    assert public["sender_id"] == a.id
    assert public["receiver_id"] == b.id
    assert isinstance(public["created_at"], str)

    thread = list_conversation(db_session, user_id=a.id, other_user_id=b.id)
    assert [m.id for m in thread] == [first.id, second.id]
    assert list_conversation(db_session, user_id=b.id, other_user_id=a.id) == thread


def test_create_message_to_unknown_user_fails(db_session):
    a = _user(db_session, "lonely@example.com", "both")
    with pytest.raises(NotFoundError):
        create_message(db_session, sender_id=a.id, receiver_id=a.id + 100, content="anyone?")
    assert db_session.query(Message).count() == 0
