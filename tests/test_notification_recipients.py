"""Stakeholder resolution and preference/role filtering."""

from conftest import ALL_ON, FakeTicketStore, client_user, make_ticket, prefs, staff

from helpdesk.db.enums import NotificationEventType, NotificationPreference, Role
from helpdesk.schemas.notification import NotificationRequest
from helpdesk.services.notification_recipients import (
    authorizing_preference,
    filter_recipients,
    resolve_candidates,
)


def _event(type_: NotificationEventType, **kwargs) -> NotificationRequest:
    return NotificationRequest(
        type=type_,
        ticket_id="t1",
        ticket_title="Printer broken",
        company_id="c1",
        **kwargs,
    )


# =============================================================================
# resolve_candidates
# =============================================================================


def test_new_ticket_candidates_are_company_admins_and_technicians():
    store = FakeTicketStore(
        profiles=[
            staff("admin1", Role.COMPANY_ADMIN),
            staff("tech1", Role.TECHNICIAN),
            staff("owner1", Role.SYSTEM_OWNER),
            client_user("client1"),
            staff("tech-other-company", Role.TECHNICIAN, company_id="c2"),
        ]
    )
    ticket = make_ticket(created_by="client1")

    candidates = resolve_candidates(_event(NotificationEventType.NEW_TICKET), ticket, store)

    assert candidates == {"admin1", "tech1"}


def test_status_change_candidates_are_creator_and_assignee():
    ticket = make_ticket(created_by="userC", assigned_to="userB")

    candidates = resolve_candidates(
        _event(NotificationEventType.STATUS_CHANGE), ticket, FakeTicketStore()
    )

    assert candidates == {"userC", "userB"}


def test_status_change_without_assignee_only_includes_creator():
    ticket = make_ticket(created_by="userC", assigned_to=None)

    candidates = resolve_candidates(
        _event(NotificationEventType.STATUS_CHANGE), ticket, FakeTicketStore()
    )

    assert candidates == {"userC"}


def test_assignment_candidates_include_previous_assignee():
    ticket = make_ticket(created_by="userC", assigned_to="userB")
    event = _event(
        NotificationEventType.ASSIGNMENT, old_assigned_to="userA", new_assigned_to="userB"
    )

    assert resolve_candidates(event, ticket, FakeTicketStore()) == {"userA", "userB", "userC"}


def test_assignment_falls_back_to_ticket_assignee_when_descriptor_omits_it():
    ticket = make_ticket(created_by="userC", assigned_to="userB")
    event = _event(NotificationEventType.ASSIGNMENT)

    assert resolve_candidates(event, ticket, FakeTicketStore()) == {"userB", "userC"}


def test_new_comment_candidates_are_creator_and_assignee():
    ticket = make_ticket(created_by="userC", assigned_to="userB")
    event = _event(NotificationEventType.NEW_COMMENT, comment_user="userB")

    assert resolve_candidates(event, ticket, FakeTicketStore()) == {"userB", "userC"}


def test_creator_who_is_also_assignee_appears_once():
    ticket = make_ticket(created_by="tech1", assigned_to="tech1")
    profiles = {"tech1": staff("tech1")}
    preferences = {"tech1": prefs("tech1", **ALL_ON)}
    event = _event(NotificationEventType.STATUS_CHANGE, old_status="open", new_status="resolved")

    candidates = resolve_candidates(event, ticket, FakeTicketStore())
    recipients = filter_recipients(event, ticket, candidates, profiles, preferences)

    assert candidates == {"tech1"}
    assert [r.user_id for r in recipients] == ["tech1"]


# =============================================================================
# filter_recipients
# =============================================================================


def test_new_ticket_never_includes_clients_even_with_all_flags_on():
    ticket = make_ticket(created_by="client1")
    profiles = {"client1": client_user("client1"), "tech1": staff("tech1")}
    preferences = {
        "client1": prefs("client1", **ALL_ON),
        "tech1": prefs("tech1", email_on_new_ticket=True),
    }

    recipients = filter_recipients(
        _event(NotificationEventType.NEW_TICKET),
        ticket,
        {"client1", "tech1"},
        profiles,
        preferences,
    )

    assert [r.user_id for r in recipients] == ["tech1"]
    assert recipients[0].authorized_by == NotificationPreference.EMAIL_ON_NEW_TICKET


def test_new_ticket_staff_without_flag_is_excluded():
    ticket = make_ticket()
    recipients = filter_recipients(
        _event(NotificationEventType.NEW_TICKET),
        ticket,
        {"tech1"},
        {"tech1": staff("tech1")},
        {"tech1": prefs("tech1", email_on_status_change=True)},
    )

    assert recipients == []


def test_status_change_client_creator_uses_my_ticket_flag():
    ticket = make_ticket(created_by="client1")
    event = _event(NotificationEventType.STATUS_CHANGE, old_status="open", new_status="closed")
    profiles = {"client1": client_user("client1")}

    only_general = filter_recipients(
        event, ticket, {"client1"}, profiles,
        {"client1": prefs("client1", email_on_status_change=True)},
    )
    with_own_flag = filter_recipients(
        event, ticket, {"client1"}, profiles,
        {"client1": prefs("client1", email_on_my_ticket_status_change=True)},
    )

    assert only_general == []
    assert [r.user_id for r in with_own_flag] == ["client1"]
    assert with_own_flag[0].authorized_by == NotificationPreference.EMAIL_ON_MY_TICKET_STATUS_CHANGE


def test_status_change_client_who_is_not_creator_is_excluded():
    ticket = make_ticket(created_by="client1", assigned_to="client2")
    event = _event(NotificationEventType.STATUS_CHANGE, old_status="open", new_status="closed")

    recipients = filter_recipients(
        event,
        ticket,
        {"client2"},
        {"client2": client_user("client2")},
        {"client2": prefs("client2", **ALL_ON)},
    )

    assert recipients == []


def test_status_change_staff_uses_general_flag():
    ticket = make_ticket(assigned_to="tech1")
    event = _event(NotificationEventType.STATUS_CHANGE)

    recipients = filter_recipients(
        event,
        ticket,
        {"tech1"},
        {"tech1": staff("tech1")},
        {"tech1": prefs("tech1", email_on_status_change=True)},
    )

    assert [r.user_id for r in recipients] == ["tech1"]
    assert recipients[0].authorized_by == NotificationPreference.EMAIL_ON_STATUS_CHANGE


def test_assignment_excludes_clients():
    ticket = make_ticket(created_by="client1")
    recipients = filter_recipients(
        _event(NotificationEventType.ASSIGNMENT, new_assigned_to="tech1"),
        ticket,
        {"client1", "tech1"},
        {"client1": client_user("client1"), "tech1": staff("tech1")},
        {
            "client1": prefs("client1", **ALL_ON),
            "tech1": prefs("tech1", email_on_assignment=True),
        },
    )

    assert [r.user_id for r in recipients] == ["tech1"]


def test_private_comment_never_reaches_clients():
    ticket = make_ticket(created_by="client1", assigned_to="tech1")
    event = _event(NotificationEventType.NEW_COMMENT, comment_user="tech1", is_private=True)

    recipients = filter_recipients(
        event,
        ticket,
        {"client1", "tech1"},
        {"client1": client_user("client1"), "tech1": staff("tech1")},
        {"client1": prefs("client1", **ALL_ON), "tech1": prefs("tech1", **ALL_ON)},
    )

    assert [r.user_id for r in recipients] == ["tech1"]
    assert all(r.role != Role.CLIENT_USER.value for r in recipients)


def test_public_comment_reaches_client_creator_with_comment_flag():
    ticket = make_ticket(created_by="client1", assigned_to="tech1")
    event = _event(NotificationEventType.NEW_COMMENT, comment_user="tech1", is_private=False)

    recipients = filter_recipients(
        event,
        ticket,
        {"client1", "tech1"},
        {"client1": client_user("client1"), "tech1": staff("tech1")},
        {
            "client1": prefs("client1", email_on_my_ticket_comments=True),
            "tech1": prefs("tech1", email_on_assignment=True),
        },
    )

    assert [r.user_id for r in recipients] == ["client1"]
    assert recipients[0].authorized_by == NotificationPreference.EMAIL_ON_MY_TICKET_COMMENTS


def test_comment_for_staff_is_gated_by_status_change_flag():
    ticket = make_ticket(created_by="client1", assigned_to="tech1")
    event = _event(NotificationEventType.NEW_COMMENT)

    assert (
        authorizing_preference(event, ticket, staff("tech1"))
        == NotificationPreference.EMAIL_ON_STATUS_CHANGE
    )


def test_candidate_without_profile_is_dropped():
    ticket = make_ticket(created_by="ghost")
    recipients = filter_recipients(
        _event(NotificationEventType.STATUS_CHANGE),
        ticket,
        {"ghost"},
        {},
        {"ghost": prefs("ghost", **ALL_ON)},
    )

    assert recipients == []


def test_candidate_without_preference_row_is_treated_as_opted_out():
    ticket = make_ticket(assigned_to="tech1")
    recipients = filter_recipients(
        _event(NotificationEventType.STATUS_CHANGE),
        ticket,
        {"tech1"},
        {"tech1": staff("tech1")},
        {},
    )

    assert recipients == []
