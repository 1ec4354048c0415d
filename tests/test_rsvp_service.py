"""Tests for the RSVP workflow: validation, state changes and companion reconciliation."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlmodel import Session, select

from wedvite.models import CompanionInvite, Event, Invite, RsvpStatus
from wedvite.rsvp.errors import (
    DuplicateGuestEmail,
    EventExpired,
    GuestCountRequired,
    GuestEmailCountMismatch,
    GuestLimitExceeded,
    InvalidGuestEmail,
    InviteNotFound,
    NoGuestsAllowed,
    RsvpValidationError,
)
from wedvite.rsvp.service import load_rsvp, submit_rsvp
from wedvite.rsvp.validation import effective_guest_limit


def companions_of(session: Session, invite: Invite) -> dict[str, str]:
    """email -> token for the invite's companion rows."""
    statement = select(CompanionInvite).where(CompanionInvite.invite_id == invite.id)
    return {c.email: c.token for c in session.exec(statement).all()}


def attend_with(session: Session, token: str, emails: list[str], **kwargs):
    return submit_rsvp(
        session,
        token,
        "attending",
        bringing_guests="yes",
        guest_count=len(emails),
        guest_emails=emails,
        **kwargs,
    )


class TestEffectiveGuestLimit:
    """Tests for which guest limit applies."""

    def test_invite_overrides_event(self, invite: Invite, wedding: Event):
        invite.guest_limit = 5
        assert effective_guest_limit(invite, wedding) == 5

    def test_invite_zero_overrides_event(self, invite: Invite, wedding: Event):
        """Test an explicit zero on the invite is not treated as unset."""
        invite.guest_limit = 0
        assert effective_guest_limit(invite, wedding) == 0

    def test_falls_back_to_event(self, invite: Invite, wedding: Event):
        assert effective_guest_limit(invite, wedding) == 2

    def test_defaults_to_zero(self, invite: Invite, wedding: Event):
        wedding.guest_limit = None
        assert effective_guest_limit(invite, wedding) == 0


class TestLoadRsvp:
    """Tests for loading an invitation for display."""

    def test_loads_upcoming(self, session: Session, invite: Invite):
        assert load_rsvp(session, "tok_grace_123").id == invite.id

    def test_past_event(self, session: Session, past_invite: Invite):
        with pytest.raises(EventExpired):
            load_rsvp(session, "tok_larry_456")


class TestSubmitRsvp:
    """Tests for recording a response."""

    def test_attending_without_guests(self, session: Session, invite: Invite):
        """Test a plain yes stores the response with no companions."""
        outcome = submit_rsvp(session, "tok_grace_123", "attending", message="  Can't wait!  ")

        session.refresh(invite)
        assert invite.status == RsvpStatus.ATTENDING
        assert invite.guest_count == 0
        assert invite.message == "Can't wait!"
        assert invite.rsvp_at is not None
        assert outcome.companions == []

    def test_not_attending_forces_zero_guests(self, session: Session, invite: Invite):
        """Test declining ignores guest fields and clears any companions."""
        attend_with(session, "tok_grace_123", ["a@x.com", "b@x.com"])
        assert len(companions_of(session, invite)) == 2

        outcome = submit_rsvp(
            session,
            "tok_grace_123",
            "not-attending",
            bringing_guests="yes",
            guest_count=2,
            guest_emails=["a@x.com", "b@x.com"],
        )

        session.refresh(invite)
        assert invite.status == RsvpStatus.NOT_ATTENDING
        assert invite.guest_count == 0
        assert companions_of(session, invite) == {}
        assert outcome.companions == []

    def test_bringing_guests_no_ignores_count(self, session: Session, invite: Invite):
        """Test companions are only recorded when bringingGuests is yes."""
        submit_rsvp(
            session,
            "tok_grace_123",
            "attending",
            bringing_guests="no",
            guest_count=2,
            guest_emails=["a@x.com", "b@x.com"],
        )
        session.refresh(invite)
        assert invite.guest_count == 0
        assert companions_of(session, invite) == {}

    def test_companions_created_with_distinct_tokens(self, session: Session, invite: Invite):
        """Test guest limit 2 with mixed-case emails stores them lowercased."""
        outcome = attend_with(session, "tok_grace_123", ["a@x.com", "B@X.com"])

        rows = companions_of(session, invite)
        assert set(rows) == {"a@x.com", "b@x.com"}
        assert len(set(rows.values())) == 2
        assert [link.email for link in outcome.companions] == ["a@x.com", "B@X.com"]
        session.refresh(invite)
        assert invite.guest_count == 2

    def test_resubmit_keeps_unchanged_tokens(self, session: Session, invite: Invite):
        """Test a changed list keeps a, drops b and adds c."""
        attend_with(session, "tok_grace_123", ["a@x.com", "B@X.com"])
        before = companions_of(session, invite)

        attend_with(session, "tok_grace_123", ["a@x.com", "c@x.com"])
        after = companions_of(session, invite)

        assert set(after) == {"a@x.com", "c@x.com"}
        assert after["a@x.com"] == before["a@x.com"]
        assert after["c@x.com"] not in before.values()

    def test_resubmit_same_list_is_stable(self, session: Session, invite: Invite):
        attend_with(session, "tok_grace_123", ["a@x.com", "b@x.com"])
        before = companions_of(session, invite)
        attend_with(session, "tok_grace_123", ["A@x.com", "b@x.com"])
        assert companions_of(session, invite) == before

    def test_blank_emails_are_dropped_before_counting(self, session: Session, invite: Invite):
        outcome = submit_rsvp(
            session,
            "tok_grace_123",
            "attending",
            bringing_guests="yes",
            guest_count=1,
            guest_emails=["  ", "a@x.com ", ""],
        )
        assert [link.email for link in outcome.companions] == ["a@x.com"]

    def test_same_behavior_for_every_token_form(self, session: Session, wedding: Event):
        """Test the legacy URL form and the invite id behave like the bare token."""
        legacy = Invite(
            id="invite_legacy_1",
            guest_name="Legacy",
            qr_code="https://wedvite.com/rsvp/legacy_tok",
            event_id=wedding.id,
        )
        session.add(legacy)
        session.commit()

        for token in ("https://wedvite.com/rsvp/legacy_tok", "legacy_tok", "invite_legacy_1"):
            outcome = attend_with(session, token, ["a@x.com"])
            assert outcome.invite.id == "invite_legacy_1"
            assert outcome.guest_count == 1

    def test_unknown_token(self, session: Session, invite: Invite):
        with pytest.raises(InviteNotFound):
            submit_rsvp(session, "nope", "attending")


class TestSubmitRsvpRejections:
    """Tests that invalid submissions change nothing."""

    def assert_untouched(self, session: Session, invite: Invite):
        session.refresh(invite)
        assert invite.status == RsvpStatus.PENDING
        assert invite.rsvp_at is None
        assert companions_of(session, invite) == {}

    def test_event_expired(self, session: Session, past_invite: Invite):
        with pytest.raises(EventExpired) as exc:
            submit_rsvp(session, "tok_larry_456", "attending")
        assert exc.value.status_code == 400
        self.assert_untouched(session, past_invite)

    def test_invalid_response(self, session: Session, invite: Invite):
        with pytest.raises(RsvpValidationError):
            submit_rsvp(session, "tok_grace_123", "maybe")
        with pytest.raises(RsvpValidationError):
            submit_rsvp(session, "tok_grace_123", "pending")
        self.assert_untouched(session, invite)

    def test_no_guests_allowed(self, session: Session, invite: Invite):
        invite.guest_limit = 0
        session.add(invite)
        session.commit()

        with pytest.raises(NoGuestsAllowed):
            attend_with(session, "tok_grace_123", ["a@x.com"])
        self.assert_untouched(session, invite)

    def test_guest_count_required(self, session: Session, invite: Invite):
        with pytest.raises(GuestCountRequired):
            submit_rsvp(session, "tok_grace_123", "attending", bringing_guests="yes", guest_count=0)
        self.assert_untouched(session, invite)

    def test_guest_limit_exceeded(self, session: Session, invite: Invite):
        with pytest.raises(GuestLimitExceeded) as exc:
            attend_with(session, "tok_grace_123", ["a@x.com", "b@x.com", "c@x.com"])
        assert "2" in exc.value.message
        self.assert_untouched(session, invite)

    def test_email_count_mismatch(self, session: Session, invite: Invite):
        with pytest.raises(GuestEmailCountMismatch) as exc:
            submit_rsvp(
                session,
                "tok_grace_123",
                "attending",
                bringing_guests="yes",
                guest_count=2,
                guest_emails=["a@x.com"],
            )
        assert exc.value.message == "Please provide exactly 2 guest emails."
        self.assert_untouched(session, invite)

    def test_invalid_emails_reported_together(self, session: Session, invite: Invite):
        with pytest.raises(InvalidGuestEmail) as exc:
            attend_with(session, "tok_grace_123", ["not-an-email", "also bad@x.com"])
        assert exc.value.emails == ["not-an-email", "also bad@x.com"]
        self.assert_untouched(session, invite)

    def test_duplicate_emails_case_insensitive(self, session: Session, invite: Invite):
        with pytest.raises(DuplicateGuestEmail) as exc:
            attend_with(session, "tok_grace_123", ["a@x.com", "A@X.COM"])
        assert exc.value.emails == ["a@x.com", "A@X.COM"]
        self.assert_untouched(session, invite)

    def test_expiry_checked_at_submission_time(self, session: Session, invite: Invite):
        """Test an explicit submission time after the event is refused."""
        later = datetime.now(UTC) + timedelta(days=60)
        with pytest.raises(EventExpired):
            submit_rsvp(session, "tok_grace_123", "attending", now=later)
