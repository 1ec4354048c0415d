"""Tests for invite token generation and resolution."""

import pytest
from sqlmodel import Session

from wedvite.models import CompanionInvite, Event, Invite
from wedvite.rsvp.errors import CompanionInviteNotFound, InviteNotFound
from wedvite.rsvp.tokens import (
    canonical_token,
    generate_companion_token,
    generate_invite_token,
    invite_token,
    resolve_companion_invite,
    resolve_invite,
)


class TestTokenGeneration:
    """Tests for fresh tokens."""

    def test_invite_tokens_are_url_safe_and_distinct(self):
        """Test tokens can go in a URL path and do not repeat."""
        tokens = {generate_invite_token() for _ in range(50)}
        assert len(tokens) == 50
        assert all("/" not in token and "+" not in token for token in tokens)

    def test_companion_tokens_are_longer(self):
        """Test companion tokens carry more entropy than invite tokens."""
        assert len(generate_companion_token()) > len(generate_invite_token())


class TestCanonicalToken:
    """Tests for extracting the bare token from stored values."""

    def test_bare_token_unchanged(self):
        assert canonical_token("abc123") == "abc123"

    def test_url_yields_last_segment(self):
        assert canonical_token("https://wedvite.com/rsvp/abc123") == "abc123"

    def test_trailing_slash_ignored(self):
        assert canonical_token("https://wedvite.com/rsvp/abc123/") == "abc123"

    def test_invite_token_for_legacy_url(self, invite: Invite):
        """Test links for legacy rows carry only the bare token."""
        invite.qr_code = "https://old.wedvite.com/rsvp/legacy_tok"
        assert invite_token(invite) == "legacy_tok"


class TestResolveInvite:
    """Tests for the three-step token lookup."""

    def test_exact_match(self, session: Session, invite: Invite):
        """Test the current bare-token format."""
        assert resolve_invite(session, "tok_grace_123").id == invite.id

    def test_legacy_url_suffix(self, session: Session, wedding: Event):
        """Test rows that stored a full URL ending in the token."""
        legacy = Invite(
            guest_name="Old Link",
            qr_code="https://wedvite.com/rsvp/legacy_tok_789",
            event_id=wedding.id,
        )
        session.add(legacy)
        session.commit()

        assert resolve_invite(session, "legacy_tok_789").id == legacy.id

    def test_direct_invite_id(self, session: Session, wedding: Event):
        """Test the oldest links that carried the invite id."""
        oldest = Invite(
            id="invite_1700000000000_ab12cd",
            guest_name="Oldest Link",
            qr_code="unrelated_token",
            event_id=wedding.id,
        )
        session.add(oldest)
        session.commit()

        assert resolve_invite(session, "invite_1700000000000_ab12cd").id == oldest.id

    def test_exact_match_wins_over_substring(self, session: Session, wedding: Event, invite: Invite):
        """Test an exact token is preferred even if another row contains it."""
        session.add(
            Invite(
                guest_name="Shadow",
                qr_code="https://wedvite.com/rsvp/tok_grace_123_extra",
                event_id=wedding.id,
            )
        )
        session.commit()

        assert resolve_invite(session, "tok_grace_123").id == invite.id

    def test_like_wildcards_match_literally(self, session: Session, invite: Invite):
        """Test % and _ in a token are not treated as wildcards."""
        with pytest.raises(InviteNotFound):
            resolve_invite(session, "%")
        with pytest.raises(InviteNotFound):
            resolve_invite(session, "tok_grace_12_")

    def test_unknown_token(self, session: Session, invite: Invite):
        with pytest.raises(InviteNotFound):
            resolve_invite(session, "does-not-exist")

    def test_empty_token(self, session: Session, invite: Invite):
        """Test an empty token never matches by substring."""
        with pytest.raises(InviteNotFound):
            resolve_invite(session, "")
        with pytest.raises(InviteNotFound):
            resolve_invite(session, "   ")


class TestResolveCompanionInvite:
    """Tests for companion link lookup."""

    def test_resolves_with_invite_and_event(self, session: Session, invite: Invite):
        session.add(CompanionInvite(invite_id=invite.id, email="a@x.com", token="comp_tok"))
        session.commit()

        companion = resolve_companion_invite(session, "comp_tok")
        assert companion.email == "a@x.com"
        assert companion.invite.id == invite.id
        assert companion.invite.event.title == "Anna & Tom's Wedding"

    def test_unknown_token(self, session: Session):
        with pytest.raises(CompanionInviteNotFound):
            resolve_companion_invite(session, "nope")
