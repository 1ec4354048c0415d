#!/usr/bin/env python3
"""
One-off script to rewrite legacy invite tokens to the bare canonical form.

Older invites stored a full URL such as ``https://wedvite.com/rsvp/<token>``
in ``qr_code``. Links already mailed keep working either way, but bare
tokens let the RSVP lookup hit the exact-match path.

Usage:
    python scripts/normalize_invite_tokens.py [--dry-run]

Options:
    --dry-run    Show what would be rewritten without making changes
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session, select

from wedvite.core.database import engine
from wedvite.models import Invite
from wedvite.rsvp.tokens import canonical_token


def main(dry_run: bool = False):
    """Find URL-style tokens and replace them with their trailing segment."""
    with Session(engine) as session:
        statement = (
            select(Invite)
            .where(Invite.qr_code.contains("/"))
            .order_by(Invite.created_at)
        )
        invites = session.exec(statement).all()

        if not invites:
            print("No legacy invite tokens found.")
            return

        existing = set(session.exec(select(Invite.qr_code)).all())
        planned = {}
        conflicts = []

        print(f"Found {len(invites)} invite(s) with URL-style tokens:\n")

        for invite in invites:
            token = canonical_token(invite.qr_code)
            print(f"{invite.guest_name} ({invite.id})")
            print(f"  Current: {invite.qr_code}")
            print(f"  New:     {token}")

            # Another invite already owns this token, or an earlier row in this run claimed it
            if token in existing or token in planned.values():
                print("  Status: CONFLICT, skipping")
                conflicts.append(invite)
            else:
                planned[invite.id] = token
            print()

        if not planned:
            print("Nothing to rewrite.")
            return

        print(f"\n=== {len(planned)} token(s) to rewrite, {len(conflicts)} conflict(s) ===\n")

        if dry_run:
            print("--- DRY RUN: No changes made ---")
            return

        # Confirm before writing
        response = input(f"Rewrite {len(planned)} invite token(s)? [y/N]: ")
        if response.lower() != "y":
            print("Aborted.")
            return

        for invite in invites:
            if invite.id in planned:
                invite.qr_code = planned[invite.id]
                session.add(invite)

        session.commit()

        print(f"\nComplete: {len(planned)} rewritten, {len(conflicts)} skipped")


if __name__ == "__main__":
    dry_run = "--dry-run" in sys.argv
    main(dry_run=dry_run)
