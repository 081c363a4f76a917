"""
Resolution of Space message authors to Microsoft Entra directory users.
"""

from __future__ import annotations

import logging

from space_migrator.core.config import MigrationConfig
from space_migrator.types import GraphUser, MessageRecord
from space_migrator.utils.logging import log_with_context


class UserResolver:
    """Looks up directory members by email for message authors and team members."""

    def __init__(self, users: list[GraphUser], config: MigrationConfig) -> None:
        self.config = config
        self._by_mail: dict[str, GraphUser] = {}
        for user in users:
            mail = user.get("mail")
            if mail and mail not in self._by_mail:
                self._by_mail[mail] = user
        self.unresolved_authors: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._by_mail)

    def get_member(self, mail: str) -> GraphUser | None:
        """Find a directory user by exact email match."""
        return self._by_mail.get(mail)

    def _member_from_details(self, details: dict) -> GraphUser | None:
        emails = (details.get("user") or {}).get("emails") or []
        for entry in emails:
            member = self.get_member(entry.get("email", ""))
            if member:
                return member
        return None

    def is_system_author(self, message: MessageRecord) -> bool:
        """True for messages posted by applications or other system principals."""
        details = (message.get("author") or {}).get("details") or {}
        return details.get("className") in self.config.system_author_classes

    def resolve_author(
        self, message: MessageRecord, channel: str | None = None
    ) -> GraphUser | None:
        """Directory user to attribute a message to, or ``None`` to skip it.

        Authors with details are matched by any of their emails. Authors
        without details whose name is the deleted-user sentinel fall back to
        the configured fallback member.
        """
        author = message.get("author") or {}
        name = author.get("name", "")
        details = author.get("details")

        member: GraphUser | None = None
        if details:
            member = self._member_from_details(details)
        elif name.strip().lower() == self.config.deleted_author_name.lower():
            if self.config.fallback_member_email:
                member = self.get_member(self.config.fallback_member_email)

        if member is None:
            self.unresolved_authors[name] = self.unresolved_authors.get(name, 0) + 1
            log_with_context(
                logging.WARNING,
                f'Member with "{name}" not found.',
                channel=channel,
                author=name,
            )
        return member
