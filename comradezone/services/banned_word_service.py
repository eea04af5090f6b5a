"""Service for the admin-managed part of the group chat selling filter."""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..errors import AlreadyExistsError, NotFoundError
from ..moderation import DEFAULT_SELLING_WORDS
from ..orm.content import BannedWord
from .access import require_admin
from .database import get_db_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BannedWordEntry:
    """One filter word as listed to admins; defaults cannot be removed."""

    id: str
    word: str
    is_default: bool


def normalize_word(word: str) -> str:
    return (word or "").strip().lower()


class BannedWordService:
    """Lists, adds and removes group chat filter words."""

    async def custom_words(self) -> List[str]:
        """Admin-added words, newest first."""
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(
                select(BannedWord.word).order_by(BannedWord.created_at.desc())
            )
            return list(result.scalars().all())

    async def active_words(self) -> List[str]:
        """Built-in selling words followed by admin-added ones."""
        return [*DEFAULT_SELLING_WORDS, *await self.custom_words()]

    async def list_words(self) -> List[BannedWordEntry]:
        """Admin-added words (newest first), then the built-in defaults."""
        db = get_db_service()
        async with db.session() as session:
            result = await session.execute(select(BannedWord).order_by(BannedWord.created_at.desc()))
            custom = [
                BannedWordEntry(id=row.id, word=row.word, is_default=False)
                for row in result.scalars().all()
            ]

        defaults = [
            BannedWordEntry(id=f"default-{index}", word=word, is_default=True)
            for index, word in enumerate(DEFAULT_SELLING_WORDS)
        ]
        return custom + defaults

    async def add_word(self, admin_id: str, word: str) -> BannedWord:
        """Ban a word in group chat.

        The word is trimmed and lowercased before it is stored.

        Raises:
            NotAuthorizedError: If ``admin_id`` is not an admin.
            ValueError: If the word is blank.
            AlreadyExistsError: If the word is already banned.
        """
        normalized = normalize_word(word)
        db = get_db_service()

        try:
            async with db.session() as session:
                await require_admin(session, admin_id)
                if not normalized:
                    raise ValueError("Word is required")

                result = await session.execute(
                    select(BannedWord.id).where(BannedWord.word == normalized)
                )
                if result.scalar_one_or_none() is not None:
                    raise AlreadyExistsError(f"'{normalized}' is already banned")

                banned_word = BannedWord(word=normalized)
                session.add(banned_word)
                await session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same word
            raise AlreadyExistsError(f"'{normalized}' is already banned") from e

        logger.info("Banned word '%s' added by %s", normalized, admin_id)
        return banned_word

    async def remove_word(self, admin_id: str, word_id: str) -> None:
        """Unban an admin-added word.

        Raises:
            NotAuthorizedError: If ``admin_id`` is not an admin.
            NotFoundError: If no admin-added word has this id.
        """
        db = get_db_service()
        async with db.session() as session:
            await require_admin(session, admin_id)
            banned_word = await session.get(BannedWord, word_id)
            if banned_word is None:
                raise NotFoundError(f"Banned word {word_id} not found")
            await session.delete(banned_word)

        logger.info("Banned word %s removed by %s", word_id, admin_id)
