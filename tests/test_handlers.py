"""Tests for the submission handlers."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from comradezone.config import Config
from comradezone.handlers import (
    DAILY_LIMIT_REACHED,
    POLICY_REJECTION,
    ActionHandlers,
    anonymous_id_for,
    client_ip_from_headers,
)
from comradezone.orm import (
    AdminBroadcast,
    AnonymousChatLimit,
    BannedWord,
    CampusChatMessage,
    Confession,
    GroupChatMessage,
    ItemRequest,
    Notification,
    NotificationType,
    ReviewStatus,
    Spotted,
    User,
    UserRole,
)
from comradezone.services import get_db_service

from .conftest import add_rows, count_rows


class TestClientIp:
    """Test client IP resolution from proxy headers."""

    def test_first_forwarded_hop_wins(self):
        headers = {"X-Forwarded-For": "10.0.0.5, 172.16.0.1", "X-Real-IP": "172.16.0.9"}
        assert client_ip_from_headers(headers) == "10.0.0.5"

    def test_real_ip_fallback(self):
        assert client_ip_from_headers({"x-real-ip": " 10.0.0.7 "}) == "10.0.0.7"

    def test_unknown_without_headers(self):
        assert client_ip_from_headers({}) == "unknown"


class TestAnonymousId:
    """Test session pseudonyms."""

    def test_stable_and_formatted(self):
        anon = anonymous_id_for("session-1")
        assert anon == anonymous_id_for("session-1")
        assert anon.startswith("Anon#")
        assert len(anon) == len("Anon#0000")


class TestCampusChat:
    """Test the campus chat flow with anonymous throttling."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handlers = ActionHandlers(Config())
        self.ip = "10.0.0.5"

    def test_anonymous_daily_limit(self, run_db):
        """Ten clean messages go through, the eleventh is refused."""

        async def scenario():
            for i in range(10):
                result = await self.handlers.send_chat_message(
                    f"hello campus, message {i}", "anon-session", self.ip
                )
                assert result.success, result.error
                assert result.messages_remaining == 9 - i

            result = await self.handlers.send_chat_message(
                "hello campus, one more", "anon-session", self.ip
            )
            assert result.success is False
            assert result.error == DAILY_LIMIT_REACHED
            assert result.messages_remaining == 0
            assert await count_rows(CampusChatMessage) == 10

        run_db(scenario)

    def test_blocked_message_is_not_stored_or_counted(self, run_db):
        """A policy rejection leaves both the chat and the counter untouched."""

        async def scenario():
            result = await self.handlers.send_chat_message(
                "you should just ky s already", "anon-session", self.ip
            )
            assert result.success is False
            assert result.error == POLICY_REJECTION
            assert await count_rows(CampusChatMessage) == 0
            assert await count_rows(AnonymousChatLimit) == 0

            result = await self.handlers.send_chat_message("good morning", "anon-session", self.ip)
            assert result.success
            assert result.messages_remaining == 9

        run_db(scenario)

    def test_registered_user_is_not_throttled(self, run_db):
        """Signed-in senders skip the per-IP counter."""

        async def scenario():
            user = User(email="student@kabarak.ac.ke")
            await add_rows(user)

            for i in range(12):
                result = await self.handlers.send_chat_message(
                    f"update number {i}", "user-session", self.ip, user_id=user.id
                )
                assert result.success, result.error
                assert result.messages_remaining is None

            assert await count_rows(AnonymousChatLimit) == 0
            assert await count_rows(CampusChatMessage, CampusChatMessage.user_id == user.id) == 12

        run_db(scenario)

    def test_validation(self, run_db):
        """Empty and oversized messages are refused before anything else."""

        async def scenario():
            result = await self.handlers.send_chat_message("   ", "s", self.ip)
            assert result.error == "Message cannot be empty"

            result = await self.handlers.send_chat_message("x" * 501, "s", self.ip)
            assert result.error == "Message too long (max 500 characters)"

            assert await count_rows(AnonymousChatLimit) == 0

        run_db(scenario)

    def test_persistence_failure_is_reported(self, run_db, monkeypatch):
        """Storage errors surface as a generic failure message."""

        async def failing_check(ip_address, now=None):
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(self.handlers.rate_limit_service, "check", failing_check)

        async def scenario():
            result = await self.handlers.send_chat_message("hi all", "s", self.ip)
            assert result.success is False
            assert result.error == "Failed to send message"
            assert await count_rows(CampusChatMessage) == 0

        run_db(scenario)


class TestBroadcastHandlers:
    """Test broadcast dismissal through the handlers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handlers = ActionHandlers(Config())

    def test_mark_read_and_count(self, run_db):
        async def scenario():
            broadcast = AdminBroadcast(title="Notice", content="Chapel at 10")
            await add_rows(broadcast)

            assert await self.handlers.unread_broadcast_count("s1") == 1
            result = await self.handlers.mark_broadcast_read(broadcast.id, "s1")
            assert result.success
            result = await self.handlers.mark_broadcast_read(broadcast.id, "s1")
            assert result.success
            assert await self.handlers.unread_broadcast_count("s1") == 0

        run_db(scenario)


class TestGroupChat:
    """Test the group chat selling filter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handlers = ActionHandlers(Config())

    def test_selling_is_refused(self, run_db):
        async def scenario():
            result = await self.handlers.send_group_message("Selling my laptop, DM me", "s1")
            assert result.success is False
            assert result.error == (
                "Message contains prohibited words: sell, selling, dm me. "
                "Selling is not allowed in group chat."
            )
            assert await count_rows(GroupChatMessage) == 0

        run_db(scenario)

    def test_admin_managed_words_apply(self, run_db):
        async def scenario():
            await add_rows(BannedWord(word="mpesa"))
            result = await self.handlers.send_group_message("Send via MPESA", "s1")
            assert result.success is False
            assert "mpesa" in result.error

        run_db(scenario)

    def test_clean_message_is_stored(self, run_db):
        async def scenario():
            result = await self.handlers.send_group_message(
                "See everyone at the hall", "s1", author_name="  "
            )
            assert result.success, result.error
            assert result.data["anonymous_id"] == anonymous_id_for("s1")

            db = get_db_service()
            async with db.session() as session:
                message = (await session.execute(select(GroupChatMessage))).scalar_one()
            assert message.author_name is None
            assert message.content == "See everyone at the hall"

        run_db(scenario)


class TestReviewSubmissions:
    """Test moderated submissions that notify admins."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handlers = ActionHandlers(Config())

    def test_confession_is_pending_and_admins_notified(self, run_db):
        async def scenario():
            admins = [
                User(email="admin1@kabarak.ac.ke", role=UserRole.ADMIN.value),
                User(email="admin2@kabarak.ac.ke", role=UserRole.ADMIN.value),
            ]
            await add_rows(*admins)

            result = await self.handlers.submit_confession("I secretly love the cafeteria chapati")
            assert result.success, result.error

            assert await count_rows(
                Confession,
                Confession.id == result.data["id"],
                Confession.status == ReviewStatus.PENDING.value,
            ) == 1
            assert await count_rows(
                Notification, Notification.type == NotificationType.CONFESSION_PENDING.value
            ) == 2

        run_db(scenario)

    def test_confession_validation_and_policy(self, run_db):
        async def scenario():
            result = await self.handlers.submit_confession("short")
            assert result.error == "Confession must be at least 10 characters"

            result = await self.handlers.submit_confession("honestly everyone should kys")
            assert result.success is False
            assert await count_rows(Confession) == 0

        run_db(scenario)

    def test_crush_without_admins_still_succeeds(self, run_db):
        async def scenario():
            result = await self.handlers.submit_crush(
                "Library girl", "You always sit by the window on level two", "Library"
            )
            assert result.success, result.error
            assert await count_rows(Notification) == 0

            result = await self.handlers.submit_crush("Hi", "too short")
            assert result.error == "Title must be at least 3 characters"

        run_db(scenario)

    def test_spotted_requires_location(self, run_db):
        async def scenario():
            result = await self.handlers.submit_spotted("Someone left a blue umbrella", "  ")
            assert result.error == "Location is required"

            result = await self.handlers.submit_spotted(
                "Someone left a blue umbrella", "Main gate"
            )
            assert result.success, result.error
            assert await count_rows(Spotted) == 1

        run_db(scenario)


class TestCreateListing:
    """Test listing creation with request matching."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handlers = ActionHandlers(Config())

    def test_listing_fans_out_to_requests(self, run_db):
        async def scenario():
            seller = User(email="seller@kabarak.ac.ke")
            buyer = User(email="buyer@kabarak.ac.ke")
            await add_rows(seller, buyer)
            await add_rows(
                ItemRequest(title="Chem book", category_id="books", requester_id=buyer.id),
                ItemRequest(
                    title="Any textbook",
                    category_id="books",
                    guest_email="visitor@example.com",
                    guest_name="Visitor",
                ),
            )

            result = await self.handlers.create_listing(
                seller.id, "Chemistry textbook", "books", 800.0
            )
            assert result.success, result.error
            assert result.data["notified_users"] == 1
            contacts = result.data["guest_contacts"]
            assert [c.email for c in contacts] == ["visitor@example.com"]
            assert contacts[0].listing_id == result.data["id"]

            assert await count_rows(Notification, Notification.user_id == buyer.id) == 1

        run_db(scenario)

    def test_listing_validation(self, run_db):
        async def scenario():
            seller = User(email="seller@kabarak.ac.ke")
            await add_rows(seller)

            result = await self.handlers.create_listing(seller.id, "Desk", "furniture", -1)
            assert result.error == "Price cannot be negative"

            result = await self.handlers.create_listing(seller.id, "  ", "furniture", 10)
            assert result.error == "Title is required"

        run_db(scenario)


class TestBannedWordHandlers:
    """Test admin management of the group chat filter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handlers = ActionHandlers(Config())

    def test_added_word_filters_group_chat(self, run_db):
        async def scenario():
            admin = User(email="mod@kabarak.ac.ke", role=UserRole.ADMIN.value)
            await add_rows(admin)

            result = await self.handlers.add_banned_word(admin.id, " Tuition ")
            assert result.success, result.error
            word_id = result.data["id"]

            result = await self.handlers.add_banned_word(admin.id, "tuition")
            assert result.error == "Word is already banned"

            result = await self.handlers.send_group_message("Cheap tuition classes here", "s1")
            assert result.success is False
            assert "tuition" in result.error

            listed = await self.handlers.list_banned_words()
            assert listed.data["words"][0].word == "tuition"

            result = await self.handlers.remove_banned_word(admin.id, word_id)
            assert result.success, result.error
            result = await self.handlers.remove_banned_word(admin.id, word_id)
            assert result.error == "Banned word not found"

            result = await self.handlers.send_group_message("Cheap tuition classes here", "s1")
            assert result.success, result.error

        run_db(scenario)

    def test_admin_only(self, run_db):
        async def scenario():
            student = User(email="student@kabarak.ac.ke")
            await add_rows(student)

            result = await self.handlers.add_banned_word(student.id, "tuition")
            assert result.error == "Admin access required"
            result = await self.handlers.remove_banned_word(student.id, "any-id")
            assert result.error == "Admin access required"
            assert await count_rows(BannedWord) == 0

        run_db(scenario)

    def test_blank_word(self, run_db):
        async def scenario():
            admin = User(email="mod@kabarak.ac.ke", role=UserRole.ADMIN.value)
            await add_rows(admin)

            result = await self.handlers.add_banned_word(admin.id, "  ")
            assert result.error == "Word is required"

        run_db(scenario)
