import pydantic
import pytest

from starchat.core.config import settings
from starchat.schemas.conversation import ConversationStatus
from starchat.schemas.identity import Identity, SenderType
from starchat.schemas.message import MessageType
from starchat.schemas.pagination import PageInfo
from starchat.services.conversation_service import parse_status
from starchat.services.exceptions import ValidationError
from starchat.services.messaging_service import validate_message_input
from starchat.storage.attachment_handler import IncomingAttachment, public_url


class TestIdentity:
    def test_counterpart(self):
        assert SenderType.USER.counterpart is SenderType.SUPERSTAR
        assert SenderType.SUPERSTAR.counterpart is SenderType.USER

    def test_constructors(self):
        assert Identity.as_user(3) == Identity(role=SenderType.USER, id=3)
        assert Identity.as_superstar(3).role is SenderType.SUPERSTAR

    def test_unknown_role_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            Identity(role="admin", id=1)

    def test_frozen(self):
        identity = Identity.as_user(1)
        with pytest.raises(pydantic.ValidationError):
            identity.id = 2


class TestPageInfo:
    def test_empty_collection(self):
        info = PageInfo.build(page=1, per_page=15, total=0, item_count=0)

        assert info.last_page == 1
        assert info.from_ is None
        assert info.to is None
        assert info.has_more_pages is False

    def test_middle_page(self):
        info = PageInfo.build(page=2, per_page=2, total=5, item_count=2)

        assert (info.from_, info.to) == (3, 4)
        assert info.last_page == 3
        assert info.has_more_pages is True

    def test_serializes_from_alias(self):
        dumped = PageInfo.build(page=1, per_page=10, total=1, item_count=1).model_dump(
            by_alias=True
        )

        assert dumped["from"] == 1
        assert "from_" not in dumped


class TestParseStatus:
    def test_known_values(self):
        assert parse_status("ended") is ConversationStatus.ENDED

    @pytest.mark.parametrize("value", [None, "", "ACTIVE", "archived"])
    def test_rejected_values(self, value):
        with pytest.raises(ValidationError) as excinfo:
            parse_status(value)
        assert "status" in excinfo.value.errors


class TestValidateMessageInput:
    def test_text_with_body(self):
        assert validate_message_input("text", "hi", None, 100) is MessageType.TEXT

    def test_attachment_without_body(self):
        attachment = IncomingAttachment(content=b"x", filename="x.bin")
        assert validate_message_input("file", None, attachment, 100) is MessageType.FILE

    def test_text_with_only_attachment_still_needs_body(self):
        attachment = IncomingAttachment(content=b"x", filename="x.txt")
        with pytest.raises(ValidationError) as excinfo:
            validate_message_input("text", None, attachment, 100)
        assert "body" in excinfo.value.errors

    def test_collects_every_failing_field(self):
        attachment = IncomingAttachment(content=b"x" * 2048, filename="big")
        with pytest.raises(ValidationError) as excinfo:
            validate_message_input("gif", None, attachment, 1024)
        assert set(excinfo.value.errors) == {"message_type", "file"}
        assert excinfo.value.errors["file"] == [
            "The file may not be greater than 1 kilobytes."
        ]

    def test_empty_file_rejected(self):
        attachment = IncomingAttachment(content=b"", filename="empty.txt")
        with pytest.raises(ValidationError) as excinfo:
            validate_message_input("file", "caption", attachment, 100)
        assert "file" in excinfo.value.errors


def test_public_url_joins_storage_prefix():
    assert public_url("chat_files/a.png") == f"{settings.STORAGE_URL}/chat_files/a.png"
