"""Unit tests for the conversation module."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from finnexus.conversation import Message, ResponseAssembler, Role, Session, coerce_role


class TestRole:
    """Tests for Role and coerce_role."""

    def test_roles_exist(self):
        """Test that all roles are defined."""
        assert Role.USER == "user"
        assert Role.ASSISTANT == "assistant"
        assert Role.SYSTEM == "system"

    @pytest.mark.parametrize("raw,expected", [
        ("user", Role.USER),
        ("assistant", Role.ASSISTANT),
        ("system", Role.SYSTEM),
        ("  Assistant ", Role.ASSISTANT),
        (Role.USER, Role.USER),
    ])
    def test_known_roles(self, raw, expected):
        """Test that known roles map onto Role."""
        assert coerce_role(raw) == expected

    @pytest.mark.parametrize("raw", ["tool", "", None, 3, "developer"])
    def test_unknown_roles_clamped_to_system(self, raw, caplog):
        """Test that unknown roles become system and are logged."""
        assert coerce_role(raw) == Role.SYSTEM
        assert "Unrecognized message role" in caplog.text

    def test_message_rejects_unknown_role_directly(self):
        """Test that Message itself only accepts the closed role set."""
        with pytest.raises(ValueError):
            Message(role="tool", content="x")


class TestMessage:
    """Tests for Message model."""

    def test_ids_are_generated(self):
        """Test that each message gets its own id."""
        a = Message(role=Role.USER, content="a")
        b = Message(role=Role.USER, content="a")
        assert a.id != b.id

    def test_from_history(self):
        """Test building a message from a history record."""
        message = Message.from_history({
            "id": 17,
            "role": "assistant",
            "content": "Rates are unchanged.",
            "created_at": "2024-05-01T09:30:00Z",
            "session_id": "ignored",
        })

        assert message.id == "17"
        assert message.role == Role.ASSISTANT
        assert message.content == "Rates are unchanged."
        assert message.created_at.year == 2024

    def test_from_history_fills_missing_fields(self):
        """Test that missing id and null content are tolerated."""
        message = Message.from_history({"role": "weird", "content": None})

        assert message.id
        assert message.role == Role.SYSTEM
        assert message.content == ""
        assert message.created_at is None


class TestSession:
    """Tests for Session model."""

    def test_session_defaults(self):
        """Test that only the id is required."""
        session = Session(id="abc")
        assert session.title == ""
        assert session.created_at is None


class TestResponseAssembler:
    """Tests for ResponseAssembler."""

    def test_first_token_appends_assistant_message(self):
        """Test that a token with no messages starts an assistant message."""
        messages: list[Message] = []
        assembler = ResponseAssembler()

        assembler.add_token(messages, "Hi")

        assert len(messages) == 1
        assert messages[0].role == Role.ASSISTANT
        assert messages[0].content == "Hi"

    def test_token_after_user_appends(self):
        """Test that a token after a user message starts a new answer."""
        messages = [Message(role=Role.USER, content="q")]
        assembler = ResponseAssembler()

        assembler.add_token(messages, "a")

        assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT]

    def test_token_after_non_user_message_overwrites_in_place(self):
        """Test that only a user message makes the next token start a new message."""
        messages = [
            Message(role=Role.USER, content="q"),
            Message(role=Role.SYSTEM, content="notice"),
        ]
        assembler = ResponseAssembler()

        result = assembler.add_token(messages, "A")

        assert len(messages) == 2
        assert result is messages[-1]
        assert messages[-1].content == "A"

    def test_token_overwrites_open_assistant_message(self):
        """Test that the open assistant message mirrors the buffer."""
        messages: list[Message] = []
        assembler = ResponseAssembler()

        first = assembler.add_token(messages, "Hello")
        second = assembler.add_token(messages, " world")

        assert first is second
        assert len(messages) == 1
        assert messages[0].content == "Hello world"
        assert assembler.text == "Hello world"

    def test_reset_clears_buffer(self):
        """Test that reset starts a new turn."""
        assembler = ResponseAssembler()
        assembler.add_token([], "old")

        assembler.reset()

        assert assembler.text == ""

    def test_user_message_immutable(self):
        """Test that tokens never rewrite a user message."""
        user = Message(role=Role.USER, content="question")
        messages = [user]
        assembler = ResponseAssembler()

        assembler.add_token(messages, "answer")

        assert user.content == "question"

    @given(st.lists(st.text(), min_size=1, max_size=30))
    def test_concatenation(self, fragments: list[str]):
        """Property test: Tokens of one turn concatenate into one message."""
        messages = [Message(role=Role.USER, content="q")]
        assembler = ResponseAssembler()

        for fragment in fragments:
            assembler.add_token(messages, fragment)

        assert len(messages) == 2
        assert messages[-1].role == Role.ASSISTANT
        assert messages[-1].content == "".join(fragments)

    @given(st.lists(st.lists(st.text(max_size=5), min_size=1, max_size=5), min_size=1, max_size=5))
    def test_one_answer_per_turn(self, turns: list[list[str]]):
        """Property test: Each user turn gets exactly one assistant message."""
        messages: list[Message] = []
        assembler = ResponseAssembler()

        for turn in turns:
            messages.append(Message(role=Role.USER, content="q"))
            assembler.reset()
            for fragment in turn:
                assembler.add_token(messages, fragment)

        answers = [m.content for m in messages if m.role == Role.ASSISTANT]
        assert answers == ["".join(turn) for turn in turns]
