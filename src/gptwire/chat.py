"""Immutable chat conversations on top of the chat completions endpoint.

Every operation on a :class:`Chat` returns a new conversation; the original
is left untouched, which makes it cheap to branch a conversation and try two
follow-ups from the same point::

    chat = Chat(settings={"model": "gpt-3.5-turbo"}, api=api)
    chat = chat.system("You are terse.").user("Name a colour.")
    chat = chat.submit()
    print(chat.last_message().content)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gptwire.exceptions import InvalidUsageError
from gptwire.response.types import ChatCompletion


class ChatMessage(BaseModel):
    """One message of a conversation."""

    model_config = ConfigDict(frozen=True)

    role: str
    content: str

    def to_log_format(self) -> str:
        return f"{self.role.upper()}: {self.content}"


class Chat(BaseModel):
    """A conversation plus the settings used to continue it.

    Attributes:
        messages: Conversation so far.  Plain dicts are validated into
            :class:`ChatMessage` instances.
        settings: Extra arguments for every completion request (``model``,
            ``temperature``, ...).
        api: The :class:`~gptwire.api.API` used by :meth:`submit`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    messages: tuple[ChatMessage, ...] = ()
    settings: dict[str, Any] = Field(default_factory=dict)
    api: Any = None

    def add_user_message(self, message: str) -> Chat:
        return self.add_message("user", message)

    def add_system_message(self, message: str) -> Chat:
        return self.add_message("system", message)

    def add_assistant_message(self, message: str) -> Chat:
        return self.add_message("assistant", message)

    user = add_user_message
    system = add_system_message
    assistant = add_assistant_message

    def add_message(self, role: str, content: str) -> Chat:
        message = ChatMessage(role=role, content=content)
        return self.model_copy(update={"messages": (*self.messages, message)})

    def submit(self) -> Chat:
        """Send the conversation and return it extended by the assistant's reply.

        Raises:
            InvalidUsageError: If the chat has no API to submit to.
        """
        if self.api is None:
            raise InvalidUsageError("Cannot submit a chat without an API")

        response = self.api.chat_completions.create(
            **self.settings,
            messages=self.raw_messages(),
        )
        reply = response.response()
        return self.add_message(reply.role, reply.content)

    def last_message(self) -> ChatCompletion.Choice.Message:
        return ChatCompletion.Choice.Message(self.messages[-1].model_dump())

    def raw_messages(self) -> list[dict[str, str]]:
        return [message.model_dump() for message in self.messages]

    def to_log_format(self) -> str:
        return "\n\n".join(message.to_log_format() for message in self.messages)
