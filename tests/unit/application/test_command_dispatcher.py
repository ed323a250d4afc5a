"""Tests for CLI CommandDispatcher and command handlers"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from galynx.application.events import EventBus
from galynx.application.services import CommandDispatcher
from galynx.shared.exceptions import HttpError, UnauthenticatedError
from galynx.validation import AuthSession, Channel, MessageList, TokenBundle, User
from tests.helpers.fake_ws import DummyWebSocket, FakeConnector
from tests.helpers.payloads import token_payload, user_payload


@pytest.fixture
def mock_client():
    """Create a mock GalynxClient for testing the dispatcher."""
    client = Mock()
    user = User(**user_payload())
    client.login = AsyncMock(
        return_value=AuthSession.from_parts(TokenBundle(**token_payload()), user)
    )
    client.me = AsyncMock(return_value=user)
    client.logout = AsyncMock()
    client.list_channels = AsyncMock(
        return_value=[
            Channel(
                id="c-1",
                workspace_id="w-1",
                name="general",
                is_private=False,
                created_by="u-1",
                created_at=0,
            )
        ]
    )
    client.list_messages = AsyncMock(return_value=MessageList())
    client.send_message = AsyncMock(return_value=Mock(id="m-9"))
    client.get_api_base = Mock(return_value="http://localhost:3000/api/v1")
    client.set_api_base = AsyncMock(return_value="https://chat.example/api/v1")
    return client


@pytest.mark.unit
class TestCommandDispatcher:
    """Tests for CommandDispatcher."""

    @pytest.mark.asyncio
    async def test_dispatch_no_args_returns_error(self, mock_client):
        assert await CommandDispatcher(mock_client).dispatch(["galynx"]) == 1

    @pytest.mark.asyncio
    async def test_dispatch_unknown_command_returns_error(self, mock_client):
        assert await CommandDispatcher(mock_client).dispatch(["galynx", "nope"]) == 1

    @pytest.mark.asyncio
    async def test_login(self, mock_client):
        dispatcher = CommandDispatcher(mock_client)

        result = await dispatcher.dispatch(["galynx", "login", "ana@example.com", "pw"])

        assert result == 0
        mock_client.login.assert_awaited_once_with("ana@example.com", "pw")

    @pytest.mark.asyncio
    async def test_login_missing_arguments(self, mock_client):
        result = await CommandDispatcher(mock_client).dispatch(["galynx", "login", "a@b"])

        assert result == 1
        mock_client.login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error_returns_one(self, mock_client):
        mock_client.me.side_effect = UnauthenticatedError()

        assert await CommandDispatcher(mock_client).dispatch(["galynx", "me"]) == 1

    @pytest.mark.asyncio
    async def test_logout(self, mock_client):
        assert await CommandDispatcher(mock_client).dispatch(["galynx", "logout"]) == 0
        mock_client.logout.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_channels(self, mock_client):
        assert await CommandDispatcher(mock_client).dispatch(["galynx", "channels"]) == 0
        mock_client.list_channels.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_messages_with_limit_and_cursor(self, mock_client):
        result = await CommandDispatcher(mock_client).dispatch(
            ["galynx", "messages", "c-1", "20", "cur"]
        )

        assert result == 0
        mock_client.list_messages.assert_awaited_once_with("c-1", limit=20, cursor="cur")

    @pytest.mark.asyncio
    async def test_messages_rejects_non_numeric_limit(self, mock_client):
        result = await CommandDispatcher(mock_client).dispatch(
            ["galynx", "messages", "c-1", "lots"]
        )

        assert result == 1
        mock_client.list_messages.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_joins_words(self, mock_client):
        result = await CommandDispatcher(mock_client).dispatch(
            ["galynx", "send", "c-1", "hello", "world"]
        )

        assert result == 0
        mock_client.send_message.assert_awaited_once_with("c-1", "hello world")

    @pytest.mark.asyncio
    async def test_send_failure(self, mock_client):
        mock_client.send_message.side_effect = HttpError(403, "forbidden", "No access")

        result = await CommandDispatcher(mock_client).dispatch(
            ["galynx", "send", "c-1", "hi"]
        )

        assert result == 1

    @pytest.mark.asyncio
    async def test_api_base_show_and_set(self, mock_client):
        dispatcher = CommandDispatcher(mock_client)

        assert await dispatcher.dispatch(["galynx", "api-base"]) == 0
        mock_client.set_api_base.assert_not_awaited()

        assert await dispatcher.dispatch(["galynx", "api-base", "https://chat.example"]) == 0
        mock_client.set_api_base.assert_awaited_once_with("https://chat.example")


@pytest.mark.unit
class TestListenCommand:
    """listen streams events until the loop goes offline or time runs out"""

    @pytest.mark.asyncio
    async def test_listen_ends_when_loop_goes_offline(self, session, make_client):
        # No stored session: the loop goes offline immediately
        client = make_client(lambda r: None, connect=FakeConnector())

        result = await asyncio.wait_for(
            CommandDispatcher(client).dispatch(["galynx", "listen"]), timeout=2.0
        )

        assert result == 0
        assert not client.realtime.is_running
        assert not client.event_bus.is_running

    @pytest.mark.asyncio
    async def test_listen_for_duration_disconnects(self, signed_in, make_client):
        connector = FakeConnector(DummyWebSocket([{"event_type": "ping"}], hold=True))
        bus = EventBus()
        seen = []
        bus.subscribe("realtime:ping", lambda event: seen.append(event.data))
        client = make_client(lambda r: None, connect=connector, event_bus=bus)

        result = await CommandDispatcher(client).dispatch(["galynx", "listen", "0.2"])

        assert result == 0
        assert seen == [{"event_type": "ping"}]
        assert signed_in.realtime.get() is None

    @pytest.mark.asyncio
    async def test_repeated_listen_logs_each_event_once(
        self, session, make_client, mocker
    ):
        log = mocker.patch("galynx.application.commands.realtime.logger")
        client = make_client(lambda r: None, connect=FakeConnector())
        dispatcher = CommandDispatcher(client)

        await asyncio.wait_for(dispatcher.dispatch(["galynx", "listen"]), timeout=2.0)
        await asyncio.wait_for(dispatcher.dispatch(["galynx", "listen"]), timeout=2.0)

        status_lines = [
            c.args[0]
            for c in log.info.call_args_list
            if c.args[0].startswith("realtime:status:")
        ]
        # reconnecting + offline per run
        assert len(status_lines) == 4

    @pytest.mark.asyncio
    async def test_listen_rejects_bad_duration(self, mock_client):
        assert await CommandDispatcher(mock_client).dispatch(["galynx", "listen", "x"]) == 1
