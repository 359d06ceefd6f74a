"""Tests for the confirmReenter / handleReenter continuation flow."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from gmail_extension.catalog import Operation
from gmail_extension.continuation.store import ContinuationStore
from gmail_extension.middleware.telemetry import telemetry
from gmail_extension.schemas.tools import (
    ConfirmReenterParams,
    FetchPageParams,
    HandleReenterParams,
    MoveMessageParams,
    SendMailParams,
)
from gmail_extension.tools.continuations import (
    RETRYABLE_HANDLERS,
    SESSION_EXPIRED,
    confirm_reenter,
    handle_reenter,
)
from gmail_extension.tools.read import gmail_fetch_inbox
from gmail_extension.storage.kv import EncryptedFileKeyValueStore
from gmail_extension.tools.write import gmail_move_message, gmail_send_mail
from gmail_extension.utils.encryption import generate_key
from gmail_extension.utils.errors import MustAuthorizeError


async def _suspend_move(message_id: str = "") -> str:
    result = await gmail_move_message(
        MoveMessageParams(message_id=message_id, folder_name="Work", allow_retry=True)
    )
    return result["continuation_inputs"]["stateId"]


def test_every_retryable_operation_has_a_handler() -> None:
    assert set(RETRYABLE_HANDLERS) == {op for op in Operation if op.retryable}


class TestConfirmReenter:
    """Tests for confirmReenter<Op>."""

    @pytest.mark.asyncio
    async def test_decline_does_not_touch_mailbox(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()
        mock_account.reset_mock()

        result = await confirm_reenter(
            Operation.MOVE_MESSAGE, ConfirmReenterParams(state_id=state_id, reenter=False)
        )

        assert result["error_kind"] == "INPUT_ERROR"
        assert result["error_message"] == (
            "The Message ID '' is not valid or does not exist in your Gmail account.\n"
        )
        assert result["remediation_actions"][0]["message"] == (
            "Required values for 'Message ID' were not provided. "
            "Please provide the missing information to continue."
        )
        assert "continuation_operation" not in result
        assert mock_account.mock_calls == []

    @pytest.mark.asyncio
    async def test_accept_returns_correction_form(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()

        result = await confirm_reenter(
            Operation.MOVE_MESSAGE,
            ConfirmReenterParams(
                state_id=state_id, reenter=True, inputs={"Folder Name": "Personal"}
            ),
        )

        assert result["continuation_operation"] == "handleReenterMoveMessage"
        assert result["continuation_inputs"]["stateId"] == state_id
        assert result["continuation_inputs"]["Folder Name"] == "Personal"
        (action,) = result["remediation_actions"]
        assert action["kind"] == "ask"
        assert action["fields"] == [
            {"name": "Message ID", "field_type": "com.krista.fields.Text"}
        ]

    @pytest.mark.asyncio
    async def test_host_aliases_accepted(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()

        params = ConfirmReenterParams.model_validate({"stateId": state_id, "Reenter": True})
        result = await confirm_reenter(Operation.MOVE_MESSAGE, params)

        assert result["continuation_operation"] == "handleReenterMoveMessage"

    @pytest.mark.asyncio
    async def test_unknown_state(self, continuation_store) -> None:
        result = await confirm_reenter(
            Operation.MOVE_MESSAGE, ConfirmReenterParams(state_id="nope", reenter=True)
        )

        assert result["error_kind"] == "LOGIC_ERROR"
        assert result["error_message"] == SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_expired_state(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()
        record = continuation_store.get(state_id)
        record.created_at = datetime.now(UTC) - timedelta(days=2)
        continuation_store.put(record)

        result = await confirm_reenter(
            Operation.MOVE_MESSAGE, ConfirmReenterParams(state_id=state_id, reenter=True)
        )

        assert result["error_message"] == SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_state_of_another_operation(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()

        result = await confirm_reenter(
            Operation.SEND_MAIL, ConfirmReenterParams(state_id=state_id, reenter=True)
        )

        assert result["error_kind"] == "LOGIC_ERROR"


class TestHandleReenter:
    """Tests for handleReenter<Op>."""

    @pytest.mark.asyncio
    async def test_replay_equals_direct_call(
        self, mock_account, mock_email, mock_folder, continuation_store
    ) -> None:
        direct = await gmail_move_message(
            MoveMessageParams(message_id="msg-1", folder_name="Work")
        )
        state_id = await _suspend_move()

        replayed = await handle_reenter(
            Operation.MOVE_MESSAGE,
            HandleReenterParams(state_id=state_id, inputs={"Message ID": "msg-1"}),
        )

        assert replayed == direct == {"status": "success", "values": {"Response": "success"}}
        assert mock_email.move_to_folder.call_count == 2

    @pytest.mark.asyncio
    async def test_replay_with_invalid_data_is_logic_error(
        self, mock_account, continuation_store
    ) -> None:
        state_id = await _suspend_move()

        result = await handle_reenter(
            Operation.MOVE_MESSAGE,
            HandleReenterParams(state_id=state_id, inputs={"Message ID": "still-wrong"}),
        )

        assert result["error_kind"] == "LOGIC_ERROR"
        assert result["error_message"] == (
            "We couldn't move the message because either the message ID is incorrect "
            "or the folder doesn't exist. Please check and try again."
        )
        assert "continuation_operation" not in result

    @pytest.mark.asyncio
    async def test_replay_skips_validation(
        self, mock_account, mock_folder, continuation_store
    ) -> None:
        result = await gmail_fetch_inbox(FetchPageParams(page_number=20, allow_retry=True))
        state_id = result["continuation_inputs"]["stateId"]
        mock_account.reset_mock()

        replayed = await handle_reenter(
            Operation.FETCH_INBOX,
            HandleReenterParams(state_id=state_id, inputs={"Page Number": 3}),
        )

        assert replayed["status"] == "success"
        mock_folder.get_emails.assert_called_once_with(3, None)
        mock_account.fetch_all_message_ids.assert_not_called()

    @pytest.mark.asyncio
    async def test_replay_send_mail(self, mock_account, continuation_store) -> None:
        result = await gmail_send_mail(
            SendMailParams(to="bad", subject="Report", message="See\nbelow", allow_retry=True)
        )
        state_id = result["continuation_inputs"]["stateId"]

        replayed = await handle_reenter(
            Operation.SEND_MAIL,
            HandleReenterParams(state_id=state_id, inputs={"To": "jane@example.com"}),
        )

        assert replayed == {"status": "success", "values": {"Message": "success"}}
        kwargs = mock_account.send_email.call_args.kwargs
        assert kwargs["to"] == ["jane@example.com"]
        assert kwargs["subject"] == "Report"
        assert kwargs["body"] == "See<br>below"

    @pytest.mark.asyncio
    async def test_replay_can_repeat(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()

        for _ in range(2):
            result = await handle_reenter(
                Operation.MOVE_MESSAGE,
                HandleReenterParams(state_id=state_id, inputs={"Message ID": "msg-1"}),
            )
            assert result["status"] == "success"

    @pytest.mark.asyncio
    async def test_replay_rejected_inputs(self, mock_account, continuation_store) -> None:
        state_id = await _suspend_move()

        result = await handle_reenter(
            Operation.MOVE_MESSAGE,
            HandleReenterParams(state_id=state_id, inputs={"Message ID": ["x"]}),
        )

        assert result["error_kind"] == "LOGIC_ERROR"

    @pytest.mark.asyncio
    async def test_replay_authorization_error(
        self, mock_account, mock_email, continuation_store
    ) -> None:
        state_id = await _suspend_move()
        mock_email.move_to_folder.side_effect = MustAuthorizeError("authorize")

        with pytest.raises(MustAuthorizeError):
            await handle_reenter(
                Operation.MOVE_MESSAGE,
                HandleReenterParams(state_id=state_id, inputs={"Message ID": "msg-1"}),
            )

    @pytest.mark.asyncio
    async def test_replay_unexpected_error(
        self, mock_account, mock_email, continuation_store
    ) -> None:
        state_id = await _suspend_move()
        mock_email.move_to_folder.side_effect = RuntimeError("boom")

        result = await handle_reenter(
            Operation.MOVE_MESSAGE,
            HandleReenterParams(state_id=state_id, inputs={"Message ID": "msg-1"}),
        )

        assert result["error_kind"] == "LOGIC_ERROR"
        assert telemetry.snapshot()["gmail.moveMessage.error"] == 1

    @pytest.mark.asyncio
    async def test_expired_state(self, continuation_store) -> None:
        result = await handle_reenter(
            Operation.FETCH_SENT, HandleReenterParams(state_id="gone")
        )
        assert result["error_message"] == SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_expired_state_records_outcome(self, continuation_store) -> None:
        await handle_reenter(Operation.FETCH_SENT, HandleReenterParams(state_id="gone"))

        counters = telemetry.snapshot()
        assert counters["gmail.fetchSent.count"] == 1
        assert counters["gmail.fetchSent.validation_error"] == 1

    @pytest.mark.asyncio
    async def test_store_failure_is_system_error(self, mocker, continuation_store) -> None:
        mocker.patch.object(continuation_store, "require", side_effect=OSError("disk gone"))

        result = await handle_reenter(
            Operation.MOVE_MESSAGE, HandleReenterParams(state_id="abc")
        )

        assert result["error_kind"] == "SYSTEM_ERROR"
        assert result["error_message"] == "Error occurred while moving message to folder"
        assert telemetry.snapshot()["gmail.moveMessage.error"] == 1


class TestUnreadableSessions:
    """Continuations against records sealed on disk."""

    @pytest.mark.asyncio
    async def test_round_trip_on_disk(self, mock_account, file_continuation_store) -> None:
        state_id = await _suspend_move()

        result = await handle_reenter(
            Operation.MOVE_MESSAGE,
            HandleReenterParams(state_id=state_id, inputs={"Message ID": "msg-1"}),
        )

        assert result == {"status": "success", "values": {"Response": "success"}}

    @pytest.mark.asyncio
    async def test_state_id_without_usable_characters(self, file_continuation_store) -> None:
        result = await confirm_reenter(
            Operation.MOVE_MESSAGE, ConfirmReenterParams(state_id="///", reenter=True)
        )

        assert result["error_kind"] == "LOGIC_ERROR"
        assert result["error_message"] == SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_corrupt_record_file(self, tmp_path: Path, file_continuation_store) -> None:
        (tmp_path / "abc.json.enc").write_text("not json")

        confirmed = await confirm_reenter(
            Operation.MOVE_MESSAGE, ConfirmReenterParams(state_id="abc", reenter=True)
        )
        replayed = await handle_reenter(
            Operation.MOVE_MESSAGE, HandleReenterParams(state_id="abc")
        )

        assert confirmed["error_kind"] == replayed["error_kind"] == "LOGIC_ERROR"
        assert confirmed["error_message"] == replayed["error_message"] == SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_record_sealed_with_another_key(
        self, tmp_path: Path, mock_account, mock_email, file_continuation_store
    ) -> None:
        state_id = await _suspend_move()
        rotated = ContinuationStore(EncryptedFileKeyValueStore(tmp_path, key=generate_key()))

        with patch("gmail_extension.tools.continuations.continuation_store", rotated):
            result = await handle_reenter(
                Operation.MOVE_MESSAGE,
                HandleReenterParams(state_id=state_id, inputs={"Message ID": "msg-1"}),
            )

        assert result["error_kind"] == "LOGIC_ERROR"
        assert result["error_message"] == SESSION_EXPIRED
        mock_email.move_to_folder.assert_not_called()
