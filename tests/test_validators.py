"""Tests for validation/validators.py."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from gmail_extension.utils.errors import MustAuthorizeError
from gmail_extension.validation.validators import (
    BccAddressValidator,
    CcAddressValidator,
    FieldType,
    FolderNameValidator,
    LabelValidator,
    MessageIdValidator,
    PageNumberValidator,
    PageSizeValidator,
    QueryValidator,
    ReplyToAddressValidator,
    ToAddressValidator,
    ValidationCheck,
    find_invalid_addresses,
    is_email_valid,
    strip_trailing_zeros,
)


class TestHelpers:
    """Tests for the address and number helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("5.0", "5"), ("20", "20"), ("1.50", "1.5"), ("0", "0"), ("abc", "abc"), (None, "")],
    )
    def test_strip_trailing_zeros(self, raw, expected) -> None:
        assert strip_trailing_zeros(raw) == expected

    def test_is_email_valid_accepts_display_name(self) -> None:
        assert is_email_valid("Jane Doe <jane@example.com>")

    def test_is_email_valid_rejects_plain_text(self) -> None:
        assert not is_email_valid("bad-email")

    def test_find_invalid_addresses_lists_only_bad_segments(self) -> None:
        raw = "good@x.com,bad-email,also@good.com"
        assert find_invalid_addresses(raw) == ["bad-email"]

    def test_find_invalid_addresses_ignores_blank_segments(self) -> None:
        assert find_invalid_addresses("a@example.com, ,") == []

    def test_find_invalid_addresses_blank_input(self) -> None:
        assert find_invalid_addresses("   ") == []


class TestToAddressValidator:
    """Tests for the required To address list."""

    def test_blank_is_invalid(self) -> None:
        check = ToAddressValidator().validate("", {})
        assert check == ValidationCheck(False)

    def test_valid_list(self) -> None:
        check = ToAddressValidator().validate("a@example.com, b@example.com", {})
        assert check.is_valid
        assert check.invalid_entries == ()

    def test_explanation_names_only_invalid_entry(self) -> None:
        validator = ToAddressValidator()
        raw = "good@x.com,bad-email,also@good.com"
        check = validator.validate(raw, {})

        assert not check.is_valid
        assert check.invalid_entries == ("bad-email",)
        assert validator.confirmation_message(raw, {}, check) == (
            "The email address 'bad-email' could not be validated. "
            "Please verify the address and try again."
        )
        assert validator.error_message(raw, check) == (
            "The 'To' email addresses are not valid: bad-email. "
            "Please check the format and try again."
        )

    def test_prompt(self) -> None:
        assert ToAddressValidator().fetch_prompt_message() == (
            "Please enter a valid email address in the format: user@domain.com"
        )

    def test_validator_keeps_no_state_between_checks(self) -> None:
        validator = ToAddressValidator()
        first = validator.validate("bad-one", {})
        second = validator.validate("bad-two", {})
        assert first.invalid_entries == ("bad-one",)
        assert second.invalid_entries == ("bad-two",)


class TestOptionalAddressValidators:
    """Tests for Cc, Bcc and Reply To."""

    @pytest.mark.parametrize(
        "validator", [CcAddressValidator(), BccAddressValidator(), ReplyToAddressValidator()]
    )
    def test_blank_is_valid(self, validator) -> None:
        assert validator.validate(None, {}).is_valid
        assert validator.validate("  ", {}).is_valid

    def test_cc_messages(self) -> None:
        validator = CcAddressValidator()
        check = validator.validate("nope", {})
        assert validator.confirmation_message("nope", {}, check) == (
            "The CC email address 'nope' could not be validated. "
            "Please verify the address and try again."
        )
        assert validator.error_message("nope", check) == (
            "The 'CC' email addresses are not valid: nope. "
            "Please check the format and try again."
        )
        assert validator.fetch_prompt_message() == (
            "Please enter a valid email address for CC recipients in the format: user@domain.com"
        )

    def test_bcc_field_name(self) -> None:
        assert BccAddressValidator().fetch_field_name == "Bcc"

    def test_reply_to_field_name(self) -> None:
        assert ReplyToAddressValidator().fetch_field_name == "Reply To"


class TestPageValidators:
    """Tests for page number and page size bounds."""

    @pytest.mark.parametrize("raw", ["1", "15", "7.5", "1.0"])
    def test_in_range(self, raw) -> None:
        assert PageNumberValidator().validate(raw, {}).is_valid
        assert PageSizeValidator().validate(raw, {}).is_valid

    @pytest.mark.parametrize("raw", ["0", "16", "20", "-1", "abc", "", None])
    def test_out_of_range(self, raw) -> None:
        assert not PageNumberValidator().validate(raw, {}).is_valid
        assert not PageSizeValidator().validate(raw, {}).is_valid

    def test_confirmation_strips_trailing_zeros(self) -> None:
        validator = PageNumberValidator()
        check = validator.validate("20.0", {})
        assert validator.confirmation_message("20.0", {}, check) == (
            "The provided Page number : 20 should be greater than 0 "
            "and less than or equal to 15."
        )

    def test_page_size_message(self) -> None:
        validator = PageSizeValidator()
        check = validator.validate("0", {})
        assert validator.error_message("0", check) == (
            "The provided Page size : 0 should be greater than 0 "
            "and less than or equal to 15."
        )
        assert validator.fetch_prompt_message() == "Please enter valid Page Size."

    def test_number_field_type(self) -> None:
        assert PageNumberValidator().field_type is FieldType.NUMBER
        assert PageSizeValidator().field_type is FieldType.NUMBER


class TestQueryValidator:
    """Tests for the non-blank query check."""

    def test_blank_is_invalid(self) -> None:
        validator = QueryValidator()
        check = validator.validate("  ", {})
        assert not check.is_valid
        assert validator.error_message("  ", check) == (
            "Invalid query: Query cannot be empty or null."
        )

    def test_any_text_is_valid(self) -> None:
        assert QueryValidator().validate("from:jane", {}).is_valid


class TestMailboxValidators:
    """Tests for the validators that look values up in the mailbox."""

    @pytest.fixture
    def account(self) -> MagicMock:
        account = MagicMock()
        account.fetch_all_message_ids.return_value = {"msg-1", "msg-2"}
        account.get_folder_by_name.side_effect = lambda name, case_sensitive=False: (
            object() if name == "Work" else None
        )
        return account

    def test_message_id_exists(self, account) -> None:
        assert MessageIdValidator(account).validate("msg-1", {}).is_valid

    def test_message_id_trimmed(self, account) -> None:
        assert MessageIdValidator(account).validate("  msg-2 ", {}).is_valid

    def test_message_id_unknown(self, account) -> None:
        validator = MessageIdValidator(account)
        check = validator.validate("nope", {})
        assert not check.is_valid
        assert validator.confirmation_message("nope", {}, check) == (
            "No email found with Message ID: nope. Please verify the ID is correct "
            "and the email exists in your account."
        )
        assert validator.error_message("nope", check) == (
            "The Message ID 'nope' is not valid or does not exist in your Gmail account."
        )

    def test_blank_message_id_skips_lookup(self, account) -> None:
        assert not MessageIdValidator(account).validate("", {}).is_valid
        account.fetch_all_message_ids.assert_not_called()

    def test_lookup_failure_is_invalid(self, account) -> None:
        account.fetch_all_message_ids.side_effect = RuntimeError("boom")
        assert not MessageIdValidator(account).validate("msg-1", {}).is_valid

    def test_message_id_authorization_failure_propagates(self, account) -> None:
        account.fetch_all_message_ids.side_effect = MustAuthorizeError("authorize")
        with pytest.raises(MustAuthorizeError):
            MessageIdValidator(account).validate("msg-1", {})

    def test_label_authorization_failure_propagates(self, account) -> None:
        account.get_folder_by_name.side_effect = MustAuthorizeError("authorize")
        with pytest.raises(MustAuthorizeError):
            LabelValidator(account).validate("Work", {})

    def test_label_lookup_is_case_sensitive(self, account) -> None:
        validator = LabelValidator(account)
        assert validator.validate("Work", {}).is_valid
        assert not validator.validate("work", {}).is_valid
        account.get_folder_by_name.assert_called_with("work", case_sensitive=True)

    def test_label_messages(self, account) -> None:
        validator = LabelValidator(account)
        check = validator.validate("Nope", {})
        assert validator.confirmation_message("Nope", {}, check) == (
            "The provided label 'Nope' does not exist in your Gmail account."
        )

    def test_folder_name_unknown(self, account) -> None:
        validator = FolderNameValidator(account)
        check = validator.validate("Archive", {})
        assert not check.is_valid
        assert validator.error_message("Archive", check) == (
            "The folder name 'Archive' is not valid or does not exist in your Gmail account."
        )
