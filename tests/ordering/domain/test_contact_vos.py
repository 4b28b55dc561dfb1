import pytest
from ordering.shared.contact import EmailAddress, PersonName, PhoneNumber
from protean.exceptions import ValidationError


class TestEmailAddress:
    def test_email_is_lower_cased_and_trimmed(self):
        assert EmailAddress.of("  Guest@Example.COM ").address == "guest@example.com"

    @pytest.mark.parametrize(
        "value",
        ["plainaddress", "two@@example.com", "no-domain@", "user@nodot", "a..b@example.com", "sp ace@example.com"],
    )
    def test_invalid_emails_rejected(self, value):
        with pytest.raises(ValidationError) as exc:
            EmailAddress.of(value)
        assert "email" in exc.value.messages


class TestPersonName:
    def test_full_name(self):
        assert PersonName.of(" Jamie ", "Rivera").full_name == "Jamie Rivera"

    def test_blank_last_name_rejected(self):
        with pytest.raises(ValidationError):
            PersonName.of("Jamie", "   ")


class TestPhoneNumber:
    def test_accepts_common_formats(self):
        assert PhoneNumber.of("+1 (555) 010-2030").number == "+1 (555) 010-2030"

    def test_rejects_letters(self):
        with pytest.raises(ValidationError) as exc:
            PhoneNumber.of("call me")
        assert "phone" in exc.value.messages
