import json
import httpx
import pytest
from flatflow.services.email_service import InvitationMailer, EmailDispatchError, build_invite_url


def make_mailer(handler, api_key="re_test_key"):
    return InvitationMailer(
        api_key=api_key,
        api_url="https://email.test/emails",
        sender="FlatFlow <invites@flatflow.test>",
        site_url="http://flatflow.test/",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestInvitationMailer:
    """Unit tests for the Resend client, with the HTTP layer mocked."""

    def test_build_invite_url(self):
        assert build_invite_url("abc", "http://flatflow.test/") == "http://flatflow.test/invite?token=abc"

    def test_send_invitation_posts_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "email_123"})

        result = make_mailer(handler).send_invitation(
            email="x@y.com",
            household_id=7,
            household_name="Flat 3B",
            inviter_name="Alice",
            token="tok123",
        )

        assert result == {"id": "email_123"}
        assert captured["url"] == "https://email.test/emails"
        assert captured["auth"] == "Bearer re_test_key"
        body = captured["body"]
        assert body["to"] == ["x@y.com"]
        assert body["from"] == "FlatFlow <invites@flatflow.test>"
        assert "Flat 3B" in body["subject"]
        assert "http://flatflow.test/invite?token=tok123" in body["html"]
        assert "Alice" in body["html"]
        assert body["tags"] == [{"name": "household_id", "value": "7"}]

    def test_household_name_is_escaped(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "email_1"})

        make_mailer(handler).send_invitation("x@y.com", 1, "<b>Flat</b>", "Alice", "tok")

        assert "<b>Flat</b>" not in captured["body"]["html"]
        assert "&lt;b&gt;Flat&lt;/b&gt;" in captured["body"]["html"]

    def test_missing_api_key(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(EmailDispatchError) as exc_info:
            make_mailer(handler, api_key="").send_invitation("x@y.com", 1, "Flat", "Alice", "tok")

        assert "Email service not configured" in str(exc_info.value)

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_invalid_api_key(self, status_code):
        def handler(request):
            return httpx.Response(status_code, json={"message": "API key is invalid"})

        with pytest.raises(EmailDispatchError) as exc_info:
            make_mailer(handler).send_invitation("x@y.com", 1, "Flat", "Alice", "tok")

        assert "Invalid email API key" in str(exc_info.value)

    def test_unverified_domain(self):
        def handler(request):
            return httpx.Response(403, json={"message": "The flatflow.test domain is not verified"})

        with pytest.raises(EmailDispatchError) as exc_info:
            make_mailer(handler).send_invitation("x@y.com", 1, "Flat", "Alice", "tok")

        assert "Email domain not verified" in str(exc_info.value)

    def test_other_status(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        with pytest.raises(EmailDispatchError) as exc_info:
            make_mailer(handler).send_invitation("x@y.com", 1, "Flat", "Alice", "tok")

        assert "status 500" in str(exc_info.value)

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EmailDispatchError) as exc_info:
            make_mailer(handler).send_invitation("x@y.com", 1, "Flat", "Alice", "tok")

        assert str(exc_info.value) == "Could not reach the email service."
