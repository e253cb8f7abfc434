import httpx
import pytest

from helpdesk.services import resend_email_service
from helpdesk.services.resend_email_service import (
    EmailDeliveryError,
    ResendEmailProvider,
    format_from_address,
)


class _FakeAsyncClient:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def post(self, url, headers=None, json=None):
        self.calls.append({"url": url, "headers": headers, "json": json})
        if self.exc:
            raise self.exc
        return self.response


def _patch_client(monkeypatch, fake):
    monkeypatch.setattr(resend_email_service.httpx, "AsyncClient", lambda **_kwargs: fake)


async def _send(provider):
    return await provider.send(
        from_address="Acme <noreply@example.com>",
        to="to@example.com",
        subject="Acme - Novo Ticket: Printer broken",
        html="<p>Hello <strong>world</strong></p>",
    )


@pytest.mark.asyncio
async def test_send_posts_payload_and_returns_provider_response(monkeypatch):
    fake = _FakeAsyncClient(response=httpx.Response(200, json={"id": "msg_123"}))
    _patch_client(monkeypatch, fake)

    result = await _send(ResendEmailProvider("re_test_key"))

    assert result == {"id": "msg_123"}
    call = fake.calls[0]
    assert call["url"] == resend_email_service.RESEND_SEND_URL
    assert call["headers"]["Authorization"] == "Bearer re_test_key"
    assert call["json"]["from"] == "Acme <noreply@example.com>"
    assert call["json"]["to"] == ["to@example.com"]
    assert call["json"]["subject"] == "Acme - Novo Ticket: Printer broken"
    assert call["json"]["text"] == "Hello world"


@pytest.mark.asyncio
async def test_send_raises_with_status_and_detail_on_rejection(monkeypatch):
    fake = _FakeAsyncClient(
        response=httpx.Response(422, json={"message": "Invalid `to` field"})
    )
    _patch_client(monkeypatch, fake)

    with pytest.raises(EmailDeliveryError) as exc_info:
        await _send(ResendEmailProvider("re_test_key"))

    assert str(exc_info.value) == "Resend API error: 422 (Invalid `to` field)"
    assert len(fake.calls) == 1


@pytest.mark.asyncio
async def test_send_does_not_retry_on_server_error(monkeypatch):
    fake = _FakeAsyncClient(response=httpx.Response(503, text="unavailable"))
    _patch_client(monkeypatch, fake)

    with pytest.raises(EmailDeliveryError, match="Resend API error: 503"):
        await _send(ResendEmailProvider("re_test_key"))

    assert len(fake.calls) == 1


@pytest.mark.asyncio
async def test_send_maps_timeout_to_connection_timeout(monkeypatch):
    fake = _FakeAsyncClient(exc=httpx.ConnectTimeout("timed out"))
    _patch_client(monkeypatch, fake)

    with pytest.raises(EmailDeliveryError, match="Connection timeout"):
        await _send(ResendEmailProvider("re_test_key"))


@pytest.mark.asyncio
async def test_send_requires_api_key(monkeypatch):
    fake = _FakeAsyncClient(response=httpx.Response(200, json={"id": "msg_1"}))
    _patch_client(monkeypatch, fake)

    with pytest.raises(EmailDeliveryError, match="RESEND_API_KEY"):
        await _send(ResendEmailProvider(""))

    assert fake.calls == []


@pytest.mark.asyncio
async def test_success_without_message_id_is_a_failure(monkeypatch):
    _patch_client(monkeypatch, _FakeAsyncClient(response=httpx.Response(200, json={})))

    with pytest.raises(EmailDeliveryError, match="without message id"):
        await _send(ResendEmailProvider("re_test_key"))


def test_format_from_address_uses_company_as_display_name():
    assert format_from_address("Acme Suporte", "noreply@example.com") == (
        "Acme Suporte <noreply@example.com>"
    )
    assert format_from_address('Evil "<Co>"', "noreply@example.com") == (
        "Evil Co <noreply@example.com>"
    )
    assert format_from_address("", "noreply@example.com") == "noreply@example.com"
