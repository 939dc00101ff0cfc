"""End-to-end outcome posts from a tool provider to a stubbed consumer."""

from __future__ import annotations

import logging

import httpx
import pytest

from gradelink.config import OutcomeServiceSettings
from gradelink.integration.errors import OutcomeTransportError
from gradelink.integration.extensions.outcome_data import (
    OutcomeDataToolProvider,
    ResultData,
    ResultDataExtension,
)
from gradelink.integration.provider import ToolProvider
from gradelink.integration.transport import OAuthSigner
from tests.helpers import CONSUMER_KEY, SERVICE_URL, SOURCEDID, StubOutcomeService

pytestmark = pytest.mark.integration


def received_data(service: StubOutcomeService) -> ResultData:
    inbound = service.consumer.process_outcome_request(service.last_body)
    return inbound.get_extension(ResultDataExtension).data


class TestReplaceResultWithData:
    """Score plus outcome data in one replaceResult."""

    def test_advertised_text_is_delivered(self, make_provider):
        service = StubOutcomeService()
        provider = make_provider(service, advertisement="text")

        response = provider.post_replace_result_with_data(0.85, {"text": "ok"})

        assert response.is_success()
        inbound = service.consumer.process_outcome_request(service.last_body)
        assert inbound.score == "0.85"
        assert inbound.lis_result_sourcedid == SOURCEDID
        assert received_data(service).text == "ok"

    def test_unadvertised_field_is_still_sent(self, make_provider):
        """Capability checks are advisory; the document is the same either way."""
        advertised = StubOutcomeService()
        silent = StubOutcomeService()

        make_provider(advertised, advertisement="text").post_replace_result_with_data(0.85, {"text": "ok"})
        make_provider(silent, advertisement=None).post_replace_result_with_data(0.85, {"text": "ok"})

        assert received_data(silent) == received_data(advertised)
        assert b"<resultData><text>ok</text></resultData>" in silent.last_body

    def test_cdata_text_is_sent_raw(self, make_provider):
        service = StubOutcomeService()

        make_provider(service).post_replace_result_with_data(1.0, {"cdata_text": "<b>great</b>"})

        assert b"<text><![CDATA[<b>great</b>]]></text>" in service.last_body

    def test_data_only_replace_result(self, make_provider):
        service = StubOutcomeService()

        response = make_provider(service).post_replace_result_with_data(None, {"url": "http://x"})

        assert response.is_success()
        assert b"resultScore" not in service.last_body
        assert received_data(service).url == "http://x"

    def test_requests_do_not_share_result_data(self, make_provider):
        service = StubOutcomeService()
        provider = make_provider(service)

        provider.post_replace_result_with_data(0.5, {"text": "first"})
        provider.post_replace_result(0.6)

        assert b"resultData" not in service.last_body
        assert len(service.requests) == 2

    def test_status_of_result_convenience_key(self, make_provider):
        service = StubOutcomeService()

        make_provider(service).post_replace_result_with_data(
            0.5, {"statusofResult": "tobemoderated", "needs_grading": True}
        )

        data = received_data(service)
        assert data.status_of_result == "tobemoderated"
        assert data.needs_grading == "true"


class TestClassification:
    """Every reply collapses to one of the four statuses."""

    @pytest.mark.parametrize(
        "code_major, predicate",
        [
            ("success", "is_success"),
            ("processing", "is_processing"),
            ("unsupported", "is_unsupported"),
            ("failure", "is_failure"),
        ],
    )
    def test_code_major_is_reported(self, make_provider, code_major, predicate):
        provider = make_provider(StubOutcomeService(code_major=code_major))

        response = provider.post_replace_result_with_data(0.7, {"text": "ok"})

        assert getattr(response, predicate)()

    def test_server_error_is_failure(self, make_provider):
        provider = make_provider(StubOutcomeService(status_code=500))

        response = provider.post_replace_result(0.7)

        assert response.is_failure()
        assert response.response_code == 500

    def test_non_xml_reply_is_failure(self, make_provider):
        provider = make_provider(lambda request: httpx.Response(200, text="OK"))

        assert provider.post_replace_result(0.7).is_failure()

    def test_connection_error_raises(self, make_provider):
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(unreachable)

        with pytest.raises(OutcomeTransportError) as exc:
            provider.post_replace_result_with_data(0.7, {"text": "ok"})
        assert exc.value.context == {"url": SERVICE_URL}

    def test_outcome_is_logged(self, make_provider, caplog):
        provider = make_provider(StubOutcomeService(code_major="processing"))

        with caplog.at_level(logging.INFO, logger="gradelink"):
            provider.post_replace_result(0.2)

        assert "classified as processing" in caplog.text


class TestOtherOperations:

    def test_read_result(self, make_provider):
        service = StubOutcomeService()

        response = make_provider(service).post_read_result()

        assert response.is_success()
        assert response.score == "0.5"
        assert b"<readResultRequest>" in service.last_body
        assert b"<result>" not in service.last_body

    def test_delete_result(self, make_provider):
        service = StubOutcomeService()

        response = make_provider(service).post_delete_result()

        assert response.is_success()
        assert b"<deleteResultRequest>" in service.last_body


class TestWireFormat:
    """HTTP envelope of an outcome post."""

    def test_post_is_signed_xml(self, make_provider):
        service = StubOutcomeService()

        make_provider(service).post_replace_result(0.4)

        request = service.requests[-1]
        assert request.method == "POST"
        assert str(request.url) == SERVICE_URL
        assert request.headers["Content-Type"] == "application/xml"
        authorization = request.headers["Authorization"]
        assert authorization.startswith("OAuth ")
        assert f'oauth_consumer_key="{CONSUMER_KEY}"' in authorization
        assert 'oauth_signature_method="HMAC-SHA1"' in authorization
        assert "oauth_signature=" in authorization

    def test_body_hash_matches_body(self, make_provider):
        service = StubOutcomeService()

        make_provider(service).post_replace_result_with_data(0.4, {"text": "ok"})

        body_hash = OAuthSigner.body_hash(service.last_body)
        escaped = body_hash.replace("+", "%2B").replace("/", "%2F").replace("=", "%3D")
        assert f'oauth_body_hash="{escaped}"' in service.requests[-1].headers["Authorization"]


class TestProviderLaunch:

    def test_is_outcome_service(self, launch_params):
        assert ToolProvider(CONSUMER_KEY, "s", launch_params).is_outcome_service()

        launch_params.pop("lis_result_sourcedid")
        assert not ToolProvider(CONSUMER_KEY, "s", launch_params).is_outcome_service()

    def test_from_settings(self, launch_params):
        service = StubOutcomeService()
        settings = OutcomeServiceSettings(consumer_key=CONSUMER_KEY, consumer_secret="from-settings")
        client = httpx.Client(transport=httpx.MockTransport(service))

        provider = OutcomeDataToolProvider.from_settings(settings, launch_params, client=client)

        assert isinstance(provider, OutcomeDataToolProvider)
        assert provider.consumer_secret == "from-settings"
        assert provider.outcome_request_extensions == (ResultDataExtension,)
        assert provider.post_replace_result_with_data(0.9, {"url": "http://x"}).is_success()
        assert received_data(service).url == "http://x"

    def test_close_releases_owned_client(self, launch_params):
        settings = OutcomeServiceSettings(consumer_key=CONSUMER_KEY, consumer_secret="s")

        with OutcomeDataToolProvider.from_settings(settings, launch_params) as provider:
            client = provider.transport._client
            assert not client.is_closed

        assert client.is_closed

    def test_close_leaves_supplied_client_open(self, launch_params):
        settings = OutcomeServiceSettings(consumer_key=CONSUMER_KEY, consumer_secret="s")
        client = httpx.Client(transport=httpx.MockTransport(StubOutcomeService()))

        provider = OutcomeDataToolProvider.from_settings(settings, launch_params, client=client)
        provider.close()

        assert not client.is_closed

    def test_close_without_transport(self, launch_params):
        with ToolProvider(CONSUMER_KEY, "s", launch_params) as provider:
            assert provider.transport is None
