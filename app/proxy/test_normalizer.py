import httpx
import pytest

from app.proxy.normalizer import (
    extract_error_message,
    normalize_backend_response,
    parse_backend_body,
    unwrap_payload,
)


def _text_response(status_code, text, content_type="text/plain"):
    return httpx.Response(status_code, text=text, headers={"content-type": content_type})


class TestParseBackendBody:
    def test_json_content_type(self):
        response = httpx.Response(200, json={"x": 1})
        assert parse_backend_body(response) == {"x": 1}

    def test_mislabelled_json_is_still_parsed(self):
        response = _text_response(200, '{"x": 1}', "text/html")
        assert parse_backend_body(response) == {"x": 1}

    def test_plain_text_becomes_message(self):
        response = _text_response(500, "Internal Server Error")
        assert parse_backend_body(response) == {"message": "Internal Server Error"}

    def test_empty_body_becomes_empty_message(self):
        response = httpx.Response(204)
        assert parse_backend_body(response) == {"message": ""}

    def test_invalid_json_with_json_content_type_raises(self):
        response = _text_response(200, "{not json", "application/json")
        with pytest.raises(ValueError):
            parse_backend_body(response)


class TestExtractErrorMessage:
    def test_detail_first(self):
        body = {"detail": "d", "message": "m", "error": "e"}
        assert extract_error_message(body, 400) == "d"

    def test_message_second(self):
        assert extract_error_message({"message": "m", "error": "e"}, 400) == "m"

    def test_error_third(self):
        assert extract_error_message({"error": "e"}, 400) == "e"

    def test_empty_fields_are_skipped(self):
        body = {"detail": "", "message": None, "error": "e"}
        assert extract_error_message(body, 400) == "e"

    def test_synthesized(self):
        assert extract_error_message({}, 503) == "Request failed with status 503"
        assert extract_error_message([1, 2], 418) == "Request failed with status 418"

    def test_validation_error_list(self):
        body = {
            "detail": [
                {"loc": ["body", "email"], "msg": "field required", "type": "missing"},
                {"loc": ["body", "rent"], "msg": "must be positive", "type": "value"},
            ]
        }
        assert extract_error_message(body, 422) == "field required; must be positive"

    def test_non_string_detail_is_serialized(self):
        assert extract_error_message({"detail": {"code": 7}}, 400) == '{"code": 7}'


class TestUnwrapPayload:
    def test_nested_object(self):
        assert unwrap_payload({"data": {"x": 1}}) == {"x": 1}

    def test_nested_list(self):
        assert unwrap_payload({"success": True, "data": [1, 2]}) == [1, 2]

    def test_no_nested_data_is_noop(self):
        assert unwrap_payload({"x": 1}) == {"x": 1}

    def test_scalar_data_is_not_unwrapped(self):
        assert unwrap_payload({"data": "text"}) == {"data": "text"}
        assert unwrap_payload({"data": None}) == {"data": None}

    def test_empty_containers_are_unwrapped(self):
        assert unwrap_payload({"data": []}) == []
        assert unwrap_payload({"data": {}}) == {}

    def test_only_one_level(self):
        assert unwrap_payload({"data": {"data": {"x": 1}}}) == {"data": {"x": 1}}

    def test_non_dict_body(self):
        assert unwrap_payload([{"data": 1}]) == [{"data": 1}]


class TestNormalizeBackendResponse:
    def test_success_unwraps(self):
        result = normalize_backend_response(httpx.Response(200, json={"data": {"x": 1}}))
        assert result.envelope() == {"success": True, "data": {"x": 1}}
        assert result.http_status == 200

    def test_success_without_unwrap(self):
        result = normalize_backend_response(
            httpx.Response(200, json={"data": {"x": 1}}), unwrap=False
        )
        assert result.envelope() == {"success": True, "data": {"data": {"x": 1}}}

    def test_created_maps_to_200(self):
        result = normalize_backend_response(httpx.Response(201, json={"id": 5}))
        assert result.http_status == 200
        assert result.envelope() == {"success": True, "data": {"id": 5}}

    def test_error_keeps_status(self):
        result = normalize_backend_response(
            httpx.Response(404, json={"detail": "Tenant not found"})
        )
        assert result.envelope() == {"success": False, "error": "Tenant not found"}
        assert result.http_status == 404

    def test_plain_text_error(self):
        result = normalize_backend_response(_text_response(500, "Internal Server Error"))
        assert result.envelope() == {"success": False, "error": "Internal Server Error"}
        assert result.http_status == 500

    def test_plain_text_success(self):
        result = normalize_backend_response(_text_response(200, "Internal Server Error"))
        assert result.envelope() == {
            "success": True,
            "data": {"message": "Internal Server Error"},
        }

    def test_transform_runs_after_unwrap(self):
        result = normalize_backend_response(
            httpx.Response(200, json={"data": [3, 1, 2]}), transform=sorted
        )
        assert result.data == [1, 2, 3]

    def test_transform_not_applied_on_error(self):
        def explode(_):
            raise AssertionError("transform must not run")

        result = normalize_backend_response(
            httpx.Response(400, json={"detail": "bad"}), transform=explode
        )
        assert result.error == "bad"

    def test_null_payload_is_kept(self):
        response = httpx.Response(
            200, content=b"null", headers={"content-type": "application/json"}
        )
        result = normalize_backend_response(response)
        assert result.envelope() == {"success": True, "data": None}
