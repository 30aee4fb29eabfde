"""Tests for perch.http.response — chainable immutable Response."""

from perch.http.response import Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.status == 200
        assert r.body == ""
        assert r.content_type == "text/plain; charset=utf-8"

    def test_with_status_returns_new(self) -> None:
        original = Response("ok")
        changed = original.with_status(201)
        assert changed.status == 201
        assert original.status == 200

    def test_chaining(self) -> None:
        r = (
            Response("x")
            .with_header("X-A", "1")
            .with_headers({"X-B": "2"})
            .with_content_type("application/xml")
        )
        assert r.headers == (("X-A", "1"), ("X-B", "2"))
        assert r.content_type == "application/xml"

    def test_header_lookup(self) -> None:
        r = Response(headers=(("Location", "/a"),))
        assert r.header("location") == "/a"
        assert r.header("missing") is None
        assert r.header("missing", "d") == "d"

    def test_body_conversions(self) -> None:
        assert Response("héllo").body_bytes == "héllo".encode()
        assert Response(b"abc").text == "abc"
