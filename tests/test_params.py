"""Tests for submitted parameter parsing and the Params mapping."""

import pytest

from formfields.context import BindingContext
from formfields.params import Params, UploadFile, parse_params, parse_query

# ---------------------------------------------------------------------------
# Params unit tests
# ---------------------------------------------------------------------------


class TestParams:
    def test_getitem_returns_first(self) -> None:
        params = Params({"user.roles": ["admin", "dev"]})
        assert params["user.roles"] == "admin"

    def test_getitem_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            Params({})["missing"]

    def test_get_with_default(self) -> None:
        params = Params({})
        assert params.get("missing") is None
        assert params.get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        params = Params({"tags": ["python", "web"]})
        assert params.get_list("tags") == ["python", "web"]
        assert params.get_list("missing") == []

    def test_mapping_protocol(self) -> None:
        params = Params({"a": ["1"], "b": ["2"]})
        assert set(params) == {"a", "b"}
        assert len(params) == 2
        assert "a" in params
        assert "c" not in params

    def test_repr(self) -> None:
        assert repr(Params({"name": ["alice"]})) == "Params({'name': 'alice'})"

    def test_from_mapping(self) -> None:
        params = Params.from_mapping({"a": "x", "b": ["1", 2], "c": None, "d": 0})
        assert params.get_list("a") == ["x"]
        assert params.get_list("b") == ["1", "2"]
        assert "c" not in params
        assert params["d"] == "0"

    def test_from_mapping_keeps_params(self) -> None:
        params = Params({"a": ["x"]})
        assert Params.from_mapping(params) is params

    def test_lookup(self) -> None:
        upload = UploadFile("me.png", "image/png", 3, b"png")
        params = Params({"one": ["1"], "many": ["1", "2"], "blank": [""]}, {"avatar": upload})
        assert params.lookup("one") == (True, "1")
        assert params.lookup("many") == (True, ["1", "2"])
        assert params.lookup("blank") == (True, "")
        assert params.lookup("avatar") == (True, upload)
        assert params.lookup("missing") == (False, None)

    def test_files(self) -> None:
        upload = UploadFile("a.txt", "text/plain", 5, b"hello")
        params = Params({}, {"doc": upload})
        assert params.files["doc"].read() == b"hello"
        assert len(Params({}).files) == 0


class TestUploadFile:
    def test_repr(self) -> None:
        assert repr(UploadFile("a.txt", "text/plain", 5, b"hello")) == "UploadFile('a.txt', 'text/plain', 5 bytes)"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseUrlEncoded:
    def test_dotted_names(self) -> None:
        params = parse_params(
            b"user.name=sshaw&user.addresses.0.street=Main+St", "application/x-www-form-urlencoded"
        )
        assert params["user.name"] == "sshaw"
        assert params["user.addresses.0.street"] == "Main St"

    def test_repeated_names(self) -> None:
        params = parse_params(b"tag=a&tag=b", "application/x-www-form-urlencoded; charset=utf-8")
        assert params.get_list("tag") == ["a", "b"]

    def test_blank_values_kept(self) -> None:
        params = parse_params(b"user.name=", "application/x-www-form-urlencoded")
        assert params["user.name"] == ""

    def test_empty_body(self) -> None:
        assert len(parse_params(b"", "application/x-www-form-urlencoded")) == 0

    def test_query_string(self) -> None:
        assert parse_query("q=hello+world&path=%2Ffoo") == {"q": "hello world", "path": "/foo"}


class TestParseMultipart:
    def test_fields_and_files(self) -> None:
        pytest.importorskip("python_multipart")
        body = (
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="user.name"\r\n\r\n'
            b"sshaw\r\n"
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="user.avatar"; filename="me.txt"\r\n'
            b"Content-Type: text/plain\r\n\r\n"
            b"hello\r\n"
            b"--XyZ--\r\n"
        )
        params = parse_params(body, "multipart/form-data; boundary=XyZ")
        assert params["user.name"] == "sshaw"
        upload = params.files["user.avatar"]
        assert upload.filename == "me.txt"
        assert upload.content_type == "text/plain"
        assert upload.read() == b"hello"

    def test_missing_boundary(self) -> None:
        pytest.importorskip("python_multipart")
        with pytest.raises(ValueError, match="boundary"):
            parse_params(b"", "multipart/form-data")


class TestParseUnsupported:
    def test_unsupported_content_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported form content type"):
            parse_params(b"{}", "application/json")


class TestBindingContext:
    def test_create_normalizes_params(self) -> None:
        ctx = BindingContext.create({"user": {}}, {"user.name": "x"})
        assert isinstance(ctx.params, Params)
        assert ctx.submitted("user.name") == (True, "x")
        assert ctx.submitted("user.age") == (False, None)

    def test_defaults(self) -> None:
        ctx = BindingContext()
        assert len(ctx.stash) == 0
        assert len(ctx.params) == 0
