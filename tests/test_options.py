import datetime
import io
from http.cookiejar import CookieJar

import httpx
import pytest

import httpopts
from httpopts._options import apply_options


def build(*options: httpopts.Option) -> httpopts.RequestArguments:
    return apply_options(httpopts.RequestArguments(), options)


def test_map_options_merge():
    args = build(
        httpopts.headers({"A": "1", "B": "1"}),
        httpopts.headers({"B": "2"}),
        httpopts.params({"x": "1"}),
        httpopts.params({"y": "2"}),
        httpopts.cookies({"c1": "v1"}),
        httpopts.cookies({"c1": "v2", "c2": "v3"}),
    )
    assert args.headers == {"A": "1", "B": "2"}
    assert args.params == {"x": "1", "y": "2"}
    assert args.cookies == {"c1": "v2", "c2": "v3"}


def test_data_merges_later_keys_win():
    args = build(httpopts.data({"a": "1"}), httpopts.data({"a": "2", "b": "2"}))
    assert args.data == {"a": "2", "b": "2"}


def test_map_values_are_stringified():
    args = build(httpopts.params({"page": 2}), httpopts.data({"flag": True}))
    assert args.params == {"page": "2"}
    assert args.data == {"flag": "True"}


def test_header_single_value():
    args = build(httpopts.header("X-Token", "abc"))
    assert args.headers == {"X-Token": "abc"}


def test_scalar_options_last_write_wins():
    first = httpx.Client()
    second = httpx.Client()
    jar_a, jar_b = CookieJar(), CookieJar()
    try:
        args = build(
            httpopts.auth("a", "1"),
            httpopts.auth("b", "2"),
            httpopts.body(b"one"),
            httpopts.body(b"two"),
            httpopts.client(first),
            httpopts.client(second),
            httpopts.cookie_jar(jar_a),
            httpopts.cookie_jar(jar_b),
            httpopts.timeout(1),
            httpopts.timeout(2.5),
            httpopts.redirect_limit(3),
            httpopts.redirect_limit(5),
        )
    finally:
        first.close()
        second.close()
    assert args.auth == ("b", "2")
    assert args.body == b"two"
    assert args.client is second
    assert args.jar is jar_b
    assert args.timeout == 2.5
    assert args.redirect_limit == 5


@pytest.mark.parametrize(
    "value,expected",
    [
        ('{"a":1}', httpopts.RawText('{"a":1}')),
        (b'{"a":1}', httpopts.RawBytes(b'{"a":1}')),
        (bytearray(b"[]"), httpopts.RawBytes(b"[]")),
        ({"a": 1}, httpopts.Structured({"a": 1})),
        ([1, 2], httpopts.Structured([1, 2])),
        (httpopts.Structured("text"), httpopts.Structured("text")),
    ],
)
def test_json_variants(value, expected):
    args = build(httpopts.json(value))
    assert args.json == expected


def test_files_accumulate():
    one = httpopts.FileField("f1", "a.txt", io.BytesIO(b"a"))
    two = httpopts.FileField("f2", "b.txt", io.BytesIO(b"b"))
    args = build(httpopts.files(one), httpopts.files(two))
    assert args.files == [one, two]


def test_file_content_reads_bytes(tmp_path):
    path = tmp_path / "file4upload"
    path.write_bytes(b"upload me")
    args = build(httpopts.file_content(path))
    assert args.body == b"upload me"


def test_file_content_missing_file(tmp_path):
    with pytest.raises(httpopts.StreamError):
        build(httpopts.file_content(tmp_path / "missing"))


def test_multipart_form_splits_files_and_fields(tmp_path):
    path = tmp_path / "file4upload"
    path.write_bytes(b"contents")
    reader = io.BytesIO(b"value2")
    with open(path, "rb") as f:
        args = build(
            httpopts.multipart_form(
                {"field1": io.StringIO("value1"), "field2": reader, "file1": f}
            )
        )
        assert args.multipart is True
        assert args.data == {"field1": "value1", "field2": "value2"}
        assert [(x.field_name, x.file_name) for x in args.files] == [
            ("file1", "file4upload")
        ]
        assert args.files[0].content is f
    assert reader.closed


def test_object_param_is_stored():
    args = build(httpopts.object_param({"a": ["1", "2"]}))
    assert args.object_param == {"a": ["1", "2"]}


@pytest.mark.parametrize(
    "factory",
    [
        lambda: httpopts.redirect_limit(-1),
        lambda: httpopts.timeout(-0.5),
        lambda: httpopts.timeout(datetime.timedelta(seconds=-1)),
    ],
)
def test_invalid_values(factory):
    with pytest.raises(ValueError):
        factory()


def test_from_defaults_copies_headers():
    defaults = httpopts.Defaults(headers={"User-Agent": "test"})
    args = httpopts.RequestArguments.from_defaults(defaults)
    args.headers["X"] = "1"
    assert dict(defaults.headers) == {"User-Agent": "test"}
    assert args.redirect_limit == defaults.redirect_limit
    assert args.default_redirect_limit == defaults.redirect_limit


def test_timedelta_timeout_is_accepted():
    args = build(httpopts.timeout(datetime.timedelta(seconds=3)))
    assert args.timeout == datetime.timedelta(seconds=3)


def test_closed_form_reader_raises_stream_error():
    reader = io.StringIO("value")
    reader.close()
    with pytest.raises(httpopts.StreamError):
        build(httpopts.multipart_form({"field": reader}))
