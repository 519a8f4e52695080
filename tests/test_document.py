"""Document extraction and rendering."""
import json

import pytest
import yaml

from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileFormat as F
from file_converter.converters.document import DocumentConverter, coerce_scalar, convert_text

RECORD = {"name": "Ada", "age": 36, "active": True, "score": 9.5, "tags": ["math", "engines"]}


def test_json_xml_json_round_trip():
    xml = convert_text(json.dumps(RECORD), F.JSON, F.XML)
    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert '<root xmlns:fc="urn:file-converter:xml" fc:type="object">' in xml
    assert "<tags>math</tags>" in xml
    back = json.loads(convert_text(xml, F.XML, F.JSON))
    assert back == RECORD


def test_json_list_xml_round_trip():
    rows = [{"id": 1, "city": "Paris"}, {"id": 2, "city": "Oslo"}]
    xml = convert_text(json.dumps(rows), F.JSON, F.XML)
    assert xml.count("<item>") == 2
    assert json.loads(convert_text(xml, F.XML, F.JSON)) == rows


def test_single_key_object_names_the_root():
    xml = convert_text('{"library": {"book": "Dune"}}', F.JSON, F.XML)
    assert "<library>" in xml and "<root>" not in xml
    assert json.loads(convert_text(xml, F.XML, F.JSON)) == {"library": {"book": "Dune"}}


@pytest.mark.parametrize(
    "record",
    [
        {"item": "x"},
        {"item": 3},
        {"root": {"a": 1}},
        {"root": "plain"},
        {"item": [1, 2], "root": {"item": "y"}},
        [{"item": 1}, {"item": 2}],
        [],
        {},
        ["solo"],
        "just text",
        42,
    ],
)
def test_xml_round_trip_keeps_wrapper_names_as_data(record):
    xml = convert_text(json.dumps(record), F.JSON, F.XML)
    assert json.loads(convert_text(xml, F.XML, F.JSON)) == record


def test_plain_root_element_is_data():
    data = json.loads(convert_text("<root><item>1</item><item>2</item></root>", F.XML, F.JSON))
    assert data == {"root": {"item": [1, 2]}}


def test_json_yaml_json_round_trip():
    text = convert_text(json.dumps(RECORD), F.JSON, F.YAML)
    assert yaml.safe_load(text) == RECORD
    assert text.splitlines()[0] == "name: Ada"
    assert json.loads(convert_text(text, F.YAML, F.JSON)) == RECORD


def test_xml_attributes_and_text():
    xml = '<book id="7" lang="en">note<title>Dune</title><title>Messiah</title></book>'
    data = json.loads(convert_text(xml, F.XML, F.JSON))
    assert data == {"book": {"@id": 7, "@lang": "en", "title": ["Dune", "Messiah"], "#text": "note"}}


def test_csv_values_are_coerced():
    rows = json.loads(convert_text("id,name,active,ratio\n1,Ada,true,0.5\n2,Bob,false,x\n", F.CSV, F.JSON))
    assert rows == [
        {"id": 1, "name": "Ada", "active": True, "ratio": 0.5},
        {"id": 2, "name": "Bob", "active": False, "ratio": "x"},
    ]


def test_json_to_csv_unions_columns_and_dumps_nested_values():
    data = [{"a": 1, "b": {"x": 1}}, {"a": 2, "c": [1, 2]}]
    out = convert_text(json.dumps(data), F.JSON, F.CSV)
    lines = out.splitlines()
    assert lines[0] == "a,b,c"
    assert lines[1] == '1,"{""x"": 1}",'
    assert lines[2] == "2,,\"[1, 2]\""


def test_json_object_to_csv_is_one_row():
    assert convert_text('{"a": 1, "b": "two"}', F.JSON, F.CSV) == "a,b\n1,two\n"


def test_html_to_text_drops_markup_and_scripts():
    page = (
        "<html><head><title>T</title><style>p{}</style></head>"
        "<body><h1>Hello</h1><script>alert(1)</script><p>First &amp; second</p></body></html>"
    )
    text = convert_text(page, F.HTML, F.TXT)
    assert "Hello" in text
    assert "First & second" in text
    assert "alert" not in text
    assert "<" not in text


def test_text_to_html_escapes_and_splits_paragraphs():
    out = convert_text("a < b\nsecond line\n\nnext para", F.TXT, F.HTML)
    assert "<!DOCTYPE html>" in out
    assert "<p>a &lt; b<br>\nsecond line</p>" in out
    assert "<p>next para</p>" in out


def test_markdown_to_text():
    out = convert_text("# Title\n\nSome **bold** and *em* with [a link](http://x) and `code`.", F.MD, F.TXT)
    assert out == "Title\n\nSome bold and em with a link and code."


def test_text_to_markdown_is_verbatim():
    assert convert_text("plain *text*", F.TXT, F.MD) == "plain *text*"


def test_records_to_text_is_pretty_json():
    out = convert_text("a: 1\nb: [x]\n", F.YAML, F.TXT)
    assert json.loads(out) == {"a": 1, "b": ["x"]}
    assert "\n  " in out


def test_text_cannot_become_records():
    with pytest.raises(ConversionFailedError, match="JSON output needs structured data"):
        convert_text("hello", F.TXT, F.JSON)


@pytest.mark.parametrize(
    "content, source, message",
    [
        ("{not json", F.JSON, "Invalid JSON"),
        ("a: [1, 2", F.YAML, "Invalid YAML"),
        ("<open>", F.XML, "Invalid XML"),
    ],
)
def test_invalid_sources(content, source, message):
    with pytest.raises(ConversionFailedError, match=message):
        convert_text(content, source, F.TXT)


@pytest.mark.parametrize(
    "text, expected",
    [("42", 42), ("-3", -3), ("2.5", 2.5), ("1e3", 1000.0), ("true", True), ("false", False),
     ("007", "007"), ("", ""), ("abc", "abc")],
)
def test_coerce_scalar(text, expected):
    assert coerce_scalar(text) == expected
    assert type(coerce_scalar(text)) is type(expected)


def test_document_converter_reads_and_writes_files(tmp_path):
    src = tmp_path / "data.json"
    src.write_bytes(b"\xef\xbb\xbf" + "{\"greeting\": \"héllo\"}".encode("utf-8"))
    out = tmp_path / "data.yaml"
    DocumentConverter().convert(src, out, F.JSON, F.YAML)
    assert out.read_text(encoding="utf-8") == "greeting: héllo\n"


def test_document_converter_rejects_binary(tmp_path):
    src = tmp_path / "blob.txt"
    src.write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(ConversionFailedError, match="not valid UTF-8"):
        DocumentConverter().convert(src, tmp_path / "out.html", F.TXT, F.HTML)
