"""Text document conversion.

Every conversion goes through one intermediate value: an extractor reads the
source into either plain text or structured records (dicts, lists and
scalars), and a renderer writes that value in the target format. Adding a
format means adding one extractor and/or one renderer, not one function per
pair. Renderers that take text accept records by first rendering them as
plain text; renderers that need records refuse a text intermediate.
"""
import csv
import html
import io
import json
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml
from bs4 import BeautifulSoup

from file_converter.conversion.errors import ConversionFailedError
from file_converter.conversion.models import FileCategory, FileFormat
from file_converter.converters.base import Converter

logger = logging.getLogger("file_converter.document")

TEXT = "text"
RECORDS = "records"

XML_ROOT = "root"
XML_LIST_ITEM = "item"

# The wrapper root written by render_xml carries fc:type="object|list|value".
# Names derived from record keys never have a namespace, so the marker
# cannot collide with data.
XML_NAMESPACE = "urn:file-converter:xml"
ET.register_namespace("fc", XML_NAMESPACE)
_WRAPPER_KIND = f"{{{XML_NAMESPACE}}}type"


@dataclass
class Intermediate:
    kind: str  # TEXT | RECORDS
    value: Any


# ---- scalars -------------------------------------------------------------

_INT_RE = re.compile(r"^-?(0|[1-9]\d*)$")
_FLOAT_RE = re.compile(r"^-?(0|[1-9]\d*)(\.\d+)?([eE][-+]?\d+)?$")


def coerce_scalar(text: str) -> Any:
    """Recover numbers and booleans from text-only formats (XML, CSV)."""
    if text in ("true", "false"):
        return text == "true"
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return text


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---- extractors ----------------------------------------------------------

def extract_text(content: str) -> Intermediate:
    return Intermediate(TEXT, content)


def extract_markdown(content: str) -> Intermediate:
    plain = re.sub(r"^#{1,6}\s+", "", content, flags=re.M)
    plain = re.sub(r"\*\*(.*?)\*\*", r"\1", plain)
    plain = re.sub(r"\*(.*?)\*", r"\1", plain)
    plain = re.sub(r"!?\[(.*?)\]\(.*?\)", r"\1", plain)
    plain = re.sub(r"`(.*?)`", r"\1", plain)
    return Intermediate(TEXT, plain)


def extract_html(content: str) -> Intermediate:
    soup = BeautifulSoup(content, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    text = soup.get_text("\n")
    lines = [line.strip() for line in text.splitlines()]
    collapsed = re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()
    return Intermediate(TEXT, collapsed + "\n" if collapsed else "")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_obj(el: ET.Element) -> Any:
    children = list(el)
    attrs = {f"@{_local_name(k)}": coerce_scalar(v) for k, v in el.attrib.items()}
    text = (el.text or "").strip()
    if not children and not attrs:
        return coerce_scalar(text)
    result: dict[str, Any] = dict(attrs)
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_obj(child)
        if key in result:
            if not isinstance(result[key], list):
                result[key] = [result[key]]
            result[key].append(value)
        else:
            result[key] = value
    if text:
        result["#text"] = coerce_scalar(text)
    return result


def extract_xml(content: str) -> Intermediate:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ConversionFailedError(f"Invalid XML: {e}") from e
    kind = root.attrib.pop(_WRAPPER_KIND, None)
    if kind == "list":
        return Intermediate(RECORDS, [_element_to_obj(child) for child in root])
    if kind == "object":
        if not len(root) and not root.attrib and not (root.text or "").strip():
            return Intermediate(RECORDS, {})
        return Intermediate(RECORDS, _element_to_obj(root))
    if kind == "value":
        return Intermediate(RECORDS, coerce_scalar((root.text or "").strip()))
    return Intermediate(RECORDS, {_local_name(root.tag): _element_to_obj(root)})


def extract_json(content: str) -> Intermediate:
    try:
        return Intermediate(RECORDS, json.loads(content))
    except json.JSONDecodeError as e:
        raise ConversionFailedError(f"Invalid JSON: {e}") from e


def extract_yaml(content: str) -> Intermediate:
    try:
        return Intermediate(RECORDS, yaml.safe_load(content))
    except yaml.YAMLError as e:
        raise ConversionFailedError(f"Invalid YAML: {e}") from e


def extract_csv(content: str) -> Intermediate:
    reader = csv.DictReader(io.StringIO(content))
    rows = []
    for row in reader:
        rows.append({k: coerce_scalar(v) if isinstance(v, str) else v for k, v in row.items() if k is not None})
    return Intermediate(RECORDS, rows)


# ---- renderers -----------------------------------------------------------

def records_to_text(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str) + "\n"


def render_text(value: str) -> str:
    return value


def render_html(value: str) -> str:
    paragraphs = [p for p in re.split(r"\n\s*\n", value.strip()) if p.strip()]
    body = "\n".join(
        "<p>" + "<br>\n".join(html.escape(line) for line in p.splitlines()) + "</p>" for p in paragraphs
    )
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n<title>Converted document</title>\n"
        f"</head>\n<body>\n{body}\n</body>\n</html>\n"
    )


_XML_NAME_BAD = re.compile(r"[^A-Za-z0-9_.\-]")


def _xml_name(key: Any) -> str:
    name = _XML_NAME_BAD.sub("_", str(key)) or "_"
    if not (name[0].isalpha() or name[0] == "_") or name.lower().startswith("xml"):
        name = "_" + name
    return name


def _fill_element(el: ET.Element, value: Any) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            key = str(key)
            if key.startswith("@"):
                el.set(_xml_name(key[1:]), _scalar_text(child))
            elif key == "#text":
                el.text = _scalar_text(child)
            elif isinstance(child, list):
                for item in child:
                    _fill_element(ET.SubElement(el, _xml_name(key)), item)
            else:
                _fill_element(ET.SubElement(el, _xml_name(key)), child)
    elif isinstance(value, list):
        for item in value:
            _fill_element(ET.SubElement(el, XML_LIST_ITEM), item)
    else:
        el.text = _scalar_text(value)


def _serialize(root: ET.Element) -> str:
    ET.indent(root)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def render_xml(value: Any) -> str:
    """Records as XML. ``{"name": {...}}`` becomes ``<name>``; anything else is wrapped in a marked ``<root>``."""
    if isinstance(value, dict) and len(value) == 1:
        (key, inner), = value.items()
        if isinstance(inner, dict) and _xml_name(key) == str(key):
            root = ET.Element(str(key))
            _fill_element(root, inner)
            return _serialize(root)
    root = ET.Element(XML_ROOT)
    _fill_element(root, value)
    if isinstance(value, dict):
        root.set(_WRAPPER_KIND, "object")
    elif isinstance(value, list):
        root.set(_WRAPPER_KIND, "list")
    else:
        root.set(_WRAPPER_KIND, "value")
    return _serialize(root)


def render_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str) + "\n"


def render_yaml(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=False, allow_unicode=True, default_flow_style=False)


def _csv_cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return _scalar_text(value)


def render_csv(value: Any) -> str:
    rows = value if isinstance(value, list) else [value]
    rows = [r if isinstance(r, dict) else {"value": r} for r in rows]
    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if str(key) not in fieldnames:
                fieldnames.append(str(key))
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=fieldnames, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({str(k): _csv_cell(v) for k, v in row.items()})
    return out.getvalue()


EXTRACTORS: dict[FileFormat, Callable[[str], Intermediate]] = {
    FileFormat.TXT: extract_text,
    FileFormat.MD: extract_markdown,
    FileFormat.HTML: extract_html,
    FileFormat.XML: extract_xml,
    FileFormat.JSON: extract_json,
    FileFormat.YAML: extract_yaml,
    FileFormat.CSV: extract_csv,
}

# target -> (intermediate kind it consumes, renderer)
RENDERERS: dict[FileFormat, tuple[str, Callable[[Any], str]]] = {
    FileFormat.TXT: (TEXT, render_text),
    FileFormat.MD: (TEXT, render_text),
    FileFormat.HTML: (TEXT, render_html),
    FileFormat.XML: (RECORDS, render_xml),
    FileFormat.JSON: (RECORDS, render_json),
    FileFormat.YAML: (RECORDS, render_yaml),
    FileFormat.CSV: (RECORDS, render_csv),
}


def convert_text(content: str, source: FileFormat, target: FileFormat) -> str:
    """Convert document content in memory: extract from ``source``, render as ``target``."""
    extractor = EXTRACTORS.get(source)
    if extractor is None:
        raise ConversionFailedError(f"No reader for {source.value} documents")
    if target not in RENDERERS:
        raise ConversionFailedError(f"No writer for {target.value} documents")
    needs, renderer = RENDERERS[target]
    intermediate = extractor(content)
    if needs == TEXT and intermediate.kind == RECORDS:
        return renderer(records_to_text(intermediate.value))
    if needs == RECORDS and intermediate.kind == TEXT:
        raise ConversionFailedError(
            f"{target.value.upper()} output needs structured data; {source.value.upper()} only provides plain text"
        )
    return renderer(intermediate.value)


class DocumentConverter(Converter):
    category = FileCategory.DOCUMENT
    targets = frozenset(RENDERERS)

    def convert(self, input_path: Path, output_path: Path, source: FileFormat, target: FileFormat) -> None:
        try:
            content = input_path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise ConversionFailedError(f"{source.value.upper()} file is not valid UTF-8 text") from e
        output_path.write_text(convert_text(content, source, target), encoding="utf-8")
        logger.info("Converted %s -> %s", input_path.name, output_path.name)
