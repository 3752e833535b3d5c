"""
XLIFF 1.2 document model.

One document holds one domain in one target language:

    <xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" version="1.2">
      <file source-language="en" target-language="de" datatype="plaintext" ...>
        <header><tool tool-id="..." tool-name="..." tool-version="..."/></header>
        <body>
          <trans-unit id="{sha1 of string name}" resname="{string name}">
            <source>...</source>
            <target>...</target>
          </trans-unit>
        </body>
      </file>
    </xliff>

XliffDocument and TransUnit satisfy the Domain and String/Translation contracts of
transapi.model, so a parsed document can be handed straight to
DataStore.import_domain().
"""

import hashlib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from transapi import __version__
from transapi.exceptions import ValidationError
from transapi.language_codes import parse_xliff_file_name
from transapi.model import Language

XLIFF_NAMESPACE = "urn:oasis:names:tc:xliff:document:1.2"
XLIFF_VERSION = "1.2"
TOOL_ID = "transapi"
TOOL_NAME = "transapi"
DATATYPE = "plaintext"
ORIGINAL = "not.available"

ET.register_namespace("", XLIFF_NAMESPACE)


def string_hash(name: str) -> str:
    """SHA-1 hex digest of a string name, used as the trans-unit id."""
    return hashlib.sha1(name.encode("utf-8")).hexdigest()


@dataclass
class TransUnit:
    """One string with its content in the document's target language."""
    language: Language
    resname: str
    source: str
    target: str
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = string_hash(self.resname)

    @property
    def name(self) -> str:
        return self.resname

    @property
    def content(self) -> str:
        return self.target

    @property
    def translations(self) -> Dict[Language, "TransUnit"]:
        return {self.language: self}


@dataclass
class XliffDocument:
    """One domain in one target language."""
    name: str
    source_language: str
    target_language: str
    date: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds"))
    trans_units: List[TransUnit] = field(default_factory=list)

    @property
    def strings(self) -> List[TransUnit]:
        return self.trans_units

    def add(self, name: str, source: str, target: str) -> TransUnit:
        unit = TransUnit(
            language=Language(code=self.target_language),
            resname=name,
            source=source,
            target=target,
        )
        self.trans_units.append(unit)
        return unit


def _qname(tag: str) -> str:
    return f"{{{XLIFF_NAMESPACE}}}{tag}"


def to_xml(document: XliffDocument) -> bytes:
    """Serialize a document to indented UTF-8 XML with an XML declaration."""
    root = ET.Element(_qname("xliff"), {"version": XLIFF_VERSION})
    file_el = ET.SubElement(root, _qname("file"), {
        "date": document.date,
        "datatype": DATATYPE,
        "original": ORIGINAL,
        "source-language": document.source_language,
        "target-language": document.target_language,
    })
    header = ET.SubElement(file_el, _qname("header"))
    ET.SubElement(header, _qname("tool"), {
        "tool-id": TOOL_ID,
        "tool-name": TOOL_NAME,
        "tool-version": __version__,
    })
    body = ET.SubElement(file_el, _qname("body"))
    for unit in document.trans_units:
        unit_el = ET.SubElement(body, _qname("trans-unit"), {"id": unit.id, "resname": unit.resname})
        ET.SubElement(unit_el, _qname("source")).text = unit.source
        ET.SubElement(unit_el, _qname("target")).text = unit.target

    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def _strip_namespaces(root: ET.Element):
    """Reduce every tag to its local name so files with or without xmlns parse alike."""
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]


def from_xml(data: bytes, domain_name: str) -> XliffDocument:
    """
    Parse XLIFF bytes into a document for the given domain.

    Every trans-unit is tagged with the file's target-language.

    Raises:
        ValidationError: If the XML is malformed or lacks required parts
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ValidationError(f"Invalid XLIFF XML: {e}") from e
    _strip_namespaces(root)

    if root.tag != "xliff":
        raise ValidationError(f"Expected <xliff> root element, found <{root.tag}>")
    file_el = root.find("file")
    if file_el is None:
        raise ValidationError("XLIFF document has no <file> element")

    document = XliffDocument(
        name=domain_name,
        source_language=file_el.get("source-language", ""),
        target_language=file_el.get("target-language", ""),
        date=file_el.get("date", ""),
    )
    language = Language(code=document.target_language)

    for unit_el in file_el.iterfind("body/trans-unit"):
        resname = unit_el.get("resname")
        if not resname:
            raise ValidationError(
                f"trans-unit '{unit_el.get('id', '')}' has no resname attribute"
            )
        document.trans_units.append(TransUnit(
            language=language,
            resname=resname,
            source=unit_el.findtext("source", default=""),
            target=unit_el.findtext("target", default=""),
            id=unit_el.get("id", ""),
        ))

    return document


def parse_file(path) -> XliffDocument:
    """
    Decode one '{domain}.{language}.xliff' file into a domain fragment.

    The filename is checked before any XML is read, and the document's
    target-language must equal the language named in the filename.

    Raises:
        ValidationError: Bad filename, malformed XML or language mismatch
        OSError: If the file cannot be read
    """
    path = Path(path)
    info = parse_xliff_file_name(path.name)
    if info is None:
        raise ValidationError(f"Domain name or language missing from filename '{path.name}'")
    domain_name, expected_language = info

    document = from_xml(path.read_bytes(), domain_name)

    if document.target_language != expected_language:
        raise ValidationError(
            f"Found language '{document.target_language}' but expected '{expected_language}' "
            f"based on filename '{path}'"
        )

    return document
