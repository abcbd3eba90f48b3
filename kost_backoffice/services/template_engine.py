"""
.docx template merging.

A template is a WordprocessingML archive whose text contains `{tokenName}`
placeholders. Word often splits one placeholder over several `<w:t>` runs
(spell-check marks, formatting changes), so tokens are matched against the
concatenated run text and written back into the run that holds the opening
brace.
"""
import asyncio
import io
import re
import zipfile
import zlib
from bisect import bisect_right
from pathlib import Path
from typing import List, Mapping, Protocol, Tuple, Union
from xml.sax.saxutils import escape

from kost_backoffice.core.config import TEMPLATE_DIR
from kost_backoffice.core.errors import RenderError, TemplateMissingError
from kost_backoffice.models.enums import DocumentType

TemplateValue = Union[str, int, float]

TOKEN_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")
TEXT_NODE_PATTERN = re.compile(r"(<w:t(?:\s[^>]*)?(?<!/)>)(.*?)(</w:t>)", re.DOTALL)
CONTENT_PART_PATTERN = re.compile(r"^word/(document|header\d*|footer\d*|footnotes|endnotes)\.xml$")

MAIN_PART = "word/document.xml"

# What zipfile raises for a readable index over corrupt, truncated,
# encrypted or unsupported member data
ARCHIVE_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)

LINE_BREAK = '</w:t><w:br/><w:t xml:space="preserve">'

TEMPLATE_NAMES = {
    DocumentType.BOOKING_SLIP: "booking-slip",
    DocumentType.INVOICE: "invoice",
    DocumentType.RECEIPT: "receipt",
}


def _xml_value(value) -> str:
    text = "" if value is None else str(value)
    return escape(text).replace("\n", LINE_BREAK)


def merge_tokens(texts: List[str], data: Mapping[str, TemplateValue]) -> Tuple[List[str], List[str]]:
    """
    Substitute tokens across a sequence of run texts.

    Returns the new run texts (same length as `texts`) and the names of
    tokens that had no value in `data`.
    """
    full = "".join(texts)
    starts = []
    position = 0
    for text in texts:
        starts.append(position)
        position += len(text)

    pieces = [[] for _ in texts]
    unresolved = []

    def owner(index: int) -> int:
        return bisect_right(starts, index) - 1

    def copy(begin: int, end: int):
        while begin < end:
            node = owner(begin)
            stop = min(end, starts[node] + len(texts[node]))
            pieces[node].append(full[begin:stop])
            begin = stop

    cursor = 0
    for match in TOKEN_PATTERN.finditer(full):
        copy(cursor, match.start())
        name = match.group(1)
        if name in data:
            pieces[owner(match.start())].append(_xml_value(data[name]))
        else:
            unresolved.append(name)
            pieces[owner(match.start())].append(match.group(0))
        cursor = match.end()
    copy(cursor, len(full))

    return ["".join(piece) for piece in pieces], unresolved


def render_part(xml: str, data: Mapping[str, TemplateValue]) -> Tuple[str, List[str]]:
    nodes = list(TEXT_NODE_PATTERN.finditer(xml))
    if not nodes:
        return xml, []

    merged, unresolved = merge_tokens([node.group(2) for node in nodes], data)

    output = []
    last = 0
    for node, text in zip(nodes, merged):
        output.append(xml[last:node.start()])
        open_tag = node.group(1)
        if text != node.group(2) and "xml:space" not in open_tag:
            open_tag = open_tag[:-1] + ' xml:space="preserve">'
        output.append(open_tag + text + node.group(3))
        last = node.end()
    output.append(xml[last:])

    return "".join(output), unresolved


class TemplateRenderingEngine:
    """Stateless: every call works on its own archive copy."""

    def render(self, template: bytes, data: Mapping[str, TemplateValue]) -> bytes:
        try:
            source = zipfile.ZipFile(io.BytesIO(template))
        except zipfile.BadZipFile as e:
            raise TemplateMissingError(f"Template is not a readable .docx archive: {e}") from e

        with source:
            if MAIN_PART not in source.namelist():
                raise TemplateMissingError(f"Template archive has no {MAIN_PART}")

            # Every member is read up front so a corrupt one fails before any output
            try:
                members = [(item, source.read(item.filename)) for item in source.infolist()]
            except ARCHIVE_READ_ERRORS as e:
                raise TemplateMissingError(f"Template archive is unreadable: {e}") from e

        parts = []
        unresolved = set()
        for item, content in members:
            if CONTENT_PART_PATTERN.match(item.filename):
                try:
                    xml, missing = render_part(content.decode("utf-8"), data)
                except UnicodeDecodeError as e:
                    raise TemplateMissingError(f"Template part {item.filename} is not UTF-8: {e}") from e
                content = xml.encode("utf-8")
                unresolved.update(missing)
            parts.append((item, content))

        if unresolved:
            names = sorted(unresolved)
            raise RenderError(
                f"No data for template tokens: {', '.join(names)}",
                missing_tokens=names,
            )

        output = io.BytesIO()
        with zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED) as target:
            for item, content in parts:
                target.writestr(item, content, compress_type=zipfile.ZIP_DEFLATED)

        return output.getvalue()


# ---------------- TEMPLATE SOURCE ----------------
class TemplateSource(Protocol):
    async def load(self, template_name: str) -> bytes: ...


class FileSystemTemplateSource:
    """Loads `<template_dir>/<name>-template.docx`."""

    def __init__(self, template_dir: Union[str, Path] = TEMPLATE_DIR):
        self.template_dir = Path(template_dir)

    def path_for(self, template_name: str) -> Path:
        return self.template_dir / f"{template_name}-template.docx"

    async def load(self, template_name: str) -> bytes:
        path = self.path_for(template_name)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise TemplateMissingError(
                f"Template '{template_name}' not found or unreadable, expected at {path}",
                template_path=str(path),
            ) from e
