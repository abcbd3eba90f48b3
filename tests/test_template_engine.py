import asyncio
import io
import zipfile

import pytest
from conftest import corrupt_member, make_docx, read_part

from kost_backoffice.core.errors import RenderError, TemplateMissingError
from kost_backoffice.services.template_engine import (
    TEMPLATE_NAMES,
    FileSystemTemplateSource,
    TemplateRenderingEngine,
    merge_tokens,
)

engine = TemplateRenderingEngine()


def test_plain_token_is_replaced():
    rendered = engine.render(make_docx("Nama: {guestName}"), {"guestName": "Rina Putri"})
    xml = read_part(rendered)
    assert "Nama: Rina Putri" in xml
    assert "{" not in xml


def test_token_split_across_runs():
    template = make_docx(
        '<w:r><w:t>Halo {gue</w:t></w:r>'
        '<w:r><w:rPr><w:b/></w:rPr><w:t>stNa</w:t></w:r>'
        '<w:r><w:t>me}!</w:t></w:r>'
    )
    xml = read_part(engine.render(template, {"guestName": "Rina"}))

    assert '<w:t xml:space="preserve">Halo Rina</w:t>' in xml
    assert '<w:t xml:space="preserve">!</w:t>' in xml
    assert "stNa" not in xml
    # run formatting survives
    assert "<w:rPr><w:b/></w:rPr>" in xml


def test_merge_tokens_keeps_run_count():
    texts, unresolved = merge_tokens(["{a}{", "b}", " tail"], {"a": "1", "b": "2"})
    assert texts == ["12", "", " tail"]
    assert unresolved == []


def test_missing_value_raises_render_error():
    template = make_docx("{guestName} {roomNumber} {bookingId}")
    with pytest.raises(RenderError) as excinfo:
        engine.render(template, {"guestName": "Rina"})
    assert excinfo.value.missing_tokens == ["bookingId", "roomNumber"]


def test_extra_data_keys_are_ignored():
    rendered = engine.render(make_docx("{guestName}"), {"guestName": "Rina", "unused": "x"})
    assert "Rina" in read_part(rendered)


def test_values_are_xml_escaped():
    rendered = engine.render(make_docx("{description}"), {"description": "Kamar <A> & B"})
    xml = read_part(rendered)
    assert "Kamar &lt;A&gt; &amp; B" in xml


def test_newlines_become_line_breaks():
    rendered = engine.render(make_docx("{companyAddress}"), {"companyAddress": "Jl. Mawar 1\nBandung"})
    xml = read_part(rendered)
    assert "Jl. Mawar 1</w:t><w:br/>" in xml
    assert ">Bandung</w:t>" in xml


def test_numbers_are_rendered_as_text():
    rendered = engine.render(make_docx("{quantity} x {priceIdrRaw}"), {"quantity": 1, "priceIdrRaw": 1000000})
    assert "1 x 1000000" in read_part(rendered)


def test_headers_and_footers_are_rendered():
    header = (
        '<w:hdr xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        "<w:p><w:r><w:t>{companyName}</w:t></w:r></w:p></w:hdr>"
    )
    template = make_docx("body", extra_parts={"word/header1.xml": header})
    rendered = engine.render(template, {"companyName": "SUMAN RESIDENCE"})

    assert "SUMAN RESIDENCE" in read_part(rendered, "word/header1.xml")


def test_non_content_parts_are_copied_verbatim():
    template = make_docx("{x}", extra_parts={"word/styles.xml": "<w:styles>{notAToken}</w:styles>"})
    rendered = engine.render(template, {"x": "1"})

    assert read_part(rendered, "word/styles.xml") == "<w:styles>{notAToken}</w:styles>"
    with zipfile.ZipFile(io.BytesIO(rendered)) as archive:
        assert archive.namelist() == ["[Content_Types].xml", "word/document.xml", "word/styles.xml"]


def test_render_does_not_touch_the_template():
    template = make_docx("{guestName}")
    engine.render(template, {"guestName": "A"})
    assert "{guestName}" in read_part(template)


def test_corrupt_archive_is_a_missing_template():
    with pytest.raises(TemplateMissingError):
        engine.render(b"not a zip file", {})


def test_archive_without_document_part_is_a_missing_template():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")

    with pytest.raises(TemplateMissingError):
        engine.render(buffer.getvalue(), {})


def test_file_system_source_names_the_missing_path(tmp_path):
    source = FileSystemTemplateSource(tmp_path)

    with pytest.raises(TemplateMissingError) as excinfo:
        asyncio.run(source.load("invoice"))

    assert excinfo.value.template_path == str(tmp_path / "invoice-template.docx")
    assert "invoice-template.docx" in excinfo.value.message


def test_file_system_source_reads_template(tmp_path):
    (tmp_path / "receipt-template.docx").write_bytes(b"docx-bytes")
    assert asyncio.run(FileSystemTemplateSource(tmp_path).load("receipt")) == b"docx-bytes"


@pytest.mark.parametrize("template_name", sorted(TEMPLATE_NAMES.values()))
def test_shipped_templates_are_valid_archives(template_name):
    content = asyncio.run(FileSystemTemplateSource().load(template_name))
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        assert "word/document.xml" in archive.namelist()


def test_corrupt_member_data_is_a_missing_template():
    template = corrupt_member(make_docx("{guestName}"))

    with pytest.raises(TemplateMissingError) as excinfo:
        engine.render(template, {"guestName": "Rina"})
    assert "unreadable" in excinfo.value.message


def test_corrupt_non_content_part_is_a_missing_template():
    template = corrupt_member(
        make_docx("{x}", extra_parts={"word/styles.xml": "<w:styles>" + "s" * 200 + "</w:styles>"}),
        "word/styles.xml",
    )

    with pytest.raises(TemplateMissingError):
        engine.render(template, {"x": "1"})


def test_non_utf8_content_part_is_a_missing_template():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("word/document.xml", b"<w:t>\xff\xfe</w:t>")

    with pytest.raises(TemplateMissingError):
        engine.render(buffer.getvalue(), {})
