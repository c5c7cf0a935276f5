from docx import Document as DocxDocument
from docx.oxml.ns import qn
from docx.shared import RGBColor

from MarkDocx.hyperlinks import INVALID_URL_PLACEHOLDER, create_hyperlink, normalize_url, resolve_target
from MarkDocx.inline import Attachment, inline_text, render_inlines
from MarkDocx.model import CodeSpan, Emphasis, InlineElement, InlineText, Link
from MarkDocx.state import RenderState

LINK_BLUE = RGBColor.from_string("0563C1")


def _paragraph(inlines, attachment=Attachment.PARAGRAPH):
    docx = DocxDocument()
    paragraph = docx.add_paragraph()
    render_inlines(inlines, paragraph, RenderState(), attachment=attachment)
    return docx, paragraph


def test_emphasis_levels(render):
    paragraph = render("**b** *i* ***bi***").paragraphs[0]
    runs = {run.text: run for run in paragraph.runs}
    assert (runs["b"].bold, runs["b"].italic) == (True, False)
    assert (runs["i"].bold, runs["i"].italic) == (False, True)
    assert (runs["bi"].bold, runs["bi"].italic) == (True, True)


def test_emphasis_produces_no_empty_runs(render):
    paragraph = render("**bold** and *italic*").paragraphs[0]
    assert [run.text for run in paragraph.runs] == ["bold", " and ", "italic"]


def test_nested_emphasis_merges_styles(render):
    paragraph = render("**bold *and italic***").paragraphs[0]
    runs = {run.text: run for run in paragraph.runs}
    assert runs["bold "].bold and not runs["bold "].italic
    assert runs["and italic"].bold and runs["and italic"].italic


def test_text_runs_preserve_whitespace():
    _, paragraph = _paragraph([InlineText("a   b ")])
    t = paragraph.runs[0]._r.find(qn("w:t"))
    assert t.get(qn("xml:space")) == "preserve"
    assert paragraph.text == "a   b "


def test_code_span_is_monospace_with_accent_and_shade(render):
    run = render("use `pip`").paragraphs[0].runs[1]
    assert run.text == "pip"
    assert run.font.name == "Consolas"
    assert run.font.color.rgb == RGBColor.from_string("C7254E")
    shd = run._r.rPr.find(qn("w:shd"))
    assert shd.get(qn("w:fill")) == "F2F2F2"


def test_hard_break_stays_in_one_paragraph(render):
    docx = render("line one  \nline two\n")
    assert len(docx.paragraphs) == 1
    assert docx.paragraphs[0]._p.xpath(".//w:br")


def test_link_becomes_paragraph_level_hyperlink(render):
    paragraph = render("Go to [the site](https://example.com/docs).").paragraphs[0]
    assert len(paragraph.hyperlinks) == 1
    hyperlink = paragraph.hyperlinks[0]
    assert hyperlink.address == "https://example.com/docs"
    assert hyperlink.text == "the site"
    run = hyperlink.runs[0]
    assert run.font.underline
    assert run.font.color.rgb == LINK_BLUE
    assert paragraph.text == "Go to the site."


def test_emphasis_around_link_styles_the_hyperlink_run(render):
    paragraph = render("**see [docs](https://example.com)**").paragraphs[0]
    assert [run.text for run in paragraph.runs] == ["see "]
    assert paragraph.runs[0].bold is True
    hyperlink = paragraph.hyperlinks[0]
    assert hyperlink.runs[0].bold is True
    assert hyperlink.runs[0].font.underline
    # hyperlink is a direct child of the paragraph, never inside a run
    assert paragraph._p.xpath("./w:hyperlink")
    assert not paragraph._p.xpath(".//w:r//w:hyperlink")


def test_emphasis_inside_link_label(render):
    hyperlink = render("[*em* text](https://example.com)").paragraphs[0].hyperlinks[0]
    em, rest = hyperlink.runs
    assert em.text == "em" and em.italic is True
    assert rest.text == " text" and rest.italic is False
    assert em.font.underline and rest.font.underline


def test_unlabelled_link_uses_url_as_label(render):
    hyperlink = render("[](https://example.com/x)").paragraphs[0].hyperlinks[0]
    assert hyperlink.text == "https://example.com/x"


def test_backslashes_are_normalized():
    assert normalize_url(" docs\\guide\\index.html ") == "docs/guide/index.html"
    _, paragraph = _paragraph([Link(url="docs\\a.md", children=[InlineText("a")])])
    assert paragraph.hyperlinks[0].address == "docs/a.md"


def test_backslashes_from_markdown_source_are_normalized(render):
    assert normalize_url("docs%5Cguide%5ca.md") == "docs/guide/a.md"
    hyperlink = render("[guide](docs\\guide\\a.md)").paragraphs[0].hyperlinks[0]
    assert hyperlink.address == "docs/guide/a.md"
    assert hyperlink.text == "guide"


def test_unparseable_url_still_renders_label():
    assert resolve_target("http://[::1") == INVALID_URL_PLACEHOLDER
    _, labelled = _paragraph([Link(url="http://[::1", children=[InlineText("bad")])])
    assert labelled.text == "bad"
    _, bare = _paragraph([Link(url="http://[::1")])
    assert bare.text == "http://[::1"


def test_relationship_failure_falls_back_to_plain_text(monkeypatch):
    docx = DocxDocument()

    def refuse(*args, **kwargs):
        raise ValueError("no relationships today")

    monkeypatch.setattr(type(docx.part), "relate_to", refuse)
    paragraph = docx.add_paragraph()
    render_inlines([Emphasis(2, [Link(url="https://example.com", children=[InlineText("label")])])], paragraph, RenderState())
    assert paragraph.hyperlinks == []
    assert paragraph.text == "label"
    assert paragraph.runs[0].bold is True
    assert not paragraph.runs[0].font.underline


def test_link_without_url_renders_children():
    _, paragraph = _paragraph([Link(url="", children=[InlineText("plain")])])
    assert paragraph.hyperlinks == []
    assert paragraph.text == "plain"


def test_links_in_run_context_are_not_nested():
    _, paragraph = _paragraph([Link(url="https://example.com", children=[InlineText("x")])], Attachment.RUN)
    assert paragraph.hyperlinks == []
    assert paragraph.text == "x"


class _Footnote(InlineElement):
    pass


def test_unknown_inline_is_skipped():
    _, paragraph = _paragraph([InlineText("a"), _Footnote(), InlineText("b")])
    assert paragraph.text == "ab"


def test_inline_text_flattens_formatting():
    inlines = [InlineText("a "), Emphasis(2, [CodeSpan("b")]), Link(url="u", children=[InlineText(" c")])]
    assert inline_text(inlines) == "a b c"


def test_create_hyperlink_reports_success_and_failure():
    docx = DocxDocument()
    paragraph = docx.add_paragraph()
    assert create_hyperlink(paragraph, "https://example.com", lambda label: label.add_run("ok")) is True

    def broken_label(label):
        label.add_run("half")
        raise RuntimeError("label failed")

    assert create_hyperlink(paragraph, "https://example.org", broken_label) is False
    assert [h.address for h in paragraph.hyperlinks] == ["https://example.com"]
    assert paragraph.text == "ok"
    assert [rel.target_ref for rel in docx.part.rels.values() if rel.is_external] == ["https://example.com"]
