from __future__ import annotations

from dataclasses import dataclass

from docx.enum.text import WD_UNDERLINE
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor

HEADING_SIZES = {1: 32, 2: 28, 3: 24, 4: 22, 5: 20}
MIN_HEADING_SIZE = 18

LIST_INDENT_IN = 0.5
LIST_HANGING_IN = 0.25
QUOTE_INDENT_IN = 0.5
CODE_BLOCK_SPACING_PT = 6
BULLET = "•"

# Schema order of siblings that must follow the element being inserted.
_PPR_AFTER_BORDER = (
    "w:shd", "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN",
    "w:bidi", "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
    "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap",
    "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange",
)
_PPR_AFTER_SHADING = _PPR_AFTER_BORDER[1:]
_RPR_AFTER_SHADING = (
    "w:fitText", "w:vertAlign", "w:rtl", "w:cs", "w:em", "w:lang",
    "w:eastAsianLayout", "w:specVanish", "w:oMath",
)
_TBLPR_AFTER_BORDERS = ("w:shd", "w:tblLayout", "w:tblCellMar", "w:tblLook", "w:tblCaption", "w:tblDescription")
_TCPR_AFTER_SHADING = ("w:noWrap", "w:tcMar", "w:textDirection", "w:tcFitText", "w:vAlign", "w:hideMark")


@dataclass(frozen=True)
class RunStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    monospace: bool = False
    color: str | None = None
    shade: str | None = None
    size: int | None = None  # half-points

    def merge(self, other: "RunStyle") -> "RunStyle":
        """Combine two styles; flags accumulate, the inner colour/shade/size wins."""
        return RunStyle(
            bold=self.bold or other.bold,
            italic=self.italic or other.italic,
            underline=self.underline or other.underline,
            monospace=self.monospace or other.monospace,
            color=other.color or self.color,
            shade=other.shade or self.shade,
            size=other.size or self.size,
        )


PLAIN = RunStyle()


def emphasis_style(delimiters: int) -> RunStyle:
    return RunStyle(bold=delimiters >= 2, italic=delimiters in (1, 3))


def heading_size(level: int) -> int:
    return HEADING_SIZES.get(level, MIN_HEADING_SIZE)


def apply_run_style(run, style: RunStyle, code_font: str) -> None:
    run.bold = style.bold
    run.italic = style.italic
    if style.underline:
        run.font.underline = WD_UNDERLINE.SINGLE
    if style.monospace:
        run.font.name = code_font
    if style.color:
        run.font.color.rgb = RGBColor.from_string(style.color)
    if style.size:
        run.font.size = Pt(style.size / 2)
    if style.shade:
        r_pr = run._r.get_or_add_rPr()
        r_pr.insert_element_before(_shading(style.shade), *_RPR_AFTER_SHADING)


def preserve_whitespace(run) -> None:
    for t in run._r.findall(qn("w:t")):
        t.set(qn("xml:space"), "preserve")


def _shading(fill: str):
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    return shd


def shade_paragraph(paragraph, fill: str) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    p_pr.insert_element_before(_shading(fill), *_PPR_AFTER_SHADING)


def shade_cell(cell, fill: str) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    tc_pr.insert_element_before(_shading(fill), *_TCPR_AFTER_SHADING)


def _border(side: str, color: str, size: int = 6, space: int = 4):
    border = OxmlElement(f"w:{side}")
    border.set(qn("w:val"), "single")
    border.set(qn("w:sz"), str(size))
    border.set(qn("w:space"), str(space))
    border.set(qn("w:color"), color)
    return border


def add_paragraph_border(paragraph, side: str, color: str, size: int = 6) -> None:
    """Add a single rule on one side ("left", "bottom", ...) of a paragraph."""
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = p_pr.find(qn("w:pBdr"))
    if p_bdr is None:
        p_bdr = OxmlElement("w:pBdr")
        p_pr.insert_element_before(p_bdr, *_PPR_AFTER_BORDER)
    p_bdr.append(_border(side, color, size=size))


def set_table_grid(table, color: str = "auto") -> None:
    """Full-width table with single outer borders and interior gridlines."""
    tbl_pr = table._tbl.tblPr
    tbl_w = tbl_pr.find(qn("w:tblW"))
    if tbl_w is None:
        tbl_w = OxmlElement("w:tblW")
        tbl_pr.insert_element_before(tbl_w, "w:jc", "w:tblCellSpacing", "w:tblInd", "w:tblBorders", *_TBLPR_AFTER_BORDERS)
    tbl_w.set(qn("w:type"), "pct")
    tbl_w.set(qn("w:w"), "5000")

    for child in list(tbl_pr):
        if child.tag == qn("w:tblBorders"):
            tbl_pr.remove(child)
    borders = OxmlElement("w:tblBorders")
    for side in ("top", "left", "bottom", "right", "insideH", "insideV"):
        borders.append(_border(side, color, size=4, space=0))
    tbl_pr.insert_element_before(borders, *_TBLPR_AFTER_BORDERS)


def set_hanging_indent(paragraph, level: int) -> None:
    fmt = paragraph.paragraph_format
    fmt.left_indent = Inches(LIST_INDENT_IN * level)
    fmt.first_line_indent = Inches(-LIST_HANGING_IN)
