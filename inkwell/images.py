"""Social preview image generation for Inkwell.

Preview cards are described as a small element tree (a canvas holding
positioned blocks of stacked text) and composed into a PNG with Pillow,
using font bytes loaded once per build. Composition uses no clock, no
randomness and no system fonts, so identical input yields identical bytes.

Key classes:
- Text, Block, Canvas: The element tree.
- FontSet: Regular and bold font bytes.
- ImageComposer: Lays out a Canvas and encodes it as PNG.

Key functions:
- post_preview: Canvas for a blog post card.
- home_preview: Canvas for the site's default card.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Any

from PIL import Image, ImageDraw, ImageFont

from .assets import AssetNotFoundError
from .utils import format_date

if TYPE_CHECKING:
    from .content import ContentEntry

PREVIEW_WIDTH = 1200
PREVIEW_HEIGHT = 600

BACKGROUND = "#1c1917"
FOREGROUND = "#e7e5e4"
MUTED = "#a8a29e"

WEIGHTS = ("regular", "bold")


@dataclass(frozen=True)
class Text:
    """A run of text, word-wrapped to the width of its block.

    Attributes:
        content: The text.
        size: Font size in pixels.
        weight: "regular" or "bold".
        color: Fill colour; None inherits the canvas colour.
        margin_top: Space above the text in pixels.
    """

    content: str
    size: int
    weight: str = "regular"
    color: str | None = None
    margin_top: int = 0


@dataclass(frozen=True)
class Block:
    """A column of Text nodes anchored to the canvas.

    Horizontal position comes from ``left`` or, failing that, ``right``;
    vertical position from ``top`` or ``bottom``. Without a ``width`` the
    block is as wide as its widest line.
    """

    children: tuple[Text, ...]
    left: int | None = None
    top: int | None = None
    right: int | None = None
    bottom: int | None = None
    width: int | None = None


@dataclass(frozen=True)
class Canvas:
    blocks: tuple[Block, ...]
    width: int = PREVIEW_WIDTH
    height: int = PREVIEW_HEIGHT
    background: str = BACKGROUND
    color: str = FOREGROUND
    lowercase: bool = False


@dataclass(frozen=True)
class FontSet:
    """The two font faces preview images are drawn with.

    Attributes:
        regular: TrueType/OpenType bytes of the regular weight.
        bold: TrueType/OpenType bytes of the bold weight.
    """

    regular: bytes
    bold: bytes

    @classmethod
    def load(cls, project_root: Path, paths: dict[str, str]) -> FontSet:
        """Read both font files.

        Args:
            project_root: Root the relative font paths resolve against.
            paths: Mapping with ``regular`` and ``bold`` relative paths.

        Raises:
            AssetNotFoundError: If either file does not exist.
        """
        loaded: dict[str, bytes] = {}
        for weight in WEIGHTS:
            path = project_root / paths[weight]
            if not path.is_file():
                raise AssetNotFoundError(paths[weight], "font", [path])
            loaded[weight] = path.read_bytes()
        return cls(regular=loaded["regular"], bold=loaded["bold"])

    def data(self, weight: str) -> bytes:
        if weight not in WEIGHTS:
            raise ValueError(f"unsupported font weight {weight!r}")
        return self.bold if weight == "bold" else self.regular


@dataclass(frozen=True)
class _Line:
    text: str
    font: Any
    color: str
    y: int
    width: int


class ImageComposer:
    """Composes a Canvas into PNG bytes.

    Font objects are cached per composer, so use one composer per thread.
    """

    def __init__(self, fonts: FontSet):
        self.fonts = fonts
        self._font_cache: dict[tuple[str, int], Any] = {}

    def _font(self, weight: str, size: int):
        key = (weight, size)
        if key not in self._font_cache:
            self._font_cache[key] = ImageFont.truetype(BytesIO(self.fonts.data(weight)), size)
        return self._font_cache[key]

    def render(self, canvas: Canvas) -> bytes:
        """Draw the canvas and return it encoded as PNG."""
        image = Image.new("RGB", (canvas.width, canvas.height), canvas.background)
        draw = ImageDraw.Draw(image)
        for block in canvas.blocks:
            self._draw_block(draw, canvas, block)
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def _draw_block(self, draw: ImageDraw.ImageDraw, canvas: Canvas, block: Block) -> None:
        lines, height = self._layout(draw, canvas, block)
        width = block.width or max((line.width for line in lines), default=0)
        if block.left is not None:
            x = block.left
        else:
            x = canvas.width - (block.right or 0) - width
        if block.top is not None:
            y = block.top
        else:
            y = canvas.height - (block.bottom or 0) - height
        for line in lines:
            draw.text((x, y + line.y), line.text, font=line.font, fill=line.color)

    def _layout(
        self, draw: ImageDraw.ImageDraw, canvas: Canvas, block: Block
    ) -> tuple[list[_Line], int]:
        lines: list[_Line] = []
        cursor = 0
        for node in block.children:
            font = self._font(node.weight, node.size)
            content = node.content.lower() if canvas.lowercase else node.content
            cursor += node.margin_top
            for text in self._wrap(draw, content, font, block.width):
                width = int(draw.textlength(text, font=font))
                lines.append(_Line(text, font, node.color or canvas.color, cursor, width))
                cursor += node.size
        return lines, cursor

    @staticmethod
    def _wrap(draw: ImageDraw.ImageDraw, text: str, font, max_width: int | None) -> list[str]:
        words = text.split()
        if not words:
            return []
        if max_width is None:
            return [" ".join(words)]
        lines: list[str] = []
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if draw.textlength(candidate, font=font) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
        return lines


def _signature(site: dict[str, Any]) -> Block:
    return Block(
        children=(Text(str(site.get("signature") or ""), 48),),
        right=80,
        bottom=60,
    )


def post_preview(entry: ContentEntry, site: dict[str, Any]) -> Canvas:
    """Preview card for a post: title, publish date and site signature."""
    headline = Block(
        children=(
            Text(f"# {entry.title}", 60, weight="bold"),
            Text(format_date(entry.pub_date), 48, color=MUTED, margin_top=40),
        ),
        left=80,
        top=180,
        width=1030,
    )
    return Canvas(blocks=(headline, _signature(site)), lowercase=True)


def home_preview(site: dict[str, Any]) -> Canvas:
    """Preview card for the home page, built from the site's intro copy."""
    intro = Block(
        children=(Text(str(site.get("intro") or site.get("title") or ""), 60, weight="bold"),),
        left=80,
        top=180,
        width=1030,
    )
    return Canvas(blocks=(intro, _signature(site)))
