from pathlib import Path

import pytest
from PIL import ImageFont


def _post_text(title, description, pub_date, body="", draft=None, image=None):
    lines = ["---", f"title: {title}", f"description: {description}", f"pubDate: {pub_date}"]
    if draft is not None:
        lines.append(f"draft: {'true' if draft else 'false'}")
    if image is not None:
        lines.append(f"image: {image}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def font_bytes() -> bytes:
    # Pillow's bundled default face is a real TrueType font
    font = ImageFont.load_default(size=24)
    data = getattr(font, "font_bytes", None)
    if not data:
        pytest.skip("Pillow built without FreeType support")
    return data


@pytest.fixture
def write_post():
    def write(
        content_dir: Path,
        slug: str,
        title=None,
        description="A post",
        pub_date="2024-01-01",
        body="Hello.\n",
        suffix=".md",
        **extra,
    ):
        content_dir.mkdir(parents=True, exist_ok=True)
        path = content_dir / f"{slug}{suffix}"
        path.write_text(
            _post_text(title or slug.title(), description, pub_date, body, **extra),
            encoding="utf-8",
        )
        return path

    return write


@pytest.fixture
def project(tmp_path, font_bytes) -> Path:
    root = tmp_path / "site"
    (root / "fonts").mkdir(parents=True)
    (root / "fonts" / "GeistMono-Regular.ttf").write_bytes(font_bytes)
    (root / "fonts" / "GeistMono-Bold.ttf").write_bytes(font_bytes)
    (root / "data").mkdir()
    (root / "data" / "site.yaml").write_text(
        "title: Marioph\n"
        "description: Personal site\n"
        "url: https://example.com\n"
        "signature: example.com\n"
        "intro: hi there, i build stuff.\n"
        "feed_title: Marioph Blog\n"
        "feed_description: Sometimes I write about stuff.\n",
        encoding="utf-8",
    )
    (root / "content" / "blog").mkdir(parents=True)
    return root
