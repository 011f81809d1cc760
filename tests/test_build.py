from pathlib import Path

import pytest
from PIL import Image

from inkwell.build import BuildError, build_site, load_config, load_data


@pytest.fixture
def blog(project, write_post):
    content = project / "content" / "blog"
    write_post(content, "a", title="Post A", pub_date="2024-01-01", body="# Intro\n\nText A.\n")
    write_post(content, "b", title="Post B", pub_date="2024-06-01", draft=True)
    write_post(content, "c", title="Post C", pub_date="2023-01-01")
    return project


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _tree(root: Path) -> dict[str, bytes]:
    return {
        str(p.relative_to(root)): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()
    }


def test_build_writes_every_route(blog):
    result = build_site(blog)
    out = blog / "dist"
    assert result.output_dir == out
    for rel in (
        "index.html",
        "og.png",
        "blog/index.html",
        "rss.xml",
        "sitemap.xml",
        "rss/styles.xsl",
        "blog/a/index.html",
        "blog/a/og.png",
        "blog/b/index.html",
        "blog/b/og.png",
        "blog/c/index.html",
        "blog/c/og.png",
    ):
        assert (out / rel).exists(), rel
    assert len(result.routes) == 11
    assert len(result.entries) == 3
    with Image.open(out / "blog" / "a" / "og.png") as img:
        assert img.size == (1200, 600)


def test_drafts_are_built_but_not_listed(blog):
    build_site(blog)
    out = blog / "dist"
    draft_page = _read(out / "blog" / "b" / "index.html")
    assert "Post B" in draft_page
    assert '<meta name="robots" content="noindex">' in draft_page

    index = _read(out / "blog" / "index.html")
    assert index.index("/blog/a") < index.index("/blog/c")
    assert "/blog/b" not in index
    assert "/blog/b" not in _read(out / "rss.xml")
    assert "/blog/b" not in _read(out / "sitemap.xml")
    assert "/blog/b" not in _read(out / "index.html")


def test_post_page_contents(blog):
    build_site(blog)
    page = _read(blog / "dist" / "blog" / "a" / "index.html")
    assert '<h1 id="intro">Intro</h1>' in page
    assert '<a href="#intro">Intro</a>' in page
    assert '<meta property="og:image" content="https://example.com/blog/a/og.png">' in page
    assert "<title>Post A</title>" in page
    assert 'content="noindex"' not in page


def test_author_image_is_used_instead_of_generated_preview(project, write_post):
    images = project / "public" / "images"
    images.mkdir(parents=True)
    Image.new("RGB", (8, 8), "red").save(images / "cover.png")
    write_post(project / "content" / "blog", "pic", image="/images/cover.png")

    build_site(project)
    out = project / "dist"
    assert not (out / "blog" / "pic" / "og.png").exists()
    assert (out / "images" / "cover.png").exists()
    page = _read(out / "blog" / "pic" / "index.html")
    assert 'content="https://example.com/images/cover.png"' in page


def test_missing_image_aborts_build(project, write_post):
    path = write_post(project / "content" / "blog", "pic", image="/images/nope.png")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == path
    assert "nope.png" in excinfo.value.message
    assert not (project / "dist").exists()


def test_missing_font_aborts_build(blog):
    (blog / "fonts" / "GeistMono-Bold.ttf").unlink()
    with pytest.raises(BuildError) as excinfo:
        build_site(blog)
    assert "font" in excinfo.value.message
    assert excinfo.value.source_path == blog / "fonts" / "GeistMono-Bold.ttf"
    assert not (blog / "dist").exists()


def test_invalid_content_aborts_build(blog):
    bad = blog / "content" / "blog" / "bad.md"
    bad.write_text("---\ntitle: Bad\n---\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(blog)
    assert excinfo.value.source_path == bad
    assert isinstance(excinfo.value.original_error, Exception)


def test_template_error_is_reported(blog):
    templates = blog / "templates"
    templates.mkdir()
    (templates / "post.html.jinja").write_text("{{ broken", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(blog)
    assert "Template syntax error" in excinfo.value.message


def test_empty_store_builds(project):
    result = build_site(project)
    out = project / "dist"
    assert len(result.entries) == 0
    assert "Nothing here yet." in _read(out / "blog" / "index.html")
    assert "<item>" not in _read(out / "rss.xml")
    assert (out / "og.png").exists()


def test_parallel_build_matches_serial(blog, tmp_path):
    build_site(blog, output_dir_override=tmp_path / "serial", jobs=1)
    build_site(blog, output_dir_override=tmp_path / "parallel", jobs=3)
    assert _tree(tmp_path / "serial") == _tree(tmp_path / "parallel")


def test_rebuild_is_byte_identical(blog, tmp_path):
    build_site(blog, output_dir_override=tmp_path / "one")
    build_site(blog, output_dir_override=tmp_path / "two")
    assert _tree(tmp_path / "one") == _tree(tmp_path / "two")


def test_root_url_rewrites_links(blog):
    build_site(blog, root_url="https://cdn.example.org/site")
    index = _read(blog / "dist" / "index.html")
    assert 'href="https://cdn.example.org/site/blog"' in index
    assert 'href="https://cdn.example.org/site/blog/a"' in index
    assert 'href="/blog"' not in index


def test_clean_output_removes_stale_files(blog):
    stale = blog / "dist" / "old.html"
    stale.parent.mkdir()
    stale.write_text("old", encoding="utf-8")
    build_site(blog)
    assert not stale.exists()

    stale.write_text("old", encoding="utf-8")
    build_site(blog, clean_output=False)
    assert stale.exists()


def test_project_stylesheet_is_kept(blog):
    (blog / "public" / "rss").mkdir(parents=True)
    (blog / "public" / "rss" / "styles.xsl").write_text("<mine/>", encoding="utf-8")
    build_site(blog)
    assert _read(blog / "dist" / "rss" / "styles.xsl") == "<mine/>"


def test_load_config_defaults_and_overrides(tmp_path):
    assert load_config(tmp_path)["output_dir"] == "dist"
    (tmp_path / "inkwell.yaml").write_text(
        "output_dir: public_html\nfonts:\n  bold: fonts/Other.ttf\njobs: 4\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config["output_dir"] == "public_html"
    assert config["jobs"] == 4
    assert config["fonts"] == {
        "regular": "fonts/GeistMono-Regular.ttf",
        "bold": "fonts/Other.ttf",
    }


def test_load_data_merges_site_and_extra_files(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "site.yaml").write_text("title: Mine\n", encoding="utf-8")
    (data_dir / "links.yaml").write_text("github: me\n", encoding="utf-8")
    data = load_data(tmp_path)
    assert data["title"] == "Mine"
    assert data["feed_title"] == "Mine"
    assert data["links"] == {"github": "me"}
    assert load_data(tmp_path / "nowhere")["title"] == "Blog"


@pytest.mark.parametrize("jobs", [1, 3])
def test_failed_render_keeps_previous_output(blog, jobs):
    build_site(blog)
    before = _tree(blog / "dist")

    templates = blog / "templates"
    templates.mkdir()
    (templates / "post.html.jinja").write_text("{{ entry.missing.attr }}", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(blog, jobs=jobs)
    assert "Undefined variable" in excinfo.value.message
    assert _tree(blog / "dist") == before


def test_undecodable_post_reports_file(blog):
    bad = blog / "content" / "blog" / "bad.md"
    bad.write_bytes(b"---\ntitle: \xff\xfe\n---\n")
    with pytest.raises(BuildError) as excinfo:
        build_site(blog)
    assert excinfo.value.source_path == bad
    assert "cannot read file" in excinfo.value.message
