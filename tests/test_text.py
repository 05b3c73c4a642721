"""Frontmatter, display-name and tag extraction tests."""

from app.utils.markdown import (
    description_from_readme,
    frontmatter_list,
    infer_display_name,
    parse_skill_frontmatter,
    slugify,
    title_case,
)
from app.utils.tags import MAX_TAGS, extract_tags, merge_tags


def test_parse_frontmatter():
    meta, body = parse_skill_frontmatter("---\nname: pdf\ntags: [a, b]\n---\nBody text\n")
    assert meta == {"name": "pdf", "tags": ["a", "b"]}
    assert body == "Body text\n"


def test_parse_frontmatter_missing_or_broken():
    assert parse_skill_frontmatter("# Just markdown") == ({}, "# Just markdown")
    meta, _ = parse_skill_frontmatter("---\n: [unclosed\n---\nx")
    assert meta == {}


def test_frontmatter_list_accepts_string_or_list():
    assert frontmatter_list({"c": "Claude Code, Cursor"}, "c") == ["Claude Code", "Cursor"]
    assert frontmatter_list({"c": ["a", " ", "b"]}, "c") == ["a", "b"]
    assert frontmatter_list({}, "c") == []


def test_title_case_keeps_acronyms():
    assert title_case("pdf-tools_kit") == "PDF Tools Kit"
    assert title_case("mcp-server-for-aws") == "MCP Server For AWS"


def test_infer_display_name_preference():
    assert infer_display_name("repo", "Fancy Name", None) == "Fancy Name"
    assert infer_display_name("repo", "api-helper", "# Other") == "API Helper"
    assert infer_display_name("repo", "", "# 🚀 Rocket Tools\n") == "Rocket Tools"
    assert infer_display_name("some-repo", "", None, "skills/csv-cleaner") == "CSV Cleaner"
    assert infer_display_name("some-repo", "", None) == "Some Repo"


def test_description_from_readme():
    readme = (
        "# Title\n\n![badge](https://x/y.svg)\n"
        "A **tool** for [PDF](https://pdf.org) files.\n\n## Install\n\npip install x\n"
    )
    assert description_from_readme(readme) == "A tool for PDF files."
    assert description_from_readme(None) == ""


def test_slugify():
    assert slugify("My Cool_Skill!") == "my-cool-skill"
    assert slugify("--a--b--") == "a-b"


def test_extract_tags():
    tags = extract_tags("react-docker-kit", "Deploy with Kubernetes", "Uses scalable python")
    assert tags[:2] == ["react", "docker"]
    assert "kubernetes" in tags
    assert "python" in tags
    # word boundaries in README text
    assert "scala" not in tags


def test_extract_tags_ignores_noise():
    assert extract_tags("mcp-server-tool", "", None) == []


def test_merge_tags_is_additive_and_capped():
    assert merge_tags(["b", "a"], ["a", "c"]) == ["b", "a", "c"]
    many = [f"t{i}" for i in range(20)]
    assert len(merge_tags([], many)) == MAX_TAGS
