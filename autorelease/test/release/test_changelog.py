"""Tests for release/changelog.py - release notes extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from autorelease.release.changelog import (
    ContentLine,
    DetailsEnd,
    Heading,
    PackageEntry,
    extract_latest_release_notes,
    iter_sections,
    iter_tokens,
)

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def _fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8").replace("\r\n", "\n")


# =============================================================================
# Tokenizer
# =============================================================================


class TestIterTokens:
    def test_version_first_heading(self) -> None:
        (token,) = list(iter_tokens("## v1.0.3"))
        assert token == Heading(level=2, text="## v1.0.3", version="1.0.3")
        assert token.is_release

    def test_linked_version_heading_with_date(self) -> None:
        line = "### [1.1.1](https://example.com/compare/v1.1.0...v1.1.1) (2019-05-20)"
        (token,) = list(iter_tokens(line))
        assert isinstance(token, Heading)
        assert token.level == 3
        assert token.version == "1.1.1"

    def test_date_first_heading(self) -> None:
        (token,) = list(iter_tokens("## 2019-01-30 - v2.1.0"))
        assert isinstance(token, Heading)
        assert token.version == "2.1.0"
        assert token.is_release

    def test_category_heading_has_no_version(self) -> None:
        (token,) = list(iter_tokens("### Bug Fixes"))
        assert token == Heading(level=3, text="### Bug Fixes")
        assert not token.is_release

    def test_hashes_need_a_space(self) -> None:
        assert list(iter_tokens("#42 was closed too")) == [ContentLine("#42 was closed too")]
        assert list(iter_tokens("#Changelog")) == [ContentLine("#Changelog")]
        assert list(iter_tokens("# Changelog")) == [Heading(level=1, text="# Changelog")]

    def test_package_heading_is_not_a_release(self) -> None:
        (token,) = list(iter_tokens("### google/cloud-firestore 1.8.0"))
        assert isinstance(token, Heading)
        assert token.package == "google/cloud-firestore"
        assert token.version == "1.8.0"
        assert not token.is_release

    def test_release_word_is_not_a_package(self) -> None:
        (token,) = list(iter_tokens("## Release 3.0.0"))
        assert isinstance(token, Heading)
        assert token.is_release
        assert token.version == "3.0.0"

    def test_summary_and_details_end(self) -> None:
        tokens = list(
            iter_tokens("<details><summary>google/cloud-automl 1.0.0</summary>\n\n</details>")
        )
        assert tokens[0] == PackageEntry(
            "<details><summary>google/cloud-automl 1.0.0</summary>",
            "google/cloud-automl",
            "1.0.0",
            "summary",
        )
        assert tokens[1] == ContentLine("")
        assert tokens[2] == DetailsEnd("</details>")

    def test_bullet_group(self) -> None:
        (token,) = list(iter_tokens("* google/cloud-storage 1.14.0"))
        assert isinstance(token, PackageEntry)
        assert token.style == "bullet"

    def test_ordinary_bullet_is_content(self) -> None:
        (token,) = list(iter_tokens("* fix parsing of 1.2.3 style versions"))
        assert isinstance(token, ContentLine)

    def test_fenced_code_is_content(self) -> None:
        tokens = list(iter_tokens("```\n## 9.9.9\n```"))
        assert all(isinstance(t, ContentLine) for t in tokens)

    def test_trailing_whitespace_ignored(self) -> None:
        (token,) = list(iter_tokens("## v1.0.3   "))
        assert isinstance(token, Heading)
        assert token.version == "1.0.3"
        assert token.text == "## v1.0.3"

    def test_content_keeps_trailing_whitespace(self) -> None:
        """Two trailing spaces are a markdown hard break."""
        assert list(iter_tokens("line one  ")) == [ContentLine("line one  ")]


# =============================================================================
# extract_latest_release_notes
# =============================================================================


class TestExtractLatestReleaseNotes:
    def test_minimal_changelog(self) -> None:
        notes = extract_latest_release_notes("#Changelog\n\n## v1.0.3\n\n* entry", "v1.0.3")
        assert notes == "* entry"

    def test_version_without_v_prefix(self) -> None:
        notes = extract_latest_release_notes("#Changelog\n\n## v1.0.3\n\n* entry", "1.0.3")
        assert notes == "* entry"

    def test_crlf_is_normalized(self) -> None:
        text = "# Changelog\r\n\r\n## 1.0.3\r\n\r\n* entry\r\n"
        notes = extract_latest_release_notes(text, "v1.0.3")
        assert notes == "* entry"

    def test_new_format(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-new.md"), "v1.2.0")
        assert notes is not None
        assert notes.startswith("### Features")
        assert "add readable stream support" in notes
        assert "### Bug Fixes" in notes
        assert "update dependency google-gax" in notes
        # Stops at the patch release below it.
        assert "retry on UNAVAILABLE" not in notes
        assert "1.1.1" not in notes

    def test_new_format_patch_entry(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-new.md"), "v1.1.1")
        assert notes is not None
        assert notes.startswith("### Bug Fixes")
        assert "retry on UNAVAILABLE" in notes
        assert "expose project id helper" not in notes

    def test_old_format(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-old.md"), "v2.1.0")
        assert notes is not None
        assert notes.startswith("01-30-2019 10:36 PST")
        assert "support async iterators" in notes
        assert "### Internal / Testing Changes" in notes
        assert "handle empty pages" not in notes

    def test_old_generator_level_three_heading(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-old.md"), "v2.0.0")
        assert notes is not None
        assert "#### Breaking Changes" in notes
        assert "use promisify for callbacks" in notes

    def test_old_and_new_format(self) -> None:
        text = _fixture("CHANGELOG-old-new.md")
        notes = extract_latest_release_notes(text, "v1.0.0")
        assert notes is not None
        assert "### ⚠ BREAKING CHANGES" in notes
        assert "### Build System" in notes
        assert "add batch get method" not in notes

    def test_old_and_new_format_older_entries(self) -> None:
        text = _fixture("CHANGELOG-old-new.md")

        v020 = extract_latest_release_notes(text, "v0.2.0")
        assert v020 is not None
        assert "add batch get method" in v020
        assert "initial generation" not in v020

        v010 = extract_latest_release_notes(text, "v0.1.0")
        assert v010 == (
            "### Implementation Changes\n"
            "- initial generation ([#1](https://github.com/googleapis/nodejs-foo/pull/1))"
        )

    def test_prior_release_is_patch(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-bug-140.md"), "v5.0.0")
        assert notes is not None
        assert "drops support for node 6" in notes
        assert "add client-side streaming" in notes
        assert "arrify" not in notes
        assert "regional endpoints" not in notes

    def test_skips_several_newer_releases(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-bug-140.md"), "v4.3.0")
        assert notes is not None
        assert "support regional endpoints" in notes
        assert "client-side streaming" not in notes
        assert "arrify" not in notes

    def test_older_patch_between_newer_releases(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-bug-140.md"), "4.3.1")
        assert notes is not None
        assert "arrify" in notes
        assert "client-side streaming" not in notes
        assert "regional endpoints" not in notes

    def test_first_matching_heading_wins(self) -> None:
        text = "## 1.0.0\n\n* newest\n\n## 1.0.0\n\n* duplicate\n"
        assert extract_latest_release_notes(text, "1.0.0") == "* newest"

    def test_not_found(self) -> None:
        assert extract_latest_release_notes(_fixture("CHANGELOG-new.md"), "v9.9.9") is None

    def test_not_found_does_not_use_a_near_version(self) -> None:
        assert extract_latest_release_notes("## 1.2.10\n\n* a\n", "1.2.1") is None

    def test_empty_section_is_empty_string(self) -> None:
        assert extract_latest_release_notes("## 1.0.1\n\n## 1.0.0\n\n* a\n", "1.0.1") == ""

    @pytest.mark.parametrize("version", ["", "   ", "v"])
    def test_blank_version(self, version: str) -> None:
        assert extract_latest_release_notes("## 1.0.0\n\n* a\n", version) is None

    def test_stops_at_non_release_level_two_heading(self) -> None:
        text = "## 1.0.0\n\n* a\n\n## Unreleased notes\n\n* b\n"
        assert extract_latest_release_notes(text, "1.0.0") == "* a"

    def test_issue_reference_line_is_not_a_boundary(self) -> None:
        text = "## v1.0.0\n\n* fix\n#42 was closed too\n* more\n\n## v0.9.0\n"
        notes = extract_latest_release_notes(text, "v1.0.0")
        assert notes == "* fix\n#42 was closed too\n* more"

    def test_hard_line_break_is_preserved(self) -> None:
        text = "## v1.0.0\n\nline one  \nline two\n\n## v0.9.0\n"
        assert extract_latest_release_notes(text, "v1.0.0") == "line one  \nline two"

    def test_heading_inside_code_fence_is_not_a_boundary(self) -> None:
        text = "## 1.0.0\n\n```md\n## 0.9.0\n```\n\n* a\n\n## 0.9.0\n\n* b\n"
        notes = extract_latest_release_notes(text, "1.0.0")
        assert notes == "```md\n## 0.9.0\n```\n\n* a"


# =============================================================================
# Multi-package (php-yoshi) changelogs
# =============================================================================


class TestMultiPackage:
    def test_batch_version_returns_batch(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-php-yoshi.md"), "v0.105.0")
        assert notes is not None
        assert notes.startswith("<details><summary>google/cloud-automl 1.0.0</summary>")
        assert "promote to GA" in notes
        assert "add transfer run notifications" in notes
        assert "correct retry config" not in notes

    def test_batch_version_narrowed_to_package(self) -> None:
        notes = extract_latest_release_notes(
            _fixture("CHANGELOG-php-yoshi.md"),
            "v0.105.0",
            package_name="google/cloud-bigquerydatatransfer",
        )
        assert notes is not None
        assert notes.startswith("### Features")
        assert "add transfer run notifications" in notes
        assert "promote to GA" not in notes
        assert "<summary>" not in notes
        assert "</details>" not in notes

    def test_batch_without_the_package_returns_batch(self) -> None:
        notes = extract_latest_release_notes(
            _fixture("CHANGELOG-php-yoshi.md"), "v0.105.0", package_name="google/cloud-spanner"
        )
        assert notes is not None
        assert "promote to GA" in notes
        assert "add transfer run notifications" in notes

    def test_package_version_returns_nested_block(self) -> None:
        notes = extract_latest_release_notes(
            _fixture("CHANGELOG-php-yoshi.md"), "1.0.0", package_name="google/cloud-automl"
        )
        assert notes is not None
        assert "promote to GA" in notes
        assert "add transfer run notifications" not in notes
        assert "## 0.105.0" not in notes

    def test_package_version_matches_the_right_batch(self) -> None:
        notes = extract_latest_release_notes(
            _fixture("CHANGELOG-php-yoshi.md"), "v0.4.0", package_name="google/cloud-automl"
        )
        assert notes is not None
        assert "correct retry config for batch predict" in notes
        assert "promote to GA" not in notes

    def test_package_like_bullet_inside_details_is_content(self) -> None:
        text = (
            "## 0.2.0\n\n"
            "<details><summary>google/a 1.0.0</summary>\n\n"
            "* google-gax 2.0.0\n"
            "* other\n"
            "</details>\n"
        )
        notes = extract_latest_release_notes(text, "v0.2.0", package_name="google/a")
        assert notes == "* google-gax 2.0.0\n* other"

    def test_package_sub_heading(self) -> None:
        notes = extract_latest_release_notes(_fixture("CHANGELOG-php-yoshi.md"), "1.8.0")
        assert notes is not None
        assert notes.startswith("#### Features")
        assert "add collection group queries" in notes
        assert "uniform bucket level access" not in notes

    def test_package_bullet_group(self) -> None:
        notes = extract_latest_release_notes(
            _fixture("CHANGELOG-php-yoshi.md"), "1.14.0", package_name="google/cloud-storage"
        )
        assert notes == "* add uniform bucket level access\n* fix signed URL v4 expiry"

    def test_bullet_group_requires_package_name(self) -> None:
        assert extract_latest_release_notes(_fixture("CHANGELOG-php-yoshi.md"), "1.14.0") is None

    def test_package_name_is_case_insensitive(self) -> None:
        notes = extract_latest_release_notes(
            _fixture("CHANGELOG-php-yoshi.md"), "1.0.0", package_name="Google/Cloud-AutoML"
        )
        assert notes is not None
        assert "promote to GA" in notes


# =============================================================================
# iter_sections
# =============================================================================


def test_iter_sections_lists_every_release() -> None:
    sections = list(iter_sections(_fixture("CHANGELOG-old-new.md")))
    assert [h.version for h, _ in sections] == ["1.0.0", "0.2.0", "0.1.0"]
    assert all(body for _, body in sections)


def test_iter_sections_matches_extraction() -> None:
    text = _fixture("CHANGELOG-bug-140.md")
    for heading, body in iter_sections(text):
        assert heading.version is not None
        assert extract_latest_release_notes(text, heading.version) == body
