"""Tests for render options and configuration files."""

import logging

import pytest
import yaml

from publist.cli.config import Config, load_config
from publist.config import (
    DEFAULT_BIBSONOMY_URL,
    BibtexMode,
    RenderOptions,
    resolve_bibtex_mode,
)
from publist.exceptions import ConfigError


class TestRenderOptions:
    """Test option defaults and parsing."""

    def test_defaults(self):
        options = RenderOptions()

        assert options.pdf_directory is None
        assert options.preview_directory is None
        assert options.link_pdfs is True
        assert options.style == "apa.csl"
        assert options.year_headings is True
        assert options.show_group_menu is False
        assert options.css_class == "publications"
        assert options.doi_link is True
        assert options.url_link is True
        assert options.bibtex is BibtexMode.LINK
        assert options.show_abstract is False
        assert options.bibsonomy_link is True
        assert options.option_separator == " | "
        assert options.public_doc_postfix == "_oa.pdf"
        assert options.preview_size == "small"
        assert options.bibsonomy_url == DEFAULT_BIBSONOMY_URL

    def test_options_are_immutable(self):
        with pytest.raises(AttributeError):
            RenderOptions().style = "ieee"

    def test_replace(self):
        options = RenderOptions().replace(style="ieee")

        assert options.style == "ieee"
        assert RenderOptions().style == "apa.csl"

    def test_from_mapping(self):
        options = RenderOptions.from_mapping(
            {"style": "mla", "pdf_directory": "pdfs", "bibtex": "embedded"}
        )

        assert options.style == "mla"
        assert options.pdf_directory == "pdfs"
        assert options.bibtex is BibtexMode.EMBEDDED

    def test_camel_case_keys(self):
        options = RenderOptions.from_mapping(
            {"pdfDirectory": "pdfs", "showAbstract": True, "cssClass": "pubs"}
        )

        assert options.pdf_directory == "pdfs"
        assert options.show_abstract is True
        assert options.css_class == "pubs"

    def test_historical_names(self):
        options = RenderOptions.from_mapping(
            {"pdf_dir": "pdfs", "pdf_previews_dir": "previews", "opt_sep": " - "}
        )

        assert options.pdf_directory == "pdfs"
        assert options.preview_directory == "previews"
        assert options.option_separator == " - "

    def test_unknown_option(self):
        with pytest.raises(ConfigError) as exc_info:
            RenderOptions.from_mapping({"colour": "red"})

        assert exc_info.value.field == "colour"

    def test_wrong_type(self):
        with pytest.raises(ConfigError) as exc_info:
            RenderOptions.from_mapping({"year_headings": "maybe"})

        assert exc_info.value.field == "year_headings"

    def test_unknown_bibtex_mode(self):
        with pytest.raises(ConfigError):
            RenderOptions.from_mapping({"bibtex": "inline"})


class TestBibtexFlags:
    """Test folding the legacy BibTeX switches into one mode."""

    @pytest.mark.parametrize(
        "link,embedded,mode",
        [
            (True, False, BibtexMode.LINK),
            (False, True, BibtexMode.EMBEDDED),
            (False, False, BibtexMode.NONE),
            (True, True, BibtexMode.LINK),
        ],
    )
    def test_resolve(self, link, embedded, mode):
        assert resolve_bibtex_mode(link, embedded) is mode

    def test_both_flags_warn(self, caplog):
        with caplog.at_level(logging.WARNING):
            mode = resolve_bibtex_mode(True, True)

        assert mode is BibtexMode.LINK
        assert "both enabled" in caplog.text

    def test_single_flag_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING):
            resolve_bibtex_mode(False, True)

        assert caplog.text == ""

    def test_legacy_flags_in_mapping(self):
        options = RenderOptions.from_mapping(
            {"bibtex_link": False, "bibtex_embedded": True}
        )

        assert options.bibtex is BibtexMode.EMBEDDED

    def test_single_legacy_flag(self):
        """A missing flag counts as disabled."""
        options = RenderOptions.from_mapping({"bibtexEmbedded": True})

        assert options.bibtex is BibtexMode.EMBEDDED

    def test_disabled_link_flag_alone(self):
        """Turning the link off without embedding offers no BibTeX."""
        options = RenderOptions.from_mapping({"bibtex_link": False})

        assert options.bibtex is BibtexMode.NONE

    def test_explicit_mode_wins_over_flags(self):
        options = RenderOptions.from_mapping({"bibtex": "none", "bibtex_link": True})

        assert options.bibtex is BibtexMode.NONE


class TestConfigFiles:
    """Test loading YAML configuration files."""

    @pytest.fixture(autouse=True)
    def no_default_files(self, tmp_path, monkeypatch):
        """Keep user and project config files out of the tests."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        monkeypatch.chdir(tmp_path)

    def test_from_file(self, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text(yaml.dump({"style": "ieee", "showAbstract": True}))

        assert Config.from_file(path) == {"style": "ieee", "showAbstract": True}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text("")

        assert Config.from_file(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text("style: [unclosed")

        with pytest.raises(ConfigError, match="invalid YAML"):
            Config.from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text("- style\n- ieee\n")

        with pytest.raises(ConfigError, match="expected a mapping"):
            Config.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read file"):
            Config.from_file(tmp_path / "missing.yaml")

    def test_merge(self):
        merged = Config.merge_configs(
            {"style": "apa", "nested": {"a": 1}}, {"nested": {"b": 2}}
        )

        assert merged == {"style": "apa", "nested": {"a": 1, "b": 2}}

    def test_nothing_configured(self):
        assert load_config() == {}

    def test_precedence(self, tmp_path, monkeypatch):
        """Project file, then explicit file, then environment."""
        (tmp_path / ".publist.yaml").write_text(
            yaml.dump({"style": "mla", "css_class": "project"})
        )
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text(yaml.dump({"style": "chicago"}))
        monkeypatch.setenv("PUBLIST_PDF_DIR", "pdfs")

        config = load_config(explicit)

        assert config == {
            "style": "chicago",
            "css_class": "project",
            "pdf_directory": "pdfs",
        }

    def test_user_config(self, tmp_path):
        user_dir = tmp_path / "xdg" / "publist"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text(yaml.dump({"style": "ieee"}))

        assert load_config()["style"] == "ieee"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("PUBLIST_STYLE", "ieee")
        monkeypatch.setenv("PUBLIST_PREVIEW_DIR", "previews")

        options = RenderOptions.from_mapping(load_config())

        assert options.style == "ieee"
        assert options.preview_directory == "previews"
