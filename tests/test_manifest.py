"""
Tests for the Gemfile model — parsing, queries and anchored insertion.
"""

import textwrap

from railstarter.core.models.manifest import DEV_GROUP, DEV_TEST_GROUP, Dependency, Manifest

# ── Dependency Tests ─────────────────────────────────────────────────


class TestDependency:
    def test_render_plain(self):
        assert Dependency(name="devise").render() == 'gem "devise"'

    def test_render_with_constraint_and_options(self):
        dep = Dependency(
            name="simple_form",
            constraint="~> 5.3",
            options={"github": "heartcombo/simple_form", "require": False},
        )
        assert dep.render() == 'gem "simple_form", "~> 5.3", github: "heartcombo/simple_form", require: false'

    def test_parse_line(self):
        dep = Dependency.parse_line('  gem "rubocop", "~> 1.6", require: false', group="development")
        assert dep is not None
        assert dep.name == "rubocop"
        assert dep.constraint == "~> 1.6"
        assert dep.options == {"require": False}
        assert dep.group == "development"

    def test_parse_line_hash_rocket(self):
        dep = Dependency.parse_line("gem 'pry', :require => false")
        assert dep is not None
        assert dep.options == {"require": False}

    def test_parse_line_not_a_gem(self):
        assert Dependency.parse_line('source "https://rubygems.org"') is None
        assert Dependency.parse_line('# gem "devise"') is None


# ── Manifest Query Tests ─────────────────────────────────────────────


class TestManifestQueries:
    def test_render_round_trip_is_byte_identical(self, gemfile_text):
        assert Manifest.parse(gemfile_text).render() == gemfile_text

    def test_has_tolerates_quotes_and_indent(self):
        manifest = Manifest.parse("gem 'devise'\n  gem \"pagy\", \"~> 9\"\n")
        assert manifest.has("devise")
        assert manifest.has("pagy")

    def test_has_ignores_commented_lines(self):
        manifest = Manifest.parse('# gem "devise"\n')
        assert not manifest.has("devise")

    def test_has_does_not_match_prefix(self):
        manifest = Manifest.parse('gem "devise-i18n"\n')
        assert not manifest.has("devise")

    def test_groups_are_tracked(self, gemfile_text):
        manifest = Manifest.parse(gemfile_text)
        assert manifest.find("debug").group == "development, test"
        assert manifest.find("web-console").group == "development"
        assert manifest.find("puma").group is None

    def test_rails_major_version(self, gemfile_text):
        assert Manifest.parse(gemfile_text).rails_major_version() == 8
        assert Manifest.parse('gem "rails", "~> 7.1.3"\n').rails_major_version() == 7
        assert Manifest.parse('gem "rails"\n').rails_major_version() is None


# ── Manifest Insert Tests ────────────────────────────────────────────


class TestManifestInsert:
    def test_insert_before_anchor(self, gemfile_text):
        manifest = Manifest.parse(gemfile_text)
        added = manifest.insert([Dependency(name="devise")], before=DEV_TEST_GROUP)

        assert added == ["devise"]
        text = manifest.render()
        assert text.index('gem "devise"') < text.index(DEV_TEST_GROUP)
        assert 'gem "devise"\n\ngroup :development, :test do' in text

    def test_insert_after_anchor_goes_inside_group(self, gemfile_text):
        manifest = Manifest.parse(gemfile_text)
        manifest.insert([Dependency(name="rspec-rails")], after=DEV_TEST_GROUP)

        assert manifest.find("rspec-rails").group == "development, test"
        assert f'{DEV_TEST_GROUP}\n  gem "rspec-rails"\n' in manifest.render()

    def test_insert_after_missing_anchor_appends_block(self):
        manifest = Manifest.parse('gem "rails"\n')
        manifest.insert([Dependency(name="annotate")], after=DEV_GROUP)

        assert manifest.render() == textwrap.dedent("""\
            gem "rails"

            group :development do
              gem "annotate"
            end
        """)

    def test_insert_before_missing_anchor_appends(self):
        manifest = Manifest.parse('gem "rails"\n')
        manifest.insert([Dependency(name="pagy")], before=DEV_TEST_GROUP)
        assert manifest.render().endswith('gem "pagy"\n')

    def test_insert_skips_declared(self, gemfile_text):
        manifest = Manifest.parse(gemfile_text)
        added = manifest.insert(
            [Dependency(name="puma"), Dependency(name="pagy")], before=DEV_TEST_GROUP,
        )
        assert added == ["pagy"]
        assert manifest.render().count('gem "puma"') == 1

    def test_insert_nothing_missing_is_noop(self, gemfile_text):
        manifest = Manifest.parse(gemfile_text)
        assert manifest.insert([Dependency(name="rails")], before=DEV_TEST_GROUP) == []
        assert manifest.render() == gemfile_text

    def test_drop(self, gemfile_text):
        manifest = Manifest.parse(gemfile_text)
        assert manifest.drop("propshaft")
        assert not manifest.has("propshaft")
        assert not manifest.drop("propshaft")
