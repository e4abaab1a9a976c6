"""Tests for the RSpec and Minitest parsers and their config parsers.

Verifies:
    - describe/context blocks nest; it blocks are leaves.
    - x-prefixes, :skip metadata and block-less its set the status.
    - Loop bodies are transparent: ``3.times do ... it ... end`` is one test.
    - Classic Minitest classes collect def test_* and test "name" do blocks.
"""

from __future__ import annotations

import textwrap

from testatlas.domain import Language, TestStatus
from testatlas.parsers.minitest import MinitestConfigParser, MinitestParser
from testatlas.parsers.rspec import RSpecConfigParser, RSpecParser, parse_options


def _src(text: str) -> bytes:
    return textwrap.dedent(text).lstrip().encode()


RSPEC_FILE = _src('''
    require "spec_helper"

    RSpec.describe Cart do
      let(:cart) { Cart.new }

      before do
        cart.clear
      end

      describe "#add" do
        it "adds an item" do
          expect(cart.add(1)).to eq(1)
        end

        xit "is skipped" do
        end

        it "handles metadata", :skip do
        end

        it "is pending without a block"
      end

      context "with discounts" do
        3.times do |i|
          it "applies discount #{i}" do
          end
        end
      end
    end
''')


# ---------------------------------------------------------------------------
# RSpec
# ---------------------------------------------------------------------------


class TestRSpecParser:
    """Example groups and examples."""

    def test_tree(self) -> None:
        result = RSpecParser().parse(RSPEC_FILE, "spec/cart_spec.rb")
        assert result.framework == "rspec"
        assert result.language is Language.RUBY
        assert [s.name for s in result.suites] == ["Cart"]
        cart = result.suites[0]
        assert [s.name for s in cart.suites] == ["#add", "with discounts"]
        assert result.tests == []

    def test_statuses(self) -> None:
        add = RSpecParser().parse(RSPEC_FILE, "spec/cart_spec.rb").suites[0].suites[0]
        statuses = [(t.name, t.status, t.modifier) for t in add.tests]
        assert statuses == [
            ("adds an item", TestStatus.ACTIVE, ""),
            ("is skipped", TestStatus.SKIPPED, "xit"),
            ("handles metadata", TestStatus.SKIPPED, "skip"),
            ("is pending without a block", TestStatus.TODO, "pending"),
        ]

    def test_loop_body_counts_once(self) -> None:
        discounts = RSpecParser().parse(RSPEC_FILE, "spec/cart_spec.rb").suites[0].suites[1]
        assert [t.name for t in discounts.tests] == ["applies discount #{i}"]

    def test_interpolation_with_nested_quotes(self) -> None:
        source = _src('''
            describe "a" do
              it "one #{"x"} y" do
              end
              it "two #{h["k"]} #{"}"}" do
              end
              it "three" do
              end
            end
        ''')
        suite = RSpecParser().parse(source, "spec/a_spec.rb").suites[0]
        assert [t.name for t in suite.tests] == [
            'one #{"x"} y', 'two #{h["k"]} #{"}"}', "three",
        ]

    def test_hooks_and_lets_are_not_tests(self) -> None:
        result = RSpecParser().parse(RSPEC_FILE, "spec/cart_spec.rb")
        assert result.count_tests() == 5

    def test_skipped_group_skips_children(self) -> None:
        source = _src("""
            xdescribe "legacy" do
              it "still here" do
              end
            end
        """)
        suite = RSpecParser().parse(source, "spec/legacy_spec.rb").suites[0]
        assert suite.status is TestStatus.SKIPPED
        assert suite.tests[0].status is TestStatus.SKIPPED
        assert suite.tests[0].modifier == "xdescribe"


class TestRSpecConfig:
    """.rspec options and helper files."""

    def test_parse_options(self) -> None:
        options = parse_options("# comment\n--format=documentation --color\n--require spec_helper\n")
        assert options == {
            "--format": ["documentation"],
            "--color": [],
            "--require": ["spec_helper"],
        }

    def test_dot_rspec_pattern(self) -> None:
        content = (
            b"--require spec_helper\n"
            b"--pattern spec/**/*_spec.rb,spec/**/*_feature.rb\n"
            b"--exclude-pattern spec/legacy/**\n"
        )
        scope = RSpecConfigParser().parse(".rspec", content)
        assert scope.framework == "rspec"
        assert scope.include == ["spec/**/*_spec.rb", "spec/**/*_feature.rb"]
        assert scope.exclude == ["**/support/**", "spec/legacy/**"]

    def test_dot_rspec_default_path(self) -> None:
        scope = RSpecConfigParser().parse(".rspec", b"--default-path test\n")
        assert scope.include == ["test/**/*_spec.rb"]
        assert scope.settings == {"default_path": "test"}

    def test_spec_helper_roots_scope(self) -> None:
        scope = RSpecConfigParser().parse("spec/spec_helper.rb", b"RSpec.configure do |c|\nend\n")
        assert scope.base_dir == "spec"
        assert scope.contains("spec/models/user_spec.rb")
        assert not scope.contains("spec/support/shared_spec.rb")
        assert not scope.contains("spec/models/user.rb")


# ---------------------------------------------------------------------------
# Minitest
# ---------------------------------------------------------------------------


class TestMinitestParser:
    """Classic and spec styles."""

    def test_classic_class(self) -> None:
        source = _src('''
            require "test_helper"

            class CartTest < Minitest::Test
              def setup
                @cart = Cart.new
              end

              def test_add
                assert_equal 1, @cart.add(1)
              end

              def test_remove
                skip "not implemented"
              end

              test "clears items" do
                assert @cart.clear
              end
            end
        ''')
        result = MinitestParser().parse(source, "test/cart_test.rb")
        assert result.framework == "minitest"
        suite = result.suites[0]
        assert suite.name == "CartTest"
        assert [t.name for t in suite.tests] == ["test_add", "test_remove", "clears items"]
        assert suite.tests[1].status is TestStatus.SKIPPED
        assert suite.tests[1].modifier == "skip"
        assert suite.tests[2].status is TestStatus.ACTIVE

    def test_spec_style(self) -> None:
        source = _src('''
            require "minitest/autorun"

            describe Calculator do
              it "adds" do
                _(1 + 1).must_equal 2
              end

              it "skips" do
                skip
              end
            end
        ''')
        result = MinitestParser().parse(source, "test/calculator_test.rb")
        suite = result.suites[0]
        assert suite.name == "Calculator"
        adds, skips = suite.tests
        assert adds.status is TestStatus.ACTIVE
        assert skips.status is TestStatus.SKIPPED

    def test_non_test_classes_are_ignored(self) -> None:
        source = b"class Cart\n  def test_like\n  end\nend\n"
        assert MinitestParser().parse(source, "lib/cart.rb").count_tests() == 0

    def test_config_parser(self) -> None:
        scope = MinitestConfigParser().parse("test/test_helper.rb", b"require 'minitest/autorun'\n")
        assert scope.base_dir == "test"
        assert scope.contains("test/models/user_test.rb")
        assert not scope.contains("test/models/user.rb")
