"""Tests for the PHPUnit parser and phpunit.xml config parser."""

from __future__ import annotations

import textwrap

import pytest

from testatlas.domain import Language, TestStatus
from testatlas.exceptions import ConfigParseError
from testatlas.parsers.phpunit import PHPUnitConfigParser, PHPUnitParser

PHP_FILE = textwrap.dedent("""\
    <?php

    namespace App\\Tests;

    use PHPUnit\\Framework\\Attributes\\Test;
    use PHPUnit\\Framework\\Attributes\\TestWith;
    use PHPUnit\\Framework\\TestCase;

    final class CartTest extends TestCase
    {
        public function testAdd(): void
        {
            $this->assertSame(1, 1);
        }

        /**
         * @test
         */
        public function removesItems(): void
        {
            $this->markTestSkipped('later');
        }

        #[Test]
        public function clears(): void
        {
            $this->markTestIncomplete();
        }

        #[TestWith([1, 2])]
        #[TestWith([3, 4])]
        public function testSums(int $a, int $b): void
        {
        }

        private function helper(): void
        {
        }
    }
""").encode()


class TestPHPUnitParser:
    """Test methods by name, docblock and attribute."""

    def test_methods(self) -> None:
        result = PHPUnitParser().parse(PHP_FILE, "tests/CartTest.php")
        assert result.framework == "phpunit"
        assert result.language is Language.PHP
        suite = result.suites[0]
        assert suite.name == "CartTest"
        assert [t.name for t in suite.tests] == [
            "testAdd", "removesItems", "clears", "testSums", "testSums",
        ]

    def test_statuses(self) -> None:
        tests = PHPUnitParser().parse(PHP_FILE, "tests/CartTest.php").suites[0].tests
        assert tests[0].status is TestStatus.ACTIVE
        assert (tests[1].status, tests[1].modifier) == (TestStatus.SKIPPED, "markTestSkipped")
        assert (tests[2].status, tests[2].modifier) == (TestStatus.TODO, "markTestIncomplete")

    def test_non_test_classes_are_ignored(self) -> None:
        source = b"<?php\nclass Helper\n{\n    public function testLike() {}\n}\n"
        assert PHPUnitParser().parse(source, "src/Helper.php").suites == []


PHPUNIT_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<phpunit bootstrap="vendor/autoload.php">
  <testsuites>
    <testsuite name="unit">
      <directory>tests/Unit</directory>
      <exclude>tests/Unit/Legacy</exclude>
    </testsuite>
    <testsuite name="integration">
      <directory suffix=".phpt">tests/Integration</directory>
      <file>tests/SmokeTest.php</file>
    </testsuite>
  </testsuites>
</phpunit>
"""


class TestPHPUnitConfig:
    """<testsuite> directories, files and excludes."""

    def test_testsuites(self) -> None:
        scope = PHPUnitConfigParser().parse("phpunit.xml.dist", PHPUNIT_XML)
        assert scope.framework == "phpunit"
        assert scope.include == [
            "tests/Unit/**/*Test.php",
            "tests/Integration/**/*.phpt",
            "tests/SmokeTest.php",
        ]
        assert scope.exclude == ["tests/Unit/Legacy", "tests/Unit/Legacy/**"]
        assert scope.settings == {"testsuites": ["unit", "integration"]}

    def test_containment(self) -> None:
        scope = PHPUnitConfigParser().parse("phpunit.xml", PHPUNIT_XML)
        assert scope.contains("tests/Unit/Cart/CartTest.php")
        assert not scope.contains("tests/Unit/Legacy/OldTest.php")
        assert scope.contains("tests/SmokeTest.php")

    def test_invalid_xml_raises(self) -> None:
        with pytest.raises(ConfigParseError, match="invalid XML"):
            PHPUnitConfigParser().parse("phpunit.xml", b"<phpunit><testsuites>")
