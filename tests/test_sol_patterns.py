from __future__ import annotations

from flatten_common import sol_patterns as sp


def test_import_target_extracts_bare_and_braced_forms():
    assert sp.import_target('import "x/Ext.sol";') == "x/Ext.sol"
    assert sp.import_target('import {A, B} from "@oz/contracts/A.sol";') == "@oz/contracts/A.sol"
    assert sp.import_target("import 'x/Single.sol';") == "x/Single.sol"
    assert sp.import_target('    import "x/Indented.sol";') == "x/Indented.sol"


def test_import_target_rejects_non_imports_and_malformed_lines():
    assert sp.import_target("contract A {}") is None
    assert sp.import_target('import "x/NoSemicolon.sol"') is None
    assert sp.import_target("import x;") is None
    assert sp.import_target('// import "x/Commented.sol";') is None


def test_relative_target_detection():
    assert sp.is_relative_target("./A.sol")
    assert sp.is_relative_target("../lib/B.sol")
    assert not sp.is_relative_target("@openzeppelin/contracts/A.sol")
    assert not sp.is_relative_target("forge-std/Test.sol")


def test_boilerplate_comment_detection_is_case_insensitive():
    assert sp.is_boilerplate_comment("/* Copyright 2024 Example */")
    assert sp.is_boilerplate_comment("/* FILE: contracts/A.sol */")
    assert not sp.is_boilerplate_comment("/** @notice transfers tokens */")


def test_version_directive_detection():
    assert sp.is_version_directive("pragma solidity ^0.8.0;")
    assert sp.is_version_directive("pragma solidity >=0.8.0 <0.9.0;")
    assert not sp.is_version_directive("pragma abicoder v2;")
