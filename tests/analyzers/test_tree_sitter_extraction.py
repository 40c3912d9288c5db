"""Tests for the syntax-tree extractor used for JavaScript and TypeScript."""

from __future__ import annotations

import pytest

pytest.importorskip("tree_sitter_javascript")
pytest.importorskip("tree_sitter_typescript")

from archaeologist.analyzers.source import SourceAnalyzer  # noqa: E402
from archaeologist.analyzers.tree_sitter import TreeSitterExtractor  # noqa: E402


def _extract(content: str, language: str = "javascript", extension: str = ".js"):  # type: ignore[no-untyped-def]
    result = TreeSitterExtractor().extract(content, language, extension)
    assert result is not None
    return result


def test_requires_inside_strings_and_comments_are_not_imports() -> None:
    result = _extract(
        """
// const a = require('./commented');
/* import b from './block'; */
const text = "require('./in-string')";
const tpl = `import('./in-template')`;
const real = require('./real');
"""
    )

    assert result.imports == ["./real"]


def test_es_module_imports_and_exports() -> None:
    result = _extract(
        """
import React, { useState } from 'react';
import * as path from 'path';
export * from './all';
export * as ns from './namespace';
export { a as renamed, b } from './pieces';
export default function main() {}
export const answer = 42, helper = () => answer;
export class Widget {}
async function load() { return import('./lazy'); }
"""
    )

    assert result.imports == ["react", "path", "./all", "./namespace", "./pieces", "./lazy"]
    assert set(result.exports) == {"*", "ns", "renamed", "b", "default", "answer", "helper", "Widget"}
    assert {"main", "helper", "load"} <= set(result.functions)
    assert result.classes == ["Widget"]


def test_commonjs_exports_object_members() -> None:
    result = _extract(
        """
const helper = require('./helper');
module.exports = { run, stop: () => {}, start() {} };
exports.extra = 1;
module.exports.more = function () {};
"""
    )

    assert result.imports == ["./helper"]
    assert set(result.exports) == {"run", "stop", "start", "extra", "more"}


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("module.exports = function named() {};", ["named"]),
        ("module.exports = () => {};", ["default"]),
        ("class Foo {}\nmodule.exports = Foo;", ["Foo"]),
        ("module.exports = {};", ["default"]),
    ],
)
def test_module_exports_assignment_names(source: str, expected: list[str]) -> None:
    assert _extract(source).exports == expected


def test_typescript_type_imports_and_declarations() -> None:
    result = _extract(
        """
import type { Props } from './types';
import { api } from './api';
import legacy = require('./legacy');
export interface Widget { id: string }
export type Id = string;
export enum Color { Red }
export abstract class Base {}
""",
        "typescript",
        ".ts",
    )

    assert result.imports == ["./api", "./legacy"]
    assert result.interfaces == ["Widget"]
    assert result.classes == ["Base"]
    assert {"Widget", "Id", "Color", "Base"} <= set(result.exports)


def test_typescript_export_assignment() -> None:
    result = _extract("class Foo {}\nexport = Foo;\n", "typescript", ".ts")

    assert result.exports == ["Foo"]


def test_tsx_components_use_tsx_grammar() -> None:
    result = _extract(
        "import { Button } from './Button';\nexport const App = () => <Button label=\"hi\" />;\n",
        "typescript",
        ".tsx",
    )

    assert result.imports == ["./Button"]
    assert result.functions == ["App"]
    assert result.exports == ["App"]


def test_syntax_errors_return_none() -> None:
    assert TreeSitterExtractor().extract("const = ;\nfunction (", "javascript", ".js") is None


def test_source_analyzer_falls_back_to_patterns_on_syntax_error(tmp_path) -> None:  # type: ignore[no-untyped-def]
    target = tmp_path / "broken.js"
    target.write_text("const dep = require('./dep');\nfunction broken( {\n", encoding="utf-8")

    analysis = SourceAnalyzer().analyze_file(target)

    assert analysis is not None
    assert analysis.imports == ("./dep",)
    assert analysis.language == "javascript"
