"""Tests for the pattern-matching extraction fallback."""

from __future__ import annotations

from archaeologist.analyzers.patterns import PatternExtractor


def _extract(content: str, language: str):  # type: ignore[no-untyped-def]
    result = PatternExtractor().extract(content, language)
    assert result is not None
    return result


def test_javascript_imports_and_exports() -> None:
    result = _extract(
        """
import React from 'react';
import { helper } from "./utils/helper";
import './styles.css';
const fs = require('fs');
const lazy = import('./lazy');
export * from './reexported';
export function render() {}
export const VERSION = '1';
export default App;
module.exports.extra = 1;
class App {}
const handler = async (event) => event;
""",
        "javascript",
    )

    assert result.imports == [
        "react",
        "./utils/helper",
        "./styles.css",
        "fs",
        "./lazy",
        "./reexported",
    ]
    assert {"render", "handler"} <= set(result.functions)
    assert result.classes == ["App"]
    assert {"render", "VERSION", "default", "*", "extra"} <= set(result.exports)


def test_typescript_interfaces_and_type_imports() -> None:
    result = _extract(
        """
import type { Props } from './types';
import { api } from './api';
export interface Widget { id: string }
export type Id = string;
export enum Color { Red }
""",
        "typescript",
    )

    assert "./types" not in result.imports
    assert "./api" in result.imports
    assert result.interfaces == ["Widget"]
    assert {"Widget", "Id", "Color"} <= set(result.exports)


def test_python_imports_functions_and_classes() -> None:
    result = _extract(
        """
import os, sys as system
from .models import Thing
from ..pkg.mod import other

class Service:
    async def handle(self):
        pass

def main():
    pass
""",
        "python",
    )

    assert result.imports == [".models", "..pkg.mod", "os", "sys"]
    assert result.functions == ["handle", "main"]
    assert result.classes == ["Service"]
    assert result.exports == []


def test_java_methods_skip_control_keywords() -> None:
    result = _extract(
        """
import java.util.List;
import static org.junit.Assert.*;

public class Greeter {
    public String greet(String name) {
        if (name == null) {
            return "hi";
        }
        return "hello " + name;
    }
}
""",
        "java",
    )

    assert result.imports == ["java.util.List", "org.junit.Assert.*"]
    assert result.classes == ["Greeter"]
    assert result.functions == ["greet"]


def test_go_grouped_and_single_imports_are_merged() -> None:
    result = _extract(
        """
package main

import "fmt"

import (
    "os"
    str "strings"
    "fmt"
)

type Server struct {
    addr string
}

func (s *Server) Start() error { return nil }

func main() {}
""",
        "go",
    )

    assert result.imports == ["fmt", "os", "strings"]
    assert result.structs == ["Server"]
    assert result.functions == ["Start", "main"]


def test_unknown_language_returns_none() -> None:
    assert PatternExtractor().extract("whatever", "cobol") is None
