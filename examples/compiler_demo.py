#!/usr/bin/env python3
"""
Calculator Language Compiler Demo
=================================

This script demonstrates how to use the calclang compiler to:
1. Compile a well-formed program and print its AST
2. Run the loop structure checks
3. Compile a malformed program and inspect the recovered tree
4. Generate C code

Usage:
    python examples/compiler_demo.py
"""

from pathlib import Path

from calclang.calc import CalcCompiler, CompilerOptions, ASTPrinter

EXAMPLES = Path(__file__).parent


def main():
    compiler = CalcCompiler(CompilerOptions())

    # ==========================================================================
    # 1. A clean program: AST dump, loop checks and C code
    # ==========================================================================

    result = compiler.compile_file(str(EXAMPLES / "squares.calc"))

    print("AST:")
    print(result.ast_text)
    print()

    print("Loop checks:")
    for line in result.check_lines:
        print(f"  {line}")
    print()

    print("Generated C:")
    print(result.c_code)
    print()

    # ==========================================================================
    # 2. A broken program: errors are recovered from
    # ==========================================================================
    # The AST dump is suppressed, but the checks and the C code are still
    # produced from the best-effort tree.

    result = compiler.compile_file(str(EXAMPLES / "broken.calc"))

    print(f"Syntax errors: {len(result.diagnostics)}")
    for line in result.diagnostics:
        print(f"  {line}")
    print()

    print("Loop checks:")
    for line in result.check_lines:
        print(f"  {line}")
    print()

    # The printer works on any tree, including a recovered one
    print("Recovered tree:")
    print(ASTPrinter().print(result.ast))
    print()

    for warning in result.warnings:
        print(warning)


if __name__ == "__main__":
    main()
