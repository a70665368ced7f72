"""
Calculator Language Front End and Back End
==========================================

Pipeline
--------
    Source → Lexer → Parser → AST → Printer / Loop Checks / C Generator

Usage
-----
>>> from calclang.calc import CalcCompiler
>>> result = CalcCompiler().compile_source("do check a < 10 a := a + 1 od")
>>> result.check_lines
['do [1] has check in it', 'check [1] is in do']
"""

from calclang.calc.compiler import (
    CalcCompiler,
    CompilerOptions,
    CompilerResult,
    compile_calc,
)
from calclang.calc.errors import (
    CalcSyntaxError,
    LexicalError,
    InvalidCharacterError,
    ParseError,
    StatementListError,
    StatementError,
    RelationError,
    ExpressionError,
    ErrorCollector,
)
from calclang.calc.lexer import CalcLexer, CalcTokenType, CalcToken
from calclang.calc.parser import CalcParser, parse_source
from calclang.calc.loop_checker import LoopChecker, LoopReport, check_loops
from calclang.calc.codegen import CodeGenerator, generate_c
from calclang.calc.ast import (
    ASTNode,
    ASTPrinter,
    ProgramNode,
    AssignStatement,
    ReadStatement,
    WriteStatement,
    IfStatement,
    DoStatement,
    CheckStatement,
    BinaryExpression,
    BinaryOperator,
    IdentifierExpression,
    NumberLiteral,
)

__all__ = [
    # Main API
    "CalcCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_calc",
    # Errors
    "CalcSyntaxError",
    "LexicalError",
    "InvalidCharacterError",
    "ParseError",
    "StatementListError",
    "StatementError",
    "RelationError",
    "ExpressionError",
    "ErrorCollector",
    # Lexer
    "CalcLexer",
    "CalcTokenType",
    "CalcToken",
    # Parser
    "CalcParser",
    "parse_source",
    # Analysis and output
    "LoopChecker",
    "LoopReport",
    "check_loops",
    "CodeGenerator",
    "generate_c",
    # AST
    "ASTNode",
    "ASTPrinter",
    "ProgramNode",
    "AssignStatement",
    "ReadStatement",
    "WriteStatement",
    "IfStatement",
    "DoStatement",
    "CheckStatement",
    "BinaryExpression",
    "BinaryOperator",
    "IdentifierExpression",
    "NumberLiteral",
]
