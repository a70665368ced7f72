"""
C Code Generator Tests
======================

Tests for the C translation of calculator language programs: overall
layout, variable declarations, each statement form and expressions.
"""

from calclang.calc.parser import parse_source
from calclang.calc.codegen import CodeGenerator, generate_c
from calclang.calc.errors import ErrorCollector


def c_for(source: str) -> str:
    program, _ = parse_source(source, "test.calc")
    return generate_c(program)


class TestLayout:
    """Tests for the translation unit frame."""

    def test_full_program(self):
        """A small program produces the exact expected C text."""
        assert c_for("read n\nwrite n * 2") == (
            '#include <stdio.h>\n'
            '\n'
            'int main() {\n'
            'int n;\n'
            'scanf("%d", &n);\n'
            '\n'
            'printf("%d\\n", (n*2));\n'
            '\n'
            '\n'
            'return 0;\n'
            '}'
        )

    def test_empty_program(self):
        """An empty program still gets main()."""
        assert c_for("") == "#include <stdio.h>\n\nint main() {\n\nreturn 0;\n}"


class TestVariables:
    """Tests for variable declarations."""

    def test_sorted_and_unique(self):
        """Variables are declared once each, in sorted order."""
        code = c_for("b := 1 a := b read c read a write a")
        assert "int a;\nint b;\nint c;\n" in code
        assert code.count("int a;") == 1

    def test_write_only_names_not_declared(self):
        """Only assignment and read targets are declared."""
        code = c_for("x := 1 write y")
        assert "int x;" in code
        assert "int y;" not in code

    def test_nested_targets_declared(self):
        """Targets inside if and do bodies are declared."""
        generator = CodeGenerator()
        program, _ = parse_source("if a do read k od fi do i := 0 od")
        generator.generate(program)
        assert generator.variables == ["i", "k"]


class TestStatements:
    """Tests for each statement translation."""

    def test_assignment(self):
        """Assignments keep the original spacing of the binary form."""
        assert "x = 5;\n" in c_for("x := 5")
        assert "x =  (a+1);\n" in c_for("x := a + 1")

    def test_loop_with_check(self):
        """do becomes while(1) and check becomes a conditional break."""
        code = c_for("do check i < 3 i := i + 1 od")
        assert "while(1) {\n" in code
        assert "if (!( (i<3))) {\nbreak;\n}\n" in code
        assert "i =  (i+1);\n" in code
        assert code.index("while(1)") < code.index("break;")

    def test_if(self):
        """if becomes a C if block."""
        code = c_for("if a > 0 write a fi")
        assert 'if ( (a>0)) {\nprintf("%d\\n",a);\n\n}\n' in code

    def test_not_equal_spelling(self):
        """'<>' is written as C '!='."""
        assert "(a!=b)" in c_for("write a <> b")

    def test_relational_operators(self):
        """Other relational operators keep their spelling."""
        code = c_for("write a == b write a <= b write a >= b")
        assert "(a==b)" in code
        assert "(a<=b)" in code
        assert "(a>=b)" in code


class TestExpressions:
    """Tests for expression output."""

    def test_nested_parentheses(self):
        """Every binary node gets its own parentheses."""
        assert "x =  ( (a*b)+c);" in c_for("x := a * b + c")

    def test_right_nesting(self):
        """Same-level chains are written as they nest."""
        assert "x =  (a+ (b-c));" in c_for("x := a + b - c")

    def test_literal_text(self):
        """Literals are copied as written."""
        assert "x = 007;" in c_for("x := 007")


class TestRecoveryTrees:
    """Tests for code generation from trees built after errors."""

    def test_missing_expression_is_zero(self):
        """An assignment that lost its expression assigns 0."""
        assert "x = 0;" in c_for("x := )")

    def test_missing_operand_is_zero(self):
        """A dangling operator gets a 0 operand and a warning."""
        program, had_error = parse_source("write a +")
        assert had_error
        errors = ErrorCollector()
        code = CodeGenerator(errors).generate(program)
        assert " (a+0)" in code
        assert errors.warning_count() == 1
        assert "missing operand of '+'" in errors.warnings[0]

    def test_partial_if_still_generated(self):
        """An if missing its 'fi' is still translated with its body."""
        code = c_for("if a x := 1")
        assert "if (a) {\nx = 1;\n\n}\n" in code
