import pytest

from plc.errors import AnalysisError
from plc.generator import compile_program, escape_java


def java(*lines):
    return '\n'.join(lines)


def test_globals_and_integer_main():
    source = (
        'VAR x: Integer;\n'
        'VAL y = 1;\n'
        'LIST l: Integer = [1, 2, 3];\n'
        'FUN main(): Integer DO\n'
        '    print(x);\n'
        '    RETURN 0;\n'
        'END\n'
    )
    assert compile_program(source) == java(
        'public class Main {',
        '',
        '    int x;',
        '    final int y = 1;',
        '    int[] l = {1, 2, 3};',
        '',
        '    public static void main(String[] args) {',
        '        System.exit(new Main().main());',
        '    }',
        '',
        '    int main() {',
        '        System.out.println(x);',
        '        return 0;',
        '    }',
        '',
        '}',
    )


def test_statements():
    source = (
        'FUN f(a: Integer, b): String DO\n'
        '    LET s: String = "a\\"b";\n'
        '    IF a > 1 DO\n'
        "        s = s + 'c';\n"
        '    ELSE\n'
        '        WHILE a < 2 DO\n'
        '            a = a + 1;\n'
        '        END\n'
        '    END\n'
        '    SWITCH a\n'
        '        CASE 1:\n'
        '            print(s);\n'
        '        DEFAULT\n'
        '            print(a ^ 2);\n'
        '    END\n'
        '    RETURN s;\n'
        'END\n'
    )
    assert compile_program(source) == java(
        'public class Main {',
        '',
        '    String f(int a, Object b) {',
        '        String s = "a\\"b";',
        '        if (a > 1) {',
        "            s = s + 'c';",
        '        } else {',
        '            while (a < 2) {',
        '                a = a + 1;',
        '            }',
        '        }',
        '        switch (a) {',
        '            case 1:',
        '                System.out.println(s);',
        '                break;',
        '            default:',
        '                System.out.println((int) Math.pow(a, 2));',
        '        }',
        '        return s;',
        '    }',
        '',
        '}',
    )


def test_void_functions_and_literals():
    source = (
        'FUN noop() DO END\n'
        'FUN main() DO\n'
        '    noop();\n'
        '    print((1 + 2) * 3);\n'
        "    print('\\'');\n"
        '    print(1.50);\n'
        '    print(TRUE);\n'
        '    print(NIL);\n'
        '    RETURN NIL;\n'
        'END\n'
    )
    assert compile_program(source) == java(
        'public class Main {',
        '',
        '    public static void main(String[] args) {',
        '        new Main().main();',
        '    }',
        '',
        '    void noop() {}',
        '',
        '    void main() {',
        '        noop();',
        '        System.out.println((1 + 2) * 3);',
        "        System.out.println('\\'');",
        '        System.out.println(1.50);',
        '        System.out.println(true);',
        '        System.out.println(null);',
        '        return;',
        '    }',
        '',
        '}',
    )


def test_inferred_declaration_type_and_decimal_global():
    source = 'VAL rate = 0.5; FUN main(): Decimal DO LET c = \'x\'; RETURN rate; END'
    out = compile_program(source).splitlines()
    assert '    final double rate = 0.5;' in out
    assert "        char c = 'x';" in out
    assert '        new Main().main();' in out


def test_escape_java():
    assert escape_java('a\nb\t"c"\\', '"') == 'a\\nb\\t\\"c\\"\\\\'
    assert escape_java("'", "'") == "\\'"
    assert escape_java('"', "'") == '"'


def test_generation_requires_valid_program():
    with pytest.raises(AnalysisError):
        compile_program('VAL x: Integer = 1.0;')


def test_logical_operators_keep_left_to_right_grouping():
    source = (
        'FUN f(a: Boolean, b: Boolean, c: Boolean): Boolean DO\n'
        '    print(TRUE || FALSE && FALSE);\n'
        '    print(a && b || c);\n'
        '    RETURN a || b && c;\n'
        'END\n'
    )
    out = compile_program(source).splitlines()
    assert '        System.out.println((true || false) && false);' in out
    assert '        System.out.println(a && b || c);' in out
    assert '        return (a || b) && c;' in out


def test_nil_return_depends_on_method_return_type():
    source = (
        'FUN f(): Any DO RETURN NIL; END\n'
        'FUN g() DO RETURN print(1); END\n'
    )
    assert compile_program(source) == java(
        'public class Main {',
        '',
        '    Object f() {',
        '        return null;',
        '    }',
        '',
        '    void g() {',
        '        System.out.println(1);',
        '        return;',
        '    }',
        '',
        '}',
    )
