from pathlib import Path

from plc.interpreter import run_program
from plc.types import NIL

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_5_switch(capsys):
    source = (EXAMPLES / 'program_5.plc').read_text(encoding='utf-8')
    result = run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['first', 'other', 'last']
    assert result is NIL
