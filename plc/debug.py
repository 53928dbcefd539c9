from typing import Optional, TextIO


class DebugLog:
    """Leveled debug trace.

    Messages at or below `level` are written to `debug_file` when one is
    given and to stdout otherwise. A level of zero disables tracing and opens
    no file.
    """
    def __init__(self, level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.level = level
        self.fp: Optional[TextIO] = open(debug_file, 'w', encoding='utf-8') if level > 0 and debug_file else None

    def enabled(self, level: int) -> bool:
        return 0 < level <= self.level

    def log(self, level: int, msg: str) -> None:
        if not self.enabled(level):
            return
        if self.fp:
            self.fp.write(msg + '\n')
            self.fp.flush()
        else:
            print(msg)

    def close(self) -> None:
        if self.fp:
            self.fp.close()
            self.fp = None
