"""Package entry point for ``python -m fasty``.

WHY: Users run the reader as ``python -m fasty chapter.txt`` in a
terminal, or ``python -m fasty --gui`` for the desktop window.

HOW: Checks sys.argv for the ``--gui`` flag. If present, launches the
tkinter reader (with an optional file to preload). Otherwise, delegates
to the CLI's main() function.

RULES:
- ``--gui`` flag launches the tkinter GUI without importing the CLI
- Without ``--gui``, falls through to the terminal reader
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from fasty.gui import main as gui_main
        files = [a for a in sys.argv[1:] if not a.startswith("-")]
        gui_main(files[0] if files else None)
    else:
        from fasty.cli import main
        main()
