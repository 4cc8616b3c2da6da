"""
ExpenseShare GUI
- Record shared expenses within a group, split equally or by custom amounts.
- See who owes whom and each member's net balance, recomputed after every change.

Run:
  python expense_share_gui.py

Dependencies:
  pip install openpyxl
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None


def main():
    """Main entry point for the application"""
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    from main_app import ExpenseShareApp

    root = tk.Tk()
    ExpenseShareApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
