"""
TicTacToe UI
A graphical interface for playing TicTacToe against the computer using Tkinter.

Shows:
- Difficulty selection screen
- Clickable 3x3 board (X for human, O for computer)
- Game status and the computer's last move
- Restart and Change Difficulty buttons
"""

import argparse
import logging
import tkinter as tk
from tkinter import ttk
from typing import Any, Callable, Optional

from engine.board import Player
from engine.config import Difficulty
from engine.game_session import GameSession, SessionSnapshot, SessionState

logger = logging.getLogger(__name__)

# Colors
BG_COLOR = '#1a1a2e'
CELL_COLOR = '#16213e'
HUMAN_COLOR = '#10b981'
COMPUTER_COLOR = '#f87171'
WIN_CELL_COLOR = '#854d0e'

DIFFICULTY_COLORS = {
    Difficulty.EASY: "#4ade80",
    Difficulty.MEDIUM: "#fbbf24",
    Difficulty.HARD: "#f87171",
}


class TkScheduler:
    """Runs delayed calls on the Tk main loop with after()/after_cancel()."""

    def __init__(self, root: tk.Misc):
        self.root = root

    def schedule(self, delay: float, callback: Callable[[], Any]) -> str:
        return self.root.after(int(max(delay, 0.0) * 1000), callback)

    def cancel(self, handle: str):
        self.root.after_cancel(handle)


class TicTacToeUI:
    """
    Main UI class for TicTacToe.
    """

    def __init__(self, args: Optional[argparse.Namespace] = None):
        """
        Initialize the UI.

        Args:
            args: Parsed command line arguments (see main.build_parser).
        """
        from main import build_parser, make_session

        args = args or build_parser().parse_args([])

        self.root = tk.Tk()
        self.scheduler = TkScheduler(self.root)
        self.session: GameSession = make_session(args, self.scheduler)

        self._create_ui()
        self.session.add_listener(self._render)
        self._render(self.session.snapshot())

    def _create_ui(self):
        """Create the Tkinter UI."""
        self.root.title("TicTacToe")
        self.root.configure(bg=BG_COLOR)
        self.root.resizable(False, False)

        # Configure style
        style = ttk.Style()
        style.theme_use('clam')
        style.configure('TFrame', background=BG_COLOR)
        style.configure('TLabel', background=BG_COLOR, foreground='white', font=('Segoe UI', 11))
        style.configure('Title.TLabel', font=('Segoe UI', 16, 'bold'), foreground='#00d4ff')
        style.configure('Status.TLabel', font=('Segoe UI', 12), foreground='#ffd700')
        style.configure('Move.TLabel', font=('Segoe UI', 11), foreground='#00ff88')

        self.container = ttk.Frame(self.root)
        self.container.pack(fill=tk.BOTH, expand=True, padx=20, pady=20)

        self._create_difficulty_frame()
        self._create_game_frame()

        self.root.protocol("WM_DELETE_WINDOW", self._quit)

    def _create_difficulty_frame(self):
        """Screen shown until a difficulty is picked."""
        self.difficulty_frame = ttk.Frame(self.container)

        ttk.Label(self.difficulty_frame, text="Choose Difficulty", style='Title.TLabel').pack(pady=(0, 15))

        buttons = ttk.Frame(self.difficulty_frame)
        buttons.pack()
        for level in Difficulty:
            tk.Button(
                buttons,
                text=level.label,
                font=('Segoe UI', 11, 'bold'),
                width=8,
                bg=DIFFICULTY_COLORS[level],
                fg='black',
                command=lambda lv=level: self.session.choose_difficulty(lv)
            ).pack(side=tk.LEFT, padx=5)

    def _create_game_frame(self):
        """Board, status labels and end-of-game buttons."""
        self.game_frame = ttk.Frame(self.container)

        self.title_label = ttk.Label(self.game_frame, text="", style='Title.TLabel')
        self.title_label.pack(pady=(0, 10))

        board_frame = ttk.Frame(self.game_frame)
        board_frame.pack(pady=10)

        self.board_cells = []
        for index in range(9):
            cell = tk.Button(
                board_frame,
                text="",
                font=('Segoe UI', 24, 'bold'),
                width=4,
                height=2,
                bg=CELL_COLOR,
                fg='white',
                relief='ridge',
                borderwidth=2,
                command=lambda i=index: self.session.human_move(i)
            )
            cell.grid(row=index // 3, column=index % 3, padx=2, pady=2)
            self.board_cells.append(cell)

        # Legend
        legend_frame = ttk.Frame(self.game_frame)
        legend_frame.pack(pady=5)
        ttk.Label(legend_frame, text="X = Human  ", foreground=HUMAN_COLOR).pack(side=tk.LEFT)
        ttk.Label(legend_frame, text="O = Computer", foreground=COMPUTER_COLOR).pack(side=tk.LEFT)

        ttk.Separator(self.game_frame, orient='horizontal').pack(fill=tk.X, pady=10)

        self.status_label = ttk.Label(self.game_frame, text="", style='Status.TLabel')
        self.status_label.pack(pady=5)

        self.move_label = ttk.Label(self.game_frame, text="", style='Move.TLabel')
        self.move_label.pack()

        # Only shown once the game is over
        self.end_frame = ttk.Frame(self.game_frame)
        tk.Button(
            self.end_frame,
            text="Restart",
            font=('Segoe UI', 11, 'bold'),
            bg='#6366f1',
            fg='white',
            width=12,
            command=self.session.restart
        ).pack(side=tk.LEFT, padx=5)
        tk.Button(
            self.end_frame,
            text="Change Difficulty",
            font=('Segoe UI', 11, 'bold'),
            bg='#2d3748',
            fg='white',
            width=16,
            command=self.session.change_difficulty
        ).pack(side=tk.LEFT, padx=5)

    def _render(self, snapshot: SessionSnapshot):
        """Redraw everything from a session snapshot."""
        if snapshot.state == SessionState.AWAITING_DIFFICULTY:
            self.game_frame.pack_forget()
            self.difficulty_frame.pack()
            return

        self.difficulty_frame.pack_forget()
        self.game_frame.pack()
        self.title_label.configure(text=f"Tic Tac Toe ({snapshot.difficulty.label} Mode)")

        self._update_board_display(snapshot)
        self._update_game_info(snapshot)

    def _update_board_display(self, snapshot: SessionSnapshot):
        """Update the board grid display."""
        game_over = snapshot.outcome.is_over
        winning = snapshot.winning_line or ()

        for index, cell in enumerate(snapshot.cells):
            button = self.board_cells[index]
            if cell is None:
                button.configure(text="", bg=CELL_COLOR)
            else:
                color = HUMAN_COLOR if cell == Player.HUMAN else COMPUTER_COLOR
                button.configure(
                    text=cell.mark,
                    fg=color,
                    disabledforeground=color,
                    bg=WIN_CELL_COLOR if index in winning else CELL_COLOR
                )

            clickable = cell is None and not game_over and snapshot.turn == Player.HUMAN
            button.configure(state='normal' if clickable else 'disabled')

    def _update_game_info(self, snapshot: SessionSnapshot):
        """Update game status labels."""
        outcome = snapshot.outcome
        if outcome.winner == Player.HUMAN:
            self.status_label.configure(text="You win!")
        elif outcome.winner == Player.COMPUTER:
            self.status_label.configure(text="Computer wins!")
        elif outcome.is_over:
            self.status_label.configure(text="It's a draw!")
        elif snapshot.computer_thinking:
            self.status_label.configure(text="Computer is thinking...")
        else:
            self.status_label.configure(text="Your turn")

        if snapshot.last_decision is not None:
            self.move_label.configure(text=f"Computer played {snapshot.last_decision.index + 1}")
        else:
            self.move_label.configure(text="")

        if outcome.is_over:
            self.end_frame.pack(pady=10)
        else:
            self.end_frame.pack_forget()

    def _quit(self):
        """Quit the application."""
        logger.info("Quitting...")
        self.session.close()
        self.root.quit()
        self.root.destroy()

    def run(self):
        """Run the UI main loop."""
        self.root.mainloop()


def main():
    """Main entry point."""
    from main import build_parser

    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))

    ui = TicTacToeUI(args)
    ui.run()


if __name__ == "__main__":
    main()
