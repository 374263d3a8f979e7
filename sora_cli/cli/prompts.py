"""Interactive prompts for the video CLI"""
import getpass
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..models.catalog import ALLOWED_DURATIONS, DEFAULT_DURATION, MODEL_OPTIONS, ModelOption, ResolutionOption

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


class JobAction(Enum):
    CREATE = "create"
    REMIX = "remix"
    LIST = "list"


_ACTION_ALIASES = {
    "": JobAction.CREATE,
    "1": JobAction.CREATE,
    "create": JobAction.CREATE,
    "new": JobAction.CREATE,
    "c": JobAction.CREATE,
    "2": JobAction.REMIX,
    "remix": JobAction.REMIX,
    "r": JobAction.REMIX,
    "3": JobAction.LIST,
    "list": JobAction.LIST,
    "l": JobAction.LIST,
}


def expand_path(path: str) -> Path:
    """Expand a leading ~ to the user's home directory."""
    return Path(os.path.expanduser(path.strip()))


def _pick_index(value: str, count: int) -> Optional[int]:
    """1-based menu choice -> 0-based index, or None."""
    if value.isdigit():
        idx = int(value)
        if 1 <= idx <= count:
            return idx - 1
    return None


class Prompter:
    """
    Line based prompts on stdin/stdout.

    Input and output are injectable so flows can be driven from tests.
    EOFError from the input function propagates to the caller.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Callable[..., None] = print,
        secret_input: Callable[[str], str] = getpass.getpass,
    ):
        self.input = input_func
        self.output = output
        self.secret_input = secret_input

    def ask(self, label: str) -> str:
        """Optional value; blank is allowed."""
        return self.input(f"{label}: ").strip()

    def ask_required(self, label: str) -> str:
        while True:
            value = self.ask(label)
            if value:
                return value
            self.output("Value required.")

    def confirm(self, label: str) -> bool:
        """Yes/no question; blank means no."""
        while True:
            value = self.input(f"{label} [y/N]: ").strip().lower()
            if value in ("y", "yes"):
                return True
            if value in ("n", "no", ""):
                return False
            self.output("Please respond with 'y' or 'n'.")

    def ask_api_key(self) -> str:
        while True:
            key = self.secret_input("Enter OpenAI API key: ").strip()
            if key:
                return key
            self.output("API key cannot be empty.")

    def choose_action(self) -> JobAction:
        while True:
            self.output("Select action:")
            self.output("  1) Create a new video")
            self.output("  2) Remix an existing video")
            self.output("  3) List recent videos")
            choice = self.input("Enter choice (1-3): ").strip().lower()
            action = _ACTION_ALIASES.get(choice)
            if action is not None:
                return action
            self.output("Invalid selection, please try again.")

    def choose_model(self, options: Sequence[ModelOption] = MODEL_OPTIONS) -> ModelOption:
        while True:
            self.output("Select model:")
            for i, opt in enumerate(options, start=1):
                self.output(f"  {i}) {opt.name} (${opt.rate_per_second:.2f} per second)")
            choice = self.input(f"Enter choice (1-{len(options)}): ").strip()
            if not choice:
                return options[0]
            idx = _pick_index(choice, len(options))
            if idx is not None:
                return options[idx]
            for opt in options:
                if choice.lower() == opt.name.lower():
                    return opt
            self.output("Invalid selection, please try again.")

    def choose_duration(self, default: int = DEFAULT_DURATION, allowed: Sequence[int] = ALLOWED_DURATIONS) -> int:
        default_idx = allowed.index(default) if default in allowed else 0
        while True:
            self.output("Select clip duration:")
            for i, seconds in enumerate(allowed):
                marker = " (default)" if i == default_idx else ""
                self.output(f"  {i + 1}) {seconds} seconds{marker}")
            choice = self.input(f"Enter choice (1-{len(allowed)}): ").strip()
            if not choice:
                return allowed[default_idx]
            idx = _pick_index(choice, len(allowed))
            if idx is not None:
                return allowed[idx]
            for seconds in allowed:
                if choice == str(seconds):
                    return seconds
            self.output("Invalid selection, please try again.")

    def choose_resolution(self, options: Sequence[ResolutionOption]) -> ResolutionOption:
        while True:
            self.output("Select output resolution:")
            for i, opt in enumerate(options, start=1):
                self.output(f"  {i}) {opt.label}")
            choice = self.input(f"Enter choice (1-{len(options)}): ").strip()
            if not choice:
                return options[0]
            idx = _pick_index(choice, len(options))
            if idx is not None:
                return options[idx]
            for opt in options:
                if choice.lower() in (opt.value.lower(), opt.label.lower()):
                    return opt
            self.output("Invalid selection, please try again.")

    def ask_destination_directory(self) -> Path:
        """
        Directory for the downloaded video; blank means the current directory.

        Raises:
            OSError: If the directory cannot be created
        """
        value = self.ask("Destination directory for the video (leave blank to use current directory)")
        if not value:
            return Path.cwd()
        destination = expand_path(value)
        destination.mkdir(parents=True, exist_ok=True)
        return destination

    def ask_list_limit(self) -> int:
        while True:
            value = self.ask(f"Number of videos to list (1-{MAX_LIST_LIMIT}, leave blank for {DEFAULT_LIST_LIMIT})")
            if not value:
                return DEFAULT_LIST_LIMIT
            if value.isdigit() and 1 <= int(value) <= MAX_LIST_LIMIT:
                return int(value)
            self.output(
                f"Please enter a whole number between 1 and {MAX_LIST_LIMIT}, "
                f"or leave blank for {DEFAULT_LIST_LIMIT}."
            )

    def ask_list_order(self) -> str:
        while True:
            value = self.ask("Sort order (asc/desc, leave blank for desc)").lower()
            if not value:
                return "desc"
            if value in ("asc", "desc"):
                return value
            self.output("Please enter 'asc', 'desc', or leave blank.")
