# simplr/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class translates decoded key events into Simplr editor actions.

Key Features:
- Resolves the configurable bindings (quit, save, refresh) from key strings
  such as ``"ctrl+q"`` into key codes.
- Maps navigation and editing keys (arrows, Home/End, PageUp/PageDown,
  Enter, Backspace, Delete) to editor methods.
- Inserts printable ASCII characters and Tab; ignores other control bytes.
- Owns the quit-confirmation counter that protects unsaved changes.

Main Methods:
1. handle_input: Processes a single key event and dispatches it.
2. _decode_keystring: Decodes key specification strings into key codes.
3. _setup_action_map: Constructs the mapping from key codes to editor actions.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from simplr.ui.KeyDecoder import BACKSPACE, ENTER, ESC, TAB, Key, ctrl_key

if TYPE_CHECKING:
    from simplr.core.Simplr import Simplr


NAMED_KEYS: dict[str, int] = {
    "up": Key.ARROW_UP,
    "down": Key.ARROW_DOWN,
    "left": Key.ARROW_LEFT,
    "right": Key.ARROW_RIGHT,
    "home": Key.HOME,
    "end": Key.END,
    "pageup": Key.PAGE_UP,
    "pagedown": Key.PAGE_DOWN,
    "delete": Key.DEL_KEY,
    "backspace": BACKSPACE,
    "enter": ENTER,
    "esc": ESC,
    "tab": TAB,
}


def format_keystring(key_string: str) -> str:
    """Formats a binding for display: ``"ctrl+q"`` becomes ``"CTRL + Q"``."""
    return " + ".join(part.strip().upper() for part in key_string.split("+"))


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Dispatches key events to the editor and tracks quit confirmations.

    Attributes:
        editor (Simplr): The editor whose actions are invoked.
        keybindings (dict): Action name -> key string, from ``[keybindings]``.
        action_map (dict): Key code -> editor action.
        quit_key (int): Key code of the quit binding.
        quit_times (int): Extra quit presses required while the buffer is dirty.
        quit_confirmations_remaining (int): Presses still needed before quitting.
    """

    def __init__(self, editor: "Simplr") -> None:
        logging.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.keybindings: dict[str, str] = dict(self.config.get("keybindings", {}))
        self.quit_times: int = int(self.config.get("editor", {}).get("quit_times", 1))
        self.quit_confirmations_remaining = self.quit_times
        self.quit_key = self._decode_keystring(self.keybindings.get("quit", "ctrl+q"))
        self.action_map = self._setup_action_map()

    # ---------------------- Handle Input --------------------
    def handle_input(self, key: int) -> None:
        """Processes a single key event.

        The quit key is handled first: with unsaved changes it only warns and
        counts down until no confirmations remain. Every other key is
        dispatched and then resets the countdown.
        """
        logging.debug("handle_input: Received key event -> %r", key)

        if key == self.quit_key:
            if self.editor.buffer.dirty and self.quit_confirmations_remaining > 0:
                self.editor.set_status_message(
                    "WARNING! File has unsaved changes. Press %s %d more times to quit."
                    % (self.describe_action("quit"), self.quit_confirmations_remaining)
                )
                self.quit_confirmations_remaining -= 1
                return
            self.editor.exit_editor()
            return

        action = self.action_map.get(key)
        if action is not None:
            logging.debug("handle_input: Key %r found in action_map. Calling: %s", key, action.__name__)
            action()
        elif 0x20 <= key < 0x7F or key == TAB:
            self.editor.insert_char(chr(key))
        else:
            logging.debug("Unhandled input ignored: %r", key)

        self.quit_confirmations_remaining = self.quit_times

    def describe_action(self, action: str) -> str:
        """Returns the display form of the key bound to *action*."""
        key_string = self.keybindings.get(action)
        return format_keystring(key_string) if key_string else "?"

    def help_message(self) -> str:
        return "Commands: %s = save | %s = exit" % (
            self.describe_action("save_file"),
            self.describe_action("quit"),
        )

    def _decode_keystring(self, key_input: str | int) -> int:
        """Decodes a key specification such as ``"ctrl+s"``, ``"pageup"`` or
        ``"x"`` into a key code.

        Raises:
            ValueError: If the key string is empty or cannot be parsed.
        """
        if isinstance(key_input, int):
            return key_input

        s = str(key_input).strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        if s in NAMED_KEYS:
            return NAMED_KEYS[s]

        parts = [p.strip() for p in s.split("+")]
        if len(parts) == 2 and parts[0] == "ctrl" and len(parts[1]) == 1 and parts[1].isalpha():
            return ctrl_key(parts[1])

        if len(s) == 1:
            return ord(s)

        raise ValueError(f"Unsupported key string: {key_input!r}")

    def _setup_action_map(self) -> dict[int, Callable[..., Any]]:
        """Builds the key code -> editor action mapping.

        Fixed editing and navigation keys come first; configured bindings
        are layered over them. Invalid bindings are logged and skipped.
        """
        logging.debug("Setting up action map for KeyBinder.")
        editor = self.editor

        action_map: dict[int, Callable[..., Any]] = {
            ENTER: editor.handle_enter,
            BACKSPACE: editor.handle_backspace,
            ctrl_key("h"): editor.handle_backspace,
            Key.DEL_KEY: editor.handle_delete,
            Key.ARROW_UP: lambda: editor.move_cursor(Key.ARROW_UP),
            Key.ARROW_DOWN: lambda: editor.move_cursor(Key.ARROW_DOWN),
            Key.ARROW_LEFT: lambda: editor.move_cursor(Key.ARROW_LEFT),
            Key.ARROW_RIGHT: lambda: editor.move_cursor(Key.ARROW_RIGHT),
            Key.HOME: editor.handle_home,
            Key.END: editor.handle_end,
            Key.PAGE_UP: editor.handle_page_up,
            Key.PAGE_DOWN: editor.handle_page_down,
            ESC: editor.handle_escape,
        }

        action_to_method_map: dict[str, Callable[..., Any]] = {
            "save_file": editor.save_file,
            "refresh": editor.refresh,
        }

        for action_name, key_string in self.keybindings.items():
            if action_name == "quit":
                continue
            method = action_to_method_map.get(action_name)
            if method is None:
                logging.warning("Unknown action '%s' in keybindings; ignored.", action_name)
                continue
            try:
                key_code = self._decode_keystring(key_string)
            except ValueError as e:
                logging.error("Invalid key binding for '%s': %s", action_name, e)
                continue
            action_map[key_code] = method

        logging.debug(
            "Final constructed action map: %s",
            {k: getattr(v, "__name__", repr(v)) for k, v in action_map.items()},
        )
        return action_map

    def lookup(self, key_spec: str | int) -> Optional[str]:
        """Returns the action name bound to *key_spec*, or None."""
        try:
            decoded_key = self._decode_keystring(key_spec)
        except ValueError:
            return None
        if decoded_key == self.quit_key:
            return "quit"
        action = self.action_map.get(decoded_key)
        if action is None:
            return None
        for name, key_string in self.keybindings.items():
            try:
                if self._decode_keystring(key_string) == decoded_key:
                    return name
            except ValueError:
                continue
        name = getattr(action, "__name__", None)
        return None if name == "<lambda>" else name
