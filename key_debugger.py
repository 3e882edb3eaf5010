# key_debugger.py
"""Prints the key events Simplr decodes from the terminal. Press 'q' to quit."""
from simplr.ui.KeyDecoder import BACKSPACE, ENTER, ESC, Key, KeyDecoder
from simplr.ui.TerminalAppMode import TerminalAppMode

SPECIAL_NAMES = {
    ESC: "ESC",
    BACKSPACE: "Backspace",
    ENTER: "Enter",
    ord("\t"): "Tab",
}


def describe_key(key: int) -> str:
    """Returns a human-readable description of a decoded key event."""
    if key in Key._value2member_map_:
        return f"Key.{Key(key).name}"
    if key in SPECIAL_NAMES:
        return f"{SPECIAL_NAMES[key]} ({key})"
    if key < 0x20:
        return f"Ctrl-{chr(key + 0x40)} ({key})"
    if key < 0x7F:
        return f"'{chr(key)}' ({key})"
    return f"byte {key} ({hex(key)})"


def main() -> None:
    with TerminalAppMode() as terminal:
        decoder = KeyDecoder(terminal.read_byte)
        terminal.write(b"Simplr key debugger. Press any key to see its code. Press 'q' to quit.\r\n")
        while True:
            key = decoder.next()
            if key == ord("q"):
                break
            terminal.write(f"{describe_key(key)}\r\n".encode("utf-8"))


if __name__ == "__main__":
    main()
