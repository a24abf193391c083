# kilo/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class translates terminal key presses into abstract
:class:`~kilo.ui.Dispatcher.Command` objects. The editor core never sees a key
code: it only receives commands such as ``move_up`` or ``insert_char``.

Key Features:
- Default keybindings merged with the user's ``[keybindings]`` config table.
- Key specs as strings ("ctrl+s", "f5", "pageup"), raw integer codes, lists of
  either, or "a|b" alternatives.
- ESC-sequence decoding for terminals that deliver CSI/SS3 sequences raw, and
  ncurses extended key names (kHOM5, kEND5...) for Ctrl+Home/End.
- Printable characters (as reported by wcwidth) become ``insert_char``.

Main Methods:
1. get_key_input: Reads one key or escape sequence from the terminal.
2. command_for_key: Maps a key to a Command, or None when unbound.
"""

import curses
import logging
import re
from typing import Any, Optional

from wcwidth import wcswidth

from kilo.ui.Dispatcher import Command
from kilo.utils.logging_config import KEY_LOGGER
from kilo.utils.utils import DEFAULT_CONFIG


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Maps terminal input to commands.

    Attributes:
        config: Application configuration (only ``keybindings`` is read).
        stdscr: The curses window keys are read from.
        keybindings (dict): Action name -> list of decoded key codes/strings.
        key_map (dict): Decoded key code/string -> action name.
    """

    # Keys do NOT include the leading ESC (0x1B); get_key_input() reads after it.
    ESCAPE_SEQUENCE_MAP: dict[str, str] = {
        # Arrows (CSI and SS3)
        "[A": "up", "[B": "down", "[C": "right", "[D": "left",
        "OA": "up", "OB": "down", "OC": "right", "OD": "left",

        # Home/End (CSI/SS3 and tilde variants)
        "[H": "home", "[F": "end", "OH": "home", "OF": "end",
        "[1~": "home", "[4~": "end", "[7~": "home", "[8~": "end",

        # xterm Ctrl modifier (;5) on Home/End/PageUp/PageDown
        "[1;5H": "ctrl+home", "[1;5F": "ctrl+end",
        "[5;5~": "ctrl+pageup", "[6;5~": "ctrl+pagedown",

        # Delete/PageUp/PageDown (~ style)
        "[3~": "delete", "[5~": "pageup", "[6~": "pagedown",

        # Function keys (SS3 and tilde variants)
        "OP": "f1", "OQ": "f2", "OR": "f3", "OS": "f4",
        "[11~": "f1", "[12~": "f2", "[13~": "f3", "[14~": "f4",
        "[15~": "f5", "[17~": "f6", "[18~": "f7", "[19~": "f8",
        "[20~": "f9", "[21~": "f10", "[23~": "f11", "[24~": "f12",
    }

    # ncurses names for modified keys that have no KEY_* constant.
    EXTENDED_KEY_NAMES: dict[str, str] = {
        "kHOM5": "ctrl+home",
        "kEND5": "ctrl+end",
        "kPRV5": "ctrl+pageup",
        "kNXT5": "ctrl+pagedown",
    }

    # Logical identifiers for Ctrl + named keys (returned as strings).
    CTRL_NAMED_KEYS = frozenset({"home", "end", "pageup", "pagedown"})

    def __init__(self, config: dict[str, Any], stdscr: Optional["curses.window"] = None):
        self.config = config
        self.stdscr = stdscr
        self.keybindings = self._load_keybindings()
        self.key_map = self._setup_key_map()

    def _load_keybindings(self) -> dict[str, list[int | str]]:
        """Returns action name -> decoded key codes, user config over defaults.

        Terminal-specific codes that must always work (curses KEY_* constants
        for Backspace, Delete, Enter...) are appended to the configured specs.
        """
        builtin_codes: dict[str, list[int]] = {
            "backspace": [curses.KEY_BACKSPACE],
            "delete": [curses.KEY_DC],
            "insert_line": [curses.KEY_ENTER],
            "line_end": [getattr(curses, "KEY_END", curses.KEY_LL)],
        }

        default_keybindings: dict[str, Any] = DEFAULT_CONFIG["keybindings"]
        user_keybindings_config: dict[str, Any] = self.config.get("keybindings", {})
        parsed_keybindings: dict[str, list[int | str]] = {}

        for action in {**default_keybindings, **user_keybindings_config}:
            spec = user_keybindings_config.get(action, default_keybindings.get(action))
            if not spec:
                logging.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            specs_to_process: list[int | str]
            if isinstance(spec, list):
                specs_to_process = spec
            elif isinstance(spec, str) and "|" in spec:
                specs_to_process = [s.strip() for s in spec.split("|")]
            else:
                specs_to_process = [spec]

            key_codes_for_action: list[int | str] = []
            for key_spec_item in specs_to_process + builtin_codes.get(action, []):
                try:
                    key_code = self._decode_keystring(key_spec_item)
                except ValueError as e:
                    logging.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This specific binding for the action will be ignored.",
                        key_spec_item, action, e,
                    )
                    continue
                if key_code not in key_codes_for_action:
                    key_codes_for_action.append(key_code)

            if key_codes_for_action:
                parsed_keybindings[action] = key_codes_for_action
            else:
                logging.warning(
                    "No valid key codes found for action %r after parsing. It will not be bound.",
                    action,
                )

        logging.debug("Loaded keybindings (action -> key codes): %s", parsed_keybindings)
        return parsed_keybindings

    def _decode_keystring(self, key_input: str | int) -> int | str:
        """Decodes a key spec into a curses key code or a logical key string.

        Args:
            key_input: "ctrl+s", "f5", "pageup", "ctrl+home", a single
                character, or an integer key code (returned unchanged).

        Returns:
            int | str: An integer key code, or a logical string such as
            ``"ctrl+home"`` for combinations curses has no constant for.

        Raises:
            ValueError: The spec is empty, malformed, or uses an unsupported
                modifier.
        """
        if isinstance(key_input, bool) or not isinstance(key_input, (int, str)):
            raise ValueError(f"Invalid key spec type: {type(key_input).__name__}")
        if isinstance(key_input, int):
            return key_input

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        named_keys_map: dict[str, int] = {
            "left": curses.KEY_LEFT,
            "right": curses.KEY_RIGHT,
            "up": curses.KEY_UP,
            "down": curses.KEY_DOWN,
            "home": curses.KEY_HOME,
            "end": getattr(curses, "KEY_END", curses.KEY_LL),
            "pageup": curses.KEY_PPAGE,
            "pgup": curses.KEY_PPAGE,
            "pagedown": curses.KEY_NPAGE,
            "pgdn": curses.KEY_NPAGE,
            "delete": curses.KEY_DC,
            "del": curses.KEY_DC,
            "backspace": curses.KEY_BACKSPACE,
            "insert": curses.KEY_IC,
            "tab": 9,
            "enter": curses.KEY_ENTER,
            "return": curses.KEY_ENTER,
            "space": ord(" "),
            "esc": 27,
            "escape": 27,
        }
        named_keys_map.update(
            {f"f{i}": getattr(curses, f"KEY_F{i}", 264 + i) for i in range(1, 13)}
        )

        if s in named_keys_map:
            return named_keys_map[s]

        parts = [p.strip() for p in s.split("+")]
        base_key_str = parts[-1]
        modifiers = set(parts[:-1])
        if not base_key_str:
            raise ValueError(f"Missing base key in '{key_input}'")

        if modifiers == {"ctrl"}:
            if base_key_str in self.CTRL_NAMED_KEYS:
                return f"ctrl+{base_key_str}"
            if len(base_key_str) == 1 and "a" <= base_key_str <= "z":
                return ord(base_key_str) - ord("a") + 1
            raise ValueError(f"Unsupported Ctrl combination '{key_input}'")

        if modifiers:
            raise ValueError(f"Unknown or unhandled modifiers {sorted(modifiers)} in '{key_input}'")

        if len(base_key_str) == 1:
            return ord(base_key_str)
        raise ValueError(f"Unknown key '{key_input}'")

    def _setup_key_map(self) -> dict[int | str, str]:
        key_map: dict[int | str, str] = {}
        for action, key_codes in self.keybindings.items():
            for key_code in key_codes:
                if key_code in key_map and key_map[key_code] != action:
                    logging.warning(
                        f"Keybinding for action '{action}' (key: {key_code}) is overwriting "
                        f"the mapping for '{key_map[key_code]}'."
                    )
                key_map[key_code] = action
        return key_map

    # ---------------------- Input ----------------------

    def get_key_input(self, window: Optional["curses.window"] = None) -> int | str:
        """Reads a single key or ESC sequence from the terminal.

        Returns:
            int | str:
            - a curses key code (int) for function keys,
            - a one-character str for typed characters,
            - a logical key string ("ctrl+home") for decoded sequences,
            - 27 for a lone ESC or an unknown sequence,
            - curses.ERR when no input is available or curses fails.
        """
        target = window or self.stdscr
        try:
            ch = target.get_wch()
            if ch not in ("\x1b", 27):
                KEY_LOGGER.debug(f"key {ch!r}")
                return ch

            seq = ""
            target.nodelay(True)
            try:
                while True:
                    try:
                        nx = target.get_wch()
                    except curses.error:
                        break
                    seq += nx if isinstance(nx, str) else f"<{nx}>"
            finally:
                target.nodelay(False)

            if not seq:
                KEY_LOGGER.debug("key ESC")
                return 27

            mapped = self.ESCAPE_SEQUENCE_MAP.get(seq)
            if not mapped:
                cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
                mapped = self.ESCAPE_SEQUENCE_MAP.get(cleaned)

            if mapped:
                code = self._decode_keystring(mapped)
                KEY_LOGGER.debug(f"ESC {seq!r} -> {mapped} -> {code!r}")
                return code

            logging.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
            return 27

        except curses.error:
            return curses.ERR

    def command_for_key(self, key: int | str) -> Optional[Command]:
        """Maps a key from :meth:`get_key_input` to a command.

        Bound keys win over printable characters, so a user can bind a plain
        character. Unbound non-printable keys return None.
        """
        if key == curses.ERR:
            return None
        if key == curses.KEY_RESIZE:
            return Command("resize")

        lookup_key: int | str = key
        if isinstance(key, str) and len(key) == 1 and not key.isprintable():
            lookup_key = ord(key)

        action = self.key_map.get(lookup_key)
        if action is None and isinstance(key, int) and key > 255:
            action = self.key_map.get(self._extended_key_name(key) or key)
        if action is not None:
            return Command(action)

        if isinstance(key, str) and len(key) == 1 and wcswidth(key) > 0:
            return Command("insert_char", key)

        logging.debug(f"Unbound key {key!r}")
        return None

    def _extended_key_name(self, code: int) -> Optional[str]:
        try:
            name = curses.keyname(code).decode("ascii", "ignore")
        except (curses.error, ValueError):
            return None
        return self.EXTENDED_KEY_NAMES.get(name)
