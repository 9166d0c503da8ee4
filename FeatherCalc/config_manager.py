# config_manager.py
"""""
Persistence boundary of the Feather Calculator.

- config.json      user settings (darkmode, keypad_always_visible)
- ui_strings.json  descriptions shown next to each setting
- state.json       the session record: expression, cursor, text size, angle mode

Missing or unreadable files never raise; the callers get defaults instead.
"""""
import json
from pathlib import Path

config_json = Path(__file__).resolve().parent.parent / "config.json"
ui_strings = Path(__file__).resolve().parent.parent / "ui_strings.json"
state_json = Path(__file__).resolve().parent.parent / "state.json"

KEY_EXPRESSION = "expression"
KEY_CURSOR = "cursor"
KEY_TEXT_SIZE = "text_size"
KEY_IS_DEGREES_MODE = "is_degrees_mode"


def _read_json(path):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        return {}

    if not isinstance(data, dict):
        return {}
    return data


def load_setting_value(key_value):
    settings_dict = _read_json(config_json)

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def load_setting_description(key_value):
    settings_dict = _read_json(ui_strings)

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def save_setting(settings_dict):
    try:
        with open(config_json, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except OSError:
        return {}


def load_state(default_text_size, default_is_degrees_mode):
    """Return the saved session as a dict with the four state keys, filling gaps with defaults."""
    saved = _read_json(state_json)

    expression = saved.get(KEY_EXPRESSION, "")
    if not isinstance(expression, str):
        expression = ""

    cursor = saved.get(KEY_CURSOR, len(expression))
    if not isinstance(cursor, int) or isinstance(cursor, bool):
        cursor = len(expression)

    text_size = saved.get(KEY_TEXT_SIZE, default_text_size)
    if not isinstance(text_size, (int, float)) or isinstance(text_size, bool):
        text_size = default_text_size

    is_degrees_mode = saved.get(KEY_IS_DEGREES_MODE, default_is_degrees_mode)
    if not isinstance(is_degrees_mode, bool):
        is_degrees_mode = default_is_degrees_mode

    return {
        KEY_EXPRESSION: expression,
        KEY_CURSOR: cursor,
        KEY_TEXT_SIZE: text_size,
        KEY_IS_DEGREES_MODE: is_degrees_mode,
    }


def save_state(expression, cursor, text_size, is_degrees_mode):
    """Write the session record; returns False if the file could not be written."""
    state_dict = {
        KEY_EXPRESSION: expression,
        KEY_CURSOR: cursor,
        KEY_TEXT_SIZE: text_size,
        KEY_IS_DEGREES_MODE: is_degrees_mode,
    }
    try:
        with open(state_json, 'w', encoding='utf-8') as f:
            json.dump(state_dict, f, indent=4, ensure_ascii=False)
            return True

    except OSError:
        return False
