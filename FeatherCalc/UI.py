# UI.py
""""PySide6 user interface for the Feather Calculator.

Structure
---------
- Calculator UI: main window with expression line, live result and keypads
- Settings UI: modal dialog for user preferences

Responsibilities (Calculator)
-----------------------------
- Build window, expression line, result line, scientific and standard keypad
- Forward every keypress together with the current selection to the CalculationController
- Render the CalculatorState after every input (error results in red, finalized results highlighted)
- Keep the expression readable by shrinking its font between a maximum and a minimum size
- Clipboard: copy the result (pyperclip); Shift + clipboard button pastes into the expression
- Load the saved session after the window is shown and save it when the window closes


Responsibilities (Settings)
---------------------------

- Load Current Settings and Settings Descriptions via Config_Manager
- Save them and apply theme / keypad changes immediately


Threading Note
--------------
Evaluation is a few microseconds of pure computation, so it runs directly on the GUI thread.
The controller is not thread-safe and is only ever touched from here.
"""""

# Ui.py
from PySide6 import QtWidgets, QtGui
from PySide6.QtCore import Qt, Signal, QTimer
import sys
from pathlib import Path
from pynput.keyboard import Controller as KeyboardController
import pyperclip
from . import error as E  # Imports error.py as a module
from . import config_manager as config_manager  # Imports config_manager.py as a module
from .Controller import CalculationController, SavedState, CLEAR, DELETE, EQUALS, PARENTHESES, TOGGLE_SIGN

# Resolve project root depending on run mode (Script or .exe)
if getattr(sys, 'frozen', False):
    # We are running in a PyInstaller bundle (.exe)
    PROJECT_ROOT = Path(sys._MEIPASS)
else:
    # We are running in a normal Python environment (.py)
    PROJECT_ROOT = Path(__file__).resolve().parent.parent

MAX_TEXT_SIZE = 46
MIN_TEXT_SIZE = 30
RESULT_TEXT_SIZE = 22

ANGLE_MODE = "RAD/DEG"
CLIPBOARD = "📋"
SETTINGS = "⚙"
EXPAND = "▾"
COLLAPSE = "▴"

# (label, input value, row, column)
SCIENTIFIC_BUTTONS = [
    ('√', '√(', 0, 0), ('π', 'π', 0, 1), ('^', '^', 0, 2), ('!', '!', 0, 3),
    ('sin', 'sin(', 1, 0), ('cos', 'cos(', 1, 1), ('tan', 'tan(', 1, 2), ('RAD', ANGLE_MODE, 1, 3),
    ('e', 'e', 2, 0), ('ln', 'ln(', 2, 1), ('log', 'log(', 2, 2), ('±', TOGGLE_SIGN, 2, 3),
]

STANDARD_BUTTONS = [
    ('C', CLEAR, 0, 0), ('( )', PARENTHESES, 0, 1), ('%', '%', 0, 2), ('÷', '÷', 0, 3),
    ('7', '7', 1, 0), ('8', '8', 1, 1), ('9', '9', 1, 2), ('×', '×', 1, 3),
    ('4', '4', 2, 0), ('5', '5', 2, 1), ('6', '6', 2, 2), ('-', '-', 2, 3),
    ('1', '1', 3, 0), ('2', '2', 3, 1), ('3', '3', 3, 2), ('+', '+', 3, 3),
    ('0', '0', 4, 0), ('.', '.', 4, 1), ('⌫', DELETE, 4, 2), ('=', EQUALS, 4, 3),
]

# Buttons that support "press and hold"
HOLD_BUTTONS = ['0', '1', '2', '3', '4', '5', '6', '7', '8', '9', DELETE]

# Keyboard characters and the input they stand for
KEY_INPUTS = {
    '*': '×', '/': '÷', 'x': '×', ':': '÷',
    '+': '+', '-': '-', '.': '.', ',': '.', '%': '%',
    '(': '(', ')': ')', '^': '^', '!': '!', '=': EQUALS,
}


def is_shift_pressed():
    """""

    Small and simple check, whether shift is pressed or not.
    Used for the "shift to paste" behaviour of the clipboard button.

    """""

    keyboard_controller = KeyboardController()
    return keyboard_controller.shift_pressed


def fit_text_size(text_width_at_max, available_width):
    """Scale the expression font down so the text fits, but never below MIN_TEXT_SIZE."""
    if available_width <= 0 or text_width_at_max <= available_width:
        return MAX_TEXT_SIZE
    return max(MIN_TEXT_SIZE, MAX_TEXT_SIZE * available_width / text_width_at_max)


class SettingsDialog(QtWidgets.QDialog):
    """""

    This class is responsible for managing the settings window and saving the new settings.
    Every setting of the calculator is a boolean, so every setting is shown as a checkbox.

    """""

    settings_saved = Signal()  # Signal to tell the main window to update

    def __init__(self, parent=None):
        super().__init__(parent)
        self.widgets = {}  # Dictionary, in which all of the checkboxes are stored.

        # --- 1. Window Setup ---
        self.setWindowTitle("Calculator Settings")
        self.setMinimumSize(300, 150)

        main_layout = QtWidgets.QVBoxLayout(self)

        # --- 2. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")
        self.setting_description_list = config_manager.load_setting_description("all")

        # --- 3. Build Widgets ---
        for key_value, value in self.setting_value_list.items():
            if not isinstance(value, bool):
                continue
            description = self.setting_description_list.get(key_value, key_value)
            checkbox = QtWidgets.QCheckBox(description)
            checkbox.setChecked(value)
            main_layout.addWidget(checkbox)
            self.widgets[key_value] = checkbox  # Store widget for later saving

        # --- 4. OK / Cancel Buttons ---
        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        main_layout.addStretch(1)

        button_box.accepted.connect(self.save_settings)
        button_box.rejected.connect(self.reject)

        self.update_darkmode()

    def save_settings(self):
        for key_value, widget in self.widgets.items():
            self.setting_value_list[key_value] = widget.isChecked()

        saved_settings = config_manager.save_setting(self.setting_value_list)

        if saved_settings != {}:
            self.settings_saved.emit()  # Tell the main window to update
            self.accept()
        else:
            QtWidgets.QMessageBox.critical(self, "Error",
                                           f"Error 5001: {E.ERROR_MESSAGES['5001']}{config_manager.config_json}")

    def update_darkmode(self):
        # Applies the darkmode stylesheet if the setting is True
        if self.setting_value_list.get("darkmode") == True:
            self.setStyleSheet("""
                        QDialog {background-color: #121212;}
                        QCheckBox {color: white;}
                        QDialogButtonBox QPushButton {background-color: #666666;color: white;}""")
        else:
            self.setStyleSheet("")  # Revert to default stylesheet


class CalculatorWindow(QtWidgets.QWidget):
    # --- Class-level attributes for button hold logic ---
    initial_delay = 500
    repeat_interval = 100

    def __init__(self):
        super().__init__()

        # --- 1. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")

        # --- 2. Instance State Variables ---
        self.controller = CalculationController()
        self.text_size = MAX_TEXT_SIZE
        self.shift_is_held = False
        self.updating_display = False  # True while the display is written from the state
        self.keypad_expanded = True
        self.was_held = False
        self.held_button_value = None
        self.hold_timer = QTimer(self)  # Timer for button hold
        self.hold_timer.timeout.connect(self.handle_hold_tick)
        self.button_objects = {}  # Dictionary to store button widgets

        # --- 3. Window Setup ---
        icon_path = PROJECT_ROOT / "icons" / "icon.png"
        if icon_path.exists():
            self.setWindowIcon(QtGui.QIcon(str(icon_path)))
        self.setWindowTitle("Calculator")
        self.resize(360, 620)
        main_v_layout = QtWidgets.QVBoxLayout(self)

        expanding_policy = QtWidgets.QSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding
        )

        # --- 4. Display Setup ---
        # Read-only keeps the keyboard out, but clicking still moves the cursor and selects text
        self.expression_display = QtWidgets.QLineEdit("")
        self.expression_display.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.expression_display.setReadOnly(True)
        self.expression_display.setFrame(False)
        self.expression_display.cursorPositionChanged.connect(self.handle_cursor_moved)
        self.set_expression_font_size(MAX_TEXT_SIZE)
        main_v_layout.addWidget(self.expression_display, 2)

        self.result_display = QtWidgets.QLabel("")
        self.result_display.setAlignment(Qt.AlignmentFlag.AlignRight)
        font = self.result_display.font()
        font.setPointSize(RESULT_TEXT_SIZE)
        self.result_display.setFont(font)
        main_v_layout.addWidget(self.result_display, 1)

        # --- 5. Top Bar: settings, clipboard, keypad arrow ---
        top_bar = QtWidgets.QHBoxLayout()
        for text in (SETTINGS, CLIPBOARD, EXPAND):
            button = QtWidgets.QPushButton(text)
            button.setFlat(True)
            top_bar.addWidget(button)
            self.button_objects[text] = button
        self.button_objects[SETTINGS].clicked.connect(self.open_settings)
        self.button_objects[CLIPBOARD].clicked.connect(self.handle_clipboard)
        self.button_objects[EXPAND].clicked.connect(self.toggle_scientific_keypad)
        main_v_layout.addLayout(top_bar)

        # --- 6. Keypads ---
        self.scientific_keypad = self.build_keypad(SCIENTIFIC_BUTTONS, expanding_policy)
        main_v_layout.addWidget(self.scientific_keypad, 2)
        self.standard_keypad = self.build_keypad(STANDARD_BUTTONS, expanding_policy)
        main_v_layout.addWidget(self.standard_keypad, 5)

        self.apply_settings()

        # Restore the last session once the window is up
        QTimer.singleShot(0, self.load_calculation_state)

    def build_keypad(self, buttons, size_policy):
        container = QtWidgets.QWidget()
        button_grid = QtWidgets.QGridLayout(container)
        button_grid.setSpacing(2)
        button_grid.setContentsMargins(0, 0, 0, 0)

        for text, value, row, col in buttons:
            button = QtWidgets.QPushButton(text)
            button.setSizePolicy(size_policy)
            button.setFocusPolicy(Qt.FocusPolicy.NoFocus)

            if value == EQUALS:
                button.setStyleSheet("background-color: #007bff; color: white; font-weight: bold;")

            if value in HOLD_BUTTONS:
                # Use press/release signals for hold logic
                button.pressed.connect(lambda val=value: self.handle_button_pressed_hold(val))
                button.released.connect(self.handle_button_released_hold)
                button.clicked.connect(lambda checked=False, val=value: self.handle_button_clicked_hold(val))
            else:
                button.clicked.connect(lambda checked=False, val=value: self.handle_button_press(val))

            button_grid.addWidget(button, row, col)
            self.button_objects[value] = button

        return container

    # --- Session State ---
    def load_calculation_state(self):
        saved = config_manager.load_state(MAX_TEXT_SIZE, False)
        self.text_size = saved[config_manager.KEY_TEXT_SIZE]
        self.controller.load_saved_state(SavedState(
            expression=saved[config_manager.KEY_EXPRESSION],
            cursor=saved[config_manager.KEY_CURSOR],
            text_size=self.text_size,
            is_degrees_mode=saved[config_manager.KEY_IS_DEGREES_MODE],
        ))
        self.update_display()

    def save_calculation_state(self):
        state = self.controller.saved_state(self.text_size)
        if not config_manager.save_state(state.expression, state.cursor, state.text_size, state.is_degrees_mode):
            print("Error: session state could not be saved to", config_manager.state_json)

    def closeEvent(self, event):
        self.hold_timer.stop()
        self.save_calculation_state()
        super().closeEvent(event)

    # --- Button Hold Logic ---
    def handle_button_pressed_hold(self, value):
        self.was_held = False  # Reset flag on new press
        self.held_button_value = value
        self.hold_timer.setInterval(self.initial_delay)
        self.hold_timer.start()

    def handle_button_released_hold(self):
        self.hold_timer.stop()
        self.held_button_value = None

    def handle_button_clicked_hold(self, value):
        # A click after a hold would insert the value once more
        if not self.was_held:
            self.handle_button_press(value)

    def handle_hold_tick(self):
        self.was_held = True
        if self.hold_timer.interval() == self.initial_delay:
            self.hold_timer.setInterval(self.repeat_interval)

        if self.held_button_value:
            self.handle_button_press(self.held_button_value)

    # --- Input ---
    def current_selection(self):
        display = self.expression_display
        if display.hasSelectedText():
            start = display.selectionStart()
            return start, start + len(display.selectedText())
        cursor = display.cursorPosition()
        return cursor, cursor

    def handle_button_press(self, value):
        if value == ANGLE_MODE:
            self.controller.set_degrees_mode(not self.controller.is_degrees_mode)
            self.update_display(update_text_size=False)
            return

        selection_start, selection_end = self.current_selection()
        self.controller.handle_input(value, selection_start, selection_end)
        self.update_display()

    def handle_cursor_moved(self, old_position, new_position):
        if self.updating_display:
            return
        self.controller.update_cursor(new_position)

    def handle_clipboard(self):
        """Copy the result (or expression); with Shift held, paste the clipboard into the expression."""
        if self.shift_is_held or is_shift_pressed():
            clipboard_text = QtWidgets.QApplication.clipboard().text().strip()
            if clipboard_text:
                selection_start, selection_end = self.current_selection()
                self.controller.handle_input(clipboard_text, selection_start, selection_end)
                self.update_display()
            return

        is_error, result_text = E.split_error_tag(self.controller.current_state.live_result)
        if is_error or result_text == "":
            result_text = self.controller.current_state.expression
        pyperclip.copy(result_text)

    def keyPressEvent(self, event):
        key = event.key()
        text = event.text()

        if key == Qt.Key.Key_Shift:
            self.shift_is_held = True
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.handle_button_press(EQUALS)
        elif key == Qt.Key.Key_Backspace:
            self.handle_button_press(DELETE)
        elif key in (Qt.Key.Key_Escape, Qt.Key.Key_Delete):
            self.handle_button_press(CLEAR)
        elif text.isdigit():
            self.handle_button_press(text)
        elif text in KEY_INPUTS:
            self.handle_button_press(KEY_INPUTS[text])
        else:
            super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        if event.key() == Qt.Key.Key_Shift:
            self.shift_is_held = False
        super().keyReleaseEvent(event)

    # --- Rendering ---
    def update_display(self, update_text_size=True):
        state = self.controller.current_state

        self.updating_display = True
        if self.expression_display.text() != state.expression:
            self.expression_display.setText(state.expression)
        if 0 <= state.cursor_position <= len(state.expression):
            self.expression_display.setCursorPosition(state.cursor_position)
        self.updating_display = False

        is_error, result_text = E.split_error_tag(state.live_result)
        self.result_display.setText(result_text)
        self.result_display.setToolTip(state.error_details)
        if is_error:
            self.result_display.setStyleSheet("color: #e53935;")
        elif state.is_result_finalized:
            self.result_display.setStyleSheet("color: #007bff;")
        else:
            self.result_display.setStyleSheet("")

        # The angle button shows the active mode
        angle_button = self.button_objects.get(ANGLE_MODE)
        if angle_button:
            angle_button.setText("DEG" if self.controller.is_degrees_mode else "RAD")

        if update_text_size:
            self.update_font_size_display()

    def set_expression_font_size(self, size):
        font = self.expression_display.font()
        font.setPointSizeF(size)
        self.expression_display.setFont(font)

    def update_font_size_display(self):
        # Measure at the maximum size, then scale down to the available width
        font = self.expression_display.font()
        font.setPointSizeF(MAX_TEXT_SIZE)
        text_width = QtGui.QFontMetrics(font).horizontalAdvance(self.expression_display.text())
        margins = self.expression_display.textMargins()
        available_width = self.expression_display.width() - margins.left() - margins.right() - 8

        self.text_size = fit_text_size(text_width, available_width)
        self.set_expression_font_size(self.text_size)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.update_font_size_display()

    # --- Settings / Keypad ---
    def toggle_scientific_keypad(self):
        if self.setting_value_list.get("keypad_always_visible") == True:
            return
        self.keypad_expanded = not self.keypad_expanded
        self.scientific_keypad.setVisible(self.keypad_expanded)
        self.button_objects[EXPAND].setText(COLLAPSE if self.keypad_expanded else EXPAND)

    def open_settings(self):
        settings_dialog = SettingsDialog(self)
        settings_dialog.settings_saved.connect(self.reload_settings)
        settings_dialog.exec()

    def reload_settings(self):
        self.setting_value_list = config_manager.load_setting_value("all")
        self.apply_settings()

    def apply_settings(self):
        always_visible = self.setting_value_list.get("keypad_always_visible") == True
        self.button_objects[EXPAND].setVisible(not always_visible)
        if always_visible:
            self.keypad_expanded = True
            self.scientific_keypad.setVisible(True)
        self.button_objects[EXPAND].setText(COLLAPSE if self.keypad_expanded else EXPAND)
        self.update_darkmode()

    def update_darkmode(self):
        if self.setting_value_list.get("darkmode") == True:
            self.setStyleSheet("""
                        QWidget {background-color: #121212; color: white;}
                        QLineEdit {background-color: #121212; color: white; border: none;}
                        QPushButton {background-color: #2b2b2b; color: white; border: 1px solid #3a3a3a;}""")
        else:
            self.setStyleSheet("")


def main():
    app = QtWidgets.QApplication(sys.argv)
    window = CalculatorWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
