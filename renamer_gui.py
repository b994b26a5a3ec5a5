"""PySide6 GUI for batchrename."""

from __future__ import annotations

import html
import sys
from typing import Iterable, List, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from config_manager import AppConfig, ConfigLoadError
from path_utils import get_file_name
from pattern_matcher import has_capture_groups, highlight_segments, is_valid_pattern
from renamer_core import (
    CASE_INSENSITIVE_FS,
    RenameBlockedError,
    RenameConfig,
    RenameItem,
    apply_renames,
    collect_paths,
    has_blocking_collisions,
    preview_batch,
    rename_operations,
    summarize,
)
from replacement_template import LITERAL_GROUP
from sequence_numbering import NumberingPosition, split_padding
from text_diff import DiffSegment, DiffType

GROUP_COLORS = ["#1565c0", "#2e7d32", "#ef6c00", "#6a1b9a", "#00838f", "#ad1457"]
LITERAL_COLOR = "#7b1fa2"
NUMBER_COLOR = "#0277bd"
NUMBER_PADDING_COLOR = "#90a4ae"
REMOVED_STYLE = "background-color:#ffcdd2;text-decoration:line-through;"
ADDED_STYLE = "background-color:#c8e6c9;"

VIEW_GROUPS = "Regex groups"
VIEW_DIFF = "Diff"


def group_color(group_index: int) -> str:
    return GROUP_COLORS[group_index % len(GROUP_COLORS)]


def _span(text: str, style: str = "") -> str:
    if not text:
        return ""
    escaped = html.escape(text)
    return f'<span style="{style}">{escaped}</span>' if style else escaped


def number_html(formatted_number: str) -> str:
    """Dim the zero padding so the significant digits stand out."""
    padding, digits = split_padding(formatted_number)
    return _span(padding, f"color:{NUMBER_PADDING_COLOR};") + _span(
        digits, f"color:{NUMBER_COLOR};font-weight:bold;"
    )


def original_name_html(item: RenameItem) -> str:
    """Original name with every match coloured by its innermost group."""
    parts = []
    for segment in highlight_segments(item.name, item.match_spans):
        if segment.group_index is None:
            parts.append(_span(segment.text))
        else:
            parts.append(
                _span(segment.text, f"color:{group_color(segment.group_index)};font-weight:bold;")
            )
    return "".join(parts)


def new_name_html(item: RenameItem) -> str:
    """New name coloured by the group, literal text or number that produced it."""
    parts = []
    for piece in item.new_name_pieces():
        if piece.is_number:
            parts.append(number_html(piece.text))
        elif piece.group_index is None:
            parts.append(_span(piece.text))
        elif piece.group_index == LITERAL_GROUP:
            parts.append(_span(piece.text, f"color:{LITERAL_COLOR};font-style:italic;"))
        else:
            parts.append(
                _span(piece.text, f"color:{group_color(piece.group_index)};font-weight:bold;")
            )
    return "".join(parts)


def diff_html(segments: Iterable[DiffSegment], show: DiffType) -> str:
    """One side of a diff: ``REMOVED`` for the original, ``ADDED`` for the new name."""
    parts = []
    for segment in segments:
        if segment.type is DiffType.UNCHANGED:
            parts.append(_span(segment.text))
        elif segment.type is show:
            style = REMOVED_STYLE if show is DiffType.REMOVED else ADDED_STYLE
            parts.append(_span(segment.text, style))
    return "".join(parts)


def pattern_error_text(find_text: str, regex_mode: bool) -> str:
    if not find_text:
        return ""
    return is_valid_pattern(find_text, regex_mode) or ""


def replace_placeholder(find_text: str, regex_mode: bool) -> str:
    """Only offer group references when the find pattern has groups to refer to."""
    if regex_mode and has_capture_groups(find_text):
        return "Replace with… ($1, $&, $$)"
    return "Replace with… ($&, $$)"


def confirm_text(operations: List[Tuple[str, str]], limit: int = 10) -> str:
    lines = [f"Rename {len(operations)} files?", ""]
    for old, new in operations[:limit]:
        lines.append(f"{get_file_name(old)} → {get_file_name(new)}")
    if len(operations) > limit:
        lines.append(f"… and {len(operations) - limit} more")
    return "\n".join(lines)


def _rich_label(markup: str) -> QLabel:
    label = QLabel(markup)
    label.setTextFormat(Qt.RichText)
    label.setTextInteractionFlags(Qt.TextSelectableByMouse)
    label.setContentsMargins(4, 0, 4, 0)
    return label


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Batch Rename")
        self.resize(1100, 650)
        self.paths: List[str] = []
        self.items: List[RenameItem] = []

        container = QWidget()
        self.setCentralWidget(container)
        self.config = AppConfig.load()
        main_layout = QVBoxLayout(container)

        # File pickers
        files_layout = QHBoxLayout()
        add_files_btn = QPushButton("Add Files…")
        add_files_btn.clicked.connect(self.on_add_files)
        add_folder_btn = QPushButton("Add Folder…")
        add_folder_btn.clicked.connect(self.on_add_folder)
        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.on_clear)
        self.recursive_checkbox = QCheckBox("Include subfolders")
        self.recursive_checkbox.setChecked(self.config.recursive)
        self.recursive_checkbox.toggled.connect(self.on_settings_changed)
        files_layout.addWidget(add_files_btn)
        files_layout.addWidget(add_folder_btn)
        files_layout.addWidget(clear_btn)
        files_layout.addWidget(self.recursive_checkbox)
        files_layout.addStretch(1)
        main_layout.addLayout(files_layout)

        # Find / replace
        find_layout = QHBoxLayout()
        self.find_edit = QLineEdit(self.config.find_text)
        self.find_edit.setPlaceholderText("Find…")
        self.find_edit.textChanged.connect(self.on_settings_changed)
        self.replace_edit = QLineEdit(self.config.replace_text)
        self.replace_edit.setPlaceholderText(
            replace_placeholder(self.config.find_text, self.config.regex_mode)
        )
        self.replace_edit.textChanged.connect(self.on_settings_changed)
        find_layout.addWidget(QLabel("Find:"))
        find_layout.addWidget(self.find_edit, stretch=1)
        find_layout.addWidget(QLabel("Replace:"))
        find_layout.addWidget(self.replace_edit, stretch=1)
        main_layout.addLayout(find_layout)

        options_layout = QHBoxLayout()
        self.regex_checkbox = QCheckBox("Regular expression")
        self.regex_checkbox.setChecked(self.config.regex_mode)
        self.case_checkbox = QCheckBox("Case sensitive")
        self.case_checkbox.setChecked(self.config.case_sensitive)
        self.first_only_checkbox = QCheckBox("First match only")
        self.first_only_checkbox.setChecked(self.config.replace_first_only)
        for checkbox in (self.regex_checkbox, self.case_checkbox, self.first_only_checkbox):
            checkbox.toggled.connect(self.on_settings_changed)
            options_layout.addWidget(checkbox)
        options_layout.addStretch(1)
        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #c62828;")
        options_layout.addWidget(self.error_label)
        main_layout.addLayout(options_layout)

        # Numbering
        self.numbering_group = QGroupBox("Add sequence number")
        self.numbering_group.setCheckable(True)
        self.numbering_group.setChecked(self.config.numbering_enabled)
        self.numbering_group.toggled.connect(self.on_settings_changed)
        numbering_layout = QHBoxLayout(self.numbering_group)
        self.start_spin = self._spin(-999999, 999999, self.config.numbering_start)
        self.increment_spin = self._spin(-9999, 9999, self.config.numbering_increment)
        self.padding_spin = self._spin(1, 10, self.config.numbering_padding)
        self.separator_edit = QLineEdit(self.config.numbering_separator)
        self.separator_edit.setMaximumWidth(60)
        self.separator_edit.textChanged.connect(self.on_settings_changed)
        self.position_combo = QComboBox()
        for position in NumberingPosition:
            self.position_combo.addItem(position.value.capitalize(), position.value)
        self.position_combo.setCurrentIndex(
            max(0, self.position_combo.findData(self.config.numbering_position))
        )
        self.position_combo.currentIndexChanged.connect(self.on_settings_changed)
        self.index_spin = self._spin(0, 255, self.config.numbering_insert_index)
        self.index_spin.setEnabled(self.config.numbering_position == NumberingPosition.INDEX.value)
        for label, widget in (
            ("Start:", self.start_spin),
            ("Step:", self.increment_spin),
            ("Digits:", self.padding_spin),
            ("Separator:", self.separator_edit),
            ("Position:", self.position_combo),
            ("Index:", self.index_spin),
        ):
            numbering_layout.addWidget(QLabel(label))
            numbering_layout.addWidget(widget)
        numbering_layout.addStretch(1)
        main_layout.addWidget(self.numbering_group)

        # Dry run + action buttons
        controls_layout = QHBoxLayout()
        self.view_combo = QComboBox()
        self.view_combo.addItems([VIEW_GROUPS, VIEW_DIFF])
        self.view_combo.currentTextChanged.connect(self.update_table)
        self.dry_run_checkbox = QCheckBox("Dry run (no changes)")
        self.run_btn = QPushButton("Rename")
        self.run_btn.clicked.connect(self.on_apply)
        self.run_btn.setEnabled(False)
        controls_layout.addWidget(QLabel("Show:"))
        controls_layout.addWidget(self.view_combo)
        controls_layout.addStretch(1)
        controls_layout.addWidget(self.dry_run_checkbox)
        controls_layout.addWidget(self.run_btn)
        main_layout.addLayout(controls_layout)

        self.summary_label = QLabel("No files selected.")
        main_layout.addWidget(self.summary_label)

        # Table of changes
        self.table = QTableWidget(0, 3)
        self.table.setHorizontalHeaderLabels(["Original", "New name", "Status"])
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.Stretch)
        header.setSectionResizeMode(1, QHeaderView.Stretch)
        header.setSectionResizeMode(2, QHeaderView.ResizeToContents)
        self.table.verticalHeader().setVisible(False)
        self.table.setAlternatingRowColors(True)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        main_layout.addWidget(self.table, stretch=1)

    def _spin(self, low: int, high: int, value: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(low, high)
        spin.setValue(value)
        spin.valueChanged.connect(self.on_settings_changed)
        return spin

    # slots
    def on_add_files(self) -> None:
        files, _ = QFileDialog.getOpenFileNames(self, "Select Files")
        if files:
            self.add_paths(files)

    def on_add_folder(self) -> None:
        directory = QFileDialog.getExistingDirectory(self, "Select Folder")
        if not directory:
            return
        try:
            found = collect_paths(directory, recursive=self.recursive_checkbox.isChecked())
        except FileNotFoundError:
            QMessageBox.critical(
                self,
                "Folder not found",
                f"The path '{directory}' does not exist.",
            )
            return
        self.add_paths(found)

    def on_clear(self) -> None:
        self.paths = []
        self.refresh()

    def add_paths(self, paths: Iterable[str]) -> None:
        known = set(self.paths)
        for path in paths:
            if path not in known:
                self.paths.append(path)
                known.add(path)
        self.refresh()

    def on_settings_changed(self, *_args) -> None:
        self.config.find_text = self.find_edit.text()
        self.config.replace_text = self.replace_edit.text()
        self.config.regex_mode = self.regex_checkbox.isChecked()
        self.config.case_sensitive = self.case_checkbox.isChecked()
        self.config.replace_first_only = self.first_only_checkbox.isChecked()
        self.config.numbering_enabled = self.numbering_group.isChecked()
        self.config.numbering_start = self.start_spin.value()
        self.config.numbering_increment = self.increment_spin.value()
        self.config.numbering_padding = self.padding_spin.value()
        self.config.numbering_separator = self.separator_edit.text()
        self.config.numbering_position = self.position_combo.currentData()
        self.config.numbering_insert_index = self.index_spin.value()
        self.config.recursive = self.recursive_checkbox.isChecked()
        self.index_spin.setEnabled(self.config.numbering_position == NumberingPosition.INDEX.value)
        self.refresh()

    def refresh(self) -> None:
        """Recompute every preview from the current settings."""
        self.items = preview_batch(
            self.paths,
            RenameConfig.from_app_config(self.config),
            case_insensitive=CASE_INSENSITIVE_FS,
        )
        self.error_label.setText(
            pattern_error_text(self.config.find_text, self.config.regex_mode)
        )
        self.replace_edit.setPlaceholderText(
            replace_placeholder(self.config.find_text, self.config.regex_mode)
        )
        self.update_table()

    def update_table(self, *_args) -> None:
        show_diff = self.view_combo.currentText() == VIEW_DIFF
        self.table.setUpdatesEnabled(False)
        self.table.setRowCount(0)
        for item in self.items:
            row = self.table.rowCount()
            self.table.insertRow(row)
            if show_diff:
                segments = item.diff()
                original = diff_html(segments, DiffType.REMOVED)
                new = diff_html(segments, DiffType.ADDED)
            else:
                original = original_name_html(item)
                new = new_name_html(item)
            original_label = _rich_label(original)
            original_label.setToolTip(item.path)
            self.table.setCellWidget(row, 0, original_label)
            self.table.setCellWidget(row, 1, _rich_label(new))

            if item.has_collision:
                status_item = QTableWidgetItem("collision")
                status_item.setForeground(Qt.red)
            elif item.status == "error":
                status_item = QTableWidgetItem(item.status)
                status_item.setForeground(Qt.red)
                status_item.setToolTip(item.message)
            elif item.status.startswith("done"):
                status_item = QTableWidgetItem(item.status)
                status_item.setForeground(Qt.darkGreen)
            else:
                status_item = QTableWidgetItem("changed" if item.changed else "")
            self.table.setItem(row, 2, status_item)
        self.table.setUpdatesEnabled(True)

        summary = summarize(self.items)
        if not summary["total"]:
            self.summary_label.setText("No files selected.")
        else:
            text = f"{summary['total']} files, {summary['changed']} will be renamed."
            if summary["collisions"]:
                text += f" {summary['collisions']} share a new name; resolve them to continue."
            self.summary_label.setText(text)
        self.run_btn.setEnabled(
            summary["changed"] > 0 and not has_blocking_collisions(self.items)
        )

    def on_apply(self) -> None:
        # Start from fresh items so statuses from an earlier dry run don't linger
        self.refresh()
        if not self.run_btn.isEnabled():
            return
        confirm = QMessageBox.question(
            self,
            "Confirm renames",
            confirm_text(rename_operations(self.items)),
            QMessageBox.Yes | QMessageBox.No,
        )
        if confirm != QMessageBox.Yes:
            return

        dry_run = self.dry_run_checkbox.isChecked()
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            apply_renames(
                self.items, dry_run=dry_run, stop_on_error=self.config.stop_on_error
            )
        except RenameBlockedError as exc:
            QMessageBox.warning(self, "Rename blocked", str(exc))
            return
        finally:
            QApplication.restoreOverrideCursor()

        summary = summarize(self.items)
        self.update_table()
        if dry_run:
            message = (
                f"Dry run complete: {summary['completed']} simulated renames "
                f"({summary['errors']} would fail)."
            )
            title = "Dry run finished"
        else:
            message = (
                f"Completed {summary['completed']} renames "
                f"({summary['errors']} errors)."
            )
            title = "Finished with errors" if summary["errors"] else "Finished"
            # Renamed files are now the batch; later previews start from their new names
            self.paths = [
                item.new_path if item.status == "done" else item.path for item in self.items
            ]
        if summary["errors"]:
            message += "\n\nErrors are shown in the results table below."
            QMessageBox.warning(self, title, message)
        else:
            QMessageBox.information(self, title, message)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.config.save()
        super().closeEvent(event)


def main() -> None:
    app = QApplication(sys.argv)
    try:
        window = MainWindow()
    except ConfigLoadError as exc:
        QMessageBox.critical(
            None,
            "Configuration Error",
            (
                f"{exc}\n\n"
                f"Fix the JSON in '{exc.path}' or delete the file to regenerate "
                "the default settings, then relaunch the app."
            ),
        )
        return
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
