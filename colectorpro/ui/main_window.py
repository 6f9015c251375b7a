from __future__ import annotations

# This Python file uses the following encoding: utf-8
"""Thin UI: MainWindow and dialogs.

Orchestration lives in colectorpro/core; storage in colectorpro/storage.
"""

from datetime import datetime

from keyring.errors import KeyringError
from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QDialog,
    QFileDialog,
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from colectorpro.connectors.image_edit import ImageEditor
from colectorpro.core import credentials
from colectorpro.core.car_form import CarFormState
from colectorpro.core.collection import CollectionController
from colectorpro.core.errors import FormValidationError
from colectorpro.core.filters import CarFilter
from colectorpro.core.models import Car, CarCategory, StorageMode, ViewMode
from colectorpro.core.translations import translate
from colectorpro.ui.images import ImageCache
from colectorpro.ui.tasks import QtTaskRunner

CARD_ICON = QSize(220, 165)
THUMB_ICON = QSize(72, 54)
PREVIEW_SIZE = QSize(480, 360)


def _format_date(date_added: int) -> str:
    return datetime.fromtimestamp(date_added / 1000).strftime("%Y-%m-%d")


def _button_row(*buttons: QPushButton) -> QHBoxLayout:
    row = QHBoxLayout()
    for btn in buttons:
        row.addWidget(btn)
    return row


class ImageStrip(QListWidget):
    """Horizontal row of photo thumbnails; the first one is the cover."""

    def __init__(self, images: ImageCache, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._images = images
        self.setViewMode(QListView.IconMode)
        self.setFlow(QListView.LeftToRight)
        self.setWrapping(False)
        self.setIconSize(THUMB_ICON)
        self.setFixedHeight(THUMB_ICON.height() + 36)
        self.setMovement(QListView.Static)

    def set_images(self, payloads: list[str], selected: int, cover_label: str) -> None:
        self.blockSignals(True)
        self.clear()
        for idx, payload in enumerate(payloads):
            item = QListWidgetItem(self._images.icon(payload, THUMB_ICON), cover_label if idx == 0 else "")
            item.setData(Qt.UserRole, idx)
            self.addItem(item)
        if 0 <= selected < self.count():
            self.setCurrentRow(selected)
        self.blockSignals(False)


class CarDialog(QDialog):
    """Add/edit a car, including the AI image editor."""

    def __init__(
        self,
        parent: QWidget | None,
        language: str,
        images: ImageCache,
        runner: QtTaskRunner,
        editor: ImageEditor,
        car: Car | None = None,
    ) -> None:
        super().__init__(parent)
        self._language = language
        self._images = images
        self._runner = runner
        self._editor = editor
        self._form = CarFormState(car)
        self._result: Car | None = None
        self._closed = False

        t = self._t
        self.setWindowTitle(t("formTitleEdit") if self._form.is_edit else t("formTitle"))
        layout = QVBoxLayout(self)

        self._preview = QLabel(t("uploadText"))
        self._preview.setAlignment(Qt.AlignCenter)
        self._preview.setMinimumSize(PREVIEW_SIZE)
        layout.addWidget(self._preview)

        self._strip = ImageStrip(images)
        self._strip.currentRowChanged.connect(self._on_select_image)
        layout.addWidget(self._strip)

        self._add_photos_btn = QPushButton(t("addMorePhotos"))
        self._remove_photo_btn = QPushButton(t("removePhoto"))
        self._add_photos_btn.clicked.connect(self._on_add_photos)
        self._remove_photo_btn.clicked.connect(self._on_remove_photo)
        layout.addLayout(_button_row(self._add_photos_btn, self._remove_photo_btn))

        # AI editor
        ai_box = QFrame()
        ai_box.setFrameShape(QFrame.StyledPanel)
        ai_layout = QVBoxLayout(ai_box)
        ai_layout.addWidget(QLabel(f"<b>{t('aiEditorTitle')}</b>"))
        ai_layout.addWidget(QLabel(t("aiEditorDesc")))
        self._ai_prompt = QLineEdit()
        self._ai_prompt.setPlaceholderText(t("aiPlaceholder"))
        self._generate_btn = QPushButton(t("generate"))
        self._generate_btn.clicked.connect(self._on_generate)
        self._ai_prompt.textChanged.connect(self._sync_buttons)
        ai_row = QHBoxLayout()
        ai_row.addWidget(self._ai_prompt)
        ai_row.addWidget(self._generate_btn)
        ai_layout.addLayout(ai_row)
        layout.addWidget(ai_box)

        form = QFormLayout()
        self._name_edit = QLineEdit(self._form.name)
        self._brand_edit = QLineEdit(self._form.brand)
        self._model_edit = QLineEdit(self._form.model)
        self._category_combo = QComboBox()
        for category in CarCategory:
            self._category_combo.addItem(category.value, category)
        self._category_combo.setCurrentIndex(self._category_combo.findData(self._form.category))
        form.addRow(t("nameLabel"), self._name_edit)
        form.addRow(t("brandLabel"), self._brand_edit)
        form.addRow(t("modelLabel"), self._model_edit)
        form.addRow(t("categoryLabel"), self._category_combo)
        layout.addLayout(form)

        self._error_label = QLabel()
        self._error_label.setStyleSheet("color: #f87171;")
        self._error_label.setWordWrap(True)
        layout.addWidget(self._error_label)

        save_btn = QPushButton(t("update") if self._form.is_edit else t("save"))
        cancel_btn = QPushButton(t("cancel"))
        save_btn.clicked.connect(self._on_save)
        cancel_btn.clicked.connect(self.reject)
        layout.addLayout(_button_row(cancel_btn, save_btn))

        self._refresh_images()

    def _t(self, key: str) -> str:
        return translate(self._language, key)

    # -------- rendering --------

    def _refresh_images(self) -> None:
        selected = self._form.selected_image
        if selected is None:
            self._preview.setPixmap(self._images.pixmap("", PREVIEW_SIZE))
            self._preview.setText(self._t("uploadText"))
        else:
            self._preview.setPixmap(self._images.pixmap(selected, PREVIEW_SIZE))
        self._strip.set_images(self._form.images, self._form.selected_index, self._t("mainPhoto"))
        self._show_error()
        self._sync_buttons()

    def _show_error(self) -> None:
        text = self._t(self._form.error) if self._form.error else ""
        if self._form.error_detail:
            text = f"{text}\n{self._form.error_detail}"
        self._error_label.setText(text)

    def _sync_buttons(self) -> None:
        self._remove_photo_btn.setEnabled(self._form.selected_image is not None)
        self._generate_btn.setEnabled(self._form.can_ai_edit(self._ai_prompt.text()))
        self._generate_btn.setText("..." if self._form.generating else self._t("generate"))

    # -------- photos --------

    def _on_select_image(self, row: int) -> None:
        self._form.select(row)
        self._refresh_images()

    def _on_add_photos(self) -> None:
        file_names, _ = QFileDialog.getOpenFileNames(
            self,
            self._t("addMorePhotos"),
            "",
            "Images (*.png *.jpg *.jpeg *.webp *.gif);;All files (*)",
        )
        if not file_names:
            return
        self._form.add_image_files(file_names)
        self._refresh_images()

    def _on_remove_photo(self) -> None:
        self._form.remove_image(self._form.selected_index)
        self._refresh_images()

    # -------- AI edit --------

    def _on_generate(self) -> None:
        if self._form.request_ai_edit(
            self._editor, self._ai_prompt.text(), self._runner, self._on_ai_settled
        ):
            self._refresh_images()

    def _on_ai_settled(self, applied: bool) -> None:
        if self._closed:
            return
        if applied:
            self._ai_prompt.clear()
        self._refresh_images()

    def done(self, result: int) -> None:
        self._closed = True
        self._form.cancel_ai_edit()
        super().done(result)

    # -------- submit --------

    def _on_save(self) -> None:
        self._form.name = self._name_edit.text()
        self._form.brand = self._brand_edit.text()
        self._form.model = self._model_edit.text()
        self._form.category = self._category_combo.currentData()
        try:
            self._result = self._form.build_car()
        except FormValidationError:
            self._show_error()
            return
        self.accept()

    def get_car(self) -> Car | None:
        return self._result


class CarDetailDialog(QDialog):
    """Read-only view of one car with edit/delete shortcuts."""

    EDIT = 2
    DELETE = 3

    def __init__(self, parent: QWidget | None, language: str, images: ImageCache, car: Car) -> None:
        super().__init__(parent)
        self._language = language
        self._images = images
        self._car = car
        self._selected = 0
        t = self._t
        self.setWindowTitle(t("detailsTitle"))

        layout = QVBoxLayout(self)
        self._preview = QLabel()
        self._preview.setAlignment(Qt.AlignCenter)
        self._preview.setMinimumSize(PREVIEW_SIZE)
        layout.addWidget(self._preview)

        self._strip = ImageStrip(images)
        self._strip.currentRowChanged.connect(self._on_select_image)
        layout.addWidget(self._strip)

        title = QLabel(f"<h2>{car.name}</h2>")
        title.setTextFormat(Qt.RichText)
        layout.addWidget(title)

        form = QFormLayout()
        form.addRow(t("brandLabel"), QLabel(car.brand or "-"))
        form.addRow(t("modelLabel"), QLabel(car.model or "-"))
        form.addRow(t("categoryLabel"), QLabel(car.category.value))
        form.addRow(t("added"), QLabel(_format_date(car.date_added)))
        layout.addLayout(form)

        edit_btn = QPushButton(t("edit"))
        delete_btn = QPushButton(t("delete"))
        close_btn = QPushButton(t("close"))
        edit_btn.clicked.connect(lambda: self.done(self.EDIT))
        delete_btn.clicked.connect(lambda: self.done(self.DELETE))
        close_btn.clicked.connect(self.reject)
        layout.addLayout(_button_row(edit_btn, delete_btn, close_btn))

        self._refresh()

    def _t(self, key: str) -> str:
        return translate(self._language, key)

    def _gallery(self) -> list[str]:
        return self._car.images or ([self._car.image_url] if self._car.image_url else [])

    def _refresh(self) -> None:
        gallery = self._gallery()
        current = gallery[self._selected] if self._selected < len(gallery) else ""
        self._preview.setPixmap(self._images.pixmap(current, PREVIEW_SIZE))
        self._strip.set_images(gallery, self._selected, self._t("mainPhoto"))

    def _on_select_image(self, row: int) -> None:
        if row >= 0:
            self._selected = row
            self._refresh()


class SettingsDialog(QDialog):
    """Storage mode, server URL and image-edit API key."""

    def __init__(self, parent: QWidget | None, language: str, mode: StorageMode, server_url: str) -> None:
        super().__init__(parent)
        t = lambda key: translate(language, key)  # noqa: E731
        self.setWindowTitle(t("serverConfigTitle"))

        form = QFormLayout(self)
        self._local_radio = QRadioButton(t("modeLocal"))
        self._server_radio = QRadioButton(t("modeServer"))
        group = QButtonGroup(self)
        group.addButton(self._local_radio)
        group.addButton(self._server_radio)
        (self._server_radio if mode == StorageMode.SERVER else self._local_radio).setChecked(True)
        mode_box = QVBoxLayout()
        mode_box.addWidget(self._local_radio)
        mode_box.addWidget(self._server_radio)
        form.addRow(t("storageMode"), mode_box)

        self._url_edit = QLineEdit(server_url)
        self._url_edit.setPlaceholderText(t("serverUrlPlaceholder"))
        form.addRow(t("serverUrl"), self._url_edit)
        self._local_radio.toggled.connect(lambda local: self._url_edit.setEnabled(not local))
        self._url_edit.setEnabled(mode == StorageMode.SERVER)

        self._api_key_edit = QLineEdit()
        self._api_key_edit.setEchoMode(QLineEdit.Password)
        self._api_key_edit.setPlaceholderText(t("apiKeyPlaceholder"))
        self._clear_key_check = QCheckBox(t("apiKeyClear"))
        form.addRow(t("apiKey"), self._api_key_edit)
        form.addRow(self._clear_key_check)

        ok_btn = QPushButton(t("saveConfig"))
        cancel_btn = QPushButton(t("cancel"))
        ok_btn.clicked.connect(self.accept)
        cancel_btn.clicked.connect(self.reject)
        form.addRow(_button_row(ok_btn, cancel_btn))

    def get_storage(self) -> tuple[StorageMode, str]:
        mode = StorageMode.SERVER if self._server_radio.isChecked() else StorageMode.LOCAL
        return mode, self._url_edit.text().strip()

    def get_api_key_change(self) -> tuple[bool, str | None]:
        """(changed, new_key); new_key None means remove the stored key."""
        if self._clear_key_check.isChecked():
            return True, None
        secret = self._api_key_edit.text().strip()
        return (True, secret) if secret else (False, None)


class MainWindow(QMainWindow):
    """Collection browser with filter bar, connection banner and car list."""

    def __init__(
        self,
        controller: CollectionController,
        image_runner: QtTaskRunner,
        editor: ImageEditor,
    ) -> None:
        super().__init__()
        self._controller = controller
        self._image_runner = image_runner
        self._editor = editor
        self._images = ImageCache(image_runner)
        self._images.on_loaded = self._refresh_list

        central = QWidget()
        layout = QVBoxLayout(central)

        # header
        header = QHBoxLayout()
        self._title = QLabel()
        self._mode_label = QLabel()
        self._grid_btn = QPushButton()
        self._scroll_btn = QPushButton()
        for btn in (self._grid_btn, self._scroll_btn):
            btn.setCheckable(True)
        self._lang_btn = QPushButton()
        self._settings_btn = QPushButton("⚙")
        header.addWidget(self._title)
        header.addWidget(self._mode_label)
        header.addStretch(1)
        header.addWidget(self._grid_btn)
        header.addWidget(self._scroll_btn)
        header.addWidget(self._lang_btn)
        header.addWidget(self._settings_btn)
        layout.addLayout(header)

        # filters
        filters = QHBoxLayout()
        self._search_edit = QLineEdit()
        self._brand_edit = QLineEdit()
        self._model_edit = QLineEdit()
        self._category_combo = QComboBox()
        self._add_btn = QPushButton()
        filters.addWidget(self._search_edit, 2)
        filters.addWidget(self._brand_edit, 1)
        filters.addWidget(self._model_edit, 1)
        filters.addWidget(self._category_combo)
        filters.addWidget(self._add_btn)
        layout.addLayout(filters)

        # connection banner
        self._banner = QFrame()
        self._banner.setStyleSheet("QFrame { background: #7f1d1d; color: white; }")
        banner_layout = QHBoxLayout(self._banner)
        self._banner_label = QLabel()
        self._switch_local_btn = QPushButton()
        self._dismiss_btn = QPushButton()
        banner_layout.addWidget(self._banner_label, 1)
        banner_layout.addWidget(self._switch_local_btn)
        banner_layout.addWidget(self._dismiss_btn)
        self._banner.hide()
        layout.addWidget(self._banner)

        self._status_label = QLabel()
        self._status_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self._status_label)

        self._list = QListWidget()
        self._list.setViewMode(QListView.IconMode)
        self._list.setIconSize(CARD_ICON)
        self._list.setResizeMode(QListView.Adjust)
        self._list.setMovement(QListView.Static)
        self._list.setSpacing(8)
        self._list.setWordWrap(True)
        self._list.setSelectionMode(QAbstractItemView.SingleSelection)
        layout.addWidget(self._list, 1)

        buttons = QHBoxLayout()
        self._edit_btn = QPushButton()
        self._del_btn = QPushButton()
        buttons.addStretch(1)
        buttons.addWidget(self._edit_btn)
        buttons.addWidget(self._del_btn)
        layout.addLayout(buttons)

        self._grid_btn.clicked.connect(lambda: self._controller.set_view_mode(ViewMode.VERTICAL_GRID))
        self._scroll_btn.clicked.connect(lambda: self._controller.set_view_mode(ViewMode.HORIZONTAL_SCROLL))
        self._lang_btn.clicked.connect(self._controller.toggle_language)
        self._settings_btn.clicked.connect(self._on_open_settings)
        self._search_edit.textChanged.connect(self._refresh_list)
        self._brand_edit.textChanged.connect(self._refresh_list)
        self._model_edit.textChanged.connect(self._refresh_list)
        self._category_combo.currentIndexChanged.connect(self._refresh_list)
        self._add_btn.clicked.connect(self._on_add)
        self._edit_btn.clicked.connect(self._on_edit)
        self._del_btn.clicked.connect(self._on_delete)
        self._switch_local_btn.clicked.connect(self._controller.switch_to_local)
        self._dismiss_btn.clicked.connect(self._controller.dismiss_connection_error)
        self._list.itemDoubleClicked.connect(self._on_open_details)

        self._controller.on_changed = self._render
        self._controller.on_alert = self._on_alert

        self.setCentralWidget(central)
        self._render()

    # -------- internal helpers ---------

    def _t(self, key: str) -> str:
        return self._controller.t(key)

    def _criteria(self) -> CarFilter:
        return CarFilter(
            name=self._search_edit.text(),
            brand=self._brand_edit.text(),
            model=self._model_edit.text(),
            category=self._category_combo.currentData(),
        )

    def _has_filters(self) -> bool:
        c = self._criteria()
        return bool(c.name or c.brand or c.model or c.category is not None)

    def _retranslate(self) -> None:
        t = self._t
        settings = self._controller.settings
        self.setWindowTitle(t("appTitle"))
        self._title.setText(f"<h1>{t('appTitle')}</h1>")
        self._mode_label.setText("● Server" if self._controller.is_remote else "Local")
        self._grid_btn.setText(t("viewGrid"))
        self._scroll_btn.setText(t("viewScroll"))
        self._lang_btn.setText(settings.language.upper())
        self._search_edit.setPlaceholderText(t("searchPlaceholder"))
        self._brand_edit.setPlaceholderText(t("brandPlaceholder"))
        self._model_edit.setPlaceholderText(t("modelPlaceholder"))
        self._add_btn.setText(t("addCar"))
        self._edit_btn.setText(t("edit"))
        self._del_btn.setText(t("delete"))
        self._switch_local_btn.setText(t("switchToLocal"))
        self._dismiss_btn.setText(t("dismiss"))

        current = self._category_combo.currentData()
        self._category_combo.blockSignals(True)
        self._category_combo.clear()
        self._category_combo.addItem(t("categoryAll"), None)
        for category in CarCategory:
            self._category_combo.addItem(category.value, category)
        self._category_combo.setCurrentIndex(max(0, self._category_combo.findData(current)))
        self._category_combo.blockSignals(False)

    def _apply_view_mode(self) -> None:
        grid = self._controller.settings.view_mode == ViewMode.VERTICAL_GRID
        self._grid_btn.setChecked(grid)
        self._scroll_btn.setChecked(not grid)
        self._list.setFlow(QListView.LeftToRight)
        self._list.setWrapping(grid)
        self._list.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff if grid else Qt.ScrollBarAsNeeded)

    def _render(self) -> None:
        self._retranslate()
        self._apply_view_mode()
        error = self._controller.connection_error
        self._banner.setVisible(error is not None)
        self._banner_label.setText(error or "")
        self._refresh_list()

    def _refresh_list(self) -> None:
        selected = self._selected_id()
        self._list.clear()
        cars = self._controller.filtered(self._criteria())
        added = self._t("added")
        for car in cars:
            subtitle = " · ".join(part for part in (car.brand, car.model) if part)
            text = f"{car.name}\n{subtitle}\n{car.category.value} · {added} {_format_date(car.date_added)}"
            item = QListWidgetItem(self._images.icon(car.image_url, CARD_ICON), text)
            item.setData(Qt.UserRole, car.id)
            self._list.addItem(item)
            if car.id == selected:
                self._list.setCurrentItem(item)

        if self._controller.loading:
            self._status_label.setText(self._t("loading"))
        elif not cars:
            hint = self._t("noCarsFilter") if self._has_filters() else self._t("noCarsSubtitle")
            self._status_label.setText(f"<b>{self._t('noCarsTitle')}</b><br>{hint}")
        else:
            self._status_label.setText("")
        self._status_label.setVisible(bool(self._status_label.text()))

    def _selected_id(self) -> str | None:
        item = self._list.currentItem()
        return item.data(Qt.UserRole) if item is not None else None

    def _selected_car(self) -> Car | None:
        car_id = self._selected_id()
        return self._controller.find(car_id) if car_id else None

    def _on_alert(self, message: str) -> None:
        QMessageBox.warning(self, self._t("appTitle"), message)

    # -------- actions ---------

    def _open_form(self, car: Car | None) -> None:
        dlg = CarDialog(
            self,
            self._controller.settings.language,
            self._images,
            self._image_runner,
            self._editor,
            car,
        )
        accepted = dlg.exec() == QDialog.Accepted
        saved = dlg.get_car()
        dlg.deleteLater()
        if not accepted:
            return
        if saved is not None:
            self._controller.save_car(saved, is_update=car is not None)

    def _on_add(self) -> None:
        self._open_form(None)

    def _on_edit(self) -> None:
        car = self._selected_car()
        if car is None:
            return
        self._open_form(car)

    def _confirm_delete(self, car: Car) -> None:
        reply = QMessageBox.question(
            self,
            car.name,
            self._t("deleteConfirm"),
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if reply != QMessageBox.Yes:
            return
        self._controller.delete_car(car.id)

    def _on_delete(self) -> None:
        car = self._selected_car()
        if car is None:
            return
        self._confirm_delete(car)

    def _on_open_details(self, item: QListWidgetItem) -> None:
        car = self._controller.find(item.data(Qt.UserRole))
        if car is None:
            return
        dlg = CarDetailDialog(self, self._controller.settings.language, self._images, car)
        result = dlg.exec()
        dlg.deleteLater()
        if result == CarDetailDialog.EDIT:
            self._open_form(car)
        elif result == CarDetailDialog.DELETE:
            self._confirm_delete(car)

    def _on_open_settings(self) -> None:
        settings = self._controller.settings
        dlg = SettingsDialog(self, settings.language, settings.storage_mode, settings.server_url)
        accepted = dlg.exec() == QDialog.Accepted
        changed, secret = dlg.get_api_key_change()
        mode, url = dlg.get_storage()
        dlg.deleteLater()
        if not accepted:
            return
        if changed:
            try:
                if secret is None:
                    credentials.clear_api_key()
                else:
                    credentials.set_api_key(secret)
            except KeyringError as exc:
                QMessageBox.warning(self, self._t("apiKey"), f"Keyring error: {exc}")
        self._controller.set_storage(mode, url or settings.server_url)
