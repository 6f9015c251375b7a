# This Python file uses the following encoding: utf-8
"""Desktop entrypoint: PySide6 + MainWindow from colectorpro.ui.main_window.

Starts in the storage mode saved in settings.json (local SQLite by default).
"""

import logging
import os
import sys

from dotenv import load_dotenv
from PySide6.QtWidgets import QApplication

from colectorpro.connectors.image_edit import ImageEditor
from colectorpro.core.collection import CollectionController
from colectorpro.core.paths import default_paths
from colectorpro.core.settings import SettingsStore
from colectorpro.storage.json_store import JsonStore
from colectorpro.storage.local_store import LocalCarStore
from colectorpro.ui.main_window import MainWindow
from colectorpro.ui.tasks import QtTaskRunner

SHUTDOWN_WAIT_MS = 10_000


def main() -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("COLECTORPRO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    db_path, settings_path = default_paths()
    store_runner = QtTaskRunner(app)
    image_runner = QtTaskRunner(app, max_threads=4)
    controller = CollectionController(
        SettingsStore(JsonStore(settings_path)),
        local_factory=lambda: LocalCarStore(db_path),
        runner=store_runner,
    )
    # let queued writes reach the store before the process exits
    app.aboutToQuit.connect(lambda: store_runner.wait_for_done(SHUTDOWN_WAIT_MS))
    window = MainWindow(controller, image_runner, ImageEditor())
    window.resize(1100, 750)
    window.show()
    controller.reload()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
