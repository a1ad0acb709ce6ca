from PyQt6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                             QPushButton, QLabel, QFileDialog, QMessageBox)
from PyQt6.QtCore import Qt, QTimer, QSize
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtMultimediaWidgets import QVideoWidget
import qtawesome as qta

from src.core.config import SYNC_CONFIG, UI_CONFIG, SessionState
from src.core.decoder import AudioDecoder
from src.core.errors import CaptureError, DecodeError, PlaybackError, RecordingError
from src.core.playback import AudioPlayer
from src.core.session import SessionController
from src.ui.media import (MasterEndBridge, QtCaptureProvider, QtFrameScheduler,
                          QtRecorder, VideoPlayerTimeline)
from src.ui.waveform_view import WaveformWidget
from src.utils.logger import logger

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()

        self.setWindowTitle(UI_CONFIG.window_title)
        self.resize(*UI_CONFIG.window_size)

        # UI Setup
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)

        self.video_widget = QVideoWidget()
        self.video_widget.setMinimumHeight(360)
        self.waveform = WaveformWidget()

        # Core Components
        self.player = AudioPlayer()
        self.master_bridge = MasterEndBridge()
        self.player.set_on_ended(self.master_bridge.notify)
        self.recorded = VideoPlayerTimeline(self.video_widget, parent=self)

        self.session = SessionController(
            decoder=AudioDecoder(),
            player=self.player,
            capture=QtCaptureProvider(self.video_widget, on_error=self.report_error),
            recorder=QtRecorder(on_error=self.report_error),
            recorded=self.recorded,
            scheduler=QtFrameScheduler(),
            highlight=self.waveform,
            on_state_changed=self.on_state_changed,
        )
        self.master_bridge.ended.connect(self.session.on_master_ended)
        self.recorded.ended.connect(self.session.on_slave_ended)
        self.waveform.widthChanged.connect(self.on_waveform_resized)

        self.create_menus()
        self.create_stage()
        self.create_transport_controls()
        self.on_state_changed(self.session.state)

        # Update timer (GUI update ~30fps)
        self.timer = QTimer()
        self.timer.timeout.connect(self.periodic_update)
        self.timer.start(SYNC_CONFIG.ui_refresh_ms)

    def create_menus(self):
        menubar = self.menuBar()

        # File Menu
        file_menu = menubar.addMenu("&File")

        self.open_action = QAction(qta.icon("fa5s.music", color="white"), "&Load Song...", self)
        self.open_action.setShortcut(QKeySequence.StandardKey.Open)
        self.open_action.triggered.connect(self.load_song_dialog)
        file_menu.addAction(self.open_action)

        file_menu.addSeparator()

        exit_action = QAction("&Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

    def create_stage(self):
        self.rec_indicator = QLabel("● REC")
        self.rec_indicator.setStyleSheet("color: #ff3b3b; font-weight: bold; font-size: 14px;")
        self.rec_indicator.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.rec_indicator.hide()

        self.main_layout.addWidget(self.rec_indicator)
        self.main_layout.addWidget(self.video_widget, stretch=1)
        self.main_layout.addWidget(self.waveform)

    def create_transport_controls(self):
        transport_widget = QWidget()
        transport_widget.setStyleSheet("background-color: #222; border-top: 1px solid #444;")
        transport_layout = QHBoxLayout(transport_widget)
        transport_layout.setContentsMargins(20, 10, 20, 10)

        self.time_label = QLabel("00:00 / 00:00")
        self.time_label.setStyleSheet("font-family: 'Consolas'; font-size: 20px; font-weight: bold; color: #00ffff; min-width: 180px;")

        # Style helper for transport buttons
        btn_style = """
            QPushButton {
                background-color: transparent;
                border-radius: 20px;
                padding: 5px;
            }
            QPushButton:hover { background-color: #444; }
            QPushButton:pressed { background-color: #555; }
            QPushButton:disabled { background-color: transparent; }
        """

        self.btn_load = QPushButton()
        self.btn_load.setIcon(qta.icon("fa5s.folder-open", color="white"))
        self.btn_load.setIconSize(QSize(24, 24))
        self.btn_load.setStyleSheet(btn_style)
        self.btn_load.setToolTip("Load song")
        self.btn_load.clicked.connect(self.load_song_dialog)

        self.btn_record = QPushButton()
        self.btn_record.setIcon(qta.icon("fa5s.circle", color="#ff3b3b"))
        self.btn_record.setIconSize(QSize(28, 28))
        self.btn_record.setStyleSheet(btn_style)
        self.btn_record.setToolTip("Record")
        self.btn_record.clicked.connect(self.record)

        self.btn_play = QPushButton()
        self.btn_play.setIcon(qta.icon("fa5s.play", color="#55ff55"))
        self.btn_play.setIconSize(QSize(28, 28))
        self.btn_play.setStyleSheet(btn_style)
        self.btn_play.setToolTip("Play take with song")
        self.btn_play.clicked.connect(self.play)

        self.btn_stop = QPushButton()
        self.btn_stop.setIcon(qta.icon("fa5s.stop", color="#ff5555"))
        self.btn_stop.setIconSize(QSize(24, 24))
        self.btn_stop.setStyleSheet(btn_style)
        self.btn_stop.setToolTip("Stop")
        self.btn_stop.clicked.connect(self.stop)

        transport_layout.addWidget(self.time_label)
        transport_layout.addStretch()
        transport_layout.addWidget(self.btn_load)
        transport_layout.addWidget(self.btn_record)
        transport_layout.addWidget(self.btn_play)
        transport_layout.addWidget(self.btn_stop)
        transport_layout.addStretch()

        self.main_layout.addWidget(transport_widget)
        self.statusBar().showMessage("Load a song to begin")

    # --- Actions ---

    def load_song_dialog(self):
        logger.info("Opening load song dialog")
        file_path, _ = QFileDialog.getOpenFileName(self, "Load Song", "", UI_CONFIG.audio_file_filter)
        if not file_path:
            return

        result = self.session.load_track(file_path, waveform_width=self.waveform.width())
        if result.success:
            track = self.session.track
            self.waveform.set_data(self.session.columns, self.session.segments, track.duration_seconds)
            self.statusBar().showMessage(f"Loaded: {track.name}", UI_CONFIG.status_timeout_ms)
        else:
            self.report_error(result.error)

    def record(self):
        if self.session.state == SessionState.RECORDED_READY:
            result = self.session.record_new_take()
        else:
            result = self.session.start_recording()
        if result.error is not None:
            self.report_error(result.error)

    def play(self):
        result = self.session.start_playback()
        if result.error is not None:
            self.report_error(result.error)

    def stop(self):
        # Finalizing a take keeps the event loop running; block other actions meanwhile
        self.set_actions_enabled(False)
        self.statusBar().showMessage("Stopping...")
        try:
            result = self.session.stop()
        finally:
            self.on_state_changed(self.session.state)
        if result.error is not None:
            self.report_error(result.error)

    def report_error(self, error):
        if isinstance(error, DecodeError):
            title = "Could not load song"
        elif isinstance(error, CaptureError):
            title = "Camera unavailable"
        elif isinstance(error, RecordingError):
            title = "Recording failed"
        elif isinstance(error, PlaybackError):
            title = "Audio output unavailable"
        else:
            title = "Error"
        self.statusBar().showMessage(title, UI_CONFIG.status_timeout_ms)
        QMessageBox.warning(self, title, str(error))

    # --- Session callbacks ---

    def set_actions_enabled(self, enabled):
        for widget in (self.btn_load, self.open_action, self.btn_record, self.btn_play, self.btn_stop):
            widget.setEnabled(enabled)

    def on_state_changed(self, state):
        controls = self.session.controls
        self.btn_load.setEnabled(True)
        self.open_action.setEnabled(True)
        self.btn_record.setEnabled(controls.record)
        self.btn_play.setEnabled(controls.play)
        self.btn_stop.setEnabled(controls.stop)
        self.rec_indicator.setVisible(state == SessionState.RECORDING)
        self.statusBar().showMessage(f"State: {state.name.replace('_', ' ').title()}", 2000)

    def on_waveform_resized(self, width):
        columns = self.session.resize_waveform(width)
        if columns:
            self.waveform.set_columns(columns)

    def periodic_update(self):
        """Updates the playhead and time label."""
        track = self.session.track
        cur_sec = self.player.current_position()
        total_sec = track.duration_seconds if track is not None else 0.0

        self.waveform.set_playhead(cur_sec)

        fmt = lambda s: f"{int(s // 60):02d}:{int(s % 60):02d}"
        self.time_label.setText(f"{fmt(cur_sec)} / {fmt(total_sec)}")

    def closeEvent(self, event):
        self.timer.stop()
        self.session.shutdown()
        self.player.cleanup()
        super().closeEvent(event)
