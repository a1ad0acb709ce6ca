from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import Qt, QPointF, pyqtSignal
from PyQt6.QtGui import QPainter, QColor, QPen, QPalette, QPolygonF

from src.core.config import WAVEFORM_CONFIG
from src.core.waveform import waveform_polyline

SEGMENT_STRIP_HEIGHT = 24

class WaveformWidget(QWidget):
    """
    Song waveform with the bar strip underneath.
    Acts as the session's highlight sink.
    """
    widthChanged = pyqtSignal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.columns = []
        self.segments = []
        self.duration = 0.0
        self.active_index = None
        self.playhead_seconds = 0.0
        self.setFixedHeight(WAVEFORM_CONFIG.height + SEGMENT_STRIP_HEIGHT)
        self.setMinimumWidth(200)
        self.setAutoFillBackground(True)
        self.setBackgroundRole(QPalette.ColorRole.Base)

        self.color = QColor(*WAVEFORM_CONFIG.stroke_color)
        self.highlight_color = QColor(*WAVEFORM_CONFIG.highlight_color)
        self.border_color = QColor(*WAVEFORM_CONFIG.segment_border_color)
        self.playhead_color = QColor(255, 50, 50) # Red playhead

    def set_data(self, columns, segments, duration):
        """Sets the waveform columns and the bar layout to display."""
        self.columns = columns
        self.segments = segments
        self.duration = duration
        self.active_index = None
        self.playhead_seconds = 0.0
        self.update()

    def set_columns(self, columns):
        self.columns = columns
        self.update()

    def set_playhead(self, seconds):
        if self.playhead_seconds != seconds:
            self.playhead_seconds = seconds
            self.update()

    def on_segment_changed(self, index):
        self.active_index = index
        self.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if event.size().width() != event.oldSize().width():
            self.widthChanged.emit(event.size().width())

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(20, 20, 20))

        if not self.columns:
            painter.setPen(QColor(100, 100, 100))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No Song Loaded")
            return

        width = self.rect().width()
        height = WAVEFORM_CONFIG.height

        self._draw_segments(painter, width, height)

        poly = QPolygonF([QPointF(x, y) for x, y in waveform_polyline(self.columns, height)])
        painter.setPen(QPen(self.color, WAVEFORM_CONFIG.line_width))
        painter.drawPolyline(poly)

        self._draw_playhead(painter, width, height)

    def _segment_x(self, seconds, width):
        return int((seconds / self.duration) * width) if self.duration > 0 else 0

    def _draw_segments(self, painter, width, height):
        strip_top = height
        for seg in self.segments:
            x0 = self._segment_x(seg.start, width)
            x1 = self._segment_x(seg.end, width)
            if seg.index == self.active_index:
                painter.fillRect(x0, 0, x1 - x0, height + SEGMENT_STRIP_HEIGHT, self.highlight_color)
            painter.setPen(QPen(self.border_color, 1))
            painter.drawRect(x0, strip_top, x1 - x0 - 1, SEGMENT_STRIP_HEIGHT - 1)
            painter.drawText(x0, strip_top, x1 - x0, SEGMENT_STRIP_HEIGHT,
                             Qt.AlignmentFlag.AlignCenter, str(seg.index + 1))

    def _draw_playhead(self, painter, width, height):
        if self.duration <= 0:
            return
        ph_x = self._segment_x(self.playhead_seconds, width)
        painter.setPen(QPen(self.playhead_color, 1))
        painter.drawLine(ph_x, 0, ph_x, height)
