from .analysis import summarize_marks
from .export import export_csv, export_filename, format_csv
from .render import (
    render_session_image,
    save_session_trajectory_jpeg,
    set_session_image_callback,
)
from .telemetry import CSV_HEADER, LogEntry, SessionLog, TrajectoryRecorder
from .visual_angle import calculate_visual_angle, format_eccentricity

__all__ = [
    "CSV_HEADER",
    "LogEntry",
    "SessionLog",
    "TrajectoryRecorder",
    "calculate_visual_angle",
    "export_csv",
    "export_filename",
    "format_csv",
    "format_eccentricity",
    "render_session_image",
    "save_session_trajectory_jpeg",
    "set_session_image_callback",
    "summarize_marks",
]
