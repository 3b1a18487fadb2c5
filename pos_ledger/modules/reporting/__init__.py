from .share import WINDOW_LABELS, build_report_text

__all__ = ["WINDOW_LABELS", "build_report_text"]
