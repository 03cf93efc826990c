# /mm2plex/_logging.py
# Console logger with colored level labels, module tags and an optional JSON-lines sink.
from __future__ import annotations
import sys, datetime, json, os, threading
from typing import Any, Optional, TextIO, Mapping, Dict

RESET = "\033[0m"
DIM = "\033[90m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[33m"
BLUE = "\033[94m"

LEVELS = {"silent": 60, "error": 40, "warn": 30, "info": 20, "debug": 10}


def _env_on(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in ("1", "true", "yes", "on")


def _color_default() -> bool:
    if os.getenv("NO_COLOR") is not None:
        return False
    mode = (os.getenv("MM2PLEX_LOG_COLOR") or "auto").strip().lower()
    if mode in ("0", "false", "no", "off"):
        return False
    return True


def colorize(text: str, color: str, *, on: bool = True) -> str:
    if not on or not color:
        return text
    return f"{color}{text}{RESET}"


class Logger:
    def __init__(
        self,
        stream: Optional[TextIO] = None,
        level: str = "info",
        use_color: Optional[bool] = None,
        show_time: bool = False,
        time_fmt: str = "%Y-%m-%d %H:%M:%S",
        *,
        _context: Optional[Dict[str, Any]] = None,
        _json_stream: Optional[TextIO] = None,
        _lock: Optional[threading.Lock] = None,
    ):
        self._stream = stream
        self.level_no = LEVELS.get(level, 20)
        self.use_color = _color_default() if use_color is None else use_color
        self.show_time = show_time
        self.time_fmt = time_fmt
        self.tag_color_map = {
            "DEBUG": DIM,
            "INFO": BLUE,
            "WARN": YELLOW,
            "ERROR": RED,
            "SUCCESS": GREEN,
        }
        self._context: Dict[str, Any] = dict(_context or {})
        self._json_stream = _json_stream
        self._lock = _lock or threading.Lock()

    # stdout is looked up per write so pytest's capsys sees the output
    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    # Configuration
    def set_level(self, level: str) -> None:
        self.level_no = LEVELS.get(level, self.level_no)

    def enable_color(self, on: bool = True) -> None:
        self.use_color = on

    def enable_time(self, on: bool = True) -> None:
        self.show_time = on

    def enable_json(self, file_path: str) -> None:
        self._json_stream = open(file_path, "a", encoding="utf-8")

    @property
    def level_name(self) -> str:
        for k, v in LEVELS.items():
            if v == self.level_no:
                return k
        return "info"

    @property
    def debug_enabled(self) -> bool:
        return self.level_no <= LEVELS["debug"] or _env_on("MM2PLEX_DEBUG")

    # Context
    def bind(self, **ctx: Any) -> "Logger":
        new_ctx = dict(self._context); new_ctx.update(ctx)
        child = Logger(
            stream=self._stream,
            level=self.level_name,
            use_color=self.use_color,
            show_time=self.show_time,
            time_fmt=self.time_fmt,
            _context=new_ctx,
            _json_stream=self._json_stream,
            _lock=self._lock,
        )
        child._parent = self  # type: ignore[attr-defined]
        return child

    def child(self, name: str) -> "Logger":
        return self.bind(module=name)

    def _root(self) -> "Logger":
        node = self
        while getattr(node, "_parent", None) is not None:
            node = node._parent  # type: ignore[attr-defined]
        return node

    # Formatting
    def _fmt_text(self, label: str, msg: str) -> str:
        mod = str(self._context.get("module") or "").strip()
        col = self.tag_color_map.get(label) if self.use_color else None
        lvl = colorize(label, col or "", on=bool(col))
        head = colorize(f"[{mod}]", DIM, on=self.use_color) if mod else ""
        line = " ".join(p for p in (head, lvl, msg) if p)
        if self.show_time:
            ts = datetime.datetime.now().strftime(self.time_fmt)
            return f"{colorize(f'[{ts}]', DIM, on=self.use_color)} {line}"
        return line

    def _emit(self, severity: str, label: str, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        # children follow the root's level and sinks, so set_level() on `log` reaches them
        root = self._root()
        if severity == "debug":
            if not root.debug_enabled:
                return
        elif root.level_no > LEVELS.get(severity, 20):
            return
        msg = " ".join(str(p) for p in parts)
        text = self._fmt_text(label, msg)
        with self._lock:
            self.stream.write(text + "\n")
            self.stream.flush()
            sink = root._json_stream or self._json_stream
            if sink:
                payload: Dict[str, Any] = {
                    "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds"),
                    "level": label,
                    "msg": msg,
                    "ctx": self._context,
                }
                if extra:
                    payload["extra"] = dict(extra)
                sink.write(json.dumps(payload, ensure_ascii=False) + "\n")
                sink.flush()

    # Public API
    def debug(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("debug", "DEBUG", *parts, extra=extra)

    def info(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("info", "INFO", *parts, extra=extra)

    def warn(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("warn", "WARN", *parts, extra=extra)

    def warning(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self.warn(*parts, extra=extra)

    def error(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("error", "ERROR", *parts, extra=extra)

    def success(self, *parts: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("info", "SUCCESS", *parts, extra=extra)


# default instance
log = Logger()

__all__ = ["Logger", "log", "colorize", "LEVELS", "RESET", "DIM", "RED", "GREEN", "YELLOW", "BLUE"]
