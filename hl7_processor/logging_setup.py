import hashlib
import json
import logging
import re
import sys
import time
from typing import Any, Dict, Optional

from .config import get_settings
from .core.correlation import get_correlation_id


def _hash(value: str) -> str:
    return hashlib.md5(value.encode()).hexdigest()[:8]


class JsonFormatter(logging.Formatter):
    """JSON formatter that keeps patient demographics out of the log stream."""

    # Keys of extra fields whose values are always masked
    SENSITIVE_KEYS = ("patient", "mrn", "ssn", "dob", "birth")

    def __init__(self):
        super().__init__()
        # PID segment bodies, up to the next segment separator or line break
        self.segment_pattern = re.compile(r"(?<![A-Z0-9])PID\|([^\r\n]*)")
        self.identifier_patterns = [
            (re.compile(r'(?i)\b(?:patient[_-]?id|patientid|pt[_-]?id|mrn)\s*[=:]\s*["\']?([^"\s,}]+)'), "patient_id"),
            (re.compile(r"\b\d{9}\b"), "national_id"),
        ]

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": self._redact_text(record.getMessage()),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            payload["correlation_id"] = correlation_id

        for key, value in getattr(record, "extra", {}).items():
            payload[key] = self._redact_value(key, value)

        if record.exc_info:
            payload["exc_info"] = self._redact_text(self.formatException(record.exc_info))

        return json.dumps(payload, ensure_ascii=False)

    def _redact_text(self, text: str) -> str:
        if not isinstance(text, str):
            return text

        redacted = self.segment_pattern.sub(
            lambda m: f"PID|[REDACTED_PID_{_hash(m.group(1))}]", text
        )
        for pattern, field_type in self.identifier_patterns:
            for match in pattern.findall(redacted):
                if match:
                    redacted = redacted.replace(match, f"[REDACTED_{field_type.upper()}_{_hash(match)}]")
        return redacted

    def _redact_value(self, key: str, value: Any) -> Any:
        if any(sensitive in key.lower() for sensitive in self.SENSITIVE_KEYS):
            if isinstance(value, str) and value:
                return f"[REDACTED_{_hash(value)}]"
            return "[REDACTED]"
        if isinstance(value, str):
            return self._redact_text(value)
        if isinstance(value, dict):
            return {k: self._redact_value(k, v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._redact_value(key, item) for item in value]
        return value


def setup_logging(level: Optional[str] = None) -> None:
    level = level or get_settings().LOG_LEVEL
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
